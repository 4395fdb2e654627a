"""Resumable batch retry of failed challenge and resource migrations."""

__version__ = "0.1.0"
