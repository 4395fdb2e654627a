from challenge_migrator.cli import cli

cli()
