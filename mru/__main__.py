from mru.cli import cli

cli()
