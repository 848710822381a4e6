# cli/main.py
import click
from .commands.sync import sync
from .commands.db import db

@click.group()
def cli():
    """Goodreads shelf cache CLI"""
    pass

cli.add_command(sync)
cli.add_command(db)

def main():
    """Entry point for the CLI"""
    cli()

if __name__ == '__main__':
    main()
