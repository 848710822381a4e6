# cli/commands/db.py
import click
from bookshelf.config import DEFAULT_SHELVES, Settings
from bookshelf.store import LocalStore
from ..utils import setup_logging, print_shelf_counts

@click.group()
def db():
    """Local database commands"""
    pass

@db.command()
def init():
    """Create the database schema"""
    settings = Settings.from_env()
    with LocalStore(settings.database_url, create=True) as store:
        if not store.available:
            click.echo(click.style("Could not initialise database", fg='red'), err=True)
            raise click.exceptions.Exit(1)
    click.echo(click.style("Database ready: ", fg='green') + click.style(settings.database_url, fg='cyan'))

@db.command(name='clean-ratings')
def clean_ratings():
    """Store zero ratings as unrated (NULL)"""
    setup_logging()
    settings = Settings.from_env()
    with LocalStore(settings.database_url, create=False) as store:
        updated = store.clear_zero_ratings()
    click.echo(f"Updated {updated} rows with zero ratings to NULL")

@db.command()
def stats():
    """Show book counts per shelf"""
    setup_logging()
    settings = Settings.from_env()
    with LocalStore(settings.database_url, create=False) as store:
        counts = store.shelf_counts()
        shelves = list(DEFAULT_SHELVES) + sorted(set(counts) - set(DEFAULT_SHELVES))
        print_shelf_counts(store.count_books(), counts, shelves)
