# cli/commands/sync.py
import click
import time
from bookshelf.config import DEFAULT_SHELVES, ConfigurationError, Settings
from bookshelf.goodreads.client import GoodreadsClient, GoodreadsError
from bookshelf.store import LocalStore
from bookshelf.sync import ShelfSync
from ..utils import setup_logging, print_sync_result, print_shelf_check, print_shelf_counts

def load_settings() -> Settings:
    """Settings with credentials checked; exits 1 before touching network or storage"""
    settings = Settings.from_env()
    try:
        settings.require_credentials()
    except ConfigurationError as e:
        click.echo(click.style(str(e), fg='red'), err=True)
        raise click.exceptions.Exit(1)
    return settings

def build_sync(settings: Settings, store: LocalStore) -> ShelfSync:
    client = GoodreadsClient(settings)
    return ShelfSync(store, client, max_pages=settings.max_pages, page_size=settings.page_size)

@click.group()
def sync():
    """Sync Goodreads shelves into the local database"""
    pass

@sync.command()
@click.argument('shelf_name')
@click.option('--verbose', '-v', is_flag=True, help='Show detailed progress')
def shelf(shelf_name: str, verbose: bool):
    """Sync one shelf, removing books no longer on it

    Example:
        bookshelf sync shelf read
        bookshelf sync shelf currently-reading --verbose
    """
    setup_logging(verbose)
    settings = load_settings()
    start = time.monotonic()

    with LocalStore(settings.database_url) as store:
        result = build_sync(settings, store).sync_shelf(shelf_name)
        print_sync_result(result, verbose)

    click.echo(click.style(f"\nDuration: {round(time.monotonic() - start)} seconds", fg='blue'))

@sync.command(name='all')
@click.option('--verbose', '-v', is_flag=True, help='Show detailed progress')
def sync_all(verbose: bool):
    """Sync the currently-reading, read and to-read shelves"""
    setup_logging(verbose)
    settings = load_settings()
    start = time.monotonic()

    with LocalStore(settings.database_url) as store:
        results = build_sync(settings, store).sync_shelves(DEFAULT_SHELVES)
        for result in results:
            print_sync_result(result, verbose)
        click.echo(click.style("\nBooks synced: ", fg='blue') +
                   click.style(str(sum(r.synced for r in results)), fg='green'))
        print_shelf_counts(store.count_books(), store.shelf_counts(), DEFAULT_SHELVES)

    click.echo(click.style(f"\nDuration: {round(time.monotonic() - start)} seconds", fg='blue'))

@sync.command()
@click.argument('shelf_name')
@click.option('--verbose', '-v', is_flag=True, help='Show detailed progress')
def check(shelf_name: str, verbose: bool):
    """Compare database and Goodreads counts, syncing the shelf if they differ"""
    setup_logging(verbose)
    settings = load_settings()
    click.echo(click.style(f"Checking sync status for \"{shelf_name}\" shelf...", fg='blue'))

    with LocalStore(settings.database_url) as store:
        try:
            result = build_sync(settings, store).check_shelf(shelf_name)
        except GoodreadsError as e:
            click.echo(click.style(f"Error checking shelf sync: {e}", fg='red'), err=True)
            raise click.exceptions.Exit(1)
        print_shelf_check(result)
        if result.result is not None:
            print_sync_result(result.result, verbose)
