import click
import logging
from typing import Dict, Iterable, Optional
from bookshelf.sync import SyncResult, ShelfCheck

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

def setup_logging(verbose: bool = False) -> None:
    """Send bookshelf logs to stderr; DEBUG when verbose"""
    logger = logging.getLogger('bookshelf')
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)

def print_sync_result(result: SyncResult, verbose: bool = False) -> None:
    """Print the results of one shelf sync"""
    color = 'red' if result.aborted else 'green'
    click.echo(click.style(f"\n{result.shelf}: ", fg='blue') +
               click.style(f"synced {result.synced}", fg=color) +
               click.style(f" of {result.fetched} fetched", fg='blue'))
    if result.skipped:
        click.echo(click.style(f"  Skipped: {result.skipped}", fg='yellow'))
    if result.orphans_removed:
        click.echo(click.style(f"  Removed from shelf: {result.orphans_removed}", fg='yellow'))
    if verbose:
        click.echo(click.style(f"  Pages: {result.pages}", fg='cyan'))
        click.echo(click.style(f"  Moved from other shelves: {result.moved}", fg='cyan'))
    if result.hit_page_limit:
        click.echo(click.style("  Reached page limit, orphan removal skipped", fg='yellow'))
    if result.aborted:
        click.echo(click.style(f"  Stopped early: {result.error}", fg='red'))

def print_shelf_check(check: ShelfCheck) -> None:
    source = '?' if check.source_count is None else str(check.source_count)
    click.echo(click.style("\nCount Comparison:", fg='blue'))
    click.echo(click.style("  Database: ", fg='blue') + click.style(f"{check.store_count} books", fg='cyan'))
    click.echo(click.style("  Goodreads: ", fg='blue') + click.style(f"{source} books", fg='cyan'))
    if check.result is None:
        click.echo(click.style(f"\nShelf \"{check.shelf}\" is already in sync!", fg='green'))
        return
    click.echo(click.style("Final database count: ", fg='blue') + click.style(str(check.final_count), fg='cyan'))
    if check.in_sync:
        click.echo(click.style(f"Shelf \"{check.shelf}\" is now in sync!", fg='green'))
    else:
        click.echo(click.style("Still some differences - may need manual review", fg='yellow'))

def print_shelf_counts(total_books: int, counts: Dict[str, int],
                       shelves: Optional[Iterable[str]] = None) -> None:
    click.echo(click.style("\nCurrent Database:", fg='blue'))
    click.echo(click.style("  Total books: ", fg='blue') + click.style(str(total_books), fg='cyan'))
    names = list(shelves) if shelves is not None else sorted(counts)
    for shelf in names:
        click.echo(click.style(f"  {shelf}: ", fg='blue') + click.style(str(counts.get(shelf, 0)), fg='cyan'))
