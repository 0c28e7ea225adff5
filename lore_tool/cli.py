"""
Command-line interface for TrackLore.

Runs provenance lookups by hand, simulates a fingerprint match, and shows
or clears the match history, using the Click framework.
"""

import logging

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from enrichment.factory import build_enrichment_service, describe_sources
from enrichment.service import display_source
from history import open_history
from recognition import MatchPipeline, Matched
from shared.config import AppConfig
from shared.errors import PersistenceError
from shared.models import EnrichmentQuery

console = Console()

POLICY_CHOICES = ['sequential', 'single', 'race']
SOURCE_CHOICES = sorted(describe_sources())


@click.group()
@click.version_option(version="1.0.0")
@click.option('--verbose', '-v', is_flag=True, help='Show debug logging')
@click.pass_context
def cli(ctx, verbose):
    """
    🎵 TrackLore

    Find out where a song is used: anime openings, movie and TV themes.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = AppConfig.from_env()


def _service(config, policy, sources):
    try:
        return build_enrichment_service(config, policy=policy, names=list(sources) or None)
    except ValueError as e:
        raise click.UsageError(str(e))


def _open_history(config):
    try:
        return open_history(config)
    except (PersistenceError, ValueError) as e:
        console.print(f"[red]❌ Could not open history: {e}[/red]")
        raise SystemExit(1)


@cli.command()
@click.argument('title')
@click.argument('artist', required=False, default="")
@click.option('--policy', type=click.Choice(POLICY_CHOICES), help='How sources are consulted')
@click.option('--source', 'sources', multiple=True, type=click.Choice(SOURCE_CHOICES),
              help='Source to consult (repeat for several, in priority order)')
@click.pass_obj
def lookup(config, title, artist, policy, sources):
    """Look up the provenance of TITLE (by ARTIST)."""
    query = EnrichmentQuery.create(title, artist)
    if query.is_empty:
        raise click.UsageError("TITLE must not be empty")

    with _service(config, policy, sources) as service:
        names = ", ".join(s.name for s in service.sources)
        with console.status(f"Searching {names}..."):
            provenance = service.enrich(query)

    if provenance:
        console.print(f"[green]✓[/green] {provenance}")
    else:
        console.print(f"[yellow]No source identified this song.[/yellow] Showing: {display_source(None)}")


@cli.command()
@click.argument('title')
@click.argument('artist', required=False, default="")
@click.option('--artwork', help='Artwork URL reported by the match')
@click.option('--link', help='Purchase/store URL reported by the match')
@click.option('--policy', type=click.Choice(POLICY_CHOICES), help='How sources are consulted')
@click.pass_obj
def match(config, title, artist, artwork, link, policy):
    """Record a match for TITLE (by ARTIST) as if the fingerprinter found it."""
    with _service(config, policy, ()) as service, _open_history(config) as history:
        with MatchPipeline(service, history) as pipeline:
            with console.status("Identifying media source..."):
                report = pipeline.handle(Matched(title, artist, artwork_url=artwork, purchase_url=link))

    result = report.result
    console.print(Panel.fit(
        f"[bold cyan]{result.title}[/bold cyan]\n"
        f"{result.artist}\n\n"
        f"Source: [green]{result.source}[/green]",
        border_style="cyan"
    ))
    if report.status:
        console.print(f"[yellow]{report.status}[/yellow]")


@cli.command()
@click.option('--clear', is_flag=True, help='Delete all saved matches')
@click.pass_obj
def history(config, clear):
    """Show recent matches, newest first."""
    with _open_history(config) as store:
        if clear:
            if not click.confirm("Clear match history?", default=False):
                return
            try:
                store.clear()
            except PersistenceError as e:
                console.print(f"[red]❌ Could not clear history: {e}[/red]")
                raise SystemExit(1)
            console.print("[green]✓[/green] History cleared")
            return
        results = store.load()

    if not results:
        console.print("[yellow]No matches yet.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("#", style="cyan", width=4)
    table.add_column("Title", style="green")
    table.add_column("Artist")
    table.add_column("Source", style="yellow")
    table.add_column("Matched at")
    for i, result in enumerate(results, start=1):
        table.add_row(str(i), result.title, result.artist, result.source, result.matched_at[:19])
    console.print(table)


@cli.command()
def sources():
    """List supported metadata sources."""
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    for name, description in describe_sources().items():
        table.add_row(name, description)
    console.print(table)
