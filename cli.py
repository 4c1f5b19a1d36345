import random
from pathlib import Path

import click

from data.fetch import find_fixture, is_url
from data.generator import FIXTURE_FILE, ROWS, generate_claims, write_fixture
from reports.pdf import generate_view_pdf
from reports.terminal import render_table
from table.state import PAGE_SIZE_OPTIONS, SortKey
from table.view import TableView
from views.claims import (
    CLAIMS_LOADING_LABEL,
    STATUS_OPTIONS,
    make_claims_view,
    set_status_filter,
)

PAGE_SIZE_CHOICE = click.Choice([str(n) for n in PAGE_SIZE_OPTIONS])

BROWSE_HELP = """Commands:
  search TEXT    filter by patient name (empty clears)
  status VALUE   filter by status: RESUBMITTED, PENDING, REJECTED, CALL (empty clears)
  sort COLUMN    toggle sort on a column: asc -> desc -> off
  size N         rows per page (10, 25, 50)
  first | prev | next | last
  clear          reset search and status filters
  help | quit"""


@click.group()
def cli():
    """Claims table: generate the claims fixture and browse it as a table."""
    pass


@cli.command()
@click.option("--rows", default=ROWS, type=int, help="Number of claims to generate")
@click.option("--output", default=None, type=click.Path(dir_okay=False, path_type=Path),
              help=f"Destination file (default: {FIXTURE_FILE})")
@click.option("--seed", default=None, type=int,
              help="Seed for a reproducible dataset (unseeded by default)")
def generate(rows: int, output: Path | None, seed: int | None):
    """Generate a fresh randomized claims fixture, replacing the old one."""
    if rows < 0:
        raise click.BadParameter("must be >= 0", param_hint="--rows")
    rng = random.Random(seed) if seed is not None else None
    claims = generate_claims(rows, rng=rng)
    path = write_fixture(claims, output)
    click.echo(f"Generated {len(claims)} rows -> {path}")


def _resolve_source(source: str | None) -> str | Path:
    if source is None:
        return find_fixture()
    if is_url(source):
        return source
    return find_fixture(Path(source))


def _parse_sort(value: str) -> SortKey:
    column, _, direction = value.partition(":")
    if direction not in ("", "asc", "desc"):
        raise click.BadParameter(f"direction must be asc or desc, got {direction!r}", param_hint="--sort")
    return SortKey(column, descending=direction == "desc")


def _open_view(source: str | None, search: str, status: str, sort: tuple[str, ...],
               page_size: str) -> TableView:
    view = make_claims_view(_resolve_source(source), page_size=int(page_size)).load()
    view.set_global_filter(search)
    set_status_filter(view, status)
    if sort:
        keys = [_parse_sort(s) for s in sort]
        for key in keys:
            column = next((c for c in view.columns if c.key == key.column), None)
            if column is None or not column.sortable:
                sortable = ", ".join(c.key for c in view.columns if c.sortable)
                raise click.BadParameter(f"{key.column!r} is not sortable; choose from {sortable}",
                                         param_hint="--sort")
        view.set_sorting(keys)
    return view


def view_options(f):
    f = click.option("--page-size", default=str(PAGE_SIZE_OPTIONS[0]), type=PAGE_SIZE_CHOICE,
                     help="Rows per page")(f)
    f = click.option("--sort", multiple=True,
                     help="Sort column, optionally COLUMN:desc (repeat for multi-column)")(f)
    f = click.option("--status", default="", type=click.Choice(STATUS_OPTIONS),
                     help="Show only claims with this status")(f)
    f = click.option("--search", default="", help="Patient name contains (case-insensitive)")(f)
    f = click.option("--source", default=None,
                     help="Fixture path or http(s) URL (default: public/claims.json)")(f)
    return f


@cli.command()
@view_options
@click.option("--page", default=1, type=int, help="Page number (clamped to the last page)")
@click.option("--no-color", is_flag=True, help="Disable colored badges")
def show(source, search, status, sort, page_size, page: int, no_color: bool):
    """Print one page of the claims table."""
    view = _open_view(source, search, status, sort, page_size)
    view.set_page_index(page - 1)
    click.echo(render_table(view, color=not no_color,
                            loading_label=CLAIMS_LOADING_LABEL))


@cli.command()
@view_options
def report(source, search, status, sort, page_size):
    """Export the filtered, sorted claims (all pages) to a PDF."""
    view = _open_view(source, search, status, sort, page_size)
    pdf_path = generate_view_pdf(view)
    click.echo(f"\nReport generated: {pdf_path}")


@cli.command()
@click.option("--source", default=None,
              help="Fixture path or http(s) URL (default: public/claims.json)")
@click.option("--page-size", default=str(PAGE_SIZE_OPTIONS[0]), type=PAGE_SIZE_CHOICE,
              help="Initial rows per page")
def browse(source: str | None, page_size: str):
    """Browse the claims table interactively."""
    view = make_claims_view(_resolve_source(source), page_size=int(page_size))
    click.echo(CLAIMS_LOADING_LABEL)
    view.load()
    if view.load_failed:
        click.echo("Could not load claims; showing an empty table.", err=True)

    click.echo(BROWSE_HELP)
    try:
        while True:
            click.echo()
            click.echo(render_table(view, loading_label=CLAIMS_LOADING_LABEL))
            line = click.prompt(">", default="", show_default=False)
            verb, _, arg = line.strip().partition(" ")
            verb = verb.lower()
            if verb in ("quit", "q", "exit"):
                break
            try:
                _dispatch(view, verb, arg.strip())
            except ValueError as exc:
                click.echo(f"Error: {exc}", err=True)
    finally:
        view.unmount()


def _dispatch(view: TableView, verb: str, arg: str):
    if verb == "search":
        view.set_global_filter(arg)
    elif verb == "status":
        set_status_filter(view, arg.upper())
    elif verb == "sort":
        view.toggle_sort(arg)
    elif verb == "size":
        if not arg.isdigit():
            raise ValueError(f"Page size must be a number, got {arg!r}")
        view.set_page_size(int(arg))
    elif verb == "first":
        view.first_page()
    elif verb == "prev":
        view.previous_page()
    elif verb == "next":
        view.next_page()
    elif verb == "last":
        view.last_page()
    elif verb == "clear":
        view.clear_filters()
    elif verb in ("help", ""):
        click.echo(BROWSE_HELP)
    else:
        raise ValueError(f"Unknown command {verb!r}; type 'help' for the list")


if __name__ == "__main__":
    cli()
