"""
Query and toggle marker-based folds of a note from the command line.
Fold state is kept in a JSON index so it survives between invocations.
"""

from __future__ import annotations

import functools
import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

import click

from .config import MarkerConfig, build_config
from .constants import DEFAULT_INDEX_FILENAME
from .editing import remove_markers
from .filesystem import (
    NoteFile,
    document_key,
    get_max_file_size,
    read_note,
    resolve_note,
    rewrite_note,
)
from .models import FoldRange
from .persistence import FoldIndexStore
from .query import all_foldable_ranges, enclosing_range_at, range_starting_at
from .session import FoldSession

__all__ = ["cli"]


@dataclass
class Document:
    """A note loaded for a CLI command."""

    note: NoteFile
    key: str
    config: MarkerConfig
    store: FoldIndexStore

    @property
    def text(self) -> str:
        return self.note.text


def _echo_ranges(ranges: Iterable[FoldRange]) -> None:
    click.echo(json.dumps([fold_range.to_dict() for fold_range in ranges]))


def _echo_range(fold_range: FoldRange | None) -> None:
    click.echo(json.dumps(fold_range.to_dict() if fold_range is not None else None))


def document_options(command):
    """Attach the file argument and marker/index options shared by every command."""

    @click.option("--start-marker", help="Region start marker (regular expression)")
    @click.option("--end-marker", help="Region end marker (regular expression)")
    @click.option("--line-fold-marker", help="Line fold start marker (regular expression)")
    @click.option("--line-fold-end-marker", help="Line fold end marker (regular expression)")
    @click.option(
        "--index",
        "index_path",
        type=click.Path(dir_okay=False),
        help=f"Fold index file (default: ./{DEFAULT_INDEX_FILENAME})",
    )
    @click.argument("filepath", type=click.Path(exists=True, dir_okay=False))
    @functools.wraps(command)
    def wrapper(
        filepath: str,
        index_path: str | None,
        start_marker: str | None,
        end_marker: str | None,
        line_fold_marker: str | None,
        line_fold_end_marker: str | None,
        **kwargs,
    ):
        document = load_document(
            filepath,
            index_path,
            start_marker=start_marker,
            end_marker=end_marker,
            line_fold_marker=line_fold_marker,
            line_fold_end_marker=line_fold_end_marker,
        )
        return command(document, **kwargs)

    return wrapper


def load_document(filepath: str, index_path: str | None, **overrides: str | None) -> Document:
    """Resolve, configure and read the note named on the command line.

    Raises:
        click.BadParameter: If the path or the configuration is invalid.
        click.ClickException: If the note cannot be read safely.
    """
    base_dir = Path.cwd().resolve()
    try:
        path = resolve_note(filepath, base_dir)
        config = build_config(path.parent, **overrides)
    except ValueError as error:
        raise click.BadParameter(str(error)) from error

    try:
        note = read_note(path, get_max_file_size())
    except UnicodeDecodeError as error:
        raise click.ClickException(f"Invalid UTF-8 sequence in {path}: {error}") from error
    except (IOError, ValueError) as error:
        raise click.ClickException(str(error)) from error

    index = Path(index_path) if index_path else base_dir / DEFAULT_INDEX_FILENAME
    return Document(
        note=note,
        key=document_key(path, base_dir),
        config=config,
        store=FoldIndexStore(index),
    )


def _open_session(document: Document) -> FoldSession:
    session = FoldSession(document.key, document.config, document.store)
    session.open(document.text, auto_fold=False)
    return session


@click.group()
@click.version_option(package_name="fold-anywhere")
@click.option("-v", "--verbose", is_flag=True, help="Log scanning and matching details")
def cli(verbose: bool):
    """
    Fold marker-delimited regions of a note.

    Regions open with a start marker (default ``%% REGION %%``) and close with
    an end marker (default ``%% ENDREGION %%``). A line ending with
    ``%% LINEFOLDSTART %%`` folds everything up to the next line ending with
    ``%% LINEFOLDEND %%``.

    Examples:
        fold-anywhere ranges notes/today.md
        fold-anywhere fold notes/today.md --offset 120
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@document_options
def ranges(document: Document):
    """Print every foldable range as JSON."""
    _echo_ranges(all_foldable_ranges(document.text, document.config))


@cli.command()
@click.option("--offset", type=click.IntRange(min=0), required=True, help="Cursor offset")
@click.option(
    "--starting",
    is_flag=True,
    help="Only match the region whose start marker is under the cursor",
)
@document_options
def at(document: Document, offset: int, starting: bool):
    """Print the range at a cursor offset as JSON (null when none)."""
    query = range_starting_at if starting else enclosing_range_at
    _echo_range(query(document.text, document.config, offset))


@cli.command()
@click.option("--offset", type=click.IntRange(min=0), required=True, help="Cursor offset")
@document_options
def fold(document: Document, offset: int):
    """Fold the innermost region around a cursor offset."""
    session = _open_session(document)
    _echo_range(session.tracker.fold_at(document.text, offset))


@cli.command()
@click.option("--offset", type=click.IntRange(min=0), required=True, help="Cursor offset")
@document_options
def unfold(document: Document, offset: int):
    """Unfold the innermost region around a cursor offset."""
    session = _open_session(document)
    _echo_range(session.tracker.unfold_at(document.text, offset))


@cli.command()
@click.option("--offset", type=click.IntRange(min=0), required=True, help="Cursor offset")
@document_options
def toggle(document: Document, offset: int):
    """Toggle the region whose start marker is under the cursor."""
    session = _open_session(document)
    _echo_range(session.tracker.toggle_at(document.text, offset))


@cli.command("fold-all")
@document_options
def fold_all(document: Document):
    """Fold every foldable range."""
    session = _open_session(document)
    session.tracker.fold_all(document.text)
    _echo_ranges(session.active)


@cli.command("unfold-all")
@document_options
def unfold_all(document: Document):
    """Unfold every range."""
    session = _open_session(document)
    session.tracker.unfold_all()
    _echo_ranges(session.active)


@cli.command()
@document_options
def status(document: Document):
    """Print the stored folds that are still valid."""
    _echo_ranges(_open_session(document).active)


@cli.command()
@document_options
def strip(document: Document):
    """Remove every region marker from the note in place."""
    stripped = remove_markers(document.text, document.config)
    if stripped == document.text:
        return

    try:
        rewrite_note(document.note, stripped, warn=lambda message: click.echo(message, err=True))
        document.store.forget(document.key)
    except IOError as error:
        raise click.ClickException(str(error)) from error


if __name__ == "__main__":
    cli()
