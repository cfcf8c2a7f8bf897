"""Fold index persistence.

The index is a JSON object mapping document keys to folded ranges::

    {"notes/today.md": [{"from": 12, "to": 80}]}
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from pathlib import Path

from .exceptions import PersistenceError
from .filesystem import write_text_atomic
from .models import FoldRange

logger = logging.getLogger(__name__)


def parse_index(text: str) -> dict[str, list[FoldRange]]:
    """Parse a serialized fold index.

    Malformed entries inside a document's list are skipped; a blob that is
    not a JSON object of lists is rejected as a whole.

    Args:
        text: JSON text of the index.

    Returns:
        dict[str, list[FoldRange]]: Ranges keyed by document.

    Raises:
        PersistenceError: If the text is not valid JSON or has the wrong shape.

    Examples:
        parse_index('{"a.md": [{"from": 0, "to": 5}]}')
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as error:
        raise PersistenceError(f"Fold index is not valid JSON: {error}") from error

    if not isinstance(data, dict):
        raise PersistenceError("Fold index must be a JSON object")

    index: dict[str, list[FoldRange]] = {}
    for key, entries in data.items():
        if not isinstance(entries, list):
            raise PersistenceError(f"Folds for {key!r} must be a list")
        ranges = []
        for entry in entries:
            try:
                fold_range = FoldRange.from_dict(entry)
            except ValueError as error:
                logger.warning("Skipping stored fold for %s: %s", key, error)
                continue
            if fold_range not in ranges:
                ranges.append(fold_range)
        index[key] = ranges
    return index


def dump_index(index: dict[str, list[FoldRange]]) -> str:
    """Serialize a fold index to JSON text."""
    data = {
        key: [fold_range.to_dict() for fold_range in ranges]
        for key, ranges in sorted(index.items())
        if ranges
    }
    return json.dumps(data, indent=2) + "\n"


class FoldIndexStore:
    """File-backed store of folded ranges, keyed by document identity.

    Reads never fail: a missing or corrupt file behaves as an empty index.
    Writes replace the file atomically.

    Args:
        path: Location of the JSON index file.

    Examples:
        store = FoldIndexStore(Path(".fold-anywhere.json"))
        store.save("notes/today.md", [FoldRange(0, 40)])
        store.load("notes/today.md")
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read(self) -> dict[str, list[FoldRange]]:
        if not self.path.exists():
            return {}
        try:
            return parse_index(self.path.read_text(encoding="UTF-8"))
        except (OSError, UnicodeDecodeError) as error:
            logger.warning("Ignoring unreadable fold index %s: %s", self.path, error)
            return {}

    def _write(self, index: dict[str, list[FoldRange]]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            write_text_atomic(self.path, dump_index(index))
        except OSError as error:
            raise PersistenceError(f"Could not write fold index {self.path}: {error}") from error

    def keys(self) -> list[str]:
        return sorted(self._read())

    def load(self, document_key: str) -> list[FoldRange]:
        """Return the stored folds of a document, or an empty list."""
        return self._read().get(document_key, [])

    def save(self, document_key: str, ranges: Iterable[FoldRange]) -> None:
        """Store the folds of a document, replacing any previous entry.

        Raises:
            PersistenceError: If the index file cannot be written.
        """
        index = self._read()
        ranges = list(dict.fromkeys(ranges))
        if ranges:
            index[document_key] = ranges
        else:
            index.pop(document_key, None)
        self._write(index)

    def forget(self, document_key: str) -> None:
        """Remove a document from the index."""
        index = self._read()
        if index.pop(document_key, None) is not None:
            self._write(index)
