"""Marker scanning utilities."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from .config import MarkerConfig, compile_pattern, normalize_config
from .constants import LINE_END_SUFFIX
from .models import Line, LineFoldMarker, MarkerKind, MarkerOccurrence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompiledMarkers:
    """Compiled marker patterns for one configuration.

    Attributes:
        start: Nested-region start pattern.
        end: Nested-region end pattern.
        line_fold_start: Line-fold start pattern, anchored to the line end.
        line_fold_end: Line-fold end pattern, anchored to the line end.
    """

    start: re.Pattern[str]
    end: re.Pattern[str]
    line_fold_start: re.Pattern[str]
    line_fold_end: re.Pattern[str]


def compile_markers(config: MarkerConfig) -> CompiledMarkers:
    """Compile every marker pattern of a configuration.

    Args:
        config: Marker configuration.

    Returns:
        CompiledMarkers: Patterns ready for scanning.

    Raises:
        MarkerPatternError: If any marker is empty or fails to compile.

    Examples:
        markers = compile_markers(MarkerConfig())
    """
    config = normalize_config(config)
    return CompiledMarkers(
        start=compile_pattern("start_marker", config.start_marker),
        end=compile_pattern("end_marker", config.end_marker),
        line_fold_start=compile_pattern(
            "line_fold_marker", config.line_fold_marker, LINE_END_SUFFIX
        ),
        line_fold_end=compile_pattern(
            "line_fold_end_marker", config.line_fold_end_marker, LINE_END_SUFFIX
        ),
    )


def split_lines(document: str) -> list[Line]:
    """Split a document into lines carrying absolute offsets.

    Lines are separated by ``"\\n"``. A ``"\\r"`` preceding the separator is
    not part of the line text.

    Args:
        document: Full document text.

    Returns:
        list[Line]: One entry per line; an empty document has one empty line.

    Examples:
        split_lines("a\\nbc")  # [Line(1, 0, 1, "a"), Line(2, 2, 4, "bc")]
    """
    lines = []
    offset = 0
    for number, raw in enumerate(document.split("\n"), start=1):
        text = raw[:-1] if raw.endswith("\r") else raw
        lines.append(Line(number=number, start=offset, end=offset + len(text), text=text))
        offset += len(raw) + 1
    return lines


def line_at(document: str, point: int) -> Line:
    """Return the line containing `point`.

    Points outside the document are clamped to its bounds. A point sitting on
    a line break belongs to the line the break terminates.
    """
    point = max(0, min(point, len(document)))
    lines = split_lines(document)
    current = lines[0]
    for line in lines[1:]:
        if line.start > point:
            break
        current = line
    return current


def _matches(pattern: re.Pattern[str], line: Line, kind: MarkerKind) -> list[MarkerOccurrence]:
    return [
        MarkerOccurrence(kind=kind, position=line.start + match.start(), length=len(match.group(0)))
        for match in pattern.finditer(line.text)
        if match.group(0)
    ]


def find_markers(line: Line, markers: CompiledMarkers) -> list[MarkerOccurrence]:
    """Collect the start and end markers of a single line.

    Start and end occurrences are found independently, then merged by
    absolute offset. A start sorts before an end at the same offset.

    Args:
        line: Line to scan.
        markers: Compiled marker patterns.

    Returns:
        list[MarkerOccurrence]: Occurrences ordered by position.
    """
    occurrences = _matches(markers.start, line, MarkerKind.START)
    occurrences += _matches(markers.end, line, MarkerKind.END)
    occurrences.sort(key=lambda item: (item.position, item.kind is MarkerKind.END))
    return occurrences


def scan(document: str, config: MarkerConfig) -> list[MarkerOccurrence]:
    """Locate every nested-region marker in a document.

    Args:
        document: Full document text.
        config: Marker configuration.

    Returns:
        list[MarkerOccurrence]: Occurrences ordered by position ascending.

    Raises:
        MarkerPatternError: If the configuration holds an invalid marker.

    Examples:
        scan("%% REGION %% text %% ENDREGION %%", MarkerConfig())
    """
    markers = compile_markers(config)
    occurrences: list[MarkerOccurrence] = []
    for line in split_lines(document):
        occurrences.extend(find_markers(line, markers))

    logger.debug("Found %d region markers", len(occurrences))
    return occurrences


def find_line_fold_markers(line: Line, markers: CompiledMarkers) -> list[LineFoldMarker]:
    """Return the line-fold markers terminating `line`, start first."""
    found = []
    for kind, pattern in (
        (MarkerKind.START, markers.line_fold_start),
        (MarkerKind.END, markers.line_fold_end),
    ):
        match = pattern.search(line.text)
        if match is None:
            continue
        found.append(
            LineFoldMarker(
                kind=kind,
                position=line.start + match.start(),
                line_number=line.number,
                line_end=line.end,
            )
        )
    return found


def scan_line_folds(document: str, config: MarkerConfig) -> list[LineFoldMarker]:
    """Locate line-fold markers, at most one per kind and line.

    Args:
        document: Full document text.
        config: Marker configuration.

    Returns:
        list[LineFoldMarker]: Markers in line order.

    Raises:
        MarkerPatternError: If the configuration holds an invalid marker.
    """
    markers = compile_markers(config)
    found: list[LineFoldMarker] = []
    for line in split_lines(document):
        found.extend(find_line_fold_markers(line, markers))

    logger.debug("Found %d line-fold markers", len(found))
    return found
