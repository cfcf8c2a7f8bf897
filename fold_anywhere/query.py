"""Range queries answered against the current document text."""

from __future__ import annotations

from .config import MarkerConfig
from .matcher import match_line_folds, match_regions
from .models import FoldRange, MarkerKind
from .scanner import (
    compile_markers,
    find_line_fold_markers,
    find_markers,
    line_at,
    scan,
    scan_line_folds,
    split_lines,
)


def all_foldable_ranges(document: str, config: MarkerConfig) -> list[FoldRange]:
    """Return every range that may currently be folded.

    Nested-region ranges come first, followed by line-fold ranges, each in
    scan order.

    Args:
        document: Full document text.
        config: Marker configuration.

    Returns:
        list[FoldRange]: Foldable ranges for "fold all".

    Raises:
        MarkerPatternError: If the configuration holds an invalid marker.

    Examples:
        all_foldable_ranges(Path("note.md").read_text(), MarkerConfig())
    """
    ranges = match_regions(scan(document, config))
    ranges.extend(match_line_folds(scan_line_folds(document, config)))
    return ranges


def _line_fold_from(document: str, config: MarkerConfig, point: int) -> FoldRange | None:
    """Return the line fold opened on the line holding `point`, if any.

    The fold is the one `match_line_folds` pairs with that line's start
    marker, so nested line folds resolve the same way as for "fold all".
    """
    current = line_at(document, point)
    opening = next(
        (
            marker
            for marker in find_line_fold_markers(current, compile_markers(config))
            if marker.kind is MarkerKind.START
        ),
        None,
    )
    if opening is None:
        return None

    return next(
        (
            fold_range
            for fold_range in match_line_folds(scan_line_folds(document, config))
            if fold_range.from_ == opening.position
        ),
        None,
    )


def enclosing_range_at(document: str, config: MarkerConfig, point: int) -> FoldRange | None:
    """Return the innermost range strictly containing `point`.

    A line fold opened on the cursor line wins over nested regions.

    Args:
        document: Full document text.
        config: Marker configuration.
        point: Cursor offset.

    Returns:
        FoldRange | None: The smallest enclosing range, or None.

    Examples:
        enclosing_range_at("%% REGION %% a %% ENDREGION %%", MarkerConfig(), 13)
    """
    line_fold = _line_fold_from(document, config, point)
    if line_fold is not None:
        return line_fold

    candidates = [
        fold_range for fold_range in match_regions(scan(document, config)) if fold_range.contains(point)
    ]
    if not candidates:
        return None
    # min() keeps the first of equally sized candidates
    return min(candidates, key=lambda fold_range: fold_range.span)


def range_starting_at(document: str, config: MarkerConfig, point: int) -> FoldRange | None:
    """Return the range opened by the start marker under the cursor.

    The search starts fresh from that marker: later starts are stacked, each
    end pops the most recent start, and the range is returned only once the
    cursor's own marker is popped. Markers before the cursor's marker are
    ignored, so an unrelated enclosing region is never returned. When the
    cursor is not on a start marker, a line fold opened on its line is used.

    Args:
        document: Full document text.
        config: Marker configuration.
        point: Cursor offset.

    Returns:
        FoldRange | None: The range to toggle, or None.

    Examples:
        range_starting_at("%% REGION %% a %% ENDREGION %%", MarkerConfig(), 3)
    """
    markers = compile_markers(config)
    current = line_at(document, point)

    anchor = next(
        (
            occurrence
            for occurrence in find_markers(current, markers)
            if occurrence.kind is MarkerKind.START
            and occurrence.position <= point <= occurrence.end
        ),
        None,
    )
    if anchor is None:
        return _line_fold_from(document, config, point)

    stack = [anchor.position]
    for line in split_lines(document)[current.number - 1 :]:
        for occurrence in find_markers(line, markers):
            if occurrence.position <= anchor.position:
                continue
            if occurrence.kind is MarkerKind.START:
                stack.append(occurrence.position)
                continue
            if stack.pop() == anchor.position:
                return FoldRange(anchor.position, occurrence.end)
    return None
