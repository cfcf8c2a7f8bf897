"""Region matching for marker occurrences."""

from __future__ import annotations

import logging

from .models import FoldRange, LineFoldMarker, MarkerKind, MarkerOccurrence

logger = logging.getLogger(__name__)


def match_regions(occurrences: list[MarkerOccurrence]) -> list[FoldRange]:
    """Pair start and end markers into nested fold ranges.

    Each start is pushed together with the depth at which it opened. An end
    lowers the depth and pairs with the first stacked start opened at that
    depth, rather than blindly with the top of the stack. The paired start
    and everything stacked above it are discarded, so emitted ranges are
    either disjoint or nested. Dangling starts and ends with an empty stack
    produce nothing.

    Args:
        occurrences: Markers ordered by position.

    Returns:
        list[FoldRange]: Ranges in the order their end markers were seen.

    Examples:
        match_regions(scan("%% REGION %% a %% ENDREGION %%", MarkerConfig()))
        # [FoldRange(from_=0, to=30)]
    """
    ranges: list[FoldRange] = []
    stack: list[tuple[int, int]] = []
    depth = 0

    for occurrence in occurrences:
        if occurrence.kind is MarkerKind.START:
            stack.append((occurrence.position, depth))
            depth += 1
            continue

        if not stack:
            continue

        depth -= 1
        index = next((i for i, (_, opened_at) in enumerate(stack) if opened_at == depth), None)
        if index is None:
            continue

        start = stack[index][0]
        del stack[index:]
        if start < occurrence.end:
            ranges.append(FoldRange(start, occurrence.end))

    logger.debug("Matched %d regions, %d starts left open", len(ranges), len(stack))
    return ranges


def match_line_folds(markers: list[LineFoldMarker]) -> list[FoldRange]:
    """Pair line-fold markers in simple stack order.

    An end marker closes the most recent pending start from an earlier line.
    The resulting range runs from the start marker to the end of the line
    holding the end marker. Ends with no pending start are ignored.

    Args:
        markers: Line-fold markers in line order.

    Returns:
        list[FoldRange]: Line-fold ranges in the order they were closed.
    """
    ranges: list[FoldRange] = []
    pending: list[LineFoldMarker] = []

    for marker in markers:
        if marker.kind is MarkerKind.START:
            pending.append(marker)
            continue

        for index in range(len(pending) - 1, -1, -1):
            if pending[index].line_number < marker.line_number:
                start = pending.pop(index)
                if start.position < marker.line_end:
                    ranges.append(FoldRange(start.position, marker.line_end))
                break

    return ranges
