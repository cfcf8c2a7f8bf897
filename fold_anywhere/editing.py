"""Text edits that insert or remove fold markers.

All functions are pure: they take the document text and return the edited
text together with the cursor offset to use afterwards. Marker settings are
inserted verbatim, so these helpers assume literal markers such as the
defaults.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .config import MarkerConfig, compile_pattern, normalize_config
from .constants import BLOCK_ID_PATTERN
from .models import MarkerKind

BLOCK_ID_RE = re.compile(BLOCK_ID_PATTERN)


@dataclass(frozen=True)
class EditResult:
    """Edited document text and the cursor offset after the edit."""

    text: str
    cursor: int


def _at_word_start(text: str, position: int) -> bool:
    return position == 0 or text[position - 1] in " \n"


def _at_word_end(text: str, position: int) -> bool:
    return position == len(text) or text[position] in " \r\n"


def _close_before_block_id(content: str, end_marker: str) -> str:
    match = BLOCK_ID_RE.search(content)
    if match is None:
        return f"{content} {end_marker}"
    return f"{content[: match.start()]}{end_marker} {match.group(0)}"


def wrap_selection(text: str, start: int, end: int, config: MarkerConfig) -> EditResult | None:
    """Surround the selection ``text[start:end]`` with a start and end marker.

    Padding spaces are added only where the selection touches other words.
    A trailing block id (``^abc123``) stays at the end, after the end marker.

    Args:
        text: Document text.
        start: Selection start offset.
        end: Selection end offset.
        config: Marker configuration supplying the marker text.

    Returns:
        EditResult | None: The edited text with the cursor after the inserted
            region, or None when the selection is blank.

    Examples:
        wrap_selection("keep this", 5, 9, MarkerConfig()).text
        # "keep %% REGION %% this %% ENDREGION %%"
    """
    start, end = sorted((start, end))
    selection = text[start:end].strip()
    if not selection:
        return None

    config = normalize_config(config)
    replacement = (
        ("" if _at_word_start(text, start) else " ")
        + f"{config.start_marker} {_close_before_block_id(selection, config.end_marker)}"
        + ("" if _at_word_end(text, end) else " ")
    )
    return EditResult(text=text[:start] + replacement + text[end:], cursor=start + len(replacement))


def insert_marker(
    text: str, position: int, kind: MarkerKind, config: MarkerConfig
) -> EditResult:
    """Insert a single start or end marker at `position`.

    Args:
        text: Document text.
        position: Insertion offset.
        kind: Which marker to insert.
        config: Marker configuration supplying the marker text.

    Returns:
        EditResult: The edited text with the cursor after the marker.

    Examples:
        insert_marker("ab", 1, MarkerKind.START, MarkerConfig()).text
        # "a %% REGION %% b"
    """
    config = normalize_config(config)
    marker = config.start_marker if kind is MarkerKind.START else config.end_marker

    if _at_word_end(text, position):
        suffix = " " if kind is MarkerKind.START else ""
    else:
        suffix = " "
    insertion = ("" if _at_word_start(text, position) else " ") + marker + suffix
    return EditResult(
        text=text[:position] + insertion + text[position:], cursor=position + len(insertion)
    )


def remove_markers(text: str, config: MarkerConfig) -> str:
    """Remove every start and end marker, with one preceding space or tab each.

    Raises:
        MarkerPatternError: If the configuration holds an invalid marker.

    Examples:
        remove_markers("a %% REGION %% b %% ENDREGION %%", MarkerConfig())  # "a b"
    """
    config = normalize_config(config)
    start = compile_pattern("start_marker", config.start_marker)
    end = compile_pattern("end_marker", config.end_marker)
    pattern = re.compile(rf"[^\S\r\n]?(?:{start.pattern})|[^\S\r\n]?(?:{end.pattern})")
    return pattern.sub("", text)
