"""Constants used across the fold-anywhere package."""

from __future__ import annotations

# Default markers, matching the plugin's shipped settings
DEFAULT_START_MARKER = "%% REGION %%"
DEFAULT_END_MARKER = "%% ENDREGION %%"
DEFAULT_LINE_FOLD_MARKER = "%% LINEFOLDSTART %%"
DEFAULT_LINE_FOLD_END_MARKER = "%% LINEFOLDEND %%"

# Line-fold markers only count when they terminate a line
LINE_END_SUFFIX = r"\s*$"

# Obsidian block references (``^abc123``) must stay at the end of a line
BLOCK_ID_PATTERN = r"\^[a-zA-Z0-9\-]{1,6}$"

# Persistence and filesystem defaults
DEFAULT_INDEX_FILENAME = ".fold-anywhere.json"
DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024
NOTE_EXTENSIONS = (".md", ".markdown", ".mdown", ".mkd", ".mkdn", ".txt")
