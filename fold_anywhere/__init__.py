"""
fold-anywhere: marker-based region folding for plain-text notes.

This package can be used both as a CLI tool and as a library.

CLI Usage:
    fold-anywhere ranges notes/today.md

Library Usage:
    from pathlib import Path
    from fold_anywhere import FoldStateTracker, MarkerConfig, all_foldable_ranges

    text = Path("notes/today.md").read_text()
    config = MarkerConfig()
    tracker = FoldStateTracker(config)
    for fold_range in all_foldable_ranges(text, config):
        tracker.request_fold(text, fold_range)
"""

from .config import MarkerConfig, build_config, load_config, validate_config
from .editing import EditResult, insert_marker, remove_markers, wrap_selection
from .exceptions import ConfigError, MarkerPatternError, PersistenceError
from .matcher import match_line_folds, match_regions
from .models import FoldAction, FoldIntent, FoldRange, MarkerKind, MarkerOccurrence
from .persistence import FoldIndexStore, dump_index, parse_index
from .query import all_foldable_ranges, enclosing_range_at, range_starting_at
from .scanner import scan, scan_line_folds
from .session import FoldSession
from .tracker import FoldStateTracker

__version__ = "0.1.0"

__all__ = [
    # Queries
    "all_foldable_ranges",
    "enclosing_range_at",
    "range_starting_at",
    # Scanning and matching
    "scan",
    "scan_line_folds",
    "match_regions",
    "match_line_folds",
    # Fold state
    "FoldStateTracker",
    "FoldSession",
    "FoldIndexStore",
    "parse_index",
    "dump_index",
    # Marker editing
    "EditResult",
    "wrap_selection",
    "insert_marker",
    "remove_markers",
    # Configuration
    "MarkerConfig",
    "build_config",
    "load_config",
    "validate_config",
    # Data models
    "FoldAction",
    "FoldIntent",
    "FoldRange",
    "MarkerKind",
    "MarkerOccurrence",
    # Exceptions
    "ConfigError",
    "MarkerPatternError",
    "PersistenceError",
    # Version
    "__version__",
]
