"""Configuration loading and management."""

from __future__ import annotations

import re
import tomllib
from dataclasses import dataclass, fields, replace
from pathlib import Path

from .constants import (
    DEFAULT_END_MARKER,
    DEFAULT_LINE_FOLD_END_MARKER,
    DEFAULT_LINE_FOLD_MARKER,
    DEFAULT_START_MARKER,
)
from .exceptions import ConfigError, MarkerPatternError

__all__ = [
    "ConfigError",
    "MarkerConfig",
    "apply_overrides",
    "build_config",
    "compile_pattern",
    "load_config",
    "normalize_config",
    "validate_config",
]

MARKER_FIELDS = ("start_marker", "end_marker", "line_fold_marker", "line_fold_end_marker")

# Setting names used by the editor plugin's data.json
CAMEL_CASE_ALIASES = {
    "startMarker": "start_marker",
    "endMarker": "end_marker",
    "lineFoldMarker": "line_fold_marker",
    "lineFoldEndMarker": "line_fold_end_marker",
    "autoFoldOnLoad": "auto_fold_on_load",
}


@dataclass(frozen=True)
class MarkerConfig:
    """Marker configuration for one document session.

    Every marker is a regular-expression source. Instances are immutable;
    use `apply_overrides` to derive a changed configuration.

    Attributes:
        start_marker: Pattern opening a nested region.
        end_marker: Pattern closing a nested region.
        line_fold_marker: Pattern that, at the end of a line, opens a line fold.
        line_fold_end_marker: Pattern that, at the end of a line, closes a line fold.
        auto_fold_on_load: Whether every foldable range is folded when a
            document session opens.

    Examples:
        MarkerConfig(start_marker="<!-- region -->", end_marker="<!-- endregion -->")
    """

    start_marker: str = DEFAULT_START_MARKER
    end_marker: str = DEFAULT_END_MARKER
    line_fold_marker: str = DEFAULT_LINE_FOLD_MARKER
    line_fold_end_marker: str = DEFAULT_LINE_FOLD_END_MARKER
    auto_fold_on_load: bool = True


# Config files checked in each directory, with the tables read from them
CONFIG_SOURCES: tuple[tuple[str, tuple[tuple[str, ...], ...]], ...] = (
    ("pyproject.toml", (("tool", "fold-anywhere"),)),
    (".fold-anywhere.toml", (("fold-anywhere",), ("tool", "fold-anywhere"))),
)

CONFIG_FIELDS = frozenset(field.name for field in fields(MarkerConfig))


def load_config(search_path: Path) -> MarkerConfig:
    """Load configuration from the nearest config file.

    Walks parent directories from `search_path` to the filesystem root, reading
    the ``[tool.fold-anywhere]`` table from `pyproject.toml` and the
    ``[fold-anywhere]`` or ``[tool.fold-anywhere]`` table from
    `.fold-anywhere.toml` when present. Returns default values when no
    configuration is found. TOML files that cannot be read or decoded are
    skipped.

    Args:
        search_path: Directory used as the starting point for configuration lookup.

    Returns:
        MarkerConfig: Loaded configuration with defaults applied when necessary.

    Raises:
        ConfigError: If the table is present but not a mapping, contains
            unsupported keys, or names a setting twice.

    Examples:
        load_config(Path("notes"))
    """
    start = search_path.resolve()
    for directory in (start, *start.parents):
        for filename, table_paths in CONFIG_SOURCES:
            found = _read_table(directory / filename, table_paths)
            if found is not None:
                table, location = found
                return normalize_config(_config_from_table(table, location))
    return MarkerConfig()


def _read_table(
    config_file: Path, table_paths: tuple[tuple[str, ...], ...]
) -> tuple[object, str] | None:
    try:
        with open(config_file, "rb") as stream:
            data = tomllib.load(stream)
    except (OSError, tomllib.TOMLDecodeError):
        return None

    for table_path in table_paths:
        table: object = data
        for key in table_path:
            if not isinstance(table, dict) or key not in table:
                break
            table = table[key]
        else:
            return table, f"`[{'.'.join(table_path)}]` in {config_file}"
    return None


def _config_from_table(table: object, location: str) -> MarkerConfig:
    if not isinstance(table, dict):
        raise ConfigError(f"Invalid {location}: expected a table of settings")

    settings: dict[str, object] = {}
    for key, value in table.items():
        name = CAMEL_CASE_ALIASES.get(key, key)
        if name in settings:
            raise ConfigError(f"Setting `{name}` is given twice in {location}")
        settings[name] = value

    unknown = sorted(set(settings) - CONFIG_FIELDS)
    if unknown:
        raise ConfigError(f"Unsupported settings in {location}: {', '.join(unknown)}")
    return MarkerConfig(**settings)


def normalize_config(config: MarkerConfig) -> MarkerConfig:
    """Replace empty marker strings with their defaults."""
    defaults = MarkerConfig()
    changes = {
        name: getattr(defaults, name)
        for name in MARKER_FIELDS
        if isinstance(getattr(config, name), str) and not getattr(config, name)
    }
    if not changes:
        return config
    return replace(config, **changes)


def compile_pattern(field: str, source: object, suffix: str = "") -> re.Pattern[str]:
    """Compile one marker pattern.

    Args:
        field: Configuration field name, used in error messages.
        source: Pattern source taken from the configuration.
        suffix: Extra pattern appended after the marker group.

    Returns:
        re.Pattern[str]: The compiled pattern.

    Raises:
        MarkerPatternError: If the source is not a non-empty string, does not
            compile, or matches the empty string.

    Examples:
        compile_pattern("line_fold_marker", "%% LINEFOLDSTART %%", r"\\s*$")
    """
    if not isinstance(source, str) or not source:
        raise MarkerPatternError(field, str(source), "must be a non-empty string")

    try:
        pattern = re.compile(f"(?:{source}){suffix}")
    except re.error as error:
        raise MarkerPatternError(field, source, str(error)) from error

    # An empty match would yield a marker on every position of every line.
    if re.compile(f"(?:{source})").fullmatch(""):
        raise MarkerPatternError(field, source, "must not match the empty string")

    return pattern


def validate_config(config: MarkerConfig) -> None:
    """Validate a `MarkerConfig` instance.

    Args:
        config: Configuration to validate.

    Raises:
        MarkerPatternError: If a marker is empty or not a valid regular expression.
        ConfigError: If ``auto_fold_on_load`` is not a boolean.

    Examples:
        validate_config(MarkerConfig(start_marker="#region"))
    """
    config = normalize_config(config)

    for name in MARKER_FIELDS:
        compile_pattern(name, getattr(config, name))

    if not isinstance(config.auto_fold_on_load, bool):
        raise ConfigError("`auto_fold_on_load` must be a boolean")


def apply_overrides(config: MarkerConfig, **overrides: object) -> MarkerConfig:
    """Return `config` with the given settings replaced; None values are skipped.

    Command-line flags that were not passed arrive as None, so only explicit
    values take precedence over the config file.

    Raises:
        ConfigError: If an override names an unknown setting.

    Examples:
        updated = apply_overrides(config, start_marker="#region", end_marker=None)
    """
    unknown = sorted(set(overrides) - CONFIG_FIELDS)
    if unknown:
        raise ConfigError(f"Unsupported configuration keys: {', '.join(unknown)}")

    changes = {key: value for key, value in overrides.items() if value is not None}
    return replace(config, **changes) if changes else config


def build_config(search_path: Path, **overrides: object) -> MarkerConfig:
    """Load, override, and validate configuration.

    Args:
        search_path: Directory where configuration files are resolved.
        overrides: Override values keyed by configuration attributes; None values
            are ignored.

    Returns:
        MarkerConfig: Validated configuration ready for scanning.

    Raises:
        ConfigError: If configuration loading or validation fails.

    Examples:
        config = build_config(Path.cwd(), start_marker="#region")
    """
    config = load_config(search_path)
    config = apply_overrides(config, **overrides)
    config = normalize_config(config)
    validate_config(config)
    return config
