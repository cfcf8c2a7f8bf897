"""Package-specific exception types."""

from __future__ import annotations


class ConfigError(ValueError):
    """Exception raised when configuration values are invalid.

    Examples:
        raise ConfigError("`start_marker` must be a string")
    """


class MarkerPatternError(ConfigError):
    """Raised when a marker string does not compile as a regular expression.

    Args:
        field: Name of the configuration field holding the pattern.
        pattern: The offending pattern source.
        reason: Message reported by the regex compiler.
    """

    def __init__(self, field: str, pattern: str, reason: str):
        self.field = field
        self.pattern = pattern
        self.reason = reason
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        return f"Invalid `{self.field}` pattern {self.pattern!r}: {self.reason}"


class PersistenceError(OSError):
    """Raised when the fold index cannot be parsed or written."""
