"""Data models for fold-anywhere."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum, auto


class MarkerKind(Enum):
    """Role of a marker occurrence.

    Attributes:
        START: Opens a foldable region.
        END: Closes the most recent compatible region.
    """

    START = auto()
    END = auto()


class FoldAction(Enum):
    """Intent carried by a `FoldIntent`."""

    FOLD = auto()
    UNFOLD = auto()


@dataclass(frozen=True)
class Line:
    """One line of a document with its absolute offsets.

    Attributes:
        number: One-based line number.
        start: Offset of the first character of the line.
        end: Offset just past the last character of the line text, excluding
            the line break.
        text: Line content without the line break.
    """

    number: int
    start: int
    end: int
    text: str


@dataclass(frozen=True)
class MarkerOccurrence:
    """A single regex match of a start or end marker.

    Attributes:
        kind: Whether the match opens or closes a region.
        position: Absolute offset of the first matched character.
        length: Number of matched characters.
    """

    kind: MarkerKind
    position: int
    length: int

    @property
    def end(self) -> int:
        return self.position + self.length


@dataclass(frozen=True)
class LineFoldMarker:
    """A line-fold marker found at the end of a line.

    Attributes:
        kind: Whether the marker opens or closes a line fold.
        position: Absolute offset of the marker.
        line_number: One-based line number holding the marker.
        line_end: Offset of the end of that line.
    """

    kind: MarkerKind
    position: int
    line_number: int
    line_end: int


@dataclass(frozen=True)
class FoldRange:
    """A pair of document offsets eligible for folding.

    ``from`` is a Python keyword, so the start offset is stored as ``from_``.
    Serialized form uses the ``from``/``to`` keys.

    Attributes:
        from_: Offset where the folded region starts.
        to: Offset where the folded region ends (exclusive).

    Raises:
        ValueError: If ``from_`` is not strictly smaller than ``to``.
    """

    from_: int
    to: int

    def __post_init__(self):
        if self.from_ >= self.to:
            raise ValueError(f"Invalid fold range: from ({self.from_}) must be < to ({self.to})")

    @property
    def span(self) -> int:
        return self.to - self.from_

    def contains(self, point: int) -> bool:
        """Return True when `point` lies strictly inside the range."""
        return self.from_ < point < self.to

    def to_dict(self) -> dict[str, int]:
        return {"from": self.from_, "to": self.to}

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> FoldRange:
        """Build a range from its serialized ``{"from": n, "to": n}`` form.

        Raises:
            ValueError: If either offset is missing, not an integer, or the
                offsets are out of order.
        """
        try:
            from_, to = data["from"], data["to"]
        except (KeyError, TypeError) as error:
            raise ValueError(f"Fold range is missing offsets: {data!r}") from error
        for value in (from_, to):
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"Fold range offsets must be integers: {data!r}")
        return cls(from_, to)


@dataclass(frozen=True)
class FoldIntent:
    """A fold or unfold request for a specific range."""

    action: FoldAction
    fold_range: FoldRange
