"""Active fold set tracking for one document session."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from .config import MarkerConfig
from .models import FoldAction, FoldIntent, FoldRange
from .query import all_foldable_ranges, enclosing_range_at, range_starting_at

logger = logging.getLogger(__name__)

ChangeListener = Callable[[tuple[FoldRange, ...]], None]


class FoldStateTracker:
    """Hold the folded ranges of one document and validate every change.

    A fold request is accepted only when the range is among the foldable
    ranges of the document text passed with the request; anything else is a
    silent no-op. Ranges are never cached between calls.

    Args:
        config: Marker configuration used to validate fold requests.
        on_change: Called with the new active set after each change. Storage
            belongs to the listener; the tracker performs no I/O.

    Examples:
        tracker = FoldStateTracker(MarkerConfig(), on_change=print)
        tracker.request_fold(text, FoldRange(0, 30))
    """

    def __init__(self, config: MarkerConfig, on_change: ChangeListener | None = None):
        self.config = config
        self.on_change = on_change
        self._active: dict[FoldRange, None] = {}

    @property
    def active(self) -> tuple[FoldRange, ...]:
        return tuple(self._active)

    def __len__(self) -> int:
        return len(self._active)

    def is_folded(self, fold_range: FoldRange) -> bool:
        return fold_range in self._active

    def reconfigure(self, config: MarkerConfig) -> None:
        """Use `config` for subsequent requests; nothing is rescanned now."""
        self.config = config

    def _fold(self, fold_range: FoldRange, foldable: list[FoldRange]) -> bool:
        if fold_range in self._active:
            return False
        if fold_range not in foldable:
            logger.debug("Ignoring fold of %s: not a foldable range", fold_range)
            return False
        self._active[fold_range] = None
        return True

    def _unfold(self, fold_range: FoldRange) -> bool:
        if fold_range not in self._active:
            return False
        del self._active[fold_range]
        return True

    def _notify(self) -> None:
        if self.on_change is not None:
            self.on_change(self.active)

    def request_fold(self, document: str, fold_range: FoldRange) -> bool:
        """Fold `fold_range` if it is currently foldable and not yet folded.

        Returns:
            bool: True when the active set changed.
        """
        changed = self._fold(fold_range, all_foldable_ranges(document, self.config))
        if changed:
            self._notify()
        return changed

    def request_unfold(self, fold_range: FoldRange) -> bool:
        """Unfold `fold_range` if present. Returns True when the set changed."""
        changed = self._unfold(fold_range)
        if changed:
            self._notify()
        return changed

    def apply(self, document: str, intents: Iterable[FoldIntent]) -> bool:
        """Apply several intents in order, notifying at most once.

        Args:
            document: Current document text.
            intents: Fold and unfold requests.

        Returns:
            bool: True when the active set changed.
        """
        foldable = all_foldable_ranges(document, self.config)
        changed = False
        for intent in intents:
            if intent.action is FoldAction.FOLD:
                changed = self._fold(intent.fold_range, foldable) or changed
            else:
                changed = self._unfold(intent.fold_range) or changed
        if changed:
            self._notify()
        return changed

    def fold_all(self, document: str) -> bool:
        foldable = all_foldable_ranges(document, self.config)
        return self.apply(
            document, (FoldIntent(FoldAction.FOLD, fold_range) for fold_range in foldable)
        )

    def unfold_all(self) -> bool:
        if not self._active:
            return False
        self._active.clear()
        self._notify()
        return True

    def fold_at(self, document: str, point: int) -> FoldRange | None:
        """Fold the innermost range around `point`; returns it when folded."""
        fold_range = enclosing_range_at(document, self.config, point)
        if fold_range is None or not self.request_fold(document, fold_range):
            return None
        return fold_range

    def unfold_at(self, document: str, point: int) -> FoldRange | None:
        """Unfold the innermost range around `point`; returns it when unfolded."""
        fold_range = enclosing_range_at(document, self.config, point)
        if fold_range is None or not self.request_unfold(fold_range):
            return None
        return fold_range

    def toggle_at(self, document: str, point: int) -> FoldRange | None:
        """Toggle the range opened by the marker under the cursor.

        Returns:
            FoldRange | None: The toggled range, or None when the cursor is
            not on a start marker with a forward match or the range cannot
            be folded.
        """
        fold_range = range_starting_at(document, self.config, point)
        if fold_range is None:
            return None
        if self.is_folded(fold_range):
            changed = self.request_unfold(fold_range)
        else:
            changed = self.request_fold(document, fold_range)
        return fold_range if changed else None

    def revalidate(self, document: str) -> bool:
        """Drop folded ranges that are no longer foldable after an edit."""
        foldable = set(all_foldable_ranges(document, self.config))
        stale = [fold_range for fold_range in self._active if fold_range not in foldable]
        if not stale:
            return False
        for fold_range in stale:
            del self._active[fold_range]
        logger.debug("Dropped %d stale folds", len(stale))
        self._notify()
        return True
