"""Document sessions tying a fold tracker to the fold index."""

from __future__ import annotations

import logging

from .config import MarkerConfig
from .exceptions import PersistenceError
from .models import FoldAction, FoldIntent, FoldRange
from .persistence import FoldIndexStore
from .tracker import FoldStateTracker

logger = logging.getLogger(__name__)


class FoldSession:
    """Folding state of one open document.

    Every change of the active set is written to the store under
    `document_key`. A failed write is logged and the in-memory folds are
    kept. Opening a session replays the stored folds against the current
    text; folds whose markers were edited away are dropped and the cleaned
    set is written back.

    Args:
        document_key: Identity of the document in the fold index.
        config: Marker configuration.
        store: Fold index used for loading and saving.

    Examples:
        session = FoldSession("notes/today.md", MarkerConfig(), store)
        session.open(text)
        session.tracker.toggle_at(text, cursor)
    """

    def __init__(self, document_key: str, config: MarkerConfig, store: FoldIndexStore):
        self.document_key = document_key
        self.store = store
        self.tracker = FoldStateTracker(config, on_change=self._persist)
        self._loading = False

    @property
    def active(self) -> tuple[FoldRange, ...]:
        return self.tracker.active

    def _save(self, active: tuple[FoldRange, ...]) -> None:
        try:
            self.store.save(self.document_key, active)
        except PersistenceError as error:
            logger.warning("Fold state of %s was not saved: %s", self.document_key, error)

    def _persist(self, active: tuple[FoldRange, ...]) -> None:
        if not self._loading:
            self._save(active)

    def open(self, document: str, auto_fold: bool | None = None) -> tuple[FoldRange, ...]:
        """Restore folds for `document` and return the active set.

        Args:
            document: Current document text.
            auto_fold: Whether to fold every foldable range after restoring;
                defaults to the configuration's ``auto_fold_on_load``.
        """
        stored = self.store.load(self.document_key)
        if auto_fold is None:
            auto_fold = self.tracker.config.auto_fold_on_load

        self._loading = True
        try:
            self.tracker.apply(
                document, (FoldIntent(FoldAction.FOLD, fold_range) for fold_range in stored)
            )
            if auto_fold:
                self.tracker.fold_all(document)
        finally:
            self._loading = False

        if list(self.active) != stored:
            dropped = len(set(stored) - set(self.active))
            if dropped:
                logger.debug("Dropped %d stale folds for %s", dropped, self.document_key)
            self._save(self.active)
        return self.active

    def close(self) -> None:
        """Persist the final state and forget the in-memory folds."""
        self._save(self.active)
        self._loading = True
        try:
            self.tracker.unfold_all()
        finally:
            self._loading = False
