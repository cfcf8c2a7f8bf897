from __future__ import annotations

from fold_anywhere.config import MarkerConfig
from fold_anywhere.models import FoldAction, FoldIntent, FoldRange
from fold_anywhere.query import all_foldable_ranges
from fold_anywhere.tracker import FoldStateTracker

START = "%% REGION %%"
END = "%% ENDREGION %%"

TEXT = f"{START} a {START} b {END} c {END}"
INNER = FoldRange(TEXT.index(START, 1), TEXT.index(END) + len(END))
OUTER = FoldRange(0, len(TEXT))


def _tracker(changes: list | None = None) -> FoldStateTracker:
    listener = changes.append if changes is not None else None
    return FoldStateTracker(MarkerConfig(), on_change=listener)


def test_tracker_starts_empty():
    tracker = _tracker()

    assert tracker.active == ()
    assert len(tracker) == 0


def test_request_fold_accepts_foldable_range():
    changes: list = []
    tracker = _tracker(changes)

    assert tracker.request_fold(TEXT, INNER) is True
    assert tracker.is_folded(INNER)
    assert changes == [(INNER,)]


def test_request_fold_ignores_unknown_range():
    changes: list = []
    tracker = _tracker(changes)

    assert tracker.request_fold(TEXT, FoldRange(1, 5)) is False
    assert tracker.active == ()
    assert changes == []


def test_request_fold_ignores_duplicates():
    changes: list = []
    tracker = _tracker(changes)
    tracker.request_fold(TEXT, OUTER)

    assert tracker.request_fold(TEXT, OUTER) is False
    assert tracker.active == (OUTER,)
    assert len(changes) == 1


def test_fold_then_unfold_restores_state():
    tracker = _tracker()
    before = tracker.is_folded(INNER)

    tracker.request_fold(TEXT, INNER)
    tracker.request_unfold(INNER)

    assert tracker.is_folded(INNER) == before


def test_request_unfold_of_missing_range_is_noop():
    changes: list = []
    tracker = _tracker(changes)

    assert tracker.request_unfold(INNER) is False
    assert changes == []


def test_apply_notifies_once_for_a_batch():
    changes: list = []
    tracker = _tracker(changes)

    changed = tracker.apply(
        TEXT,
        [
            FoldIntent(FoldAction.FOLD, INNER),
            FoldIntent(FoldAction.FOLD, OUTER),
            FoldIntent(FoldAction.FOLD, FoldRange(2, 3)),
            FoldIntent(FoldAction.UNFOLD, INNER),
        ],
    )

    assert changed is True
    assert tracker.active == (OUTER,)
    assert changes == [(OUTER,)]


def test_fold_all_and_unfold_all():
    tracker = _tracker()

    assert tracker.fold_all(TEXT) is True
    assert set(tracker.active) == set(all_foldable_ranges(TEXT, MarkerConfig()))

    assert tracker.unfold_all() is True
    assert tracker.active == ()
    assert tracker.unfold_all() is False


def test_fold_at_and_unfold_at_use_innermost_range():
    tracker = _tracker()
    point = TEXT.index("b")

    assert tracker.fold_at(TEXT, point) == INNER
    assert tracker.is_folded(INNER)
    assert tracker.unfold_at(TEXT, point) == INNER
    assert not tracker.is_folded(INNER)


def test_fold_at_outside_regions_returns_none():
    tracker = _tracker()

    assert tracker.fold_at("no markers here", 3) is None


def test_toggle_at_start_marker():
    tracker = _tracker()

    assert tracker.toggle_at(TEXT, 0) == OUTER
    assert tracker.is_folded(OUTER)
    assert tracker.toggle_at(TEXT, 0) == OUTER
    assert not tracker.is_folded(OUTER)


def test_toggle_away_from_marker_does_nothing():
    tracker = _tracker()

    assert tracker.toggle_at(TEXT, TEXT.index("c")) is None
    assert tracker.active == ()


def test_revalidate_drops_ranges_broken_by_edits():
    changes: list = []
    tracker = _tracker(changes)
    tracker.fold_all(TEXT)
    edited = TEXT.replace(END, "", 1)

    assert tracker.revalidate(edited) is True
    assert not tracker.is_folded(INNER)
    assert not tracker.is_folded(OUTER)
    assert tracker.revalidate(edited) is False


def test_revalidate_keeps_valid_ranges():
    tracker = _tracker()
    tracker.request_fold(TEXT, INNER)

    assert tracker.revalidate(TEXT) is False
    assert tracker.active == (INNER,)


def test_reconfigure_applies_to_next_request():
    tracker = _tracker()
    text = "<< body >>"

    assert tracker.request_fold(text, FoldRange(0, len(text))) is False

    tracker.reconfigure(MarkerConfig(start_marker="<<", end_marker=">>"))

    assert tracker.request_fold(text, FoldRange(0, len(text))) is True


def test_fold_at_and_toggle_at_nested_line_folds():
    line_start = "%% LINEFOLDSTART %%"
    line_end = "%% LINEFOLDEND %%"
    text = f"outer {line_start}\ninner {line_start}\nbody\nx {line_end}\ny {line_end}\ntail"
    outer = FoldRange(text.index(line_start), text.index("\ntail"))
    tracker = _tracker()

    assert tracker.fold_at(text, 0) == outer
    assert tracker.is_folded(outer)
    assert tracker.toggle_at(text, 0) == outer
    assert not tracker.is_folded(outer)
