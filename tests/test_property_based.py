from __future__ import annotations

from hypothesis import given
from hypothesis import strategies as st

from fold_anywhere.config import MarkerConfig
from fold_anywhere.editing import remove_markers, wrap_selection
from fold_anywhere.matcher import match_regions
from fold_anywhere.query import all_foldable_ranges, enclosing_range_at
from fold_anywhere.scanner import scan
from fold_anywhere.tracker import FoldStateTracker

CONFIG = MarkerConfig()
START = CONFIG.start_marker
END = CONFIG.end_marker

# Balanced parenthesis strings, e.g. "(()())"
balanced = st.recursive(
    st.just(""),
    lambda inner: st.builds(lambda a, b: f"({a}){b}", inner, inner),
    max_leaves=12,
)
non_empty = st.builds(lambda a, b: f"({a}){b}", balanced, balanced)
separators = st.sampled_from([" ", " text ", "\n", " x\n"])


def _render(shape: str, separator: str) -> str:
    tokens = [START if char == "(" else END for char in shape]
    return separator.join(tokens)


@given(balanced, separators)
def test_well_nested_markers_yield_one_range_per_pair(shape: str, separator: str):
    text = _render(shape, separator)

    ranges = all_foldable_ranges(text, CONFIG)

    assert len(ranges) == shape.count("(")
    assert all(fold_range.from_ < fold_range.to for fold_range in ranges)


@given(st.lists(st.sampled_from([START, END, "word", "\n", " "]), max_size=30))
def test_ranges_never_partially_overlap(parts: list[str]):
    text = "".join(parts)

    ranges = match_regions(scan(text, CONFIG))

    for first in ranges:
        for second in ranges:
            disjoint = first.to <= second.from_ or second.to <= first.from_
            nested = (first.from_ <= second.from_ and second.to <= first.to) or (
                second.from_ <= first.from_ and first.to <= second.to
            )
            assert disjoint or nested


@given(non_empty, separators, st.data())
def test_enclosing_range_is_innermost(shape: str, separator: str, data):
    text = _render(shape, separator)
    point = data.draw(st.integers(min_value=0, max_value=len(text)))

    found = enclosing_range_at(text, CONFIG, point)
    containing = [
        fold_range for fold_range in match_regions(scan(text, CONFIG)) if fold_range.contains(point)
    ]

    if not containing:
        assert found is None
    else:
        assert found is not None
        assert found.span == min(fold_range.span for fold_range in containing)


@given(non_empty, separators, st.data())
def test_fold_unfold_round_trip(shape: str, separator: str, data):
    text = _render(shape, separator)
    fold_range = data.draw(st.sampled_from(all_foldable_ranges(text, CONFIG)))
    tracker = FoldStateTracker(CONFIG)

    tracker.request_fold(text, fold_range)
    assert tracker.is_folded(fold_range)

    tracker.request_unfold(fold_range)
    assert not tracker.is_folded(fold_range)


@given(st.text(alphabet="abc \n", max_size=40))
def test_queries_never_raise_on_marker_free_text(text: str):
    assert all_foldable_ranges(text, CONFIG) == []
    assert enclosing_range_at(text, CONFIG, len(text) // 2) is None


@given(st.lists(st.text(alphabet="abcdef", min_size=1, max_size=6), min_size=1, max_size=6))
def test_wrap_then_remove_keeps_words(words: list[str]):
    text = " ".join(words)

    wrapped = wrap_selection(text, 0, len(text), CONFIG)

    assert remove_markers(wrapped.text, CONFIG).split() == words
