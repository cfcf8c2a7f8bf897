from __future__ import annotations

import os

import pytest

from fold_anywhere.config import MarkerConfig
from fold_anywhere.query import all_foldable_ranges, enclosing_range_at, range_starting_at

atheris = pytest.importorskip("atheris")

CONFIG = MarkerConfig()
FRAGMENTS = [
    CONFIG.start_marker,
    CONFIG.end_marker,
    CONFIG.line_fold_marker,
    CONFIG.line_fold_end_marker,
    "\n",
    " ",
    "text",
]


def test_queries_with_fuzzed_documents():
    data = os.urandom(4096)
    provider = atheris.FuzzedDataProvider(data)
    checked = 0

    while provider.remaining_bytes() > 0 and checked < 64:
        parts = [
            FRAGMENTS[provider.ConsumeIntInRange(0, len(FRAGMENTS) - 1)]
            for _ in range(provider.ConsumeIntInRange(0, 24))
        ]
        text = "".join(parts)
        point = provider.ConsumeIntInRange(0, len(text))

        for fold_range in all_foldable_ranges(text, CONFIG):
            assert 0 <= fold_range.from_ < fold_range.to <= len(text)

        found = enclosing_range_at(text, CONFIG, point)
        if found is not None:
            assert found.from_ < found.to
        range_starting_at(text, CONFIG, point)
        checked += 1

    assert checked  # ensure we exercised the loop
