from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from fold_anywhere.exceptions import PersistenceError
from fold_anywhere.models import FoldRange
from fold_anywhere.persistence import FoldIndexStore, dump_index, parse_index


def test_parse_index_reads_ranges_per_document():
    index = parse_index('{"a.md": [{"from": 0, "to": 5}, {"from": 7, "to": 9}], "b.md": []}')

    assert index == {"a.md": [FoldRange(0, 5), FoldRange(7, 9)], "b.md": []}


def test_parse_index_skips_invalid_entries(caplog):
    with caplog.at_level(logging.WARNING):
        index = parse_index(
            '{"a.md": [{"from": 5, "to": 1}, {"from": 0}, {"from": 2, "to": 4}, {"from": 2, "to": 4}]}'
        )

    assert index == {"a.md": [FoldRange(2, 4)]}
    assert "Skipping stored fold" in caplog.text


@pytest.mark.parametrize("text", ["not json", "[]", '{"a.md": {"from": 0, "to": 1}}'])
def test_parse_index_rejects_malformed_blobs(text: str):
    with pytest.raises(PersistenceError):
        parse_index(text)


def test_dump_index_uses_from_to_keys_and_drops_empty_documents():
    text = dump_index({"b.md": [FoldRange(1, 2)], "a.md": []})

    assert json.loads(text) == {"b.md": [{"from": 1, "to": 2}]}


def test_store_save_and_load(tmp_path: Path):
    store = FoldIndexStore(tmp_path / "folds.json")

    store.save("notes/a.md", [FoldRange(0, 10), FoldRange(20, 30)])
    store.save("notes/b.md", [FoldRange(3, 4)])

    assert store.load("notes/a.md") == [FoldRange(0, 10), FoldRange(20, 30)]
    assert store.load("notes/b.md") == [FoldRange(3, 4)]
    assert store.keys() == ["notes/a.md", "notes/b.md"]


def test_store_load_of_unknown_document(tmp_path: Path):
    store = FoldIndexStore(tmp_path / "folds.json")

    assert store.load("missing.md") == []


def test_store_recovers_from_corrupt_file(tmp_path: Path, caplog):
    path = tmp_path / "folds.json"
    path.write_text("{not json", encoding="utf-8")
    store = FoldIndexStore(path)

    with caplog.at_level(logging.WARNING):
        assert store.load("a.md") == []

    assert "Ignoring unreadable fold index" in caplog.text


def test_store_overwrites_corrupt_file_on_save(tmp_path: Path):
    path = tmp_path / "folds.json"
    path.write_text("garbage", encoding="utf-8")
    store = FoldIndexStore(path)

    store.save("a.md", [FoldRange(0, 1)])

    assert json.loads(path.read_text(encoding="utf-8")) == {"a.md": [{"from": 0, "to": 1}]}


def test_saving_no_ranges_removes_document(tmp_path: Path):
    store = FoldIndexStore(tmp_path / "folds.json")
    store.save("a.md", [FoldRange(0, 1)])

    store.save("a.md", [])

    assert store.keys() == []


def test_save_deduplicates_ranges(tmp_path: Path):
    store = FoldIndexStore(tmp_path / "folds.json")

    store.save("a.md", [FoldRange(0, 1), FoldRange(0, 1)])

    assert store.load("a.md") == [FoldRange(0, 1)]


def test_forget_removes_document(tmp_path: Path):
    store = FoldIndexStore(tmp_path / "folds.json")
    store.save("a.md", [FoldRange(0, 1)])
    store.save("b.md", [FoldRange(0, 1)])

    store.forget("a.md")
    store.forget("never-saved.md")

    assert store.keys() == ["b.md"]


def test_save_creates_parent_directories(tmp_path: Path):
    store = FoldIndexStore(tmp_path / "state" / "folds.json")

    store.save("a.md", [FoldRange(0, 1)])

    assert (tmp_path / "state" / "folds.json").is_file()


def test_save_failure_raises_persistence_error(tmp_path: Path):
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    store = FoldIndexStore(blocker / "folds.json")

    with pytest.raises(PersistenceError):
        store.save("a.md", [FoldRange(0, 1)])
