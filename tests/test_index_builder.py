import logging

import pytest

import hashsearch.index_builder as builder
from hashsearch.index_builder import (
    add_document,
    build_index_from_directory,
    document_id_for,
    list_documents,
    prune_stop_words,
)
from hashsearch.posting import IndexStateError, TermIndex


def _sample_index() -> TermIndex:
    index = TermIndex(4)
    index.upsert("cat", "doc1", 2)
    index.upsert("dog", "doc1", 1)
    index.upsert("cat", "doc2", 1)
    index.upsert("dog", "doc2", 1)
    index.upsert("dog", "doc3", 1)
    return index


def test_prune_removes_terms_in_every_document():
    index = _sample_index()
    removed = prune_stop_words(index, 3)
    assert removed == ["dog"]
    assert index.lookup_term("dog") is None
    assert index.lookup_posting("cat", "doc1") == 2
    assert index.lookup_posting("cat", "doc2") == 1
    assert index.lookup_term("cat").num_files == 2
    assert all(entry.num_files != 3 for entry in index.entries())
    assert index.sealed


def test_prune_with_everything_in_one_bucket():
    index = TermIndex(1)
    for doc in ["d1", "d2"]:
        add_document(index, doc, ["a", "b", "c"])
    add_document(index, "d1", ["a", "b", "c", "only"])
    assert prune_stop_words(index, 2) == ["a", "b", "c"]
    assert list(index.terms()) == ["only"]


def test_prune_twice_fails():
    index = _sample_index()
    prune_stop_words(index, 3)
    with pytest.raises(IndexStateError):
        prune_stop_words(index, 3)


def test_prune_rejects_negative_total():
    with pytest.raises(ValueError):
        prune_stop_words(_sample_index(), -1)


def test_add_document_counts_occurrences():
    index = TermIndex(5)
    add_document(index, "doc1", ["cat", "dog", "cat", "cat"])
    assert index.lookup_posting("cat", "doc1") == 3
    assert index.lookup_posting("dog", "doc1") == 1


def test_list_documents_sorted_and_filtered(tmp_path):
    (tmp_path / "b.txt").write_text("b", encoding="utf-8")
    (tmp_path / "a.txt").write_text("a", encoding="utf-8")
    (tmp_path / "notes.md").write_text("m", encoding="utf-8")
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "c.txt").write_text("c", encoding="utf-8")
    names = [p.name for p in list_documents(tmp_path)]
    assert names == ["a.txt", "b.txt"]
    assert document_id_for(tmp_path / "a.txt", tmp_path) == "a.txt"


def test_list_documents_missing_dir(tmp_path):
    with pytest.raises(FileNotFoundError):
        list_documents(tmp_path / "missing")


def test_build_index_from_directory(tmp_path):
    (tmp_path / "doc1.txt").write_text("cat dog cat\n", encoding="utf-8")
    (tmp_path / "doc2.txt").write_text("cat dog\n", encoding="utf-8")
    (tmp_path / "doc3.txt").write_text("  dog\n", encoding="utf-8")
    corpus = build_index_from_directory(tmp_path, 4)
    assert corpus.documents == ["doc1.txt", "doc2.txt", "doc3.txt"]
    assert corpus.total_documents == 3
    assert corpus.stop_words == ["dog"]
    assert corpus.failed == []
    assert corpus.index.lookup_posting("cat", "doc1.txt") == 2
    assert corpus.index.lookup_term("dog") is None


def test_unreadable_document_not_counted(tmp_path, caplog, monkeypatch):
    (tmp_path / "doc1.txt").write_text("cat dog\n", encoding="utf-8")
    (tmp_path / "doc2.txt").write_text("dog\n", encoding="utf-8")
    (tmp_path / "doc3.txt").write_text("cat\n", encoding="utf-8")

    real = builder.get_tokens_from_file

    def flaky(path):
        if path.name == "doc3.txt":
            raise PermissionError("denied")
        return real(path)

    monkeypatch.setattr(builder, "get_tokens_from_file", flaky)
    with caplog.at_level(logging.WARNING, logger="hashsearch.index_builder"):
        corpus = build_index_from_directory(tmp_path, 3)

    assert corpus.total_documents == 2
    assert corpus.failed == ["doc3.txt"]
    assert corpus.documents == ["doc1.txt", "doc2.txt", "doc3.txt"]
    assert corpus.stop_words == ["dog"]
    assert corpus.index.lookup_posting("cat", "doc1.txt") == 1
    assert "Cannot open" in caplog.text
