"""
Index builder: loads a directory of documents into a TermIndex and removes
stop words (terms found in every document that was read).
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path

from .tokenizer import get_tokens_from_file
from .posting import IndexStateError, TermIndex

log = logging.getLogger(__name__)

DEFAULT_DOCS_DIR = Path("p5docs")
DEFAULT_PATTERN = "*.txt"


@dataclass
class Corpus:
    """
    A built, pruned index plus what the loader learned about the documents.
    - documents: every matched document id, in listing order (ranking universe)
    - total_documents: documents that were read successfully
    - stop_words: terms removed because they appeared in every document
    - failed: document ids that could not be read
    """

    index: TermIndex
    documents: list[str]
    total_documents: int
    stop_words: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


def prune_stop_words(index: TermIndex, total_documents: int) -> list[str]:
    """
    Remove every term whose document frequency equals total_documents, then
    seal the index. Must run exactly once, after ingestion and before ranking.
    Returns the removed terms, sorted.
    """
    if total_documents < 0:
        raise ValueError(f"total_documents must be >= 0, got {total_documents}")
    if index.sealed:
        raise IndexStateError("stop words have already been removed from this index")

    stop_words = [entry.word for entry in index.entries() if entry.num_files == total_documents]
    for word in stop_words:
        index.remove_term(word)
    index.seal()

    log.info("Removed %d stop words (%d terms remain)", len(stop_words), len(index))
    return sorted(stop_words)


def list_documents(docs_dir: Path, pattern: str = DEFAULT_PATTERN) -> list[Path]:
    """Files in docs_dir matching pattern (not recursive), sorted by name."""
    docs_dir = Path(docs_dir)
    if not docs_dir.is_dir():
        raise FileNotFoundError(f"Documents directory not found: {docs_dir}")
    return sorted((p for p in docs_dir.glob(pattern) if p.is_file()), key=lambda p: str(p))


def document_id_for(filepath: Path, docs_dir: Path) -> str:
    """Document id: path relative to the documents directory, forward slashes."""
    try:
        return str(Path(filepath).relative_to(docs_dir)).replace("\\", "/")
    except ValueError:
        return Path(filepath).name


def add_document(index: TermIndex, doc_id: str, tokens: list[str]) -> None:
    """Upsert the cumulative count of every term in one document."""
    for token, count in Counter(tokens).items():
        index.upsert(token, doc_id, count)


def build_index_from_directory(
    docs_dir: Path,
    bucket_count: int,
    *,
    pattern: str = DEFAULT_PATTERN,
) -> Corpus:
    """
    Build a term index from every matching file in docs_dir and remove stop words.
    Unreadable files are skipped: they stay in the document list but do not
    count toward total_documents.
    """
    docs_dir = Path(docs_dir)
    index = TermIndex(bucket_count)
    documents: list[str] = []
    failed: list[str] = []
    total_docs = 0

    for filepath in list_documents(docs_dir, pattern):
        doc_id = document_id_for(filepath, docs_dir)
        documents.append(doc_id)
        try:
            tokens = get_tokens_from_file(filepath)
        except (OSError, ValueError) as e:
            log.warning("Cannot open %r: %s", str(filepath), e)
            failed.append(doc_id)
            continue
        add_document(index, doc_id, tokens)
        total_docs += 1

    log.info("Loaded %d of %d documents from %s", total_docs, len(documents), docs_dir)
    stop_words = prune_stop_words(index, total_docs)
    return Corpus(
        index=index,
        documents=documents,
        total_documents=total_docs,
        stop_words=stop_words,
        failed=failed,
    )
