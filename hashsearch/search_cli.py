"""
Search component: TF-IDF ranking over the pruned term index and an
interactive query loop.

Every document in the universe gets a score, including 0.0; documents with a
score of exactly 0.0 are treated as not relevant when printing, but are still
written to the scores file.

Usage:
    python -m hashsearch.search_cli --docs p5docs --buckets 101
"""

from __future__ import annotations

import argparse
import logging
import math
import sys
from pathlib import Path
from typing import Iterable, List, Sequence, TextIO, Tuple

from .index_builder import DEFAULT_DOCS_DIR, DEFAULT_PATTERN, build_index_from_directory
from .posting import IndexStateError, TermIndex
from .tokenizer import tokenize

log = logging.getLogger(__name__)

DEFAULT_SCORES_PATH = Path("search_scores.txt")
EXIT_COMMAND = "X"


def tf_idf(tf: int, n_docs: int, df: int) -> float:
    return tf * math.log(n_docs / df)


def rank_documents_tf_idf(
    index: TermIndex,
    query_terms: Sequence[str],
    total_documents: int,
    known_documents: Iterable[str],
) -> List[Tuple[str, float]]:
    """
    Rank every known document for the query.

    Score(d) = sum_{t in query} ( occurrences(t, d) * ln(N / df_t) )

    Duplicate query terms add their contribution again. Terms missing from the
    index contribute nothing. Ties keep the order of known_documents.
    """
    if not index.sealed:
        raise IndexStateError("stop words must be removed before ranking")

    # Insertion order of the dict is the tie-break order.
    scores = {doc_id: 0.0 for doc_id in known_documents}

    for term in query_terms:
        entry = index.lookup_term(term)
        if entry is None:
            continue
        if total_documents < entry.num_files or total_documents <= 0:
            raise ValueError(
                f"total_documents={total_documents} is smaller than the document "
                f"frequency of {term!r} ({entry.num_files})"
            )
        for posting in entry.get_postings():
            if posting.doc_id not in scores:
                continue
            scores[posting.doc_id] += tf_idf(posting.occurrences, total_documents, entry.num_files)

    ranked = sorted(scores.items(), key=lambda x: x[1], reverse=True)
    return ranked


def format_score_line(doc_id: str, score: float) -> str:
    return f"{doc_id}   {score:.6f}"


def write_scores(fh: TextIO, ranked: Sequence[Tuple[str, float]]) -> None:
    """Write every ranked document and its score, then flush."""
    for doc_id, score in ranked:
        fh.write(format_score_line(doc_id, score) + "\n")
    fh.flush()


def read_bucket_count(raw: str) -> int | None:
    """Parse a bucket count; None if it is not an integer >= 1."""
    try:
        value = int(raw.strip())
    except ValueError:
        return None
    return value if value >= 1 else None


def run_search_loop(
    index: TermIndex,
    documents: Sequence[str],
    total_documents: int,
    scores_path: Path,
) -> None:
    """
    Interactive command-line search loop. A line holding only X, or end of
    input, ends the session.
    """
    with open(scores_path, "w", encoding="utf-8") as fh:
        while True:
            print("Enter Search String or X to Exit")
            try:
                raw_query = input()
            except (EOFError, KeyboardInterrupt):
                print()
                break

            query_terms = tokenize(raw_query)
            if query_terms == [EXIT_COMMAND]:
                break

            ranked = rank_documents_tf_idf(index, query_terms, total_documents, documents)
            for doc_id, score in ranked:
                if score != 0.0:
                    print(doc_id)
            write_scores(fh, ranked)


def main(argv: Iterable[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="TF-IDF search over a directory of documents.")
    parser.add_argument(
        "--docs",
        type=Path,
        default=DEFAULT_DOCS_DIR,
        help="Directory holding the documents to index.",
    )
    parser.add_argument(
        "--pattern",
        default=DEFAULT_PATTERN,
        help="Glob pattern selecting documents inside --docs.",
    )
    parser.add_argument(
        "--buckets",
        type=int,
        default=None,
        help="Number of hash buckets (prompted for when omitted).",
    )
    parser.add_argument(
        "--scores",
        type=Path,
        default=DEFAULT_SCORES_PATH,
        help="File that receives every document's score for each query.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress.")
    args = parser.parse_args(list(argv) if argv is not None else None)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if args.buckets is not None:
        bucket_count = args.buckets if args.buckets >= 1 else None
    else:
        print("How many buckets?:")
        try:
            bucket_count = read_bucket_count(input())
        except EOFError:
            bucket_count = None
    if bucket_count is None:
        print("Invalid Input")
        return 1

    try:
        corpus = build_index_from_directory(args.docs, bucket_count, pattern=args.pattern)
    except FileNotFoundError as e:
        print(e)
        return 1
    if corpus.total_documents == 0:
        print(f"No documents loaded from {args.docs}.")
        corpus.index.destroy()
        return 0
    log.info(
        "Index ready: %d terms over %d documents, %d buckets",
        len(corpus.index), corpus.total_documents, corpus.index.bucket_count,
    )

    try:
        run_search_loop(corpus.index, corpus.documents, corpus.total_documents, args.scores)
    finally:
        corpus.index.destroy()
    return 0


if __name__ == "__main__":
    sys.exit(main())
