"""
Build the term index from a documents folder and print analytics.

Usage:
    python build_index.py --buckets 101
    python build_index.py --docs p5docs --buckets 7 --dump

Output:
  - Analytics table printed to console (documents, terms, stop words, bucket use)
  - With --dump, every bucket's terms and postings, one line per term followed
    by one line per document
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Iterator

from hashsearch.index_builder import DEFAULT_DOCS_DIR, DEFAULT_PATTERN, Corpus, build_index_from_directory
from hashsearch.posting import TermIndex


def dump_index(index: TermIndex) -> Iterator[str]:
    """Yield the index contents in bucket order."""
    count = 1
    for bucket, chain in index.iter_buckets():
        for entry in chain:
            yield f"{count}: number of bucket: {bucket}, word: {entry.word}, file count: {entry.num_files}"
            count += 1
            for posting in entry.get_postings():
                yield f"\tdocument_id: {posting.doc_id}, word count: {posting.occurrences}"


def index_analytics(corpus: Corpus) -> dict[str, int]:
    index = corpus.index
    chain_lengths = [len(chain) for _bucket, chain in index.iter_buckets()]
    return {
        "Documents matched": len(corpus.documents),
        "Documents read": corpus.total_documents,
        "Documents failed": len(corpus.failed),
        "Unique terms": len(index),
        "Stop words removed": len(corpus.stop_words),
        "Postings": index.total_postings(),
        "Buckets": index.bucket_count,
        "Non-empty buckets": sum(1 for n in chain_lengths if n),
        "Longest chain": max(chain_lengths, default=0),
    }


def main() -> None:
    parser = argparse.ArgumentParser(description="Build term index and print analytics")
    parser.add_argument(
        "--docs",
        type=Path,
        default=DEFAULT_DOCS_DIR,
        help="Documents folder (default: p5docs)",
    )
    parser.add_argument(
        "--pattern",
        default=DEFAULT_PATTERN,
        help="Glob pattern for documents (default: *.txt)",
    )
    parser.add_argument(
        "--buckets",
        type=int,
        default=101,
        help="Number of hash buckets",
    )
    parser.add_argument(
        "--dump",
        action="store_true",
        help="Print every bucket, term and posting",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)

    if not args.docs.is_dir():
        print(f"No documents folder found at {args.docs}.")
        sys.exit(1)
    if args.buckets < 1:
        print("Invalid Input")
        sys.exit(1)

    corpus = build_index_from_directory(args.docs, args.buckets, pattern=args.pattern)
    if corpus.total_documents == 0:
        print(f"No documents matching {args.pattern} could be read in {args.docs}.")
        sys.exit(1)

    if args.dump:
        print("Printing hashmap:")
        print()
        for line in dump_index(corpus.index):
            print(line)

    print("\n" + "=" * 50)
    print("INDEX ANALYTICS")
    print("=" * 50)
    print()
    print("| Metric                    | Value |")
    print("|---------------------------|-------|")
    for metric, value in index_analytics(corpus).items():
        print(f"| {metric:<25} | {value} |")
    print()
    if corpus.stop_words:
        print(f"Stop words: {' '.join(corpus.stop_words)}")
    print()

    corpus.index.destroy()


if __name__ == "__main__":
    main()
