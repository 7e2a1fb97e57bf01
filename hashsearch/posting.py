"""
Posting and term index data structures.

A posting records how many times a term occurs in one document.
The term index is a fixed-size hash table keyed by term; each bucket holds a
chain of term entries, and each entry owns its postings keyed by document id.
"""

from dataclasses import dataclass, field
from typing import Iterator

# The hash accumulator wraps like a 64-bit unsigned long.
_HASH_MASK = (1 << 64) - 1
HASH_MULTIPLIER = 37


class IndexStateError(RuntimeError):
    """Raised when the index is used outside its build -> prune -> destroy lifecycle."""


@dataclass
class Posting:
    """
    Represents a term's occurrence in a document.
    - doc_id: document identifier (unique within one term's postings)
    - occurrences: number of times the term appears in the document (>= 1)
    """

    doc_id: str
    occurrences: int

    def __repr__(self) -> str:
        return f"Posting(doc_id={self.doc_id!r}, occurrences={self.occurrences})"


@dataclass
class TermEntry:
    """A term and its postings, in insertion order."""

    word: str
    postings: dict[str, Posting] = field(default_factory=dict)

    @property
    def num_files(self) -> int:
        """Document frequency: number of distinct documents containing the term."""
        return len(self.postings)

    def get_postings(self) -> list[Posting]:
        return list(self.postings.values())


def hash_term(word: str, bucket_count: int) -> int:
    """Fold each character into acc * 37 + ord(ch), then reduce by bucket count."""
    acc = 0
    for ch in word:
        acc = (acc * HASH_MULTIPLIER + ord(ch)) & _HASH_MASK
    return acc % bucket_count


class TermIndex:
    """
    Inverted index: hash table from term -> TermEntry, chained on collision.
    The bucket count is fixed for the life of the index (no rehashing).
    """

    def __init__(self, bucket_count: int) -> None:
        if isinstance(bucket_count, bool) or not isinstance(bucket_count, int):
            raise ValueError(f"bucket_count must be an integer, got {bucket_count!r}")
        if bucket_count < 1:
            raise ValueError(f"bucket_count must be >= 1, got {bucket_count}")
        self.bucket_count = bucket_count
        self._buckets: list[list[TermEntry]] = [[] for _ in range(bucket_count)]
        self._sealed = False
        self._destroyed = False

    @property
    def sealed(self) -> bool:
        """True once stop words have been removed; the index is read-only then."""
        return self._sealed

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    def seal(self) -> None:
        self._check_alive()
        if self._sealed:
            raise IndexStateError("index is already sealed")
        self._sealed = True

    def destroy(self) -> None:
        """Release every bucket, term entry and posting. Not callable twice."""
        if self._destroyed:
            raise IndexStateError("index has already been destroyed")
        for chain in self._buckets:
            for entry in chain:
                entry.postings.clear()
            chain.clear()
        self._buckets = []
        self._destroyed = True

    def _check_alive(self) -> None:
        if self._destroyed:
            raise IndexStateError("index has been destroyed")

    def _check_mutable(self) -> None:
        self._check_alive()
        if self._sealed:
            raise IndexStateError("index is read-only after stop-word removal")

    def bucket_for(self, word: str) -> int:
        return hash_term(word, self.bucket_count)

    def _find_entry(self, word: str) -> TermEntry | None:
        for entry in self._buckets[self.bucket_for(word)]:
            if entry.word == word:
                return entry
        return None

    def upsert(self, word: str, doc_id: str, occurrences: int) -> None:
        """
        Find or create the entry for word and the posting for doc_id, then set
        the posting's count (last write wins, counts are not added).
        """
        self._check_mutable()
        if occurrences < 1:
            raise ValueError(f"occurrences must be >= 1, got {occurrences}")
        entry = self._find_entry(word)
        if entry is None:
            entry = TermEntry(word=word)
            # New entries go to the head of the chain.
            self._buckets[self.bucket_for(word)].insert(0, entry)
        posting = entry.postings.get(doc_id)
        if posting is None:
            entry.postings[doc_id] = Posting(doc_id=doc_id, occurrences=occurrences)
        else:
            posting.occurrences = occurrences

    def increment(self, word: str, doc_id: str, by: int = 1) -> int:
        """Add `by` to the count of word in doc_id and return the new count."""
        current = self.lookup_posting(word, doc_id) or 0
        self.upsert(word, doc_id, current + by)
        return current + by

    def remove_term(self, word: str) -> bool:
        """Delete the entry for word and all its postings. Returns False if absent."""
        self._check_mutable()
        chain = self._buckets[self.bucket_for(word)]
        for i, entry in enumerate(chain):
            if entry.word == word:
                entry.postings.clear()
                del chain[i]
                return True
        return False

    def lookup_term(self, word: str) -> TermEntry | None:
        """Return the entry for word, or None if the term is not indexed."""
        self._check_alive()
        return self._find_entry(word)

    def lookup_posting(self, word: str, doc_id: str) -> int | None:
        """Return the occurrence count of word in doc_id, or None if either is absent."""
        entry = self.lookup_term(word)
        if entry is None:
            return None
        posting = entry.postings.get(doc_id)
        return None if posting is None else posting.occurrences

    def iter_buckets(self) -> Iterator[tuple[int, list[TermEntry]]]:
        """Iterate over (bucket number, chain) pairs, including empty buckets."""
        self._check_alive()
        for i, chain in enumerate(self._buckets):
            yield i, list(chain)

    def entries(self) -> Iterator[TermEntry]:
        self._check_alive()
        for chain in self._buckets:
            yield from list(chain)

    def terms(self) -> Iterator[str]:
        """Iterate over all terms in the index."""
        return (entry.word for entry in self.entries())

    def total_postings(self) -> int:
        return sum(entry.num_files for entry in self.entries())

    def __len__(self) -> int:
        self._check_alive()
        return sum(len(chain) for chain in self._buckets)

    def __contains__(self, word: str) -> bool:
        return self.lookup_term(word) is not None
