"""In-memory term index with stop-word removal and TF-IDF search."""

from .posting import Posting, TermEntry, TermIndex, IndexStateError, hash_term
from .index_builder import Corpus, build_index_from_directory, prune_stop_words
from .search_cli import rank_documents_tf_idf
from .tokenizer import tokenize
