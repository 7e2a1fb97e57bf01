"""
Document reader and tokenizer for the term index.
Splits text on runs of whitespace; case and punctuation are kept as written.
HTML documents have their visible text extracted before tokenizing.
"""

import warnings
from pathlib import Path
from bs4 import BeautifulSoup, XMLParsedAsHTMLWarning, MarkupResemblesLocatorWarning
warnings.filterwarnings("ignore", category=XMLParsedAsHTMLWarning)
warnings.filterwarnings("ignore", category=MarkupResemblesLocatorWarning)

from nltk.tokenize import WhitespaceTokenizer

_TOKENIZER = WhitespaceTokenizer()

HTML_SUFFIXES = {".html", ".htm"}


def tokenize(text: str) -> list[str]:
    """
    Split text into terms on any run of whitespace (space, tab, newline, ...).
    Empty fragments are discarded, so blank or all-whitespace input gives [].
    """
    if not text:
        return []
    return _TOKENIZER.tokenize(text)


def extract_text_from_html(html_content: str) -> str:
    """
    Extract visible text from HTML content, stripping tags and scripts.
    """
    soup = BeautifulSoup(html_content, "lxml")
    for element in soup(["script", "style"]):
        element.decompose()
    return soup.get_text(separator=" ", strip=True)


def read_document_file(filepath: Path) -> str:
    """
    Read document content, handling common encodings.
    """
    for encoding in ("utf-8", "latin-1", "cp1252"):
        try:
            return Path(filepath).read_text(encoding=encoding)
        except UnicodeDecodeError:
            continue
    raise ValueError(f"Could not decode file: {filepath}")


def get_tokens_from_file(filepath: Path) -> list[str]:
    """Read a document and return its terms; HTML files are reduced to their text first."""
    filepath = Path(filepath)
    content = read_document_file(filepath)
    if filepath.suffix.lower() in HTML_SUFFIXES:
        content = extract_text_from_html(content)
    return tokenize(content)
