# mend/utils/__init__.py
from .text import Document, detect_eol, join_document, split_document

__all__ = [
    "Document",
    "detect_eol",
    "split_document",
    "join_document",
]
