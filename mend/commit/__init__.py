from .core import read_document, resolve_target, write_document

__all__ = ["read_document", "write_document", "resolve_target"]
