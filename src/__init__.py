# src/__init__.py — v2
"""books_datastore: write-through cache + document store data-access layer."""

from books_datastore.version import __version__

__all__ = ["__version__"]
