"""Building blocks of an embedded key/value store: entries, errors and a file-handle cache."""

__version__ = "0.1.0"