"""Building blocks for an LSM-tree key-value store: keys, iterators, watermarks, files and counters."""

__version__ = "0.1.0"
__all__ = ["closer", "errors", "files", "iterator", "keys", "metrics", "mmapping", "watermark"]