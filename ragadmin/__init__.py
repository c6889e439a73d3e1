"""FAQ knowledge-base building blocks: CSV loading, vector indexing and retrieval, and SQLite record storage."""

__version__ = "0.1.0"