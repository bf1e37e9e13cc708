"""Task control API: JSON-file backed task management over FastAPI."""

__version__ = "1.0.0"
