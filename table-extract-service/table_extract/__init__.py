"""
Top-level package for the Table Extract Service.

This package exposes:
- Table data model and error taxonomy
- AI extraction (Gemini structured output)
- HTTP relay API (FastAPI)
- Async relay client, presentation helpers and CLI entrypoints
"""

__all__ = [
    "schema",
    "errors",
    "extractor",
    "client",
    "presentation",
]
