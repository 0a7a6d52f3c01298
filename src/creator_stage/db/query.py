# src/creator_stage/db/query.py
"""Helpers for building SQL filters from user input."""

LIKE_ESCAPE = "\\"


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so ``term`` matches literally; pair with ``escape=LIKE_ESCAPE``."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
