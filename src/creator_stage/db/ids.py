"""Identifier generation for persisted entities."""

from uuid import uuid4


def new_id() -> str:
    """Return a random UUID4 rendered as a string primary key."""
    return str(uuid4())
