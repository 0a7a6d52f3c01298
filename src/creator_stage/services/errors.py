"""Structured failures raised by the service layer.

Every error carries a ``kind`` and a human readable message. The API layer
maps each kind to an HTTP status in one place (see ``creator_stage.main``),
so services never import FastAPI.
"""

from __future__ import annotations


class ServiceError(Exception):
    """Base class for expected, caller-visible failures."""

    kind = "error"
    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"detail": self.message, "kind": self.kind}


class NotFoundError(ServiceError):
    """A referenced entity does not exist (or is not visible to the caller)."""

    kind = "not_found"
    status_code = 404


class ConflictError(ServiceError):
    """The change collides with existing state, e.g. a duplicate subscription."""

    kind = "conflict"
    status_code = 409


class ValidationError(ServiceError):
    """The request is well-formed but violates a business rule."""

    kind = "validation"
    status_code = 400


class UnauthorizedError(ServiceError):
    """The caller does not own or participate in the target entity."""

    kind = "unauthorized"
    status_code = 403
