"""Exceptions raised by the NGO API services."""

from __future__ import annotations

from typing import Optional

from .envelope import ErrorMessage


class NgoError(RuntimeError):
    """Base error; carries the status code and message sent to clients."""

    default = ErrorMessage.INVALID_REQUEST

    def __init__(self, error: Optional[ErrorMessage] = None) -> None:
        self.error = error or self.default
        super().__init__(self.error.message)

    @property
    def status(self) -> int:
        return self.error.status

    @property
    def message(self) -> str:
        return self.error.message


class NotFoundError(NgoError):
    """A referenced user or other entity does not exist."""

    default = ErrorMessage.USER_NOT_FOUND


class ConflictError(NgoError):
    """A uniqueness rule would be violated."""

    default = ErrorMessage.ATTENDANCE_ALREADY_EXIST


class IngestionFailure(NgoError):
    """Fetching or persisting generated news failed."""

    default = ErrorMessage.NEWS_GENERATION_FAILED


__all__ = ["NgoError", "NotFoundError", "ConflictError", "IngestionFailure"]
