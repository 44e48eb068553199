"""Error types raised across component boundaries."""

from __future__ import annotations

from typing import Optional

GENERIC_FAILURE_MESSAGE = "Operation failed. Please try again."


class ResolutionError(Exception):
    """A geocoding, distance or pricing provider failed to answer."""


class SubmissionError(Exception):
    """The backend rejected an assignment or split payload.

    ``detail`` holds the collaborator's own message when it sent one.
    """

    def __init__(self, detail: Optional[str] = None, status_code: Optional[int] = None) -> None:
        self.detail = detail or None
        self.status_code = status_code
        super().__init__(self.user_message)

    @property
    def user_message(self) -> str:
        return self.detail or GENERIC_FAILURE_MESSAGE
