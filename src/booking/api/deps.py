"""Shared route dependencies."""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from ..services.session import BookingSession


def get_session(request: Request) -> BookingSession:
    session = getattr(request.app.state, "session", None)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Location and distance providers are not configured.",
        )
    return session
