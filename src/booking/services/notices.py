"""User-visible notices raised by the booking components."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Literal, Protocol

logger = logging.getLogger(__name__)

SEARCH_FAILED = "Failed to search location. Please check your Google Maps API key."
DETAILS_FAILED = "Failed to get location details"
DISTANCE_FAILED = "Failed to calculate distance"
SPLIT_CREATED = "Split assignment created successfully"
ASSIGNMENT_CREATED = "Assignment created successfully"


class NoticeSink(Protocol):
    def error(self, message: str) -> None:
        ...

    def success(self, message: str) -> None:
        ...


@dataclass(slots=True)
class Notice:
    level: Literal["error", "success"]
    message: str


class NoticeLog:
    """Default sink: keeps notices in arrival order and logs each one."""

    def __init__(self) -> None:
        self.notices: List[Notice] = []

    def error(self, message: str) -> None:
        logger.warning(f"Notice (error): {message}")
        self.notices.append(Notice("error", message))

    def success(self, message: str) -> None:
        logger.info(f"Notice (success): {message}")
        self.notices.append(Notice("success", message))

    @property
    def errors(self) -> list[str]:
        return [notice.message for notice in self.notices if notice.level == "error"]

    def drain(self) -> list[Notice]:
        drained, self.notices = self.notices, []
        return drained
