from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from practice_booking.application.use_cases.booking_orchestrator import BookingOrchestrator


class BookingSessionStorePort(ABC):
    @abstractmethod
    def put(self, session_id: str, orchestrator: "BookingOrchestrator") -> None:
        raise NotImplementedError

    @abstractmethod
    def get(self, session_id: str) -> "BookingOrchestrator | None":
        raise NotImplementedError

    @abstractmethod
    def discard(self, session_id: str) -> bool:
        """Drop a session and its draft. Returns True if it existed."""
        raise NotImplementedError
