from __future__ import annotations

from collections import OrderedDict

from practice_booking.application.ports.session_store import BookingSessionStorePort
from practice_booking.application.use_cases.booking_orchestrator import BookingOrchestrator


class MemoryBookingSessionStore(BookingSessionStorePort):
    def __init__(self, session_limit: int = 1000) -> None:
        self._sessions: OrderedDict[str, BookingOrchestrator] = OrderedDict()
        self._session_limit = session_limit

    def put(self, session_id: str, orchestrator: BookingOrchestrator) -> None:
        self._sessions[session_id] = orchestrator
        self._sessions.move_to_end(session_id)
        # Oldest sessions are abandoned once the limit is reached
        while len(self._sessions) > self._session_limit:
            _, evicted = self._sessions.popitem(last=False)
            evicted.abandon()

    def get(self, session_id: str) -> BookingOrchestrator | None:
        orchestrator = self._sessions.get(session_id)
        if orchestrator is not None:
            self._sessions.move_to_end(session_id)
        return orchestrator

    def discard(self, session_id: str) -> bool:
        orchestrator = self._sessions.pop(session_id, None)
        if orchestrator is None:
            return False
        orchestrator.abandon()
        return True

    def __len__(self) -> int:
        return len(self._sessions)
