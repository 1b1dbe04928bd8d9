from __future__ import annotations

import copy
import logging
from datetime import date

from practice_booking.application.dto.appointment_request import AppointmentRequestPayload
from practice_booking.application.ports.appointment_requests import AppointmentRequestPort
from practice_booking.application.ports.availability import AvailabilityPort
from practice_booking.application.ports.provider_directory import ProviderDirectoryPort
from practice_booking.domain.entities.scheduling import (
    ClientContext,
    ProviderAssignment,
    SubmissionReceipt,
    TimeSlot,
)


class MockPracticeBackend(ProviderDirectoryPort, AvailabilityPort, AppointmentRequestPort):
    """
    In-memory stand-in for the practice backend.

    `assignments` maps client ids to their provider; `provider` is the answer for everyone else.
    Views returned by for_client() share the stored requests, so a submitted slot shows as taken
    for every client.
    """

    def __init__(
        self,
        provider: ProviderAssignment | None = None,
        start_hour: int = 9,
        end_hour: int = 17,
        assignments: dict[str, ProviderAssignment] | None = None,
    ) -> None:
        self._provider = provider
        self._assignments = dict(assignments or {})
        self._client_id: str | None = None
        self._start_hour = start_hour
        self._end_hour = end_hour
        self._requests: dict[str, AppointmentRequestPayload] = {}
        self._logger = logging.getLogger(__name__)

    def for_client(self, context: ClientContext) -> MockPracticeBackend:
        view = copy.copy(self)
        view._client_id = context.client_id
        return view

    async def aclose(self) -> None:
        return None

    @property
    def requests(self) -> dict[str, AppointmentRequestPayload]:
        return dict(self._requests)

    async def get_assigned_provider(self) -> ProviderAssignment | None:
        return self._assignments.get(self._client_id, self._provider)

    async def get_available_slots(self, provider_id: str, date: date) -> list[TimeSlot]:
        taken = {
            payload.preferred_time
            for payload in self._requests.values()
            if payload.provider_id == provider_id and payload.preferred_date == date.isoformat()
        }
        return [
            TimeSlot(time=f"{hour:02d}:00", available=f"{hour:02d}:00" not in taken)
            for hour in range(self._start_hour, self._end_hour + 1)
        ]

    async def submit_appointment_request(self, payload: AppointmentRequestPayload) -> SubmissionReceipt:
        request_id = f"mock_request_{len(self._requests) + 1}"
        self._requests[request_id] = payload
        self._logger.info(
            "Mock appointment request stored",
            extra={
                "request_id": request_id,
                "date": payload.preferred_date,
                "time": payload.preferred_time,
                "provider_id": payload.provider_id,
                "client_id": self._client_id,
            },
        )
        return SubmissionReceipt(request_id=request_id, status="pending")
