"""Test doubles for the booking ports."""

from __future__ import annotations

import asyncio
from datetime import date

from practice_booking.application.dto.appointment_request import AppointmentRequestPayload
from practice_booking.application.exceptions import PracticeApiUpstreamError, SubmissionRejectedError
from practice_booking.application.ports.appointment_requests import AppointmentRequestPort
from practice_booking.application.ports.availability import AvailabilityPort
from practice_booking.application.ports.provider_directory import ProviderDirectoryPort
from practice_booking.application.use_cases.booking_orchestrator import BookingOrchestrator
from practice_booking.application.use_cases.slot_resolver import SlotResolver
from practice_booking.domain.entities.scheduling import (
    ClientContext,
    ProviderAssignment,
    SubmissionReceipt,
    TimeSlot,
)

TODAY = date(2024, 6, 20)

PROVIDER = ProviderAssignment(id="t-42", display_name="Anna de Vries", specializations=("anxiety", "burnout"))


class StaticProviderDirectory(ProviderDirectoryPort):
    def __init__(self, provider: ProviderAssignment | None = None, fail: bool = False) -> None:
        self._provider = provider
        self._fail = fail
        self.calls = 0

    async def get_assigned_provider(self) -> ProviderAssignment | None:
        self.calls += 1
        if self._fail:
            raise PracticeApiUpstreamError("provider lookup timed out")
        return self._provider


class GatedAvailability(AvailabilityPort):
    """Slot lookups block until the test releases the date they were issued for."""

    def __init__(self, slots_by_date: dict[date, list[TimeSlot]] | None = None, gated: bool = False) -> None:
        self._slots_by_date = slots_by_date or {}
        self._gated = gated
        self._gates: dict[date, asyncio.Event] = {}
        self.calls: list[tuple[str, date]] = []

    def release(self, day: date) -> None:
        self._gates.setdefault(day, asyncio.Event()).set()

    async def get_available_slots(self, provider_id: str, date: date) -> list[TimeSlot]:
        self.calls.append((provider_id, date))
        if self._gated:
            await self._gates.setdefault(date, asyncio.Event()).wait()
        return list(self._slots_by_date.get(date, [TimeSlot(time="10:00"), TimeSlot(time="11:00", available=False)]))


class RecordingRequests(AppointmentRequestPort):
    """Records payloads; when gated, each request waits until the test calls release()."""

    def __init__(self, failures: int = 0, gated: bool = False) -> None:
        self._failures = failures
        self._gate = asyncio.Event() if gated else None
        self.payloads: list[AppointmentRequestPayload] = []

    def release(self) -> None:
        if self._gate is not None:
            self._gate.set()

    async def submit_appointment_request(self, payload: AppointmentRequestPayload) -> SubmissionReceipt:
        self.payloads.append(payload)
        if self._gate is not None:
            await self._gate.wait()
        if self._failures > 0:
            self._failures -= 1
            raise SubmissionRejectedError("backend unavailable")
        return SubmissionReceipt(request_id=f"req-{len(self.payloads)}", status="pending")


def make_orchestrator(
    provider: ProviderAssignment | None = None,
    availability: AvailabilityPort | None = None,
    requests: AppointmentRequestPort | None = None,
    directory: ProviderDirectoryPort | None = None,
) -> BookingOrchestrator:
    return BookingOrchestrator(
        context=ClientContext(client_id="client-7", display_name="Sam"),
        provider_directory=directory or StaticProviderDirectory(provider),
        slot_resolver=SlotResolver(availability or GatedAvailability()),
        appointment_requests=requests or RecordingRequests(),
        today=lambda: TODAY,
    )
