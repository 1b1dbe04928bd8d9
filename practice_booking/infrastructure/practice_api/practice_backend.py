from __future__ import annotations

import logging
from datetime import date
from typing import Any

from practice_booking.application.dto.appointment_request import AppointmentRequestPayload
from practice_booking.application.exceptions import (
    PracticeApiContractError,
    PracticeApiUpstreamError,
    SubmissionRejectedError,
)
from practice_booking.application.ports.appointment_requests import AppointmentRequestPort
from practice_booking.application.ports.availability import AvailabilityPort
from practice_booking.application.ports.provider_directory import ProviderDirectoryPort
from practice_booking.domain.entities.scheduling import (
    ClientContext,
    ProviderAssignment,
    SubmissionReceipt,
    TimeSlot,
)
from practice_booking.infrastructure.practice_api.practice_client import PracticeApiClient, unwrap_envelope


class PracticeApiBackend(ProviderDirectoryPort, AvailabilityPort, AppointmentRequestPort):
    """
    Practice backend over HTTP. One instance per client session: requests carry that client's
    bearer token so provider lookup and submission run as the client. The underlying
    PracticeApiClient (and its connection pool) is shared.
    """

    def __init__(self, client: PracticeApiClient, access_token: str | None = None) -> None:
        self._client = client
        self._access_token = access_token
        self._logger = logging.getLogger(__name__)

    def for_client(self, context: ClientContext) -> PracticeApiBackend:
        return PracticeApiBackend(self._client, access_token=context.access_token)

    @property
    def closed(self) -> bool:
        return self._client.is_closed

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get_assigned_provider(self) -> ProviderAssignment | None:
        response = await self._client.get("/client/therapist", access_token=self._access_token)
        if response.status_code == 404:
            return None
        if response.status_code >= 400:
            raise PracticeApiUpstreamError(f"Provider lookup returned {response.status_code}")

        success, message, data = unwrap_envelope(response)
        if not success or not data:
            self._logger.info("No assigned provider", extra={"reason": message})
            return None
        if not isinstance(data, dict) or not data.get("id"):
            raise PracticeApiContractError("Provider payload has no id")

        name = " ".join(part for part in (data.get("first_name"), data.get("last_name")) if part)
        return ProviderAssignment(
            id=str(data["id"]),
            display_name=name or str(data["id"]),
            specializations=tuple(data.get("specializations") or ()),
        )

    async def get_available_slots(self, provider_id: str, date: date) -> list[TimeSlot]:
        response = await self._client.get(
            "/appointments/available-slots",
            params={"therapistId": provider_id, "date": date.isoformat()},
            access_token=self._access_token,
        )
        if response.status_code >= 400:
            raise PracticeApiUpstreamError(f"Slot lookup returned {response.status_code}")

        success, message, data = unwrap_envelope(response)
        if not success:
            raise PracticeApiUpstreamError(message or "Slot lookup failed")

        # Backend nests slots under data.slots in newer versions
        raw_slots = data.get("slots", []) if isinstance(data, dict) else data
        if not isinstance(raw_slots, list):
            raise PracticeApiContractError("Slot payload is not a list")
        return [_parse_slot(item) for item in raw_slots]

    async def submit_appointment_request(self, payload: AppointmentRequestPayload) -> SubmissionReceipt:
        response = await self._client.post(
            "/client/appointments/request",
            json=payload.to_wire(),
            access_token=self._access_token,
        )
        if 400 <= response.status_code < 500:
            message = _error_message(response)
            raise SubmissionRejectedError(message or f"Appointment request returned {response.status_code}")

        success, message, data = unwrap_envelope(response)
        if not success:
            raise SubmissionRejectedError(message or "Appointment request was not accepted")

        data = data if isinstance(data, dict) else {}
        request_id = data.get("id")
        return SubmissionReceipt(
            request_id=str(request_id) if request_id is not None else None,
            status=data.get("status"),
        )


def _parse_slot(item: Any) -> TimeSlot:
    if isinstance(item, str):
        return TimeSlot(time=item, available=True)
    if isinstance(item, dict) and item.get("time"):
        return TimeSlot(time=str(item["time"]), available=bool(item.get("available", True)))
    raise PracticeApiContractError(f"Unrecognised slot entry: {item!r}")


def _error_message(response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        return body.get("message")
    return None
