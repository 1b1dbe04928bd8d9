from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from practice_booking.application.exceptions import DraftInvariantError
from practice_booking.domain.entities.booking_draft import BookingDraft, TherapyCategory, Urgency


class AppointmentRequestPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    preferred_date: str = Field(alias="preferredDate")  # YYYY-MM-DD
    preferred_time: str = Field(alias="preferredTime")  # HH:MM
    therapy_category: TherapyCategory = Field(alias="therapyType")
    urgency: Urgency = Field(alias="urgencyLevel")
    reason: str
    provider_id: str | None = Field(default=None, alias="therapistId")
    alternative_date: str | None = Field(default=None, alias="alternativeDate")
    alternative_time: str | None = Field(default=None, alias="alternativeTime")
    additional_notes: str | None = Field(default=None, alias="additionalNotes")

    @classmethod
    def from_draft(cls, draft: BookingDraft) -> "AppointmentRequestPayload":
        """
        Flatten a draft into the request body.
        The datetime gate guarantees preferred date and time; their absence here is a bug.
        """
        if draft.preferred_date is None or not draft.preferred_time:
            raise DraftInvariantError("Preferred date and time must be set before submission")

        return cls(
            preferred_date=draft.preferred_date.isoformat(),
            preferred_time=draft.preferred_time,
            therapy_category=draft.therapy_category,
            urgency=draft.urgency,
            reason=draft.reason.strip(),
            provider_id=draft.provider_id,
            alternative_date=draft.alternative_date.isoformat() if draft.alternative_date else None,
            alternative_time=draft.alternative_time or None,
            additional_notes=(draft.additional_notes or "").strip() or None,
        )

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
