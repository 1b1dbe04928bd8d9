import datetime

from pydantic import BaseModel, Field

from practice_booking.domain.entities.booking_draft import TherapyCategory, Urgency

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class ProviderSchema(BaseModel):
    id: str
    display_name: str
    specializations: list[str] = Field(default_factory=list)


class TimeSlotSchema(BaseModel):
    time: str
    available: bool


class DraftSchema(BaseModel):
    provider_id: str | None = None
    provider_name: str | None = None
    preferred_date: datetime.date | None = None
    preferred_time: str | None = None
    alternative_date: datetime.date | None = None
    alternative_time: str | None = None
    therapy_category: TherapyCategory = TherapyCategory.individual
    urgency: Urgency = Urgency.normal
    reason: str = ""
    additional_notes: str | None = None


class BookingSnapshotSchema(BaseModel):
    session_id: str
    step: str
    notice: str | None = None
    provider: ProviderSchema | None = None
    draft: DraftSchema
    slots: list[TimeSlotSchema] = Field(default_factory=list)
    slots_loading: bool = False
    request_id: str | None = None
    summary: dict[str, str | None] | None = None


class CalendarCellSchema(BaseModel):
    day: int | None
    is_past: bool
    is_today: bool
    is_selected: bool
    is_primary_selection: bool


class CalendarSchema(BaseModel):
    year: int
    month: int
    cells: list[CalendarCellSchema]


class DateRequestSchema(BaseModel):
    date: datetime.date


class TimeRequestSchema(BaseModel):
    time: str = Field(pattern=TIME_PATTERN)


class AlternativeRequestSchema(BaseModel):
    date: datetime.date | None = None
    time: str | None = Field(default=None, pattern=TIME_PATTERN)


class DetailsRequestSchema(BaseModel):
    therapy_type: TherapyCategory | None = None
    urgency_level: Urgency | None = None
    reason: str | None = Field(default=None, max_length=5000)
    additional_notes: str | None = Field(default=None, max_length=5000)
