from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class TimeSlot:
    time: str  # HH:MM
    available: bool = True


@dataclass(frozen=True)
class CalendarCell:
    day: int | None  # None for leading blank cells
    is_past: bool = False
    is_today: bool = False
    is_selected: bool = False
    is_primary_selection: bool = False


@dataclass(frozen=True)
class ProviderAssignment:
    id: str
    display_name: str
    specializations: tuple[str, ...] = ()


@dataclass(frozen=True)
class ClientContext:
    client_id: str
    display_name: str | None = None
    access_token: str | None = field(default=None, repr=False)  # client credentials for backend calls


@dataclass(frozen=True)
class SubmissionReceipt:
    request_id: str | None = None
    status: str | None = None
