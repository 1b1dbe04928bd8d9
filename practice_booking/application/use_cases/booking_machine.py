from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from enum import Enum

from practice_booking.domain.entities.booking_draft import BookingDraft
from practice_booking.domain.entities.scheduling import ProviderAssignment, TimeSlot


class BookingStep(str, Enum):
    provider_selection = "provider_selection"
    datetime_selection = "datetime_selection"
    details = "details"
    confirmation = "confirmation"
    success = "success"


STEP_ORDER = (
    BookingStep.provider_selection,
    BookingStep.datetime_selection,
    BookingStep.details,
    BookingStep.confirmation,
    BookingStep.success,
)

UNASSIGNED_NOTICE = (
    "You haven't been assigned a therapist yet. Your appointment request will be reviewed by our "
    "admin team who will assign the best therapist for your needs."
)


@dataclass(frozen=True)
class BookingMachineState:
    step: BookingStep = BookingStep.provider_selection
    provider: ProviderAssignment | None = None
    provider_pending: bool = True
    notice: str | None = None
    selected_date: date | None = None  # correlation key for in-flight slot requests
    slots: tuple[TimeSlot, ...] = ()
    slots_loading: bool = False
    error: str | None = None  # reason the last event was rejected
    request_id: str | None = None
    submitting: bool = False  # draft is locked while a submission is in flight


# Events


@dataclass(frozen=True)
class ProviderResolved:
    provider: ProviderAssignment | None


@dataclass(frozen=True)
class Advance:
    pass


@dataclass(frozen=True)
class GoBack:
    pass


@dataclass(frozen=True)
class DateSelected:
    day: date
    today: date


@dataclass(frozen=True)
class SlotsResolved:
    day: date
    slots: tuple[TimeSlot, ...]


@dataclass(frozen=True)
class TimeSelected:
    time: str


@dataclass(frozen=True)
class AlternativeSelected:
    day: date | None
    time: str | None
    today: date


@dataclass(frozen=True)
class DetailsEdited:
    pass


@dataclass(frozen=True)
class SubmissionStarted:
    pass


@dataclass(frozen=True)
class SubmissionSucceeded:
    request_id: str | None


@dataclass(frozen=True)
class SubmissionFailed:
    error: str


BookingEvent = (
    ProviderResolved
    | Advance
    | GoBack
    | DateSelected
    | SlotsResolved
    | TimeSelected
    | AlternativeSelected
    | DetailsEdited
    | SubmissionStarted
    | SubmissionSucceeded
    | SubmissionFailed
)


def gate_error(step: BookingStep, draft: BookingDraft) -> str | None:
    """Validation that must pass before leaving a step forward. None means the gate is open."""
    if step == BookingStep.datetime_selection:
        if draft.preferred_date is None or not draft.preferred_time:
            return "Select a preferred date and time to continue"
    elif step == BookingStep.details:
        if not draft.reason.strip():
            return "Describe the reason for your appointment to continue"
    elif step == BookingStep.confirmation:
        return "Submit the appointment request to continue"
    elif step == BookingStep.success:
        return "Appointment request already submitted"
    return None


def _reject(state: BookingMachineState, error: str) -> BookingMachineState:
    return replace(state, error=error)


def _accept(state: BookingMachineState, **changes) -> BookingMachineState:
    return replace(state, error=None, **changes)


def reduce(state: BookingMachineState, event: BookingEvent, draft: BookingDraft) -> BookingMachineState:
    """
    Pure transition function. The draft is only read here; the orchestrator applies draft
    changes for accepted events.
    """
    if isinstance(event, ProviderResolved):
        if event.provider is not None:
            return _accept(
                state,
                provider=event.provider,
                provider_pending=False,
                notice=None,
                step=BookingStep.datetime_selection,
            )
        return _accept(
            state,
            provider=None,
            provider_pending=False,
            notice=UNASSIGNED_NOTICE,
            step=BookingStep.provider_selection,
        )

    if isinstance(event, SlotsResolved):
        if state.selected_date != event.day:
            # Stale response for a date that is no longer selected
            return state
        return _accept(state, slots=tuple(event.slots), slots_loading=False)

    if state.step == BookingStep.success:
        return _reject(state, "Appointment request already submitted")

    if isinstance(event, SubmissionSucceeded):
        if state.step != BookingStep.confirmation or not state.submitting:
            return _reject(state, "Appointment requests are submitted from the confirmation step")
        return _accept(state, step=BookingStep.success, request_id=event.request_id, submitting=False)

    if isinstance(event, SubmissionFailed):
        return replace(state, error=event.error, submitting=False)

    if state.submitting:
        return _reject(state, "Appointment request is being submitted")

    if isinstance(event, SubmissionStarted):
        if state.step != BookingStep.confirmation:
            return _reject(state, "Appointment requests are submitted from the confirmation step")
        return _accept(state, submitting=True)

    if isinstance(event, Advance):
        if state.provider_pending:
            return _reject(state, "Still checking your assigned therapist")
        error = gate_error(state.step, draft)
        if error:
            return _reject(state, error)
        return _accept(state, step=STEP_ORDER[STEP_ORDER.index(state.step) + 1])

    if isinstance(event, GoBack):
        index = STEP_ORDER.index(state.step)
        if index == 0:
            return _reject(state, "Already at the first step")
        return _accept(state, step=STEP_ORDER[index - 1])

    if isinstance(event, DateSelected):
        if state.step != BookingStep.datetime_selection:
            return _reject(state, "Dates can only be chosen in the date and time step")
        if event.day < event.today:
            return _reject(state, "Past dates cannot be selected")
        return _accept(state, selected_date=event.day, slots=(), slots_loading=True)

    if isinstance(event, TimeSelected):
        if state.step != BookingStep.datetime_selection:
            return _reject(state, "Times can only be chosen in the date and time step")
        if draft.preferred_date is None:
            return _reject(state, "Select a preferred date first")
        if state.slots_loading:
            return _reject(state, "Time slots are still loading")
        if not any(slot.time == event.time and slot.available for slot in state.slots):
            return _reject(state, f"{event.time} is not available on {draft.preferred_date.isoformat()}")
        return _accept(state)

    if isinstance(event, AlternativeSelected):
        if event.day is not None and event.day < event.today:
            return _reject(state, "Alternative date cannot be in the past")
        if event.time and event.day is None:
            return _reject(state, "Select an alternative date first")
        return _accept(state)

    if isinstance(event, DetailsEdited):
        return _accept(state)

    raise TypeError(f"Unknown booking event: {event!r}")
