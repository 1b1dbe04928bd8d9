from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date

from practice_booking.application.dto.appointment_request import AppointmentRequestPayload
from practice_booking.application.exceptions import DraftInvariantError
from practice_booking.application.ports.appointment_requests import AppointmentRequestPort
from practice_booking.application.ports.provider_directory import ProviderDirectoryPort
from practice_booking.application.use_cases.booking_machine import (
    Advance,
    AlternativeSelected,
    BookingEvent,
    BookingMachineState,
    BookingStep,
    DateSelected,
    DetailsEdited,
    GoBack,
    ProviderResolved,
    SlotsResolved,
    SubmissionFailed,
    SubmissionStarted,
    SubmissionSucceeded,
    TimeSelected,
    reduce,
)
from practice_booking.application.use_cases.slot_resolver import SlotResolver
from practice_booking.application.utils.calendar_grid import build_calendar_grid, shift_month
from practice_booking.domain.entities.booking_draft import BookingDraft, TherapyCategory, Urgency
from practice_booking.domain.entities.scheduling import (
    CalendarCell,
    ClientContext,
    ProviderAssignment,
    TimeSlot,
)


@dataclass(frozen=True)
class BookingResult:
    accepted: bool
    step: BookingStep
    error: str | None = None
    notice: str | None = None


class BookingOrchestrator:
    """
    Drives one client's booking session.

    State changes go through the pure reducer; this class runs the asynchronous collaborator
    calls and is the only writer of the draft. User-level failures come back as rejected
    BookingResults rather than exceptions.
    """

    def __init__(
        self,
        context: ClientContext,
        provider_directory: ProviderDirectoryPort,
        slot_resolver: SlotResolver,
        appointment_requests: AppointmentRequestPort,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._context = context
        self._provider_directory = provider_directory
        self._slot_resolver = slot_resolver
        self._appointment_requests = appointment_requests
        self._today = today
        self._state = BookingMachineState()
        self._draft = BookingDraft()
        current = today()
        self._view_year, self._view_month = current.year, current.month
        self._logger = logging.getLogger(__name__)

    @property
    def context(self) -> ClientContext:
        return self._context

    @property
    def state(self) -> BookingMachineState:
        return self._state

    @property
    def step(self) -> BookingStep:
        return self._state.step

    @property
    def draft(self) -> BookingDraft:
        return self._draft

    @property
    def provider(self) -> ProviderAssignment | None:
        return self._state.provider

    @property
    def slots(self) -> list[TimeSlot]:
        return list(self._state.slots)

    @property
    def viewed_month(self) -> tuple[int, int]:
        return self._view_year, self._view_month

    # Workflow entry

    async def start(self) -> BookingResult:
        """Begin a fresh session: new draft, provider lookup decides the first step."""
        self._state = BookingMachineState()
        self._draft = BookingDraft()
        current = self._today()
        self._view_year, self._view_month = current.year, current.month

        try:
            provider = await self._provider_directory.get_assigned_provider()
        except Exception as e:
            # Unassigned clients get an admin assignment later, so a failed lookup is not fatal
            self._logger.warning(
                "Provider lookup failed",
                extra={"client_id": self._context.client_id, "error": str(e)},
            )
            provider = None

        result = self._dispatch(ProviderResolved(provider))
        if provider is not None:
            self._draft.provider_id = provider.id
            self._draft.provider_name = provider.display_name

        self._logger.info(
            "Booking started",
            extra={
                "client_id": self._context.client_id,
                "step": self._state.step.value,
                "provider_id": provider.id if provider else None,
            },
        )
        return result

    async def restart(self) -> BookingResult:
        if self._state.submitting:
            return self._result(accepted=False, error="Appointment request is being submitted")
        self._logger.info("Booking restarted", extra={"client_id": self._context.client_id})
        return await self.start()

    def abandon(self) -> None:
        """Navigate away: the draft is discarded, nothing is persisted."""
        self._logger.info(
            "Booking abandoned",
            extra={"client_id": self._context.client_id, "step": self._state.step.value},
        )
        self._state = BookingMachineState()
        self._draft = BookingDraft()

    # Navigation

    def advance(self) -> BookingResult:
        return self._dispatch(Advance())

    def back(self) -> BookingResult:
        return self._dispatch(GoBack())

    def navigate_month(self, delta: int) -> tuple[int, int]:
        self._view_year, self._view_month = shift_month(self._view_year, self._view_month, delta)
        return self._view_year, self._view_month

    def calendar(self, year: int | None = None, month: int | None = None) -> list[CalendarCell]:
        if year is not None and month is not None:
            self._view_year, self._view_month = year, month
        return build_calendar_grid(
            self._view_year,
            self._view_month,
            self._today(),
            preferred=self._draft.preferred_date,
            alternative=self._draft.alternative_date,
        )

    # Date and time step

    async def select_date(self, day: date) -> BookingResult:
        """Select the preferred date and resolve its slots; late results for older dates are dropped."""
        result = self._dispatch(DateSelected(day=day, today=self._today()))
        if not result.accepted:
            return result

        if self._draft.preferred_date != day:
            self._draft.preferred_time = None
        self._draft.preferred_date = day

        slots = await self._slot_resolver.resolve(self._draft.provider_id, day)
        self._dispatch(SlotsResolved(day=day, slots=tuple(slots)))
        if self._state.selected_date != day:
            self._logger.info(
                "Discarded stale slot result",
                extra={"client_id": self._context.client_id, "date": day.isoformat()},
            )
        return self._result(accepted=True)

    def select_time(self, time: str) -> BookingResult:
        result = self._dispatch(TimeSelected(time=time))
        if result.accepted:
            self._draft.preferred_time = time
        return result

    def select_alternative(self, day: date | None, time: str | None = None) -> BookingResult:
        result = self._dispatch(AlternativeSelected(day=day, time=time, today=self._today()))
        if result.accepted:
            self._draft.alternative_date = day
            self._draft.alternative_time = time if day is not None else None
        return result

    # Details step

    def update_details(
        self,
        therapy_category: TherapyCategory | str | None = None,
        urgency: Urgency | str | None = None,
        reason: str | None = None,
        additional_notes: str | None = None,
    ) -> BookingResult:
        try:
            category = TherapyCategory(therapy_category) if therapy_category is not None else None
            level = Urgency(urgency) if urgency is not None else None
        except ValueError as e:
            return self._result(accepted=False, error=str(e))

        result = self._dispatch(DetailsEdited())
        if not result.accepted:
            return result

        if category is not None:
            self._draft.therapy_category = category
        if level is not None:
            self._draft.urgency = level
        if reason is not None:
            self._draft.reason = reason
        if additional_notes is not None:
            self._draft.additional_notes = additional_notes or None
        return result

    # Confirmation step

    async def submit(self) -> BookingResult:
        result = self._dispatch(SubmissionStarted())
        if not result.accepted:
            return result

        draft = self._draft
        try:
            payload = AppointmentRequestPayload.from_draft(draft)
        except DraftInvariantError:
            self._dispatch(SubmissionFailed("Booking draft is incomplete"))
            raise

        try:
            receipt = await self._appointment_requests.submit_appointment_request(payload)
        except Exception as e:
            self._logger.error(
                "Appointment request failed",
                extra={"client_id": self._context.client_id, "error": str(e)},
            )
            return self._dispatch(SubmissionFailed("Failed to submit appointment request, please try again"))

        if self._draft is not draft:
            result = self._result(accepted=False, error="Booking session was reset during submission")
        else:
            result = self._dispatch(SubmissionSucceeded(request_id=receipt.request_id))
        if not result.accepted:
            # Session was abandoned while the request was in flight
            self._logger.warning(
                "Appointment request completed for a discarded session",
                extra={"client_id": self._context.client_id, "request_id": receipt.request_id},
            )
            return result

        draft.freeze()
        self._logger.info(
            "Appointment request submitted",
            extra={"client_id": self._context.client_id, "request_id": receipt.request_id},
        )
        return result

    def summary(self) -> dict[str, str | None]:
        """Read-only overview shown on the confirmation step."""
        draft = self._draft
        assigned = self._state.provider is not None
        return {
            "provider": draft.provider_name,
            "preferred_date": draft.preferred_date.isoformat() if draft.preferred_date else None,
            "preferred_time": draft.preferred_time,
            "alternative_date": draft.alternative_date.isoformat() if draft.alternative_date else None,
            "alternative_time": draft.alternative_time,
            "therapy_type": THERAPY_LABELS[draft.therapy_category],
            "urgency": URGENCY_LABELS[draft.urgency],
            "reason": draft.reason,
            "additional_notes": draft.additional_notes,
            "next_steps": ASSIGNED_NEXT_STEPS if assigned else UNASSIGNED_NEXT_STEPS,
        }

    def _dispatch(self, event: BookingEvent) -> BookingResult:
        previous = self._state
        self._state = reduce(previous, event, self._draft)
        # An unchanged state object means the event was a no-op (e.g. a stale slot result)
        accepted = self._state is previous or self._state.error is None
        if not accepted:
            self._logger.info(
                "Booking transition rejected",
                extra={
                    "client_id": self._context.client_id,
                    "step": self._state.step.value,
                    "reason": self._state.error,
                },
            )
        elif self._state.step != previous.step:
            self._logger.info(
                "Booking step changed",
                extra={"client_id": self._context.client_id, "step": self._state.step.value},
            )
        return self._result(accepted=accepted, error=self._state.error if not accepted else None)

    def _result(self, accepted: bool, error: str | None = None) -> BookingResult:
        return BookingResult(
            accepted=accepted,
            step=self._state.step,
            error=error,
            notice=self._state.notice,
        )


THERAPY_LABELS = {
    TherapyCategory.individual: "Individual Therapy",
    TherapyCategory.couple: "Couple Therapy",
    TherapyCategory.family: "Family Therapy",
    TherapyCategory.group: "Group Therapy",
}

URGENCY_LABELS = {
    Urgency.normal: "Normal - Within 2 weeks",
    Urgency.urgent: "Urgent - Within 1 week",
    Urgency.emergency: "Emergency - Within 48 hours",
}

ASSIGNED_NEXT_STEPS = "Your appointment request will be sent to your therapist for confirmation."
UNASSIGNED_NEXT_STEPS = (
    "Your appointment request will be reviewed by our admin team who will assign the best "
    "therapist for your needs."
)
