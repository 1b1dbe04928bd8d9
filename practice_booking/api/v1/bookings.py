import logging
import uuid

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Response

from practice_booking.api.v1.schemas import (
    AlternativeRequestSchema,
    BookingSnapshotSchema,
    CalendarCellSchema,
    CalendarSchema,
    DateRequestSchema,
    DetailsRequestSchema,
    DraftSchema,
    ProviderSchema,
    TimeRequestSchema,
    TimeSlotSchema,
)
from practice_booking.application.ports.session_store import BookingSessionStorePort
from practice_booking.application.use_cases.booking_machine import BookingStep
from practice_booking.application.use_cases.booking_orchestrator import BookingOrchestrator, BookingResult
from practice_booking.domain.entities.scheduling import ClientContext
from practice_booking.infrastructure.practice_api.mock_backend import MockPracticeBackend
from practice_booking.infrastructure.practice_api.practice_backend import PracticeApiBackend
from practice_booking.wiring.dependencies import build_booking_orchestrator, get_practice_backend, get_session_store

router = APIRouter()
logger = logging.getLogger(__name__)


def get_client_context(
    x_client_id: str = Header(..., alias="X-Client-Id"),
    x_client_name: str | None = Header(None, alias="X-Client-Name"),
    authorization: str | None = Header(None),
) -> ClientContext:
    token = None
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization[7:].strip() or None
    return ClientContext(client_id=x_client_id, display_name=x_client_name, access_token=token)


def get_session(
    session_id: str,
    context: ClientContext = Depends(get_client_context),
    store: BookingSessionStorePort = Depends(get_session_store),
) -> tuple[str, BookingOrchestrator]:
    orchestrator = store.get(session_id)
    if orchestrator is None or orchestrator.context.client_id != context.client_id:
        raise HTTPException(status_code=404, detail="Booking session not found")
    return session_id, orchestrator


def _snapshot(session_id: str, orchestrator: BookingOrchestrator) -> BookingSnapshotSchema:
    state = orchestrator.state
    provider = state.provider
    return BookingSnapshotSchema(
        session_id=session_id,
        step=state.step.value,
        notice=state.notice,
        provider=(
            ProviderSchema(
                id=provider.id,
                display_name=provider.display_name,
                specializations=list(provider.specializations),
            )
            if provider
            else None
        ),
        draft=DraftSchema(**orchestrator.draft.snapshot()),
        slots=[TimeSlotSchema(time=s.time, available=s.available) for s in state.slots],
        slots_loading=state.slots_loading,
        request_id=state.request_id,
        summary=orchestrator.summary() if state.step == BookingStep.confirmation else None,
    )


def _respond(session_id: str, orchestrator: BookingOrchestrator, result: BookingResult) -> BookingSnapshotSchema:
    if not result.accepted:
        raise HTTPException(status_code=409, detail=result.error)
    return _snapshot(session_id, orchestrator)


@router.post("", response_model=BookingSnapshotSchema, status_code=201)
async def start_booking(
    context: ClientContext = Depends(get_client_context),
    store: BookingSessionStorePort = Depends(get_session_store),
    backend: PracticeApiBackend | MockPracticeBackend = Depends(get_practice_backend),
):
    orchestrator = build_booking_orchestrator(context, backend)
    await orchestrator.start()
    session_id = uuid.uuid4().hex
    store.put(session_id, orchestrator)
    logger.info("Booking session created", extra={"session_id": session_id, "client_id": context.client_id})
    return _snapshot(session_id, orchestrator)


@router.get("/{session_id}", response_model=BookingSnapshotSchema)
async def get_booking(session: tuple[str, BookingOrchestrator] = Depends(get_session)):
    return _snapshot(*session)


@router.get("/{session_id}/calendar", response_model=CalendarSchema)
async def get_calendar(
    year: int | None = Query(None, ge=1900, le=9999),
    month: int | None = Query(None, ge=1, le=12),
    session: tuple[str, BookingOrchestrator] = Depends(get_session),
):
    _, orchestrator = session
    if (year is None) != (month is None):
        raise HTTPException(status_code=400, detail="year and month must be given together")
    cells = orchestrator.calendar(year, month)
    viewed_year, viewed_month = orchestrator.viewed_month
    return CalendarSchema(
        year=viewed_year,
        month=viewed_month,
        cells=[
            CalendarCellSchema(
                day=c.day,
                is_past=c.is_past,
                is_today=c.is_today,
                is_selected=c.is_selected,
                is_primary_selection=c.is_primary_selection,
            )
            for c in cells
        ],
    )


@router.post("/{session_id}/next", response_model=BookingSnapshotSchema)
async def next_step(session: tuple[str, BookingOrchestrator] = Depends(get_session)):
    session_id, orchestrator = session
    return _respond(session_id, orchestrator, orchestrator.advance())


@router.post("/{session_id}/back", response_model=BookingSnapshotSchema)
async def previous_step(session: tuple[str, BookingOrchestrator] = Depends(get_session)):
    session_id, orchestrator = session
    return _respond(session_id, orchestrator, orchestrator.back())


@router.put("/{session_id}/date", response_model=BookingSnapshotSchema)
async def select_date(req: DateRequestSchema, session: tuple[str, BookingOrchestrator] = Depends(get_session)):
    session_id, orchestrator = session
    return _respond(session_id, orchestrator, await orchestrator.select_date(req.date))


@router.put("/{session_id}/time", response_model=BookingSnapshotSchema)
async def select_time(req: TimeRequestSchema, session: tuple[str, BookingOrchestrator] = Depends(get_session)):
    session_id, orchestrator = session
    return _respond(session_id, orchestrator, orchestrator.select_time(req.time))


@router.put("/{session_id}/alternative", response_model=BookingSnapshotSchema)
async def select_alternative(
    req: AlternativeRequestSchema,
    session: tuple[str, BookingOrchestrator] = Depends(get_session),
):
    session_id, orchestrator = session
    return _respond(session_id, orchestrator, orchestrator.select_alternative(req.date, req.time))


@router.put("/{session_id}/details", response_model=BookingSnapshotSchema)
async def update_details(req: DetailsRequestSchema, session: tuple[str, BookingOrchestrator] = Depends(get_session)):
    session_id, orchestrator = session
    result = orchestrator.update_details(
        therapy_category=req.therapy_type,
        urgency=req.urgency_level,
        reason=req.reason,
        additional_notes=req.additional_notes,
    )
    return _respond(session_id, orchestrator, result)


@router.post("/{session_id}/submit", response_model=BookingSnapshotSchema)
async def submit_booking(session: tuple[str, BookingOrchestrator] = Depends(get_session)):
    session_id, orchestrator = session
    return _respond(session_id, orchestrator, await orchestrator.submit())


@router.post("/{session_id}/restart", response_model=BookingSnapshotSchema)
async def restart_booking(session: tuple[str, BookingOrchestrator] = Depends(get_session)):
    session_id, orchestrator = session
    return _respond(session_id, orchestrator, await orchestrator.restart())


@router.delete("/{session_id}", status_code=204)
async def abandon_booking(
    session: tuple[str, BookingOrchestrator] = Depends(get_session),
    store: BookingSessionStorePort = Depends(get_session_store),
) -> Response:
    session_id, _ = session
    store.discard(session_id)
    logger.info("Booking session discarded", extra={"session_id": session_id})
    return Response(status_code=204)
