from datetime import date, datetime
from functools import lru_cache
import logging
from zoneinfo import ZoneInfo

from practice_booking.core.config import settings
from practice_booking.application.ports.session_store import BookingSessionStorePort
from practice_booking.application.use_cases.booking_orchestrator import BookingOrchestrator
from practice_booking.application.use_cases.slot_resolver import SlotResolver
from practice_booking.domain.entities.scheduling import ClientContext
from practice_booking.infrastructure.practice_api.mock_backend import MockPracticeBackend
from practice_booking.infrastructure.practice_api.practice_backend import PracticeApiBackend
from practice_booking.infrastructure.practice_api.practice_client import PracticeApiClient
from practice_booking.infrastructure.store.memory_store import MemoryBookingSessionStore


_session_store: MemoryBookingSessionStore | None = None


@lru_cache
def get_practice_backend() -> PracticeApiBackend | MockPracticeBackend:
    """Process-wide backend; sessions get a client-bound view of it via for_client()."""
    logger = logging.getLogger(__name__)
    if settings.ENV.lower() in {"dev", "local"}:
        logger.info("Using MockPracticeBackend (ENV=dev/local)")
        return MockPracticeBackend()

    logger.info("Using PracticeApiBackend", extra={"base_url": settings.PRACTICE_API_BASE_URL})
    client = PracticeApiClient(
        base_url=settings.PRACTICE_API_BASE_URL,
        access_token=settings.PRACTICE_API_TOKEN,
        timeout=settings.PRACTICE_API_TIMEOUT_SECONDS,
    )
    return PracticeApiBackend(client=client)


async def close_practice_backend() -> None:
    if get_practice_backend.cache_info().currsize == 0:
        return
    await get_practice_backend().aclose()
    get_practice_backend.cache_clear()


def get_session_store() -> BookingSessionStorePort:
    global _session_store
    if _session_store is None:
        _session_store = MemoryBookingSessionStore(session_limit=settings.BOOKING_SESSION_LIMIT)
    return _session_store


def practice_today() -> date:
    try:
        tz = ZoneInfo(settings.PRACTICE_TIMEZONE)
    except Exception:
        tz = ZoneInfo("UTC")
    return datetime.now(tz).date()


def build_booking_orchestrator(
    context: ClientContext,
    backend: PracticeApiBackend | MockPracticeBackend | None = None,
) -> BookingOrchestrator:
    # Every collaborator call of the session runs with this client's identity
    client_backend = (backend or get_practice_backend()).for_client(context)
    return BookingOrchestrator(
        context=context,
        provider_directory=client_backend,
        slot_resolver=SlotResolver(availability=client_backend, fallback_times=settings.FALLBACK_SLOT_TIMES),
        appointment_requests=client_backend,
        today=practice_today,
    )
