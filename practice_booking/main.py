from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI

from practice_booking.api.v1.bookings import router as bookings_router
from practice_booking.core.config import settings
from practice_booking.wiring.dependencies import close_practice_backend

CONTEXT_KEYS = ("session_id", "client_id", "step", "date", "provider_id", "request_id", "reason", "error")


class ContextFormatter(logging.Formatter):
    """Appends booking context passed through `extra=` as key=value pairs."""

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        context = " ".join(
            f"{key}={getattr(record, key)}" for key in CONTEXT_KEYS if getattr(record, key, None) not in (None, "")
        )
        return f"{base} | {context}" if context else base


def configure_logging(level: str) -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(ContextFormatter("%(levelname)s:%(name)s:%(message)s"))

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()
    root.addHandler(handler)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await close_practice_backend()


configure_logging(settings.LOG_LEVEL)

app = FastAPI(title="Client Appointment Booking", version="1.0.0", lifespan=lifespan)
app.include_router(bookings_router, prefix="/api/v1/bookings", tags=["bookings"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
