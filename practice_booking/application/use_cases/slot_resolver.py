from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date

from practice_booking.application.ports.availability import AvailabilityPort
from practice_booking.domain.entities.scheduling import TimeSlot

DEFAULT_FALLBACK_TIMES = ("09:00", "10:00", "11:00", "14:00", "15:00", "16:00", "17:00")


class SlotResolver:
    """
    Resolve the time slots offered for a date.
    Without a provider the fallback catalogue is a preference list, not a guaranteed booking.
    """

    def __init__(
        self,
        availability: AvailabilityPort | None,
        fallback_times: Sequence[str] = DEFAULT_FALLBACK_TIMES,
    ) -> None:
        self._availability = availability
        self._fallback = [TimeSlot(time=t, available=True) for t in fallback_times]
        self._logger = logging.getLogger(__name__)

    def fallback_slots(self) -> list[TimeSlot]:
        return list(self._fallback)

    async def resolve(self, provider_id: str | None, day: date) -> list[TimeSlot]:
        if not provider_id or self._availability is None:
            return self.fallback_slots()

        try:
            slots = await self._availability.get_available_slots(provider_id, day)
        except Exception as e:
            # Soft failure: the workflow shows "no slots" instead of blocking
            self._logger.warning(
                "Slot resolution failed",
                extra={"provider_id": provider_id, "date": day.isoformat(), "error": str(e)},
            )
            return []

        return list(slots)
