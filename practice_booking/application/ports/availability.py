from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from practice_booking.domain.entities.scheduling import TimeSlot


class AvailabilityPort(ABC):
    @abstractmethod
    async def get_available_slots(self, provider_id: str, date: date) -> list[TimeSlot]:
        """Return the provider's time slots for a date, availability computed upstream."""
        raise NotImplementedError
