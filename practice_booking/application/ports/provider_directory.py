from __future__ import annotations

from abc import ABC, abstractmethod

from practice_booking.domain.entities.scheduling import ProviderAssignment


class ProviderDirectoryPort(ABC):
    @abstractmethod
    async def get_assigned_provider(self) -> ProviderAssignment | None:
        """Return the provider assigned to the current client, or None if unassigned."""
        raise NotImplementedError
