from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import date
from enum import Enum
from typing import Any


class TherapyCategory(str, Enum):
    individual = "individual"
    couple = "couple"
    family = "family"
    group = "group"


class Urgency(str, Enum):
    normal = "normal"
    urgent = "urgent"
    emergency = "emergency"


class DraftFrozenError(RuntimeError):
    """Raised when a submitted booking draft is mutated."""
    pass


@dataclass
class BookingDraft:
    """
    Booking request accumulated across the workflow steps.
    Only the orchestrator writes to it; after a successful submission it is frozen.
    """

    provider_id: str | None = None
    provider_name: str | None = None
    preferred_date: date | None = None
    preferred_time: str | None = None  # HH:MM
    alternative_date: date | None = None
    alternative_time: str | None = None  # HH:MM
    therapy_category: TherapyCategory = TherapyCategory.individual
    urgency: Urgency = Urgency.normal
    reason: str = ""
    additional_notes: str | None = None
    _frozen: bool = field(default=False, init=False, repr=False, compare=False)

    def __setattr__(self, name: str, value: Any) -> None:
        if getattr(self, "_frozen", False):
            raise DraftFrozenError(f"Booking draft is frozen, cannot set {name}")
        super().__setattr__(name, value)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        object.__setattr__(self, "_frozen", True)

    def snapshot(self) -> dict[str, Any]:
        """Plain copy of the public fields for rendering."""
        return {f.name: getattr(self, f.name) for f in fields(self) if not f.name.startswith("_")}
