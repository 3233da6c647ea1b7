from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Optional

from vehicle_booking.models.date_range import DateRange, _as_date
from vehicle_booking.utils.constants import Step


@dataclass(frozen=True)
class BookingDraft:
    """
    In-progress booking held by the wizard.

    Never mutated in place: every wizard transition returns a new draft
    (see `dataclasses.replace`). `validation_errors` maps a field name to
    its message for the step that last failed to advance.
    """
    first_name: str = ""
    last_name: str = ""
    wheel_class: Optional[int] = None
    vehicle_type_id: Optional[int] = None
    vehicle_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    step: int = Step.DETAILS
    validation_errors: dict = field(default_factory=dict)

    @property
    def range(self) -> Optional[DateRange]:
        """The selected dates as a DateRange, or None while incomplete or reversed."""
        if self.start_date is None or self.end_date is None:
            return None
        if self.start_date > self.end_date:
            return None
        return DateRange(self.start_date, self.end_date)

    @property
    def step_name(self) -> str:
        return Step.NAMES[self.step]

    def with_changes(self, **changes) -> "BookingDraft":
        return replace(self, **changes)

    # ---------- Session serialization ----------
    def to_dict(self) -> dict:
        return {
            "first_name": self.first_name,
            "last_name": self.last_name,
            "wheel_class": self.wheel_class,
            "vehicle_type_id": self.vehicle_type_id,
            "vehicle_id": self.vehicle_id,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "step": self.step,
            "validation_errors": dict(self.validation_errors),
        }

    @classmethod
    def from_dict(cls, d: Optional[dict]) -> "BookingDraft":
        if not d:
            return cls()
        return cls(
            first_name=d.get("first_name") or "",
            last_name=d.get("last_name") or "",
            wheel_class=d.get("wheel_class"),
            vehicle_type_id=d.get("vehicle_type_id"),
            vehicle_id=d.get("vehicle_id"),
            start_date=_as_date(d["start_date"]) if d.get("start_date") else None,
            end_date=_as_date(d["end_date"]) if d.get("end_date") else None,
            step=int(d.get("step") or 0),
            validation_errors=dict(d.get("validation_errors") or {}),
        )
