from dataclasses import dataclass
from datetime import date, datetime

from vehicle_booking.exceptions import InvalidDateRangeError
from vehicle_booking.utils.constants import DATE_FMT, OverlapPolicy


def _as_date(x) -> date:
    """Coerce any date-like to a naive date (supports 'YYYY-MM-DD' or ISO with T)."""
    if isinstance(x, datetime):
        return x.date()
    if isinstance(x, date):
        return x
    if isinstance(x, str):
        base = x.split("T", 1)[0].strip()
        return datetime.strptime(base, DATE_FMT).date()
    raise ValueError(f"Unsupported date: {x!r}")


@dataclass(frozen=True)
class DateRange:
    """
    Inclusive range of whole calendar days, start..end.

    A range with start == end is a valid value (one day) but not a bookable
    one; see `is_bookable`.
    """
    start: date
    end: date

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise InvalidDateRangeError(f"Error: start {self.start} is after end {self.end}")

    @classmethod
    def parse(cls, start, end) -> "DateRange":
        """Build a range from date objects or 'YYYY-MM-DD' strings."""
        try:
            d1 = _as_date(start)
            d2 = _as_date(end)
        except ValueError:
            raise InvalidDateRangeError("Invalid dates (YYYY-MM-DD)")
        return cls(d1, d2)

    @property
    def duration_days(self) -> int:
        """Inclusive day count: (end - start) + 1."""
        return (self.end - self.start).days + 1

    @property
    def is_bookable(self) -> bool:
        """A bookable range spans at least one night (start strictly before end)."""
        return self.start < self.end

    def overlaps(self, other: "DateRange", policy: str = OverlapPolicy.CLOSED) -> bool:
        from vehicle_booking.services.common import overlaps

        return overlaps(self, other, policy)

    def to_dict(self) -> dict:
        return {"startDate": self.start.isoformat(), "endDate": self.end.isoformat()}

    def __str__(self) -> str:
        return f"{self.start.isoformat()}..{self.end.isoformat()}"


def duration_days(r: DateRange) -> int:
    return r.duration_days
