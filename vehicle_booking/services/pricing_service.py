from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from vehicle_booking.models.catalog import Vehicle
from vehicle_booking.models.date_range import DateRange
from vehicle_booking.utils.constants import CENTS


@dataclass(frozen=True)
class Quote:
    days: int
    total_price: Decimal

    def to_dict(self) -> dict:
        return {"days": self.days, "totalPrice": float(self.total_price)}


ZERO_QUOTE = Quote(days=0, total_price=Decimal("0.00"))


class PricingCalculator:
    """Rental-day count and total price for a vehicle over a date range."""

    @staticmethod
    def quote(vehicle: Optional[Vehicle], date_range: Optional[DateRange]) -> Quote:
        """
        days = inclusive day count of the range; total = days * price_per_day,
        rounded half-up to the currency's minor unit.
        Returns a zero quote while the vehicle or a bookable range is missing,
        so callers never show a price before valid dates exist.
        """
        if vehicle is None or date_range is None or not date_range.is_bookable:
            return ZERO_QUOTE
        days = date_range.duration_days
        total = (Decimal(days) * Decimal(vehicle.price_per_day)).quantize(CENTS, rounding=ROUND_HALF_UP)
        return Quote(days=days, total_price=total)
