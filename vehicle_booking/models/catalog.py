from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from vehicle_booking.models.date_range import DateRange


@dataclass(frozen=True)
class VehicleType:
    """A vehicle category; `wheels` is the wheel class it belongs to (2 or 4)."""
    type_id: int
    name: str
    wheels: int

    def to_dict(self) -> dict:
        return {"id": self.type_id, "name": self.name, "wheels": self.wheels}


@dataclass(frozen=True)
class Vehicle:
    """
    A bookable vehicle. `price_per_day` is the listed daily rate in the
    currency's major unit, kept as Decimal so totals round predictably.
    """
    vehicle_id: int
    name: str
    type_id: int
    price_per_day: Decimal
    is_available: bool = True

    def to_dict(self) -> dict:
        return {
            "id": self.vehicle_id,
            "name": self.name,
            "typeId": self.type_id,
            "pricePerDay": float(self.price_per_day),
            "isAvailable": self.is_available,
        }


@dataclass(frozen=True)
class Customer:
    first_name: str
    last_name: str


@dataclass(frozen=True)
class Booking:
    booking_id: int
    first_name: str
    last_name: str
    vehicle_id: int
    range: DateRange
    created_at: str | None = None

    @property
    def start_date(self) -> date:
        return self.range.start

    @property
    def end_date(self) -> date:
        return self.range.end

    def to_dict(self) -> dict:
        return {
            "id": self.booking_id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "vehicleId": self.vehicle_id,
            "startDate": self.range.start.isoformat(),
            "endDate": self.range.end.isoformat(),
            "createdAt": self.created_at,
        }
