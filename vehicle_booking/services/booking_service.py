"""Booking creation with the no-overlap guarantee."""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Tuple

from vehicle_booking.exceptions import ConflictError, ValidationError
from vehicle_booking.models.catalog import Booking, Customer
from vehicle_booking.models.date_range import DateRange
from vehicle_booking.models.store import Store
from vehicle_booking.services.common import (
    _store,
    _today,
    booking_from_dict,
    first_conflict,
    overlap_policy,
    parse_date,
)

logger = logging.getLogger(__name__)


def _to_int(value) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class BookingConflictService:
    """
    Check-then-insert of a booking for one vehicle.

    The load / overlap check / insert sequence runs while holding the
    vehicle's lock in the store, so of two concurrent attempts with
    overlapping ranges on the same vehicle exactly one succeeds and the
    other raises ConflictError. Attempts on different vehicles do not wait
    for each other.
    """

    @staticmethod
    def parse_request(payload: Optional[dict]) -> Tuple[int, DateRange, Customer]:
        """
        Turn a POST /bookings body {firstName, lastName, vehicleId, startDate,
        endDate} into typed arguments for `attempt`. Raises ValidationError
        when fields are missing or malformed.
        """
        payload = payload or {}
        first = payload.get("firstName")
        first = first.strip() if isinstance(first, str) else ""
        last = payload.get("lastName")
        last = last.strip() if isinstance(last, str) else ""
        vehicle_id = payload.get("vehicleId")
        start = payload.get("startDate")
        end = payload.get("endDate")

        if not first or not last or vehicle_id in (None, "") or not start or not end:
            raise ValidationError("All fields are required.")

        vid = _to_int(vehicle_id)
        if vid is None:
            raise ValidationError("Invalid vehicle", {"vehicleId": "Invalid vehicle"})

        try:
            d1, d2 = parse_date(str(start)), parse_date(str(end))
        except ValueError:
            raise ValidationError("Invalid dates (YYYY-MM-DD)", {"dateRange": "Invalid dates (YYYY-MM-DD)"})
        if d1 > d2:
            raise ValidationError("End date must be after start date", {"dateRange": "End date must be after start date"})

        date_range = DateRange(d1, d2)
        return vid, date_range, Customer(first_name=first, last_name=last)

    @staticmethod
    def validate_range(date_range: Optional[DateRange], today: date) -> None:
        """Fail fast with ValidationError unless the range is present, bookable and not in the past."""
        if date_range is None:
            raise ValidationError("Start and end dates are required.", {"dateRange": "Start and end dates are required."})
        if not date_range.is_bookable:
            raise ValidationError("End date must be after start date", {"dateRange": "End date must be after start date"})
        if date_range.start < today:
            raise ValidationError("Start date cannot be in the past", {"startDate": "Start date cannot be in the past"})

    @staticmethod
    def attempt(
            vehicle_id: int,
            date_range: Optional[DateRange],
            customer: Customer,
            *,
            store: Optional["Store"] = None,
            today: Optional[date] = None,
            policy: Optional[str] = None,
    ) -> Booking:
        """
        Create a booking if no existing booking of the same vehicle overlaps it.

        Returns the persisted Booking. Raises:
          - ValidationError for missing/invalid input or an unknown vehicle,
          - ConflictError when an existing booking overlaps `date_range`,
          - TransientError when the store cannot persist the row.
        """
        st = store or _store()
        today = today or _today()
        policy = policy or overlap_policy()

        # --- validate (fail fast, before touching the vehicle lock) ---
        if not customer or not (customer.first_name or "").strip() or not (customer.last_name or "").strip():
            raise ValidationError("All fields are required.")
        BookingConflictService.validate_range(date_range, today)

        veh = st.get_vehicle(vehicle_id)
        if not veh:
            raise ValidationError("Invalid vehicle", {"vehicleId": "Invalid vehicle"})
        if not veh.get("is_available", True):
            raise ValidationError("Vehicle is not available", {"vehicleId": "Vehicle is not available"})

        with st.vehicle_lock(vehicle_id):
            existing = [booking_from_dict(b).range for b in st.bookings_for_vehicle(vehicle_id)]
            clash = first_conflict(date_range, existing, policy)
            if clash is not None:
                logger.warning("Conflict on vehicle %s: requested %s overlaps %s", vehicle_id, date_range, clash)
                raise ConflictError(vehicle_id=vehicle_id, conflicting_range=clash)

            bid = st.create_booking({
                "first_name": customer.first_name.strip(),
                "last_name": customer.last_name.strip(),
                "vehicle_id": vehicle_id,
                "start_date": date_range.start.isoformat(),
                "end_date": date_range.end.isoformat(),
            })

        logger.info("Booking %s created for vehicle %s (%s)", bid, vehicle_id, date_range)
        return booking_from_dict(st.get_booking(bid))

    @staticmethod
    def bookings_for_vehicle(vehicle_id: int, *, store: Optional["Store"] = None) -> list[Booking]:
        """Existing bookings of one vehicle, ordered by start date."""
        st = store or _store()
        res = [booking_from_dict(b) for b in st.bookings_for_vehicle(vehicle_id)]
        res.sort(key=lambda b: b.range.start)
        return res

    @staticmethod
    def get_booking(booking_id: int, *, store: Optional["Store"] = None) -> Optional[Booking]:
        st = store or _store()
        return booking_from_dict(st.get_booking(booking_id))
