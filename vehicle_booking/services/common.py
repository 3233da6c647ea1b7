"""Shared service helpers: overlap detection, dates, and dict -> model mappers."""

import os
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

import pytz
from flask import current_app, has_app_context

from vehicle_booking.models.catalog import Booking, Vehicle, VehicleType
from vehicle_booking.models.date_range import DateRange
from vehicle_booking.models.store import Store
from vehicle_booking.utils.constants import DATE_FMT, DEFAULT_TIMEZONE, OverlapPolicy


def _store() -> Store:
    """Get the singleton store instance."""
    return Store.instance()


# -------- date helpers --------
def parse_date(s: str) -> date:
    """Parse YYYY-MM-DD string to date."""
    return datetime.strptime(s, DATE_FMT).date()


def business_timezone() -> str:
    if has_app_context():
        return current_app.config.get("TIMEZONE") or DEFAULT_TIMEZONE
    return os.getenv("APP_TIMEZONE", DEFAULT_TIMEZONE)


def _today() -> date:
    """Today in the business timezone. Wrapper for easier testing/mocking."""
    return datetime.now(pytz.timezone(business_timezone())).date()


def overlap_policy() -> str:
    if has_app_context():
        return current_app.config.get("OVERLAP_POLICY") or OverlapPolicy.CLOSED
    return OverlapPolicy.CLOSED


# -------- overlap detection --------
def overlaps(a: DateRange, b: DateRange, policy: str = OverlapPolicy.CLOSED) -> bool:
    """
    Decide whether two day ranges conflict.

    CLOSED (default): a.start <= b.end and b.start <= a.end. Ranges that
    only touch on a boundary day (a.end == b.start) overlap, because the
    vehicle cannot be dropped off and picked up by two customers on the
    same day.
    HALF_OPEN: the end day is exclusive, a.start < b.end and b.start < a.end.

    One predicate covers every placement (start inside, end inside,
    containing, contained).
    """
    if policy == OverlapPolicy.CLOSED:
        return a.start <= b.end and b.start <= a.end
    if policy == OverlapPolicy.HALF_OPEN:
        return a.start < b.end and b.start < a.end
    raise ValueError(f"Unknown overlap policy: {policy!r}")


def first_conflict(new: DateRange, existing: list[DateRange], policy: str = OverlapPolicy.CLOSED) -> Optional[DateRange]:
    """Return the first range in `existing` that overlaps `new`, or None."""
    for r in existing:
        if overlaps(new, r, policy):
            return r
    return None


# -------- dict -> rich model mappers --------
def vehicle_type_from_dict(d: Optional[dict]) -> Optional[VehicleType]:
    if not d:
        return None
    return VehicleType(type_id=int(d["id"]), name=d.get("name") or "", wheels=int(d.get("wheels") or 0))


def vehicle_from_dict(d: Optional[dict]) -> Optional[Vehicle]:
    """Map a stored vehicle dict to a rich vehicle object."""
    if not d:
        return None
    return Vehicle(
        vehicle_id=int(d["id"]),
        name=d.get("name") or "",
        type_id=int(d["type_id"]),
        price_per_day=Decimal(str(d.get("price_per_day") or "0")),
        is_available=bool(d.get("is_available", True)),
    )


def booking_from_dict(d: Optional[dict]) -> Optional[Booking]:
    if not d:
        return None
    return Booking(
        booking_id=int(d["id"]),
        first_name=d.get("first_name") or "",
        last_name=d.get("last_name") or "",
        vehicle_id=int(d["vehicle_id"]),
        range=DateRange.parse(d["start_date"], d["end_date"]),
        created_at=d.get("created_at"),
    )
