from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Optional

from vehicle_booking.exceptions import VehicleNotFoundError, VehicleTypeNotFoundError
from vehicle_booking.models.catalog import Vehicle, VehicleType
from vehicle_booking.services.common import _store, vehicle_from_dict, vehicle_type_from_dict
from vehicle_booking.utils.constants import DEFAULT_VEHICLE_TYPES, DEFAULT_VEHICLES

if TYPE_CHECKING:
    # Only for type hints; won't execute at runtime
    from vehicle_booking.models.store import Store  # noqa: F401

logger = logging.getLogger(__name__)


class CatalogGateway:
    """Read-only catalog: vehicle types and the vehicles of each type."""

    @staticmethod
    def list_vehicle_types(wheels: Optional[int] = None, *, store: Optional["Store"] = None) -> List[VehicleType]:
        """All vehicle types ordered by id, optionally only those with `wheels` wheels."""
        st = store or _store()
        res = [vehicle_type_from_dict(d) for d in st.vehicle_types.values()]
        if wheels is not None:
            res = [t for t in res if t.wheels == int(wheels)]
        res.sort(key=lambda t: t.type_id)
        return res

    @staticmethod
    def vehicles_for_type(type_id: int, *, store: Optional["Store"] = None) -> List[Vehicle]:
        """Available vehicles of one type; unavailable ones are never offered."""
        st = store or _store()
        res = [vehicle_from_dict(d) for d in st.vehicles.values() if d.get("type_id") == int(type_id)]
        res = [v for v in res if v.is_available]
        res.sort(key=lambda v: v.vehicle_id)
        return res

    @staticmethod
    def get_vehicle_type(type_id: int, *, store: Optional["Store"] = None) -> VehicleType:
        """Return a vehicle type by ID or raise VehicleTypeNotFoundError."""
        st = store or _store()
        t = vehicle_type_from_dict(st.get_vehicle_type(int(type_id)))
        if t is None:
            raise VehicleTypeNotFoundError(f"Error: vehicle type with ID '{type_id}' not found")
        return t

    @staticmethod
    def get_vehicle(vehicle_id: int, *, store: Optional["Store"] = None) -> Vehicle:
        """Return a vehicle by ID or raise VehicleNotFoundError."""
        st = store or _store()
        v = vehicle_from_dict(st.get_vehicle(int(vehicle_id)))
        if v is None:
            raise VehicleNotFoundError(f"Error: vehicle with ID '{vehicle_id}' not found")
        return v

    @staticmethod
    def seed_defaults(store: Optional["Store"] = None) -> int:
        """
        Create the default vehicle types and vehicles when the catalog is empty.
        Returns the number of vehicles created (0 if the catalog already had data).
        """
        st = store or _store()
        if st.vehicle_types:
            return 0

        created = 0
        for t in DEFAULT_VEHICLE_TYPES:
            tid = st.create_vehicle_type(t["name"], t["wheels"])
            for name, price in DEFAULT_VEHICLES.get(t["name"], []):
                st.create_vehicle({"name": name, "type_id": tid, "price_per_day": price, "is_available": True})
                created += 1
        logger.info("Seeded %d vehicle types and %d vehicles", len(DEFAULT_VEHICLE_TYPES), created)
        return created
