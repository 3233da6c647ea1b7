import atexit
import logging
import os
import pickle
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path

from vehicle_booking.exceptions import TransientError

logger = logging.getLogger(__name__)

# ---- Paths ----
BASE_DIR = Path(__file__).resolve().parents[2]
DEFAULT_DATA_PATH = BASE_DIR / "data.pkl"

# Pass as `path` to keep everything in memory (no file is read or written)
MEMORY = ":memory:"

TABLES = ("vehicle_types", "vehicles", "bookings")


class Store:
    """
    Pickle-backed store for the catalog and bookings.

    Rows are plain dicts keyed by auto-increment integer ids. Every write
    happens under `_rw` and is flushed to disk atomically; per-vehicle locks
    (see `vehicle_lock`) let the booking service hold a vehicle across a
    read-check-insert sequence.
    """
    _inst = None
    _inst_lock = threading.Lock()
    _atexit_registered = False

    def __init__(self, path: str | os.PathLike | None = None):
        self.path = str(path or DEFAULT_DATA_PATH)
        self.vehicle_types: dict[int, dict] = {}
        self.vehicles: dict[int, dict] = {}
        self.bookings: dict[int, dict] = {}
        self._seq: dict[str, int] = {t: 0 for t in TABLES}
        self._rw = threading.RLock()
        self._vehicle_locks: dict[int, threading.Lock] = {}

        if self.in_memory:
            return

        logger.info("Using file: %s", self.path)
        self._load()

        # Automatically save on exit (skipped in test environments)
        if not Store._atexit_registered and os.getenv("APP_ENV") != "test":
            atexit.register(self.save)
            Store._atexit_registered = True

    @property
    def in_memory(self) -> bool:
        return self.path == MEMORY

    # ---------- Singleton ----------
    @classmethod
    def instance(cls, path: str | os.PathLike | None = None):
        """Return the global singleton instance of Store."""
        with cls._inst_lock:
            if cls._inst is None:
                cls._inst = Store(path or DEFAULT_DATA_PATH)
        return cls._inst

    @classmethod
    def reset_instance(cls, path: str | os.PathLike | None = None):
        """Replace the singleton (used by the app factory when DATA_PATH changes)."""
        with cls._inst_lock:
            cls._inst = Store(path or DEFAULT_DATA_PATH)
        return cls._inst

    # ---------- Persistence ----------
    def _load(self):
        """Load data from the pickle file, or start empty if unavailable or invalid."""
        if not os.path.exists(self.path):
            return
        try:
            with open(self.path, "rb") as f:
                data = pickle.load(f)
        except (OSError, pickle.UnpicklingError, EOFError) as e:
            logger.warning("Load failed (%s); starting empty.", e)
            return

        if isinstance(data, dict) and "bookings" in data:
            self.vehicle_types = data.get("vehicle_types", {}) or {}
            self.vehicles = data.get("vehicles", {}) or {}
            self.bookings = data.get("bookings", {}) or {}
            self._seq.update(data.get("seq", {}) or {})
            logger.info(
                "Loaded: vehicle_types=%d, vehicles=%d, bookings=%d",
                len(self.vehicle_types), len(self.vehicles), len(self.bookings),
            )
        else:
            # Handle incompatible data format: backup the old file and start empty
            bak = self.path + ".bak"
            try:
                os.replace(self.path, bak)
                logger.warning("Incompatible store (%s); backed up to %s. Starting empty.", type(data).__name__, bak)
            except OSError as e:
                logger.error("Backup failed: %s", e)

    def _dump(self):
        """Write the in-memory data to the pickle file safely (atomic replace)."""
        if self.in_memory:
            return
        os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
        tmp = self.path + ".tmp"
        payload = {
            "vehicle_types": self.vehicle_types,
            "vehicles": self.vehicles,
            "bookings": self.bookings,
            "seq": self._seq,
        }
        with open(tmp, "wb") as f:
            pickle.dump(payload, f, protocol=pickle.HIGHEST_PROTOCOL)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, self.path)

    def save(self):
        """Thread-safe save method."""
        with self._rw:
            logger.info("Saving to %s ...", self.path)
            self._dump()

    def clear(self):
        """Drop every row and restart the id sequences."""
        with self._rw:
            self.vehicle_types.clear()
            self.vehicles.clear()
            self.bookings.clear()
            self._seq = {t: 0 for t in TABLES}
            self._dump()

    def _next_id(self, table: str) -> int:
        self._seq[table] += 1
        return self._seq[table]

    # ---------- Catalog ----------
    def create_vehicle_type(self, name: str, wheels: int) -> int:
        """Create a vehicle type and return its ID."""
        with self._rw:
            tid = self._next_id("vehicle_types")
            self.vehicle_types[tid] = {"id": tid, "name": name, "wheels": int(wheels)}
            self._dump()
            return tid

    def create_vehicle(self, data: dict) -> int:
        """Create a new vehicle record and return its ID."""
        with self._rw:
            vid = self._next_id("vehicles")
            self.vehicles[vid] = {
                "id": vid,
                "name": data.get("name", ""),
                "type_id": int(data["type_id"]),
                "price_per_day": str(data.get("price_per_day") or "0"),
                "is_available": bool(data.get("is_available", True)),
            }
            self._dump()
            return vid

    def get_vehicle_type(self, type_id: int) -> dict | None:
        return self.vehicle_types.get(type_id)

    def get_vehicle(self, vehicle_id: int) -> dict | None:
        """Get vehicle information by ID."""
        return self.vehicles.get(vehicle_id)

    def update_vehicle(self, vehicle_id: int, **updates) -> bool:
        """Update vehicle attributes; return True if updated successfully."""
        with self._rw:
            if vehicle_id not in self.vehicles:
                return False
            self.vehicles[vehicle_id].update({k: v for k, v in updates.items() if v is not None})
            self._dump()
            return True

    # ---------- Bookings ----------
    @contextmanager
    def vehicle_lock(self, vehicle_id: int):
        """Hold the mutual-exclusion lock of one vehicle for the duration of the block."""
        with self._rw:
            lock = self._vehicle_locks.setdefault(vehicle_id, threading.Lock())
        with lock:
            yield

    def bookings_for_vehicle(self, vehicle_id: int) -> list[dict]:
        with self._rw:
            return [dict(b) for b in self.bookings.values() if b.get("vehicle_id") == vehicle_id]

    def create_booking(self, b: dict) -> int:
        """
        Insert a booking row and persist it. If the write fails the row is
        removed again and TransientError is raised, so no partial booking
        survives.
        """
        with self._rw:
            bid = self._next_id("bookings")
            row = dict(b)
            row["id"] = bid
            row.setdefault("created_at", datetime.now(timezone.utc).isoformat(timespec="seconds"))
            self.bookings[bid] = row
            try:
                self._dump()
            except (OSError, pickle.PicklingError) as e:
                del self.bookings[bid]
                logger.error("Booking %s not persisted: %s", bid, e)
                raise TransientError(f"Error: could not save booking ({e})") from e
            return bid

    def get_booking(self, booking_id: int) -> dict | None:
        return self.bookings.get(booking_id)
