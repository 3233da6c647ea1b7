"""
Booking wizard.

The wizard walks a draft through a fixed step list:
Details -> WheelClass -> Category -> Model -> Dates -> Review -> Success.

The module has two layers:
  - pure transition functions, `(draft, ...) -> draft`, that never mutate
    their input and need no UI or HTTP harness to test;
  - `WizardStateMachine`, which owns the current draft, talks to the
    catalog and the booking service, and guards against reentrant or
    out-of-order transitions.
"""

from __future__ import annotations

import logging
import threading
from datetime import date
from typing import Callable, Optional

from vehicle_booking.exceptions import (
    BookingError,
    ConflictError,
    InvalidTransitionError,
    ValidationError,
    VehicleNotFoundError,
    VehicleTypeNotFoundError,
)
from vehicle_booking.models.catalog import Booking, Customer, Vehicle, VehicleType
from vehicle_booking.models.date_range import _as_date
from vehicle_booking.models.draft import BookingDraft
from vehicle_booking.services.booking_service import BookingConflictService
from vehicle_booking.services.catalog_service import CatalogGateway
from vehicle_booking.services.common import _today
from vehicle_booking.services.pricing_service import PricingCalculator, Quote
from vehicle_booking.utils.constants import (
    CASCADE_CLEARS,
    CONFLICT_MESSAGE,
    DRAFT_FIELDS,
    GENERIC_FAILURE_MESSAGE,
    MIN_NAME_LENGTH,
    Step,
    WheelClass,
)

logger = logging.getLogger(__name__)

INT_FIELDS = ("wheel_class", "vehicle_type_id", "vehicle_id")
DATE_FIELDS = ("start_date", "end_date")


def _coerce_int(value) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _coerce_date(value) -> Optional[date]:
    if value is None or value == "":
        return None
    try:
        return _as_date(value)
    except ValueError:
        return None


# ============================ pure transitions ============================
def initial_draft() -> BookingDraft:
    return BookingDraft()


def update_field(draft: BookingDraft, field: str, value) -> BookingDraft:
    """
    Write one field into a copy of the draft. Changing the wheel class clears
    the category and vehicle; changing the category clears the vehicle;
    moving the start date past the end date clears the end date. The step
    never changes.
    """
    if field not in DRAFT_FIELDS:
        raise ValidationError(f"Unknown field: {field}", {field: "Unknown field"})

    if field in INT_FIELDS:
        value = _coerce_int(value)
    elif field in DATE_FIELDS:
        value = _coerce_date(value)
    else:
        value = "" if value is None else str(value)

    changes = {field: value}
    for downstream in CASCADE_CLEARS.get(field, ()):
        changes[downstream] = None
    if field == "start_date" and value is not None and draft.end_date is not None and draft.end_date < value:
        changes["end_date"] = None
    return draft.with_changes(**changes)


def _validate_name(value: str, label: str) -> Optional[str]:
    value = (value or "").strip()
    if not value:
        return f"{label} is required"
    if len(value) < MIN_NAME_LENGTH:
        return f"{label} too short"
    return None


def validate_step(
        draft: BookingDraft,
        step: int,
        vehicle_type_lookup: Callable[[int], Optional[VehicleType]],
        today: date,
) -> dict:
    """Return {field: message} for everything wrong with `draft` at `step`; empty means valid."""
    errors = {}
    if step == Step.DETAILS:
        for field, label in (("first_name", "First name"), ("last_name", "Last name")):
            msg = _validate_name(getattr(draft, field), label)
            if msg:
                errors[field] = msg
    elif step == Step.WHEEL_CLASS:
        if draft.wheel_class not in WheelClass.ALL:
            errors["wheel_class"] = "Please select the number of wheels"
    elif step == Step.CATEGORY:
        vtype = vehicle_type_lookup(draft.vehicle_type_id) if draft.vehicle_type_id is not None else None
        if vtype is None:
            errors["vehicle_type_id"] = "Please select a vehicle type"
        elif vtype.wheels != draft.wheel_class:
            errors["vehicle_type_id"] = f"{vtype.name} is not a {draft.wheel_class}-wheeler"
    elif step == Step.MODEL:
        if draft.vehicle_id is None:
            errors["vehicle_id"] = "Please select a specific model"
    elif step == Step.DATES:
        if draft.start_date is None:
            errors["start_date"] = "Start date is required"
        if draft.end_date is None:
            errors["end_date"] = "End date is required"
        if draft.start_date is not None and draft.end_date is not None:
            if draft.start_date >= draft.end_date:
                errors["date_range"] = "End date must be after start date"
        if draft.start_date is not None and draft.start_date < today:
            errors["start_date"] = "Start date cannot be in the past"
    return errors


def advance(
        draft: BookingDraft,
        vehicle_type_lookup: Callable[[int], Optional[VehicleType]],
        today: date,
) -> BookingDraft:
    """
    Validate the current step; move exactly one step forward when it passes,
    otherwise stay put with `validation_errors` filled in. Review is left
    only through a submission, so advancing from Review or Success raises
    InvalidTransitionError.
    """
    if draft.step >= Step.REVIEW:
        raise InvalidTransitionError(f"Cannot advance from {draft.step_name}")
    errors = validate_step(draft, draft.step, vehicle_type_lookup, today)
    if errors:
        return draft.with_changes(validation_errors=errors)
    return draft.with_changes(step=draft.step + 1, validation_errors={})


def retreat(draft: BookingDraft) -> BookingDraft:
    """Step back one (never below Details); answers stay as they were, errors are cleared."""
    if draft.step == Step.SUCCESS:
        raise InvalidTransitionError("Booking already confirmed; reset to start over")
    return draft.with_changes(step=max(draft.step - 1, Step.DETAILS), validation_errors={})


def reset() -> BookingDraft:
    return initial_draft()


# ============================ state machine ============================
class WizardStateMachine:
    """
    Owns one booking draft and applies transitions to it.

    Build one instance per wizard and pass it to whatever renders the steps.
    At most one transition runs at a time; a transition requested while
    another is in flight, a submit outside Review, or any call after
    `dispose()` is an invalid transition. In strict mode that raises
    InvalidTransitionError; otherwise it is logged and ignored.
    """

    def __init__(
            self,
            *,
            booking_service=BookingConflictService,
            catalog=CatalogGateway,
            store=None,
            clock: Optional[Callable[[], date]] = None,
            strict: bool = True,
            draft: Optional[BookingDraft] = None,
            booking: Optional[Booking] = None,
            submit_error: Optional[str] = None,
    ):
        self.booking_service = booking_service
        self.catalog = catalog
        self.store = store
        self.clock = clock or _today
        self.strict = strict
        self.draft = draft or initial_draft()
        self.booking = booking
        self.submit_error = submit_error
        self._busy = threading.Lock()
        self._disposed = False

    # ---------- guards ----------
    @property
    def pending(self) -> bool:
        return self._busy.locked()

    @property
    def disposed(self) -> bool:
        return self._disposed

    def _reject(self, reason: str):
        if self.strict:
            raise InvalidTransitionError(f"Error: {reason}")
        logger.warning("Ignored wizard transition: %s", reason)
        return None

    def _enter(self, name: str) -> bool:
        if self._disposed:
            self._reject(f"{name} called after dispose")
            return False
        if not self._busy.acquire(blocking=False):
            self._reject(f"{name} called while another transition is pending")
            return False
        return True

    # ---------- catalog helpers ----------
    def _vehicle_type(self, type_id: int) -> Optional[VehicleType]:
        try:
            return self.catalog.get_vehicle_type(type_id, store=self.store)
        except VehicleTypeNotFoundError:
            return None

    def selected_vehicle(self) -> Optional[Vehicle]:
        if self.draft.vehicle_id is None:
            return None
        try:
            return self.catalog.get_vehicle(self.draft.vehicle_id, store=self.store)
        except VehicleNotFoundError:
            return None

    def options(self) -> list:
        """Choices offered at the current step."""
        step = self.draft.step
        if step == Step.WHEEL_CLASS:
            return list(WheelClass.ALL)
        if step == Step.CATEGORY and self.draft.wheel_class is not None:
            return self.catalog.list_vehicle_types(self.draft.wheel_class, store=self.store)
        if step == Step.MODEL and self.draft.vehicle_type_id is not None:
            return self.catalog.vehicles_for_type(self.draft.vehicle_type_id, store=self.store)
        return []

    def quote(self) -> Quote:
        return PricingCalculator.quote(self.selected_vehicle(), self.draft.range)

    # ---------- transitions ----------
    def update_field(self, field: str, value) -> BookingDraft:
        if not self._enter("update_field"):
            return self.draft
        try:
            if self.draft.step == Step.SUCCESS:
                self._reject("cannot edit a confirmed booking")
                return self.draft
            self.draft = update_field(self.draft, field, value)
            return self.draft
        finally:
            self._busy.release()

    def advance(self) -> bool:
        if not self._enter("advance"):
            return False
        try:
            if self.draft.step >= Step.REVIEW:
                self._reject(f"cannot advance from {self.draft.step_name}")
                return False
            before = self.draft.step
            self.draft = advance(self.draft, self._vehicle_type, self.clock())
            if self.draft.step == before:
                logger.info("Step %s not valid: %s", self.draft.step_name, self.draft.validation_errors)
                return False
            self.submit_error = None
            return True
        finally:
            self._busy.release()

    def retreat(self) -> bool:
        if not self._enter("retreat"):
            return False
        try:
            if self.draft.step == Step.SUCCESS:
                self._reject("booking already confirmed; reset to start over")
                return False
            moved = self.draft.step > Step.DETAILS
            self.draft = retreat(self.draft)
            self.submit_error = None
            return moved
        finally:
            self._busy.release()

    def submit(self) -> Optional[Booking]:
        """
        Send the reviewed draft to the booking service. On success the wizard
        moves to Success and keeps the Booking; on a conflict or any other
        failure it stays on Review with a user-facing message in
        `submit_error`. If the wizard is disposed while the call is running,
        the outcome is dropped.
        """
        if not self._enter("submit"):
            return None
        try:
            if self.draft.step != Step.REVIEW:
                self._reject(f"submit called from {self.draft.step_name}")
                return None

            draft = self.draft
            booking = None
            error = None
            try:
                booking = self.booking_service.attempt(
                    draft.vehicle_id,
                    draft.range,
                    Customer(first_name=draft.first_name, last_name=draft.last_name),
                    store=self.store,
                    today=self.clock(),
                )
            except ConflictError as e:
                logger.info("Submission conflict: %s", e.message)
                error = CONFLICT_MESSAGE
            except BookingError as e:
                logger.warning("Submission failed: %s", e.message)
                error = GENERIC_FAILURE_MESSAGE
            except Exception:
                logger.exception("Unexpected submission failure")
                error = GENERIC_FAILURE_MESSAGE

            if self._disposed:
                logger.info("Wizard disposed during submit; result discarded")
                return None

            if error is not None:
                self.submit_error = error
                return None

            self.booking = booking
            self.submit_error = None
            self.draft = draft.with_changes(step=Step.SUCCESS, validation_errors={})
            return booking
        finally:
            self._busy.release()

    def reset(self) -> BookingDraft:
        if not self._enter("reset"):
            return self.draft
        try:
            self.draft = reset()
            self.booking = None
            self.submit_error = None
            return self.draft
        finally:
            self._busy.release()

    def dispose(self) -> None:
        """Tear the wizard down; a submission still in flight will not touch it."""
        self._disposed = True

    # ---------- serialization ----------
    def to_dict(self) -> dict:
        options = []
        for o in self.options():
            options.append(o.to_dict() if hasattr(o, "to_dict") else o)
        return {
            "step": self.draft.step,
            "stepName": self.draft.step_name,
            "draft": self.draft.to_dict(),
            "errors": dict(self.draft.validation_errors),
            "options": options,
            "quote": self.quote().to_dict(),
            "submitError": self.submit_error,
            "booking": self.booking.to_dict() if self.booking else None,
        }
