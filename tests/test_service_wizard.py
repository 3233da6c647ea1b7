"""WizardStateMachine against the seeded in-memory catalog."""
from datetime import date
from decimal import Decimal

import pytest

from vehicle_booking.exceptions import ConflictError, InvalidTransitionError, TransientError, ValidationError
from vehicle_booking.models.catalog import Booking, Customer
from vehicle_booking.models.date_range import DateRange
from vehicle_booking.models.draft import BookingDraft
from vehicle_booking.services.booking_service import BookingConflictService
from vehicle_booking.services.wizard_service import WizardStateMachine
from vehicle_booking.utils.constants import CONFLICT_MESSAGE, GENERIC_FAILURE_MESSAGE, Step

TODAY = date(2025, 1, 1)


def make(store, **kwargs):
    return WizardStateMachine(store=store, clock=lambda: TODAY, **kwargs)


def walk_to_review(m, vehicle_id=7, start="2025-01-10", end="2025-01-13"):
    m.update_field("first_name", "Asha")
    m.update_field("last_name", "Rao")
    assert m.advance()
    m.update_field("wheel_class", 4)
    assert m.advance()
    m.update_field("vehicle_type_id", 3)  # Sedan
    assert m.advance()
    m.update_field("vehicle_id", vehicle_id)
    assert m.advance()
    m.update_field("start_date", start)
    m.update_field("end_date", end)
    assert m.advance()
    assert m.draft.step == Step.REVIEW


class FakeService:
    """Stand-in booking service that records calls and runs a hook."""

    def __init__(self, result=None, error=None, hook=None):
        self.result = result
        self.error = error
        self.hook = hook
        self.calls = []

    def attempt(self, vehicle_id, date_range, customer, *, store=None, today=None):
        self.calls.append((vehicle_id, date_range, customer))
        if self.hook:
            self.hook()
        if self.error:
            raise self.error
        return self.result


def _booking():
    return Booking(booking_id=42, first_name="Asha", last_name="Rao", vehicle_id=7,
                   range=DateRange.parse("2025-01-10", "2025-01-13"))


def test_end_to_end_scenario(seeded_store):
    m = make(seeded_store)
    walk_to_review(m)

    q = m.quote()
    assert m.selected_vehicle().price_per_day == Decimal("2000.00")
    assert q.days == 4
    assert q.total_price == Decimal("8000.00")

    booking = m.submit()
    assert booking is not None
    assert booking.booking_id == 1
    assert booking.vehicle_id == 7
    assert m.draft.step == Step.SUCCESS
    assert m.booking == booking
    assert seeded_store.bookings[1]["first_name"] == "Asha"


def test_options_follow_selections(seeded_store):
    m = make(seeded_store)
    m.update_field("first_name", "Asha")
    m.update_field("last_name", "Rao")
    m.advance()
    assert m.options() == [2, 4]

    m.update_field("wheel_class", 2)
    m.advance()
    assert [t.name for t in m.options()] == ["Cruiser"]

    m.update_field("vehicle_type_id", 4)
    m.advance()
    assert [v.vehicle_id for v in m.options()] == [10, 11, 12]


def test_cascading_clear_through_the_machine(seeded_store):
    m = make(seeded_store)
    walk_to_review(m)
    for _ in range(4):
        m.retreat()
    assert m.draft.step == Step.WHEEL_CLASS

    m.update_field("wheel_class", 2)
    assert m.draft.vehicle_type_id is None
    assert m.draft.vehicle_id is None
    assert m.draft.start_date == date(2025, 1, 10)  # dates are not downstream of the vehicle


def test_stale_category_cannot_advance(seeded_store):
    m = make(seeded_store, draft=BookingDraft(step=Step.CATEGORY, wheel_class=2, vehicle_type_id=3))
    assert not m.advance()
    assert "vehicle_type_id" in m.draft.validation_errors


def test_quote_is_zero_before_dates(seeded_store):
    m = make(seeded_store, draft=BookingDraft(vehicle_id=7))
    assert m.quote().days == 0
    assert m.quote().total_price == 0


def test_conflict_keeps_review_with_message(seeded_store):
    BookingConflictService.attempt(7, DateRange.parse("2025-01-12", "2025-01-15"), Customer("Ravi", "Kumar"),
                                   store=seeded_store, today=TODAY)
    m = make(seeded_store)
    walk_to_review(m)

    assert m.submit() is None
    assert m.draft.step == Step.REVIEW
    assert m.submit_error == CONFLICT_MESSAGE
    assert len(seeded_store.bookings) == 1


@pytest.mark.parametrize("error", [ValidationError(), TransientError(), RuntimeError("boom")])
def test_other_failures_show_generic_message(seeded_store, error):
    m = make(seeded_store, booking_service=FakeService(error=error))
    walk_to_review(m)

    assert m.submit() is None
    assert m.draft.step == Step.REVIEW
    assert m.submit_error == GENERIC_FAILURE_MESSAGE


def test_retry_after_failure_succeeds(seeded_store):
    svc = FakeService(error=TransientError())
    m = make(seeded_store, booking_service=svc)
    walk_to_review(m)
    m.submit()
    svc.error, svc.result = None, _booking()

    assert m.submit() == _booking()
    assert m.submit_error is None
    assert len(svc.calls) == 2


def test_submit_outside_review_is_invalid(seeded_store):
    m = make(seeded_store)
    with pytest.raises(InvalidTransitionError):
        m.submit()


def test_submit_outside_review_is_a_noop_when_not_strict(seeded_store):
    svc = FakeService(result=_booking())
    m = make(seeded_store, booking_service=svc, strict=False)
    assert m.submit() is None
    assert svc.calls == []
    assert m.draft.step == Step.DETAILS


def test_no_reentrant_transition_while_submitting(seeded_store):
    seen = []

    def hook():
        assert m.pending
        with pytest.raises(InvalidTransitionError):
            m.submit()
        with pytest.raises(InvalidTransitionError):
            m.advance()
        seen.append(True)

    svc = FakeService(result=_booking(), hook=hook)
    m = make(seeded_store, booking_service=svc)
    walk_to_review(m)

    assert m.submit() == _booking()
    assert seen == [True]
    assert len(svc.calls) == 1
    assert not m.pending


def test_result_discarded_after_dispose(seeded_store):
    svc = FakeService(result=_booking(), hook=lambda: m.dispose())
    m = make(seeded_store, booking_service=svc)
    walk_to_review(m)
    before = m.draft

    assert m.submit() is None
    assert m.draft is before
    assert m.booking is None
    with pytest.raises(InvalidTransitionError):
        m.reset()


def test_reset_from_success(seeded_store):
    m = make(seeded_store)
    walk_to_review(m)
    m.submit()

    m.reset()
    assert m.draft == BookingDraft()
    assert m.booking is None


def test_success_is_terminal_except_reset(seeded_store):
    m = make(seeded_store, booking_service=FakeService(result=_booking()))
    walk_to_review(m)
    m.submit()
    with pytest.raises(InvalidTransitionError):
        m.retreat()
    with pytest.raises(InvalidTransitionError):
        m.advance()
    with pytest.raises(InvalidTransitionError):
        m.update_field("first_name", "Ravi")


def test_to_dict_exposes_state(seeded_store):
    m = make(seeded_store)
    walk_to_review(m)
    state = m.to_dict()
    assert state["stepName"] == "Review"
    assert state["quote"] == {"days": 4, "totalPrice": 8000.0}
    assert state["draft"]["vehicle_id"] == 7
    assert state["booking"] is None
