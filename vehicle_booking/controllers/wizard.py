from flask import Blueprint, current_app, jsonify, request, session

from ..exceptions import InvalidTransitionError, ValidationError
from ..models.draft import BookingDraft
from ..services.booking_service import BookingConflictService
from ..services.wizard_service import WizardStateMachine

bp = Blueprint("wizard", __name__, url_prefix="/wizard")

SESSION_KEY = "wizard"


def _load_machine() -> WizardStateMachine:
    """Rebuild the wizard for this browser session from what the session holds."""
    data = session.get(SESSION_KEY) or {}
    booking = None
    if data.get("booking_id") is not None:
        booking = BookingConflictService.get_booking(data["booking_id"])
    return WizardStateMachine(
        strict=current_app.config.get("WIZARD_STRICT", True),
        draft=BookingDraft.from_dict(data.get("draft")),
        booking=booking,
        submit_error=data.get("submit_error"),
    )


def _save_machine(machine: WizardStateMachine) -> None:
    session[SESSION_KEY] = {
        "draft": machine.draft.to_dict(),
        "booking_id": machine.booking.booking_id if machine.booking else None,
        "submit_error": machine.submit_error,
    }


def _respond(machine: WizardStateMachine, status: int = 200):
    _save_machine(machine)
    return jsonify(machine.to_dict()), status


@bp.get("")
def state():
    return _respond(_load_machine())


@bp.post("/field")
def update_field():
    body = request.get_json(silent=True) or {}
    machine = _load_machine()
    try:
        machine.update_field(body.get("field"), body.get("value"))
    except ValidationError as e:
        return jsonify({"message": e.message, "errors": e.field_errors}), 400
    except InvalidTransitionError as e:
        return jsonify({"message": e.message}), 409
    return _respond(machine)


@bp.post("/next")
def advance():
    machine = _load_machine()
    try:
        ok = machine.advance()
    except InvalidTransitionError as e:
        return jsonify({"message": e.message}), 409
    return _respond(machine, 200 if ok else 422)


@bp.post("/back")
def retreat():
    machine = _load_machine()
    try:
        machine.retreat()
    except InvalidTransitionError as e:
        return jsonify({"message": e.message}), 409
    return _respond(machine)


@bp.post("/submit")
def submit():
    machine = _load_machine()
    try:
        booking = machine.submit()
    except InvalidTransitionError as e:
        return jsonify({"message": e.message}), 409
    return _respond(machine, 201 if booking else 200)


@bp.post("/reset")
def reset():
    machine = _load_machine()
    machine.reset()
    return _respond(machine)
