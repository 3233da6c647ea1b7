import logging

from flask import Blueprint, jsonify, request
from werkzeug.exceptions import HTTPException

from ..exceptions import ConflictError, TransientError, ValidationError, VehicleTypeNotFoundError
from ..services.booking_service import BookingConflictService
from ..services.catalog_service import CatalogGateway

logger = logging.getLogger(__name__)

bp = Blueprint("api", __name__, url_prefix="/api")


@bp.get("/vehicle-types")
def list_vehicle_types():
    """All vehicle types: [{id, name, wheels}]."""
    types = CatalogGateway.list_vehicle_types()
    return jsonify([t.to_dict() for t in types])


@bp.get("/vehicles/<type_id>")
def list_vehicles(type_id):
    """Available vehicles of one type."""
    try:
        tid = int(type_id)
    except ValueError:
        return jsonify({"message": "Invalid vehicle type"}), 400
    try:
        CatalogGateway.get_vehicle_type(tid)
    except VehicleTypeNotFoundError as e:
        return jsonify({"message": e.message}), 404
    vehicles = CatalogGateway.vehicles_for_type(tid)
    return jsonify([v.to_dict() for v in vehicles])


@bp.post("/bookings")
def create_booking():
    """Create a booking if the vehicle is free for the whole date range."""
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return jsonify({"message": "All fields are required."}), 400

    try:
        vehicle_id, date_range, customer = BookingConflictService.parse_request(payload)
        booking = BookingConflictService.attempt(vehicle_id, date_range, customer)
    except ValidationError as e:
        return jsonify({"message": e.message, "errors": e.field_errors}), 400
    except ConflictError as e:
        return jsonify({"message": e.message}), 409
    except TransientError as e:
        logger.error("Error creating booking: %s", e.message)
        return jsonify({"message": "An internal server error occurred."}), 500

    return jsonify({"message": "Booking created successfully!", "booking": booking.to_dict()}), 201


@bp.errorhandler(Exception)
def handle_unexpected(e):
    if isinstance(e, HTTPException):
        return jsonify({"message": e.description}), e.code
    logger.exception("Unhandled API error")
    return jsonify({"message": "An internal server error occurred."}), 500
