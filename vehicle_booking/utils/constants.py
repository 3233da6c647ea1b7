# vehicle_booking/utils/constants.py

"""
Global constants for wheel classes, overlap policies, wizard steps and the
default catalog. These constants are imported by both models and services.
"""
from decimal import Decimal

# Date format (used for booking start/end on the wire)
DATE_FMT = "%Y-%m-%d"

# Business timezone that defines "today" for the past-date rule
DEFAULT_TIMEZONE = "Asia/Kolkata"

# Minor unit of the currency (prices are quoted to 2 decimal places)
CENTS = Decimal("0.01")


class WheelClass:
    TWO = 2
    FOUR = 4

    ALL = (TWO, FOUR)


class OverlapPolicy:
    CLOSED = "closed"  # shared boundary day is a conflict
    HALF_OPEN = "half_open"  # end day is exclusive

    ALL = (CLOSED, HALF_OPEN)


class Step:
    DETAILS = 0
    WHEEL_CLASS = 1
    CATEGORY = 2
    MODEL = 3
    DATES = 4
    REVIEW = 5
    SUCCESS = 6

    NAMES = ("Details", "WheelClass", "Category", "Model", "Dates", "Review", "Success")


# Draft fields that the wizard accepts through update_field
DRAFT_FIELDS = (
    "first_name",
    "last_name",
    "wheel_class",
    "vehicle_type_id",
    "vehicle_id",
    "start_date",
    "end_date",
)

# Downstream fields cleared when an upstream field changes
CASCADE_CLEARS = {
    "wheel_class": ("vehicle_type_id", "vehicle_id"),
    "vehicle_type_id": ("vehicle_id",),
}

MIN_NAME_LENGTH = 2

# --- User-facing messages ---
CONFLICT_MESSAGE = (
    "This vehicle is already booked for the selected dates. "
    "Please choose different dates or another vehicle."
)
GENERIC_FAILURE_MESSAGE = "An unexpected error occurred. Please try again."

# --- Default catalog (used by seeds.py and tests) ---
DEFAULT_VEHICLE_TYPES = [
    {"name": "Hatchback", "wheels": 4},
    {"name": "SUV", "wheels": 4},
    {"name": "Sedan", "wheels": 4},
    {"name": "Cruiser", "wheels": 2},
]

DEFAULT_VEHICLES = {
    "Hatchback": [("Maruti Suzuki Swift", "1500.00"), ("Hyundai i20", "1600.00"), ("Tata Altroz", "1550.00")],
    "SUV": [("Mahindra Scorpio", "2500.00"), ("Tata Harrier", "2800.00"), ("Mahindra XUV300", "2300.00")],
    "Sedan": [("Honda City", "2000.00"), ("Maruti Suzuki Dzire", "1800.00"), ("Hyundai Verna", "2100.00")],
    "Cruiser": [
        ("Royal Enfield Classic 350", "1000.00"),
        ("Royal Enfield Thunderbird", "1100.00"),
        ("Royal Enfield Himalayan", "1200.00"),
    ],
}
