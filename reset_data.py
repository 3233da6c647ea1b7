"""
reset_data.py
-------------
Utility script to clear all stored data (vehicle types, vehicles, bookings) from the local data.pkl file.

This script is designed for development and testing purposes.

Usage:
    $ python reset_data.py

After running this script, you can repopulate the demo catalog by executing:
    $ python seeds.py
"""

from vehicle_booking.models.store import Store


def main():
    """Clear the persistent store and restart its id sequences."""
    store = Store.instance()
    store.clear()

    print("✅ data.pkl has been successfully cleared.")
    print("💡 Tip: Run `python seeds.py` to regenerate demo data.")


if __name__ == "__main__":
    main()
