from vehicle_booking import create_app
from vehicle_booking.models.store import Store
from vehicle_booking.services.catalog_service import CatalogGateway


def main():
    app = create_app()
    with app.app_context():
        store = Store.instance()

        # ---- Demo catalog (create only if none exists) ----
        created = CatalogGateway.seed_defaults(store)
        store.save()

        if created:
            print(f"✅ Seed complete: {len(store.vehicle_types)} vehicle types, {created} vehicles.")
        else:
            print("ℹ️ Catalog already present; nothing seeded.")


if __name__ == "__main__":
    main()
