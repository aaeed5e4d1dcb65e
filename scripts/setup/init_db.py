# scripts/setup/init_db.py
"""
Initialize database — creates the vehicles and audit_log tables.
Run once before first launch, or after adding new models.
Usage: python scripts/setup/init_db.py [--seed]
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from decimal import Decimal
from sqlalchemy import inspect, text
from app.database import SessionLocal, create_tables, engine
from app.config import settings
from app.models.vehicle import ApprovalStatus, FuelType, TransmissionType
from app.services import vehicle_service

SEED_VEHICLES = [
    {"make": "Toyota", "model": "Corolla XEi", "fabricate_year": 2021, "model_year": 2022,
     "color": "Prata", "km": 38000, "price": Decimal("118900.00"),
     "transmission_type": TransmissionType.CVT, "fuel_type": FuelType.FLEX},
    {"make": "Volkswagen", "model": "Gol 1.0", "fabricate_year": 2018, "model_year": 2018,
     "color": "Branco", "km": 82000, "price": Decimal("42500.00"),
     "transmission_type": TransmissionType.MANUAL, "fuel_type": FuelType.FLEX},
    {"make": "Honda", "model": "HR-V EXL", "fabricate_year": 2020, "model_year": 2020,
     "color": "Preto", "km": 54000, "price": Decimal("109000.00"),
     "transmission_type": TransmissionType.CVT, "fuel_type": FuelType.FLEX},
]


def seed():
    """Insert a few approved demo vehicles so the public listing is not empty."""
    db = SessionLocal()
    try:
        for fields in SEED_VEHICLES:
            vehicle = vehicle_service.add_vehicle(db, dict(fields), created_by="seed")
            vehicle_service.update_approval(db, vehicle.id, ApprovalStatus.PENDING,
                                            ApprovalStatus.APPROVED, "seed", vehicle.created_at)
        db.commit()
    finally:
        db.close()
    print(f"🌱 Seeded {len(SEED_VEHICLES)} approved vehicles")


def main():
    print("🗄️  Inventory DB Initialization")
    print("=" * 40)
    print(f"📡 Database: {settings.DATABASE_URL}")

    # Test connection
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("✅ Database connection OK")
    except Exception as e:
        print(f"❌ Cannot connect to database: {e}")
        print("\nMake sure PostgreSQL is running:")
        print("  sudo systemctl start postgresql")
        sys.exit(1)

    print("\n📋 Creating tables...")
    create_tables()
    print("✅ All tables created")

    tables = sorted(inspect(engine).get_table_names())
    print(f"\n📊 Tables in database ({len(tables)} total):")
    for t in tables:
        print(f"   ✓ {t}")

    if "--seed" in sys.argv[1:]:
        seed()

    print("\n🎉 Database ready! You can now start the backend:")
    print(f"   uvicorn app.main:app --host {settings.BACKEND_IP} --port {settings.BACKEND_PORT} --reload")


if __name__ == "__main__":
    main()
