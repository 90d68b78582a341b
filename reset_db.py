# reset_db.py
import sys
sys.path.insert(0, '.')

from decimal import Decimal

from pipdesk import crud, models, schemas
from pipdesk.config import settings
from pipdesk.database import Base, SessionLocal, engine

DEFAULT_PLANS = [
    schemas.PlanCreate(name="free", price="0", signals_per_week=2),
    schemas.PlanCreate(
        name="basic", price="47", signals_per_week=5, has_educational_access=True
    ),
    schemas.PlanCreate(
        name="premium", price="97", signals_per_week=10, has_educational_access=True,
        has_priority_support=True, has_exclusive_analysis=True, is_popular=True
    ),
    schemas.PlanCreate(
        name="vip", price="197", has_educational_access=True, has_priority_support=True,
        has_exclusive_analysis=True, has_mentoring=True, has_whatsapp_support=True,
        has_detailed_reports=True
    ),
]


def reset_database():
    # Drop and recreate all tables
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    print(f"✅ Recreated all database tables ({settings.DATABASE_URL})")

    db = SessionLocal()
    try:
        admin = crud.create_user(
            db,
            schemas.UserCreate(
                email=settings.ADMIN_EMAIL,
                password=settings.ADMIN_PASSWORD,
                first_name="Admin",
            ),
            role="admin",
        )
        admin.initial_balance = Decimal("0")
        admin.monthly_goal = Decimal("0")
        db.commit()
        print("✅ Admin user created:")
        print(f"   Email: {admin.email}")

        for plan in DEFAULT_PLANS:
            crud.create_plan(db, plan)
        print(f"✅ Seeded {len(DEFAULT_PLANS)} plans: {', '.join(p.name for p in DEFAULT_PLANS)}")

        # Verify it works
        user = crud.get_user_by_email(db, settings.ADMIN_EMAIL)
        if user is None or user.role != "admin":
            print(f"❌ Admin user {settings.ADMIN_EMAIL} missing after seeding")
            sys.exit(1)
        print(f"✅ Verified admin exists: {user.email} ({db.query(models.Plan).count()} plans)")
    finally:
        db.close()

    print("\n🎉 Database reset complete! Ready to run the app.")


if __name__ == "__main__":
    reset_database()
