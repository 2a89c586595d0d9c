#!/usr/bin/env python3
"""
Visa Processing System Initialization Script
Creates the database tables and the seed admin and officer accounts

Seed credentials can be overridden with SEED_ADMIN_EMAIL, SEED_ADMIN_PASSWORD,
SEED_OFFICER_EMAIL and SEED_OFFICER_PASSWORD.
"""

import os
import sys

from sqlalchemy.orm import Session

from app.core.database import SessionLocal, create_tables
from app.crud import user as crud_user
from app.models.enums import UserRole
from app.schemas.user import UserRegister


SEED_ACCOUNTS = [
    {
        "email": os.getenv("SEED_ADMIN_EMAIL", "admin@visaprocessing.com"),
        "password": os.getenv("SEED_ADMIN_PASSWORD", "Admin123!"),
        "first_name": "System",
        "last_name": "Administrator",
        "role": UserRole.ADMIN,
    },
    {
        "email": os.getenv("SEED_OFFICER_EMAIL", "officer@visaprocessing.com"),
        "password": os.getenv("SEED_OFFICER_PASSWORD", "Officer123!"),
        "first_name": "Visa",
        "last_name": "Officer",
        "role": UserRole.OFFICER,
    },
]


def init_database():
    """Initialize database tables"""
    print("Creating database tables...")
    create_tables()
    print("✓ Database tables created")


def create_seed_users(db: Session):
    """Create the admin and officer accounts, skipping any that already exist"""
    print("Creating seed accounts...")
    for account in SEED_ACCOUNTS:
        if crud_user.get_by_email(db, email=account["email"]):
            print(f"  - {account['email']} already exists")
            continue
        user_in = UserRegister(
            email=account["email"],
            password=account["password"],
            first_name=account["first_name"],
            last_name=account["last_name"],
        )
        crud_user.create_user(db, obj_in=user_in, role=account["role"], is_verified=True)
        print(f"  ✓ {account['role'].value}: {account['email']}")


def main():
    """Main initialization function"""
    print("Initializing Visa Application Processing System")
    print("=" * 50)

    try:
        init_database()

        db = SessionLocal()
        try:
            create_seed_users(db)
        finally:
            db.close()

        print("\n" + "=" * 50)
        print("✅ Visa Processing System initialized successfully!")
        print("\nNext steps:")
        print("1. Start the application: python -m uvicorn app.main:app --reload")
        print("2. Access the API docs at: http://localhost:8000/api/v1/docs")
        print("3. Change the seed account passwords")

    except Exception as e:
        print(f"\n❌ Error during initialization: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
