#!/usr/bin/env python3
"""
Script to seed the default categories and a demo author into the database.
Uses the application's own settings, so DATABASE_URL / POSTGRES_* apply.

Usage: python3 inject_sample_data.py
"""

import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent / "backend"))

from sqlalchemy.exc import SQLAlchemyError
from app.core.auth import hash_password
from app.core.database import Base, SessionLocal, engine
from app.models.category import Category
from app.models.user import User
from app.repositories.categories import CategoryRepository
from app.repositories.users import UserRepository


# Default bilingual category set
SAMPLE_CATEGORIES = {
    "en": ["Creative", "Culture", "Non-Fiction", "Research", "Podcast"],
    "bn": ["ক্রিয়েটিভ", "কালচার", "নন-ফিকশন", "রিসার্চ", "পডকাস্ট"],
}

DEMO_AUTHOR = {
    "name": "Demo Author",
    "email": "author@example.com",
    "password": "password123",
}


def inject_sample_data():
    """Create missing categories and the demo author; existing rows are left alone."""
    print("🔌 Connecting to database...")
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()

    try:
        categories = CategoryRepository(db)
        added_count = 0

        for language, names in SAMPLE_CATEGORIES.items():
            for name in names:
                if categories.find_by_name(name, language):
                    print(f"⊘ Category already exists: {name} ({language})")
                    continue
                categories.add(Category(name=name, language=language))
                print(f"✓ Added category: {name} ({language})")
                added_count += 1

        users = UserRepository(db)
        if users.get_by_email(DEMO_AUTHOR["email"]):
            print(f"⊘ Demo author already exists: {DEMO_AUTHOR['email']}")
        else:
            users.add(
                User(
                    name=DEMO_AUTHOR["name"],
                    email=DEMO_AUTHOR["email"],
                    password_hash=hash_password(DEMO_AUTHOR["password"]),
                    is_active=True,
                )
            )
            print(f"✓ Added demo author: {DEMO_AUTHOR['email']} / {DEMO_AUTHOR['password']}")

        db.commit()

        print()
        print(f"✓ Successfully added {added_count} categor{'y' if added_count == 1 else 'ies'}")
        print()
        print("Next steps:")
        print("1. Start the API: uvicorn app.main:app --reload (from backend/)")
        print("2. Log in with the demo author via POST /api/auth/login")
        print("3. Create posts in any category")

    except SQLAlchemyError as e:
        print(f"❌ Error: {e}")
        db.rollback()
        raise

    finally:
        db.close()
        print()
        print("✓ Database connection closed")


if __name__ == "__main__":
    print("=" * 60)
    print("  Litaria Sample Data Script")
    print("=" * 60)
    print()

    inject_sample_data()
