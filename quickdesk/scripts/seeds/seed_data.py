"""Seed ticket categories and demo profiles for local development.

Usage:
    python -m quickdesk.scripts.seeds.seed_data

Prints a signed development token for each demo profile; production tokens
come from the identity provider.
"""

import os
import uuid

from sqlalchemy.exc import SQLAlchemyError

import quickdesk.db.base  # noqa: F401
from quickdesk.auth.models.profile import Profile, UserRole
from quickdesk.core.security import create_access_token
from quickdesk.db.session import SessionLocal
from quickdesk.tickets.models.category import Category

CATEGORIES = [
    ("General", "Questions that do not fit another category", "#3B82F6"),
    ("Technical Support", "Problems using the product", "#8B5CF6"),
    ("Billing", "Invoices, payments and plans", "#10B981"),
    ("Bug Report", "Something is broken", "#EF4444"),
    ("Feature Request", "Ideas and suggestions", "#F59E0B"),
]

DEMO_PROFILES = [
    (
        os.environ.get("SEED_ADMIN_EMAIL", "admin@quickdesk.local"),
        "QuickDesk Admin",
        UserRole.ADMIN.value,
    ),
    (
        os.environ.get("SEED_AGENT_EMAIL", "agent@quickdesk.local"),
        "Sam Agent",
        UserRole.SUPPORT_AGENT.value,
    ),
    (
        os.environ.get("SEED_USER_EMAIL", "user@quickdesk.local"),
        "Alex User",
        UserRole.END_USER.value,
    ),
]


def seed_categories() -> None:
    db = SessionLocal()
    try:
        for name, description, color in CATEGORIES:
            if db.query(Category).filter(Category.name == name).first():
                print(f"  Category already exists: {name}")
                continue
            db.add(Category(name=name, description=description, color=color))
            print(f"✓ Category created: {name}")
        db.commit()
    except SQLAlchemyError as e:
        print(f"✗ Error seeding categories: {e}")
        db.rollback()
        raise
    finally:
        db.close()


def seed_profiles() -> None:
    db = SessionLocal()
    try:
        for email, full_name, role in DEMO_PROFILES:
            profile = db.query(Profile).filter(Profile.email == email).first()
            if profile:
                print(f"  Profile already exists: {email}")
            else:
                profile = Profile(id=uuid.uuid4(), email=email, full_name=full_name, role=role)
                db.add(profile)
                db.commit()
                db.refresh(profile)
                print(f"✓ Profile created: {email} ({role})")

            token = create_access_token(
                {
                    "sub": str(profile.id),
                    "email": profile.email,
                    "user_metadata": {"full_name": profile.full_name},
                }
            )
            print(f"  Dev token for {email}:")
            print(f"    {token}")
    except SQLAlchemyError as e:
        print(f"✗ Error seeding profiles: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    print("Seeding categories...")
    seed_categories()
    print()
    print("Seeding demo profiles...")
    seed_profiles()
