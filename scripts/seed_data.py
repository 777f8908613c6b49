"""
Seed script: creates demo users, languages and a few bookings.

Usage:
    python -m scripts.seed_data

This creates:
- 3 languages
- 1 admin, 1 customer and 2 translators (both speaking Arabic)
- 3 bookings submitted through the API as the customer, one of them immediate

Users and languages are written straight to the database (there is no API
for them); bookings go through POST /bookings/ so they get the same expiry
and admin-alert handling as real ones.

Run this after the API is up.
"""

from datetime import datetime, timedelta, timezone

import httpx
from sqlalchemy import select

from models.base import Base, SessionLocal, engine
from models.enums import TranslatorLevel, TranslatorType, UserRole
from models.job import Job  # noqa: F401  registers every booking table
from models.language import Language
from models.user import User, UserLanguage

BASE_URL = "http://localhost:8000"


def seed_reference_data() -> dict:
    Base.metadata.create_all(engine)
    with SessionLocal() as session:
        if session.execute(select(User).where(User.email == "customer@example.com")).scalar():
            print("Reference data already present, skipping")
            customer = session.execute(
                select(User).where(User.email == "customer@example.com")
            ).scalar_one()
            arabic = session.execute(select(Language).where(Language.name == "Arabiska")).scalar_one()
            return {"customer_id": customer.id, "language_id": arabic.id}

        languages = [Language(name=name) for name in ("Arabiska", "Somaliska", "Tigrinja")]
        session.add_all(languages)

        admin = User(name="Admin", email="admin@example.com", role=UserRole.ADMIN.value)
        customer = User(
            name="Region Norr", email="customer@example.com",
            role=UserRole.CUSTOMER.value, city="Umeå", customer_type="paid",
        )
        translators = [
            User(
                name=name, email=email, phone=phone, role=UserRole.TRANSLATOR.value,
                translator_type=TranslatorType.PROFESSIONAL.value,
                translator_level=TranslatorLevel.CERTIFIED.value, gender=gender,
            )
            for name, email, phone, gender in [
                ("Amal", "amal@example.com", "+46700000001", "female"),
                ("Yusuf", "yusuf@example.com", "+46700000002", "male"),
            ]
        ]
        session.add_all([admin, customer, *translators])
        session.flush()

        session.add_all(
            UserLanguage(user_id=t.id, language_id=languages[0].id) for t in translators
        )
        session.commit()
        print(f"Created 3 languages, admin #{admin.id}, customer #{customer.id}, "
              f"translators {[t.id for t in translators]}")
        return {"customer_id": customer.id, "language_id": languages[0].id}


def seed():
    ids = seed_reference_data()
    client = httpx.Client(
        base_url=BASE_URL,
        timeout=10.0,
        headers={"X-User-Id": str(ids["customer_id"])},
    )
    now = datetime.now(timezone.utc)

    bookings = [
        {"due": (now + timedelta(hours=2)).isoformat(), "duration": 30, "immediate": True},
        {"due": (now + timedelta(hours=30)).isoformat(), "duration": 60},
        {"due": (now + timedelta(days=5)).isoformat(), "duration": 90,
         "customer_physical_type": True, "town": "Umeå", "certified": "yes"},
    ]

    print(f"Submitting {len(bookings)} bookings to {BASE_URL}...\n")

    for booking in bookings:
        resp = client.post("/bookings/", json={"from_language_id": ids["language_id"], **booking})
        resp.raise_for_status()
        data = resp.json()
        print(f"  [{data['status']}] booking #{data['id']} due {data['due']} "
              f"(expires {data['will_expire_at']})")

    print("\nDone!")
    print("List bookings:  curl -H 'X-User-Id: <admin id>' http://localhost:8000/bookings/")


if __name__ == "__main__":
    seed()
