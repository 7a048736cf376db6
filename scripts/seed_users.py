"""
Hospital Auth - Database Seed Script

Creates an initial admin account and, optionally, demo accounts.

Usage:
    python -m scripts.seed_users
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from datetime import datetime
from typing import List, Tuple

from sqlmodel import Session, select

from hospital_auth.config import settings
from hospital_auth.auth.database import get_engine, init_db
from hospital_auth.auth.models import Account, ROLE_ADMIN, ROLE_ADMINISTRATIF, ROLE_USER
from hospital_auth.auth.password import hash_password


ADMIN_ACCOUNT = ("admin@hopital.local", "Admin@Hopital2024", [ROLE_ADMIN], True)

DEMO_ACCOUNTS = [
    ("administratif@hopital.local", "Administratif@2024", [ROLE_ADMINISTRATIF], True),
    ("soignant@hopital.local", "Soignant@2024", [ROLE_USER], True),
    ("nouveau@hopital.local", "Nouveau@2024", [ROLE_USER], False),
]


def seed_accounts(engine, accounts: List[Tuple[str, str, List[str], bool]]) -> List[str]:
    """
    Insert accounts that do not exist yet.

    Returns:
        Emails of the accounts created
    """
    created = []
    with Session(engine) as session:
        for email, password, roles, verified in accounts:
            existing = session.exec(
                select(Account).where(Account.email == email)
            ).first()

            if existing:
                print(f"Account {email} already exists.")
                continue

            now = datetime.utcnow()
            session.add(Account(
                email=email,
                password_hash=hash_password(password),
                roles=roles,
                is_verified=verified,
                created_at=now,
                updated_at=now,
            ))
            created.append(email)
            print(f"Created account: {email} ({', '.join(roles)}{'' if verified else ', unverified'})")

        session.commit()

    return created


if __name__ == "__main__":
    print("=" * 50)
    print("Hospital Auth - Account Seed Script")
    print("=" * 50)

    engine = get_engine(settings.DATABASE_URL)
    init_db(engine)

    if seed_accounts(engine, [ADMIN_ACCOUNT]):
        print(f"  Email: {ADMIN_ACCOUNT[0]}")
        print(f"  Password: {ADMIN_ACCOUNT[1]}")

    print()
    response = input("Create demo accounts? (y/n): ")
    if response.lower() == "y":
        seed_accounts(engine, DEMO_ACCOUNTS)

    print()
    print("Done!")
