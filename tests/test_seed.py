"""
Hospital Auth - Seed Script Tests
"""

from sqlmodel import select

from hospital_auth.auth.models import Account
from scripts.seed_users import ADMIN_ACCOUNT, DEMO_ACCOUNTS, seed_accounts


def test_seed_is_idempotent(test_engine, db_session):
    first = seed_accounts(test_engine, [ADMIN_ACCOUNT] + DEMO_ACCOUNTS)
    second = seed_accounts(test_engine, [ADMIN_ACCOUNT] + DEMO_ACCOUNTS)

    assert len(first) == 4
    assert second == []
    assert len(db_session.exec(select(Account)).all()) == 4


def test_seeded_accounts_follow_verification_flags(client, test_engine):
    seed_accounts(test_engine, DEMO_ACCOUNTS)

    verified = client.post("/login", json={"email": "soignant@hopital.local", "password": "Soignant@2024"})
    pending = client.post("/login", json={"email": "nouveau@hopital.local", "password": "Nouveau@2024"})

    assert verified.status_code == 200
    assert pending.status_code == 403
