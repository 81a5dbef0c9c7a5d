"""Pytest configuration and fixtures."""

import asyncio
import os
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

# Point the app at a throwaway database before finance_tracker is imported.
_TMP_DIR = Path(tempfile.mkdtemp(prefix="finance-tracker-tests-"))
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TMP_DIR / 'test.db'}"
os.environ["AVATAR_DIR"] = str(_TMP_DIR / "avatars")

import pytest
from fastapi.testclient import TestClient

from finance_tracker.avatars import AvatarStorage, get_avatar_storage
from finance_tracker.db import Base, TransactionModel, async_session, engine
from finance_tracker.main import app


async def _reset_database() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture
def client(tmp_path: Path):
    """TestClient over a fresh database and a per-test avatar directory."""
    asyncio.run(_reset_database())
    app.dependency_overrides[get_avatar_storage] = lambda: AvatarStorage(tmp_path / "avatars")
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def register_and_login(client: TestClient, email: str = "alice@example.com", password: str = "secret123") -> dict:
    """Register a user and return Authorization headers for them."""
    resp = client.post("/auth/register", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    resp = client.post("/auth/login", data={"username": email, "password": password})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


@pytest.fixture
def auth_headers(client: TestClient) -> dict:
    return register_and_login(client)


def insert_transaction(user_id: int, days_ago: int, **fields: Any) -> None:
    """Insert a transaction directly with a ``created_at`` in the past (UTC)."""
    created_at = datetime.now(timezone.utc).replace(tzinfo=None) - timedelta(days=days_ago)
    values = {
        "type": "Expense",
        "category": "Food",
        "amount": 10.0,
        "description": "",
        "date": created_at.date(),
    }
    values.update(fields)

    async def _insert() -> None:
        async with async_session() as session:
            session.add(TransactionModel(user_id=user_id, created_at=created_at, **values))
            await session.commit()

    asyncio.run(_insert())
