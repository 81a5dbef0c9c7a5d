"""
Seed the database with demo users and a year of transactions.

Usage:
    finance-tracker-seed [--users N] [--transactions N] [--password PASSWORD] [--seed SEED]

Users already registered under a demo email are reused, so the script can be
run repeatedly. Every transaction gets a ``created_at`` somewhere in the past
365 days, so all four range views have data.
"""

import argparse
import asyncio
import logging
import random
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional

from finance_tracker import repository
from finance_tracker.auth import get_password_hash
from finance_tracker.config import configure_logging
from finance_tracker.db import UserModel, async_session, create_tables
from finance_tracker.schemas import TransactionIn, TransactionType

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "password123"
EXPENSE_CATEGORIES = ["Housing", "Transport", "Health", "Food", "Education", "Other"]
DEMO_NAMES = ["Ava Turner", "Noah Patel", "Mia Chen", "Liam Okafor", "Zoe Novak", "Ethan Ruiz", "Isla Berg"]


def demo_email(index: int) -> str:
    return f"demo{index + 1}@example.com"


def random_transaction(rng: random.Random, today: date) -> TransactionIn:
    """80% expenses, 10% income, 10% saving or investment."""
    roll = rng.random()
    when = today - timedelta(days=rng.randint(0, 364))
    if roll < 0.8:
        category = rng.choice(EXPENSE_CATEGORIES)
        return TransactionIn(
            type=TransactionType.EXPENSE,
            category=category,
            amount=round(rng.uniform(10, 1000), 2),
            date=when,
            description=f"{category} expense",
        )
    if roll < 0.9:
        return TransactionIn(
            type=TransactionType.INCOME,
            category="Salary",
            amount=round(rng.uniform(2000, 9000), 2),
            date=when,
            description="Monthly income",
        )
    ttype = rng.choice([TransactionType.SAVING, TransactionType.INVESTMENT])
    return TransactionIn(
        type=ttype,
        category="",
        amount=round(rng.uniform(300, 5000), 2),
        date=when,
        description=f"{ttype.value} contribution",
    )


async def _demo_users(db, count: int, password: str) -> List[UserModel]:
    users = []
    password_hash = get_password_hash(password)
    for i in range(count):
        email = demo_email(i)
        user = await repository.get_user_by_email(db, email)
        if user is not None:
            logger.info("Demo user %s already exists, skipping", email)
        else:
            name = DEMO_NAMES[i % len(DEMO_NAMES)]
            user = await repository.create_user(db, name, email, password_hash)
        users.append(user)
    return users


async def seed(
    users: int = 5,
    transactions: int = 100,
    password: str = DEMO_PASSWORD,
    rng: Optional[random.Random] = None,
) -> int:
    """Create the demo users and ``transactions`` random transactions; returns how many were created."""
    rng = rng or random.Random()
    await create_tables()
    now = datetime.now(timezone.utc).replace(tzinfo=None)

    async with async_session() as db:
        demo = await _demo_users(db, users, password)
        if not demo:
            return 0
        for _ in range(transactions):
            payload = random_transaction(rng, now.date())
            created_at = datetime.combine(payload.date, now.time())
            owner = rng.choice(demo)
            await repository.create_transaction(db, owner.id, payload, created_at=created_at)

    logger.info("Seeded %d transactions across %d users", transactions, len(demo))
    return transactions


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the finance tracker database with demo data")
    parser.add_argument("--users", type=int, default=5, help="Number of demo users (default: 5)")
    parser.add_argument("--transactions", type=int, default=100, help="Number of transactions (default: 100)")
    parser.add_argument("--password", default=DEMO_PASSWORD, help="Password for new demo users")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for repeatable data")
    args = parser.parse_args()

    configure_logging()
    created = asyncio.run(seed(args.users, args.transactions, args.password, random.Random(args.seed)))
    print(f"Created {created} transactions for {args.users} demo users (password: {args.password})")


if __name__ == "__main__":
    main()
