"""Owner-scoped persistence for users and transactions.

Every transaction query filters on ``user_id``; a row owned by someone else
behaves exactly like a missing row. Range filters apply to the calendar date
of ``created_at``, matching how the ledger groups transactions.
"""

import logging
from datetime import datetime, time, timedelta
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import select

from finance_tracker.db import TransactionModel, UserModel
from finance_tracker.ranges import DateRange
from finance_tracker.schemas import TransactionIn, TransactionType

logger = logging.getLogger(__name__)


def _created_within(range_: DateRange):
    start = datetime.combine(range_.start_date, time.min)
    end = datetime.combine(range_.end_date + timedelta(days=1), time.min)
    return (TransactionModel.created_at >= start, TransactionModel.created_at < end)


def _fields(payload: TransactionIn) -> dict:
    return {
        "type": payload.type.value,
        "category": payload.category or "",
        "amount": payload.amount,
        "description": payload.description or "",
        "date": payload.date,
    }


# ----------------------------------------------------------------------------
# Users
# ----------------------------------------------------------------------------
async def get_user_by_email(db: AsyncSession, email: str) -> Optional[UserModel]:
    result = await db.execute(select(UserModel).where(UserModel.email == email))
    return result.scalar_one_or_none()


async def create_user(db: AsyncSession, name: str, email: str, password_hash: str) -> UserModel:
    user = UserModel(name=name, email=email, password_hash=password_hash)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info("Registered user %s", user.id)
    return user


# ----------------------------------------------------------------------------
# Transactions
# ----------------------------------------------------------------------------
async def fetch_transactions(
    db: AsyncSession,
    user_id: int,
    range_: DateRange,
    offset: int = 0,
    limit: int = 10,
) -> List[TransactionModel]:
    """Newest first, one page of the owner's transactions created inside ``range_``."""
    query = (
        select(TransactionModel)
        .where(TransactionModel.user_id == user_id, *_created_within(range_))
        .order_by(TransactionModel.created_at.desc(), TransactionModel.id.desc())
        .offset(offset)
        .limit(limit)
    )
    result = await db.execute(query)
    return list(result.scalars().all())


async def get_transaction(db: AsyncSession, user_id: int, transaction_id: int) -> Optional[TransactionModel]:
    result = await db.execute(
        select(TransactionModel).where(
            TransactionModel.id == transaction_id,
            TransactionModel.user_id == user_id,
        )
    )
    return result.scalar_one_or_none()


async def create_transaction(
    db: AsyncSession,
    user_id: int,
    payload: TransactionIn,
    created_at: Optional[datetime] = None,
) -> TransactionModel:
    """Insert a transaction; ``created_at`` defaults to the database clock."""
    tx = TransactionModel(user_id=user_id, **_fields(payload))
    if created_at is not None:
        tx.created_at = created_at
    db.add(tx)
    await db.commit()
    await db.refresh(tx)
    logger.info("Created transaction %s for user %s", tx.id, user_id)
    return tx


async def update_transaction(
    db: AsyncSession,
    user_id: int,
    transaction_id: int,
    payload: TransactionIn,
) -> Optional[TransactionModel]:
    tx = await get_transaction(db, user_id, transaction_id)
    if tx is None:
        return None
    for key, value in _fields(payload).items():
        setattr(tx, key, value)
    await db.commit()
    await db.refresh(tx)
    logger.info("Updated transaction %s for user %s", tx.id, user_id)
    return tx


async def delete_transaction(db: AsyncSession, user_id: int, transaction_id: int) -> bool:
    tx = await get_transaction(db, user_id, transaction_id)
    if tx is None:
        return False
    await db.delete(tx)
    await db.commit()
    logger.info("Deleted transaction %s for user %s", transaction_id, user_id)
    return True


async def totals_by_type(db: AsyncSession, user_id: int, range_: DateRange) -> Dict[TransactionType, float]:
    """Sum of amounts per transaction type for transactions created inside ``range_``."""
    query = (
        select(TransactionModel.type, func.sum(TransactionModel.amount))
        .where(TransactionModel.user_id == user_id, *_created_within(range_))
        .group_by(TransactionModel.type)
    )
    result = await db.execute(query)
    return {TransactionType(ttype): float(total or 0) for ttype, total in result.all()}
