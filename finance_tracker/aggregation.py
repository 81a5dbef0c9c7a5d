"""Date grouping and period-over-period trend math for transactions.

Everything here is pure: no I/O, no shared state.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Literal, Mapping, Optional

from finance_tracker.schemas import TransactionType, TrendSummary


@dataclass
class DayGroup:
    """Transactions created on one calendar day, plus their signed total."""

    transactions: List[Any] = field(default_factory=list)
    amount: float = 0


def signed_amount(tx: Any) -> float:
    """Amount with the sign implied by the transaction type (expenses negative)."""
    return tx.amount * TransactionType(tx.type).sign


def _day_key(created_at: Any) -> str:
    # Strings keep whatever precedes the time separator, no timezone shift.
    if isinstance(created_at, datetime):
        return created_at.date().isoformat()
    return str(created_at).split("T")[0]


def group_by_date(transactions: Iterable[Any]) -> Dict[str, DayGroup]:
    """Bucket transactions by the calendar date of ``created_at``.

    Note the key comes from ``created_at``, not the user-editable ``date``
    field. Input order is kept within each day; days themselves are not
    sorted.
    """
    grouped: Dict[str, DayGroup] = {}
    for tx in transactions:
        key = _day_key(tx.created_at)
        if key not in grouped:
            grouped[key] = DayGroup()
        grouped[key].transactions.append(tx)
        grouped[key].amount += signed_amount(tx)
    return grouped


def percent_change(current: float, previous: float) -> float:
    """Signed percentage change from ``previous`` to ``current``.

    Returns 0 when either side is zero, so a move from or to nothing never
    reports a percentage.
    """
    if not previous or not current:
        return 0
    return ((current - previous) / previous) * 100


def trend_direction(change: float) -> Literal["up", "down"]:
    # A flat 0% change counts as "down".
    return "up" if change > 0 else "down"


def build_trends(
    current_totals: Mapping[TransactionType, float],
    previous_totals: Optional[Mapping[TransactionType, float]] = None,
) -> List[TrendSummary]:
    previous_totals = previous_totals or {}
    trends = []
    for ttype in TransactionType:
        current = float(current_totals.get(ttype) or 0)
        previous = float(previous_totals.get(ttype) or 0)
        change = percent_change(current, previous)
        trends.append(
            TrendSummary(
                type=ttype,
                current_amount=current,
                previous_amount=previous,
                percent_change=change,
                direction=trend_direction(change),
            )
        )
    return trends
