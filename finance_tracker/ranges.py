"""Resolve symbolic range selectors ("last30days", ...) into concrete date windows."""

from datetime import date, datetime, timedelta, timezone
from typing import Literal, Optional, Union, get_args

from dateutil.relativedelta import relativedelta
from pydantic import BaseModel, ConfigDict

RangeSelector = Literal["last7days", "last30days", "last90days", "last365days"]

RANGE_SELECTORS = get_args(RangeSelector)
DEFAULT_RANGE = "last30days"

_DAYS_BACK = {
    "last7days": 7,
    "last30days": 30,
    "last90days": 90,
}


class DateRange(BaseModel):
    """Inclusive calendar window; start_date <= end_date."""

    model_config = ConfigDict(frozen=True)

    start_date: date
    end_date: date


def _today(now: Optional[Union[date, datetime]]) -> date:
    if now is None:
        return datetime.now(timezone.utc).date()
    if isinstance(now, datetime):
        return now.date()
    return now


def resolve_range(selector: Optional[str], now: Optional[Union[date, datetime]] = None) -> DateRange:
    """Turn a range selector into a DateRange ending on the calendar date of ``now``.

    Unknown selectors behave exactly like ``last30days``. ``last365days`` goes
    back one calendar year (same day, previous year) rather than a fixed 365
    days, so the window spans 365 or 366 days around leap years.
    """
    end_date = _today(now)

    if selector == "last365days":
        start_date = end_date - relativedelta(years=1)
    else:
        days = _DAYS_BACK.get(selector, _DAYS_BACK[DEFAULT_RANGE])
        start_date = end_date - timedelta(days=days)

    return DateRange(start_date=start_date, end_date=end_date)


def previous_range(current: DateRange) -> DateRange:
    """The window of the same length that ends the day before ``current`` starts."""
    days = (current.end_date - current.start_date).days + 1
    return DateRange(
        start_date=current.start_date - timedelta(days=days),
        end_date=current.start_date - timedelta(days=1),
    )
