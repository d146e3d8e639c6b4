# backend/lib/energy_core/history.py
from collections import defaultdict
from datetime import datetime
from typing import Dict, Iterable, List

from .errors import ClientInputError
from .validation import DATE_FORMAT

PERIODS = ('daily', 'weekly', 'monthly')


def _period_key(date_str: str, period: str) -> str:
    if period == 'monthly':
        return date_str[:7]  # YYYY-MM
    if period == 'weekly':
        year, week, _ = datetime.strptime(date_str, DATE_FORMAT).isocalendar()
        return f"{year}-W{week:02d}"
    return date_str


def aggregate_usage(items: Iterable[Dict], period: str = 'daily') -> List[Dict]:
    """
    Sum usage per day, ISO week or month.

    items are usage records as stored ({'date': 'YYYY-MM-DD', 'usage': ...}).
    Returns [{'period': key, 'usage': total}] sorted by key.
    """
    if period not in PERIODS:
        raise ClientInputError(f"Invalid aggregation. Use one of: {', '.join(PERIODS)}")

    totals = defaultdict(float)
    for item in items:
        totals[_period_key(item['date'], period)] += float(item['usage'])
    return [{'period': k, 'usage': round(v, 4)} for k, v in sorted(totals.items())]
