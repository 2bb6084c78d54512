"""Subscription validity windows."""

from __future__ import annotations

import calendar
from datetime import datetime

MONTHLY = "monthly"
YEARLY = "yearly"


def add_months(moment: datetime, months: int) -> datetime:
    """Shift ``moment`` by whole calendar months, clamping to the month's last day."""
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def subscription_end_date(start: datetime, plan_type: str) -> datetime:
    """Yearly plans run twelve months from ``start``; everything else runs one."""
    return add_months(start, 12 if plan_type == YEARLY else 1)
