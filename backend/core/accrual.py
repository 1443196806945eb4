"""Monthly interest posting schedule for a day-by-day walk."""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import List, Optional

from backend.core.rates import RateResolver


class AccrualState(str, Enum):
    WITHIN_MONTH = "withinMonth"
    MONTH_BOUNDARY_REACHED = "monthBoundaryReached"


@dataclass(frozen=True)
class AccrualPosting:
    """Interest credited on ``posted_on`` for the days ``period_start..period_end``."""

    posted_on: date
    period_start: date
    period_end: date
    accrued_days: int
    days_in_month: int
    reference_date: date
    rate: float
    amount: float

    @property
    def is_full_month(self) -> bool:
        return self.accrued_days == self.days_in_month


def days_in_month(day: date) -> int:
    return calendar.monthrange(day.year, day.month)[1]


class MonthlyAccrualSchedule:
    """
    Two-state machine fed one calendar day at a time.

    Every day of the range accrues one day of interest in its own month.
    The last in-range day of a month (the day before a new month starts, or
    the final day of the range) moves the machine to MONTH_BOUNDARY_REACHED,
    which posts the period on that same day and returns to WITHIN_MONTH.
    Interest therefore stays inside the calendar year it was earned in.

    The first day of the range never posts, so the walk starts exactly at
    the initial cash. When that day is also the last day of its month the
    one-day period stays in MONTH_BOUNDARY_REACHED and is posted on the
    following day.

    A posting credits
        monthly_interest(first day of month, cash at period start)
            * accrued_days / days_in_month
    so a complete month inside the range earns exactly one month of
    interest and a partial month earns its share.
    """

    def __init__(self, resolver: RateResolver, start: date, end: date) -> None:
        self.resolver = resolver
        self.start = start
        self.end = end
        self.state = AccrualState.WITHIN_MONTH
        self._period_start: Optional[date] = None
        self._period_end: Optional[date] = None
        self._period_cash = 0.0
        self._accrued_days = 0

    def step(self, day: date, cash: float) -> List[AccrualPosting]:
        """Advance to ``day`` holding ``cash``; return postings credited on that day."""
        postings: List[AccrualPosting] = []

        # period carried over from a month-end first day
        if self.state is AccrualState.MONTH_BOUNDARY_REACHED:
            posting = self._close(day)
            postings.append(posting)
            cash += posting.amount

        if self._period_start is None:
            self._open(day, cash)

        self._accrued_days += 1
        self._period_end = day

        if day == self.end or (day + timedelta(days=1)).month != day.month:
            self.state = AccrualState.MONTH_BOUNDARY_REACHED
            if day != self.start:
                postings.append(self._close(day))

        return postings

    def _open(self, day: date, cash: float) -> None:
        self._period_start = day
        self._period_end = day
        self._period_cash = cash
        self._accrued_days = 0

    def _close(self, posted_on: date) -> AccrualPosting:
        posting = self._post(posted_on)
        self._period_start = None
        self.state = AccrualState.WITHIN_MONTH
        return posting

    def _post(self, posted_on: date) -> AccrualPosting:
        assert self._period_start is not None and self._period_end is not None

        reference = self._period_start.replace(day=1)
        month_days = days_in_month(reference)
        monthly = self.resolver.monthly_interest(reference, self._period_cash)

        if self._accrued_days == month_days:
            amount = monthly
        else:
            amount = monthly * self._accrued_days / month_days

        return AccrualPosting(
            posted_on=posted_on,
            period_start=self._period_start,
            period_end=self._period_end,
            accrued_days=self._accrued_days,
            days_in_month=month_days,
            reference_date=reference,
            rate=self.resolver.rate_at(reference),
            amount=amount,
        )
