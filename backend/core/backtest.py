"""Day-by-day backtest of a cash position earning bond-rate interest."""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Any, Dict, Iterable, Iterator, List, Optional

from backend.core.accrual import MonthlyAccrualSchedule
from backend.core.rates import DayLike, RateResolver
from backend.domain.backtest import PreparedRange, prepare_range
from backend.schemas.backtest import DailyValue, SimulationResult, YearlyDetail

logger = logging.getLogger(__name__)

DAYS_PER_YEAR = 365


def iter_days(start: date, end: date) -> Iterator[date]:
    """Every calendar day from start to end, inclusive."""
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)


def total_return(final_value: float, initial_capital: float) -> float:
    return (final_value / initial_capital - 1) * 100


def annualized_return(final_value: float, initial_capital: float, total_days: int) -> float:
    """Compound annual growth in percent over ``total_days`` calendar days (not clamped)."""
    return ((final_value / initial_capital) ** (DAYS_PER_YEAR / total_days) - 1) * 100


def max_drawdown(values: Iterable[float]) -> float:
    """Largest decline from a running peak to any later value, in percent."""
    peak: Optional[float] = None
    worst = 0.0
    for value in values:
        if peak is None or value > peak:
            peak = value
        if peak > 0:
            drawdown = (peak - value) / peak * 100
            if drawdown > worst:
                worst = drawdown
    return worst


def _yearly_detail(year: int, start_value: float, end_value: float) -> YearlyDetail:
    return YearlyDetail(
        year=year,
        startValue=start_value,
        endValue=end_value,
        year_return=(end_value / start_value - 1) * 100 if start_value > 0 else 0.0,
        cashInterest=end_value - start_value,
    )


def _single_day_result(prepared: PreparedRange) -> SimulationResult:
    capital = prepared.initial_capital
    return SimulationResult(
        finalValue=capital,
        totalReturn=0.0,
        annualizedReturn=0.0,
        maxDrawdown=0.0,
        dailyValues=[DailyValue(date=prepared.start, value=capital, changePercent=0.0)],
        yearlyDetails=[_yearly_detail(prepared.start.year, capital, capital)],
    )


def simulate_cash_bond(
    start_date: DayLike,
    end_date: DayLike,
    initial_capital: float,
    resolver: RateResolver,
) -> SimulationResult:
    """
    Walk every day of the range holding only cash, credit monthly interest
    postings from ``resolver`` and summarise the resulting value series.

    Raises BacktestValidationError for a reversed range or non-positive
    capital; nothing else in the walk can fail.
    """
    prepared = prepare_range(start_date, end_date, initial_capital)
    if prepared.is_single_day:
        return _single_day_result(prepared)

    schedule = MonthlyAccrualSchedule(resolver, start=prepared.start, end=prepared.end)

    current_value = prepared.initial_capital
    previous_value: Optional[float] = None
    daily_values: List[DailyValue] = []
    yearly_details: List[YearlyDetail] = []

    year: Optional[int] = None
    year_start_value = current_value
    year_end_value = current_value

    for day in iter_days(prepared.start, prepared.end):
        for posting in schedule.step(day, current_value):
            current_value += posting.amount

        if previous_value is None or previous_value == 0:
            change = 0.0
        else:
            change = (current_value / previous_value - 1) * 100
        daily_values.append(DailyValue(date=day, value=current_value, changePercent=change))

        # close the previous year on the first day of a new one
        if day.year != year:
            if year is not None:
                yearly_details.append(_yearly_detail(year, year_start_value, year_end_value))
            year = day.year
            year_start_value = current_value
        year_end_value = current_value

        previous_value = current_value

    assert year is not None
    yearly_details.append(_yearly_detail(year, year_start_value, year_end_value))

    final_value = daily_values[-1].value
    result = SimulationResult(
        finalValue=final_value,
        totalReturn=total_return(final_value, prepared.initial_capital),
        annualizedReturn=annualized_return(final_value, prepared.initial_capital, prepared.total_days),
        maxDrawdown=max_drawdown(record.value for record in daily_values),
        dailyValues=daily_values,
        yearlyDetails=yearly_details,
    )

    logger.debug(
        "Cash-bond backtest %s..%s: %d days, final value %.2f",
        prepared.start,
        prepared.end,
        prepared.total_days,
        final_value,
    )
    return result


def present_result(result: SimulationResult) -> Dict[str, Any]:
    """JSON-ready copy of ``result`` with monetary figures rounded to cents."""
    payload = result.model_dump(mode="json", by_alias=True)

    payload["finalValue"] = round(result.finalValue, 2)
    for record in payload["dailyValues"]:
        record["value"] = round(record["value"], 2)
    for record in payload["yearlyDetails"]:
        record["startValue"] = round(record["startValue"], 2)
        record["endValue"] = round(record["endValue"], 2)
        record["cashInterest"] = round(record["cashInterest"], 2)

    return payload
