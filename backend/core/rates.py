"""Point-in-time lookup of monthly bond rates."""

from __future__ import annotations

import logging
from bisect import bisect_right
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Mapping, Union

from backend.schemas.backtest import DateRange, RateObservation, ResolverStats

logger = logging.getLogger(__name__)

DEFAULT_FALLBACK_RATE = 0.03
MONTHS_PER_YEAR = 12

DayLike = Union[date, datetime, str]


def as_day(value: DayLike) -> date:
    """Normalise a date, datetime or ISO-8601 string to a calendar day."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    # fromisoformat only accepts a trailing Z from Python 3.11
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text).date()


class RateResolver:
    """
    Holds a sparse series of rate observations and answers "what rate applies
    on this day" queries.

    Lookup policy:
      1) exact observation for the day, if any
      2) nearest observation on or before the day
      3) when the day precedes all data, the earliest observation
      4) with nothing loaded, the fallback rate

    An observation on either side at equal distance resolves to the earlier
    (historical) one. Dates are unique keys, so candidates on the same side
    can never tie.

    The resolver is read-only while a simulation uses it; call ``load`` only
    between runs.
    """

    def __init__(
        self,
        observations: Iterable[Union[RateObservation, Mapping[str, Any]]] = (),
        fallback_rate: float = DEFAULT_FALLBACK_RATE,
    ) -> None:
        self.fallback_rate = fallback_rate
        self._observations: List[RateObservation] = []
        self._rates: Dict[date, float] = {}
        self._dates: List[date] = []
        self._fallback_warned = False
        self.load(observations)

    def load(self, observations: Iterable[Union[RateObservation, Mapping[str, Any]]]) -> None:
        """Replace the observation set. Later duplicates of a date win."""
        parsed = [
            item if isinstance(item, RateObservation) else RateObservation.model_validate(item)
            for item in observations
        ]

        rates: Dict[date, float] = {}
        for observation in parsed:
            if observation.rate is not None:
                rates[observation.date] = observation.rate

        self._observations = parsed
        self._rates = rates
        self._dates = sorted(rates)
        self._fallback_warned = False

        if parsed:
            logger.info(
                "Loaded %d rate observations (%d usable)", len(parsed), len(self._dates)
            )

    @property
    def observations(self) -> List[RateObservation]:
        return list(self._observations)

    def has_data(self) -> bool:
        return bool(self._observations)

    def clear(self) -> None:
        self.load(())

    def stats(self) -> ResolverStats:
        if not self._dates:
            return ResolverStats(totalRecords=len(self._observations))
        return ResolverStats(
            totalRecords=len(self._observations),
            dateRange=DateRange(start=self._dates[0], end=self._dates[-1]),
        )

    def rate_at(self, day: DayLike) -> float:
        """Annualized rate applicable on ``day``."""
        day = as_day(day)

        rate = self._rates.get(day)
        if rate is not None:
            return rate

        if not self._dates:
            if not self._fallback_warned:
                logger.warning(
                    "No rate observations available, using fallback rate %.2f%%",
                    self.fallback_rate * 100,
                )
                self._fallback_warned = True
            return self.fallback_rate

        index = bisect_right(self._dates, day)
        if index > 0:
            # latest observation on or before the day
            return self._rates[self._dates[index - 1]]
        return self._rates[self._dates[0]]

    def monthly_interest(self, day: DayLike, cash: float) -> float:
        """One month of interest on ``cash`` at the rate applicable on ``day``."""
        return cash * self.rate_at(day) / MONTHS_PER_YEAR
