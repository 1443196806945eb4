from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from backend.core.rates import DayLike, as_day


class BacktestValidationError(ValueError):
    def __init__(self, errors: List[str]):
        super().__init__("; ".join(errors))
        self.errors = errors


@dataclass(frozen=True)
class PreparedRange:
    start: date
    end: date
    initial_capital: float

    @property
    def total_days(self) -> int:
        """Calendar days in the range, both endpoints included."""
        return (self.end - self.start).days + 1

    @property
    def is_single_day(self) -> bool:
        return self.start == self.end


def _parse_day(value: DayLike, label: str, errors: List[str]) -> Optional[date]:
    try:
        return as_day(value)
    except (TypeError, ValueError) as exc:
        errors.append(f"invalid {label} {value!r}: {exc}")
        return None


def prepare_range(start_date: DayLike, end_date: DayLike, initial_capital: float) -> PreparedRange:
    """Normalise and validate simulation inputs, collecting every problem found."""
    errors: List[str] = []

    start = _parse_day(start_date, "start date", errors)
    end = _parse_day(end_date, "end date", errors)

    if start is not None and end is not None and start > end:
        errors.append(f"start date {start.isoformat()} is after end date {end.isoformat()}")
    if initial_capital is None or not initial_capital > 0:
        errors.append(f"initial capital must be positive, got {initial_capital}")

    if errors:
        raise BacktestValidationError(errors)

    assert start is not None and end is not None
    return PreparedRange(start=start, end=end, initial_capital=float(initial_capital))
