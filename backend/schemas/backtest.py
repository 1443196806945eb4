"""Data contracts for the cash-bond backtest."""

from __future__ import annotations

import datetime as dt
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class RateObservation(BaseModel):
    """One monthly bond-rate sample. Extra provider fields are dropped."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    date: dt.date
    rate: Optional[float] = Field(
        default=None,
        description="Annualized rate as a decimal fraction (e.g. 0.03 for 3%).",
    )

    @model_validator(mode="before")
    @classmethod
    def _accept_provider_field(cls, data: Any) -> Any:
        # provider records carry the 10y treasury yield as tcm_y10
        if isinstance(data, dict) and "rate" not in data and "tcm_y10" in data:
            data = {**data, "rate": data["tcm_y10"]}
        return data


class DailyValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: dt.date
    value: float = Field(..., ge=0)
    changePercent: float


class YearlyDetail(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    year: int
    startValue: float
    endValue: float
    year_return: float = Field(alias="return")
    cashInterest: float


class SimulationResult(BaseModel):
    """Outcome of one backtest run."""

    model_config = ConfigDict(frozen=True)

    finalValue: float
    totalReturn: float
    annualizedReturn: float
    maxDrawdown: float
    dailyValues: List[DailyValue]
    yearlyDetails: List[YearlyDetail]


class DateRange(BaseModel):
    start: dt.date
    end: dt.date


class ResolverStats(BaseModel):
    totalRecords: int
    dateRange: Optional[DateRange] = None


class CashBondBacktestRequest(BaseModel):
    """Inputs accepted by the cash-bond backtest endpoint."""

    model_config = ConfigDict(extra="forbid")

    startDate: dt.date
    endDate: dt.date
    initialCapital: float = Field(..., gt=0)
    observations: List[RateObservation] = Field(default_factory=list)

    @model_validator(mode="after")
    def ensure_ordered_range(self) -> "CashBondBacktestRequest":
        if self.startDate > self.endDate:
            raise ValueError("startDate must be on or before endDate")
        return self
