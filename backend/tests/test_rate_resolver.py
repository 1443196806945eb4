from __future__ import annotations

import logging
from datetime import date, datetime
from math import isclose

from backend.core.rates import DEFAULT_FALLBACK_RATE, RateResolver
from backend.schemas.backtest import RateObservation


def quarterly_resolver() -> RateResolver:
    return RateResolver(
        [
            {"date": "2020-01-01", "rate": 0.02},
            {"date": "2020-02-01", "rate": 0.03},
            {"date": "2020-03-01", "rate": 0.04},
        ]
    )


def test_exact_match_returns_observation():
    resolver = quarterly_resolver()
    assert resolver.rate_at("2020-02-01") == 0.03
    assert resolver.rate_at(date(2020, 3, 1)) == 0.04


def test_time_of_day_is_ignored():
    resolver = quarterly_resolver()
    assert resolver.rate_at(datetime(2020, 2, 1, 23, 45)) == 0.03


def test_utc_suffix_is_accepted():
    resolver = quarterly_resolver()
    assert resolver.rate_at("2020-02-01T00:00:00Z") == 0.03


def test_prefers_latest_observation_on_or_before_query():
    """Feb 20 is closer to Mar 1 but the Feb 1 observation is the historical one."""
    resolver = quarterly_resolver()
    assert resolver.rate_at("2020-02-20") == 0.03
    assert resolver.rate_at("2021-06-30") == 0.04


def test_query_before_all_data_uses_nearest_future_observation():
    resolver = quarterly_resolver()
    assert resolver.rate_at("2019-06-15") == 0.02


def test_equidistant_observations_resolve_to_the_earlier_one():
    resolver = RateResolver(
        [
            {"date": "2020-01-01", "rate": 0.02},
            {"date": "2020-01-31", "rate": 0.05},
        ]
    )
    # 15 days from each observation
    assert resolver.rate_at("2020-01-16") == 0.02


def test_empty_resolver_falls_back_and_warns_once(caplog):
    caplog.set_level(logging.WARNING, logger="backend.core.rates")
    resolver = RateResolver()

    assert resolver.rate_at("2020-05-01") == DEFAULT_FALLBACK_RATE
    assert resolver.rate_at("2020-06-01") == DEFAULT_FALLBACK_RATE

    warnings = [record for record in caplog.records if record.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert "fallback" in warnings[0].getMessage()


def test_custom_fallback_rate():
    resolver = RateResolver(fallback_rate=0.05)
    assert resolver.rate_at("2020-01-01") == 0.05


def test_duplicate_dates_keep_last_value():
    resolver = RateResolver(
        [
            {"date": "2020-01-01", "rate": 0.01},
            {"date": "2020-01-01", "rate": 0.02},
        ]
    )
    assert resolver.rate_at("2020-01-01") == 0.02


def test_provider_records_are_narrowed_to_date_and_rate():
    resolver = RateResolver(
        [
            {"date": "2020-01-01", "tcm_y10": 0.027, "areaCode": "cn", "tcm_y2": 0.021},
            {"date": "2020-02-01", "tcm_y10": None},
        ]
    )

    observations = resolver.observations
    assert observations[0].model_dump() == {"date": date(2020, 1, 1), "rate": 0.027}
    assert observations[1].rate is None

    # the null-rate month does not shadow January
    assert resolver.rate_at("2020-02-15") == 0.027


def test_out_of_range_rates_pass_through():
    resolver = RateResolver([RateObservation(date=date(2020, 1, 1), rate=-0.01)])
    assert resolver.rate_at("2020-01-10") == -0.01


def test_monthly_interest_is_one_twelfth_of_annual_rate():
    resolver = RateResolver([{"date": "2020-01-01", "rate": 0.03}])
    assert isclose(resolver.monthly_interest("2020-01-15", 120_000), 300.0)


def test_load_replaces_previous_observations():
    resolver = quarterly_resolver()
    resolver.load([{"date": "2021-01-01", "rate": 0.01}])

    assert resolver.rate_at("2020-02-01") == 0.01
    assert len(resolver.observations) == 1


def test_stats_and_clear():
    resolver = RateResolver(
        [
            {"date": "2020-03-01", "rate": 0.04},
            {"date": "2020-01-01", "rate": 0.02},
            {"date": "2020-02-01", "rate": None},
        ]
    )

    stats = resolver.stats()
    assert stats.totalRecords == 3
    assert stats.dateRange is not None
    assert stats.dateRange.start == date(2020, 1, 1)
    assert stats.dateRange.end == date(2020, 3, 1)
    assert resolver.has_data()

    resolver.clear()
    assert not resolver.has_data()
    assert resolver.stats().dateRange is None
    assert resolver.rate_at("2020-01-01") == DEFAULT_FALLBACK_RATE
