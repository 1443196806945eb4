from __future__ import annotations

from typing import Callable, Iterable

import pytest
from flask.testing import FlaskClient

from backend.app import create_app
from backend.core.rates import RateResolver


def _monthly_observations(years: Iterable[int], rate: float) -> list[dict]:
    return [
        {"date": f"{year}-{month:02d}-01", "rate": rate}
        for year in years
        for month in range(1, 13)
    ]


@pytest.fixture()
def monthly_observations() -> Callable[..., list[dict]]:
    """Factory: one observation on the 1st of every month of the given years."""
    return _monthly_observations


@pytest.fixture()
def client() -> FlaskClient:
    app = create_app({"TESTING": True})
    with app.test_client() as test_client:
        yield test_client


@pytest.fixture()
def flat_rate_resolver() -> RateResolver:
    """3% p.a. for every month of 2020."""
    return RateResolver(_monthly_observations([2020], 0.03))
