"""HTTP routes for the Flask API."""

from http import HTTPStatus
from typing import Any, Dict

from flask import Blueprint, current_app, jsonify, request
from pydantic import ValidationError

from backend.core.backtest import present_result, simulate_cash_bond
from backend.core.rates import RateResolver
from backend.domain.backtest import BacktestValidationError
from backend.schemas.backtest import CashBondBacktestRequest

api_bp = Blueprint("api", __name__)


@api_bp.errorhandler(ValidationError)
def _handle_validation_error(exc: ValidationError):
    """Convert Pydantic validation errors into JSON responses."""
    return jsonify({"detail": exc.errors(include_url=False, include_context=False)}), HTTPStatus.BAD_REQUEST


@api_bp.errorhandler(BacktestValidationError)
def _handle_backtest_error(exc: BacktestValidationError):
    return jsonify({"error": exc.errors}), HTTPStatus.BAD_REQUEST


@api_bp.get("/ping")
def ping() -> Any:
    """Health-check endpoint."""
    return jsonify({"message": "pong"})


@api_bp.post("/backtest/cash-bond")
def cash_bond_backtest() -> Any:
    """Run the cash-plus-bond backtest against the posted rate observations."""
    raw_payload: Dict[str, Any] = request.get_json(force=True, silent=False)
    payload = CashBondBacktestRequest.model_validate(raw_payload)

    # a fresh resolver per request keeps concurrent runs independent
    resolver = RateResolver(
        payload.observations,
        fallback_rate=current_app.config["BACKTEST_FALLBACK_RATE"],
    )
    result = simulate_cash_bond(
        payload.startDate,
        payload.endDate,
        payload.initialCapital,
        resolver,
    )

    body = present_result(result)
    body["rateData"] = resolver.stats().model_dump(mode="json")
    return jsonify(body)
