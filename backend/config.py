"""Environment-driven settings for the backtest service."""

import os

from dotenv import load_dotenv

load_dotenv()

DEFAULT_CORS_ORIGINS = (
    "http://localhost:3000,"
    "http://localhost:5173,"
    "http://127.0.0.1:3000,"
    "http://127.0.0.1:5173"
)


def _split_origins(raw: str) -> list[str]:
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def load_settings() -> dict:
    """Read settings from the environment (a .env file is honoured)."""
    return {
        "BACKTEST_FALLBACK_RATE": float(os.environ.get("BACKTEST_FALLBACK_RATE", "0.03")),
        "BACKTEST_CORS_ORIGINS": _split_origins(
            os.environ.get("BACKTEST_CORS_ORIGINS", DEFAULT_CORS_ORIGINS)
        ),
        "BACKTEST_LOG_LEVEL": os.environ.get("BACKTEST_LOG_LEVEL", "INFO").upper(),
    }
