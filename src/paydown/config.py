"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(
    name: str,
    default: Optional[int],
    *,
    minimum: int | None = None,
    maximum: int | None = None,
) -> Optional[int]:
    """Read an integer setting, rejecting junk and out-of-range values."""

    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc
    if minimum is not None and value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {value}")
    if maximum is not None and value > maximum:
        raise ValueError(f"{name} must be <= {maximum}, got {value}")
    return value


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "Paydown"
    DB_FILENAME = "paydown.db"

    # Simulation guard rails
    NON_PAYOFF_CUTOFF_MONTH = 23
    INCOME_ENTRY_CAP = 24
    SCHEDULE_MAX_STEPS = 100

    def __init__(self) -> None:
        self.DATA_DIR = self._resolve_data_dir()
        self.DEV_MODE = _env_bool("PAYDOWN_DEV_MODE", default=True)
        self.DATABASE_URL = os.getenv("PAYDOWN_DATABASE_URL", self._build_sqlite_url())
        self.PROJECTION_HORIZON_MONTHS = _env_int(
            "PAYDOWN_PROJECTION_HORIZON_MONTHS", 60, minimum=1
        )
        self.SCHEDULE_HORIZON_MONTHS = _env_int("PAYDOWN_SCHEDULE_HORIZON_MONTHS", 24, minimum=1)
        # Entries dated on/after this day roll into the following month's bucket.
        self.BILLING_CUTOFF_DAY = _env_int(
            "PAYDOWN_BILLING_CUTOFF_DAY", None, minimum=1, maximum=31
        )

    def _resolve_data_dir(self) -> Path:
        """Return the directory where the SQLite file and logs live."""

        data_root = os.getenv("PAYDOWN_DATA_DIR", "instance")
        path = Path(data_root).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _build_sqlite_url(self) -> str:
        """Construct the default SQLite URL inside the data directory."""

        db_path = self.DATA_DIR / self.DB_FILENAME
        return f"sqlite:///{db_path}"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        if self.DATABASE_URL.startswith("sqlite"):
            return {"connect_args": {"check_same_thread": False}}
        return {}


class DevConfig(BaseConfig):
    """Development configuration using local SQLite."""

    DEBUG = True
    TESTING = False
