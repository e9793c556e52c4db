"""Environment-driven application settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional


PROJECT_ROOT = Path(__file__).resolve().parents[2]


def _env_str(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def _env_optional_str(name: str) -> Optional[str]:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    app_name: str
    app_version: str
    log_level: str
    log_format: Optional[str]
    storage_backend: str
    database_path: Path
    reservation_id_floor: int
    recommendation_random_seed: Optional[int]
    report_path: Path
    seed_demo_inventory: bool
    bootstrap_admin_username: Optional[str]
    bootstrap_admin_password: Optional[str]
    password_hash_iterations: int
    api_base_url: str


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build settings from the environment once per process.

    Tests derive variants with ``dataclasses.replace`` and call
    ``get_settings.cache_clear()`` when they change the environment.
    """
    seed_raw = _env_optional_str("TRAVEL_RECOMMENDATION_SEED")
    return Settings(
        app_name=_env_str("TRAVEL_APP_NAME", "Travel Reservation System"),
        app_version=_env_str("TRAVEL_APP_VERSION", "1.0.0"),
        log_level=_env_str("TRAVEL_LOG_LEVEL", "INFO"),
        log_format=_env_optional_str("TRAVEL_LOG_FORMAT"),
        storage_backend=_env_str("TRAVEL_STORAGE_BACKEND", "sqlite").lower(),
        database_path=Path(
            _env_str(
                "TRAVEL_DATABASE_PATH",
                str(PROJECT_ROOT / "data" / "travel_reservations.db"),
            )
        ),
        reservation_id_floor=_env_int("TRAVEL_RESERVATION_ID_FLOOR", 1000),
        recommendation_random_seed=int(seed_raw) if seed_raw is not None else None,
        report_path=Path(
            _env_str(
                "TRAVEL_REPORT_PATH",
                str(PROJECT_ROOT / "data" / "reservations_report.txt"),
            )
        ),
        seed_demo_inventory=_env_bool("TRAVEL_SEED_DEMO_INVENTORY", True),
        bootstrap_admin_username=_env_optional_str("TRAVEL_BOOTSTRAP_ADMIN_USERNAME"),
        bootstrap_admin_password=_env_optional_str("TRAVEL_BOOTSTRAP_ADMIN_PASSWORD"),
        password_hash_iterations=_env_int("TRAVEL_PASSWORD_HASH_ITERATIONS", 120_000),
        api_base_url=_env_str("TRAVEL_API_BASE_URL", "http://127.0.0.1:8000"),
    )
