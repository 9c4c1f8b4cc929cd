"""
Runtime settings, read from the environment (and a local .env file).

Public API:
    load_settings() → Settings
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv


class ConfigurationError(Exception):
    """Raised when a required setting is missing or malformed."""


@dataclass
class Settings:
    """Import pipeline settings."""

    supabase_url: str | None = None
    supabase_key: str | None = None
    products_table: str = "pesticide_products"
    dosages_table: str = "pesticide_dosages"
    import_max_workers: int = 4
    parse_max_workers: int = 1
    lookup_cache_ttl_seconds: float = 300.0
    log_level: str = "INFO"

    def require_supabase(self) -> None:
        """Raise ConfigurationError unless Supabase credentials are set."""
        missing = [
            name
            for name, value in (
                ("SUPABASE_URL", self.supabase_url),
                ("SUPABASE_SERVICE_ROLE_KEY", self.supabase_key),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(
                f"Missing Supabase settings: {', '.join(missing)}"
            )


def load_settings() -> Settings:
    """Build Settings from environment variables after loading .env."""
    load_dotenv()
    return Settings(
        supabase_url=os.getenv("SUPABASE_URL"),
        supabase_key=os.getenv("SUPABASE_SERVICE_ROLE_KEY"),
        products_table=os.getenv("PESTICIDE_PRODUCTS_TABLE", "pesticide_products"),
        dosages_table=os.getenv("PESTICIDE_DOSAGES_TABLE", "pesticide_dosages"),
        import_max_workers=_int_env("IMPORT_MAX_WORKERS", 4),
        parse_max_workers=_int_env("PARSE_MAX_WORKERS", 1),
        lookup_cache_ttl_seconds=_float_env("LOOKUP_CACHE_TTL_SECONDS", 300.0),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got '{raw}'") from exc
    if value < 1:
        raise ConfigurationError(f"{name} must be >= 1, got {value}")
    return value


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got '{raw}'") from exc
    if value <= 0:
        raise ConfigurationError(f"{name} must be > 0, got {value}")
    return value
