import os
import warnings
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ROOT_DIR = Path(__file__).resolve().parents[2]
load_dotenv(dotenv_path=ROOT_DIR / ".env")

INSECURE_SESSION_SECRET = "sportzone-secret-change-in-production"
INSECURE_API_KEY = "insecure-default-change-me"


def _get_env(key: str, default: str | None = None) -> str | None:
    value = os.getenv(key)
    if value is None or value.strip() == "":
        return default
    return value.strip()


def _get_int(key: str, default: int) -> int:
    value = _get_env(key)
    return int(value) if value is not None else default


def _get_bool(key: str, default: bool) -> bool:
    value = _get_env(key)
    if value is None:
        return default
    return value.lower() in ("1", "true", "yes", "on")


def _get_secret(key: str, fallback: str) -> str:
    value = _get_env(key)
    if not value:
        warnings.warn(
            f"{key} is not set. Using an insecure default. "
            "Set this env var in production!",
            stacklevel=3,
        )
        return fallback
    return value


@dataclass(frozen=True)
class Settings:
    app_name: str = "SportZone"
    debug: bool = False
    log_level: str = "INFO"

    session_secret: str = INSECURE_SESSION_SECRET
    session_ttl_seconds: int = 24 * 60 * 60
    session_cookie_name: str = "session"
    session_cookie_secure: bool = False

    cart_store_backend: str = "json"  # json | sql
    cart_data_file: str = str(ROOT_DIR / "data" / "carts.json")
    database_url: str = f"sqlite+aiosqlite:///{ROOT_DIR / 'data' / 'carts.db'}"
    currency: str = "COP"
    max_body_bytes: int = 100 * 1024

    rate_limit: str = "100/minute"
    rate_limit_enabled: bool = True
    csrf_protection: bool = False
    internal_api_key: str = INSECURE_API_KEY

    audit_log_size: int = 1000
    suspicious_requests_per_minute: int = 50

    metrics_enabled: bool = True
    otlp_endpoint: str | None = None

    host: str = "0.0.0.0"
    port: int = 3000

    @classmethod
    def from_env(cls) -> "Settings":
        defaults = cls()
        return cls(
            app_name=_get_env("APP_NAME", defaults.app_name),
            debug=_get_bool("DEBUG", defaults.debug),
            log_level=_get_env("LOG_LEVEL", defaults.log_level).upper(),
            session_secret=_get_secret("SESSION_SECRET", INSECURE_SESSION_SECRET),
            session_ttl_seconds=_get_int("SESSION_TTL_SECONDS", defaults.session_ttl_seconds),
            session_cookie_name=_get_env("SESSION_COOKIE_NAME", defaults.session_cookie_name),
            session_cookie_secure=_get_bool("SESSION_COOKIE_SECURE", defaults.session_cookie_secure),
            cart_store_backend=_get_env("CART_STORE_BACKEND", defaults.cart_store_backend).lower(),
            cart_data_file=_get_env("CART_DATA_FILE", defaults.cart_data_file),
            database_url=_get_env("DATABASE_URL", defaults.database_url),
            currency=_get_env("CURRENCY", defaults.currency),
            max_body_bytes=_get_int("MAX_BODY_BYTES", defaults.max_body_bytes),
            rate_limit=_get_env("RATE_LIMIT", defaults.rate_limit),
            rate_limit_enabled=_get_bool("RATE_LIMIT_ENABLED", defaults.rate_limit_enabled),
            csrf_protection=_get_bool("CSRF_PROTECTION", defaults.csrf_protection),
            internal_api_key=_get_secret("INTERNAL_API_KEY", INSECURE_API_KEY),
            audit_log_size=_get_int("AUDIT_LOG_SIZE", defaults.audit_log_size),
            suspicious_requests_per_minute=_get_int(
                "SUSPICIOUS_REQUESTS_PER_MINUTE", defaults.suspicious_requests_per_minute
            ),
            metrics_enabled=_get_bool("METRICS_ENABLED", defaults.metrics_enabled),
            otlp_endpoint=_get_env("OTLP_ENDPOINT"),
            host=_get_env("HOST", defaults.host),
            port=_get_int("PORT", defaults.port),
        )
