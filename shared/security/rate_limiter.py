from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from shared.config.settings import Settings
from .jwt_handler import verify_session_token

DEFAULT_RATE_LIMIT = "100/minute"

_rate_limit = DEFAULT_RATE_LIMIT


def user_id_or_ip(request: Request) -> str:
    """
    Key function for SlowAPI.
    Extracts the user ID from the signed session cookie if available.
    Falls back to the client's IP address for first-contact requests.
    """
    settings: Settings = request.app.state.settings
    token = request.cookies.get(settings.session_cookie_name)

    if token:
        payload = verify_session_token(token, settings.session_secret)
        if payload and "sub" in payload:
            return f"user:{payload['sub']}"

    return f"ip:{get_remote_address(request)}"


def current_rate_limit() -> str:
    """Limit string applied to every decorated route, read on each request."""
    return _rate_limit


# Initialize the Limiter with our custom key function
limiter = Limiter(key_func=user_id_or_ip, headers_enabled=True)


def configure_limiter(settings: Settings) -> Limiter:
    """Applies the app's rate limit settings to the shared limiter and clears its counters."""
    global _rate_limit
    _rate_limit = settings.rate_limit
    limiter.enabled = settings.rate_limit_enabled
    limiter.reset()
    return limiter
