from .jwt_handler import create_session_token, verify_session_token
from .api_key import verify_api_key, generate_csrf_token, verify_csrf_token
from .dependencies import verify_internal_api_key
from .rate_limiter import configure_limiter, current_rate_limit, limiter, user_id_or_ip
from .sanitize import sanitize_string

__all__ = [
    "create_session_token",
    "verify_session_token",
    "verify_api_key",
    "generate_csrf_token",
    "verify_csrf_token",
    "verify_internal_api_key",
    "configure_limiter",
    "current_rate_limit",
    "limiter",
    "user_id_or_ip",
    "sanitize_string"
]
