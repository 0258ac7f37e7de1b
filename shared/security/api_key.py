import secrets


def verify_api_key(provided_key: str | None, expected_key: str) -> bool:
    """Verify an API key using constant-time comparison to prevent timing attacks."""
    if not provided_key or not expected_key:
        return False
    return secrets.compare_digest(str(provided_key), str(expected_key))


def generate_csrf_token() -> str:
    return secrets.token_hex(32)


def verify_csrf_token(provided_token: str | None, session_token: str) -> bool:
    if not provided_token:
        return False
    return secrets.compare_digest(str(provided_token), str(session_token))
