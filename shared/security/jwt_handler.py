from datetime import datetime, timedelta, timezone
from jose import JWTError, jwt

ALGORITHM = "HS256"
SESSION_TOKEN_EXPIRE_SECONDS = 24 * 60 * 60


def create_session_token(data: dict, secret: str, expires_at: datetime | None = None) -> str:
    """Creates a signed session token with a UTC expiration."""
    to_encode = data.copy()

    if expires_at is None:
        expires_at = datetime.now(timezone.utc) + timedelta(seconds=SESSION_TOKEN_EXPIRE_SECONDS)

    to_encode.update({"exp": expires_at})
    return jwt.encode(to_encode, secret, algorithm=ALGORITHM)


def verify_session_token(token: str, secret: str) -> dict | None:
    """Decodes and verifies the token. Returns payload if valid, None if invalid/expired."""
    try:
        payload = jwt.decode(token, secret, algorithms=[ALGORITHM])
        return payload
    except JWTError:
        return None
