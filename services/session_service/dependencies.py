from fastapi import Depends, HTTPException, Request, status

from shared.config.settings import Settings
from shared.security.api_key import verify_csrf_token
from .models import Session
from .service import SessionBinder

CSRF_HEADER = "X-CSRF-Token"


def get_session_binder(request: Request) -> SessionBinder:
    return request.app.state.session_binder


async def get_current_session(
    request: Request,
    binder: SessionBinder = Depends(get_session_binder),
) -> Session:
    """
    Resolves the caller's session from its cookie.

    A new session's token is left on request.state for SessionCookieInterceptor,
    which sets the cookie on whatever response the request ends with.
    """
    settings: Settings = request.app.state.settings
    session = binder.resolve(request.cookies.get(settings.session_cookie_name))

    if session.is_new:
        request.state.session_token = binder.issue_token(session)

    # Store in request state for downstream use (like audit logging)
    request.state.user_id = session.user_id
    return session


async def require_csrf(request: Request, session: Session = Depends(get_current_session)) -> Session:
    """Rejects state-changing requests without the session's CSRF token, when protection is on."""
    settings: Settings = request.app.state.settings
    if settings.csrf_protection and not verify_csrf_token(request.headers.get(CSRF_HEADER), session.csrf_token):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid CSRF token",
        )
    return session
