from starlette.requests import Request
from starlette.responses import Response

from shared.config.settings import Settings
from shared.security.interceptors import RequestInterceptor


class SessionCookieInterceptor(RequestInterceptor):
    """Sets the cookie for a session started during this request, on success and error responses alike."""

    def __init__(self, settings: Settings):
        self.settings = settings

    async def after(self, request: Request, response: Response, elapsed: float) -> None:
        token = getattr(request.state, "session_token", None)
        if token is None:
            return
        response.set_cookie(
            key=self.settings.session_cookie_name,
            value=token,
            max_age=self.settings.session_ttl_seconds,
            httponly=True,
            samesite="strict",
            secure=self.settings.session_cookie_secure,
        )
