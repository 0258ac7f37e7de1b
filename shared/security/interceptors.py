"""
Request interceptors.

Each interceptor exposes two hooks: ``before(request)`` runs ahead of the
route handler and ``after(request, response, elapsed)`` runs once a response
exists. ``InterceptorMiddleware`` drives a list of them in order (``after``
hooks in reverse). Interceptors are registered once in ``create_app``.
"""
import time
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.get_logger(__name__)

SECURITY_HEADERS = {
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Content-Security-Policy": (
        "default-src 'self'; "
        "script-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
        "style-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
        "img-src 'self' data:; "
        "font-src 'self' https://cdn.jsdelivr.net;"
    ),
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
    "Permissions-Policy": "geolocation=(), microphone=(), camera=()",
}


class RequestInterceptor:
    async def before(self, request: Request) -> None:
        return None

    async def after(self, request: Request, response: Response, elapsed: float) -> None:
        return None


class InterceptorMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, interceptors: list[RequestInterceptor]):
        super().__init__(app)
        self.interceptors = list(interceptors)

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        for interceptor in self.interceptors:
            await interceptor.before(request)

        try:
            response = await call_next(request)
        except Exception:
            # Unhandled errors still get an audit trail before the 500 handler runs
            failed = Response(status_code=500)
            await self._run_after(request, failed, time.perf_counter() - start)
            raise

        await self._run_after(request, response, time.perf_counter() - start)
        return response

    async def _run_after(self, request: Request, response: Response, elapsed: float) -> None:
        for interceptor in reversed(self.interceptors):
            await interceptor.after(request, response, elapsed)


class SecurityHeadersInterceptor(RequestInterceptor):
    async def after(self, request: Request, response: Response, elapsed: float) -> None:
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)


@dataclass
class AuditEntry:
    timestamp: datetime
    ip: str
    method: str
    path: str
    user_id: str | None
    status_code: int
    duration_ms: float

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp.isoformat(),
            "ip": self.ip,
            "method": self.method,
            "path": self.path,
            "userId": self.user_id,
            "statusCode": self.status_code,
            "durationMs": self.duration_ms,
        }


class AuditLog:
    """Bounded in-memory record of recent requests."""

    def __init__(self, max_entries: int = 1000):
        self._entries: deque[AuditEntry] = deque(maxlen=max_entries)

    def record(self, entry: AuditEntry) -> None:
        self._entries.append(entry)

    def recent(self, limit: int = 100) -> list[AuditEntry]:
        if limit <= 0:
            return []
        return list(self._entries)[-limit:]

    def requests_from(self, ip: str, window: timedelta, now: datetime | None = None) -> int:
        now = now or datetime.now(timezone.utc)
        cutoff = now - window
        return sum(1 for e in self._entries if e.ip == ip and e.timestamp >= cutoff)

    def __len__(self) -> int:
        return len(self._entries)


class AuditInterceptor(RequestInterceptor):
    def __init__(self, audit_log: AuditLog, suspicious_threshold: int = 50):
        self.audit_log = audit_log
        self.suspicious_threshold = suspicious_threshold

    async def after(self, request: Request, response: Response, elapsed: float) -> None:
        ip = request.client.host if request.client else "unknown"
        entry = AuditEntry(
            timestamp=datetime.now(timezone.utc),
            ip=ip,
            method=request.method,
            path=request.url.path,
            user_id=getattr(request.state, "user_id", None),
            status_code=response.status_code,
            duration_ms=round(elapsed * 1000, 2),
        )
        self.audit_log.record(entry)
        logger.info(
            "audit.request",
            method=entry.method,
            path=entry.path,
            status=entry.status_code,
            duration_ms=entry.duration_ms,
            ip=ip,
            user_id=entry.user_id,
        )

        recent = self.audit_log.requests_from(ip, timedelta(minutes=1), now=entry.timestamp)
        if recent > self.suspicious_threshold:
            logger.warning("audit.suspicious_activity", ip=ip, requests_last_minute=recent)
