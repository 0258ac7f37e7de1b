from fastapi import APIRouter, Depends, Request, Response

from shared.security.rate_limiter import current_rate_limit, limiter
from .dependencies import get_current_session
from .models import Session
from .schemas import SessionResponse

router = APIRouter(prefix="/api/session", tags=["Session"])


@router.get("", response_model=SessionResponse)
@limiter.limit(current_rate_limit)
async def get_session(request: Request, response: Response, session: Session = Depends(get_current_session)):
    return SessionResponse(
        user_id=session.user_id,
        csrf_token=session.csrf_token,
        state=session.state.value,
    )
