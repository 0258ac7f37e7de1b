import json
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from services.session_service.dependencies import get_current_session, get_session_binder, require_csrf
from services.session_service.models import Session
from services.session_service.service import SessionBinder
from shared.security.rate_limiter import current_rate_limit, limiter
from .exceptions import CartValidationError, RejectionReason
from .schemas import CartErrorResponse, CartItem, CartMutationResponse, CartTotalResponse
from .service import CartService
from .validator import extract_fields

router = APIRouter(prefix="/api/cart", tags=["Cart"])

REJECTION_RESPONSES = {400: {"model": CartErrorResponse}}


def get_cart_service(request: Request) -> CartService:
    return request.app.state.cart_service


async def read_payload(request: Request) -> Any:
    """
    Parses the JSON request body for a cart mutation.

    Bodies over the configured size are refused with 413. Non-JSON content
    types and empty bodies yield None, which the validator rejects as
    missing fields. A body that is not valid JSON is rejected the same way.
    """
    limit = request.app.state.settings.max_body_bytes
    declared = request.headers.get("content-length", "")
    if declared.isdigit() and int(declared) > limit:
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail="Request body too large")

    body = await request.body()
    if len(body) > limit:
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail="Request body too large")

    if "json" not in request.headers.get("content-type", "").lower() or not body.strip():
        return None
    try:
        return json.loads(body)
    except ValueError as e:
        raise CartValidationError(
            RejectionReason.MISSING_OR_WRONG_TYPE,
            "Invalid data: request body is not valid JSON",
        ) from e


@router.get("", response_model=list[CartItem])
@limiter.limit(current_rate_limit)
async def get_cart(
    request: Request,
    response: Response,
    session: Session = Depends(get_current_session),
    binder: SessionBinder = Depends(get_session_binder),
):
    return await binder.hydrate(session)


@router.get("/total", response_model=CartTotalResponse)
@limiter.limit(current_rate_limit)
async def get_cart_total(
    request: Request,
    response: Response,
    session: Session = Depends(get_current_session),
    carts: CartService = Depends(get_cart_service),
):
    totals = await carts.total(session.user_id)
    return CartTotalResponse(
        total=totals.total,
        item_count=totals.item_count,
        currency=request.app.state.settings.currency,
    )


@router.post("/add", response_model=CartMutationResponse, responses=REJECTION_RESPONSES)
@limiter.limit(current_rate_limit)
async def add_to_cart(
    request: Request,
    response: Response,
    session: Session = Depends(require_csrf),
    payload: Any = Depends(read_payload),
    binder: SessionBinder = Depends(get_session_binder),
    carts: CartService = Depends(get_cart_service),
):
    product_id, qty = extract_fields(payload, "productId", "qty")
    cart = await carts.add(session.user_id, product_id, qty)
    binder.refresh(session, cart)
    return CartMutationResponse(cart=cart)


@router.post("/remove", response_model=CartMutationResponse, responses=REJECTION_RESPONSES)
@limiter.limit(current_rate_limit)
async def remove_from_cart(
    request: Request,
    response: Response,
    session: Session = Depends(require_csrf),
    payload: Any = Depends(read_payload),
    binder: SessionBinder = Depends(get_session_binder),
    carts: CartService = Depends(get_cart_service),
):
    (product_id,) = extract_fields(payload, "productId")
    cart = await carts.remove(session.user_id, product_id)
    binder.refresh(session, cart)
    return CartMutationResponse(cart=cart)


@router.post("/clear", response_model=CartMutationResponse)
@limiter.limit(current_rate_limit)
async def clear_cart(
    request: Request,
    response: Response,
    session: Session = Depends(require_csrf),
    binder: SessionBinder = Depends(get_session_binder),
    carts: CartService = Depends(get_cart_service),
):
    cart = await carts.clear(session.user_id)
    binder.refresh(session, cart)
    return CartMutationResponse(cart=cart)
