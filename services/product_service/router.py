from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response

from shared.security.rate_limiter import current_rate_limit, limiter
from shared.security.sanitize import sanitize_string
from .models import Product
from .service import Catalog, ProductService

router = APIRouter(prefix="/api/products", tags=["Products"])


def get_catalog(request: Request) -> Catalog:
    return request.app.state.catalog


@router.get("", response_model=list[Product])
@limiter.limit(current_rate_limit)
async def list_products(request: Request, response: Response, catalog: Catalog = Depends(get_catalog)):
    return catalog.all_products()


@router.get("/search/{query}", response_model=list[Product])
@limiter.limit(current_rate_limit)
async def search_products(
    request: Request,
    response: Response,
    query: str,
    catalog: Catalog = Depends(get_catalog),
):
    return catalog.search(sanitize_string(query))


@router.get("/filter/price", response_model=list[Product])
@limiter.limit(current_rate_limit)
async def filter_by_price(
    request: Request,
    response: Response,
    min: str | None = Query(default=None),
    max: str | None = Query(default=None),
    catalog: Catalog = Depends(get_catalog),
):
    return catalog.filter_by_price(
        ProductService.parse_price_bound(min),
        ProductService.parse_price_bound(max),
    )


@router.get("/{product_id}", response_model=Product)
@limiter.limit(current_rate_limit)
async def get_product(
    request: Request,
    response: Response,
    product_id: str,
    catalog: Catalog = Depends(get_catalog),
):
    parsed_id = ProductService.parse_product_id(product_id)
    if parsed_id is None:
        raise HTTPException(status_code=400, detail="Invalid id. Must be a positive integer.")

    product = catalog.get(parsed_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product
