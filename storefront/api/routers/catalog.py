# storefront/api/routers/catalog.py
from fastapi import APIRouter, Depends, Query, Request

from storefront.api.deps import get_session, to_http_error
from storefront.domain.filters import parse_product_query
from storefront.services.session_registry import ClientSession

router = APIRouter(tags=["catalog"])


@router.get("/categories")
def categories(session: ClientSession = Depends(get_session)):
    try:
        return session.catalog.get_categories()
    except RuntimeError as e:
        raise to_http_error(e)


@router.get("/categories/{slug}")
def category(slug: str, session: ClientSession = Depends(get_session)):
    try:
        return session.catalog.get_category(slug)
    except RuntimeError as e:
        raise to_http_error(e)


@router.get("/categories/{slug}/filters")
def category_filters(slug: str, session: ClientSession = Depends(get_session)):
    try:
        return session.catalog.get_category_filters(slug)
    except RuntimeError as e:
        raise to_http_error(e)


@router.get("/categories/{slug}/products")
def category_products(slug: str, request: Request, session: ClientSession = Depends(get_session)):
    query = parse_product_query(request.query_params.multi_items())
    try:
        return session.catalog.get_products(query, category=slug)
    except RuntimeError as e:
        raise to_http_error(e)


@router.get("/products/search")
def search_products(request: Request, q: str = Query(..., min_length=1), session: ClientSession = Depends(get_session)):
    params = [(k, v) for k, v in request.query_params.multi_items() if k != "q"]
    try:
        return session.catalog.search_products(q, parse_product_query(params))
    except RuntimeError as e:
        raise to_http_error(e)


@router.get("/products/{slug}")
def product(slug: str, session: ClientSession = Depends(get_session)):
    try:
        return session.catalog.get_product(slug)
    except RuntimeError as e:
        raise to_http_error(e)
