# storefront/api/deps.py
import uuid

from fastapi import Depends, HTTPException, Request, Response

from storefront.services.backend_client import BackendError
from storefront.services.session_registry import ClientSession, SessionRegistry
from storefront.utils.settings import CLIENT_COOKIE_NAME, STOREFRONT_ORIGIN

# statusy backendu przekazywane dalej bez zmian, reszta to 502
PASSTHROUGH_STATUSES = {400, 401, 403, 404, 409}


def get_registry(request: Request) -> SessionRegistry:
    return request.app.state.registry


def get_session(
    request: Request,
    response: Response,
    registry: SessionRegistry = Depends(get_registry),
) -> ClientSession:
    client_id = request.cookies.get(CLIENT_COOKIE_NAME)
    if not client_id:
        client_id = uuid.uuid4().hex
        response.set_cookie(CLIENT_COOKIE_NAME, client_id, httponly=True, samesite="lax")
    return registry.get(client_id)


def get_origin(request: Request) -> str:
    return STOREFRONT_ORIGIN or str(request.base_url).rstrip("/")


def to_http_error(e: Exception) -> HTTPException:
    if isinstance(e, BackendError):
        status = e.status_code if e.status_code in PASSTHROUGH_STATUSES else 502
        return HTTPException(status_code=status, detail=str(e))
    if isinstance(e, PermissionError):
        return HTTPException(status_code=401, detail=str(e))
    if isinstance(e, ValueError):
        return HTTPException(status_code=400, detail=str(e))
    return HTTPException(status_code=409, detail=str(e))
