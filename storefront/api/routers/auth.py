# storefront/api/routers/auth.py
from fastapi import APIRouter, Depends

from storefront.api.deps import get_session, to_http_error
from storefront.domain.schemas import AuthSession, GoogleLoginIn, LoginIn, RegisterIn
from storefront.services.auth_service import AuthManager
from storefront.services.session_registry import ClientSession

router = APIRouter(prefix="/auth", tags=["auth"])


def auth_out(auth: AuthManager) -> AuthSession:
    return AuthSession(is_authenticated=auth.is_authenticated, user=auth.user)


@router.get("/me", response_model=AuthSession)
def me(session: ClientSession = Depends(get_session)):
    return auth_out(session.auth)


@router.post("/login", response_model=AuthSession)
def login(payload: LoginIn, session: ClientSession = Depends(get_session)):
    try:
        session.auth.login(payload.model_dump())
    except (ValueError, RuntimeError) as e:
        raise to_http_error(e)
    return auth_out(session.auth)


@router.post("/register", response_model=AuthSession, status_code=201)
def register(payload: RegisterIn, session: ClientSession = Depends(get_session)):
    try:
        session.auth.register(payload.model_dump(exclude_none=True))
    except (ValueError, RuntimeError) as e:
        raise to_http_error(e)
    return auth_out(session.auth)


@router.post("/google", response_model=AuthSession)
def google_login(payload: GoogleLoginIn, session: ClientSession = Depends(get_session)):
    try:
        session.auth.google_login(payload.id_token)
    except (ValueError, RuntimeError) as e:
        raise to_http_error(e)
    return auth_out(session.auth)


@router.post("/token/refresh", response_model=AuthSession)
def refresh_token(session: ClientSession = Depends(get_session)):
    if not session.auth.refresh_access_token():
        raise to_http_error(PermissionError("Token refresh failed"))
    return auth_out(session.auth)


@router.post("/logout", response_model=AuthSession)
def logout(session: ClientSession = Depends(get_session)):
    session.auth.logout()
    return auth_out(session.auth)
