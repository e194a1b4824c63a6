from fastapi import APIRouter, Request

from core.rate_limit import AUTH_LIMIT_MESSAGE, LOGIN_LIMIT, limiter
from schemas.auth_schema import AdminCheckResponse, AdminLoginRequest, MessageResponse
from services import break_glass_service


router = APIRouter(prefix="/admin", tags=["Admin - Acesso"])


@router.post("/login", response_model=MessageResponse)
@limiter.limit(LOGIN_LIMIT, error_message=AUTH_LIMIT_MESSAGE)
def admin_login(payload: AdminLoginRequest, request: Request):
    return break_glass_service.login(request, payload.username, payload.password)


@router.post("/logout", response_model=MessageResponse)
def admin_logout(request: Request):
    return break_glass_service.logout(request)


@router.get("/check", response_model=AdminCheckResponse)
def admin_check(request: Request):
    return break_glass_service.check(request)
