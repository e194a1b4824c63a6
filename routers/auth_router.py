from fastapi import APIRouter, BackgroundTasks, Depends, Request, status
from fastapi.responses import RedirectResponse

from core.rate_limit import (
    AUTH_LIMIT_MESSAGE,
    LOGIN_LIMIT,
    PASSWORD_RESET_LIMIT,
    PASSWORD_RESET_LIMIT_MESSAGE,
    REGISTER_LIMIT,
    REGISTER_LIMIT_MESSAGE,
    limiter,
)
from middleware.auth import (
    CurrentUser,
    get_bearer_user,
    get_current_user,
    get_optional_current_user,
)
from schemas.auth_schema import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
    SolicitarResetRequest,
    DefinirSenhaRequest,
    MessageResponse,
    MeResponse,
    TokenCheckResponse,
)
from services.auth_service import (
    dashboard_path,
    definir_senha,
    login,
    logout,
    me,
    register,
    request_password_reset,
)
from services.email_service import Mailer, get_mailer
from storage import CredentialStore, get_credential_store


router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/login", response_model=LoginResponse)
@limiter.limit(LOGIN_LIMIT, error_message=AUTH_LIMIT_MESSAGE)
def auth_login(
    payload: LoginRequest,
    request: Request,
    store: CredentialStore = Depends(get_credential_store),
):
    return login(request, store, payload)


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(REGISTER_LIMIT, error_message=REGISTER_LIMIT_MESSAGE)
def auth_register(
    payload: RegisterRequest,
    request: Request,
    store: CredentialStore = Depends(get_credential_store),
):
    return register(store, payload)


@router.post("/logout")
def auth_logout(request: Request):
    return logout(request)


@router.get("/logout")
def auth_logout_redirect(request: Request):
    logout(request)
    return RedirectResponse(url="/", status_code=status.HTTP_302_FOUND)


@router.get("/me", response_model=MeResponse)
def auth_me(
    current_user: CurrentUser = Depends(get_current_user),
    store: CredentialStore = Depends(get_credential_store),
):
    return me(store, current_user.user_id, current_user.provider)


@router.get("/token", response_model=TokenCheckResponse)
def auth_token(current_user: CurrentUser = Depends(get_bearer_user)):
    """Valida o bearer token (sem sessão) e devolve seu payload."""
    return {
        "id": current_user.user_id,
        "email": current_user.email,
        "userType": current_user.user_type,
    }


@router.get("/redirect")
def auth_redirect(current_user=Depends(get_optional_current_user)):
    """Destino pós-login conforme o papel do usuário."""
    target = dashboard_path(current_user.user_type) if current_user else "/"
    return RedirectResponse(url=target, status_code=status.HTTP_302_FOUND)


@router.post("/solicitar-reset", response_model=MessageResponse)
@limiter.limit(PASSWORD_RESET_LIMIT, error_message=PASSWORD_RESET_LIMIT_MESSAGE)
def auth_solicitar_reset(
    payload: SolicitarResetRequest,
    request: Request,
    background: BackgroundTasks,
    store: CredentialStore = Depends(get_credential_store),
    mailer: Mailer = Depends(get_mailer),
):
    return request_password_reset(store, payload.email, mailer, background)


@router.post("/definir-senha", response_model=MessageResponse)
def auth_definir_senha(
    payload: DefinirSenhaRequest,
    store: CredentialStore = Depends(get_credential_store),
):
    return definir_senha(store, payload)
