import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import BackgroundTasks, HTTPException, Request, status

from core.config import settings
from core.exceptions import TokenExpiredOrInvalid
from core.security import (
    create_access_token,
    generate_reset_token,
    hash_password,
    hash_reset_token,
    validate_password_strength,
)
from middleware.auth import SESSION_AUTH_KEY
from middleware.session import regenerate_session
from models import TipoUsuario, Usuario
from schemas.auth_schema import DefinirSenhaRequest, LoginRequest, RegisterRequest
from storage import CredentialStore, DuplicateError
from .email_service import Mailer, deliver
from .identity_providers import IdentityProvider, LocalCredentials, local_provider

logger = logging.getLogger(__name__)

RESET_REQUESTED_MESSAGE = "Se o email existir, você receberá instruções"

DASHBOARD_PATHS = {
    TipoUsuario.ALUNO: "/aluno",
    TipoUsuario.PERSONAL: "/personal",
    TipoUsuario.ACADEMIA: "/academia",
    TipoUsuario.ADMIN: "/academia",
}


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _user_info(user: Usuario) -> Dict[str, Any]:
    return {
        "id": user.id,
        "email": user.email,
        "userType": user.user_type,
        "name": user.display_name,
    }


def dashboard_path(user_type: Optional[str]) -> str:
    return DASHBOARD_PATHS.get(user_type, "/")


def establish_session(
    request: Request,
    user: Usuario,
    provider: IdentityProvider,
    extras: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Ponto único de emissão da sessão para qualquer provedor.

    Troca o sid (evita fixação de sessão) e grava o principal unificado.
    A flag break-glass, se existir, é preservada.
    """
    regenerate_session(request)
    principal = {"user_id": user.id, "provider": provider.name}
    principal.update({k: v for k, v in (extras or {}).items() if v is not None})
    request.session[SESSION_AUTH_KEY] = principal
    logger.info("Sessão estabelecida para %s via %s", user.id, provider.name)


def login(request: Request, store: CredentialStore, data: LoginRequest) -> Dict[str, Any]:
    user = local_provider.resolve(
        store,
        LocalCredentials(email=data.email, password=data.password, user_type=data.user_type),
    )
    establish_session(request, user, local_provider)

    token = create_access_token(user_id=user.id, email=user.email, user_type=user.user_type)
    return {
        "message": "Login realizado com sucesso",
        "user": _user_info(user),
        "token": token,
    }


def register(store: CredentialStore, data: RegisterRequest) -> Dict[str, Any]:
    if data.user_type == TipoUsuario.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Não é permitido registrar administradores",
        )

    gym = None
    if data.user_type == TipoUsuario.ALUNO:
        code = (data.invite_code or "").strip().upper()
        gym = store.get_gym_by_invite_code(code) if code else None
        if gym is None or not gym.is_active:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={"message": "Código de convite inválido", "code": "invalid_invite_code"},
            )
        if gym.max_members is not None and store.count_gym_members(gym.id) >= gym.max_members:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Esta academia atingiu o limite de alunos",
            )

    if store.get_user_by_email(data.email):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Usuário com este email já existe",
        )

    valid, msg = validate_password_strength(
        data.password, email=data.email, first_name=data.first_name, last_name=data.last_name
    )
    if not valid:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=msg)

    try:
        user = store.create_user(
            email=data.email,
            senha_hash=hash_password(data.password),
            user_type=data.user_type,
            nome=data.name or data.email.split("@")[0],
            first_name=data.first_name,
            last_name=data.last_name,
            gym_id=gym.id if gym else None,
        )
    except DuplicateError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Usuário com este email já existe",
        )

    if gym is not None:
        store.add_membership(user.id, gym.id)

    logger.info("Usuário %s registrado como %s", user.id, user.user_type)
    return {"message": "Usuário criado com sucesso", "user": _user_info(user)}


def logout(request: Request) -> Dict[str, Any]:
    principal = request.session.pop(SESSION_AUTH_KEY, None)
    if principal:
        regenerate_session(request)
        logger.info("Logout de %s", principal.get("user_id"))
    return {"message": "Logout realizado"}


def me(store: CredentialStore, user_id: str, provider: str) -> Dict[str, Any]:
    user = store.get_user(user_id)
    gyms = store.list_user_gyms(user.id)
    return {
        **_user_info(user),
        "firstName": user.first_name,
        "lastName": user.last_name,
        "profileImageUrl": user.profile_image_url,
        "emailVerified": user.email_verified,
        "gymId": user.gym_id,
        "activeGymId": user.active_gym_id,
        "hasPassword": bool(user.senha_hash),
        "provider": provider,
        "gyms": [{"id": g.id, "name": g.name} for g in gyms],
        "createdAt": user.created_at,
        "lastLogin": user.last_login,
    }


def request_password_reset(
    store: CredentialStore,
    email: str,
    mailer: Mailer,
    background: BackgroundTasks,
) -> Dict[str, Any]:
    user = store.get_user_by_email(email)
    if not user:
        return {"success": True, "message": RESET_REQUESTED_MESSAGE}

    token_plain, token_hash = generate_reset_token()
    expires = _now_utc() + timedelta(minutes=settings.RESET_TOKEN_EXPIRE_MINUTES)
    store.set_password_reset_token(user.id, token_hash, expires)
    logger.info("Reset de senha solicitado para %s", user.id)

    background.add_task(deliver, mailer.send_password_reset, user.email, user.display_name, token_plain)
    return {"success": True, "message": RESET_REQUESTED_MESSAGE}


def issue_welcome_token(
    store: CredentialStore,
    user: Usuario,
    mailer: Mailer,
    background: BackgroundTasks,
) -> None:
    """Token de definição de senha para contas criadas pelo admin (sem senha)."""
    token_plain, token_hash = generate_reset_token()
    expires = _now_utc() + timedelta(days=settings.WELCOME_TOKEN_EXPIRE_DAYS)
    store.set_password_reset_token(user.id, token_hash, expires)
    if user.email:
        background.add_task(
            deliver, mailer.send_welcome, user.email, user.display_name, user.user_type, token_plain
        )


def definir_senha(store: CredentialStore, data: DefinirSenhaRequest) -> Dict[str, Any]:
    if data.password != data.confirm_password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="As senhas não coincidem",
        )

    token_hash = hash_reset_token(data.token)
    user = store.get_user_by_reset_token(token_hash)
    if user is None:
        raise TokenExpiredOrInvalid(status_code=status.HTTP_400_BAD_REQUEST)

    if user.password_reset_expires is None or _as_utc(user.password_reset_expires) <= _now_utc():
        raise TokenExpiredOrInvalid("Token expirado", status_code=status.HTTP_400_BAD_REQUEST)

    valid, msg = validate_password_strength(
        data.password, email=user.email, first_name=user.first_name, last_name=user.last_name
    )
    if not valid:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=msg)

    # Escrita condicional: só um consumo do mesmo token vence
    consumed = store.consume_password_reset_token(token_hash, hash_password(data.password), _now_utc())
    if consumed is None:
        raise TokenExpiredOrInvalid(status_code=status.HTTP_400_BAD_REQUEST)

    logger.info("Senha definida para %s", consumed.id)
    return {"success": True, "message": "Senha definida com sucesso"}
