# middleware/auth.py
"""
Middleware de autenticação - Sessão do servidor e token Bearer.
"""
import logging
import time
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from core.exceptions import TokenExpiredOrInvalid, Unauthenticated
from core.security import decode_token
from models import TipoUsuario, Usuario
from storage import CredentialStore, get_credential_store

logger = logging.getLogger(__name__)

# Security scheme para Swagger
security = HTTPBearer(auto_error=False)

SESSION_AUTH_KEY = "auth"


class CurrentUser:
    """Contexto do usuário atual."""

    def __init__(
        self,
        user_id: str,
        email: Optional[str],
        nome: Optional[str],
        user_type: str,
        provider: str,
        gym_id: Optional[str] = None,
        active_gym_id: Optional[str] = None,
    ):
        self.user_id = user_id
        self.email = email
        self.nome = nome
        self.user_type = user_type
        self.provider = provider
        self.gym_id = gym_id
        self.active_gym_id = active_gym_id

    @property
    def is_gym_role(self) -> bool:
        return self.user_type in TipoUsuario.GYM_ROLES

    @classmethod
    def from_user(cls, user: Usuario, provider: str) -> "CurrentUser":
        return cls(
            user_id=user.id,
            email=user.email,
            nome=user.display_name,
            user_type=user.user_type,
            provider=provider,
            gym_id=user.gym_id,
            active_gym_id=user.active_gym_id,
        )

    def __repr__(self):
        return f"<CurrentUser(id='{self.user_id}', type='{self.user_type}', provider='{self.provider}')>"


def _session_principal(request: Request) -> Optional[dict]:
    if "session" not in request.scope:
        return None
    principal = request.session.get(SESSION_AUTH_KEY)
    if not isinstance(principal, dict) or not principal.get("user_id"):
        return None
    return principal


async def get_current_user(
    request: Request,
    store: CredentialStore = Depends(get_credential_store),
) -> CurrentUser:
    """
    Dependency que valida o principal da sessão e retorna o usuário atual.

    Raises:
        Unauthenticated 401: Sessão sem principal, usuário removido ou desativado
        TokenExpiredOrInvalid 401: Sessão OIDC expirada (refresh não implementado)
    """
    principal = _session_principal(request)
    if principal is None:
        raise Unauthenticated()

    user = store.get_user(principal["user_id"])
    if user is None or not user.is_active:
        # Principal órfão: a sessão volta a ser anônima
        logger.info("Principal de sessão descartado (usuário %s indisponível)", principal["user_id"])
        request.session.pop(SESSION_AUTH_KEY, None)
        raise Unauthenticated()

    expires_at = principal.get("expires_at")
    if principal.get("provider") == "oidc" and expires_at and time.time() > expires_at:
        raise TokenExpiredOrInvalid(
            "Sessão expirada; refresh não implementado, faça login novamente"
        )

    return CurrentUser.from_user(user, principal.get("provider", "local"))


async def get_optional_current_user(
    request: Request,
    store: CredentialStore = Depends(get_credential_store),
) -> Optional[CurrentUser]:
    """
    Dependency que retorna o usuário atual se autenticado, ou None.
    Útil para endpoints públicos que têm comportamento diferente para usuários logados.
    """
    if _session_principal(request) is None:
        return None

    try:
        return await get_current_user(request, store)
    except (Unauthenticated, TokenExpiredOrInvalid):
        return None


async def get_bearer_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> CurrentUser:
    """
    Dependency stateless: valida apenas o token JWT do header Authorization.

    Raises:
        Unauthenticated 401: Header ausente
        TokenExpiredOrInvalid 401: Token inválido ou expirado
    """
    if credentials is None:
        raise Unauthenticated(
            "Token de autenticação não fornecido",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = decode_token(credentials.credentials)
    if payload is None or not payload.get("id"):
        raise TokenExpiredOrInvalid(headers={"WWW-Authenticate": "Bearer"})

    return CurrentUser(
        user_id=payload["id"],
        email=payload.get("email"),
        nome=None,
        user_type=payload.get("userType", TipoUsuario.ALUNO),
        provider="bearer",
    )
