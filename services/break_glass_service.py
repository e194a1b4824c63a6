"""
Acesso administrativo break-glass.

Segredo compartilhado vindo da configuração, independente das contas e
papéis de usuário. O sucesso apenas liga uma flag na sessão.
"""
import logging
from typing import Any, Dict

from fastapi import Request

from core.config import settings
from core.exceptions import InvalidCredentials
from core.security import constant_time_equals
from middleware.permission import ADMIN_SESSION_FLAG, is_break_glass_admin
from middleware.session import regenerate_session

logger = logging.getLogger(__name__)


def login(request: Request, username: str, password: str) -> Dict[str, Any]:
    # Compara os dois campos sempre, sem curto-circuito
    user_ok = constant_time_equals(username, settings.BREAK_GLASS_USERNAME)
    pass_ok = constant_time_equals(password, settings.BREAK_GLASS_PASSWORD)
    if not (user_ok and pass_ok):
        logger.warning("Login break-glass falhou")
        raise InvalidCredentials("Credenciais inválidas")

    regenerate_session(request)
    request.session[ADMIN_SESSION_FLAG] = True
    logger.warning("Login break-glass realizado")
    return {"success": True, "message": "Login administrativo realizado"}


def logout(request: Request) -> Dict[str, Any]:
    if request.session.pop(ADMIN_SESSION_FLAG, None):
        regenerate_session(request)
        logger.info("Logout break-glass")
    return {"success": True, "message": "Logout administrativo realizado"}


def check(request: Request) -> Dict[str, Any]:
    return {"authenticated": is_break_glass_admin(request)}
