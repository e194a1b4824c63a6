# middleware/permission.py
"""
Middleware de permissões - Papéis de usuário e acesso break-glass.
"""
import logging

from fastapi import Depends, Request

from core.exceptions import Forbidden, Unauthenticated
from .auth import CurrentUser, get_current_user

logger = logging.getLogger(__name__)

ADMIN_SESSION_FLAG = "admin_authenticated"


def require_roles(*roles: str):
    """
    Dependency factory que verifica se o papel do usuário está entre os permitidos.

    Uso:
        @router.get("/academia/alunos")
        async def list_alunos(
            current_user: CurrentUser = Depends(require_roles("academia", "admin"))
        ):
            ...
    """

    async def _check_roles(
        current_user: CurrentUser = Depends(get_current_user),
    ) -> CurrentUser:
        if current_user.user_type not in roles:
            raise Forbidden(f"Acesso restrito a: {', '.join(roles)}")
        return current_user

    return _check_roles


def is_break_glass_admin(request: Request) -> bool:
    if "session" not in request.scope:
        return False
    return request.session.get(ADMIN_SESSION_FLAG) is True


async def require_break_glass_admin(request: Request) -> None:
    """
    Dependency das rotas administrativas.

    Olha apenas a flag de sessão do login break-glass; o papel do usuário
    autenticado (se houver) não é considerado.
    """
    if not is_break_glass_admin(request):
        raise Unauthenticated("Acesso administrativo não autorizado")
