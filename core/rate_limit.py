# core/rate_limit.py
"""
Rate limiting por IP (slowapi, janelas fixas).

Os contadores vivem no storage em memória do `limits`, que descarta as
janelas expiradas; não são compartilhados entre instâncias do processo.

Uso:
    @router.post("/login")
    @limiter.limit(LOGIN_LIMIT, error_message=AUTH_LIMIT_MESSAGE)
    def auth_login(payload: LoginRequest, request: Request): ...
"""
import logging
import math
import time

from fastapi import Request, status
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from .config import settings

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address, strategy="fixed-window")

LOGIN_LIMIT = f"{settings.LOGIN_MAX_ATTEMPTS} per {settings.LOGIN_WINDOW_MINUTES} minutes"
REGISTER_LIMIT = f"{settings.REGISTER_MAX_ATTEMPTS} per {settings.REGISTER_WINDOW_MINUTES} minutes"
PASSWORD_RESET_LIMIT = (
    f"{settings.PASSWORD_RESET_MAX_ATTEMPTS} per {settings.PASSWORD_RESET_WINDOW_MINUTES} minutes"
)

AUTH_LIMIT_MESSAGE = "Muitas tentativas de autenticação, por favor tente novamente mais tarde."
REGISTER_LIMIT_MESSAGE = "Muitas contas criadas deste IP, por favor tente novamente mais tarde."
PASSWORD_RESET_LIMIT_MESSAGE = "Muitas tentativas de reset de senha, por favor tente novamente mais tarde."


def _retry_after_seconds(request: Request, exc: RateLimitExceeded) -> int:
    """Segundos até a janela que estourou reiniciar."""
    current = getattr(request.state, "view_rate_limit", None)
    if current is None:
        return exc.limit.limit.get_expiry()
    item, keys = current
    reset_at, _ = request.app.state.limiter.limiter.get_window_stats(item, *keys)
    return max(1, math.ceil(reset_at - time.time()))


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    retry_after = _retry_after_seconds(request, exc)
    logger.warning(
        "Rate limit excedido em %s para %s", request.url.path, get_remote_address(request)
    )
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={
            "detail": {
                "message": exc.detail,
                "retryAfter": f"{max(1, math.ceil(retry_after / 60))} minutos",
            }
        },
        headers={"Retry-After": str(retry_after)},
    )
