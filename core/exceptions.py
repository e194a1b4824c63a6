# core/exceptions.py
"""
Taxonomia de erros de autenticação e de tenant.

Todas as classes são HTTPException, então podem ser levantadas de serviços
e dependências como o resto da API. O handler registrado em main.py devolve
{"detail": <mensagem>, "code": <código>, ...extra}.
"""
from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class AuthError(HTTPException):
    """Base da taxonomia."""

    code = "auth_error"
    default_status = status.HTTP_401_UNAUTHORIZED
    default_message = "Falha de autenticação"

    def __init__(
        self,
        detail: Optional[str] = None,
        status_code: Optional[int] = None,
        headers: Optional[Dict[str, str]] = None,
        **extra: Any,
    ):
        super().__init__(
            status_code=status_code or self.default_status,
            detail=detail or self.default_message,
            headers=headers,
        )
        self.extra = extra

    def to_dict(self) -> Dict[str, Any]:
        return {"detail": self.detail, "code": self.code, **self.extra}


class InvalidCredentials(AuthError):
    # Email inexistente, senha errada e tipo de usuário errado são indistinguíveis
    code = "invalid_credentials"
    default_message = "Email ou senha inválidos"


class NoPasswordSet(AuthError):
    code = "no_password_set"
    default_message = "Este usuário não possui senha configurada"


class NoEmailInProfile(AuthError):
    code = "no_email_in_profile"
    default_message = "Email não encontrado no perfil do provedor"


class TokenExpiredOrInvalid(AuthError):
    code = "token_expired_or_invalid"
    default_message = "Token inválido ou expirado"


class Unauthenticated(AuthError):
    code = "unauthenticated"
    default_message = "Não autenticado"


class Forbidden(AuthError):
    code = "forbidden"
    default_status = status.HTTP_403_FORBIDDEN
    default_message = "Acesso negado"


class TenantUnresolved(AuthError):
    code = "tenant_unresolved"
    default_status = status.HTTP_400_BAD_REQUEST
    default_message = "Não foi possível identificar a academia"


class TenantSelectionRequired(AuthError):
    code = "tenant_selection_required"
    default_status = status.HTTP_409_CONFLICT
    default_message = "Selecione uma academia para continuar"
