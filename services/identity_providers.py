# services/identity_providers.py
"""
Provedores de identidade.

Cada provedor transforma uma asserção (credenciais locais, perfil Google,
claims OIDC) em um Usuario do Credential Store. A sessão é estabelecida
depois, em auth_service.establish_session, igual para todos.
"""
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from core.exceptions import InvalidCredentials, NoEmailInProfile, NoPasswordSet
from core.security import verify_password
from models import TipoUsuario, Usuario
from storage import CredentialStore

logger = logging.getLogger(__name__)


@dataclass
class LocalCredentials:
    email: str
    password: str
    user_type: str


@dataclass
class GoogleProfile:
    id: str
    display_name: Optional[str] = None
    emails: List[str] = field(default_factory=list)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    picture: Optional[str] = None

    @classmethod
    def from_userinfo(cls, userinfo: Dict[str, Any]) -> "GoogleProfile":
        email = userinfo.get("email")
        return cls(
            id=userinfo["sub"],
            display_name=userinfo.get("name"),
            emails=[email] if email else [],
            first_name=userinfo.get("given_name"),
            last_name=userinfo.get("family_name"),
            picture=userinfo.get("picture"),
        )


@dataclass
class OIDCAssertion:
    claims: Dict[str, Any]
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_at: Optional[int] = None
    expires_in: Optional[int] = None


class IdentityProvider(ABC):
    """Interface comum dos provedores."""

    name: str = ""

    @abstractmethod
    def resolve(self, store: CredentialStore, assertion: Any) -> Usuario:
        """Retorna o usuário da asserção ou levanta um AuthError."""

    def principal_extras(self, assertion: Any) -> Dict[str, Any]:
        """Campos adicionais guardados no principal da sessão."""
        return {}


class LocalPasswordProvider(IdentityProvider):
    name = "local"

    def resolve(self, store: CredentialStore, assertion: LocalCredentials) -> Usuario:
        user = store.get_user_by_email(assertion.email)
        if user is None or not user.is_active:
            logger.info("Login local falhou: email desconhecido")
            raise InvalidCredentials()

        # Papel diferente do cadastrado responde igual a senha errada
        if user.user_type != assertion.user_type:
            logger.info("Login local falhou: tipo de usuário divergente (%s)", user.id)
            raise InvalidCredentials()

        if not user.senha_hash:
            raise NoPasswordSet()

        if not verify_password(assertion.password, user.senha_hash):
            logger.info("Login local falhou: senha incorreta (%s)", user.id)
            raise InvalidCredentials()

        return store.update_user(user.id, last_login=datetime.now(timezone.utc))


class GoogleOAuthProvider(IdentityProvider):
    name = "google"

    def resolve(self, store: CredentialStore, assertion: GoogleProfile) -> Usuario:
        user = store.get_user_by_google_id(assertion.id)
        if user is not None:
            return store.update_user(user.id, last_login=datetime.now(timezone.utc))

        email = assertion.emails[0] if assertion.emails else None
        if not email:
            raise NoEmailInProfile("Email não encontrado no perfil Google")

        existing = store.get_user_by_email(email)
        if existing is not None:
            logger.info("Conta Google vinculada ao usuário existente %s", existing.id)
            return store.update_user(
                existing.id,
                google_id=assertion.id,
                last_login=datetime.now(timezone.utc),
            )

        user = store.create_user(
            email=email,
            google_id=assertion.id,
            email_verified=True,
            nome=assertion.display_name or "Usuário Google",
            first_name=assertion.first_name,
            last_name=assertion.last_name,
            profile_image_url=assertion.picture,
            user_type=TipoUsuario.ALUNO,
            last_login=datetime.now(timezone.utc),
        )
        logger.info("Usuário %s criado via Google", user.id)
        return user


class PlatformOIDCProvider(IdentityProvider):
    name = "oidc"

    # Validade assumida quando o provedor não informa exp nem expires_in
    DEFAULT_LIFETIME_SECONDS = 3600

    def resolve(self, store: CredentialStore, assertion: OIDCAssertion) -> Usuario:
        claims = assertion.claims
        subject = claims["sub"]

        email = claims.get("email")
        if email:
            owner = store.get_user_by_email(email)
            if owner is not None and owner.id != subject:
                logger.warning("Email do OIDC já pertence a outro usuário; mantendo o atual (%s)", subject)
                email = None

        # Papel só é definido na criação; nunca rebaixa um usuário existente
        return store.upsert_user(
            subject,
            defaults={"user_type": TipoUsuario.ALUNO},
            email=email,
            first_name=claims.get("first_name"),
            last_name=claims.get("last_name"),
            profile_image_url=claims.get("profile_image_url"),
            last_login=datetime.now(timezone.utc),
        )

    def principal_extras(self, assertion: OIDCAssertion) -> Dict[str, Any]:
        if assertion.claims.get("exp"):
            expires_at = int(assertion.claims["exp"])
        elif assertion.expires_at:
            expires_at = int(assertion.expires_at)
        elif assertion.expires_in:
            expires_at = int(time.time()) + int(assertion.expires_in)
        else:
            expires_at = int(time.time()) + self.DEFAULT_LIFETIME_SECONDS
        return {
            "expires_at": expires_at,
            "refresh_token": assertion.refresh_token,
            "access_token": assertion.access_token,
        }


local_provider = LocalPasswordProvider()
google_provider = GoogleOAuthProvider()
oidc_provider = PlatformOIDCProvider()
