"""Clientes OAuth2/OIDC (authlib) para Google e para o OIDC da plataforma."""
import logging

from authlib.integrations.starlette_client import OAuth
from fastapi import HTTPException, status

from core.config import settings

logger = logging.getLogger(__name__)

GOOGLE = "google"
OIDC = "oidc"


def build_oauth(config=settings) -> OAuth:
    """Registra apenas os provedores com credenciais configuradas."""
    oauth = OAuth()

    if config.GOOGLE_CLIENT_ID and config.GOOGLE_CLIENT_SECRET:
        oauth.register(
            name=GOOGLE,
            client_id=config.GOOGLE_CLIENT_ID,
            client_secret=config.GOOGLE_CLIENT_SECRET,
            server_metadata_url=config.GOOGLE_METADATA_URL,
            client_kwargs={"scope": "openid email profile"},
        )
    else:
        logger.info("Google OAuth não configurado")

    if config.OIDC_CLIENT_ID:
        oauth.register(
            name=OIDC,
            client_id=config.OIDC_CLIENT_ID,
            client_secret=config.OIDC_CLIENT_SECRET,
            server_metadata_url=f"{config.OIDC_ISSUER_URL.rstrip('/')}/.well-known/openid-configuration",
            client_kwargs={"scope": "openid email profile offline_access"},
        )
    else:
        logger.info("OIDC da plataforma não configurado")

    return oauth


oauth = build_oauth()


def get_client(name: str):
    """
    Cliente registrado para o provedor.

    Raises:
        HTTPException 503: Provedor sem credenciais configuradas
    """
    client = oauth.create_client(name)
    if client is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Login via {name} não está configurado",
        )
    return client
