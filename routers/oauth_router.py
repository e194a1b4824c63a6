"""Rotas de login social (Google) e do OIDC da plataforma."""
import logging
from urllib.parse import urlencode

import httpx
from authlib.integrations.starlette_client import OAuthError
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import RedirectResponse

from core.exceptions import AuthError
from services import oauth_clients
from services.auth_service import dashboard_path, establish_session, logout
from services.identity_providers import (
    GoogleProfile,
    OIDCAssertion,
    google_provider,
    oidc_provider,
)
from storage import CredentialStore, get_credential_store

logger = logging.getLogger(__name__)

router = APIRouter(tags=["OAuth"])


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=status.HTTP_302_FOUND)


# ============================================================
# GOOGLE
# ============================================================

@router.get("/auth/google")
async def google_login(request: Request):
    client = oauth_clients.get_client(oauth_clients.GOOGLE)
    redirect_uri = str(request.url_for("google_callback"))
    return await client.authorize_redirect(request, redirect_uri)


@router.get("/auth/google/callback", name="google_callback")
async def google_callback(
    request: Request,
    store: CredentialStore = Depends(get_credential_store),
):
    client = oauth_clients.get_client(oauth_clients.GOOGLE)
    try:
        token = await client.authorize_access_token(request)
    except OAuthError as e:
        logger.warning("Falha no callback do Google: %s", e.error)
        return _redirect("/login?error=google")

    userinfo = token.get("userinfo") or {}
    if not userinfo.get("sub"):
        return _redirect("/login?error=google")

    try:
        user = google_provider.resolve(store, GoogleProfile.from_userinfo(userinfo))
    except AuthError as e:
        logger.warning("Login Google recusado: %s", e.code)
        return _redirect(f"/login?{urlencode({'error': e.code})}")

    establish_session(request, user, google_provider)
    return _redirect(dashboard_path(user.user_type))


# ============================================================
# OIDC DA PLATAFORMA
# ============================================================

@router.get("/login")
async def oidc_login(request: Request):
    client = oauth_clients.get_client(oauth_clients.OIDC)
    redirect_uri = str(request.url_for("oidc_callback"))
    return await client.authorize_redirect(request, redirect_uri, prompt="login consent")


@router.get("/callback", name="oidc_callback")
async def oidc_callback(
    request: Request,
    store: CredentialStore = Depends(get_credential_store),
):
    client = oauth_clients.get_client(oauth_clients.OIDC)
    try:
        token = await client.authorize_access_token(request)
    except OAuthError as e:
        logger.warning("Falha no callback OIDC: %s", e.error)
        return _redirect("/api/login")

    claims = token.get("userinfo") or {}
    if not claims.get("sub"):
        return _redirect("/api/login")

    assertion = OIDCAssertion(
        claims=dict(claims),
        access_token=token.get("access_token"),
        refresh_token=token.get("refresh_token"),
        expires_at=token.get("expires_at"),
        expires_in=token.get("expires_in"),
    )
    user = oidc_provider.resolve(store, assertion)
    establish_session(request, user, oidc_provider, oidc_provider.principal_extras(assertion))
    return _redirect("/api/auth/redirect")


@router.get("/logout")
async def oidc_logout(request: Request):
    logout(request)
    client = oauth_clients.oauth.create_client(oauth_clients.OIDC)
    if client is None:
        return _redirect("/")
    try:
        metadata = await client.load_server_metadata()
    except httpx.HTTPError:
        logger.warning("Metadados do OIDC indisponíveis no logout", exc_info=True)
        return _redirect("/")
    end_session = metadata.get("end_session_endpoint")
    if not end_session:
        return _redirect("/")

    params = urlencode({
        "client_id": client.client_id,
        "post_logout_redirect_uri": str(request.base_url),
    })
    return _redirect(f"{end_session}?{params}")
