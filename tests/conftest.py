"""
Fixtures compartilhadas.

As variáveis de ambiente precisam existir antes de importar core.config,
por isso são definidas no topo deste módulo.
"""
import os

os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET_KEY"] = "test-jwt-secret"
os.environ["SESSION_SECRET"] = "test-session-secret"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["EMAIL_ENABLED"] = "false"
os.environ["SESSION_STORE"] = "memory"
os.environ["GOOGLE_CLIENT_ID"] = ""
os.environ["GOOGLE_CLIENT_SECRET"] = ""
os.environ["OIDC_CLIENT_ID"] = ""

import pytest
from unittest.mock import MagicMock

import itsdangerous
from fastapi.testclient import TestClient

from core.config import settings
from core.rate_limit import limiter
from core.security import generate_session_id, hash_password
from main import create_app
from services.email_service import Mailer, get_mailer
from storage import MemoryCredentialStore, MemorySessionStore, get_credential_store

DEFAULT_PASSWORD = "senha-forte-123"


@pytest.fixture
def store():
    return MemoryCredentialStore()


@pytest.fixture
def session_store():
    return MemorySessionStore()


@pytest.fixture
def mailer():
    return MagicMock(spec=Mailer)


@pytest.fixture
def app(store, session_store, mailer):
    limiter.reset()
    application = create_app(session_store=session_store)
    application.dependency_overrides[get_credential_store] = lambda: store
    application.dependency_overrides[get_mailer] = lambda: mailer
    return application


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def make_user(store):
    """Factory de usuários direto no store (password=None cria conta sem senha)."""
    counter = {"n": 0}

    def _make(email=None, password=DEFAULT_PASSWORD, user_type="aluno", **fields):
        counter["n"] += 1
        email = email or f"user{counter['n']}@gymsync.com"
        senha_hash = hash_password(password) if password else None
        return store.create_user(email=email, senha_hash=senha_hash, user_type=user_type, **fields)

    return _make


@pytest.fixture
def make_gym(store):
    counter = {"n": 0}

    def _make(name=None, invite_code=None, **fields):
        counter["n"] += 1
        return store.create_gym(
            name=name or f"Academia {counter['n']}",
            invite_code=invite_code or f"GYM{counter['n']:03d}",
            **fields,
        )

    return _make


@pytest.fixture
def session_headers(session_store):
    """
    Cria uma sessão diretamente no store e devolve o header Cookie assinado.

    Permite autenticar sem passar pelo login (e sem bcrypt).
    """
    signer = itsdangerous.TimestampSigner(settings.SESSION_SECRET)

    def _make(data):
        sid = generate_session_id()
        session_store.set(sid, data, settings.SESSION_MAX_AGE_SECONDS)
        signed = signer.sign(sid.encode("utf-8")).decode("utf-8")
        return sid, {"Cookie": f"{settings.SESSION_COOKIE_NAME}={signed}"}

    return _make


@pytest.fixture
def auth_headers(session_headers):
    """Headers de uma sessão autenticada para o usuário informado."""

    def _make(user, provider="local", **extra):
        _, headers = session_headers({"auth": {"user_id": user.id, "provider": provider, **extra}})
        return headers

    return _make


@pytest.fixture
def cookie_sid():
    """Extrai o sid do cookie de sessão do client (None se não houver)."""
    signer = itsdangerous.TimestampSigner(settings.SESSION_SECRET)

    def _sid(client):
        value = client.cookies.get(settings.SESSION_COOKIE_NAME)
        if not value:
            return None
        return signer.unsign(value.encode("utf-8")).decode("utf-8")

    return _sid
