# storage/__init__.py
from fastapi import Depends
from sqlalchemy.orm import Session

from db import get_db
from .base import CredentialStore, DuplicateError
from .memory_store import MemoryCredentialStore
from .session_store import MemorySessionStore, SessionStore, SqlSessionStore
from .sql_store import SqlCredentialStore


def get_credential_store(db: Session = Depends(get_db)) -> CredentialStore:
    """Dependency que fornece o Credential Store da requisição."""
    return SqlCredentialStore(db)


__all__ = [
    "CredentialStore",
    "DuplicateError",
    "MemoryCredentialStore",
    "SqlCredentialStore",
    "SessionStore",
    "MemorySessionStore",
    "SqlSessionStore",
    "get_credential_store",
]
