# storage/session_store.py
"""
Armazenamento das sessões do servidor.

O cookie carrega apenas o sid assinado; os dados ficam aqui.
"""
import logging
import threading
import time
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional, Tuple

from sqlalchemy.orm import Session

from models import SessaoServidor

logger = logging.getLogger(__name__)


class SessionStore(ABC):
    @abstractmethod
    def get(self, sid: str) -> Optional[dict]:
        """Dados da sessão ou None se não existe / expirou."""

    @abstractmethod
    def set(self, sid: str, data: dict, max_age: int) -> None: ...

    @abstractmethod
    def destroy(self, sid: str) -> None: ...


class MemorySessionStore(SessionStore):
    """Sessões em memória, com limpeza periódica das expiradas."""

    def __init__(self, check_period: int = 24 * 60 * 60, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._check_period = check_period
        self._last_prune = clock()
        self._lock = threading.Lock()
        self._data: Dict[str, Tuple[dict, float]] = {}

    def _prune(self, now: float) -> None:
        if now - self._last_prune < self._check_period:
            return
        expired = [sid for sid, (_, exp) in self._data.items() if exp <= now]
        for sid in expired:
            del self._data[sid]
        self._last_prune = now
        if expired:
            logger.debug("%d sessões expiradas removidas", len(expired))

    def get(self, sid: str) -> Optional[dict]:
        now = self._clock()
        with self._lock:
            self._prune(now)
            entry = self._data.get(sid)
            if entry is None:
                return None
            data, expires = entry
            if expires <= now:
                del self._data[sid]
                return None
            return dict(data)

    def set(self, sid: str, data: dict, max_age: int) -> None:
        with self._lock:
            self._data[sid] = (dict(data), self._clock() + max_age)

    def destroy(self, sid: str) -> None:
        with self._lock:
            self._data.pop(sid, None)

    def __len__(self) -> int:
        return len(self._data)


class SqlSessionStore(SessionStore):
    """Sessões na tabela `sessions` (uma Session do SQLAlchemy por operação)."""

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def get(self, sid: str) -> Optional[dict]:
        db = self._session_factory()
        try:
            row = db.query(SessaoServidor).filter(SessaoServidor.sid == sid).first()
            if row is None:
                return None
            if row.is_expired:
                db.delete(row)
                db.commit()
                return None
            return dict(row.dados or {})
        finally:
            db.close()

    def set(self, sid: str, data: dict, max_age: int) -> None:
        expire = datetime.now(timezone.utc) + timedelta(seconds=max_age)
        db = self._session_factory()
        try:
            row = db.query(SessaoServidor).filter(SessaoServidor.sid == sid).first()
            if row is None:
                db.add(SessaoServidor(sid=sid, dados=dict(data), expire=expire))
            else:
                row.dados = dict(data)
                row.expire = expire
            db.commit()
        finally:
            db.close()

    def destroy(self, sid: str) -> None:
        db = self._session_factory()
        try:
            db.query(SessaoServidor).filter(SessaoServidor.sid == sid).delete(
                synchronize_session=False
            )
            db.commit()
        finally:
            db.close()

    def prune_expired(self) -> int:
        db = self._session_factory()
        try:
            removed = (
                db.query(SessaoServidor)
                .filter(SessaoServidor.expire <= datetime.now(timezone.utc))
                .delete(synchronize_session=False)
            )
            db.commit()
            return removed
        finally:
            db.close()
