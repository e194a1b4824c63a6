# models/sessao.py
from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, JSON
from db import Base


class SessaoServidor(Base):
    """Sessão do servidor referenciada pelo cookie (sid opaco)."""

    __tablename__ = "sessions"

    sid = Column(String(255), primary_key=True)
    dados = Column(JSON, nullable=False, default=dict)
    expire = Column(DateTime(timezone=True), nullable=False, index=True)

    def __repr__(self):
        return f"<SessaoServidor(sid='{self.sid[:8]}...', expire={self.expire})>"

    @property
    def is_expired(self) -> bool:
        """Verifica se a sessão expirou."""
        expire = self.expire
        if expire.tzinfo is None:
            expire = expire.replace(tzinfo=timezone.utc)
        return datetime.now(timezone.utc) > expire
