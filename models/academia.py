# models/academia.py
import uuid

from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from db import Base


class Academia(Base):
    """Modelo de Academia (tenant)."""

    __tablename__ = "gyms"

    # Colunas
    id = Column(String(255), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(150), nullable=False)
    invite_code = Column(String(20), nullable=False, unique=True, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    max_members = Column(Integer, nullable=True)  # None = sem limite

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=True)

    # 1 academia → N usuários (via UsuarioAcademia)
    usuarios = relationship(
        "UsuarioAcademia",
        back_populates="academia",
        cascade="all, delete-orphan",
        lazy="dynamic",
    )

    def __repr__(self):
        return f"<Academia(id={self.id}, name='{self.name}', invite_code='{self.invite_code}')>"
