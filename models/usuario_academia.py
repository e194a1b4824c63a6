# models/usuario_academia.py
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from db import Base


class UsuarioAcademia(Base):
    """Vínculo Usuário-Academia (academias disponíveis para o usuário)."""

    __tablename__ = "user_gyms"
    __table_args__ = (
        UniqueConstraint("user_id", "gym_id", name="uq_user_gym"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(
        String(255),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    gym_id = Column(
        String(255),
        ForeignKey("gyms.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    is_active = Column(Boolean, default=True, nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Relacionamentos
    usuario = relationship("Usuario", back_populates="academias")
    academia = relationship("Academia", back_populates="usuarios")

    def __repr__(self):
        return f"<UsuarioAcademia(user_id={self.user_id}, gym_id={self.gym_id})>"
