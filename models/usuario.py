# models/usuario.py
import uuid

from sqlalchemy import Column, String, Boolean, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from db import Base


class TipoUsuario:
    """Papéis do sistema. Enumeração plana, não é hierarquia."""

    ALUNO = "aluno"
    PERSONAL = "personal"
    ACADEMIA = "academia"
    ADMIN = "admin"

    TODOS = (ALUNO, PERSONAL, ACADEMIA, ADMIN)
    # Contas cuja identidade pode ser a própria academia (pré multi-tenant)
    GYM_ROLES = (ACADEMIA, ADMIN)


def _new_id() -> str:
    return str(uuid.uuid4())


class Usuario(Base):
    """Modelo de Usuário do sistema."""

    __tablename__ = "users"

    # Identidade
    id = Column(String(255), primary_key=True, default=_new_id)
    email = Column(String(255), nullable=True, unique=True, index=True)
    senha_hash = Column(String(255), nullable=True)
    google_id = Column(String(255), nullable=True, unique=True, index=True)
    email_verified = Column(Boolean, default=False, nullable=False)

    # Perfil
    nome = Column(String(255), nullable=True)
    first_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=True)
    profile_image_url = Column(String(500), nullable=True)

    # Papel
    user_type = Column(String(20), nullable=False, default=TipoUsuario.ALUNO, index=True)

    # Tenant
    gym_id = Column(String(255), nullable=True, index=True)  # legado, academia única
    active_gym_id = Column(String(255), nullable=True)

    # Definição/reset de senha (hash do token + expiração, sempre juntos)
    password_reset_token = Column(String(64), nullable=True, unique=True, index=True)
    password_reset_expires = Column(DateTime(timezone=True), nullable=True)

    # Flags
    is_active = Column(Boolean, default=True, nullable=False)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
    last_login = Column(DateTime(timezone=True), nullable=True)

    # Relacionamentos
    academias = relationship(
        "UsuarioAcademia",
        back_populates="usuario",
        cascade="all, delete-orphan",
        lazy="dynamic",
    )

    @property
    def display_name(self) -> str:
        if self.nome:
            return self.nome
        full = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return full or (self.email or "")

    def __repr__(self):
        return f"<Usuario(id={self.id}, email='{self.email}', user_type='{self.user_type}')>"
