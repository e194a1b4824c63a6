# storage/sql_store.py
from datetime import datetime, timezone
from typing import Any, List, Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models import Academia, TipoUsuario, Usuario, UsuarioAcademia
from .base import CredentialStore, DuplicateError


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


class SqlCredentialStore(CredentialStore):
    """Credential Store sobre uma Session do SQLAlchemy (uma por requisição)."""

    def __init__(self, db: Session):
        self.db = db

    def _commit(self) -> None:
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise DuplicateError(str(exc.orig)) from exc

    # ------------------------------------------------------------
    # Usuários
    # ------------------------------------------------------------

    def get_user(self, user_id: str) -> Optional[Usuario]:
        return self.db.query(Usuario).filter(Usuario.id == user_id).first()

    def get_user_by_email(self, email: str) -> Optional[Usuario]:
        return self.db.query(Usuario).filter(Usuario.email == email).first()

    def get_user_by_google_id(self, google_id: str) -> Optional[Usuario]:
        return self.db.query(Usuario).filter(Usuario.google_id == google_id).first()

    def get_user_by_reset_token(self, token_hash: str) -> Optional[Usuario]:
        return self.db.query(Usuario).filter(Usuario.password_reset_token == token_hash).first()

    def list_users(self) -> List[Usuario]:
        return self.db.query(Usuario).order_by(Usuario.created_at.desc()).all()

    def count_users_by_type(self, user_type: str, active_only: bool = False) -> int:
        query = self.db.query(Usuario).filter(Usuario.user_type == user_type)
        if active_only:
            query = query.filter(Usuario.is_active == True)
        return query.count()

    def create_user(self, **fields: Any) -> Usuario:
        user = Usuario(**fields)
        self.db.add(user)
        self._commit()
        self.db.refresh(user)
        return user

    def update_user(self, user_id: str, **fields: Any) -> Optional[Usuario]:
        user = self.get_user(user_id)
        if not user:
            return None
        for field, value in fields.items():
            setattr(user, field, value)
        user.updated_at = _now_utc()
        self._commit()
        self.db.refresh(user)
        return user

    def upsert_user(self, user_id: str, defaults: dict, **fields: Any) -> Usuario:
        user = self.get_user(user_id)
        if user is None:
            return self.create_user(id=user_id, **{**defaults, **fields})
        updates = {k: v for k, v in fields.items() if v is not None}
        return self.update_user(user_id, **updates)

    def delete_user(self, user_id: str) -> bool:
        user = self.get_user(user_id)
        if not user:
            return False
        self.db.query(UsuarioAcademia).filter(UsuarioAcademia.user_id == user_id).delete(
            synchronize_session=False
        )
        self.db.delete(user)
        self._commit()
        return True

    # ------------------------------------------------------------
    # Tokens de senha
    # ------------------------------------------------------------

    def set_password_reset_token(self, user_id: str, token_hash: str, expires: datetime) -> None:
        self.update_user(
            user_id,
            password_reset_token=token_hash,
            password_reset_expires=expires,
        )

    def consume_password_reset_token(
        self, token_hash: str, senha_hash: str, now: datetime
    ) -> Optional[Usuario]:
        user = self.get_user_by_reset_token(token_hash)
        if user is None:
            return None
        updated = (
            self.db.query(Usuario)
            .filter(
                Usuario.id == user.id,
                Usuario.password_reset_token == token_hash,
                Usuario.password_reset_expires > now,
            )
            .update(
                {
                    Usuario.senha_hash: senha_hash,
                    Usuario.password_reset_token: None,
                    Usuario.password_reset_expires: None,
                    Usuario.updated_at: now,
                },
                synchronize_session=False,
            )
        )
        if updated != 1:
            self.db.rollback()
            return None
        self._commit()
        self.db.refresh(user)
        return user

    # ------------------------------------------------------------
    # Academias
    # ------------------------------------------------------------

    def get_gym(self, gym_id: str) -> Optional[Academia]:
        return self.db.query(Academia).filter(Academia.id == gym_id).first()

    def get_gym_by_invite_code(self, invite_code: str) -> Optional[Academia]:
        return self.db.query(Academia).filter(Academia.invite_code == invite_code).first()

    def list_gyms(self) -> List[Academia]:
        return self.db.query(Academia).order_by(Academia.name).all()

    def create_gym(self, **fields: Any) -> Academia:
        gym = Academia(**fields)
        self.db.add(gym)
        self._commit()
        self.db.refresh(gym)
        return gym

    def update_gym(self, gym_id: str, **fields: Any) -> Optional[Academia]:
        gym = self.get_gym(gym_id)
        if not gym:
            return None
        for field, value in fields.items():
            setattr(gym, field, value)
        gym.updated_at = _now_utc()
        self._commit()
        self.db.refresh(gym)
        return gym

    def delete_gym(self, gym_id: str) -> bool:
        gym = self.get_gym(gym_id)
        if not gym:
            return False
        self.db.query(UsuarioAcademia).filter(UsuarioAcademia.gym_id == gym_id).delete(
            synchronize_session=False
        )
        self.db.query(Usuario).filter(Usuario.active_gym_id == gym_id).update(
            {Usuario.active_gym_id: None}, synchronize_session=False
        )
        self.db.query(Usuario).filter(Usuario.gym_id == gym_id).update(
            {Usuario.gym_id: None}, synchronize_session=False
        )
        self.db.delete(gym)
        self._commit()
        return True

    # ------------------------------------------------------------
    # Vínculos
    # ------------------------------------------------------------

    def list_user_gyms(self, user_id: str) -> List[Academia]:
        return (
            self.db.query(Academia)
            .join(UsuarioAcademia, UsuarioAcademia.gym_id == Academia.id)
            .filter(UsuarioAcademia.user_id == user_id, UsuarioAcademia.is_active == True)
            .order_by(Academia.name)
            .all()
        )

    def add_membership(self, user_id: str, gym_id: str) -> bool:
        assoc = (
            self.db.query(UsuarioAcademia)
            .filter(UsuarioAcademia.user_id == user_id, UsuarioAcademia.gym_id == gym_id)
            .first()
        )
        if assoc:
            if assoc.is_active:
                return False
            assoc.is_active = True
        else:
            self.db.add(UsuarioAcademia(user_id=user_id, gym_id=gym_id, is_active=True))
        self._commit()
        return True

    def remove_membership(self, user_id: str, gym_id: str) -> bool:
        deleted = (
            self.db.query(UsuarioAcademia)
            .filter(UsuarioAcademia.user_id == user_id, UsuarioAcademia.gym_id == gym_id)
            .delete(synchronize_session=False)
        )
        self._commit()
        return deleted > 0

    def list_gym_users(self, gym_id: str, user_type: Optional[str] = None) -> List[Usuario]:
        member_ids = select(UsuarioAcademia.user_id).where(
            UsuarioAcademia.gym_id == gym_id,
            UsuarioAcademia.is_active == True,
        )
        query = self.db.query(Usuario).filter(
            or_(Usuario.gym_id == gym_id, Usuario.id.in_(member_ids))
        )
        if user_type:
            query = query.filter(Usuario.user_type == user_type)
        return query.order_by(Usuario.nome).all()

    def count_gym_members(self, gym_id: str) -> int:
        return len(self.list_gym_users(gym_id, user_type=TipoUsuario.ALUNO))
