# storage/memory_store.py
"""Credential Store em memória (desenvolvimento sem banco e testes)."""
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Set, Tuple

from models import Academia, TipoUsuario, Usuario
from .base import CredentialStore, DuplicateError


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class MemoryCredentialStore(CredentialStore):
    _UNIQUE_USER_FIELDS = ("email", "google_id", "password_reset_token")

    def __init__(self):
        self._lock = threading.RLock()
        self._users: Dict[str, Usuario] = {}
        self._gyms: Dict[str, Academia] = {}
        self._memberships: Set[Tuple[str, str]] = set()

    def _check_unique_user(self, user_id: str, fields: Dict[str, Any]) -> None:
        for field in self._UNIQUE_USER_FIELDS:
            value = fields.get(field)
            if value is None:
                continue
            for other in self._users.values():
                if other.id != user_id and getattr(other, field) == value:
                    raise DuplicateError(f"{field} duplicado")

    # ------------------------------------------------------------
    # Usuários
    # ------------------------------------------------------------

    def get_user(self, user_id: str) -> Optional[Usuario]:
        return self._users.get(user_id)

    def _find_user(self, field: str, value: Any) -> Optional[Usuario]:
        if value is None:
            return None
        return next((u for u in self._users.values() if getattr(u, field) == value), None)

    def get_user_by_email(self, email: str) -> Optional[Usuario]:
        return self._find_user("email", email)

    def get_user_by_google_id(self, google_id: str) -> Optional[Usuario]:
        return self._find_user("google_id", google_id)

    def get_user_by_reset_token(self, token_hash: str) -> Optional[Usuario]:
        return self._find_user("password_reset_token", token_hash)

    def list_users(self) -> List[Usuario]:
        return sorted(self._users.values(), key=lambda u: u.created_at, reverse=True)

    def count_users_by_type(self, user_type: str, active_only: bool = False) -> int:
        return sum(
            1 for u in self._users.values()
            if u.user_type == user_type and (u.is_active or not active_only)
        )

    def create_user(self, **fields: Any) -> Usuario:
        with self._lock:
            now = _now_utc()
            data = {
                "id": str(uuid.uuid4()),
                "user_type": TipoUsuario.ALUNO,
                "email_verified": False,
                "is_active": True,
                "created_at": now,
                "updated_at": now,
                **fields,
            }
            if data["id"] in self._users:
                raise DuplicateError("id duplicado")
            self._check_unique_user(data["id"], data)
            user = Usuario(**data)
            self._users[user.id] = user
            return user

    def update_user(self, user_id: str, **fields: Any) -> Optional[Usuario]:
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return None
            self._check_unique_user(user_id, fields)
            for field, value in fields.items():
                setattr(user, field, value)
            user.updated_at = _now_utc()
            return user

    def upsert_user(self, user_id: str, defaults: dict, **fields: Any) -> Usuario:
        with self._lock:
            if user_id not in self._users:
                return self.create_user(id=user_id, **{**defaults, **fields})
            updates = {k: v for k, v in fields.items() if v is not None}
            return self.update_user(user_id, **updates)

    def delete_user(self, user_id: str) -> bool:
        with self._lock:
            if self._users.pop(user_id, None) is None:
                return False
            self._memberships = {m for m in self._memberships if m[0] != user_id}
            return True

    # ------------------------------------------------------------
    # Tokens de senha
    # ------------------------------------------------------------

    def set_password_reset_token(self, user_id: str, token_hash: str, expires: datetime) -> None:
        self.update_user(user_id, password_reset_token=token_hash, password_reset_expires=expires)

    def consume_password_reset_token(
        self, token_hash: str, senha_hash: str, now: datetime
    ) -> Optional[Usuario]:
        with self._lock:
            user = self.get_user_by_reset_token(token_hash)
            if user is None or user.password_reset_expires is None:
                return None
            if _as_utc(user.password_reset_expires) <= now:
                return None
            user.senha_hash = senha_hash
            user.password_reset_token = None
            user.password_reset_expires = None
            user.updated_at = now
            return user

    # ------------------------------------------------------------
    # Academias
    # ------------------------------------------------------------

    def get_gym(self, gym_id: str) -> Optional[Academia]:
        return self._gyms.get(gym_id)

    def get_gym_by_invite_code(self, invite_code: str) -> Optional[Academia]:
        return next((g for g in self._gyms.values() if g.invite_code == invite_code), None)

    def list_gyms(self) -> List[Academia]:
        return sorted(self._gyms.values(), key=lambda g: g.name)

    def create_gym(self, **fields: Any) -> Academia:
        with self._lock:
            now = _now_utc()
            data = {
                "id": str(uuid.uuid4()),
                "is_active": True,
                "max_members": None,
                "created_at": now,
                "updated_at": now,
                **fields,
            }
            if data["id"] in self._gyms or self.get_gym_by_invite_code(data["invite_code"]):
                raise DuplicateError("academia duplicada")
            gym = Academia(**data)
            self._gyms[gym.id] = gym
            return gym

    def update_gym(self, gym_id: str, **fields: Any) -> Optional[Academia]:
        with self._lock:
            gym = self._gyms.get(gym_id)
            if gym is None:
                return None
            code = fields.get("invite_code")
            if code is not None:
                other = self.get_gym_by_invite_code(code)
                if other is not None and other.id != gym_id:
                    raise DuplicateError("invite_code duplicado")
            for field, value in fields.items():
                setattr(gym, field, value)
            gym.updated_at = _now_utc()
            return gym

    def delete_gym(self, gym_id: str) -> bool:
        with self._lock:
            if self._gyms.pop(gym_id, None) is None:
                return False
            self._memberships = {m for m in self._memberships if m[1] != gym_id}
            for user in self._users.values():
                if user.active_gym_id == gym_id:
                    user.active_gym_id = None
                if user.gym_id == gym_id:
                    user.gym_id = None
            return True

    # ------------------------------------------------------------
    # Vínculos
    # ------------------------------------------------------------

    def list_user_gyms(self, user_id: str) -> List[Academia]:
        gyms = [self._gyms[g] for (u, g) in self._memberships if u == user_id and g in self._gyms]
        return sorted(gyms, key=lambda g: g.name)

    def add_membership(self, user_id: str, gym_id: str) -> bool:
        with self._lock:
            if (user_id, gym_id) in self._memberships:
                return False
            self._memberships.add((user_id, gym_id))
            return True

    def remove_membership(self, user_id: str, gym_id: str) -> bool:
        with self._lock:
            if (user_id, gym_id) not in self._memberships:
                return False
            self._memberships.discard((user_id, gym_id))
            return True

    def list_gym_users(self, gym_id: str, user_type: Optional[str] = None) -> List[Usuario]:
        users = [
            u for u in self._users.values()
            if u.gym_id == gym_id or (u.id, gym_id) in self._memberships
        ]
        if user_type:
            users = [u for u in users if u.user_type == user_type]
        return sorted(users, key=lambda u: u.nome or "")

    def count_gym_members(self, gym_id: str) -> int:
        return len(self.list_gym_users(gym_id, user_type=TipoUsuario.ALUNO))
