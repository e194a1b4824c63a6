# storage/base.py
"""
Contrato do Credential Store.

Os serviços de autenticação e de tenant dependem apenas desta interface;
a implementação (SQLAlchemy ou memória) é injetada via dependency.
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, List, Optional

from models import Academia, Usuario


class DuplicateError(Exception):
    """Violação de unicidade (email, google_id, invite_code)."""


class CredentialStore(ABC):
    """Persistência de usuários, academias e vínculos."""

    # ------------------------------------------------------------
    # Usuários
    # ------------------------------------------------------------

    @abstractmethod
    def get_user(self, user_id: str) -> Optional[Usuario]: ...

    @abstractmethod
    def get_user_by_email(self, email: str) -> Optional[Usuario]: ...

    @abstractmethod
    def get_user_by_google_id(self, google_id: str) -> Optional[Usuario]: ...

    @abstractmethod
    def get_user_by_reset_token(self, token_hash: str) -> Optional[Usuario]: ...

    @abstractmethod
    def list_users(self) -> List[Usuario]: ...

    @abstractmethod
    def count_users_by_type(self, user_type: str, active_only: bool = False) -> int: ...

    @abstractmethod
    def create_user(self, **fields: Any) -> Usuario: ...

    @abstractmethod
    def update_user(self, user_id: str, **fields: Any) -> Optional[Usuario]: ...

    @abstractmethod
    def upsert_user(self, user_id: str, defaults: dict, **fields: Any) -> Usuario:
        """
        Cria o usuário com `fields` + `defaults` ou atualiza apenas `fields`.
        Campos com valor None em `fields` não sobrescrevem valores existentes.
        """

    @abstractmethod
    def delete_user(self, user_id: str) -> bool: ...

    # ------------------------------------------------------------
    # Tokens de senha
    # ------------------------------------------------------------

    @abstractmethod
    def set_password_reset_token(self, user_id: str, token_hash: str, expires: datetime) -> None: ...

    @abstractmethod
    def consume_password_reset_token(
        self, token_hash: str, senha_hash: str, now: datetime
    ) -> Optional[Usuario]:
        """
        Troca a senha e limpa token + expiração numa única escrita
        condicional. Retorna None se o token não existe ou expirou.
        """

    # ------------------------------------------------------------
    # Academias
    # ------------------------------------------------------------

    @abstractmethod
    def get_gym(self, gym_id: str) -> Optional[Academia]: ...

    @abstractmethod
    def get_gym_by_invite_code(self, invite_code: str) -> Optional[Academia]: ...

    @abstractmethod
    def list_gyms(self) -> List[Academia]: ...

    @abstractmethod
    def create_gym(self, **fields: Any) -> Academia: ...

    @abstractmethod
    def update_gym(self, gym_id: str, **fields: Any) -> Optional[Academia]: ...

    @abstractmethod
    def delete_gym(self, gym_id: str) -> bool:
        """Remove a academia, seus vínculos e as referências active_gym_id/gym_id dos usuários."""

    # ------------------------------------------------------------
    # Vínculos usuário-academia
    # ------------------------------------------------------------

    @abstractmethod
    def list_user_gyms(self, user_id: str) -> List[Academia]:
        """Academias com vínculo ativo para o usuário."""

    @abstractmethod
    def add_membership(self, user_id: str, gym_id: str) -> bool:
        """Retorna False se o vínculo ativo já existia."""

    @abstractmethod
    def remove_membership(self, user_id: str, gym_id: str) -> bool: ...

    @abstractmethod
    def list_gym_users(self, gym_id: str, user_type: Optional[str] = None) -> List[Usuario]:
        """Usuários da academia (gym_id legado ou vínculo ativo)."""

    @abstractmethod
    def count_gym_members(self, gym_id: str) -> int:
        """Quantidade de alunos da academia."""
