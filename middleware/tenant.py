# middleware/tenant.py
"""
Middleware de tenant - Resolução da academia da requisição.

Precedência:
    1. gymId explícito (apenas rotas do hub), validado contra as academias do usuário
    2. active_gym_id
    3. gym_id legado
    4. o próprio id do usuário, apenas para papéis academia/admin

Nos passos 2 e 3, ids de academia excluída ou inativa são ignorados.

Admin sem academia ativa: um vínculo é selecionado e persistido; vários
vínculos exigem seleção explícita.
"""
import logging
from typing import List, Optional

from fastapi import Depends, Query

from core.exceptions import Forbidden, TenantSelectionRequired, TenantUnresolved
from models import Academia, TipoUsuario
from storage import CredentialStore, get_credential_store
from .auth import CurrentUser, get_current_user

logger = logging.getLogger(__name__)


class TenantContext:
    """Usuário atual + academia resolvida para a requisição."""

    def __init__(self, user: CurrentUser, gym_id: str, source: str, gym: Optional[Academia] = None):
        self.user = user
        self.gym_id = gym_id
        self.source = source  # explicit | active | auto | legacy | self
        self.gym = gym

    @property
    def gym_name(self) -> Optional[str]:
        return self.gym.name if self.gym else None

    def __repr__(self):
        return f"<TenantContext(user_id='{self.user.user_id}', gym_id='{self.gym_id}', source='{self.source}')>"


def _usable_gym(store: CredentialStore, gym_id: str) -> Optional[Academia]:
    """Academia existente e ativa, ou None."""
    gym = store.get_gym(gym_id)
    if gym is None or not gym.is_active:
        logger.warning("Academia %s inexistente ou inativa ignorada na resolução", gym_id)
        return None
    return gym


def available_gym_ids(store: CredentialStore, user: CurrentUser) -> List[str]:
    """Academias que o usuário pode usar como tenant."""
    ids = [g.id for g in store.list_user_gyms(user.user_id) if g.is_active]
    for gym_id in (user.active_gym_id, user.gym_id):
        if gym_id and gym_id not in ids and _usable_gym(store, gym_id):
            ids.append(gym_id)
    if user.is_gym_role and user.user_id not in ids:
        ids.append(user.user_id)
    return ids


def resolve_gym_id(
    store: CredentialStore,
    user: CurrentUser,
    explicit_gym_id: Optional[str] = None,
) -> TenantContext:
    """
    Resolve a academia da requisição.

    Raises:
        Forbidden 403: gymId explícito fora das academias do usuário
        TenantSelectionRequired 409: admin com várias academias e nenhuma ativa
        TenantUnresolved 400: nenhuma regra se aplica
    """
    if explicit_gym_id:
        if explicit_gym_id not in available_gym_ids(store, user):
            logger.warning(
                "Usuário %s tentou acessar academia %s sem vínculo",
                user.user_id, explicit_gym_id,
            )
            raise Forbidden("Você não tem acesso a esta academia")
        return TenantContext(user, explicit_gym_id, "explicit", store.get_gym(explicit_gym_id))

    if user.active_gym_id:
        gym = _usable_gym(store, user.active_gym_id)
        if gym:
            return TenantContext(user, gym.id, "active", gym)

    if user.user_type == TipoUsuario.ADMIN:
        gyms = [g for g in store.list_user_gyms(user.user_id) if g.is_active]
        if len(gyms) == 1:
            gym = gyms[0]
            store.update_user(user.user_id, active_gym_id=gym.id)
            user.active_gym_id = gym.id
            logger.info("Academia %s selecionada automaticamente para admin %s", gym.id, user.user_id)
            return TenantContext(user, gym.id, "auto", gym)
        if len(gyms) > 1:
            raise TenantSelectionRequired(
                gyms=[{"id": g.id, "name": g.name} for g in gyms],
            )

    if user.gym_id:
        gym = _usable_gym(store, user.gym_id)
        if gym:
            return TenantContext(user, gym.id, "legacy", gym)

    if user.is_gym_role:
        return TenantContext(user, user.user_id, "self", store.get_gym(user.user_id))

    raise TenantUnresolved()


async def get_tenant_context(
    current_user: CurrentUser = Depends(get_current_user),
    store: CredentialStore = Depends(get_credential_store),
) -> TenantContext:
    """Dependency das rotas escopadas por academia (ignora gymId da query)."""
    return resolve_gym_id(store, current_user)


async def get_hub_tenant_context(
    gym_id: Optional[str] = Query(None, alias="gymId"),
    current_user: CurrentUser = Depends(get_current_user),
    store: CredentialStore = Depends(get_credential_store),
) -> TenantContext:
    """Dependency das rotas do hub, que aceitam ?gymId= explícito."""
    return resolve_gym_id(store, current_user, explicit_gym_id=gym_id)
