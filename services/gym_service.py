import logging
from typing import Any, Dict, List

from fastapi import HTTPException, status

from core.security import generate_invite_code
from middleware.auth import CurrentUser
from middleware.tenant import TenantContext, available_gym_ids
from models import Academia, TipoUsuario
from storage import CredentialStore, DuplicateError

logger = logging.getLogger(__name__)

INVITE_CODE_ATTEMPTS = 10


def _get_gym_or_404(store: CredentialStore, gym_id: str) -> Academia:
    gym = store.get_gym(gym_id)
    if not gym:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Academia não encontrada")
    return gym


# ============================================================
# CONVITE / SELEÇÃO (usuário)
# ============================================================

def check_invite_code(store: CredentialStore, code: str) -> Dict[str, Any]:
    gym = store.get_gym_by_invite_code(code.strip().upper())
    if not gym or not gym.is_active:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Código de convite inválido")
    return {"gymName": gym.name, "gymId": gym.id, "isValid": True}


def list_available_gyms(store: CredentialStore, user: CurrentUser) -> Dict[str, Any]:
    gyms = []
    for gym_id in available_gym_ids(store, user):
        gym = store.get_gym(gym_id)
        if gym is None or not gym.is_active:
            continue
        gyms.append({
            "id": gym.id,
            "name": gym.name,
            "isActiveSelection": gym.id == user.active_gym_id,
        })
    return {"gyms": gyms, "activeGymId": user.active_gym_id}


def set_active_gym(store: CredentialStore, user: CurrentUser, gym_id: str) -> Dict[str, Any]:
    if gym_id not in available_gym_ids(store, user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Você não tem acesso a esta academia",
        )
    gym = _get_gym_or_404(store, gym_id)
    if not gym.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Esta academia está desativada")

    store.update_user(user.user_id, active_gym_id=gym.id)
    logger.info("Usuário %s selecionou a academia %s", user.user_id, gym.id)
    return {"success": True, "activeGymId": gym.id, "gymName": gym.name}


# ============================================================
# ÁREA DA ACADEMIA (tenant resolvido)
# ============================================================

def dashboard(store: CredentialStore, ctx: TenantContext) -> Dict[str, Any]:
    return {
        "gymId": ctx.gym_id,
        "gymName": ctx.gym_name,
        "totalAlunos": len(store.list_gym_users(ctx.gym_id, TipoUsuario.ALUNO)),
        "totalPersonais": len(store.list_gym_users(ctx.gym_id, TipoUsuario.PERSONAL)),
        "maxMembers": ctx.gym.max_members if ctx.gym else None,
        "inviteCode": ctx.gym.invite_code if ctx.gym else None,
    }


def list_members(store: CredentialStore, ctx: TenantContext, user_type: str) -> list:
    return store.list_gym_users(ctx.gym_id, user_type)


def hub(store: CredentialStore, ctx: TenantContext) -> Dict[str, Any]:
    return {
        "gymId": ctx.gym_id,
        "gymName": ctx.gym_name,
        "source": ctx.source,
        "alunos": store.list_gym_users(ctx.gym_id, TipoUsuario.ALUNO),
        "personais": store.list_gym_users(ctx.gym_id, TipoUsuario.PERSONAL),
    }


# ============================================================
# ADMIN
# ============================================================

def listar_academias(store: CredentialStore) -> List[Academia]:
    return store.list_gyms()


def obter_academia(store: CredentialStore, gym_id: str) -> Academia:
    return _get_gym_or_404(store, gym_id)


def criar_academia(store: CredentialStore, data: dict) -> Academia:
    code = data.get("invite_code")
    if code:
        code = code.strip().upper()
        if store.get_gym_by_invite_code(code):
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Código de convite já utilizado")
        attempts = [code]
    else:
        attempts = [generate_invite_code() for _ in range(INVITE_CODE_ATTEMPTS)]

    for candidate in attempts:
        if store.get_gym_by_invite_code(candidate):
            continue
        try:
            gym = store.create_gym(
                name=data["name"],
                invite_code=candidate,
                max_members=data.get("max_members"),
                is_active=data.get("is_active", True),
            )
        except DuplicateError:
            continue
        logger.info("Academia %s criada (convite %s)", gym.id, gym.invite_code)
        return gym

    raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Não foi possível gerar um código de convite único")


def atualizar_academia(store: CredentialStore, gym_id: str, data: dict) -> Academia:
    _get_gym_or_404(store, gym_id)
    updates = {k: v for k, v in data.items() if v is not None}
    if "invite_code" in updates:
        updates["invite_code"] = updates["invite_code"].strip().upper()
    try:
        return store.update_gym(gym_id, **updates)
    except DuplicateError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Código de convite já utilizado")


def excluir_academia(store: CredentialStore, gym_id: str) -> Dict[str, Any]:
    _get_gym_or_404(store, gym_id)
    store.delete_gym(gym_id)
    logger.warning("Academia %s excluída", gym_id)
    return {"message": "Academia excluída"}


def regenerar_convite(store: CredentialStore, gym_id: str) -> Academia:
    _get_gym_or_404(store, gym_id)
    for _ in range(INVITE_CODE_ATTEMPTS):
        candidate = generate_invite_code()
        if store.get_gym_by_invite_code(candidate):
            continue
        try:
            return store.update_gym(gym_id, invite_code=candidate)
        except DuplicateError:
            continue
    raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Não foi possível gerar um código de convite único")
