import logging
from typing import Any, Dict, List, Optional

from fastapi import BackgroundTasks, HTTPException, status

from models import TipoUsuario, Usuario
from schemas.user_schema import UsuarioOut
from storage import CredentialStore, DuplicateError
from .auth_service import issue_welcome_token
from .email_service import Mailer

logger = logging.getLogger(__name__)


def _get_user_or_404(store: CredentialStore, usuario_id: str) -> Usuario:
    user = store.get_user(usuario_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Usuário não encontrado")
    return user


def _is_last_active_admin(store: CredentialStore, user: Usuario) -> bool:
    return (
        user.user_type == TipoUsuario.ADMIN
        and user.is_active
        and store.count_users_by_type(TipoUsuario.ADMIN, active_only=True) <= 1
    )


def _check_gym(store: CredentialStore, gym_id: Optional[str]) -> None:
    if gym_id and not store.get_gym(gym_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Academia não encontrada")


def listar_usuarios(store: CredentialStore) -> List[Usuario]:
    return store.list_users()


def obter_usuario(store: CredentialStore, usuario_id: str) -> Dict[str, Any]:
    user = _get_user_or_404(store, usuario_id)
    gyms = store.list_user_gyms(user.id)
    return {
        **UsuarioOut.model_validate(user).model_dump(),
        "gyms": [{"id": g.id, "name": g.name} for g in gyms],
    }


def criar_usuario(
    store: CredentialStore,
    data: dict,
    mailer: Mailer,
    background: BackgroundTasks,
) -> Usuario:
    """
    Cria usuário sem senha.

    O usuário recebe por email um link de definição de senha válido por
    WELCOME_TOKEN_EXPIRE_DAYS dias.
    """
    email = data["email"]
    if store.get_user_by_email(email):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email já cadastrado")

    gym_id = data.get("gym_id")
    _check_gym(store, gym_id)

    try:
        user = store.create_user(
            email=email,
            nome=data.get("name") or email.split("@")[0],
            first_name=data.get("first_name"),
            last_name=data.get("last_name"),
            user_type=data["user_type"],
            gym_id=gym_id,
        )
    except DuplicateError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email já cadastrado")

    if gym_id:
        store.add_membership(user.id, gym_id)

    issue_welcome_token(store, user, mailer, background)
    logger.info("Usuário %s criado pelo admin (%s)", user.id, user.user_type)
    return store.get_user(user.id)


def atualizar_usuario(store: CredentialStore, usuario_id: str, data: dict) -> Usuario:
    user = _get_user_or_404(store, usuario_id)

    updates = {}
    for field, column in (
        ("email", "email"),
        ("name", "nome"),
        ("first_name", "first_name"),
        ("last_name", "last_name"),
        ("gym_id", "gym_id"),
        ("is_active", "is_active"),
    ):
        if field in data and data[field] is not None:
            updates[column] = data[field]

    _check_gym(store, updates.get("gym_id"))

    if updates.get("is_active") is False and _is_last_active_admin(store, user):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Não é possível desativar o último administrador",
        )

    try:
        return store.update_user(usuario_id, **updates)
    except DuplicateError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email já cadastrado")


def atualizar_tipo_usuario(store: CredentialStore, usuario_id: str, user_type: str) -> Usuario:
    user = _get_user_or_404(store, usuario_id)
    if user_type != TipoUsuario.ADMIN and _is_last_active_admin(store, user):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Não é possível remover o papel do último administrador",
        )
    logger.info("Tipo do usuário %s alterado: %s -> %s", user.id, user.user_type, user_type)
    return store.update_user(usuario_id, user_type=user_type)


def excluir_usuario(
    store: CredentialStore,
    usuario_id: str,
    session_user_id: Optional[str],
) -> Dict[str, Any]:
    user = _get_user_or_404(store, usuario_id)

    if session_user_id and session_user_id == user.id:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Você não pode excluir seu próprio usuário",
        )

    if _is_last_active_admin(store, user):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Não é possível excluir o último administrador",
        )

    store.delete_user(user.id)
    logger.warning("Usuário %s excluído pelo admin", user.id)
    return {"message": "Usuário excluído"}


def adicionar_usuario_academia(store: CredentialStore, usuario_id: str, gym_id: str) -> Dict[str, Any]:
    _get_user_or_404(store, usuario_id)
    if not store.get_gym(gym_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Academia não encontrada")

    if not store.add_membership(usuario_id, gym_id):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Usuário já vinculado a esta academia",
        )
    return {"message": "Usuário adicionado à academia"}


def remover_usuario_academia(store: CredentialStore, usuario_id: str, gym_id: str) -> Dict[str, Any]:
    user = _get_user_or_404(store, usuario_id)
    if not store.remove_membership(usuario_id, gym_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Vínculo não encontrado")

    if user.active_gym_id == gym_id:
        store.update_user(usuario_id, active_gym_id=None)
    return {"message": "Usuário removido da academia"}
