from fastapi import APIRouter, BackgroundTasks, Depends, Request, status

from middleware.auth import SESSION_AUTH_KEY
from middleware.permission import require_break_glass_admin
from schemas.user_schema import (
    UsuarioCreate,
    UsuarioUpdate,
    UsuarioTypeUpdate,
    UsuarioOut,
    UsuarioDetailOut,
    UsuarioAcademiaCreate,
)
from services.admin_user_service import (
    listar_usuarios,
    obter_usuario,
    criar_usuario,
    atualizar_usuario,
    atualizar_tipo_usuario,
    excluir_usuario,
    adicionar_usuario_academia,
    remover_usuario_academia,
)
from services.email_service import Mailer, get_mailer
from storage import CredentialStore, get_credential_store


router = APIRouter(
    prefix="/admin/users",
    tags=["Admin - Usuários"],
    dependencies=[Depends(require_break_glass_admin)],
)


@router.get("", response_model=list[UsuarioOut])
def admin_listar_usuarios(store: CredentialStore = Depends(get_credential_store)):
    return listar_usuarios(store)


@router.get("/{usuario_id}", response_model=UsuarioDetailOut)
def admin_obter_usuario(
    usuario_id: str,
    store: CredentialStore = Depends(get_credential_store),
):
    return obter_usuario(store, usuario_id)


@router.post("", response_model=UsuarioOut, status_code=status.HTTP_201_CREATED)
def admin_criar_usuario(
    payload: UsuarioCreate,
    background: BackgroundTasks,
    store: CredentialStore = Depends(get_credential_store),
    mailer: Mailer = Depends(get_mailer),
):
    return criar_usuario(store, payload.model_dump(), mailer, background)


@router.patch("/{usuario_id}", response_model=UsuarioOut)
def admin_atualizar_usuario(
    usuario_id: str,
    payload: UsuarioUpdate,
    store: CredentialStore = Depends(get_credential_store),
):
    return atualizar_usuario(store, usuario_id, payload.model_dump(exclude_unset=True))


@router.patch("/{usuario_id}/type", response_model=UsuarioOut)
def admin_atualizar_tipo(
    usuario_id: str,
    payload: UsuarioTypeUpdate,
    store: CredentialStore = Depends(get_credential_store),
):
    return atualizar_tipo_usuario(store, usuario_id, payload.user_type)


@router.delete("/{usuario_id}")
def admin_excluir_usuario(
    usuario_id: str,
    request: Request,
    store: CredentialStore = Depends(get_credential_store),
):
    principal = request.session.get(SESSION_AUTH_KEY) or {}
    return excluir_usuario(store, usuario_id, principal.get("user_id"))


@router.post("/{usuario_id}/gyms")
def admin_adicionar_usuario_academia(
    usuario_id: str,
    payload: UsuarioAcademiaCreate,
    store: CredentialStore = Depends(get_credential_store),
):
    return adicionar_usuario_academia(store, usuario_id, payload.gym_id)


@router.delete("/{usuario_id}/gyms/{gym_id}")
def admin_remover_usuario_academia(
    usuario_id: str,
    gym_id: str,
    store: CredentialStore = Depends(get_credential_store),
):
    return remover_usuario_academia(store, usuario_id, gym_id)
