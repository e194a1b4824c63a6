from fastapi import APIRouter, Depends, status

from middleware.permission import require_break_glass_admin
from schemas.gym_schema import AcademiaCreate, AcademiaOut, AcademiaUpdate
from services.gym_service import (
    listar_academias,
    obter_academia,
    criar_academia,
    atualizar_academia,
    excluir_academia,
    regenerar_convite,
)
from storage import CredentialStore, get_credential_store


router = APIRouter(
    prefix="/admin/gyms",
    tags=["Admin - Academias"],
    dependencies=[Depends(require_break_glass_admin)],
)


@router.get("", response_model=list[AcademiaOut])
def admin_listar_academias(store: CredentialStore = Depends(get_credential_store)):
    return listar_academias(store)


@router.get("/{gym_id}", response_model=AcademiaOut)
def admin_obter_academia(gym_id: str, store: CredentialStore = Depends(get_credential_store)):
    return obter_academia(store, gym_id)


@router.post("", response_model=AcademiaOut, status_code=status.HTTP_201_CREATED)
def admin_criar_academia(
    payload: AcademiaCreate,
    store: CredentialStore = Depends(get_credential_store),
):
    return criar_academia(store, payload.model_dump())


@router.put("/{gym_id}", response_model=AcademiaOut)
def admin_atualizar_academia(
    gym_id: str,
    payload: AcademiaUpdate,
    store: CredentialStore = Depends(get_credential_store),
):
    return atualizar_academia(store, gym_id, payload.model_dump(exclude_unset=True))


@router.post("/{gym_id}/invite-code", response_model=AcademiaOut)
def admin_regenerar_convite(gym_id: str, store: CredentialStore = Depends(get_credential_store)):
    return regenerar_convite(store, gym_id)


@router.delete("/{gym_id}")
def admin_excluir_academia(gym_id: str, store: CredentialStore = Depends(get_credential_store)):
    return excluir_academia(store, gym_id)
