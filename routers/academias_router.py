from fastapi import APIRouter, Depends

from middleware.auth import CurrentUser, get_current_user
from schemas.gym_schema import (
    AvailableGymsResponse,
    InviteCheckResponse,
    SetActiveGymRequest,
)
from services.gym_service import check_invite_code, list_available_gyms, set_active_gym
from storage import CredentialStore, get_credential_store


router = APIRouter(prefix="/gyms", tags=["Academias"])


@router.get("/invite/{code}", response_model=InviteCheckResponse)
def gyms_check_invite(code: str, store: CredentialStore = Depends(get_credential_store)):
    """Público: valida um código de convite (404 quando não existe ou está inativo)."""
    return check_invite_code(store, code)


@router.get("/available", response_model=AvailableGymsResponse)
def gyms_available(
    current_user: CurrentUser = Depends(get_current_user),
    store: CredentialStore = Depends(get_credential_store),
):
    return list_available_gyms(store, current_user)


@router.post("/set-active")
def gyms_set_active(
    payload: SetActiveGymRequest,
    current_user: CurrentUser = Depends(get_current_user),
    store: CredentialStore = Depends(get_credential_store),
):
    return set_active_gym(store, current_user, payload.gym_id)
