from fastapi import APIRouter, Depends

from middleware.permission import require_roles
from middleware.tenant import TenantContext, get_hub_tenant_context, get_tenant_context
from models import TipoUsuario
from schemas.gym_schema import DashboardResponse, HubResponse, MembroOut
from services.gym_service import dashboard, hub, list_members
from storage import CredentialStore, get_credential_store


router = APIRouter(tags=["Academia"])

gym_roles = require_roles(TipoUsuario.ACADEMIA, TipoUsuario.ADMIN)
hub_roles = require_roles(TipoUsuario.ACADEMIA, TipoUsuario.ADMIN, TipoUsuario.PERSONAL)


@router.get(
    "/academia/dashboard",
    response_model=DashboardResponse,
    dependencies=[Depends(gym_roles)],
)
def academia_dashboard(
    ctx: TenantContext = Depends(get_tenant_context),
    store: CredentialStore = Depends(get_credential_store),
):
    return dashboard(store, ctx)


@router.get(
    "/academia/alunos",
    response_model=list[MembroOut],
    dependencies=[Depends(gym_roles)],
)
def academia_alunos(
    ctx: TenantContext = Depends(get_tenant_context),
    store: CredentialStore = Depends(get_credential_store),
):
    return list_members(store, ctx, TipoUsuario.ALUNO)


@router.get(
    "/academia/personais",
    response_model=list[MembroOut],
    dependencies=[Depends(gym_roles)],
)
def academia_personais(
    ctx: TenantContext = Depends(get_tenant_context),
    store: CredentialStore = Depends(get_credential_store),
):
    return list_members(store, ctx, TipoUsuario.PERSONAL)


@router.get(
    "/hub-academia",
    response_model=HubResponse,
    dependencies=[Depends(hub_roles)],
)
def hub_academia(
    ctx: TenantContext = Depends(get_hub_tenant_context),
    store: CredentialStore = Depends(get_credential_store),
):
    """Único endpoint que aceita ?gymId= explícito."""
    return hub(store, ctx)
