# middleware/__init__.py
from .auth import CurrentUser, get_current_user, get_optional_current_user, get_bearer_user
from .tenant import TenantContext, get_tenant_context, get_hub_tenant_context, resolve_gym_id
from .permission import require_roles, require_break_glass_admin
from .session import ServerSessionMiddleware, regenerate_session

__all__ = [
    "CurrentUser",
    "get_current_user",
    "get_optional_current_user",
    "get_bearer_user",
    "TenantContext",
    "get_tenant_context",
    "get_hub_tenant_context",
    "resolve_gym_id",
    "require_roles",
    "require_break_glass_admin",
    "ServerSessionMiddleware",
    "regenerate_session",
]
