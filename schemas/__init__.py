from .auth_schema import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
    SolicitarResetRequest,
    DefinirSenhaRequest,
    MessageResponse,
    MeResponse,
    TokenCheckResponse,
    AdminLoginRequest,
    AdminCheckResponse,
    UserInfo,
)

from .user_schema import (
    UsuarioCreate,
    UsuarioUpdate,
    UsuarioTypeUpdate,
    UsuarioOut,
    UsuarioDetailOut,
    UsuarioAcademiaCreate,
)

from .gym_schema import (
    AcademiaCreate,
    AcademiaUpdate,
    AcademiaOut,
    InviteCheckResponse,
    AvailableGymsResponse,
    SetActiveGymRequest,
    DashboardResponse,
    HubResponse,
)
