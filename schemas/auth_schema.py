# schemas/auth_schema.py
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from typing import Optional, List, Literal
from datetime import datetime

UserType = Literal["aluno", "personal", "academia", "admin"]


# ============================================================
# LOGIN
# ============================================================

class LoginRequest(BaseModel):
    """Schema para requisição de login."""
    model_config = ConfigDict(populate_by_name=True)

    email: EmailStr
    password: str = Field(..., min_length=1)
    user_type: UserType = Field(..., alias="userType")


class UserInfo(BaseModel):
    """Informações básicas do usuário."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    email: Optional[str] = None
    user_type: str = Field(..., alias="userType")
    name: Optional[str] = None


class LoginResponse(BaseModel):
    """Schema para resposta de login (sessão + bearer token)."""
    message: str
    user: UserInfo
    token: str


class TokenCheckResponse(BaseModel):
    """Payload do bearer token validado."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    email: Optional[str] = None
    user_type: str = Field(..., alias="userType")


# ============================================================
# REGISTRO
# ============================================================

class RegisterRequest(BaseModel):
    """Schema para auto-registro."""
    model_config = ConfigDict(populate_by_name=True)

    email: EmailStr
    password: str = Field(..., min_length=1)
    user_type: UserType = Field(..., alias="userType")
    name: Optional[str] = Field(None, max_length=255)
    first_name: Optional[str] = Field(None, alias="firstName", max_length=255)
    last_name: Optional[str] = Field(None, alias="lastName", max_length=255)
    invite_code: Optional[str] = Field(None, alias="inviteCode", max_length=20)


class RegisterResponse(BaseModel):
    message: str
    user: UserInfo


# ============================================================
# SENHA
# ============================================================

class SolicitarResetRequest(BaseModel):
    """Schema para solicitação de reset de senha."""
    email: EmailStr


class DefinirSenhaRequest(BaseModel):
    """Schema para definição/redefinição de senha com token."""
    model_config = ConfigDict(populate_by_name=True)

    token: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    confirm_password: str = Field(..., alias="confirmPassword")

    @field_validator("token")
    @classmethod
    def strip_token(cls, v):
        return v.strip()


class MessageResponse(BaseModel):
    success: bool = True
    message: str


# ============================================================
# ME
# ============================================================

class GymRef(BaseModel):
    id: str
    name: str


class MeResponse(BaseModel):
    """Usuário autenticado na sessão."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    email: Optional[str] = None
    user_type: str = Field(..., alias="userType")
    name: Optional[str] = None
    first_name: Optional[str] = Field(None, alias="firstName")
    last_name: Optional[str] = Field(None, alias="lastName")
    profile_image_url: Optional[str] = Field(None, alias="profileImageUrl")
    email_verified: bool = Field(False, alias="emailVerified")
    gym_id: Optional[str] = Field(None, alias="gymId")
    active_gym_id: Optional[str] = Field(None, alias="activeGymId")
    has_password: bool = Field(False, alias="hasPassword")
    provider: str
    gyms: List[GymRef] = []
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    last_login: Optional[datetime] = Field(None, alias="lastLogin")


# ============================================================
# ADMIN BREAK-GLASS
# ============================================================

class AdminLoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class AdminCheckResponse(BaseModel):
    authenticated: bool
