# schemas/user_schema.py
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Optional, List
from datetime import datetime

from .auth_schema import UserType


# ============================================================
# USUARIO - CREATE
# ============================================================

class UsuarioCreate(BaseModel):
    """Schema para criação de usuário pelo admin (sem senha; recebe email de boas-vindas)."""
    model_config = ConfigDict(populate_by_name=True)

    email: EmailStr
    name: Optional[str] = Field(None, max_length=255)
    first_name: Optional[str] = Field(None, alias="firstName", max_length=255)
    last_name: Optional[str] = Field(None, alias="lastName", max_length=255)
    user_type: UserType = Field(..., alias="userType")
    gym_id: Optional[str] = Field(None, alias="gymId")


# ============================================================
# USUARIO - UPDATE
# ============================================================

class UsuarioUpdate(BaseModel):
    """Schema para atualização de usuário."""
    model_config = ConfigDict(populate_by_name=True)

    email: Optional[EmailStr] = None
    name: Optional[str] = Field(None, max_length=255)
    first_name: Optional[str] = Field(None, alias="firstName", max_length=255)
    last_name: Optional[str] = Field(None, alias="lastName", max_length=255)
    gym_id: Optional[str] = Field(None, alias="gymId")
    is_active: Optional[bool] = Field(None, alias="isActive")


class UsuarioTypeUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_type: UserType = Field(..., alias="userType")


# ============================================================
# USUARIO - OUTPUT
# ============================================================

class UsuarioOut(BaseModel):
    """Schema de saída de usuário."""
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    email: Optional[str] = None
    nome: Optional[str] = Field(None, alias="name")
    first_name: Optional[str] = Field(None, alias="firstName")
    last_name: Optional[str] = Field(None, alias="lastName")
    user_type: str = Field(..., alias="userType")
    gym_id: Optional[str] = Field(None, alias="gymId")
    active_gym_id: Optional[str] = Field(None, alias="activeGymId")
    is_active: bool = Field(True, alias="isActive")
    email_verified: bool = Field(False, alias="emailVerified")
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")
    last_login: Optional[datetime] = Field(None, alias="lastLogin")


class UsuarioDetailOut(UsuarioOut):
    """Schema de saída detalhada de usuário (com academias vinculadas)."""
    gyms: List["AcademiaRef"] = []


# ============================================================
# USUARIO ACADEMIA
# ============================================================

class UsuarioAcademiaCreate(BaseModel):
    """Schema para vincular usuário a uma academia."""
    model_config = ConfigDict(populate_by_name=True)

    gym_id: str = Field(..., alias="gymId")


class AcademiaRef(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str


# Rebuild models para resolver forward references
UsuarioDetailOut.model_rebuild()
