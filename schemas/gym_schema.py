# schemas/gym_schema.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime


# ============================================================
# ACADEMIA - ADMIN
# ============================================================

class AcademiaCreate(BaseModel):
    """Schema para criação de academia. O código de convite é gerado se omitido."""
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=2, max_length=150)
    invite_code: Optional[str] = Field(None, alias="inviteCode", min_length=4, max_length=20)
    max_members: Optional[int] = Field(None, alias="maxMembers", ge=1)
    is_active: bool = Field(True, alias="isActive")


class AcademiaUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(None, min_length=2, max_length=150)
    invite_code: Optional[str] = Field(None, alias="inviteCode", min_length=4, max_length=20)
    max_members: Optional[int] = Field(None, alias="maxMembers", ge=1)
    is_active: Optional[bool] = Field(None, alias="isActive")


class AcademiaOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    name: str
    invite_code: str = Field(..., alias="inviteCode")
    is_active: bool = Field(..., alias="isActive")
    max_members: Optional[int] = Field(None, alias="maxMembers")
    created_at: Optional[datetime] = Field(None, alias="createdAt")


# ============================================================
# SELEÇÃO DE ACADEMIA
# ============================================================

class InviteCheckResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    gym_name: str = Field(..., alias="gymName")
    gym_id: str = Field(..., alias="gymId")
    is_valid: bool = Field(True, alias="isValid")


class AvailableGym(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    is_active_selection: bool = Field(False, alias="isActiveSelection")


class AvailableGymsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    gyms: List[AvailableGym]
    active_gym_id: Optional[str] = Field(None, alias="activeGymId")


class SetActiveGymRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    gym_id: str = Field(..., alias="gymId", min_length=1)


# ============================================================
# ÁREA DA ACADEMIA
# ============================================================

class MembroOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    email: Optional[str] = None
    nome: Optional[str] = Field(None, alias="name")
    user_type: str = Field(..., alias="userType")
    is_active: bool = Field(True, alias="isActive")
    created_at: Optional[datetime] = Field(None, alias="createdAt")


class DashboardResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    gym_id: str = Field(..., alias="gymId")
    gym_name: Optional[str] = Field(None, alias="gymName")
    total_alunos: int = Field(..., alias="totalAlunos")
    total_personais: int = Field(..., alias="totalPersonais")
    max_members: Optional[int] = Field(None, alias="maxMembers")
    invite_code: Optional[str] = Field(None, alias="inviteCode")


class HubResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    gym_id: str = Field(..., alias="gymId")
    gym_name: Optional[str] = Field(None, alias="gymName")
    source: str
    alunos: List[MembroOut] = []
    personais: List[MembroOut] = []
