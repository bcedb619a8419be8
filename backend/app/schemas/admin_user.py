"""
Schémas Pydantic pour les administrateurs d'église et les pasteurs de district.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, field_validator

from app.schemas.organisation import ChurchSummary


class _AdminIdentity(BaseModel):
    first_name: str
    last_name: str
    phone_number: str
    email: str

    @field_validator("first_name", "last_name", "phone_number")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Ce champ ne peut pas être vide.")
        return v.strip()

    @field_validator("email")
    @classmethod
    def email_has_at(cls, v: str) -> str:
        if "@" not in v:
            raise ValueError("Adresse email invalide.")
        return v.strip().lower()


class ChurchAdminCreate(_AdminIdentity):
    church_id: uuid.UUID


class ChurchAdminUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone_number: Optional[str] = None
    email: Optional[str] = None
    church_id: Optional[uuid.UUID] = None
    is_active: Optional[bool] = None


class DistrictPastorCreate(_AdminIdentity):
    district_id: uuid.UUID


class DistrictPastorUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone_number: Optional[str] = None
    email: Optional[str] = None
    district_id: Optional[uuid.UUID] = None  # null explicite = détacher du district
    is_active: Optional[bool] = None


class ChurchAssignment(BaseModel):
    """Liste complète des églises du pasteur (remplace l'affectation précédente)."""
    church_ids: List[uuid.UUID]


class AdminResponse(BaseModel):
    id: uuid.UUID
    first_name: str
    last_name: str
    email: Optional[str]
    phone_number: Optional[str]
    role: str
    union_id: Optional[uuid.UUID]
    district_id: Optional[uuid.UUID]
    church_id: Optional[uuid.UUID]
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class DistrictPastorResponse(AdminResponse):
    churches: List[ChurchSummary] = []


class AdminCreateResult(BaseModel):
    """Le mot de passe initial n'est renvoyé qu'une seule fois, à la création."""
    admin: AdminResponse
    initial_password: str
