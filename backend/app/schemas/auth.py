"""
Schémas Pydantic pour l'authentification et la réinitialisation de mot de passe.
"""

import uuid
from typing import Optional

from pydantic import BaseModel, field_validator, model_validator


class LoginRequest(BaseModel):
    """Email pour les administrateurs et vérificateurs, téléphone pour les membres."""
    email: Optional[str] = None
    phone_number: Optional[str] = None
    password: str

    @model_validator(mode="after")
    def one_identifier(self) -> "LoginRequest":
        if not self.email and not self.phone_number:
            raise ValueError("Email ou numéro de téléphone requis.")
        return self


class UserResponse(BaseModel):
    id: uuid.UUID
    first_name: str
    last_name: str
    email: Optional[str]
    phone_number: Optional[str]
    national_id: Optional[str]
    role: str
    union_id: Optional[uuid.UUID]
    district_id: Optional[uuid.UUID]
    church_id: Optional[uuid.UUID]

    model_config = {"from_attributes": True}


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class PasswordResetRequest(BaseModel):
    national_id: Optional[str] = None
    email: Optional[str] = None


class PasswordResetConfirm(BaseModel):
    token: str
    new_password: str


class SuccessResponse(BaseModel):
    success: bool = True


class ProfileUpdate(BaseModel):
    """Champs modifiables par l'utilisateur sur son propre profil."""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None

    @field_validator("first_name", "last_name")
    @classmethod
    def name_not_empty(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        if not v.strip():
            raise ValueError("Le nom ne peut pas être vide.")
        return v.strip()


class PasswordChange(BaseModel):
    current_password: str
    new_password: str
