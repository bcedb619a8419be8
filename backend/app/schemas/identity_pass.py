"""
Schémas Pydantic pour les passes d'identité et leur vérification.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from app.schemas.organisation import ChurchSummary


class PassResponse(BaseModel):
    id: uuid.UUID
    token: str
    qr_payload: str
    attendance_id: Optional[uuid.UUID]
    member_id: uuid.UUID
    church_id: Optional[uuid.UUID]
    session_date: Optional[datetime]
    expires_at: Optional[datetime]
    sms_sent_at: Optional[datetime]
    created_at: datetime

    model_config = {"from_attributes": True}


class VerifiedMember(BaseModel):
    id: uuid.UUID
    first_name: str
    last_name: str
    national_id: Optional[str]

    model_config = {"from_attributes": True}


class VerificationResult(BaseModel):
    """
    Résultat de la vérification d'un token.

    - valid=False sans reason : token inconnu
    - valid=False, reason="expired" : pass trouvé mais expiré
    - checked_in_attendance_id : renseigné quand la vérification par un
      POLICE_VERIFIER a enregistré une présence (effet de bord en écriture)
    """
    valid: bool
    reason: Optional[str] = None
    pass_id: Optional[uuid.UUID] = None
    issued_at: Optional[datetime] = None
    session_date: Optional[datetime] = None
    church: Optional[ChurchSummary] = None
    member: Optional[VerifiedMember] = None
    checked_in_attendance_id: Optional[uuid.UUID] = None
