"""
Schémas Pydantic pour les présences aux sessions.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.models.enums import AttendanceStatus
from app.schemas.identity_pass import PassResponse


class AttendanceCreate(BaseModel):
    session_id: uuid.UUID
    member_id: uuid.UUID


class AttendanceUpdate(BaseModel):
    """Transition PENDING ↔ APPROVED. issue_pass n'a d'effet que vers APPROVED."""
    status: AttendanceStatus
    issue_pass: bool = True


class AttendanceResponse(BaseModel):
    id: uuid.UUID
    session_id: uuid.UUID
    member_id: uuid.UUID
    status: AttendanceStatus
    approved_by_id: Optional[uuid.UUID]
    created_at: datetime

    model_config = {"from_attributes": True}


class AttendanceTransitionResult(BaseModel):
    """
    Réponse asymétrique : `pass` n'est présent que si un pass a réellement été émis.
    Le router sérialise avec exclude_unset pour omettre la clé sinon.
    """
    attendance: AttendanceResponse
    pass_: Optional[PassResponse] = Field(default=None, alias="pass")

    model_config = {"populate_by_name": True}
