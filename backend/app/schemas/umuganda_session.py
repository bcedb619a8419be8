"""
Schémas Pydantic pour les sessions de présence.

Note : on importe datetime en tant que module (dt) pour éviter le conflit de nommage
entre le champ `date` et le type dans Pydantic v2.
"""

import uuid
import datetime as dt
from typing import Optional

from pydantic import BaseModel


class SessionCreate(BaseModel):
    date: dt.datetime
    theme: Optional[str] = None


class SessionResponse(BaseModel):
    id: uuid.UUID
    church_id: uuid.UUID
    date: dt.datetime
    theme: Optional[str]
    created_by_id: Optional[uuid.UUID]
    created_at: dt.datetime
    attendance_count: int = 0

    model_config = {"from_attributes": True}
