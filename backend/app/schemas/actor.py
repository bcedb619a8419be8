"""
Contexte d'acteur immuable, construit une fois par requête à partir de l'utilisateur
authentifié. Les services ne reçoivent jamais l'objet ORM User en guise d'acteur.
"""

import uuid
from typing import Optional

from pydantic import BaseModel

from app.models.enums import Role


class Actor(BaseModel):
    id: uuid.UUID
    role: Role
    union_id: Optional[uuid.UUID] = None
    district_id: Optional[uuid.UUID] = None
    church_id: Optional[uuid.UUID] = None

    model_config = {"from_attributes": True, "frozen": True}
