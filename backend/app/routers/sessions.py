"""
Router pour les sessions de présence.
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.routers.dependencies import get_current_actor
from app.schemas.actor import Actor
from app.schemas.umuganda_session import SessionCreate, SessionResponse
from app.services import session_service

router = APIRouter(prefix="/api/v1/sessions", tags=["Sessions"])


@router.get("", response_model=List[SessionResponse], summary="Lister les sessions")
def list_sessions(
    district_id: Optional[uuid.UUID] = None,
    church_id: Optional[uuid.UUID] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """Sessions du périmètre de l'acteur, de la plus récente à la plus ancienne, avec leur nombre de présences."""
    return session_service.list_sessions(db, actor, district_id=district_id, church_id=church_id)


@router.post("", response_model=SessionResponse, status_code=201, summary="Créer une session")
def create_session(
    data: SessionCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """Réservé à l'administrateur d'église, pour sa propre église."""
    return session_service.create_session(db, actor, data)
