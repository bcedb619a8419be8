"""
Router pour les événements Umuganda et l'enregistrement des présences par scan de pass.
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.routers.dependencies import get_current_actor
from app.schemas.actor import Actor
from app.schemas.umuganda_event import (
    EventAttendanceResponse,
    EventCheckIn,
    EventCreate,
    EventResponse,
    EventUpdate,
)
from app.services import umuganda_event_service

router = APIRouter(prefix="/api/v1/umuganda-events", tags=["Événements Umuganda"])


@router.get("", response_model=List[EventResponse], summary="Lister les événements")
def list_events(db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return umuganda_event_service.list_events(db, actor)


@router.post("", response_model=EventResponse, status_code=201, summary="Créer un événement")
def create_event(
    data: EventCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return umuganda_event_service.create_event(db, actor, data)


@router.get("/{event_id}", response_model=EventResponse, summary="Détail d'un événement")
def get_event(
    event_id: uuid.UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return umuganda_event_service.get_event(db, actor, event_id)


@router.put("/{event_id}", response_model=EventResponse, summary="Modifier un événement")
def update_event(
    event_id: uuid.UUID,
    data: EventUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return umuganda_event_service.update_event(db, actor, event_id, data)


@router.delete("/{event_id}", status_code=204, summary="Supprimer un événement")
def delete_event(
    event_id: uuid.UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    umuganda_event_service.delete_event(db, actor, event_id)


@router.get(
    "/{event_id}/attendance",
    response_model=List[EventAttendanceResponse],
    summary="Présences à un événement",
)
def list_event_attendance(
    event_id: uuid.UUID,
    church_id: Optional[uuid.UUID] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return umuganda_event_service.list_event_attendance(db, actor, event_id, church_id=church_id)


@router.post(
    "/{event_id}/attendance",
    response_model=EventAttendanceResponse,
    status_code=201,
    summary="Enregistrer une présence par scan de pass",
)
def check_in(
    event_id: uuid.UUID,
    data: EventCheckIn,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    Enregistre la présence du membre dont le pass a été scanné.
    - 404 si le token est inconnu
    - 403 si le membre appartient à une autre église
    - 409 si la présence est déjà enregistrée
    """
    return umuganda_event_service.check_in(db, actor, event_id, data)
