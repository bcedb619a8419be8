"""
Router pour les églises.
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.routers.dependencies import get_current_actor
from app.schemas.actor import Actor
from app.schemas.organisation import ChurchCreate, ChurchResponse, ChurchUpdate
from app.services import church_service

router = APIRouter(prefix="/api/v1/churches", tags=["Églises"])


@router.get("", response_model=List[ChurchResponse], summary="Lister les églises")
def list_churches(
    district_id: Optional[uuid.UUID] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    Retourne les églises du périmètre de l'acteur.
    Un pasteur de district qui filtre sur un autre district reçoit un 403.
    """
    return church_service.list_churches(db, actor, district_id=district_id)


@router.post("", response_model=ChurchResponse, status_code=201, summary="Créer une église")
def create_church(
    data: ChurchCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return church_service.create_church(db, actor, data)


@router.get("/{church_id}", response_model=ChurchResponse, summary="Détail d'une église")
def get_church(
    church_id: uuid.UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return church_service.get_church(db, actor, church_id)


@router.put("/{church_id}", response_model=ChurchResponse, summary="Modifier une église")
def update_church(
    church_id: uuid.UUID,
    data: ChurchUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return church_service.update_church(db, actor, church_id, data)


@router.delete("/{church_id}", status_code=204, summary="Supprimer une église")
def delete_church(
    church_id: uuid.UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    church_service.delete_church(db, actor, church_id)
