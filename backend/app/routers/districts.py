"""
Router pour les districts.
CRUD : lecture pour les admins d'union et de district, écriture pour les admins d'union.
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.routers.dependencies import get_current_actor
from app.schemas.actor import Actor
from app.schemas.organisation import DistrictCreate, DistrictResponse, DistrictUpdate
from app.services import district_service

router = APIRouter(prefix="/api/v1/districts", tags=["Districts"])


@router.get("", response_model=List[DistrictResponse], summary="Lister les districts")
def list_districts(
    union_id: Optional[uuid.UUID] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return district_service.list_districts(db, actor, union_id=union_id)


@router.post("", response_model=DistrictResponse, status_code=201, summary="Créer un district")
def create_district(
    data: DistrictCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return district_service.create_district(db, actor, data)


@router.get("/{district_id}", response_model=DistrictResponse, summary="Détail d'un district")
def get_district(
    district_id: uuid.UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """404 si le district n'existe pas, 403 s'il est hors du périmètre de l'acteur."""
    return district_service.get_district(db, actor, district_id)


@router.put("/{district_id}", response_model=DistrictResponse, summary="Modifier un district")
def update_district(
    district_id: uuid.UUID,
    data: DistrictUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return district_service.update_district(db, actor, district_id, data)


@router.delete("/{district_id}", status_code=204, summary="Supprimer un district")
def delete_district(
    district_id: uuid.UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    district_service.delete_district(db, actor, district_id)
