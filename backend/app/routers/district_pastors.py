"""
Router pour les pasteurs de district (comptes DISTRICT_ADMIN).
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.routers.dependencies import get_current_actor
from app.schemas.actor import Actor
from app.schemas.admin_user import (
    AdminCreateResult,
    ChurchAssignment,
    DistrictPastorCreate,
    DistrictPastorResponse,
    DistrictPastorUpdate,
)
from app.services import admin_service

router = APIRouter(prefix="/api/v1/district-pastors", tags=["Pasteurs de district"])


@router.get("", response_model=List[DistrictPastorResponse], summary="Lister les pasteurs de district")
def list_district_pastors(
    district_id: Optional[uuid.UUID] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return admin_service.list_district_pastors(db, actor, district_id=district_id)


@router.post("", response_model=AdminCreateResult, status_code=201, summary="Créer un pasteur de district")
def create_district_pastor(
    data: DistrictPastorCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return admin_service.create_district_pastor(db, actor, data)


@router.put("/{pastor_id}", response_model=DistrictPastorResponse, summary="Modifier un pasteur de district")
def update_district_pastor(
    pastor_id: uuid.UUID,
    data: DistrictPastorUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return admin_service.update_district_pastor(db, actor, pastor_id, data)


@router.put(
    "/{pastor_id}/churches",
    response_model=DistrictPastorResponse,
    summary="Affecter des églises à un pasteur",
)
def assign_churches(
    pastor_id: uuid.UUID,
    data: ChurchAssignment,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    Remplace la liste des églises du pasteur (détachement + rattachement atomiques).
    Toutes les églises doivent appartenir au district du pasteur (sinon 409).
    """
    return admin_service.assign_churches(db, actor, pastor_id, data.church_ids)


@router.delete("/{pastor_id}", status_code=204, summary="Supprimer un pasteur de district")
def delete_district_pastor(
    pastor_id: uuid.UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    admin_service.delete_district_pastor(db, actor, pastor_id)
