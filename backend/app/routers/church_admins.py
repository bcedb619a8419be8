"""
Router pour les administrateurs d'église.
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.routers.dependencies import get_current_actor
from app.schemas.actor import Actor
from app.schemas.admin_user import AdminCreateResult, AdminResponse, ChurchAdminCreate, ChurchAdminUpdate
from app.services import admin_service

router = APIRouter(prefix="/api/v1/church-admins", tags=["Administrateurs d'église"])


@router.get("", response_model=List[AdminResponse], summary="Lister les administrateurs d'église")
def list_church_admins(
    district_id: Optional[uuid.UUID] = None,
    church_id: Optional[uuid.UUID] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return admin_service.list_church_admins(db, actor, district_id=district_id, church_id=church_id)


@router.post("", response_model=AdminCreateResult, status_code=201, summary="Créer un administrateur d'église")
def create_church_admin(
    data: ChurchAdminCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """Le mot de passe initial généré n'est renvoyé qu'une seule fois."""
    return admin_service.create_church_admin(db, actor, data)


@router.put("/{admin_id}", response_model=AdminResponse, summary="Modifier un administrateur d'église")
def update_church_admin(
    admin_id: uuid.UUID,
    data: ChurchAdminUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return admin_service.update_church_admin(db, actor, admin_id, data)


@router.delete("/{admin_id}", status_code=204, summary="Supprimer un administrateur d'église")
def delete_church_admin(
    admin_id: uuid.UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    admin_service.delete_church_admin(db, actor, admin_id)
