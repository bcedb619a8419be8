"""
Router pour les présences aux sessions.
Machine d'états PENDING ↔ APPROVED et émission / révocation des passes.
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.enums import AttendanceStatus
from app.routers.dependencies import get_current_actor
from app.schemas.actor import Actor
from app.schemas.attendance import (
    AttendanceCreate,
    AttendanceResponse,
    AttendanceTransitionResult,
    AttendanceUpdate,
)
from app.schemas.identity_pass import PassResponse
from app.services import attendance_service

router = APIRouter(prefix="/api/v1/attendance", tags=["Présences"])


@router.get("", response_model=List[AttendanceResponse], summary="Lister les présences")
def list_attendance(
    district_id: Optional[uuid.UUID] = None,
    church_id: Optional[uuid.UUID] = None,
    session_id: Optional[uuid.UUID] = None,
    status: Optional[AttendanceStatus] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return attendance_service.list_attendance(
        db, actor,
        district_id=district_id,
        church_id=church_id,
        session_id=session_id,
        status=status,
    )


@router.post("", response_model=AttendanceResponse, status_code=201, summary="Enregistrer une présence")
def create_attendance(
    data: AttendanceCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    Crée une présence en attente (PENDING).
    - 403 si la session ou le membre n'appartient pas à l'église de l'administrateur
    - 409 si la présence existe déjà pour ce membre et cette session
    """
    return attendance_service.create_attendance(db, actor, data)


@router.patch(
    "/{attendance_id}",
    response_model=AttendanceTransitionResult,
    response_model_exclude_unset=True,
    summary="Approuver ou remettre en attente une présence",
)
def update_attendance(
    attendance_id: uuid.UUID,
    data: AttendanceUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    Transition de statut.
    - APPROVED : émet le pass si issue_pass (défaut) ; la clé `pass` n'est présente que dans ce cas
    - PENDING : révoque le pass s'il existe
    """
    return attendance_service.update_attendance(db, actor, attendance_id, data)


@router.post(
    "/{attendance_id}/pass",
    response_model=PassResponse,
    status_code=201,
    summary="Émettre le pass d'une présence approuvée",
)
def issue_pass(
    attendance_id: uuid.UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """Idempotent : renvoie le pass existant s'il a déjà été émis."""
    return attendance_service.issue_attendance_pass(db, actor, attendance_id)


@router.delete("/{attendance_id}/pass", status_code=204, summary="Révoquer le pass d'une présence")
def revoke_pass(
    attendance_id: uuid.UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """400 si aucun pass n'est associé à la présence."""
    attendance_service.revoke_attendance_pass(db, actor, attendance_id)
