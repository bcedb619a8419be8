"""
Router pour les membres d'église.
Création (avec pass permanent), listage, modification, suppression,
consultation du pass et de l'historique de présences.
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.routers.dependencies import get_current_actor
from app.schemas.actor import Actor
from app.schemas.attendance import AttendanceResponse
from app.schemas.member import MemberCreate, MemberResponse, MemberUpdate, MemberWithPass
from app.services import member_service

router = APIRouter(prefix="/api/v1/members", tags=["Membres"])


@router.get("", response_model=List[MemberResponse], summary="Lister les membres")
def list_members(
    district_id: Optional[uuid.UUID] = None,
    church_id: Optional[uuid.UUID] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return member_service.list_members(db, actor, district_id=district_id, church_id=church_id)


@router.post("", response_model=MemberWithPass, status_code=201, summary="Créer un membre")
def create_member(
    data: MemberCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    Crée un membre dans l'église de l'administrateur et lui émet son pass permanent.
    Un SMS d'accueil est envoyé si possible (sans bloquer la création).
    """
    return member_service.create_member(db, actor, data)


@router.put("/{member_id}", response_model=MemberResponse, summary="Modifier un membre")
def update_member(
    member_id: uuid.UUID,
    data: MemberUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return member_service.update_member(db, actor, member_id, data)


@router.delete("/{member_id}", status_code=204, summary="Supprimer un membre")
def delete_member(
    member_id: uuid.UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    member_service.delete_member(db, actor, member_id)


@router.get("/{member_id}/pass", response_model=MemberWithPass, summary="Pass permanent d'un membre")
def get_member_pass(
    member_id: uuid.UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """Accessible au membre lui-même et aux administrateurs de son périmètre."""
    return member_service.get_member_pass(db, actor, member_id)


@router.get(
    "/{member_id}/attendance",
    response_model=List[AttendanceResponse],
    summary="Historique de présences d'un membre",
)
def get_member_attendance(
    member_id: uuid.UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return member_service.get_member_attendance(db, actor, member_id)
