"""
Router pour les unions.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.routers.dependencies import get_current_actor
from app.schemas.actor import Actor
from app.schemas.organisation import UnionCreate, UnionResponse
from app.schemas.report import UnionStats
from app.services import union_service

router = APIRouter(prefix="/api/v1/unions", tags=["Unions"])


@router.get("", response_model=List[UnionResponse], summary="Lister les unions")
def list_unions(db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return union_service.list_unions(db, actor)


@router.post("", response_model=UnionResponse, status_code=201, summary="Créer une union")
def create_union(
    data: UnionCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """Nom unique : un doublon renvoie 409."""
    return union_service.create_union(db, actor, data)


@router.get("/stats", response_model=UnionStats, summary="Tableau de bord de l'union")
def union_stats(db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    """Réservé aux administrateurs d'union rattachés à une union."""
    return union_service.get_union_stats(db, actor)
