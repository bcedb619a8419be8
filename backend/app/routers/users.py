"""
Router du profil de l'utilisateur connecté.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.routers.dependencies import get_current_actor, get_current_user
from app.schemas.actor import Actor
from app.schemas.auth import ProfileUpdate, UserResponse
from app.services import user_service

router = APIRouter(prefix="/api/v1/users", tags=["Utilisateurs"])


@router.get("/me", response_model=UserResponse, summary="Profil de l'utilisateur connecté")
def get_me(user: User = Depends(get_current_user)):
    return user


@router.patch("/me", response_model=UserResponse, summary="Modifier son profil")
def update_me(
    data: ProfileUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """Email ou téléphone déjà utilisé par un autre compte → 409."""
    return user_service.update_me(db, actor, data)
