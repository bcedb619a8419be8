"""
Router d'authentification : connexion, changement et réinitialisation de mot de passe.
Seul le changement de mot de passe exige un jeton.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.routers.dependencies import get_current_actor
from app.schemas.actor import Actor
from app.schemas.auth import (
    LoginRequest,
    LoginResponse,
    PasswordChange,
    PasswordResetConfirm,
    PasswordResetRequest,
    SuccessResponse,
)
from app.services import auth_service, password_reset_service

router = APIRouter(prefix="/api/v1/auth", tags=["Authentification"])


@router.post("/login", response_model=LoginResponse, summary="Se connecter")
def login(data: LoginRequest, db: Session = Depends(get_db)):
    """
    Authentifie un utilisateur et renvoie un jeton Bearer.
    - Administrateurs et vérificateurs : email + mot de passe
    - Membres : numéro de téléphone + mot de passe
    """
    return auth_service.authenticate(db, data)


@router.post(
    "/password-reset/request",
    response_model=SuccessResponse,
    summary="Demander une réinitialisation de mot de passe",
)
def request_password_reset(data: PasswordResetRequest, db: Session = Depends(get_db)):
    """
    Envoie un lien de réinitialisation (email pour les administrateurs, SMS pour les membres).
    Répond toujours succès pour un compte inconnu.
    """
    return password_reset_service.request_password_reset(db, data)


@router.post(
    "/password-reset/confirm",
    response_model=SuccessResponse,
    summary="Confirmer la réinitialisation de mot de passe",
)
def confirm_password_reset(data: PasswordResetConfirm, db: Session = Depends(get_db)):
    return password_reset_service.confirm_password_reset(db, data)


@router.post("/change-password", response_model=SuccessResponse, summary="Changer son mot de passe")
def change_password(
    data: PasswordChange,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """Mot de passe actuel incorrect ou nouveau mot de passe trop court → 400."""
    return auth_service.change_password(db, actor, data)
