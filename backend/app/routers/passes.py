"""
Router de vérification des passes (scan du QR code).
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.routers.dependencies import get_current_actor
from app.schemas.actor import Actor
from app.schemas.identity_pass import VerificationResult
from app.services import pass_service

router = APIRouter(prefix="/api/v1/passes", tags=["Passes"])


@router.get("/{token}", response_model=VerificationResult, summary="Vérifier un pass")
def verify_pass(token: str, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    """
    Vérifie un token de pass.

    - valid=false : token inconnu
    - valid=false, reason="expired" : pass expiré
    - valid=true : membre, église et date de session

    Effet de bord : pour un POLICE_VERIFIER, la présence du membre à la session
    du jour de son église est enregistrée et approuvée (checked_in_attendance_id).
    """
    return pass_service.verify_pass_token(db, actor, token)
