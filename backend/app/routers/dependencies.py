"""
Dépendances FastAPI partagées : résolution de l'acteur authentifié.

Le jeton Bearer est résolu une seule fois par requête en un Actor immuable,
transmis ensuite explicitement aux services.
"""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.database import get_db
from app.exceptions import UnauthorizedError
from app.models.user import User
from app.schemas.actor import Actor
from app.services import auth_service

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Utilisateur actif correspondant au jeton, sinon 401."""
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Authentification requise.")
    return auth_service.get_user_from_token(db, credentials.credentials)


def get_current_actor(user: User = Depends(get_current_user)) -> Actor:
    return Actor.model_validate(user)
