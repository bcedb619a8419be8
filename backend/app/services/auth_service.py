"""
Authentification : hachage des mots de passe (bcrypt) et jetons d'accès (JWT).

Les membres se connectent avec leur numéro de téléphone, les autres rôles
avec leur email.
"""

import uuid
import logging
from datetime import timedelta
from typing import Optional

import bcrypt
import jwt
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import BusinessRuleError, NotFoundError, UnauthorizedError
from app.models.enums import Role
from app.models.user import User
from app.schemas.actor import Actor
from app.schemas.auth import LoginRequest, LoginResponse, PasswordChange, SuccessResponse, UserResponse
from app.services.clock import utcnow

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=10)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Hash stocké mal formé
        return False


def create_access_token(user: User, expires_minutes: Optional[int] = None) -> str:
    """Jeton signé : sub = id utilisateur, plus le rôle pour information."""
    expire = utcnow() + timedelta(minutes=expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {"sub": str(user.id), "role": user.role, "exp": expire}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> dict:
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise UnauthorizedError("Jeton expiré.")
    except jwt.InvalidTokenError:
        raise UnauthorizedError("Jeton invalide.")


def get_user_from_token(db: Session, token: str) -> User:
    """Résout un jeton vers un utilisateur actif, sinon UnauthorizedError."""
    payload = decode_access_token(token)
    try:
        user_id = uuid.UUID(str(payload.get("sub")))
    except ValueError:
        raise UnauthorizedError("Jeton invalide.")

    user = db.get(User, user_id)
    if user is None:
        raise UnauthorizedError("Utilisateur introuvable.")
    if not user.is_active:
        raise UnauthorizedError("Compte désactivé.")
    return user


def authenticate(db: Session, data: LoginRequest) -> LoginResponse:
    """
    Vérifie les identifiants et renvoie un jeton d'accès.
    Toute erreur d'identifiants → UnauthorizedError (message générique).
    """
    if data.phone_number:
        user = db.execute(
            select(User).where(User.phone_number == data.phone_number)
        ).scalars().first()
        if user is None or not user.is_active:
            raise UnauthorizedError("Identifiants invalides.")
        if user.role != Role.MEMBER:
            raise UnauthorizedError("La connexion par téléphone est réservée aux membres.")
    else:
        user = db.execute(
            select(User).where(User.email == data.email.strip().lower())
        ).scalars().first()
        if user is None or not user.is_active:
            raise UnauthorizedError("Identifiants invalides.")
        if user.role == Role.MEMBER:
            raise UnauthorizedError("Les membres se connectent avec leur numéro de téléphone.")

    if not verify_password(data.password, user.password_hash):
        raise UnauthorizedError("Identifiants invalides.")

    logger.info("Connexion de l'utilisateur %s (%s)", user.id, user.role)
    return LoginResponse(
        access_token=create_access_token(user),
        user=UserResponse.model_validate(user),
    )


def change_password(db: Session, actor: Actor, data: PasswordChange) -> SuccessResponse:
    """Changement de mot de passe par l'utilisateur connecté (mot de passe actuel requis)."""
    user = db.get(User, actor.id)
    if user is None:
        raise NotFoundError("Compte utilisateur introuvable.")
    if not verify_password(data.current_password, user.password_hash):
        raise BusinessRuleError("Le mot de passe actuel est incorrect.")
    if len(data.new_password) < MIN_PASSWORD_LENGTH:
        raise BusinessRuleError("Le mot de passe doit contenir au moins 8 caractères.")

    user.password_hash = hash_password(data.new_password)
    db.commit()
    logger.info("Mot de passe modifié par l'utilisateur %s", user.id)
    return SuccessResponse()
