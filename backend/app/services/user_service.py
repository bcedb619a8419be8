"""
Service du profil de l'utilisateur connecté.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.exceptions import BusinessRuleError, ConflictError, NotFoundError
from app.models.enums import Role
from app.models.user import User
from app.schemas.actor import Actor
from app.schemas.auth import ProfileUpdate, UserResponse
from app.services.access_service import require_actor

logger = logging.getLogger(__name__)


def _normalize_email(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip().lower()
    return value or None


def update_me(db: Session, actor: Optional[Actor], data: ProfileUpdate) -> UserResponse:
    """
    Met à jour le profil de l'acteur.

    - email normalisé (minuscules, vide → None) ; obligatoire pour les non-membres
    - téléphone normalisé ; obligatoire pour les membres (identifiant de connexion)
    - email ou téléphone déjà utilisé par un autre compte → ConflictError
    """
    actor = require_actor(actor)
    user = db.get(User, actor.id)
    if user is None:
        raise NotFoundError("Compte utilisateur introuvable.")

    update_data = data.model_dump(exclude_unset=True)

    if "email" in update_data:
        update_data["email"] = _normalize_email(update_data["email"])
        if update_data["email"] is None and user.role != Role.MEMBER:
            raise BusinessRuleError("L'email est obligatoire pour ce compte.")
    if "phone_number" in update_data:
        phone = (update_data["phone_number"] or "").strip() or None
        if phone is None and user.role == Role.MEMBER:
            raise BusinessRuleError("Le numéro de téléphone est obligatoire pour un membre.")
        update_data["phone_number"] = phone

    for column, field, message in (
        (User.email, "email", "Un utilisateur avec cet email existe déjà."),
        (User.phone_number, "phone_number", "Un utilisateur avec ce numéro de téléphone existe déjà."),
    ):
        value = update_data.get(field)
        if not value or value == getattr(user, field):
            continue
        if db.execute(select(User.id).where(column == value, User.id != user.id)).first() is not None:
            raise ConflictError(message)

    for field, value in update_data.items():
        setattr(user, field, value)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Email ou numéro de téléphone déjà utilisé.")

    db.refresh(user)
    logger.info("Profil mis à jour : utilisateur %s", user.id)
    return UserResponse.model_validate(user)
