"""
Réinitialisation de mot de passe.

Le jeton est d'abord enregistré, puis envoyé : par email pour les
administrateurs, par SMS pour les membres et vérificateurs. Si l'envoi échoue,
le jeton est supprimé avant de relever l'erreur (action compensatoire).
"""

import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional
from urllib.parse import quote

from sqlalchemy import delete, or_, select
from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import (
    AppError,
    BusinessRuleError,
    ForbiddenError,
    NotFoundError,
    ServiceUnavailableError,
)
from app.models.enums import Role
from app.models.password_reset import PasswordResetToken
from app.models.user import User
from app.schemas.auth import PasswordResetConfirm, PasswordResetRequest, SuccessResponse
from app.services import email_service, sms_service
from app.services.auth_service import MIN_PASSWORD_LENGTH, hash_password
from app.services.clock import as_utc, utcnow

logger = logging.getLogger(__name__)

EMAIL_ROLES = frozenset({Role.UNION_ADMIN, Role.DISTRICT_ADMIN, Role.CHURCH_ADMIN})
SMS_ROLES = frozenset({Role.MEMBER, Role.POLICE_VERIFIER})


def generate_reset_token() -> str:
    return secrets.token_urlsafe(24)


def build_reset_link(token: str) -> str:
    return f"{settings.FRONTEND_URL}/reset-password/confirm?token={quote(token)}"


def _deliver(user: User, token: str) -> None:
    """Envoie le lien au bon canal selon le rôle. Lève AppError si impossible."""
    link = build_reset_link(token)
    ttl = settings.RESET_TOKEN_TTL_MINUTES
    role = Role(user.role)

    if role in EMAIL_ROLES:
        if not user.email:
            raise BusinessRuleError("Aucune adresse email n'est associée à ce compte administrateur.")
        if not email_service.is_configured():
            raise ServiceUnavailableError("Le service email n'est pas configuré.")
        try:
            email_service.send_password_reset_email(user.email, link, ttl)
        except Exception as exc:
            logger.error("Échec de l'email de réinitialisation pour %s : %s", user.id, exc)
            raise ServiceUnavailableError("Impossible d'envoyer l'email de réinitialisation.")
        return

    if role in SMS_ROLES:
        if not user.phone_number:
            raise BusinessRuleError("Aucun numéro de téléphone n'est associé à ce compte.")
        if not sms_service.is_configured():
            raise ServiceUnavailableError("Le service SMS n'est pas configuré.")
        message = (
            "Umuganda SDA : réinitialisation du mot de passe. "
            f"Suivez ce lien dans les {ttl} minutes : {link}"
        )
        try:
            sms_service.send_sms(user.phone_number, message)
        except Exception as exc:
            logger.error("Échec du SMS de réinitialisation pour %s : %s", user.id, exc)
            raise ServiceUnavailableError("Impossible d'envoyer le SMS de réinitialisation.")
        return

    raise BusinessRuleError("Impossible de déterminer le canal de réinitialisation de ce compte.")


def request_password_reset(db: Session, data: PasswordResetRequest) -> SuccessResponse:
    """
    Demande de réinitialisation. Un compte inconnu renvoie aussi un succès
    pour ne pas révéler l'existence des comptes.
    """
    if not data.national_id and not data.email:
        raise BusinessRuleError("Fournissez un numéro d'identité ou un email.")

    if data.national_id:
        stmt = select(User).where(User.national_id == data.national_id.strip())
    else:
        stmt = select(User).where(User.email == data.email.strip().lower())
    user = db.execute(stmt).scalars().first()

    if user is None:
        return SuccessResponse()

    token = generate_reset_token()
    record = PasswordResetToken(
        user_id=user.id,
        token=token,
        expires_at=utcnow() + timedelta(minutes=settings.RESET_TOKEN_TTL_MINUTES),
    )
    db.add(record)
    db.commit()

    try:
        _deliver(user, token)
    except AppError:
        db.execute(delete(PasswordResetToken).where(PasswordResetToken.token == token))
        db.commit()
        raise

    logger.info("Lien de réinitialisation envoyé à l'utilisateur %s", user.id)
    return SuccessResponse()


def confirm_password_reset(db: Session, data: PasswordResetConfirm) -> SuccessResponse:
    """Le nouveau mot de passe et le marquage du jeton sont validés ensemble."""
    if len(data.new_password) < MIN_PASSWORD_LENGTH:
        raise BusinessRuleError("Le mot de passe doit contenir au moins 8 caractères.")

    record = db.execute(
        select(PasswordResetToken).where(PasswordResetToken.token == data.token)
    ).scalars().first()
    if record is None:
        raise NotFoundError("Jeton de réinitialisation introuvable.")
    if record.used_at is not None:
        raise BusinessRuleError("Ce jeton de réinitialisation a déjà été utilisé.")
    if as_utc(record.expires_at) < utcnow():
        raise BusinessRuleError("Ce jeton de réinitialisation a expiré.")

    user = db.get(User, record.user_id)
    if user is None:
        raise NotFoundError("Compte utilisateur introuvable.")
    if not user.is_active:
        raise ForbiddenError("Ce compte a été désactivé.")

    user.password_hash = hash_password(data.new_password)
    record.used_at = utcnow()
    db.commit()

    logger.info("Mot de passe réinitialisé pour l'utilisateur %s", user.id)
    return SuccessResponse()


def purge_expired_tokens(db: Session, now: Optional[datetime] = None) -> int:
    """Supprime les jetons expirés ou déjà utilisés. Retourne le nombre supprimé."""
    now = now or utcnow()
    result = db.execute(
        delete(PasswordResetToken).where(
            or_(
                PasswordResetToken.expires_at < now,
                PasswordResetToken.used_at.is_not(None),
            )
        )
    )
    db.commit()
    return result.rowcount or 0
