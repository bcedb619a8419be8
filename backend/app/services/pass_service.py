"""
Cycle de vie des passes d'identité : émission, vérification, révocation.

États d'un pass : absent → émis → (expiré | révoqué). L'expiration n'est pas
stockée : elle est calculée à la vérification à partir de expires_at.

Attention : verify_pass_token écrit en base quand l'acteur est un
POLICE_VERIFIER (enregistrement implicite de la présence du jour).
"""

import logging
import secrets
import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.exceptions import BusinessRuleError, ConflictError, NotFoundError
from app.models.attendance import AttendanceRecord
from app.models.enums import AttendanceStatus, Role
from app.models.identity_pass import MemberPass, Pass
from app.models.organisation import Church
from app.models.umuganda_session import UmugandaSession
from app.models.user import User
from app.schemas.actor import Actor
from app.schemas.identity_pass import VerificationResult, VerifiedMember
from app.schemas.organisation import ChurchSummary
from app.services import sms_service
from app.services.access_service import require_actor
from app.services.clock import as_utc, utcnow
from app.services.qr_service import build_qr_payload

logger = logging.getLogger(__name__)

# Nombre d'essais en cas de collision de token (improbable avec 128 bits)
_MAX_TOKEN_ATTEMPTS = 3


def generate_pass_token() -> str:
    """Token opaque non devinable (128 bits, URL-safe)."""
    return secrets.token_urlsafe(16)


def find_attendance_pass(db: Session, attendance_id: uuid.UUID) -> Optional[Pass]:
    return db.execute(
        select(Pass).where(Pass.attendance_id == attendance_id)
    ).scalars().first()


def find_standing_pass(db: Session, member_id: uuid.UUID) -> Optional[Pass]:
    return db.execute(
        select(Pass).where(Pass.member_id == member_id, Pass.attendance_id.is_(None))
    ).scalars().first()


def _find_by_token(db: Session, token: str) -> Optional[Pass]:
    return db.execute(select(Pass).where(Pass.token == token)).scalars().first()


# ----------------------------------------------------------------------------
# Émission
# ----------------------------------------------------------------------------

def issue_for_attendance(db: Session, attendance_id: uuid.UUID) -> Pass:
    """
    Émet le pass d'une présence approuvée.

    Idempotent : si un pass existe déjà pour cette présence, il est renvoyé tel quel.
    Une émission concurrente est détectée par la contrainte unique sur
    passes.attendance_id ; le perdant relit alors le pass du gagnant.
    L'envoi du SMS est best-effort et n'annule jamais l'émission.
    """
    attendance = db.get(AttendanceRecord, attendance_id)
    if attendance is None:
        raise NotFoundError("Présence introuvable.")

    if attendance.status != AttendanceStatus.APPROVED:
        raise BusinessRuleError("La présence doit être approuvée avant d'émettre un pass.")

    existing = find_attendance_pass(db, attendance.id)
    if existing is not None:
        return existing

    session = db.get(UmugandaSession, attendance.session_id)

    for attempt in range(1, _MAX_TOKEN_ATTEMPTS + 1):
        token = generate_pass_token()
        issued = Pass(
            attendance_id=attendance.id,
            member_id=attendance.member_id,
            church_id=session.church_id,
            session_date=session.date,
            token=token,
            qr_payload=build_qr_payload(token),
        )
        db.add(issued)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            existing = find_attendance_pass(db, attendance_id)
            if existing is not None:
                return existing
            logger.warning("Collision de token de pass (essai %d/%d)", attempt, _MAX_TOKEN_ATTEMPTS)
            continue

        db.refresh(issued)
        logger.info("Pass %s émis pour la présence %s", issued.id, attendance_id)
        _notify_pass_issued(db, issued, session)
        return issued

    raise ConflictError("Impossible de générer un token de pass unique.")


def _notify_pass_issued(db: Session, issued: Pass, session: UmugandaSession) -> None:
    """SMS au membre si Twilio est configuré et qu'un numéro est connu. Échec → warning."""
    member = db.get(User, issued.member_id)
    if member is None or not member.phone_number or not sms_service.is_configured():
        return

    day = as_utc(session.date).strftime("%Y-%m-%d")
    message = f"Umuganda pass : {member.first_name} {member.last_name} ({day})"
    try:
        sms_service.send_sms(member.phone_number, message)
    except Exception as exc:
        logger.warning("Échec de l'envoi du SMS pour le pass %s : %s", issued.id, exc)
        return

    issued.sms_sent_at = utcnow()
    db.commit()


def issue_standing_pass(db: Session, member: User) -> Pass:
    """
    Prépare le pass permanent d'un nouveau membre (non lié à une présence).
    Le pass est ajouté à la session sans commit : la création du membre et
    de son pass sont validées ensemble par l'appelant.
    """
    token = generate_pass_token()
    standing = Pass(
        member_id=member.id,
        church_id=member.church_id,
        session_date=utcnow(),
        token=token,
        qr_payload=build_qr_payload(token),
    )
    db.add(standing)
    return standing


# ----------------------------------------------------------------------------
# Révocation
# ----------------------------------------------------------------------------

def revoke_pass(db: Session, attendance_id: uuid.UUID) -> None:
    """Supprime le pass d'une présence. Aucun pass → BusinessRuleError."""
    existing = find_attendance_pass(db, attendance_id)
    if existing is None:
        raise BusinessRuleError("Aucun pass n'est associé à cette présence.")

    db.delete(existing)
    db.commit()
    logger.info("Pass révoqué pour la présence %s", attendance_id)


# ----------------------------------------------------------------------------
# Ancienne table member_passes
# ----------------------------------------------------------------------------

def materialize_legacy_pass(db: Session, legacy: MemberPass) -> Optional[Pass]:
    """
    Recopie un ancien pass permanent dans la table passes (upsert sur le pass
    permanent du membre) pour que les lectures suivantes la trouvent directement.
    """
    member = db.get(User, legacy.member_id)
    standing = find_standing_pass(db, legacy.member_id)
    if standing is None:
        standing = Pass(member_id=legacy.member_id)
        db.add(standing)

    standing.token = legacy.token
    standing.qr_payload = legacy.qr_payload
    standing.church_id = member.church_id if member is not None else None
    standing.session_date = legacy.updated_at or utcnow()
    standing.expires_at = legacy.expires_at
    standing.sms_sent_at = legacy.sms_sent_at

    try:
        db.commit()
    except IntegrityError:
        # Matérialisation concurrente : l'autre requête a déjà écrit la ligne
        db.rollback()
        return _find_by_token(db, legacy.token)

    db.refresh(standing)
    logger.info("Ancien pass du membre %s recopié dans passes (%s)", legacy.member_id, standing.id)
    return standing


def _lookup_token(db: Session, token: str) -> Optional[Pass]:
    """Table passes d'abord, puis l'ancienne table member_passes."""
    found = _find_by_token(db, token)
    if found is not None:
        return found

    legacy = db.execute(
        select(MemberPass).where(MemberPass.token == token)
    ).scalars().first()
    if legacy is None:
        return None
    return materialize_legacy_pass(db, legacy)


# ----------------------------------------------------------------------------
# Vérification
# ----------------------------------------------------------------------------

def verify_pass_token(db: Session, actor: Optional[Actor], token: str) -> VerificationResult:
    """
    Vérifie un token de pass.

    Église et date de session : présence liée, sinon champs du pass, sinon
    église courante du membre (et date de création du pass).
    Si l'acteur est POLICE_VERIFIER, la présence du membre à la session du
    jour de son église est enregistrée et approuvée (checked_in_attendance_id).
    """
    actor = require_actor(actor)

    found = _lookup_token(db, token)
    if found is None:
        return VerificationResult(valid=False)

    if found.expires_at is not None and as_utc(found.expires_at) < utcnow():
        return VerificationResult(valid=False, reason="expired")

    member = db.get(User, found.member_id)
    attendance = db.get(AttendanceRecord, found.attendance_id) if found.attendance_id else None
    session = db.get(UmugandaSession, attendance.session_id) if attendance is not None else None

    if session is not None:
        church_id = session.church_id
        session_date = session.date
    else:
        church_id = found.church_id or (member.church_id if member is not None else None)
        session_date = found.session_date or found.created_at

    church = db.get(Church, church_id) if church_id is not None else None

    checked_in_id = None
    if actor.role == Role.POLICE_VERIFIER and member is not None and church is not None:
        # Import local pour éviter l'import circulaire avec attendance_service
        from app.services.attendance_service import record_field_check_in

        checked_in = record_field_check_in(db, actor, church.id, member.id)
        checked_in_id = checked_in.id

    return VerificationResult(
        valid=True,
        pass_id=found.id,
        issued_at=found.created_at,
        session_date=session_date,
        church=ChurchSummary.model_validate(church) if church is not None else None,
        member=VerifiedMember.model_validate(member) if member is not None else None,
        checked_in_attendance_id=checked_in_id,
    )
