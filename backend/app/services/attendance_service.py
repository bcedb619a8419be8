"""
Service métier pour les présences : machine d'états PENDING ↔ APPROVED.

- Création : toujours PENDING, par l'administrateur de l'église de la session.
- PENDING → APPROVED : approved_by_id renseigné, pass émis si demandé (défaut).
- APPROVED → PENDING : approved_by_id effacé, pass révoqué s'il existe.
  Sans pass, rien à révoquer : pas d'erreur (contrairement à la révocation directe).
"""

import uuid
import logging
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.exceptions import ConflictError, ForbiddenError, NotFoundError
from app.models.attendance import AttendanceRecord
from app.models.enums import AttendanceStatus, Role
from app.models.identity_pass import Pass
from app.models.organisation import Church
from app.models.umuganda_session import UmugandaSession
from app.models.user import User
from app.schemas.actor import Actor
from app.schemas.attendance import (
    AttendanceCreate,
    AttendanceResponse,
    AttendanceTransitionResult,
    AttendanceUpdate,
)
from app.schemas.identity_pass import PassResponse
from app.services import pass_service
from app.services.access_service import (
    apply_church_scope,
    build_list_scope,
    require_actor,
    resolve_attendance,
    resolve_session,
)
from app.services.rbac import can_manage_attendance
from app.services.session_service import find_or_create_daily_session

logger = logging.getLogger(__name__)


def list_attendance(
    db: Session,
    actor: Optional[Actor],
    district_id: Optional[uuid.UUID] = None,
    church_id: Optional[uuid.UUID] = None,
    session_id: Optional[uuid.UUID] = None,
    status: Optional[AttendanceStatus] = None,
) -> List[AttendanceResponse]:
    """Présences du périmètre de l'acteur, des plus récentes aux plus anciennes."""
    scope = build_list_scope(actor, district_id=district_id, church_id=church_id)

    stmt = (
        select(AttendanceRecord)
        .join(UmugandaSession, UmugandaSession.id == AttendanceRecord.session_id)
        .join(Church, Church.id == UmugandaSession.church_id)
        .order_by(AttendanceRecord.created_at.desc())
    )
    stmt = apply_church_scope(stmt, scope)
    if session_id is not None:
        stmt = stmt.where(AttendanceRecord.session_id == session_id)
    if status is not None:
        stmt = stmt.where(AttendanceRecord.status == AttendanceStatus(status).value)

    records = db.execute(stmt).scalars().all()
    return [AttendanceResponse.model_validate(r) for r in records]


def list_member_attendance(
    db: Session,
    member_id: uuid.UUID,
) -> List[AttendanceResponse]:
    """Historique des présences d'un membre (le contrôle d'accès est fait par l'appelant)."""
    stmt = (
        select(AttendanceRecord)
        .join(UmugandaSession, UmugandaSession.id == AttendanceRecord.session_id)
        .where(AttendanceRecord.member_id == member_id)
        .order_by(UmugandaSession.date.desc())
    )
    records = db.execute(stmt).scalars().all()
    return [AttendanceResponse.model_validate(r) for r in records]


def create_attendance(db: Session, actor: Optional[Actor], data: AttendanceCreate) -> AttendanceResponse:
    """
    Enregistre une présence PENDING.

    Validations :
    1. L'acteur administre l'église de la session
    2. La cible est un MEMBER de cette même église
    3. Pas de doublon (session, membre) : contrainte unique → ConflictError
    """
    actor = require_actor(actor)
    if not can_manage_attendance(actor.role):
        raise ForbiddenError("Seuls les administrateurs d'église peuvent enregistrer des présences.")

    session = resolve_session(db, actor, data.session_id, for_write=True)

    member = db.get(User, data.member_id)
    if member is None or member.role != Role.MEMBER:
        raise NotFoundError("Membre introuvable.")
    if member.church_id != session.church_id:
        raise ForbiddenError("Ce membre appartient à une autre église.")

    record = AttendanceRecord(
        session_id=session.id,
        member_id=member.id,
        status=AttendanceStatus.PENDING.value,
    )
    db.add(record)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("La présence de ce membre est déjà enregistrée pour cette session.")

    db.refresh(record)
    logger.info("Présence enregistrée : membre %s, session %s", member.id, session.id)
    return AttendanceResponse.model_validate(record)


def update_attendance(
    db: Session,
    actor: Optional[Actor],
    attendance_id: uuid.UUID,
    data: AttendanceUpdate,
) -> AttendanceTransitionResult:
    """
    Applique une transition de statut.
    Le résultat ne contient `pass` que si un pass a été émis par cette transition.
    """
    record = resolve_attendance(db, actor, attendance_id, for_write=True)

    if data.status == AttendanceStatus.APPROVED:
        record.status = AttendanceStatus.APPROVED.value
        record.approved_by_id = actor.id
        db.commit()
        logger.info("Présence %s approuvée par %s", record.id, actor.id)

        if data.issue_pass:
            issued = pass_service.issue_for_attendance(db, record.id)
            db.refresh(record)
            return AttendanceTransitionResult(
                attendance=AttendanceResponse.model_validate(record),
                pass_=PassResponse.model_validate(issued),
            )
    else:
        record.status = AttendanceStatus.PENDING.value
        record.approved_by_id = None
        # Suppression dans la même transaction : zéro ligne supprimée n'est pas une erreur
        revoked = db.execute(delete(Pass).where(Pass.attendance_id == record.id)).rowcount
        db.commit()
        logger.info("Présence %s repassée en attente par %s (%d pass révoqué)", record.id, actor.id, revoked)

    db.refresh(record)
    return AttendanceTransitionResult(attendance=AttendanceResponse.model_validate(record))


def issue_attendance_pass(db: Session, actor: Optional[Actor], attendance_id: uuid.UUID) -> PassResponse:
    """Émission explicite du pass d'une présence approuvée."""
    record = resolve_attendance(db, actor, attendance_id, for_write=True)
    return PassResponse.model_validate(pass_service.issue_for_attendance(db, record.id))


def revoke_attendance_pass(db: Session, actor: Optional[Actor], attendance_id: uuid.UUID) -> None:
    """Révocation explicite : lève BusinessRuleError si la présence n'a pas de pass."""
    record = resolve_attendance(db, actor, attendance_id, for_write=True)
    pass_service.revoke_pass(db, record.id)


def record_field_check_in(
    db: Session,
    actor: Actor,
    church_id: uuid.UUID,
    member_id: uuid.UUID,
) -> AttendanceRecord:
    """
    Enregistre (ou approuve) la présence d'un membre à la session du jour de
    son église. Appelé lors d'une vérification de pass par un POLICE_VERIFIER.
    """
    session = find_or_create_daily_session(db, church_id, actor.id)

    record = db.execute(
        select(AttendanceRecord).where(
            AttendanceRecord.session_id == session.id,
            AttendanceRecord.member_id == member_id,
        )
    ).scalars().first()

    if record is None:
        record = AttendanceRecord(
            session_id=session.id,
            member_id=member_id,
            status=AttendanceStatus.APPROVED.value,
            approved_by_id=actor.id,
        )
        db.add(record)
        try:
            db.commit()
        except IntegrityError:
            # Vérification simultanée du même membre : on reprend la ligne existante
            db.rollback()
            record = db.execute(
                select(AttendanceRecord).where(
                    AttendanceRecord.session_id == session.id,
                    AttendanceRecord.member_id == member_id,
                )
            ).scalars().one()

    if record.status != AttendanceStatus.APPROVED:
        record.status = AttendanceStatus.APPROVED.value
        record.approved_by_id = actor.id
        db.commit()

    db.refresh(record)
    logger.info("Présence terrain enregistrée : membre %s, session %s", member_id, session.id)
    return record
