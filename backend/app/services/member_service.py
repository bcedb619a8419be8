"""
Service métier pour les membres d'église.

À la création, le membre reçoit son pass permanent (validé dans la même
transaction) puis un SMS d'accueil best-effort.
"""

import uuid
import logging
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import ConflictError, ForbiddenError, NotFoundError
from app.models.enums import Role
from app.models.identity_pass import MemberPass, Pass
from app.models.organisation import Church, District
from app.models.user import User
from app.schemas.actor import Actor
from app.schemas.attendance import AttendanceResponse
from app.schemas.identity_pass import PassResponse
from app.schemas.member import MemberCreate, MemberResponse, MemberUpdate, MemberWithPass
from app.services import attendance_service, pass_service, sms_service
from app.services.access_service import (
    apply_church_scope,
    build_list_scope,
    require_actor,
    resolve_church,
    union_in_scope,
)
from app.services.auth_service import hash_password
from app.services.clock import utcnow
from app.services.rbac import can_create_role

logger = logging.getLogger(__name__)


def _get_member(db: Session, member_id: uuid.UUID) -> User:
    member = db.get(User, member_id)
    if member is None or member.role != Role.MEMBER:
        raise NotFoundError("Membre introuvable.")
    return member


def _ensure_member_access(db: Session, actor: Actor, member: User) -> None:
    """Le membre doit appartenir à une église du périmètre de l'administrateur."""
    if member.church_id is None:
        if actor.role == Role.UNION_ADMIN and union_in_scope(actor, member.union_id):
            return
        raise ForbiddenError("Ce membre n'est rattaché à aucune église de votre périmètre.")
    try:
        resolve_church(db, actor, member.church_id)
    except ForbiddenError:
        raise ForbiddenError("Ce membre appartient à une autre église.") from None


def _ensure_self_or_admin(db: Session, actor: Actor, member: User) -> None:
    if actor.role == Role.MEMBER:
        if actor.id != member.id:
            raise ForbiddenError("Vous ne pouvez consulter que vos propres données.")
        return
    _ensure_member_access(db, actor, member)


def _check_unique_contacts(
    db: Session,
    national_id: Optional[str],
    phone_number: Optional[str],
    email: Optional[str],
    exclude_id: Optional[uuid.UUID] = None,
) -> None:
    checks = (
        (User.national_id, national_id, "Un membre avec ce numéro d'identité existe déjà."),
        (User.phone_number, phone_number, "Un utilisateur avec ce numéro de téléphone existe déjà."),
        (User.email, email, "Un utilisateur avec cet email existe déjà."),
    )
    for column, value, message in checks:
        if not value:
            continue
        stmt = select(User.id).where(column == value)
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        if db.execute(stmt).first() is not None:
            raise ConflictError(message)


def create_member(db: Session, actor: Optional[Actor], data: MemberCreate) -> MemberWithPass:
    """
    Crée un membre dans l'église de l'administrateur connecté.

    Étapes :
    1. Vérifier le rôle (échelle de création) et l'église de l'acteur
    2. Vérifier l'unicité (identité, téléphone, email)
    3. Créer le membre et son pass permanent dans une seule transaction
    4. Envoyer le SMS d'accueil (best-effort)
    """
    actor = require_actor(actor)
    if not can_create_role(actor.role, Role.MEMBER):
        raise ForbiddenError("Seuls les administrateurs d'église peuvent créer des membres.")
    if actor.church_id is None:
        raise ForbiddenError("Aucune église n'est rattachée à ce compte.")

    church = db.get(Church, actor.church_id)
    if church is None:
        raise NotFoundError("Église introuvable.")
    district = db.get(District, church.district_id)

    email = data.email.strip().lower() if data.email else None
    _check_unique_contacts(db, data.national_id, data.phone_number, email)

    member = User(
        national_id=data.national_id,
        first_name=data.first_name,
        last_name=data.last_name,
        phone_number=data.phone_number,
        email=email,
        password_hash=hash_password(data.password),
        role=Role.MEMBER.value,
        union_id=district.union_id if district is not None else None,
        district_id=church.district_id,
        church_id=church.id,
    )
    db.add(member)
    try:
        db.flush()  # Obtenir l'ID avant de créer le pass
        standing = pass_service.issue_standing_pass(db, member)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Ce membre existe déjà.")

    db.refresh(member)
    db.refresh(standing)
    logger.info("Membre créé : %s (église %s)", member.id, church.id)

    _send_welcome_sms(db, member, standing, data.password)

    return MemberWithPass(
        member=MemberResponse.model_validate(member),
        pass_=PassResponse.model_validate(standing),
    )


def _send_welcome_sms(db: Session, member: User, standing: Pass, password: str) -> None:
    """SMS d'accueil avec identifiants et lien vers le pass. Échec → warning."""
    if not member.phone_number:
        return

    message = " ".join([
        f"Bienvenue dans Umuganda SDA, {member.first_name}.",
        f"Connectez-vous sur {settings.FRONTEND_URL}/login avec votre numéro de téléphone.",
        f"Mot de passe : {password}.",
        f"Votre pass QR : {settings.FRONTEND_URL}/member/pass.",
    ])
    try:
        sms_service.send_sms(member.phone_number, message)
    except Exception as exc:
        logger.warning("Échec du SMS d'accueil du membre %s : %s", member.id, exc)
        return

    if sms_service.is_configured():
        standing.sms_sent_at = utcnow()
        db.commit()
        db.refresh(standing)


def list_members(
    db: Session,
    actor: Optional[Actor],
    district_id: Optional[uuid.UUID] = None,
    church_id: Optional[uuid.UUID] = None,
) -> List[MemberResponse]:
    """Membres du périmètre de l'acteur, triés par nom."""
    scope = build_list_scope(actor, district_id=district_id, church_id=church_id)

    stmt = (
        select(User)
        .join(Church, Church.id == User.church_id)
        .where(User.role == Role.MEMBER.value)
        .order_by(User.last_name, User.first_name)
    )
    stmt = apply_church_scope(stmt, scope)

    members = db.execute(stmt).scalars().all()
    return [MemberResponse.model_validate(m) for m in members]


def update_member(
    db: Session,
    actor: Optional[Actor],
    member_id: uuid.UUID,
    data: MemberUpdate,
) -> MemberResponse:
    actor = require_actor(actor)
    member = _get_member(db, member_id)
    _ensure_member_access(db, actor, member)

    update_data = data.model_dump(exclude_unset=True)
    if update_data.get("email"):
        update_data["email"] = update_data["email"].strip().lower()
    _check_unique_contacts(
        db,
        None,
        update_data.get("phone_number"),
        update_data.get("email"),
        exclude_id=member.id,
    )

    for field, value in update_data.items():
        setattr(member, field, value)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Email ou numéro de téléphone déjà utilisé.")

    db.refresh(member)
    return MemberResponse.model_validate(member)


def delete_member(db: Session, actor: Optional[Actor], member_id: uuid.UUID) -> None:
    """Supprime le membre et ses passes permanents (nouvelle et ancienne table)."""
    actor = require_actor(actor)
    member = _get_member(db, member_id)
    _ensure_member_access(db, actor, member)

    db.execute(delete(MemberPass).where(MemberPass.member_id == member.id))
    db.execute(
        delete(Pass).where(Pass.member_id == member.id, Pass.attendance_id.is_(None))
    )
    db.delete(member)
    db.commit()
    logger.info("Membre supprimé : %s", member_id)


def get_member_pass(db: Session, actor: Optional[Actor], member_id: uuid.UUID) -> MemberWithPass:
    """
    Pass permanent d'un membre : le membre lui-même ou un administrateur
    de son périmètre. Un ancien pass (member_passes) est recopié au passage.
    """
    actor = require_actor(actor)
    member = _get_member(db, member_id)
    _ensure_self_or_admin(db, actor, member)

    standing = pass_service.find_standing_pass(db, member.id)
    if standing is None:
        legacy = db.execute(
            select(MemberPass).where(MemberPass.member_id == member.id)
        ).scalars().first()
        if legacy is not None:
            standing = pass_service.materialize_legacy_pass(db, legacy)

    if standing is None:
        raise NotFoundError("Pass du membre introuvable.")

    return MemberWithPass(
        member=MemberResponse.model_validate(member),
        pass_=PassResponse.model_validate(standing),
    )


def get_member_attendance(
    db: Session,
    actor: Optional[Actor],
    member_id: uuid.UUID,
) -> List[AttendanceResponse]:
    """Historique des présences : le membre lui-même ou un administrateur de son périmètre."""
    actor = require_actor(actor)
    member = _get_member(db, member_id)
    _ensure_self_or_admin(db, actor, member)
    return attendance_service.list_member_attendance(db, member.id)

