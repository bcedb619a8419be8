"""
Service métier pour les comptes administrateurs :
- administrateurs d'église (CHURCH_ADMIN), gérés par les admins d'union et de district
- pasteurs de district (DISTRICT_ADMIN), gérés par les admins d'union

Le mot de passe initial est généré ici et renvoyé une seule fois à la création.
"""

import secrets
import uuid
import logging
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.exceptions import ConflictError, ForbiddenError, NotFoundError
from app.models.enums import Role
from app.models.organisation import Church, District
from app.models.user import User
from app.schemas.actor import Actor
from app.schemas.admin_user import (
    AdminCreateResult,
    AdminResponse,
    ChurchAdminCreate,
    ChurchAdminUpdate,
    DistrictPastorCreate,
    DistrictPastorResponse,
    DistrictPastorUpdate,
)
from app.schemas.organisation import ChurchSummary
from app.services.access_service import require_actor, resolve_church, union_in_scope
from app.services.auth_service import hash_password
from app.services.rbac import can_create_role

logger = logging.getLogger(__name__)


def generate_initial_password() -> str:
    return secrets.token_urlsafe(8)


def _ensure_unique_contacts(
    db: Session,
    email: Optional[str],
    phone_number: Optional[str],
    exclude_id: Optional[uuid.UUID] = None,
) -> None:
    if email:
        stmt = select(User.id).where(User.email == email)
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        if db.execute(stmt).first() is not None:
            raise ConflictError("Email déjà utilisé.")
    if phone_number:
        stmt = select(User.id).where(User.phone_number == phone_number)
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        if db.execute(stmt).first() is not None:
            raise ConflictError("Numéro de téléphone déjà utilisé.")


def _commit_user(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Email ou numéro de téléphone déjà utilisé.")


# ============================================================================
# Administrateurs d'église
# ============================================================================

def _ensure_can_manage_church_admins(actor: Actor) -> None:
    if actor.role not in (Role.UNION_ADMIN, Role.DISTRICT_ADMIN):
        raise ForbiddenError("Vous ne pouvez pas gérer les administrateurs d'église.")


def _ensure_admin_in_scope(actor: Actor, admin: User) -> None:
    if actor.role == Role.UNION_ADMIN:
        if admin.union_id is not None and not union_in_scope(actor, admin.union_id):
            raise ForbiddenError("Cet administrateur appartient à une autre union.")
        return
    if actor.district_id is None or actor.district_id != admin.district_id:
        raise ForbiddenError("Cet administrateur appartient à un autre district.")


def _get_church_admin(db: Session, admin_id: uuid.UUID) -> User:
    admin = db.get(User, admin_id)
    if admin is None or admin.role != Role.CHURCH_ADMIN:
        raise NotFoundError("Administrateur d'église introuvable.")
    return admin


def list_church_admins(
    db: Session,
    actor: Optional[Actor],
    district_id: Optional[uuid.UUID] = None,
    church_id: Optional[uuid.UUID] = None,
) -> List[AdminResponse]:
    actor = require_actor(actor)
    _ensure_can_manage_church_admins(actor)

    stmt = select(User).where(User.role == Role.CHURCH_ADMIN.value)
    if church_id is not None:
        stmt = stmt.where(User.church_id == church_id)

    if actor.role == Role.UNION_ADMIN:
        if actor.union_id is not None:
            stmt = stmt.where(User.union_id == actor.union_id)
        if district_id is not None:
            stmt = stmt.where(User.district_id == district_id)
    else:
        if actor.district_id is None:
            raise ForbiddenError("Aucun district n'est rattaché à ce compte.")
        if district_id is not None and district_id != actor.district_id:
            raise ForbiddenError("Impossible de consulter des données hors de votre district.")
        stmt = stmt.where(User.district_id == actor.district_id)

    admins = db.execute(stmt.order_by(User.last_name, User.first_name)).scalars().all()
    return [AdminResponse.model_validate(a) for a in admins]


def create_church_admin(db: Session, actor: Optional[Actor], data: ChurchAdminCreate) -> AdminCreateResult:
    """
    Crée un administrateur d'église.
    L'échelle de création réserve cette opération aux admins de district ;
    l'église cible doit être dans leur périmètre.
    """
    actor = require_actor(actor)
    if not can_create_role(actor.role, Role.CHURCH_ADMIN):
        raise ForbiddenError("Seuls les pasteurs de district peuvent créer des administrateurs d'église.")

    church = resolve_church(db, actor, data.church_id)
    district = db.get(District, church.district_id)
    _ensure_unique_contacts(db, data.email, data.phone_number)

    initial_password = generate_initial_password()
    admin = User(
        first_name=data.first_name,
        last_name=data.last_name,
        phone_number=data.phone_number,
        email=data.email,
        password_hash=hash_password(initial_password),
        role=Role.CHURCH_ADMIN.value,
        union_id=district.union_id,
        district_id=church.district_id,
        church_id=church.id,
        is_active=True,
    )
    db.add(admin)
    _commit_user(db)
    db.refresh(admin)

    logger.info("Administrateur d'église créé : %s (église %s)", admin.id, church.id)
    return AdminCreateResult(admin=AdminResponse.model_validate(admin), initial_password=initial_password)


def update_church_admin(
    db: Session,
    actor: Optional[Actor],
    admin_id: uuid.UUID,
    data: ChurchAdminUpdate,
) -> AdminResponse:
    actor = require_actor(actor)
    _ensure_can_manage_church_admins(actor)
    admin = _get_church_admin(db, admin_id)
    _ensure_admin_in_scope(actor, admin)

    update_data = data.model_dump(exclude_unset=True)
    church_id = update_data.pop("church_id", None)
    if church_id is not None:
        church = resolve_church(db, actor, church_id)
        district = db.get(District, church.district_id)
        admin.church_id = church.id
        admin.district_id = church.district_id
        admin.union_id = district.union_id

    if update_data.get("email"):
        update_data["email"] = update_data["email"].strip().lower()
    _ensure_unique_contacts(db, update_data.get("email"), update_data.get("phone_number"), exclude_id=admin.id)

    for field, value in update_data.items():
        setattr(admin, field, value)

    _commit_user(db)
    db.refresh(admin)
    return AdminResponse.model_validate(admin)


def delete_church_admin(db: Session, actor: Optional[Actor], admin_id: uuid.UUID) -> None:
    actor = require_actor(actor)
    _ensure_can_manage_church_admins(actor)
    admin = _get_church_admin(db, admin_id)
    _ensure_admin_in_scope(actor, admin)

    db.delete(admin)
    db.commit()
    logger.info("Administrateur d'église supprimé : %s", admin_id)


# ============================================================================
# Pasteurs de district
# ============================================================================

def _ensure_union_admin(actor: Actor) -> None:
    if actor.role != Role.UNION_ADMIN:
        raise ForbiddenError("Seuls les administrateurs d'union peuvent gérer les pasteurs de district.")


def _get_pastor(db: Session, actor: Actor, pastor_id: uuid.UUID) -> User:
    pastor = db.get(User, pastor_id)
    if pastor is None or pastor.role != Role.DISTRICT_ADMIN:
        raise NotFoundError("Pasteur de district introuvable.")
    if pastor.union_id is not None and not union_in_scope(actor, pastor.union_id):
        raise ForbiddenError("Ce pasteur appartient à une autre union.")
    return pastor


def _get_district_in_union(db: Session, actor: Actor, district_id: uuid.UUID) -> District:
    district = db.get(District, district_id)
    if district is None:
        raise NotFoundError("District introuvable.")
    if not union_in_scope(actor, district.union_id):
        raise ForbiddenError("Ce district n'appartient pas à votre union.")
    return district


def _to_pastor_response(db: Session, pastor: User) -> DistrictPastorResponse:
    churches = db.execute(
        select(Church)
        .where(Church.district_pastor_id == pastor.id)
        .order_by(Church.name)
    ).scalars().all()
    data = AdminResponse.model_validate(pastor).model_dump()
    return DistrictPastorResponse(
        **data,
        churches=[ChurchSummary.model_validate(c) for c in churches],
    )


def list_district_pastors(
    db: Session,
    actor: Optional[Actor],
    district_id: Optional[uuid.UUID] = None,
) -> List[DistrictPastorResponse]:
    actor = require_actor(actor)
    _ensure_union_admin(actor)

    stmt = select(User).where(User.role == Role.DISTRICT_ADMIN.value)
    if actor.union_id is not None:
        stmt = stmt.where(User.union_id == actor.union_id)
    if district_id is not None:
        stmt = stmt.where(User.district_id == district_id)

    pastors = db.execute(stmt.order_by(User.last_name, User.first_name)).scalars().all()
    return [_to_pastor_response(db, p) for p in pastors]


def create_district_pastor(db: Session, actor: Optional[Actor], data: DistrictPastorCreate) -> AdminCreateResult:
    actor = require_actor(actor)
    if not can_create_role(actor.role, Role.DISTRICT_ADMIN):
        raise ForbiddenError("Seuls les administrateurs d'union peuvent créer des pasteurs de district.")

    district = _get_district_in_union(db, actor, data.district_id)
    _ensure_unique_contacts(db, data.email, data.phone_number)

    initial_password = generate_initial_password()
    pastor = User(
        first_name=data.first_name,
        last_name=data.last_name,
        phone_number=data.phone_number,
        email=data.email,
        password_hash=hash_password(initial_password),
        role=Role.DISTRICT_ADMIN.value,
        union_id=district.union_id,
        district_id=district.id,
        is_active=True,
    )
    db.add(pastor)
    _commit_user(db)
    db.refresh(pastor)

    logger.info("Pasteur de district créé : %s (district %s)", pastor.id, district.id)
    return AdminCreateResult(admin=AdminResponse.model_validate(pastor), initial_password=initial_password)


def update_district_pastor(
    db: Session,
    actor: Optional[Actor],
    pastor_id: uuid.UUID,
    data: DistrictPastorUpdate,
) -> DistrictPastorResponse:
    """Un district_id explicitement null détache le pasteur de son district."""
    actor = require_actor(actor)
    _ensure_union_admin(actor)
    pastor = _get_pastor(db, actor, pastor_id)

    update_data = data.model_dump(exclude_unset=True)
    if "district_id" in data.model_fields_set:
        district_id = update_data.pop("district_id")
        if district_id is None:
            pastor.district_id = None
        else:
            district = _get_district_in_union(db, actor, district_id)
            pastor.district_id = district.id
            pastor.union_id = district.union_id

    if update_data.get("email"):
        update_data["email"] = update_data["email"].strip().lower()
    _ensure_unique_contacts(db, update_data.get("email"), update_data.get("phone_number"), exclude_id=pastor.id)

    for field, value in update_data.items():
        setattr(pastor, field, value)

    _commit_user(db)
    db.refresh(pastor)
    return _to_pastor_response(db, pastor)


def assign_churches(
    db: Session,
    actor: Optional[Actor],
    pastor_id: uuid.UUID,
    church_ids: List[uuid.UUID],
) -> DistrictPastorResponse:
    """
    Remplace la liste des églises d'un pasteur.

    Détacher les anciennes églises et rattacher les nouvelles se fait dans une
    seule transaction : en cas d'échec, aucune église ne reste sans pasteur.
    """
    actor = require_actor(actor)
    _ensure_union_admin(actor)
    pastor = _get_pastor(db, actor, pastor_id)

    if pastor.district_id is None:
        raise ConflictError("Rattachez d'abord le pasteur à un district.")

    wanted = set(church_ids)
    churches = []
    if wanted:
        churches = db.execute(select(Church).where(Church.id.in_(wanted))).scalars().all()
    if len(churches) != len(wanted):
        raise NotFoundError("Une ou plusieurs églises sont introuvables.")
    if any(c.district_id != pastor.district_id for c in churches):
        raise ConflictError("Toutes les églises doivent appartenir au district du pasteur.")

    detach = update(Church).where(Church.district_pastor_id == pastor.id)
    if wanted:
        detach = detach.where(Church.id.not_in(wanted))

    try:
        db.execute(detach.values(district_pastor_id=None).execution_options(synchronize_session=False))
        if wanted:
            db.execute(
                update(Church)
                .where(Church.id.in_(wanted))
                .values(district_pastor_id=pastor.id)
                .execution_options(synchronize_session=False)
            )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    db.expire_all()
    logger.info("Pasteur %s : %d église(s) affectée(s)", pastor.id, len(wanted))
    return _to_pastor_response(db, pastor)


def delete_district_pastor(db: Session, actor: Optional[Actor], pastor_id: uuid.UUID) -> None:
    actor = require_actor(actor)
    _ensure_union_admin(actor)
    pastor = _get_pastor(db, actor, pastor_id)

    # Les églises gardent leur district ; seul le lien vers le pasteur est retiré
    db.execute(
        update(Church)
        .where(Church.district_pastor_id == pastor.id)
        .values(district_pastor_id=None)
        .execution_options(synchronize_session=False)
    )
    db.delete(pastor)
    db.commit()
    logger.info("Pasteur de district supprimé : %s", pastor_id)
