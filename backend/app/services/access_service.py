"""
Résolution du périmètre d'accès d'un acteur dans la hiérarchie
Union → District → Église.

Deux familles d'opérations :
- resolve_* : un identifiant cible → la ressource si l'acteur y a accès.
  Ressource absente → NotFoundError (404), hors périmètre → ForbiddenError (403).
- build_list_scope / apply_church_scope : filtres de listage. L'admin d'union
  n'est restreint qu'à son union (si renseignée) ; les admins de district et
  d'église sont forcés sur leur périmètre, et un filtre explicite vers un autre
  district / une autre église est refusé (403) au lieu d'être ignoré.
"""

import enum
import uuid
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.exceptions import ForbiddenError, NotFoundError, UnauthorizedError
from app.models.attendance import AttendanceRecord
from app.models.enums import Role
from app.models.organisation import Church, District
from app.models.umuganda_session import UmugandaSession
from app.schemas.actor import Actor
from app.services.rbac import ADMIN_ROLES, can_manage_attendance


class ResourceKind(str, enum.Enum):
    DISTRICT = "DISTRICT"
    CHURCH = "CHURCH"
    SESSION = "SESSION"
    ATTENDANCE = "ATTENDANCE"


@dataclass(frozen=True)
class ListScope:
    """Filtres de périmètre à appliquer à une requête de listage (None = pas de filtre)."""
    union_id: Optional[uuid.UUID] = None
    district_id: Optional[uuid.UUID] = None
    church_id: Optional[uuid.UUID] = None


def require_actor(actor: Optional[Actor]) -> Actor:
    """Rejette l'absence d'acteur avant toute vérification de périmètre."""
    if actor is None:
        raise UnauthorizedError("Authentification requise.")
    return actor


def union_in_scope(actor: Actor, union_id: Optional[uuid.UUID]) -> bool:
    """Un admin d'union sans union_id est super-admin (toutes les unions)."""
    return actor.union_id is None or actor.union_id == union_id


def _church_in_scope(actor: Actor, church: Church, district: District) -> bool:
    if actor.role == Role.UNION_ADMIN:
        return union_in_scope(actor, district.union_id)
    if actor.role == Role.DISTRICT_ADMIN:
        return actor.district_id is not None and actor.district_id == church.district_id
    if actor.role == Role.CHURCH_ADMIN:
        return actor.church_id is not None and actor.church_id == church.id
    return False


def resolve_district(db: Session, actor: Optional[Actor], district_id: uuid.UUID) -> District:
    actor = require_actor(actor)
    district = db.get(District, district_id)
    if district is None:
        raise NotFoundError("District introuvable.")

    if actor.role == Role.UNION_ADMIN and union_in_scope(actor, district.union_id):
        return district
    if actor.role == Role.DISTRICT_ADMIN and actor.district_id == district.id:
        return district

    raise ForbiddenError("Accès refusé à ce district.")


def resolve_church(db: Session, actor: Optional[Actor], church_id: uuid.UUID) -> Church:
    actor = require_actor(actor)
    church = db.get(Church, church_id)
    if church is None:
        raise NotFoundError("Église introuvable.")

    district = db.get(District, church.district_id)
    if district is None or not _church_in_scope(actor, church, district):
        raise ForbiddenError("Accès refusé à cette église.")
    return church


def _check_attendance_role(actor: Actor, for_write: bool) -> None:
    if for_write:
        if not can_manage_attendance(actor.role):
            raise ForbiddenError("Seuls les administrateurs d'église peuvent modifier les présences.")
    elif actor.role not in ADMIN_ROLES:
        raise ForbiddenError("Ce rôle ne peut pas consulter les présences.")


def resolve_session(
    db: Session,
    actor: Optional[Actor],
    session_id: uuid.UUID,
    for_write: bool = False,
) -> UmugandaSession:
    """Session résolue via son église ; écriture réservée à l'admin de l'église."""
    actor = require_actor(actor)
    session = db.get(UmugandaSession, session_id)
    if session is None:
        raise NotFoundError("Session introuvable.")

    _check_attendance_role(actor, for_write)
    church = db.get(Church, session.church_id)
    district = db.get(District, church.district_id) if church is not None else None
    if church is None or district is None or not _church_in_scope(actor, church, district):
        raise ForbiddenError("Accès refusé à cette session.")
    return session


def resolve_attendance(
    db: Session,
    actor: Optional[Actor],
    attendance_id: uuid.UUID,
    for_write: bool = False,
) -> AttendanceRecord:
    actor = require_actor(actor)
    record = db.get(AttendanceRecord, attendance_id)
    if record is None:
        raise NotFoundError("Présence introuvable.")

    try:
        resolve_session(db, actor, record.session_id, for_write=for_write)
    except ForbiddenError:
        raise ForbiddenError("Accès refusé à cette présence.") from None
    return record


_RESOLVERS = {
    ResourceKind.DISTRICT: lambda db, actor, rid, for_write: resolve_district(db, actor, rid),
    ResourceKind.CHURCH: lambda db, actor, rid, for_write: resolve_church(db, actor, rid),
    ResourceKind.SESSION: resolve_session,
    ResourceKind.ATTENDANCE: resolve_attendance,
}


def resolve_scope(
    db: Session,
    actor: Optional[Actor],
    kind: ResourceKind,
    resource_id: Optional[uuid.UUID],
    for_write: bool = False,
):
    """
    Point d'entrée générique. Identifiant omis (endpoints à filtre optionnel) →
    aucune vérification, renvoie None ; le listage applique build_list_scope.
    """
    actor = require_actor(actor)
    if resource_id is None:
        return None
    return _RESOLVERS[ResourceKind(kind)](db, actor, resource_id, for_write)


def build_list_scope(
    actor: Optional[Actor],
    district_id: Optional[uuid.UUID] = None,
    church_id: Optional[uuid.UUID] = None,
) -> ListScope:
    actor = require_actor(actor)

    if actor.role == Role.UNION_ADMIN:
        return ListScope(union_id=actor.union_id, district_id=district_id, church_id=church_id)

    if actor.role == Role.DISTRICT_ADMIN:
        if actor.district_id is None:
            raise ForbiddenError("Aucun district n'est rattaché à ce compte.")
        if district_id is not None and district_id != actor.district_id:
            raise ForbiddenError("Impossible de consulter des données hors de votre district.")
        return ListScope(district_id=actor.district_id, church_id=church_id)

    if actor.role == Role.CHURCH_ADMIN:
        if actor.church_id is None:
            raise ForbiddenError("Aucune église n'est rattachée à ce compte.")
        if church_id is not None and church_id != actor.church_id:
            raise ForbiddenError("Impossible de consulter des données hors de votre église.")
        # Filtre district ignoré : le périmètre est déjà réduit à l'église de l'acteur
        return ListScope(church_id=actor.church_id)

    raise ForbiddenError("Ce rôle ne peut pas consulter ces données.")


def apply_church_scope(stmt, scope: ListScope):
    """Ajoute les filtres de périmètre à une requête où la table churches est jointe."""
    if scope.union_id is not None:
        stmt = stmt.where(
            Church.district_id.in_(select(District.id).where(District.union_id == scope.union_id))
        )
    if scope.district_id is not None:
        stmt = stmt.where(Church.district_id == scope.district_id)
    if scope.church_id is not None:
        stmt = stmt.where(Church.id == scope.church_id)
    return stmt
