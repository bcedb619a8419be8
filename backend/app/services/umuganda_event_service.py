"""
Service métier pour les événements Umuganda (périmètre : union) et leurs présences.

Les présences aux événements sont enregistrées par l'administrateur d'église
en scannant le pass d'un membre de son église. Une seule présence par
(événement, membre) : contrainte unique → ConflictError.
"""

import uuid
import logging
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.exceptions import ConflictError, ForbiddenError, NotFoundError
from app.models.enums import Role
from app.models.identity_pass import MemberPass, Pass
from app.models.organisation import Church, District
from app.models.umuganda_event import UmugandaEvent, UmugandaEventAttendance
from app.models.user import User
from app.schemas.actor import Actor
from app.schemas.umuganda_event import (
    EventAttendanceResponse,
    EventCheckIn,
    EventCreate,
    EventResponse,
    EventUpdate,
)
from app.services.access_service import require_actor
from app.services.clock import as_utc

logger = logging.getLogger(__name__)


def _actor_union_id(db: Session, actor: Actor) -> Optional[uuid.UUID]:
    """
    Union de rattachement de l'acteur, déduite de son district ou de son église.
    None pour un admin d'union sans union (accès à toutes les unions).
    """
    if actor.role == Role.UNION_ADMIN:
        return actor.union_id

    if actor.role == Role.DISTRICT_ADMIN:
        district = db.get(District, actor.district_id) if actor.district_id else None
        if district is None:
            raise ForbiddenError("Aucun district n'est rattaché à ce compte.")
        return district.union_id

    if actor.role == Role.CHURCH_ADMIN:
        church = db.get(Church, actor.church_id) if actor.church_id else None
        district = db.get(District, church.district_id) if church is not None else None
        if district is None:
            raise ForbiddenError("Aucune église n'est rattachée à ce compte.")
        return district.union_id

    raise ForbiddenError("Ce rôle ne peut pas accéder aux événements Umuganda.")


def _get_event_in_scope(db: Session, actor: Actor, event_id: uuid.UUID) -> UmugandaEvent:
    union_id = _actor_union_id(db, actor)
    event = db.get(UmugandaEvent, event_id)
    if event is None:
        raise NotFoundError("Événement Umuganda introuvable.")
    if union_id is not None and event.union_id != union_id:
        raise ForbiddenError("Cet événement appartient à une autre union.")
    return event


def _ensure_union_admin_with_union(actor: Actor) -> uuid.UUID:
    if actor.role != Role.UNION_ADMIN:
        raise ForbiddenError("Seuls les administrateurs d'union peuvent gérer les événements.")
    if actor.union_id is None:
        raise ForbiddenError("Aucune union n'est rattachée à ce compte.")
    return actor.union_id


def _attendance_count():
    return (
        select(func.count(UmugandaEventAttendance.id))
        .where(UmugandaEventAttendance.event_id == UmugandaEvent.id)
        .scalar_subquery()
    )


def _to_response(event: UmugandaEvent, attendance_count: int = 0) -> EventResponse:
    return EventResponse(
        id=event.id,
        union_id=event.union_id,
        date=event.date,
        theme=event.theme,
        location=event.location,
        created_by_id=event.created_by_id,
        created_at=event.created_at,
        attendance_count=attendance_count or 0,
    )


def _count_for(db: Session, event_id: uuid.UUID) -> int:
    return db.execute(
        select(func.count())
        .select_from(UmugandaEventAttendance)
        .where(UmugandaEventAttendance.event_id == event_id)
    ).scalar() or 0


def list_events(db: Session, actor: Optional[Actor]) -> List[EventResponse]:
    """Événements de l'union de l'acteur, du plus récent au plus ancien."""
    actor = require_actor(actor)
    union_id = _actor_union_id(db, actor)

    stmt = select(UmugandaEvent, _attendance_count()).order_by(UmugandaEvent.date.desc())
    if union_id is not None:
        stmt = stmt.where(UmugandaEvent.union_id == union_id)

    return [_to_response(event, count) for event, count in db.execute(stmt).all()]


def get_event(db: Session, actor: Optional[Actor], event_id: uuid.UUID) -> EventResponse:
    actor = require_actor(actor)
    event = _get_event_in_scope(db, actor, event_id)
    return _to_response(event, _count_for(db, event.id))


def create_event(db: Session, actor: Optional[Actor], data: EventCreate) -> EventResponse:
    actor = require_actor(actor)
    union_id = _ensure_union_admin_with_union(actor)

    event = UmugandaEvent(
        union_id=union_id,
        date=as_utc(data.date),
        theme=data.theme,
        location=data.location,
        created_by_id=actor.id,
    )
    db.add(event)
    db.commit()
    db.refresh(event)

    logger.info("Événement Umuganda créé : %s (union %s, %s)", event.id, union_id, event.date)
    return _to_response(event)


def update_event(
    db: Session,
    actor: Optional[Actor],
    event_id: uuid.UUID,
    data: EventUpdate,
) -> EventResponse:
    actor = require_actor(actor)
    _ensure_union_admin_with_union(actor)
    event = _get_event_in_scope(db, actor, event_id)

    update_data = data.model_dump(exclude_unset=True)
    if update_data.get("date") is not None:
        update_data["date"] = as_utc(update_data["date"])
    for field, value in update_data.items():
        setattr(event, field, value)

    db.commit()
    db.refresh(event)
    return _to_response(event, _count_for(db, event.id))


def delete_event(db: Session, actor: Optional[Actor], event_id: uuid.UUID) -> None:
    actor = require_actor(actor)
    _ensure_union_admin_with_union(actor)
    event = _get_event_in_scope(db, actor, event_id)

    db.delete(event)
    db.commit()
    logger.info("Événement Umuganda supprimé : %s", event_id)


def list_event_attendance(
    db: Session,
    actor: Optional[Actor],
    event_id: uuid.UUID,
    church_id: Optional[uuid.UUID] = None,
) -> List[EventAttendanceResponse]:
    """Un admin d'église ne voit que les présences de sa propre église."""
    actor = require_actor(actor)
    event = _get_event_in_scope(db, actor, event_id)

    stmt = (
        select(UmugandaEventAttendance)
        .where(UmugandaEventAttendance.event_id == event.id)
        .order_by(UmugandaEventAttendance.checked_in_at.desc())
    )
    if actor.role == Role.CHURCH_ADMIN:
        stmt = stmt.where(UmugandaEventAttendance.church_id == actor.church_id)
    elif church_id is not None:
        stmt = stmt.where(UmugandaEventAttendance.church_id == church_id)

    records = db.execute(stmt).scalars().all()
    return [EventAttendanceResponse.model_validate(r) for r in records]


def _member_id_from_token(db: Session, token: str) -> uuid.UUID:
    """Token de pass → membre : table passes, puis ancienne table member_passes."""
    member_id = db.execute(select(Pass.member_id).where(Pass.token == token)).scalar()
    if member_id is None:
        member_id = db.execute(
            select(MemberPass.member_id).where(MemberPass.token == token)
        ).scalar()
    if member_id is None:
        raise NotFoundError("Pass inconnu.")
    return member_id


def check_in(
    db: Session,
    actor: Optional[Actor],
    event_id: uuid.UUID,
    data: EventCheckIn,
) -> EventAttendanceResponse:
    """
    Enregistre la présence d'un membre à un événement par scan de son pass.

    Validations :
    1. L'acteur est admin d'église et l'événement est dans son union
    2. Le token correspond à un membre de son église
    3. Pas de doublon (événement, membre)
    """
    actor = require_actor(actor)
    if actor.role != Role.CHURCH_ADMIN:
        raise ForbiddenError("Seuls les administrateurs d'église peuvent enregistrer les présences.")
    event = _get_event_in_scope(db, actor, event_id)

    member = db.get(User, _member_id_from_token(db, data.token))
    if member is None or member.role != Role.MEMBER:
        raise NotFoundError("Membre introuvable.")
    if member.church_id != actor.church_id:
        raise ForbiddenError("Ce membre appartient à une autre église.")

    record = UmugandaEventAttendance(event_id=event.id, member_id=member.id, church_id=actor.church_id)
    db.add(record)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("La présence de ce membre est déjà enregistrée pour cet événement.")

    db.refresh(record)
    logger.info("Présence à l'événement %s : membre %s", event.id, member.id)
    return EventAttendanceResponse.model_validate(record)
