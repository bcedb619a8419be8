"""
Service métier pour les églises.
"""

import uuid
import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.exceptions import ForbiddenError, NotFoundError
from app.models.enums import Role
from app.models.organisation import Church, District
from app.schemas.actor import Actor
from app.schemas.organisation import ChurchCreate, ChurchResponse, ChurchUpdate
from app.services.access_service import (
    apply_church_scope,
    build_list_scope,
    require_actor,
    resolve_church,
    union_in_scope,
)

logger = logging.getLogger(__name__)


def _get_target_district(db: Session, actor: Actor, district_id: uuid.UUID) -> District:
    """District d'accueil d'une église créée ou déplacée (admin d'union ou de district)."""
    district = db.get(District, district_id)
    if district is None:
        raise NotFoundError("District introuvable.")

    if actor.role == Role.UNION_ADMIN:
        if not union_in_scope(actor, district.union_id):
            raise ForbiddenError("Ce district n'appartient pas à votre union.")
        return district
    if actor.role == Role.DISTRICT_ADMIN:
        if actor.district_id != district.id:
            raise ForbiddenError("Ce district n'est pas le vôtre.")
        return district
    raise ForbiddenError("Vous ne pouvez pas rattacher une église à un district.")


def list_churches(
    db: Session,
    actor: Optional[Actor],
    district_id: Optional[uuid.UUID] = None,
) -> List[ChurchResponse]:
    """
    Églises visibles par l'acteur.
    Un admin de district qui filtre sur un autre district reçoit un 403, pas une liste vide.
    """
    scope = build_list_scope(actor, district_id=district_id)
    stmt = apply_church_scope(select(Church).order_by(Church.name), scope)
    return [ChurchResponse.model_validate(c) for c in db.execute(stmt).scalars().all()]


def get_church(db: Session, actor: Optional[Actor], church_id: uuid.UUID) -> ChurchResponse:
    return ChurchResponse.model_validate(resolve_church(db, actor, church_id))


def create_church(db: Session, actor: Optional[Actor], data: ChurchCreate) -> ChurchResponse:
    actor = require_actor(actor)
    if actor.role not in (Role.UNION_ADMIN, Role.DISTRICT_ADMIN):
        raise ForbiddenError("Vous ne pouvez pas créer d'église.")

    district = _get_target_district(db, actor, data.district_id)
    church = Church(district_id=district.id, name=data.name, location=data.location)
    db.add(church)
    db.commit()
    db.refresh(church)

    logger.info("Église créée : %s (%s) dans le district %s", church.name, church.id, district.id)
    return ChurchResponse.model_validate(church)


def update_church(
    db: Session,
    actor: Optional[Actor],
    church_id: uuid.UUID,
    data: ChurchUpdate,
) -> ChurchResponse:
    """Tout admin du périmètre peut modifier ; seul un admin d'union ou de district peut déplacer."""
    church = resolve_church(db, actor, church_id)

    update_data = data.model_dump(exclude_unset=True)
    target_district = update_data.pop("district_id", None)
    if target_district is not None:
        church.district_id = _get_target_district(db, actor, target_district).id

    for field, value in update_data.items():
        setattr(church, field, value)

    db.commit()
    db.refresh(church)
    return ChurchResponse.model_validate(church)


def delete_church(db: Session, actor: Optional[Actor], church_id: uuid.UUID) -> None:
    actor = require_actor(actor)
    if actor.role not in (Role.UNION_ADMIN, Role.DISTRICT_ADMIN):
        raise ForbiddenError("Vous ne pouvez pas supprimer d'église.")
    church = resolve_church(db, actor, church_id)

    db.delete(church)
    db.commit()
    logger.info("Église supprimée : %s", church_id)
