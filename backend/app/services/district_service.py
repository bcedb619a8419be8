"""
Service métier pour les districts.
Lecture : admins d'union (dans leur union) et pasteur du district.
Écriture : admins d'union uniquement.
"""

import uuid
import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.exceptions import ForbiddenError, NotFoundError
from app.models.enums import Role
from app.models.organisation import District, Union
from app.schemas.actor import Actor
from app.schemas.organisation import DistrictCreate, DistrictResponse, DistrictUpdate
from app.services.access_service import require_actor, resolve_district, union_in_scope

logger = logging.getLogger(__name__)


def _ensure_union_admin(actor: Actor) -> None:
    if actor.role != Role.UNION_ADMIN:
        raise ForbiddenError("Seuls les administrateurs d'union peuvent modifier les districts.")


def _get_union_in_scope(db: Session, actor: Actor, union_id: uuid.UUID) -> Union:
    union = db.get(Union, union_id)
    if union is None:
        raise NotFoundError("Union introuvable.")
    if not union_in_scope(actor, union.id):
        raise ForbiddenError("Cette union est hors de votre périmètre.")
    return union


def list_districts(
    db: Session,
    actor: Optional[Actor],
    union_id: Optional[uuid.UUID] = None,
) -> List[DistrictResponse]:
    actor = require_actor(actor)

    if actor.role == Role.UNION_ADMIN:
        if union_id is not None and not union_in_scope(actor, union_id):
            raise ForbiddenError("Impossible de consulter des districts hors de votre union.")
        stmt = select(District).order_by(District.name)
        scoped_union = union_id or actor.union_id
        if scoped_union is not None:
            stmt = stmt.where(District.union_id == scoped_union)
        return [DistrictResponse.model_validate(d) for d in db.execute(stmt).scalars().all()]

    if actor.role == Role.DISTRICT_ADMIN:
        if actor.district_id is None:
            raise ForbiddenError("Aucun district n'est rattaché à ce compte.")
        district = db.get(District, actor.district_id)
        if district is None:
            raise NotFoundError("District introuvable.")
        return [DistrictResponse.model_validate(district)]

    raise ForbiddenError("Ce rôle ne peut pas consulter les districts.")


def get_district(db: Session, actor: Optional[Actor], district_id: uuid.UUID) -> DistrictResponse:
    return DistrictResponse.model_validate(resolve_district(db, actor, district_id))


def create_district(db: Session, actor: Optional[Actor], data: DistrictCreate) -> DistrictResponse:
    actor = require_actor(actor)
    _ensure_union_admin(actor)
    union = _get_union_in_scope(db, actor, data.union_id)

    district = District(union_id=union.id, name=data.name, location=data.location)
    db.add(district)
    db.commit()
    db.refresh(district)

    logger.info("District créé : %s (%s) dans l'union %s", district.name, district.id, union.id)
    return DistrictResponse.model_validate(district)


def update_district(
    db: Session,
    actor: Optional[Actor],
    district_id: uuid.UUID,
    data: DistrictUpdate,
) -> DistrictResponse:
    """Un changement d'union exige que l'union cible soit dans le périmètre."""
    actor = require_actor(actor)
    _ensure_union_admin(actor)
    district = resolve_district(db, actor, district_id)

    update_data = data.model_dump(exclude_unset=True)
    target_union = update_data.pop("union_id", None)
    if target_union is not None:
        district.union_id = _get_union_in_scope(db, actor, target_union).id

    for field, value in update_data.items():
        setattr(district, field, value)

    db.commit()
    db.refresh(district)
    return DistrictResponse.model_validate(district)


def delete_district(db: Session, actor: Optional[Actor], district_id: uuid.UUID) -> None:
    actor = require_actor(actor)
    _ensure_union_admin(actor)
    district = resolve_district(db, actor, district_id)

    db.delete(district)
    db.commit()
    logger.info("District supprimé : %s", district_id)
