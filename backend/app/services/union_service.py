"""
Service métier pour les unions (sommet de la hiérarchie) et leur tableau de bord.
"""

import uuid
import logging
from collections import Counter
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.exceptions import ConflictError, ForbiddenError
from app.models.attendance import AttendanceRecord
from app.models.enums import Role
from app.models.organisation import Church, District, Union
from app.models.umuganda_session import UmugandaSession
from app.models.user import User
from app.schemas.actor import Actor
from app.schemas.organisation import UnionCreate, UnionResponse
from app.schemas.report import ActivityItem, AttendanceTrendPoint, MemberGrowthPoint, UnionStats
from app.services.access_service import require_actor
from app.services.clock import as_utc, utcnow

logger = logging.getLogger(__name__)


def list_unions(db: Session, actor: Optional[Actor]) -> List[UnionResponse]:
    actor = require_actor(actor)
    if actor.role != Role.UNION_ADMIN:
        raise ForbiddenError("Seuls les administrateurs d'union peuvent consulter les unions.")

    unions = db.execute(select(Union).order_by(Union.name)).scalars().all()
    return [UnionResponse.model_validate(u) for u in unions]


def create_union(db: Session, actor: Optional[Actor], data: UnionCreate) -> UnionResponse:
    actor = require_actor(actor)
    if actor.role != Role.UNION_ADMIN:
        raise ForbiddenError("Seuls les administrateurs d'union peuvent créer des unions.")

    union = Union(name=data.name, description=data.description)
    db.add(union)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(f"Une union nommée '{data.name}' existe déjà.")

    db.refresh(union)
    logger.info("Union créée : %s (%s)", union.name, union.id)
    return UnionResponse.model_validate(union)


# ----------------------------------------------------------------------------
# Tableau de bord
# ----------------------------------------------------------------------------

MEMBER_GROWTH_DAYS = 30
ATTENDANCE_TREND_MONTHS = 6
RECENT_PER_KIND = 5
RECENT_ACTIVITY_LIMIT = 8


def _first_day_of_month(now: datetime, months_back: int) -> datetime:
    year, month = now.year, now.month - months_back
    while month <= 0:
        month += 12
        year -= 1
    return now.replace(year=year, month=month, day=1, hour=0, minute=0, second=0, microsecond=0)


def _member_growth(db: Session, union_id: uuid.UUID, now: datetime) -> List[MemberGrowthPoint]:
    """Inscriptions de membres des 30 derniers jours, en cumul par jour."""
    window_start = (now - timedelta(days=MEMBER_GROWTH_DAYS - 1)).replace(
        hour=0, minute=0, second=0, microsecond=0,
    )
    created = db.execute(
        select(User.created_at)
        .join(Church, Church.id == User.church_id)
        .join(District, District.id == Church.district_id)
        .where(
            District.union_id == union_id,
            User.role == Role.MEMBER.value,
            User.created_at >= window_start,
        )
    ).scalars().all()

    per_day = Counter(as_utc(c).strftime("%Y-%m-%d") for c in created)
    points, running = [], 0
    for day in sorted(per_day):
        running += per_day[day]
        points.append(MemberGrowthPoint(date=day, count=running))
    return points


def _attendance_trends(db: Session, union_id: uuid.UUID, now: datetime) -> List[AttendanceTrendPoint]:
    """Présences par mois de session sur les six derniers mois (mois courant inclus)."""
    window_start = _first_day_of_month(now, ATTENDANCE_TREND_MONTHS - 1)
    dates = db.execute(
        select(UmugandaSession.date)
        .join(AttendanceRecord, AttendanceRecord.session_id == UmugandaSession.id)
        .join(Church, Church.id == UmugandaSession.church_id)
        .join(District, District.id == Church.district_id)
        .where(District.union_id == union_id, UmugandaSession.date >= window_start)
    ).scalars().all()

    per_month = Counter(as_utc(d).strftime("%Y-%m") for d in dates)
    return [AttendanceTrendPoint(month=m, attendance=per_month[m]) for m in sorted(per_month)]


def _recent_activity(db: Session, union_id: uuid.UUID) -> List[ActivityItem]:
    items: List[ActivityItem] = []

    members = db.execute(
        select(User, Church.name)
        .join(Church, Church.id == User.church_id)
        .join(District, District.id == Church.district_id)
        .where(District.union_id == union_id, User.role == Role.MEMBER.value)
        .order_by(User.created_at.desc())
        .limit(RECENT_PER_KIND)
    ).all()
    for member, church_name in members:
        name = f"{member.first_name} {member.last_name}".strip() or "Membre"
        items.append(ActivityItem(
            id=f"member-{member.id}",
            type="member_added",
            description=f"{name} a rejoint {church_name}",
            timestamp=as_utc(member.created_at),
        ))

    attendances = db.execute(
        select(AttendanceRecord, UmugandaSession.date, Church.name)
        .join(UmugandaSession, UmugandaSession.id == AttendanceRecord.session_id)
        .join(Church, Church.id == UmugandaSession.church_id)
        .join(District, District.id == Church.district_id)
        .where(District.union_id == union_id)
        .order_by(AttendanceRecord.created_at.desc())
        .limit(RECENT_PER_KIND)
    ).all()
    for record, session_date, church_name in attendances:
        items.append(ActivityItem(
            id=f"attendance-{record.id}",
            type="attendance_recorded",
            description=f"Présence enregistrée pour {church_name} ({as_utc(session_date):%d/%m})",
            timestamp=as_utc(record.created_at),
        ))

    churches = db.execute(
        select(Church, District.name)
        .join(District, District.id == Church.district_id)
        .where(District.union_id == union_id)
        .order_by(Church.created_at.desc())
        .limit(RECENT_PER_KIND)
    ).all()
    for church, district_name in churches:
        items.append(ActivityItem(
            id=f"church-{church.id}",
            type="new_church",
            description=f"Église {church.name} ajoutée dans {district_name}",
            timestamp=as_utc(church.created_at),
        ))

    districts = db.execute(
        select(District)
        .where(District.union_id == union_id)
        .order_by(District.created_at.desc())
        .limit(RECENT_PER_KIND)
    ).scalars().all()
    for district in districts:
        items.append(ActivityItem(
            id=f"district-{district.id}",
            type="new_district",
            description=f"District {district.name} enregistré",
            timestamp=as_utc(district.created_at),
        ))

    items.sort(key=lambda item: item.timestamp, reverse=True)
    return items[:RECENT_ACTIVITY_LIMIT]


def get_union_stats(db: Session, actor: Optional[Actor], now: Optional[datetime] = None) -> UnionStats:
    """
    Statistiques de l'union de l'acteur : effectifs, activité récente,
    croissance des membres et tendance mensuelle des présences.
    Réservé aux administrateurs d'union rattachés à une union.
    """
    actor = require_actor(actor)
    if actor.role != Role.UNION_ADMIN:
        raise ForbiddenError("Seuls les administrateurs d'union peuvent consulter ces statistiques.")
    if actor.union_id is None:
        raise ForbiddenError("Aucune union n'est rattachée à ce compte.")

    union_id = actor.union_id
    now = now or utcnow()
    in_union = District.union_id == union_id

    total_members = db.execute(
        select(func.count(User.id))
        .join(Church, Church.id == User.church_id)
        .join(District, District.id == Church.district_id)
        .where(in_union, User.role == Role.MEMBER.value)
    ).scalar_one()
    total_districts = db.execute(select(func.count(District.id)).where(in_union)).scalar_one()
    total_churches = db.execute(
        select(func.count(Church.id)).join(District, District.id == Church.district_id).where(in_union)
    ).scalar_one()
    total_pastors = db.execute(
        select(func.count(User.id))
        .join(District, District.id == User.district_id)
        .where(in_union, User.role == Role.DISTRICT_ADMIN.value)
    ).scalar_one()

    return UnionStats(
        total_members=total_members,
        total_districts=total_districts,
        total_churches=total_churches,
        total_pastors=total_pastors,
        recent_activity=_recent_activity(db, union_id),
        member_growth=_member_growth(db, union_id, now),
        attendance_trends=_attendance_trends(db, union_id, now),
    )
