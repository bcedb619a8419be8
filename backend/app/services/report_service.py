"""
Rapports de présence : totaux et répartition par église.
Mêmes règles de périmètre que le listage des présences.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from app.exceptions import BusinessRuleError, ForbiddenError
from app.models.attendance import AttendanceRecord
from app.models.enums import AttendanceStatus
from app.models.organisation import Church
from app.models.umuganda_session import UmugandaSession
from app.schemas.actor import Actor
from app.schemas.report import AttendanceSummary, ChurchAttendanceBreakdown
from app.services.access_service import apply_church_scope, build_list_scope, require_actor
from app.services.clock import as_utc
from app.services.rbac import can_view_reports


def _approved_count():
    return func.coalesce(
        func.sum(case((AttendanceRecord.status == AttendanceStatus.APPROVED.value, 1), else_=0)),
        0,
    )


def _scoped(stmt, actor, district_id, church_id, from_date, to_date):
    """Joint session + église, applique le périmètre et la fenêtre de dates (création)."""
    actor = require_actor(actor)
    if not can_view_reports(actor.role):
        raise ForbiddenError("Ce rôle ne peut pas consulter les rapports.")
    if from_date is not None and to_date is not None and as_utc(from_date) > as_utc(to_date):
        raise BusinessRuleError("La date de début doit précéder la date de fin.")

    scope = build_list_scope(actor, district_id=district_id, church_id=church_id)
    stmt = (
        stmt.select_from(AttendanceRecord)
        .join(UmugandaSession, UmugandaSession.id == AttendanceRecord.session_id)
        .join(Church, Church.id == UmugandaSession.church_id)
    )
    stmt = apply_church_scope(stmt, scope)
    if from_date is not None:
        stmt = stmt.where(AttendanceRecord.created_at >= as_utc(from_date))
    if to_date is not None:
        stmt = stmt.where(AttendanceRecord.created_at <= as_utc(to_date))
    return stmt


def get_attendance_summary(
    db: Session,
    actor: Optional[Actor],
    district_id: Optional[uuid.UUID] = None,
    church_id: Optional[uuid.UUID] = None,
    from_date: Optional[datetime] = None,
    to_date: Optional[datetime] = None,
) -> AttendanceSummary:
    stmt = _scoped(
        select(func.count(AttendanceRecord.id), _approved_count()),
        actor, district_id, church_id, from_date, to_date,
    )
    total, approved = db.execute(stmt).one()
    total = total or 0
    approved = approved or 0
    return AttendanceSummary(total=total, approved=approved, pending=total - approved)


def get_breakdown_by_church(
    db: Session,
    actor: Optional[Actor],
    district_id: Optional[uuid.UUID] = None,
    church_id: Optional[uuid.UUID] = None,
    from_date: Optional[datetime] = None,
    to_date: Optional[datetime] = None,
) -> List[ChurchAttendanceBreakdown]:
    stmt = _scoped(
        select(Church.id, Church.name, func.count(AttendanceRecord.id), _approved_count()),
        actor, district_id, church_id, from_date, to_date,
    )
    rows = db.execute(stmt.group_by(Church.id, Church.name).order_by(Church.name)).all()
    return [
        ChurchAttendanceBreakdown(
            church_id=cid,
            church_name=name,
            total=total,
            approved=approved,
            pending=total - approved,
        )
        for cid, name, total, approved in rows
    ]
