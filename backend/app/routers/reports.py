"""
Router des rapports de présence.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.routers.dependencies import get_current_actor
from app.schemas.actor import Actor
from app.schemas.report import AttendanceSummary, ChurchAttendanceBreakdown
from app.services import report_service

router = APIRouter(prefix="/api/v1/reports", tags=["Rapports"])


@router.get("/attendance", response_model=AttendanceSummary, summary="Synthèse des présences")
def attendance_summary(
    district_id: Optional[uuid.UUID] = None,
    church_id: Optional[uuid.UUID] = None,
    from_date: Optional[datetime] = None,
    to_date: Optional[datetime] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """Totaux (total, approuvées, en attente) sur le périmètre de l'acteur."""
    return report_service.get_attendance_summary(
        db, actor,
        district_id=district_id,
        church_id=church_id,
        from_date=from_date,
        to_date=to_date,
    )


@router.get(
    "/attendance/by-church",
    response_model=List[ChurchAttendanceBreakdown],
    summary="Présences par église",
)
def attendance_by_church(
    district_id: Optional[uuid.UUID] = None,
    church_id: Optional[uuid.UUID] = None,
    from_date: Optional[datetime] = None,
    to_date: Optional[datetime] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return report_service.get_breakdown_by_church(
        db, actor,
        district_id=district_id,
        church_id=church_id,
        from_date=from_date,
        to_date=to_date,
    )
