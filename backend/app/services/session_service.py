"""
Service métier pour les sessions de présence d'une église.
"""

import uuid
import logging
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.exceptions import ForbiddenError, NotFoundError
from app.models.attendance import AttendanceRecord
from app.models.enums import Role
from app.models.organisation import Church
from app.models.umuganda_session import UmugandaSession
from app.schemas.actor import Actor
from app.schemas.umuganda_session import SessionCreate, SessionResponse
from app.services.access_service import apply_church_scope, build_list_scope, require_actor
from app.services.clock import as_utc, local_day_bounds

logger = logging.getLogger(__name__)

# Thème des sessions créées automatiquement par les vérifications terrain
DAILY_SESSION_THEME = "Vérification terrain"


def _attendance_count():
    return (
        select(func.count(AttendanceRecord.id))
        .where(AttendanceRecord.session_id == UmugandaSession.id)
        .scalar_subquery()
    )


def _to_response(session: UmugandaSession, attendance_count: int) -> SessionResponse:
    return SessionResponse(
        id=session.id,
        church_id=session.church_id,
        date=session.date,
        theme=session.theme,
        created_by_id=session.created_by_id,
        created_at=session.created_at,
        attendance_count=attendance_count or 0,
    )


def list_sessions(
    db: Session,
    actor: Optional[Actor],
    district_id: Optional[uuid.UUID] = None,
    church_id: Optional[uuid.UUID] = None,
) -> List[SessionResponse]:
    """Sessions du périmètre de l'acteur, de la plus récente à la plus ancienne."""
    scope = build_list_scope(actor, district_id=district_id, church_id=church_id)

    stmt = (
        select(UmugandaSession, _attendance_count())
        .join(Church, Church.id == UmugandaSession.church_id)
        .order_by(UmugandaSession.date.desc())
    )
    stmt = apply_church_scope(stmt, scope)

    rows = db.execute(stmt).all()
    return [_to_response(session, count) for session, count in rows]


def create_session(db: Session, actor: Optional[Actor], data: SessionCreate) -> SessionResponse:
    """Crée une session pour l'église de l'administrateur connecté."""
    actor = require_actor(actor)
    if actor.role != Role.CHURCH_ADMIN:
        raise ForbiddenError("Seuls les administrateurs d'église peuvent créer des sessions.")
    if actor.church_id is None:
        raise ForbiddenError("Aucune église n'est rattachée à ce compte.")

    church = db.get(Church, actor.church_id)
    if church is None:
        raise NotFoundError("Église introuvable.")

    session = UmugandaSession(
        church_id=church.id,
        date=as_utc(data.date),
        theme=data.theme,
        created_by_id=actor.id,
    )
    db.add(session)
    db.commit()
    db.refresh(session)

    logger.info("Session créée : %s (église %s, %s)", session.id, church.id, session.date)
    return _to_response(session, 0)


def find_or_create_daily_session(
    db: Session,
    church_id: uuid.UUID,
    created_by_id: Optional[uuid.UUID] = None,
) -> UmugandaSession:
    """
    Session « du jour » d'une église : la première dont la date tombe dans
    [minuit, minuit suivant) en heure locale, sinon une nouvelle datée de minuit.

    Aucune contrainte d'unicité ici : deux vérifications simultanées peuvent
    créer deux sessions le même jour.
    """
    start, end = local_day_bounds()
    session = db.execute(
        select(UmugandaSession)
        .where(
            UmugandaSession.church_id == church_id,
            UmugandaSession.date >= start,
            UmugandaSession.date < end,
        )
        .order_by(UmugandaSession.date, UmugandaSession.created_at)
    ).scalars().first()

    if session is not None:
        return session

    session = UmugandaSession(
        church_id=church_id,
        date=start,
        theme=DAILY_SESSION_THEME,
        created_by_id=created_by_id,
    )
    db.add(session)
    db.commit()
    db.refresh(session)

    logger.info("Session du jour créée automatiquement : %s (église %s)", session.id, church_id)
    return session
