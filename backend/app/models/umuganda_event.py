"""
Modèles SQLAlchemy pour les événements Umuganda (périmètre : une union)
et leurs présences, enregistrées par scan du pass d'un membre.
"""

import uuid
from sqlalchemy import Column, DateTime, ForeignKey, String, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID

from app.database import Base


class UmugandaEvent(Base):
    __tablename__ = "umuganda_events"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    union_id = Column(UUID(as_uuid=True), ForeignKey("unions.id", ondelete="CASCADE"), nullable=False)
    date = Column(DateTime(timezone=True), nullable=False)
    theme = Column(String(255), nullable=True)
    location = Column(String(255), nullable=True)
    created_by_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class UmugandaEventAttendance(Base):
    """Présence d'un membre à un événement — unique par (event_id, member_id)."""
    __tablename__ = "umuganda_event_attendance"
    __table_args__ = (
        UniqueConstraint("event_id", "member_id", name="uq_event_attendance_event_member"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    event_id = Column(UUID(as_uuid=True), ForeignKey("umuganda_events.id", ondelete="CASCADE"), nullable=False)
    member_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    church_id = Column(UUID(as_uuid=True), ForeignKey("churches.id", ondelete="CASCADE"), nullable=False)
    checked_in_at = Column(DateTime(timezone=True), server_default=func.now())
