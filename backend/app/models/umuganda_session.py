"""
Modèle SQLAlchemy pour les sessions de présence d'une église.
Nommé umuganda_session pour ne pas confondre avec la Session SQLAlchemy.
"""

import uuid
from sqlalchemy import Column, DateTime, ForeignKey, String, func
from sqlalchemy.dialects.postgresql import UUID

from app.database import Base


class UmugandaSession(Base):
    """Occasion de prise de présence, rattachée à une seule église."""
    __tablename__ = "umuganda_sessions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    church_id = Column(UUID(as_uuid=True), ForeignKey("churches.id", ondelete="CASCADE"), nullable=False)
    date = Column(DateTime(timezone=True), nullable=False)
    theme = Column(String(255), nullable=True)
    created_by_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
