"""
Modèles SQLAlchemy pour les passes d'identité.
Nommé identity_pass pour éviter le conflit avec le mot-clé Python 'pass'.

- Pass : table principale. Lié à une présence (pass d'événement) ou, si
  attendance_id est NULL, pass permanent du membre.
- MemberPass : ancienne table des passes permanents, consultée en second
  recours lors de la vérification puis recopiée dans passes.
"""

import uuid
from sqlalchemy import Column, DateTime, ForeignKey, Index, String, Text, func
from sqlalchemy.dialects.postgresql import UUID

from app.database import Base


class Pass(Base):
    __tablename__ = "passes"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    token = Column(String(64), unique=True, nullable=False)
    qr_payload = Column(Text, nullable=False)  # data:image/png;base64,...

    # 1 pass max par présence
    attendance_id = Column(
        UUID(as_uuid=True),
        ForeignKey("attendance_records.id", ondelete="CASCADE"),
        unique=True,
        nullable=True,
    )
    member_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    # Champs dénormalisés, utilisés quand le pass n'est lié à aucune présence
    church_id = Column(UUID(as_uuid=True), ForeignKey("churches.id", ondelete="SET NULL"), nullable=True)
    session_date = Column(DateTime(timezone=True), nullable=True)

    expires_at = Column(DateTime(timezone=True), nullable=True)
    sms_sent_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # 1 pass permanent max par membre : index unique partiel (attendance_id IS NULL)
    __table_args__ = (
        Index(
            "uq_passes_standing_member",
            "member_id",
            unique=True,
            postgresql_where=attendance_id.is_(None),
            sqlite_where=attendance_id.is_(None),
        ),
    )


class MemberPass(Base):
    __tablename__ = "member_passes"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    member_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    token = Column(String(64), unique=True, nullable=False)
    qr_payload = Column(Text, nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    sms_sent_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
