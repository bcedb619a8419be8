"""
Modèles SQLAlchemy de la hiérarchie organisationnelle : Union → District → Église.
Arbre strict : un district appartient à une seule union, une église à un seul district.
"""

import uuid
from sqlalchemy import Column, DateTime, ForeignKey, String, Text, func
from sqlalchemy.dialects.postgresql import UUID

from app.database import Base


class Union(Base):
    __tablename__ = "unions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(150), unique=True, nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class District(Base):
    __tablename__ = "districts"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    union_id = Column(UUID(as_uuid=True), ForeignKey("unions.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(150), nullable=False)
    location = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class Church(Base):
    __tablename__ = "churches"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    district_id = Column(UUID(as_uuid=True), ForeignKey("districts.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(150), nullable=False)
    location = Column(String(255), nullable=True)
    # users.church_id → churches.id existe déjà : use_alter casse le cycle de FK au CREATE TABLE
    district_pastor_id = Column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL", use_alter=True, name="fk_churches_district_pastor"),
        nullable=True,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
