"""
Modèle SQLAlchemy pour les utilisateurs (administrateurs, membres, vérificateurs).
Le placement organisationnel (union / district / église) dépend du rôle.
"""

import uuid
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, func
from sqlalchemy.dialects.postgresql import UUID

from app.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    national_id = Column(String(32), unique=True, nullable=True)   # Obligatoire pour les membres
    email = Column(String(255), unique=True, nullable=True)        # Obligatoire pour les administrateurs
    phone_number = Column(String(32), unique=True, nullable=True)
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    role = Column(String(30), nullable=False)  # UNION_ADMIN, DISTRICT_ADMIN, CHURCH_ADMIN, MEMBER, POLICE_VERIFIER

    union_id = Column(UUID(as_uuid=True), ForeignKey("unions.id", ondelete="SET NULL"), nullable=True)
    district_id = Column(UUID(as_uuid=True), ForeignKey("districts.id", ondelete="SET NULL"), nullable=True)
    church_id = Column(UUID(as_uuid=True), ForeignKey("churches.id", ondelete="SET NULL"), nullable=True)

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
