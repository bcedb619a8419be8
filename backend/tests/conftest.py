"""
Configuration partagée pour tous les tests.

- client : API avec get_db mocké (aucune connexion réelle à PostgreSQL) et
  acteur injecté via set_actor.
- db : base SQLite en mémoire créée depuis Base.metadata, pour les tests de
  services (contraintes d'unicité et transactions réelles).
"""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401 — enregistre toutes les tables
from app.database import Base, get_db
from app.main import app as fastapi_app
from app.models.enums import Role
from app.models.organisation import Church, District, Union
from app.routers.dependencies import get_current_actor

from factories import add_member, add_user, make_actor


@pytest.fixture
def client():
    """Client HTTP de test avec la BDD mockée (scheduler non démarré)."""
    mock_db = MagicMock()
    fastapi_app.dependency_overrides[get_db] = lambda: mock_db
    with patch("app.main.start_scheduler"), patch("app.main.stop_scheduler"):
        with TestClient(fastapi_app) as c:
            yield c
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def set_actor():
    """Injecte l'acteur courant des requêtes : set_actor(Role.CHURCH_ADMIN, church_id=...)."""
    def _set(role, **placement):
        actor = make_actor(role, **placement)
        fastapi_app.dependency_overrides[get_current_actor] = lambda: actor
        return actor
    return _set


@pytest.fixture
def db():
    """Session SQLAlchemy sur une base SQLite en mémoire, recréée pour chaque test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def org(db):
    """
    Hiérarchie de test : une union, deux districts, une église par district,
    leurs administrateurs, un vérificateur et un membre dans l'église principale.
    """
    union = Union(name="Union Rwanda Est")
    db.add(union)
    db.commit()

    district = District(union_id=union.id, name="District Kigali")
    other_district = District(union_id=union.id, name="District Musanze")
    db.add_all([district, other_district])
    db.commit()

    church = Church(district_id=district.id, name="Église Remera")
    other_church = Church(district_id=other_district.id, name="Église Musanze")
    db.add_all([church, other_church])
    db.commit()

    union_admin = add_user(db, Role.UNION_ADMIN, union=union, email="union@example.rw")
    district_admin = add_user(db, Role.DISTRICT_ADMIN, district=district, union=union, email="district@example.rw")
    church_admin = add_user(
        db, Role.CHURCH_ADMIN, church=church, district=district, union=union, email="church@example.rw",
    )
    other_church_admin = add_user(
        db, Role.CHURCH_ADMIN, church=other_church, district=other_district, union=union,
        email="church2@example.rw",
    )
    police = add_user(db, Role.POLICE_VERIFIER, email="police@example.rw")
    member = add_member(db, church, district, union, first_name="Alice", last_name="Uwase")

    return SimpleNamespace(
        union=union,
        district=district,
        other_district=other_district,
        church=church,
        other_church=other_church,
        union_admin=union_admin,
        district_admin=district_admin,
        church_admin=church_admin,
        other_church_admin=other_church_admin,
        police=police,
        member=member,
    )
