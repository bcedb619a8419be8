"""
Tests d'intégration API pour la hiérarchie, les sessions, les administrateurs,
les événements Umuganda et les rapports.
"""

import uuid
from datetime import datetime, timezone
from unittest.mock import patch

from app.exceptions import ConflictError, ForbiddenError, NotFoundError
from app.models.enums import Role
from app.schemas.admin_user import AdminCreateResult, AdminResponse, DistrictPastorResponse
from app.schemas.organisation import ChurchResponse, ChurchSummary, DistrictResponse
from app.schemas.report import (
    ActivityItem,
    AttendanceSummary,
    AttendanceTrendPoint,
    ChurchAttendanceBreakdown,
    MemberGrowthPoint,
    UnionStats,
)
from app.schemas.umuganda_event import EventAttendanceResponse, EventResponse
from app.schemas.umuganda_session import SessionResponse

NOW = datetime(2026, 10, 18, 8, 0, tzinfo=timezone.utc)


def make_admin_response(role="CHURCH_ADMIN", **kwargs) -> AdminResponse:
    return AdminResponse(
        id=kwargs.get("id", uuid.uuid4()),
        first_name="Eric",
        last_name="Habimana",
        email="eric@example.rw",
        phone_number="+250788111222",
        role=role,
        union_id=None,
        district_id=kwargs.get("district_id"),
        church_id=kwargs.get("church_id"),
        is_active=True,
        created_at=NOW,
    )


# ============================================================
# Santé
# ============================================================

def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


# ============================================================
# Unions
# ============================================================

def test_tableau_de_bord_union(client, set_actor):
    set_actor(Role.UNION_ADMIN, union_id=uuid.uuid4())
    with patch("app.routers.unions.union_service.get_union_stats") as mock:
        mock.return_value = UnionStats(
            total_members=12, total_districts=2, total_churches=5, total_pastors=2,
            recent_activity=[
                ActivityItem(
                    id="district-1", type="new_district", description="District Kigali enregistré", timestamp=NOW,
                ),
            ],
            member_growth=[MemberGrowthPoint(date="2026-10-18", count=12)],
            attendance_trends=[AttendanceTrendPoint(month="2026-10", attendance=40)],
        )
        response = client.get("/api/v1/unions/stats")

    assert response.status_code == 200
    body = response.json()
    assert body["total_members"] == 12
    assert body["recent_activity"][0]["type"] == "new_district"
    assert body["attendance_trends"] == [{"month": "2026-10", "attendance": 40}]


def test_tableau_de_bord_union_pasteur_403(client, set_actor):
    set_actor(Role.DISTRICT_ADMIN, district_id=uuid.uuid4())
    with patch("app.routers.unions.union_service.get_union_stats") as mock:
        mock.side_effect = ForbiddenError("Seuls les administrateurs d'union peuvent consulter ces statistiques.")
        response = client.get("/api/v1/unions/stats")

    assert response.status_code == 403


# ============================================================
# Districts / Églises
# ============================================================

def test_districts_hors_union_403(client, set_actor):
    set_actor(Role.UNION_ADMIN, union_id=uuid.uuid4())
    with patch("app.routers.districts.district_service.list_districts") as mock:
        mock.side_effect = ForbiddenError("Impossible de consulter des districts hors de votre union.")
        response = client.get(f"/api/v1/districts?union_id={uuid.uuid4()}")

    assert response.status_code == 403


def test_detail_district(client, set_actor):
    set_actor(Role.DISTRICT_ADMIN, district_id=uuid.uuid4())
    district_id = uuid.uuid4()
    with patch("app.routers.districts.district_service.get_district") as mock:
        mock.return_value = DistrictResponse(
            id=district_id, union_id=uuid.uuid4(), name="District Kigali", location=None, created_at=NOW,
        )
        response = client.get(f"/api/v1/districts/{district_id}")

    assert response.status_code == 200
    assert response.json()["name"] == "District Kigali"


def test_eglise_introuvable_404(client, set_actor):
    set_actor(Role.UNION_ADMIN)
    with patch("app.routers.churches.church_service.get_church") as mock:
        mock.side_effect = NotFoundError("Église introuvable.")
        response = client.get(f"/api/v1/churches/{uuid.uuid4()}")

    assert response.status_code == 404


def test_creation_eglise_201(client, set_actor):
    set_actor(Role.DISTRICT_ADMIN, district_id=uuid.uuid4())
    district_id = uuid.uuid4()
    with patch("app.routers.churches.church_service.create_church") as mock:
        mock.return_value = ChurchResponse(
            id=uuid.uuid4(), district_id=district_id, name="Église Kacyiru",
            location=None, district_pastor_id=None, created_at=NOW,
        )
        response = client.post("/api/v1/churches", json={"district_id": str(district_id), "name": "Église Kacyiru"})

    assert response.status_code == 201


def test_creation_eglise_nom_vide_422(client, set_actor):
    set_actor(Role.DISTRICT_ADMIN, district_id=uuid.uuid4())
    response = client.post("/api/v1/churches", json={"district_id": str(uuid.uuid4()), "name": "  "})
    assert response.status_code == 422


# ============================================================
# Sessions
# ============================================================

def test_creation_session(client, set_actor):
    church_id = uuid.uuid4()
    set_actor(Role.CHURCH_ADMIN, church_id=church_id)
    with patch("app.routers.sessions.session_service.create_session") as mock:
        mock.return_value = SessionResponse(
            id=uuid.uuid4(), church_id=church_id, date=NOW, theme="Sabbat",
            created_by_id=None, created_at=NOW, attendance_count=0,
        )
        response = client.post("/api/v1/sessions", json={"date": NOW.isoformat(), "theme": "Sabbat"})

    assert response.status_code == 201
    assert response.json()["church_id"] == str(church_id)


# ============================================================
# Administrateurs
# ============================================================

def test_creation_admin_eglise_renvoie_le_mot_de_passe(client, set_actor):
    set_actor(Role.DISTRICT_ADMIN, district_id=uuid.uuid4())
    with patch("app.routers.church_admins.admin_service.create_church_admin") as mock:
        mock.return_value = AdminCreateResult(admin=make_admin_response(), initial_password="Xy12abCD")
        response = client.post(
            "/api/v1/church-admins",
            json={
                "first_name": "Eric",
                "last_name": "Habimana",
                "phone_number": "+250788111222",
                "email": "eric@example.rw",
                "church_id": str(uuid.uuid4()),
            },
        )

    assert response.status_code == 201
    assert response.json()["initial_password"] == "Xy12abCD"


def test_affectation_eglises(client, set_actor):
    set_actor(Role.UNION_ADMIN)
    pastor_id, church_id = uuid.uuid4(), uuid.uuid4()
    with patch("app.routers.district_pastors.admin_service.assign_churches") as mock:
        data = make_admin_response(role="DISTRICT_ADMIN", id=pastor_id).model_dump()
        mock.return_value = DistrictPastorResponse(
            **data, churches=[ChurchSummary(id=church_id, name="Église Remera")],
        )
        response = client.put(
            f"/api/v1/district-pastors/{pastor_id}/churches",
            json={"church_ids": [str(church_id)]},
        )

    assert response.status_code == 200
    assert response.json()["churches"][0]["id"] == str(church_id)
    assert mock.call_args.args[3] == [church_id]


def test_affectation_autre_district_409(client, set_actor):
    set_actor(Role.UNION_ADMIN)
    with patch("app.routers.district_pastors.admin_service.assign_churches") as mock:
        mock.side_effect = ConflictError("Toutes les églises doivent appartenir au district du pasteur.")
        response = client.put(
            f"/api/v1/district-pastors/{uuid.uuid4()}/churches",
            json={"church_ids": [str(uuid.uuid4())]},
        )

    assert response.status_code == 409


# ============================================================
# Événements Umuganda
# ============================================================

def test_liste_evenements(client, set_actor):
    set_actor(Role.CHURCH_ADMIN, church_id=uuid.uuid4())
    with patch("app.routers.umuganda_events.umuganda_event_service.list_events") as mock:
        mock.return_value = [
            EventResponse(
                id=uuid.uuid4(), union_id=uuid.uuid4(), date=NOW, theme="Nettoyage",
                location=None, created_by_id=None, created_at=NOW, attendance_count=3,
            )
        ]
        response = client.get("/api/v1/umuganda-events")

    assert response.status_code == 200
    assert response.json()[0]["attendance_count"] == 3


def test_scan_evenement_201(client, set_actor):
    church_id = uuid.uuid4()
    set_actor(Role.CHURCH_ADMIN, church_id=church_id)
    event_id = uuid.uuid4()
    with patch("app.routers.umuganda_events.umuganda_event_service.check_in") as mock:
        mock.return_value = EventAttendanceResponse(
            id=uuid.uuid4(), event_id=event_id, member_id=uuid.uuid4(), church_id=church_id, checked_in_at=NOW,
        )
        response = client.post(f"/api/v1/umuganda-events/{event_id}/attendance", json={"token": "tok"})

    assert response.status_code == 201
    assert response.json()["event_id"] == str(event_id)


def test_scan_token_vide_422(client, set_actor):
    set_actor(Role.CHURCH_ADMIN, church_id=uuid.uuid4())
    response = client.post(f"/api/v1/umuganda-events/{uuid.uuid4()}/attendance", json={"token": " "})
    assert response.status_code == 422


# ============================================================
# Rapports
# ============================================================

def test_synthese(client, set_actor):
    set_actor(Role.UNION_ADMIN)
    with patch("app.routers.reports.report_service.get_attendance_summary") as mock:
        mock.return_value = AttendanceSummary(total=5, approved=3, pending=2)
        response = client.get("/api/v1/reports/attendance")

    assert response.json() == {"total": 5, "approved": 3, "pending": 2}


def test_repartition_par_eglise(client, set_actor):
    set_actor(Role.UNION_ADMIN)
    with patch("app.routers.reports.report_service.get_breakdown_by_church") as mock:
        mock.return_value = [
            ChurchAttendanceBreakdown(church_id=uuid.uuid4(), church_name="Église Remera", total=2, approved=1, pending=1),
        ]
        response = client.get("/api/v1/reports/attendance/by-church")

    assert response.status_code == 200
    assert response.json()[0]["church_name"] == "Église Remera"


def test_rapport_membre_403(client, set_actor):
    set_actor(Role.MEMBER)
    with patch("app.routers.reports.report_service.get_attendance_summary") as mock:
        mock.side_effect = ForbiddenError("Ce rôle ne peut pas consulter les rapports.")
        response = client.get("/api/v1/reports/attendance")

    assert response.status_code == 403
