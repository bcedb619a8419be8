"""
Tests des rapports de présence sur SQLite.
"""

from datetime import timedelta

import pytest

from app.exceptions import BusinessRuleError, ForbiddenError
from app.services import report_service
from app.services.clock import utcnow

from factories import actor_for, add_attendance, add_member, add_session


@pytest.fixture
def attendance(db, org):
    """2 présences à l'église principale (1 approuvée), 1 à l'autre église."""
    session = add_session(db, org.church)
    second = add_member(db, org.church, org.district, org.union)
    outsider = add_member(db, org.other_church, org.other_district, org.union)
    add_attendance(db, session, org.member, status="APPROVED", approved_by=org.church_admin)
    add_attendance(db, session, second)
    add_attendance(db, add_session(db, org.other_church), outsider)


class TestAttendanceSummary:
    def test_totaux_de_l_union(self, db, org, attendance):
        summary = report_service.get_attendance_summary(db, actor_for(org.union_admin))
        assert (summary.total, summary.approved, summary.pending) == (3, 1, 2)

    def test_totaux_limites_a_l_eglise(self, db, org, attendance):
        summary = report_service.get_attendance_summary(db, actor_for(org.church_admin))
        assert (summary.total, summary.approved, summary.pending) == (2, 1, 1)

    def test_aucune_presence(self, db, org):
        summary = report_service.get_attendance_summary(db, actor_for(org.district_admin))
        assert summary.total == 0
        assert summary.pending == 0

    def test_fenetre_de_dates_future_vide(self, db, org, attendance):
        summary = report_service.get_attendance_summary(
            db, actor_for(org.union_admin), from_date=utcnow() + timedelta(days=1),
        )
        assert summary.total == 0

    def test_dates_inversees(self, db, org):
        with pytest.raises(BusinessRuleError):
            report_service.get_attendance_summary(
                db, actor_for(org.union_admin), from_date=utcnow(), to_date=utcnow() - timedelta(days=1),
            )

    def test_membre_refuse(self, db, org):
        with pytest.raises(ForbiddenError):
            report_service.get_attendance_summary(db, actor_for(org.member))


def test_repartition_par_eglise(db, org, attendance):
    rows = report_service.get_breakdown_by_church(db, actor_for(org.union_admin))

    by_name = {r.church_name: r for r in rows}
    assert by_name["Église Remera"].total == 2
    assert by_name["Église Remera"].approved == 1
    assert by_name["Église Musanze"].pending == 1


def test_repartition_pasteur_hors_district_refuse(db, org):
    with pytest.raises(ForbiddenError):
        report_service.get_breakdown_by_church(
            db, actor_for(org.district_admin), district_id=org.other_district.id,
        )
