"""
Tests des services de la hiérarchie : unions, districts, églises.
"""

import uuid
from datetime import timedelta

import pytest

from app.exceptions import ConflictError, ForbiddenError, NotFoundError
from app.models.enums import Role
from app.models.organisation import Union
from app.schemas.organisation import ChurchCreate, ChurchUpdate, DistrictCreate, DistrictUpdate, UnionCreate
from app.services import church_service, district_service, union_service
from app.services.clock import utcnow

from factories import actor_for, add_attendance, add_member, add_session, make_actor


# ----------------------------------------------------------------
# Unions
# ----------------------------------------------------------------

class TestUnions:
    def test_creation_et_listage(self, db, org):
        actor = actor_for(org.union_admin)
        union_service.create_union(db, actor, UnionCreate(name="Union Rwanda Nord"))
        assert len(union_service.list_unions(db, actor)) == 2

    def test_nom_deja_pris(self, db, org):
        with pytest.raises(ConflictError):
            union_service.create_union(db, actor_for(org.union_admin), UnionCreate(name="Union Rwanda Est"))

    def test_reserve_aux_admins_union(self, db, org):
        with pytest.raises(ForbiddenError):
            union_service.list_unions(db, actor_for(org.district_admin))


class TestUnionStats:
    def test_effectifs(self, db, org):
        stats = union_service.get_union_stats(db, actor_for(org.union_admin))

        assert stats.total_members == 1
        assert stats.total_districts == 2
        assert stats.total_churches == 2
        assert stats.total_pastors == 1

    def test_croissance_des_membres_en_cumul(self, db, org):
        add_member(db, org.other_church, org.other_district, org.union)

        stats = union_service.get_union_stats(db, actor_for(org.union_admin))

        assert stats.member_growth[-1].count == 2
        counts = [p.count for p in stats.member_growth]
        assert counts == sorted(counts)

    def test_tendance_des_presences_sur_six_mois(self, db, org):
        now = utcnow()
        recent = add_session(db, org.church, date=now)
        old = add_session(db, org.church, date=now - timedelta(days=250))
        add_attendance(db, recent, org.member)
        add_attendance(db, old, org.member)

        stats = union_service.get_union_stats(db, actor_for(org.union_admin), now=now)

        assert [(t.month, t.attendance) for t in stats.attendance_trends] == [(now.strftime("%Y-%m"), 1)]

    def test_activite_recente(self, db, org):
        add_attendance(db, add_session(db, org.church), org.member)

        stats = union_service.get_union_stats(db, actor_for(org.union_admin))

        kinds = {item.type for item in stats.recent_activity}
        assert kinds == {"member_added", "attendance_recorded", "new_church", "new_district"}
        assert len(stats.recent_activity) <= 8
        timestamps = [item.timestamp for item in stats.recent_activity]
        assert timestamps == sorted(timestamps, reverse=True)

    def test_hors_union_vide(self, db, org):
        other = Union(name="Union Rwanda Ouest")
        db.add(other)
        db.commit()

        stats = union_service.get_union_stats(db, make_actor(Role.UNION_ADMIN, union_id=other.id))

        assert stats.total_members == 0
        assert stats.total_churches == 0
        assert stats.recent_activity == []

    def test_pasteur_refuse(self, db, org):
        with pytest.raises(ForbiddenError):
            union_service.get_union_stats(db, actor_for(org.district_admin))

    def test_admin_union_sans_union_refuse(self, db):
        with pytest.raises(ForbiddenError):
            union_service.get_union_stats(db, make_actor(Role.UNION_ADMIN))


# ----------------------------------------------------------------
# Districts
# ----------------------------------------------------------------

class TestDistricts:
    def test_admin_union_liste_son_union(self, db, org):
        listed = district_service.list_districts(db, actor_for(org.union_admin))
        assert {d.id for d in listed} == {org.district.id, org.other_district.id}

    def test_filtre_union_hors_perimetre_refuse(self, db, org):
        with pytest.raises(ForbiddenError):
            district_service.list_districts(db, actor_for(org.union_admin), union_id=uuid.uuid4())

    def test_pasteur_ne_voit_que_son_district(self, db, org):
        listed = district_service.list_districts(db, actor_for(org.district_admin))
        assert [d.id for d in listed] == [org.district.id]

    def test_admin_eglise_refuse(self, db, org):
        with pytest.raises(ForbiddenError):
            district_service.list_districts(db, actor_for(org.church_admin))

    def test_creation(self, db, org):
        created = district_service.create_district(
            db, actor_for(org.union_admin), DistrictCreate(union_id=org.union.id, name="District Huye"),
        )
        assert created.union_id == org.union.id

    def test_creation_union_introuvable(self, db, org):
        with pytest.raises(NotFoundError):
            district_service.create_district(
                db, make_actor(Role.UNION_ADMIN), DistrictCreate(union_id=uuid.uuid4(), name="District Huye"),
            )

    def test_pasteur_ne_modifie_pas_son_district(self, db, org):
        with pytest.raises(ForbiddenError):
            district_service.update_district(
                db, actor_for(org.district_admin), org.district.id, DistrictUpdate(name="Autre"),
            )

    def test_renommage(self, db, org):
        updated = district_service.update_district(
            db, actor_for(org.union_admin), org.district.id, DistrictUpdate(location="Gasabo"),
        )
        assert updated.location == "Gasabo"
        assert updated.name == "District Kigali"


# ----------------------------------------------------------------
# Églises
# ----------------------------------------------------------------

class TestChurches:
    def test_pasteur_liste_son_district(self, db, org):
        listed = church_service.list_churches(db, actor_for(org.district_admin))
        assert [c.id for c in listed] == [org.church.id]

    def test_pasteur_filtre_autre_district_refuse(self, db, org):
        with pytest.raises(ForbiddenError):
            church_service.list_churches(db, actor_for(org.district_admin), district_id=org.other_district.id)

    def test_admin_eglise_filtre_autre_district_renvoie_son_eglise(self, db, org):
        listed = church_service.list_churches(db, actor_for(org.church_admin), district_id=org.other_district.id)
        assert [c.id for c in listed] == [org.church.id]

    def test_pasteur_cree_dans_son_district(self, db, org):
        created = church_service.create_church(
            db, actor_for(org.district_admin), ChurchCreate(district_id=org.district.id, name="Église Kacyiru"),
        )
        assert created.district_id == org.district.id

    def test_pasteur_ne_cree_pas_ailleurs(self, db, org):
        with pytest.raises(ForbiddenError):
            church_service.create_church(
                db, actor_for(org.district_admin), ChurchCreate(district_id=org.other_district.id, name="X"),
            )

    def test_admin_eglise_renomme_sa_propre_eglise(self, db, org):
        updated = church_service.update_church(
            db, actor_for(org.church_admin), org.church.id, ChurchUpdate(name="Église Remera Centre"),
        )
        assert updated.name == "Église Remera Centre"

    def test_admin_eglise_ne_deplace_pas_son_eglise(self, db, org):
        with pytest.raises(ForbiddenError):
            church_service.update_church(
                db, actor_for(org.church_admin), org.church.id, ChurchUpdate(district_id=org.other_district.id),
            )

    def test_admin_union_deplace_une_eglise(self, db, org):
        updated = church_service.update_church(
            db, actor_for(org.union_admin), org.church.id, ChurchUpdate(district_id=org.other_district.id),
        )
        assert updated.district_id == org.other_district.id

    def test_admin_eglise_ne_supprime_pas(self, db, org):
        with pytest.raises(ForbiddenError):
            church_service.delete_church(db, actor_for(org.church_admin), org.church.id)

    def test_consultation_eglise_introuvable(self, db, org):
        with pytest.raises(NotFoundError):
            church_service.get_church(db, actor_for(org.union_admin), uuid.uuid4())
