"""
Tests du résolveur de périmètre (Union → District → Église) sur SQLite.
Couverture : resolve_district, resolve_church, resolve_session,
resolve_attendance, resolve_scope, build_list_scope.
"""

import uuid

import pytest

from app.exceptions import ForbiddenError, NotFoundError, UnauthorizedError
from app.models.enums import Role
from app.services.access_service import (
    ListScope,
    ResourceKind,
    build_list_scope,
    resolve_attendance,
    resolve_church,
    resolve_district,
    resolve_scope,
    resolve_session,
)

from factories import actor_for, add_attendance, add_session, make_actor


# ----------------------------------------------------------------
# Acteur absent
# ----------------------------------------------------------------

class TestActeurAbsent:
    def test_resolve_sans_acteur_leve_unauthorized(self, db, org):
        with pytest.raises(UnauthorizedError):
            resolve_church(db, None, org.church.id)

    def test_unauthorized_avant_not_found(self, db):
        """L'absence d'acteur est vérifiée avant l'existence de la ressource."""
        with pytest.raises(UnauthorizedError):
            resolve_district(db, None, uuid.uuid4())

    def test_list_scope_sans_acteur(self):
        with pytest.raises(UnauthorizedError):
            build_list_scope(None)


# ----------------------------------------------------------------
# resolve_district
# ----------------------------------------------------------------

class TestResolveDistrict:
    def test_admin_union_dans_son_union(self, db, org):
        assert resolve_district(db, actor_for(org.union_admin), org.other_district.id).id == org.other_district.id

    def test_admin_union_sans_union_voit_tout(self, db, org):
        super_admin = make_actor(Role.UNION_ADMIN)
        assert resolve_district(db, super_admin, org.district.id).id == org.district.id

    def test_admin_union_autre_union_refuse(self, db, org):
        outsider = make_actor(Role.UNION_ADMIN, union_id=uuid.uuid4())
        with pytest.raises(ForbiddenError):
            resolve_district(db, outsider, org.district.id)

    def test_pasteur_son_district(self, db, org):
        assert resolve_district(db, actor_for(org.district_admin), org.district.id).id == org.district.id

    def test_pasteur_autre_district_refuse(self, db, org):
        with pytest.raises(ForbiddenError):
            resolve_district(db, actor_for(org.district_admin), org.other_district.id)

    def test_admin_eglise_refuse(self, db, org):
        with pytest.raises(ForbiddenError):
            resolve_district(db, actor_for(org.church_admin), org.district.id)

    def test_district_inexistant(self, db, org):
        with pytest.raises(NotFoundError):
            resolve_district(db, actor_for(org.union_admin), uuid.uuid4())


# ----------------------------------------------------------------
# resolve_church
# ----------------------------------------------------------------

class TestResolveChurch:
    def test_admin_eglise_sa_propre_eglise(self, db, org):
        assert resolve_church(db, actor_for(org.church_admin), org.church.id).id == org.church.id

    def test_admin_eglise_autre_eglise_refuse(self, db, org):
        with pytest.raises(ForbiddenError):
            resolve_church(db, actor_for(org.church_admin), org.other_church.id)

    def test_pasteur_eglise_de_son_district(self, db, org):
        assert resolve_church(db, actor_for(org.district_admin), org.church.id).id == org.church.id

    def test_pasteur_eglise_hors_district_refuse(self, db, org):
        with pytest.raises(ForbiddenError):
            resolve_church(db, actor_for(org.district_admin), org.other_church.id)

    def test_admin_union_toutes_les_eglises_de_son_union(self, db, org):
        actor = actor_for(org.union_admin)
        assert resolve_church(db, actor, org.other_church.id).id == org.other_church.id

    @pytest.mark.parametrize("role", [Role.MEMBER, Role.POLICE_VERIFIER])
    def test_roles_non_admin_refuses(self, db, org, role):
        with pytest.raises(ForbiddenError):
            resolve_church(db, make_actor(role, church_id=org.church.id), org.church.id)

    def test_eglise_inexistante_not_found_et_non_forbidden(self, db, org):
        """Une ressource absente donne 404 même pour un acteur sans droit."""
        with pytest.raises(NotFoundError):
            resolve_church(db, actor_for(org.church_admin), uuid.uuid4())


# ----------------------------------------------------------------
# resolve_session / resolve_attendance
# ----------------------------------------------------------------

class TestResolveSession:
    def test_lecture_par_pasteur_du_district(self, db, org):
        session = add_session(db, org.church)
        assert resolve_session(db, actor_for(org.district_admin), session.id).id == session.id

    def test_ecriture_refusee_au_pasteur(self, db, org):
        session = add_session(db, org.church)
        with pytest.raises(ForbiddenError):
            resolve_session(db, actor_for(org.district_admin), session.id, for_write=True)

    def test_ecriture_par_admin_de_l_eglise(self, db, org):
        session = add_session(db, org.church)
        resolved = resolve_session(db, actor_for(org.church_admin), session.id, for_write=True)
        assert resolved.id == session.id

    def test_ecriture_admin_autre_eglise_refusee(self, db, org):
        session = add_session(db, org.church)
        with pytest.raises(ForbiddenError):
            resolve_session(db, actor_for(org.other_church_admin), session.id, for_write=True)

    def test_membre_ne_lit_pas_les_sessions(self, db, org):
        session = add_session(db, org.church)
        with pytest.raises(ForbiddenError):
            resolve_session(db, actor_for(org.member), session.id)

    def test_session_inexistante(self, db, org):
        with pytest.raises(NotFoundError):
            resolve_session(db, actor_for(org.church_admin), uuid.uuid4(), for_write=True)


class TestResolveAttendance:
    def test_presence_resolue_via_sa_session(self, db, org):
        record = add_attendance(db, add_session(db, org.church), org.member)
        resolved = resolve_attendance(db, actor_for(org.church_admin), record.id, for_write=True)
        assert resolved.id == record.id

    def test_presence_autre_eglise_refusee(self, db, org):
        record = add_attendance(db, add_session(db, org.church), org.member)
        with pytest.raises(ForbiddenError, match="présence"):
            resolve_attendance(db, actor_for(org.other_church_admin), record.id)

    def test_presence_inexistante(self, db, org):
        with pytest.raises(NotFoundError):
            resolve_attendance(db, actor_for(org.church_admin), uuid.uuid4())


# ----------------------------------------------------------------
# resolve_scope
# ----------------------------------------------------------------

class TestResolveScope:
    def test_identifiant_omis_renvoie_none(self, db, org):
        assert resolve_scope(db, actor_for(org.church_admin), ResourceKind.CHURCH, None) is None

    def test_identifiant_omis_exige_quand_meme_un_acteur(self, db):
        with pytest.raises(UnauthorizedError):
            resolve_scope(db, None, ResourceKind.CHURCH, None)

    def test_delegue_au_resolveur_du_type(self, db, org):
        district = resolve_scope(db, actor_for(org.district_admin), ResourceKind.DISTRICT, org.district.id)
        assert district.id == org.district.id

    def test_ecriture_transmise(self, db, org):
        session = add_session(db, org.church)
        with pytest.raises(ForbiddenError):
            resolve_scope(db, actor_for(org.union_admin), ResourceKind.SESSION, session.id, for_write=True)


# ----------------------------------------------------------------
# build_list_scope
# ----------------------------------------------------------------

class TestBuildListScope:
    def test_admin_union_filtres_libres_dans_son_union(self):
        union_id, district_id = uuid.uuid4(), uuid.uuid4()
        actor = make_actor(Role.UNION_ADMIN, union_id=union_id)
        assert build_list_scope(actor, district_id=district_id) == ListScope(
            union_id=union_id, district_id=district_id,
        )

    def test_pasteur_force_sur_son_district(self):
        district_id = uuid.uuid4()
        actor = make_actor(Role.DISTRICT_ADMIN, district_id=district_id)
        assert build_list_scope(actor).district_id == district_id

    def test_pasteur_filtre_autre_district_refuse(self):
        """Refus explicite plutôt qu'un filtre ignoré."""
        actor = make_actor(Role.DISTRICT_ADMIN, district_id=uuid.uuid4())
        with pytest.raises(ForbiddenError):
            build_list_scope(actor, district_id=uuid.uuid4())

    def test_pasteur_sans_district_refuse(self):
        with pytest.raises(ForbiddenError):
            build_list_scope(make_actor(Role.DISTRICT_ADMIN))

    def test_admin_eglise_force_sur_son_eglise(self):
        church_id = uuid.uuid4()
        actor = make_actor(Role.CHURCH_ADMIN, church_id=church_id)
        assert build_list_scope(actor).church_id == church_id

    def test_admin_eglise_filtre_autre_eglise_refuse(self):
        actor = make_actor(Role.CHURCH_ADMIN, church_id=uuid.uuid4())
        with pytest.raises(ForbiddenError):
            build_list_scope(actor, church_id=uuid.uuid4())

    def test_admin_eglise_filtre_district_ignore(self):
        church_id = uuid.uuid4()
        actor = make_actor(Role.CHURCH_ADMIN, church_id=church_id)
        assert build_list_scope(actor, district_id=uuid.uuid4()) == ListScope(church_id=church_id)

    @pytest.mark.parametrize("role", [Role.MEMBER, Role.POLICE_VERIFIER])
    def test_roles_non_admin_refuses(self, role):
        with pytest.raises(ForbiddenError):
            build_list_scope(make_actor(role))
