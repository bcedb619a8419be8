"""
Tests unitaires des règles de capacité par rôle.
Couverture : can_create_role, can_manage_attendance, can_view_reports.
"""

import pytest

from app.models.enums import Role
from app.services.rbac import (
    CAPABILITY_TABLES,
    can_create_role,
    can_manage_attendance,
    can_view_reports,
)


# ----------------------------------------------------------------
# Exhaustivité
# ----------------------------------------------------------------

def test_chaque_table_couvre_tous_les_roles():
    """Un rôle ajouté sans règle doit faire échouer ce test."""
    for table in CAPABILITY_TABLES:
        assert set(table) == set(Role)


# ----------------------------------------------------------------
# can_create_role — échelle de création
# ----------------------------------------------------------------

class TestCanCreateRole:
    @pytest.mark.parametrize("actor, target", [
        (Role.UNION_ADMIN, Role.DISTRICT_ADMIN),
        (Role.DISTRICT_ADMIN, Role.CHURCH_ADMIN),
        (Role.CHURCH_ADMIN, Role.MEMBER),
    ])
    def test_role_directement_inferieur_autorise(self, actor, target):
        assert can_create_role(actor, target) is True

    def test_saut_de_niveau_refuse(self):
        assert can_create_role(Role.UNION_ADMIN, Role.CHURCH_ADMIN) is False
        assert can_create_role(Role.UNION_ADMIN, Role.MEMBER) is False

    def test_creation_vers_le_haut_refusee(self):
        assert can_create_role(Role.CHURCH_ADMIN, Role.DISTRICT_ADMIN) is False

    def test_meme_role_refuse(self):
        assert can_create_role(Role.DISTRICT_ADMIN, Role.DISTRICT_ADMIN) is False

    @pytest.mark.parametrize("target", list(Role))
    def test_membre_et_verificateur_ne_creent_rien(self, target):
        assert can_create_role(Role.MEMBER, target) is False
        assert can_create_role(Role.POLICE_VERIFIER, target) is False

    def test_accepte_les_valeurs_texte(self):
        """Le rôle lu en base est une chaîne."""
        assert can_create_role("CHURCH_ADMIN", "MEMBER") is True

    def test_role_inconnu_leve_erreur(self):
        with pytest.raises(ValueError):
            can_create_role("SUPER_ADMIN", Role.MEMBER)


# ----------------------------------------------------------------
# can_manage_attendance / can_view_reports
# ----------------------------------------------------------------

class TestCapacitesPresences:
    def test_seul_admin_eglise_gere_les_presences(self):
        allowed = {role for role in Role if can_manage_attendance(role)}
        assert allowed == {Role.CHURCH_ADMIN}

    def test_rapports_reserves_aux_administrateurs(self):
        allowed = {role for role in Role if can_view_reports(role)}
        assert allowed == {Role.UNION_ADMIN, Role.DISTRICT_ADMIN, Role.CHURCH_ADMIN}
