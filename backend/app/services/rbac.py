"""
Règles statiques de capacité par rôle.

Chaque table couvre explicitement les cinq rôles : un rôle ajouté à l'énumération
sans entrée ici provoque une KeyError au premier appel (et l'échec du test
d'exhaustivité) plutôt qu'un refus silencieux.
"""

from typing import Dict, Optional, Union

from app.models.enums import Role

# Échelle de création : chaque rôle ne crée que le rôle immédiatement inférieur
_CHILD_ROLE: Dict[Role, Optional[Role]] = {
    Role.UNION_ADMIN: Role.DISTRICT_ADMIN,
    Role.DISTRICT_ADMIN: Role.CHURCH_ADMIN,
    Role.CHURCH_ADMIN: Role.MEMBER,
    Role.MEMBER: None,
    Role.POLICE_VERIFIER: None,
}

_MANAGES_ATTENDANCE: Dict[Role, bool] = {
    Role.UNION_ADMIN: False,
    Role.DISTRICT_ADMIN: False,
    Role.CHURCH_ADMIN: True,
    Role.MEMBER: False,
    Role.POLICE_VERIFIER: False,
}

_VIEWS_REPORTS: Dict[Role, bool] = {
    Role.UNION_ADMIN: True,
    Role.DISTRICT_ADMIN: True,
    Role.CHURCH_ADMIN: True,
    Role.MEMBER: False,
    Role.POLICE_VERIFIER: False,
}

CAPABILITY_TABLES = (_CHILD_ROLE, _MANAGES_ATTENDANCE, _VIEWS_REPORTS)

ADMIN_ROLES = frozenset({Role.UNION_ADMIN, Role.DISTRICT_ADMIN, Role.CHURCH_ADMIN})

RoleLike = Union[Role, str]


def can_create_role(actor_role: RoleLike, target_role: RoleLike) -> bool:
    """Vrai seulement pour le rôle directement inférieur (pas de saut de niveau)."""
    child = _CHILD_ROLE[Role(actor_role)]
    return child is not None and child == Role(target_role)


def can_manage_attendance(role: RoleLike) -> bool:
    return _MANAGES_ATTENDANCE[Role(role)]


def can_view_reports(role: RoleLike) -> bool:
    return _VIEWS_REPORTS[Role(role)]
