"""
Énumérations partagées par les modèles, les schémas et les services.

Les colonnes stockent la valeur texte (String) ; Role et AttendanceStatus
héritent de str pour se comparer directement aux valeurs lues en base.
"""

import enum


class Role(str, enum.Enum):
    UNION_ADMIN = "UNION_ADMIN"
    DISTRICT_ADMIN = "DISTRICT_ADMIN"
    CHURCH_ADMIN = "CHURCH_ADMIN"
    MEMBER = "MEMBER"
    POLICE_VERIFIER = "POLICE_VERIFIER"


class AttendanceStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
