"""
Schémas Pydantic pour les rapports de présence.
"""

import uuid
from datetime import datetime
from typing import List

from pydantic import BaseModel


class AttendanceSummary(BaseModel):
    total: int
    approved: int
    pending: int


class ChurchAttendanceBreakdown(BaseModel):
    church_id: uuid.UUID
    church_name: str
    total: int
    approved: int
    pending: int


class ActivityItem(BaseModel):
    id: str
    type: str  # member_added, attendance_recorded, new_church, new_district
    description: str
    timestamp: datetime


class MemberGrowthPoint(BaseModel):
    date: str   # AAAA-MM-JJ
    count: int  # cumul depuis le début de la fenêtre


class AttendanceTrendPoint(BaseModel):
    month: str  # AAAA-MM
    attendance: int


class UnionStats(BaseModel):
    """Tableau de bord d'un administrateur d'union."""
    total_members: int
    total_districts: int
    total_churches: int
    total_pastors: int
    recent_activity: List[ActivityItem]
    member_growth: List[MemberGrowthPoint]
    attendance_trends: List[AttendanceTrendPoint]
