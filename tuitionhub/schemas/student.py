# tuitionhub/schemas/student.py
# Student dashboard response

from typing import List

from pydantic import BaseModel

from tuitionhub.schemas.notification import NotificationResponse


class DashboardStats(BaseModel):
    active_tuitions: int          # open + ongoing
    pending_applications: int     # received on own tuitions
    total_spent: int              # completed payments


class DashboardResponse(BaseModel):
    success: bool = True
    stats: DashboardStats
    recent_activities: List[NotificationResponse]
