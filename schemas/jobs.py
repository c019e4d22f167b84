from typing import List

from pydantic import BaseModel


class DeadlineCheckSummary(BaseModel):
    projects_checked: int = 0
    tasks_checked: int = 0
    risks_created: int = 0
    issues_created: int = 0
    risks_escalated: int = 0
    notifications_created: int = 0
    failures: int = 0


class WeeklyUpdateCheckSummary(BaseModel):
    action: str
    year: int
    week_number: int
    notified_project_ids: List[str] = []
