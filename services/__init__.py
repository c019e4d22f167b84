"""服务层模块初始化文件

提供服务层的统一导入接口
"""

from .milestone_service import MilestoneService
from .notification_service import NotificationService
from .deadline_risk_service import DeadlineRiskService, DeadlineCheckResult, run_deadline_check
from .weekly_update_service import WeeklyUpdateService
from .approval_reminder_service import ApprovalReminderService
from .project_service import ProjectService
from .task_service import TaskService
from .risk_issue_service import RiskIssueService

__all__ = [
    "MilestoneService",
    "NotificationService",
    "DeadlineRiskService",
    "DeadlineCheckResult",
    "run_deadline_check",
    "WeeklyUpdateService",
    "ApprovalReminderService",
    "ProjectService",
    "TaskService",
    "RiskIssueService",
]
