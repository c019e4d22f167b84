# 基础模式
from .base import BaseResponse, PaginationResponse, default_timestamp

# 用户相关模式
from .user import LoginRequest, UserResponse

# 项目相关模式
from .project import ProjectBase, ProjectCreate, ProjectUpdate, ProjectRejectRequest, ProjectResponse

# 任务相关模式
from .task import TaskBase, TaskCreate, TaskUpdate, TaskResponse

# 里程碑相关模式
from .milestone import (
    MilestoneCreate, MilestoneUpdate, MilestoneResponse,
    TaskMilestoneCreate, TaskMilestoneUpdate, TaskMilestoneResponse, TaskMilestoneResult
)

# 风险/问题相关模式
from .risk_issue import RiskIssueCreate, RiskIssueUpdate, RiskIssueResponse

# 通知与周报
from .notification import NotificationResponse
from .weekly_update import WeeklyUpdateCreate, WeeklyUpdateResponse

# 定时任务
from .jobs import DeadlineCheckSummary, WeeklyUpdateCheckSummary
