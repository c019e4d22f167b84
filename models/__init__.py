"""
模型模块初始化文件
提供统一的导入接口
"""

# 导入数据库基础配置
from .database import Base, engine, SessionLocal, get_db

# 导入枚举类型
from .enums import (
    UserRole, ProjectStatus, TaskStatus, Priority, MilestoneStatus,
    RiskType, RiskStatus, RiskSourceKind, CLOSED_RISK_STATUSES
)

# 导入模型类
from .department import Department
from .user import User
from .project import Project
from .task import Task
from .milestone import Milestone, TaskMilestone
from .risk_issue import RiskIssue
from .notification import Notification
from .weekly_update import WeeklyUpdate

__all__ = [
    # 数据库配置
    'Base', 'engine', 'SessionLocal', 'get_db',

    # 枚举类型
    'UserRole', 'ProjectStatus', 'TaskStatus', 'Priority', 'MilestoneStatus',
    'RiskType', 'RiskStatus', 'RiskSourceKind', 'CLOSED_RISK_STATUSES',

    # 模型类
    'Department', 'User', 'Project', 'Task', 'Milestone', 'TaskMilestone',
    'RiskIssue', 'Notification', 'WeeklyUpdate'
]
