"""
枚举定义模块
包含系统中所有的枚举类型定义
"""
import enum


class UserRole(str, enum.Enum):
    """用户角色枚举"""
    USER = "User"                                # 普通用户
    PROJECT_MANAGER = "ProjectManager"           # 项目经理
    SUB_PMO = "SubPMO"                           # 部门PMO
    MAIN_PMO = "MainPMO"                         # 总PMO
    DEPARTMENT_DIRECTOR = "DepartmentDirector"   # 部门主管
    EXECUTIVE = "Executive"                      # 高管
    ADMINISTRATOR = "Administrator"              # 系统管理员


class ProjectStatus(str, enum.Enum):
    """项目状态枚举"""
    PENDING = "Pending"          # 待审批
    PLANNING = "Planning"        # 规划中
    IN_PROGRESS = "InProgress"   # 进行中
    ON_HOLD = "OnHold"           # 暂停
    COMPLETED = "Completed"      # 已完成
    CANCELLED = "Cancelled"      # 已取消
    REJECTED = "Rejected"        # 审批驳回


class TaskStatus(str, enum.Enum):
    """任务状态枚举"""
    TODO = "Todo"                # 待办
    IN_PROGRESS = "InProgress"   # 进行中
    REVIEW = "Review"            # 审核中
    ON_HOLD = "OnHold"           # 暂停
    COMPLETED = "Completed"      # 已完成


class Priority(str, enum.Enum):
    """优先级枚举（项目、任务、风险共用）"""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class MilestoneStatus(str, enum.Enum):
    """里程碑状态枚举（由关联任务推导）"""
    NOT_STARTED = "NotStarted"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"
    DELAYED = "Delayed"
    AT_RISK = "AtRisk"


class RiskType(str, enum.Enum):
    """风险/问题类型枚举"""
    RISK = "Risk"      # 风险
    ISSUE = "Issue"    # 问题


class RiskStatus(str, enum.Enum):
    """风险/问题状态枚举"""
    OPEN = "Open"
    IN_PROGRESS = "InProgress"
    RESOLVED = "Resolved"
    CLOSED = "Closed"


class RiskSourceKind(str, enum.Enum):
    """自动生成的风险/问题来源"""
    PROJECT_DEADLINE_APPROACHING = "ProjectDeadlineApproaching"
    PROJECT_DEADLINE_MISSED = "ProjectDeadlineMissed"
    TASK_DEADLINE_APPROACHING = "TaskDeadlineApproaching"
    TASK_DEADLINE_MISSED = "TaskDeadlineMissed"


# 已关闭的风险/问题不参与去重
CLOSED_RISK_STATUSES = (RiskStatus.RESOLVED, RiskStatus.CLOSED)
