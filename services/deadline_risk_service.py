"""截止时间风险检查服务

扫描项目和任务的截止时间：
- 临近截止（RISK_WINDOW_DAYS 天内）时确保存在一条未关闭的风险
- 已过截止时间时将该风险原地升级为问题，没有风险则直接新建问题

幂等性基于 (source_kind, source_entity_id) 查询当前未关闭的记录，
不依赖任何"已处理"游标。
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from config.settings import settings
from models import (
    CLOSED_RISK_STATUSES, Notification, Priority, Project, ProjectStatus, RiskIssue,
    RiskSourceKind, RiskStatus, RiskType, Task, TaskStatus,
)
from services.milestone_service import days_until
from services.notification_service import NotificationService

logger = logging.getLogger(__name__)

PROJECT_SKIP_STATUSES = (ProjectStatus.COMPLETED, ProjectStatus.CANCELLED, ProjectStatus.REJECTED)
TASK_SKIP_STATUSES = (TaskStatus.COMPLETED,)


@dataclass
class DeadlineRule:
    """某类实体的风险/问题参数"""
    label: str
    approaching_kind: RiskSourceKind
    missed_kind: RiskSourceKind
    risk_priority: Priority
    issue_priority: Priority


PROJECT_RULE = DeadlineRule(
    label="Project",
    approaching_kind=RiskSourceKind.PROJECT_DEADLINE_APPROACHING,
    missed_kind=RiskSourceKind.PROJECT_DEADLINE_MISSED,
    risk_priority=Priority.HIGH,
    issue_priority=Priority.CRITICAL,
)

TASK_RULE = DeadlineRule(
    label="Task",
    approaching_kind=RiskSourceKind.TASK_DEADLINE_APPROACHING,
    missed_kind=RiskSourceKind.TASK_DEADLINE_MISSED,
    risk_priority=Priority.MEDIUM,
    issue_priority=Priority.HIGH,
)


@dataclass
class DeadlineSubject:
    """参与截止时间检查的实体（项目或任务）"""
    rule: DeadlineRule
    id: str
    title: str
    deadline: Optional[datetime]
    status: object
    owner_user_id: Optional[str]
    project_id: str

    @classmethod
    def from_project(cls, project: Project) -> "DeadlineSubject":
        return cls(
            rule=PROJECT_RULE,
            id=project.id,
            title=project.title,
            deadline=project.deadline,
            status=project.status,
            owner_user_id=project.manager_user_id,
            project_id=project.id,
        )

    @classmethod
    def from_task(cls, task: Task) -> "DeadlineSubject":
        return cls(
            rule=TASK_RULE,
            id=task.id,
            title=task.title,
            deadline=task.deadline,
            status=task.status,
            owner_user_id=task.assigned_user_id,
            project_id=task.project_id,
        )

    @property
    def is_skipped(self) -> bool:
        if self.deadline is None:
            return True
        skip = PROJECT_SKIP_STATUSES if self.rule is PROJECT_RULE else TASK_SKIP_STATUSES
        return self.status in skip

    @property
    def deadline_label(self) -> str:
        return self.deadline.strftime("%Y-%m-%d")

    def approaching_text(self, owner: bool = False) -> str:
        return f'{self._subject_prefix(owner)} "{self.title}" is approaching its deadline ({self.deadline_label})'

    def missed_text(self, owner: bool = False) -> str:
        return f'{self._subject_prefix(owner)} "{self.title}" has missed its deadline ({self.deadline_label})'

    def _subject_prefix(self, owner: bool) -> str:
        # 通知负责人时使用 "Your project" / "Your task"
        return f"Your {self.rule.label.lower()}" if owner else self.rule.label


@dataclass
class DeadlineCheckResult:
    """一次扫描的统计结果"""
    projects_checked: int = 0
    tasks_checked: int = 0
    risks_created: int = 0
    issues_created: int = 0
    risks_escalated: int = 0
    failures: int = 0
    notifications: List[Notification] = field(default_factory=list)

    def summary(self) -> dict:
        return {
            "projects_checked": self.projects_checked,
            "tasks_checked": self.tasks_checked,
            "risks_created": self.risks_created,
            "issues_created": self.issues_created,
            "risks_escalated": self.risks_escalated,
            "notifications_created": len(self.notifications),
            "failures": self.failures,
        }


class DeadlineRiskService:
    """截止时间风险检查服务类"""

    def __init__(self, db: Session):
        self.db = db
        self.notification_service = NotificationService(db)

    def run(self, now: Optional[datetime] = None) -> DeadlineCheckResult:
        """检查所有项目及其任务"""
        now = now or datetime.now()
        result = DeadlineCheckResult()
        logger.info("开始截止时间风险检查")

        projects = self.db.query(Project).all()
        for project in projects:
            result.projects_checked += 1
            self._check_safely(DeadlineSubject.from_project(project), now, result)

            # 任务按项目逐个获取
            tasks = self.db.query(Task).filter(Task.project_id == project.id).all()
            for task in tasks:
                result.tasks_checked += 1
                self._check_safely(DeadlineSubject.from_task(task), now, result)

        logger.info(
            f"截止时间风险检查完成: 新建风险 {result.risks_created}, 新建问题 {result.issues_created}, "
            f"风险升级 {result.risks_escalated}, 失败 {result.failures}"
        )
        return result

    def _check_safely(self, subject: DeadlineSubject, now: datetime, result: DeadlineCheckResult):
        """单个实体在独立事务中处理，失败不影响其他实体"""
        try:
            self.check_subject(subject, now, result)
        except IntegrityError:
            self.db.rollback()
            logger.warning(f"{subject.rule.label} {subject.id} 的风险记录已被并发创建，跳过")
        except SQLAlchemyError as e:
            self.db.rollback()
            result.failures += 1
            logger.error(f"{subject.rule.label} {subject.id} 截止时间检查失败: {e}", exc_info=True)

    def check_subject(self, subject: DeadlineSubject, now: datetime, result: DeadlineCheckResult):
        if subject.is_skipped:
            return

        days = days_until(subject.deadline, now)
        if 0 < days <= settings.RISK_WINDOW_DAYS:
            self._ensure_risk(subject, result)
        elif days <= 0:
            self._ensure_issue(subject, result)

    def _find_open(self, kind: RiskSourceKind, entity_id: str) -> Optional[RiskIssue]:
        return (
            self.db.query(RiskIssue)
            .filter(
                RiskIssue.source_kind == kind,
                RiskIssue.source_entity_id == entity_id,
                RiskIssue.status.notin_(CLOSED_RISK_STATUSES),
            )
            .first()
        )

    def _ensure_risk(self, subject: DeadlineSubject, result: DeadlineCheckResult):
        """临近截止：确保只有一条未关闭的风险"""
        rule = subject.rule
        if self._find_open(rule.approaching_kind, subject.id):
            return

        risk = RiskIssue(
            project_id=subject.project_id,
            type=RiskType.RISK,
            title=f"{rule.label} Deadline Risk - {subject.title}",
            description=subject.approaching_text(),
            priority=rule.risk_priority,
            status=RiskStatus.OPEN,
            created_by_user_id=settings.SYSTEM_USER_ID,
            source_kind=rule.approaching_kind,
            source_entity_id=subject.id,
        )
        self.db.add(risk)
        self.db.commit()
        result.risks_created += 1
        logger.info(f"{rule.label} {subject.id} 临近截止，已创建风险 {risk.id}")

        self._notify_owner(subject, subject.approaching_text(owner=True), result)

    def _ensure_issue(self, subject: DeadlineSubject, result: DeadlineCheckResult):
        """已过截止：风险原地升级为问题，或直接新建问题"""
        rule = subject.rule
        if self._find_open(rule.missed_kind, subject.id):
            return

        existing_risk = self._find_open(rule.approaching_kind, subject.id)
        if existing_risk:
            existing_risk.type = RiskType.ISSUE
            existing_risk.source_kind = rule.missed_kind
            existing_risk.description = subject.missed_text()
            existing_risk.priority = rule.issue_priority
            self.db.commit()
            result.risks_escalated += 1
            logger.info(f"{rule.label} {subject.id} 已过截止，风险 {existing_risk.id} 升级为问题")
        else:
            issue = RiskIssue(
                project_id=subject.project_id,
                type=RiskType.ISSUE,
                title=f"{rule.label} Deadline Issue - {subject.title}",
                description=subject.missed_text(),
                priority=rule.issue_priority,
                status=RiskStatus.OPEN,
                created_by_user_id=settings.SYSTEM_USER_ID,
                source_kind=rule.missed_kind,
                source_entity_id=subject.id,
            )
            self.db.add(issue)
            self.db.commit()
            result.issues_created += 1
            logger.info(f"{rule.label} {subject.id} 已过截止，已创建问题 {issue.id}")

        self._notify_owner(subject, f"URGENT: {subject.missed_text(owner=True)}", result)

    def _notify_owner(self, subject: DeadlineSubject, message: str, result: DeadlineCheckResult):
        if not subject.owner_user_id:
            logger.debug(f"{subject.rule.label} {subject.id} 没有负责人，跳过通知")
            return
        notification = self.notification_service.notify(
            subject.owner_user_id, subject.rule.label, subject.id, message
        )
        if notification is not None:
            result.notifications.append(notification)


def run_deadline_check(db: Session, now: Optional[datetime] = None) -> DeadlineCheckResult:
    """执行一次截止时间风险检查"""
    return DeadlineRiskService(db).run(now)
