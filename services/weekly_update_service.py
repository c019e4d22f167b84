"""项目周报服务模块

周报提醒规则：
- 提醒日（默认周四）提醒尚未提交本周周报的项目经理
- 提醒日次日通知项目经理周报逾期，并升级通知部门主管、部门PMO和总PMO
"""
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config.settings import settings
from models import Project, ProjectStatus, User, UserRole, WeeklyUpdate
from schemas.weekly_update import WeeklyUpdateCreate
from services.notification_service import NotificationService
from utils.exceptions import PermissionException, ResourceConflictException, ResourceNotFoundException

logger = logging.getLogger(__name__)

INACTIVE_PROJECT_STATUSES = (
    ProjectStatus.COMPLETED, ProjectStatus.CANCELLED, ProjectStatus.PENDING, ProjectStatus.REJECTED
)

ACTION_REMINDER = "reminder"
ACTION_ESCALATION = "escalation"
ACTION_NONE = "none"


def week_number(now: datetime, numbering: Optional[str] = None) -> Tuple[int, int]:
    """计算 (年份, 周数)

    iso: ISO-8601 周数及 ISO 年份
    legacy: ceil((自1月1日零点起经过的天数 + 1月1日星期几(周日=0) + 1) / 7)，使用自然年
    """
    numbering = numbering or settings.WEEK_NUMBERING
    if numbering == "legacy":
        start_of_year = datetime(now.year, 1, 1)
        past_days = (now - start_of_year).total_seconds() / 86400
        # Python weekday() 周一=0，换算为周日=0
        jan1_weekday = (start_of_year.weekday() + 1) % 7
        return now.year, math.ceil((past_days + jan1_weekday + 1) / 7)

    iso_year, iso_week, _ = now.isocalendar()
    return iso_year, iso_week


def escalation_weekday() -> int:
    return (settings.WEEKLY_UPDATE_REMINDER_WEEKDAY + 1) % 7


@dataclass
class WeeklyUpdateCheckResult:
    action: str
    year: int
    week_number: int
    notified_project_ids: List[str] = field(default_factory=list)


class WeeklyUpdateService:
    """项目周报服务类"""

    def __init__(self, db: Session):
        self.db = db
        self.notification_service = NotificationService(db)

    # ---------- 周报 CRUD ----------

    def list_updates(self, project_id: str) -> List[WeeklyUpdate]:
        self.get_project(project_id)
        return (
            self.db.query(WeeklyUpdate)
            .filter(WeeklyUpdate.project_id == project_id)
            .order_by(WeeklyUpdate.year.desc(), WeeklyUpdate.week_number.desc())
            .all()
        )

    def get_update_for_week(self, project_id: str, year: int, week: int) -> Optional[WeeklyUpdate]:
        return (
            self.db.query(WeeklyUpdate)
            .filter(
                WeeklyUpdate.project_id == project_id,
                WeeklyUpdate.year == year,
                WeeklyUpdate.week_number == week,
            )
            .first()
        )

    def submit_update(
        self, project_id: str, data: WeeklyUpdateCreate, current_user: User, now: Optional[datetime] = None
    ) -> WeeklyUpdate:
        """提交本周周报，每个项目每周只能提交一次"""
        project = self.get_project(project_id)
        if project.manager_user_id != current_user.id and current_user.role not in (
            UserRole.ADMINISTRATOR, UserRole.MAIN_PMO
        ):
            raise PermissionException(message="只有项目经理可以提交周报")

        year, week = week_number(now or datetime.now())
        if self.get_update_for_week(project_id, year, week):
            raise ResourceConflictException(message=f"项目 {project_id} 第 {year}-{week} 周的周报已提交")

        update = WeeklyUpdate(
            project_id=project_id,
            year=year,
            week_number=week,
            comments=data.comments,
            created_by_user_id=current_user.id,
        )
        self.db.add(update)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ResourceConflictException(message=f"项目 {project_id} 第 {year}-{week} 周的周报已提交")
        self.db.refresh(update)
        logger.info(f"项目 {project_id} 提交第 {year}-{week} 周周报")
        return update

    # ---------- 周报检查 ----------

    def active_projects(self) -> List[Project]:
        return self.db.query(Project).filter(Project.status.notin_(INACTIVE_PROJECT_STATUSES)).all()

    def has_missed_weekly_update(self, project_id: str, now: Optional[datetime] = None) -> bool:
        """提醒日次日及之后仍未提交本周周报时视为缺失"""
        now = now or datetime.now()
        project = self.db.query(Project).filter(Project.id == project_id).first()
        if not project or project.status in INACTIVE_PROJECT_STATUSES:
            return False

        if now.weekday() < escalation_weekday():
            return False

        year, week = week_number(now)
        return self.get_update_for_week(project_id, year, week) is None

    def run_check(self, now: Optional[datetime] = None) -> WeeklyUpdateCheckResult:
        """按星期执行提醒或升级通知，其他日期不做处理"""
        now = now or datetime.now()
        year, week = week_number(now)
        weekday = now.weekday()

        if weekday == settings.WEEKLY_UPDATE_REMINDER_WEEKDAY:
            result = WeeklyUpdateCheckResult(ACTION_REMINDER, year, week)
            self._send_reminders(year, week, result)
        elif weekday == escalation_weekday():
            result = WeeklyUpdateCheckResult(ACTION_ESCALATION, year, week)
            self._notify_missed(year, week, result)
        else:
            result = WeeklyUpdateCheckResult(ACTION_NONE, year, week)

        logger.info(f"周报检查完成: {result.action}, 第 {year}-{week} 周, 涉及项目 {len(result.notified_project_ids)} 个")
        return result

    def _pending_projects(self, year: int, week: int) -> List[Project]:
        return [
            project for project in self.active_projects()
            if project.manager_user_id and self.get_update_for_week(project.id, year, week) is None
        ]

    def _send_reminders(self, year: int, week: int, result: WeeklyUpdateCheckResult):
        for project in self._pending_projects(year, week):
            self.notification_service.notify(
                project.manager_user_id,
                "Project",
                project.id,
                f'Weekly update reminder: Please submit your weekly update for project "{project.title}" by end of day.',
            )
            result.notified_project_ids.append(project.id)

    def _notify_missed(self, year: int, week: int, result: WeeklyUpdateCheckResult):
        for project in self._pending_projects(year, week):
            self.notification_service.notify(
                project.manager_user_id,
                "Project",
                project.id,
                f'OVERDUE: Weekly update missing for project "{project.title}". Please submit as soon as possible.',
            )
            self._notify_management(project)
            result.notified_project_ids.append(project.id)

    def _notify_management(self, project: Project):
        """通知部门主管、部门PMO和总PMO，每条通知互不影响"""
        director = self._first_user(UserRole.DEPARTMENT_DIRECTOR, project.department_id)
        if director:
            self.notification_service.notify(
                director.id, "Project", project.id,
                f'Weekly update missing: Project manager has not submitted weekly update for "{project.title}".',
            )

        sub_pmo = self._first_user(UserRole.SUB_PMO, project.department_id)
        if sub_pmo:
            self.notification_service.notify(
                sub_pmo.id, "Project", project.id,
                f'Weekly update missing: Project "{project.title}" in your department is missing its weekly update.',
            )

        main_pmo = self.db.query(User).filter(User.role == UserRole.MAIN_PMO).first()
        if main_pmo:
            self.notification_service.notify(
                main_pmo.id, "Project", project.id,
                f'Weekly update missing: Project "{project.title}" ({project.department_id}) is missing its weekly update.',
            )

    def _first_user(self, role: UserRole, department_id: Optional[str]) -> Optional[User]:
        if not department_id:
            return None
        return (
            self.db.query(User)
            .filter(User.role == role, User.department_id == department_id)
            .first()
        )

    def get_project(self, project_id: str) -> Project:
        project = self.db.query(Project).filter(Project.id == project_id).first()
        if not project:
            raise ResourceNotFoundException(message=f"项目 {project_id} 不存在")
        return project
