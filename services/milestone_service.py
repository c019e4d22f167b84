"""里程碑服务模块

里程碑完成度聚合：根据关联任务的状态和权重计算完成百分比，
并结合截止时间推导里程碑状态。
"""
import logging
import math
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from config.settings import settings
from models import Milestone, MilestoneStatus, Project, Task, TaskMilestone, TaskStatus
from schemas.milestone import MilestoneCreate, MilestoneUpdate, TaskMilestoneCreate, TaskMilestoneUpdate
from utils.exceptions import ResourceConflictException, ResourceNotFoundException

logger = logging.getLogger(__name__)

# 任务状态 -> 完成值
TASK_COMPLETION_VALUES = {
    TaskStatus.COMPLETED: 100,
    TaskStatus.REVIEW: 90,
    TaskStatus.IN_PROGRESS: 50,
    TaskStatus.ON_HOLD: 25,
}

SECONDS_PER_DAY = 86400


def task_completion_value(status) -> int:
    """任务状态对应的完成值，未知状态按0计算"""
    return TASK_COMPLETION_VALUES.get(status, 0)


def effective_weight(weight) -> float:
    """权重为空或0时按1计算"""
    return weight if weight else 1


def days_until(deadline: datetime, now: datetime) -> int:
    """距截止时间的天数，向上取整"""
    return math.ceil((deadline - now).total_seconds() / SECONDS_PER_DAY)


def compute_completion_percentage(links: Iterable[Tuple[Optional[float], Optional[TaskStatus]]]) -> int:
    """计算加权完成百分比

    Args:
        links: (权重, 任务状态) 序列，任务无法解析时状态为 None

    Returns:
        四舍五入并限制在 0-100 的整数
    """
    links = list(links)
    if not links:
        return 0

    # 无法解析任务的关联仍计入总权重
    total_weight = sum(effective_weight(weight) for weight, _ in links)
    if total_weight <= 0:
        return 0

    weighted_sum = 0.0
    for weight, status in links:
        if status is None:
            continue
        weighted_sum += task_completion_value(status) * effective_weight(weight) / total_weight

    percentage = int(round(weighted_sum))
    return max(0, min(100, percentage))


def derive_milestone_status(percentage: int, deadline: Optional[datetime], now: datetime) -> MilestoneStatus:
    """按优先级推导里程碑状态，截止时间规则优先于百分比规则"""
    if deadline is not None and now > deadline and percentage < 100:
        return MilestoneStatus.DELAYED
    if (deadline is not None
            and days_until(deadline, now) <= settings.MILESTONE_AT_RISK_DAYS
            and percentage < settings.MILESTONE_AT_RISK_THRESHOLD):
        return MilestoneStatus.AT_RISK
    if percentage == 0:
        return MilestoneStatus.NOT_STARTED
    if percentage == 100:
        return MilestoneStatus.COMPLETED
    return MilestoneStatus.IN_PROGRESS


class MilestoneService:
    """里程碑服务类"""

    def __init__(self, db: Session):
        self.db = db

    # ---------- 完成度聚合 ----------

    def recalculate_progress(self, milestone_id: str, now: Optional[datetime] = None) -> bool:
        """重新计算里程碑完成度和状态

        失败时只记录日志并返回 False，不抛出异常
        """
        now = now or datetime.now()
        try:
            milestone = self.db.query(Milestone).filter(Milestone.id == milestone_id).first()
            if not milestone:
                logger.warning(f"重算进度时未找到里程碑 {milestone_id}")
                return False

            links = self.db.query(TaskMilestone).filter(TaskMilestone.milestone_id == milestone_id).all()
            weighted = []
            for link in links:
                task = self.db.query(Task).filter(Task.id == link.task_id).first()
                if not task:
                    logger.warning(f"里程碑 {milestone_id} 关联的任务 {link.task_id} 不存在，已跳过")
                    weighted.append((link.weight, None))
                    continue
                weighted.append((link.weight, task.status))

            percentage = compute_completion_percentage(weighted)
            milestone.completion_percentage = percentage
            milestone.status = derive_milestone_status(percentage, milestone.deadline, now)
            self.db.commit()
            logger.info(f"里程碑 {milestone_id} 进度已更新: {percentage}% ({milestone.status.value})")
            return True
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"里程碑 {milestone_id} 进度保存失败: {e}", exc_info=True)
            return False

    def recalculate_for_task(self, task_id: str, now: Optional[datetime] = None) -> List[str]:
        """重算任务关联的所有里程碑，返回重算成功的里程碑ID"""
        milestone_ids = [
            row.milestone_id
            for row in self.db.query(TaskMilestone.milestone_id).filter(TaskMilestone.task_id == task_id).all()
        ]
        return [mid for mid in milestone_ids if self.recalculate_progress(mid, now)]

    # ---------- 里程碑 CRUD ----------

    def get_milestone(self, milestone_id: str) -> Milestone:
        milestone = self.db.query(Milestone).filter(Milestone.id == milestone_id).first()
        if not milestone:
            raise ResourceNotFoundException(message=f"里程碑 {milestone_id} 不存在")
        return milestone

    def list_milestones(self, project_id: str) -> List[Milestone]:
        self._get_project(project_id)
        return (
            self.db.query(Milestone)
            .filter(Milestone.project_id == project_id)
            .order_by(Milestone.deadline.asc())
            .all()
        )

    def create_milestone(self, project_id: str, data: MilestoneCreate, now: Optional[datetime] = None) -> Milestone:
        """创建里程碑，初始完成度为0"""
        self._get_project(project_id)
        milestone = Milestone(
            project_id=project_id,
            title=data.title,
            description=data.description,
            deadline=data.deadline,
            completion_percentage=0,
            status=derive_milestone_status(0, data.deadline, now or datetime.now()),
        )
        self.db.add(milestone)
        self.db.commit()
        self.db.refresh(milestone)
        logger.info(f"项目 {project_id} 新建里程碑 {milestone.id}")
        return milestone

    def update_milestone(self, milestone_id: str, data: MilestoneUpdate, now: Optional[datetime] = None) -> Milestone:
        """更新里程碑基本信息，截止时间变化后重新推导状态"""
        milestone = self.get_milestone(milestone_id)
        update_data = data.model_dump(exclude_unset=True)
        for field, value in update_data.items():
            setattr(milestone, field, value)

        milestone.status = derive_milestone_status(
            milestone.completion_percentage or 0, milestone.deadline, now or datetime.now()
        )
        self.db.commit()
        self.db.refresh(milestone)
        return milestone

    # ---------- 任务-里程碑关联 ----------

    def list_task_links(self, task_id: str) -> List[TaskMilestone]:
        self._get_task(task_id)
        return self.db.query(TaskMilestone).filter(TaskMilestone.task_id == task_id).all()

    def get_link(self, link_id: str) -> TaskMilestone:
        link = self.db.query(TaskMilestone).filter(TaskMilestone.id == link_id).first()
        if not link:
            raise ResourceNotFoundException(message=f"任务-里程碑关联 {link_id} 不存在")
        return link

    def create_link(self, task_id: str, data: TaskMilestoneCreate) -> Tuple[TaskMilestone, bool]:
        """创建关联，提交后再重算里程碑

        Returns:
            (关联, 重算是否成功)
        """
        task = self._get_task(task_id)
        milestone = self.get_milestone(data.milestone_id)
        if milestone.project_id != task.project_id:
            raise ResourceConflictException(message="任务和里程碑不属于同一项目")

        exists = self.db.query(TaskMilestone).filter(
            TaskMilestone.task_id == task_id,
            TaskMilestone.milestone_id == data.milestone_id
        ).first()
        if exists:
            raise ResourceConflictException(message="该任务已关联此里程碑")

        link = TaskMilestone(
            task_id=task_id,
            milestone_id=data.milestone_id,
            weight=data.weight if data.weight is not None else 1,
        )
        self.db.add(link)
        self.db.commit()
        self.db.refresh(link)

        recalculated = self.recalculate_progress(link.milestone_id)
        return link, recalculated

    def update_link_weight(self, link_id: str, data: TaskMilestoneUpdate) -> Tuple[TaskMilestone, bool]:
        link = self.get_link(link_id)
        link.weight = data.weight
        self.db.commit()
        self.db.refresh(link)

        recalculated = self.recalculate_progress(link.milestone_id)
        return link, recalculated

    def delete_link(self, link_id: str) -> Tuple[str, bool]:
        """删除关联，返回 (里程碑ID, 重算是否成功)"""
        link = self.get_link(link_id)
        milestone_id = link.milestone_id
        self.db.delete(link)
        self.db.commit()

        recalculated = self.recalculate_progress(milestone_id)
        return milestone_id, recalculated

    def _get_project(self, project_id: str) -> Project:
        project = self.db.query(Project).filter(Project.id == project_id).first()
        if not project:
            raise ResourceNotFoundException(message=f"项目 {project_id} 不存在")
        return project

    def _get_task(self, task_id: str) -> Task:
        task = self.db.query(Task).filter(Task.id == task_id).first()
        if not task:
            raise ResourceNotFoundException(message=f"任务 {task_id} 不存在")
        return task
