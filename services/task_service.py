"""任务服务模块

包含任务相关的业务逻辑处理
"""
import logging
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from models import Project, Task, TaskStatus, User, UserRole
from schemas.task import TaskCreate, TaskUpdate
from services.milestone_service import MilestoneService
from utils.exceptions import PermissionException, ResourceNotFoundException
from utils.response_utils import paginate_query

logger = logging.getLogger(__name__)

# 可以修改任意任务的角色
TASK_ADMIN_ROLES = (
    UserRole.ADMINISTRATOR, UserRole.MAIN_PMO, UserRole.SUB_PMO,
    UserRole.DEPARTMENT_DIRECTOR, UserRole.EXECUTIVE, UserRole.PROJECT_MANAGER,
)


class TaskService:
    """任务服务类"""

    def __init__(self, db: Session):
        self.db = db

    def create_task(self, task_data: TaskCreate, current_user: User) -> Task:
        """创建新任务"""
        # 检查项目是否存在
        project = self.db.query(Project).filter(Project.id == task_data.project_id).first()
        if not project:
            raise ResourceNotFoundException(message=f"项目 {task_data.project_id} 不存在")

        # 检查负责人是否存在
        if task_data.assigned_user_id:
            self._validate_user(task_data.assigned_user_id)

        task = Task(
            **task_data.model_dump(),
            created_by_user_id=current_user.id,
        )
        self.db.add(task)
        self.db.commit()
        self.db.refresh(task)

        return task

    def get_task(self, task_id: str) -> Task:
        """根据ID获取任务"""
        task = self.db.query(Task).filter(Task.id == task_id).first()
        if not task:
            raise ResourceNotFoundException(message=f"任务 {task_id} 不存在")
        return task

    def list_project_tasks(
        self, project_id: str, status: Optional[TaskStatus] = None, page: int = 1, size: int = 50
    ) -> Tuple[List[Task], int]:
        project = self.db.query(Project).filter(Project.id == project_id).first()
        if not project:
            raise ResourceNotFoundException(message=f"项目 {project_id} 不存在")

        query = self.db.query(Task).filter(Task.project_id == project_id)
        if status:
            query = query.filter(Task.status == status)

        total, records = paginate_query(query.order_by(Task.created_at.desc()), page, size)
        return records, total

    def update_task(self, task_id: str, task_data: TaskUpdate, current_user: User) -> Task:
        """更新任务

        状态变化时重新计算关联里程碑的完成度，重算失败不影响任务更新结果
        """
        task = self.get_task(task_id)

        # 权限检查：普通用户只能更新分配给自己或自己创建的任务
        if (current_user.role not in TASK_ADMIN_ROLES and
                current_user.id != task.assigned_user_id and
                current_user.id != task.created_by_user_id):
            raise PermissionException(message="无权限更新此任务")

        update_data = task_data.model_dump(exclude_unset=True)
        if update_data.get("assigned_user_id"):
            self._validate_user(update_data["assigned_user_id"])

        old_status = task.status
        for field, value in update_data.items():
            setattr(task, field, value)

        self.db.commit()
        self.db.refresh(task)

        if "status" in update_data and task.status != old_status:
            recalculated = MilestoneService(self.db).recalculate_for_task(task.id)
            logger.info(f"任务 {task.id} 状态 {old_status.value} -> {task.status.value}，已重算里程碑 {recalculated}")

        return task

    def _validate_user(self, user_id: str) -> User:
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise ResourceNotFoundException(message=f"用户 {user_id} 不存在")
        return user
