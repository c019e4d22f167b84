"""项目服务模块

包含项目创建、更新和审批流程
"""
import logging
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from models import Notification, Project, ProjectStatus, User, UserRole
from schemas.project import ProjectCreate, ProjectUpdate
from services.notification_service import NotificationService
from utils.exceptions import ResourceNotFoundException, ValidationException, WorkflowStateException
from utils.response_utils import paginate_query

logger = logging.getLogger(__name__)

# 需要审批的创建者角色
APPROVAL_REQUIRED_ROLES = (UserRole.PROJECT_MANAGER,)


class ProjectService:
    """项目服务类"""

    def __init__(self, db: Session):
        self.db = db
        self.notification_service = NotificationService(db)

    def get_project(self, project_id: str) -> Project:
        project = self.db.query(Project).filter(Project.id == project_id).first()
        if not project:
            raise ResourceNotFoundException(message=f"项目 {project_id} 不存在")
        return project

    def list_projects(
        self,
        status: Optional[ProjectStatus] = None,
        department_id: Optional[str] = None,
        keyword: Optional[str] = None,
        page: int = 1,
        size: int = 10,
    ) -> Tuple[List[Project], int]:
        query = self.db.query(Project)
        if status:
            query = query.filter(Project.status == status)
        if department_id:
            query = query.filter(Project.department_id == department_id)
        if keyword:
            query = query.filter(Project.title.contains(keyword))

        total, records = paginate_query(query.order_by(Project.created_at.desc()), page, size)
        return records, total

    def create_project(self, project_data: ProjectCreate, current_user: User) -> Project:
        """创建项目

        项目经理创建的项目进入待审批状态并通知审批人，其他角色直接进入规划状态
        """
        if project_data.manager_user_id:
            manager = self.db.query(User).filter(User.id == project_data.manager_user_id).first()
            if not manager:
                raise ValidationException(message=f"项目经理 {project_data.manager_user_id} 不存在")

        needs_approval = current_user.role in APPROVAL_REQUIRED_ROLES
        project = Project(
            **project_data.model_dump(),
            status=ProjectStatus.PENDING if needs_approval else ProjectStatus.PLANNING,
            created_by_user_id=current_user.id,
        )
        if not project.manager_user_id and current_user.role == UserRole.PROJECT_MANAGER:
            project.manager_user_id = current_user.id
        if not project.department_id:
            project.department_id = current_user.department_id

        self.db.add(project)
        self.db.commit()
        self.db.refresh(project)
        logger.info(f"用户 {current_user.username} 创建项目 {project.id} ({project.status.value})")

        if needs_approval:
            self._notify_approvers(project)
        return project

    def update_project(self, project_id: str, project_data: ProjectUpdate) -> Project:
        project = self.get_project(project_id)
        update_data = project_data.model_dump(exclude_unset=True)

        # 审批状态只能通过审批接口变更
        new_status = update_data.get("status")
        if new_status in (ProjectStatus.PENDING, ProjectStatus.REJECTED) and new_status != project.status:
            raise WorkflowStateException(message="不能直接将项目设置为待审批或驳回状态")
        if project.status == ProjectStatus.PENDING and new_status and new_status != ProjectStatus.PENDING:
            raise WorkflowStateException(message="待审批项目需要先通过审批")

        for field, value in update_data.items():
            setattr(project, field, value)

        self.db.commit()
        self.db.refresh(project)
        return project

    def approve_project(self, project_id: str, current_user: User) -> Project:
        """审批通过，进入规划状态"""
        project = self._get_pending(project_id)
        project.status = ProjectStatus.PLANNING
        self._close_approval_notifications(project.id)
        self.db.commit()
        self.db.refresh(project)
        logger.info(f"项目 {project.id} 已由 {current_user.username} 审批通过")

        if project.created_by_user_id:
            self.notification_service.notify(
                project.created_by_user_id, "Project", project.id,
                f'Your project "{project.title}" has been approved.',
            )
        return project

    def reject_project(self, project_id: str, current_user: User, reason: Optional[str] = None) -> Project:
        """审批驳回"""
        project = self._get_pending(project_id)
        project.status = ProjectStatus.REJECTED
        self._close_approval_notifications(project.id)
        self.db.commit()
        self.db.refresh(project)
        logger.info(f"项目 {project.id} 已由 {current_user.username} 驳回")

        if project.created_by_user_id:
            message = f'Your project "{project.title}" has been rejected.'
            if reason:
                message = f"{message} Reason: {reason}"
            self.notification_service.notify(project.created_by_user_id, "Project", project.id, message)
        return project

    def _get_pending(self, project_id: str) -> Project:
        project = self.get_project(project_id)
        if project.status != ProjectStatus.PENDING:
            raise WorkflowStateException(message=f"项目当前状态为 {project.status.value}，不能审批")
        return project

    def _approvers(self, project: Project) -> List[User]:
        """审批人：所属部门主管以及总PMO"""
        approvers = []
        if project.department_id:
            approvers.extend(
                self.db.query(User).filter(
                    User.role == UserRole.DEPARTMENT_DIRECTOR,
                    User.department_id == project.department_id,
                    User.is_active.is_(True),
                ).all()
            )
        approvers.extend(
            self.db.query(User).filter(User.role == UserRole.MAIN_PMO, User.is_active.is_(True)).all()
        )
        return approvers

    def _notify_approvers(self, project: Project):
        for approver in self._approvers(project):
            self.notification_service.notify(
                approver.id, "Project", project.id,
                f'Project "{project.title}" is awaiting your approval.',
                requires_approval=True,
            )

    def _close_approval_notifications(self, project_id: str):
        """审批完成后，待审批通知不再需要提醒"""
        self.db.query(Notification).filter(
            Notification.related_entity == "Project",
            Notification.related_entity_id == project_id,
            Notification.requires_approval.is_(True),
            Notification.is_read.is_(False),
        ).update({Notification.is_read: True}, synchronize_session=False)
