from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from models.database import get_db
from models import User, ProjectStatus
from schemas import BaseResponse, ProjectCreate, ProjectUpdate, ProjectRejectRequest, ProjectResponse
from services.project_service import ProjectService
from utils.auth import require_permission
from utils.response_utils import list_response, standard_response
from utils.status_codes import CREATED

router = APIRouter()


# 项目列表
@router.get("", response_model=BaseResponse)
async def get_projects(
    status: Optional[ProjectStatus] = Query(None, description="项目状态"),
    department_id: Optional[str] = Query(None, description="部门ID"),
    keyword: Optional[str] = Query(None, description="关键词搜索"),
    page: int = Query(1, ge=1, description="页码"),
    size: int = Query(10, ge=1, le=100, description="每页数量"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("project:read"))
):
    """获取项目列表"""
    projects, total = ProjectService(db).list_projects(status, department_id, keyword, page, size)
    return list_response(
        records=[ProjectResponse.model_validate(p) for p in projects],
        total=total,
        page=page,
        size=size,
        message="获取项目列表成功"
    )


@router.get("/{project_id}", response_model=BaseResponse)
async def get_project(
    project_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("project:read"))
):
    """获取项目详情"""
    project = ProjectService(db).get_project(project_id)
    return standard_response(data=ProjectResponse.model_validate(project), message="获取项目详情成功")


@router.post("", response_model=BaseResponse)
async def create_project(
    project_data: ProjectCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("project:write"))
):
    """创建项目，项目经理创建的项目需要审批"""
    project = ProjectService(db).create_project(project_data, current_user)
    return standard_response(data=ProjectResponse.model_validate(project), code=CREATED, message="项目创建成功")


@router.put("/{project_id}", response_model=BaseResponse)
async def update_project(
    project_id: str,
    project_data: ProjectUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("project:write"))
):
    """更新项目"""
    project = ProjectService(db).update_project(project_id, project_data)
    return standard_response(data=ProjectResponse.model_validate(project), message="项目更新成功")


@router.post("/{project_id}/approve", response_model=BaseResponse)
async def approve_project(
    project_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("project:approve"))
):
    """审批通过项目"""
    project = ProjectService(db).approve_project(project_id, current_user)
    return standard_response(data=ProjectResponse.model_validate(project), message="项目已审批通过")


@router.post("/{project_id}/reject", response_model=BaseResponse)
async def reject_project(
    project_id: str,
    reject_data: Optional[ProjectRejectRequest] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("project:approve"))
):
    """驳回项目"""
    reason = reject_data.reason if reject_data else None
    project = ProjectService(db).reject_project(project_id, current_user, reason)
    return standard_response(data=ProjectResponse.model_validate(project), message="项目已驳回")
