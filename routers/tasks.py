from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from models.database import get_db
from models import User, TaskStatus
from schemas import BaseResponse, TaskCreate, TaskUpdate, TaskResponse
from services.task_service import TaskService
from utils.auth import require_permission
from utils.response_utils import list_response, standard_response
from utils.status_codes import CREATED

router = APIRouter()


@router.get("/projects/{project_id}/tasks", response_model=BaseResponse)
async def get_project_tasks(
    project_id: str,
    status: Optional[TaskStatus] = Query(None, description="任务状态"),
    page: int = Query(1, ge=1, description="页码"),
    size: int = Query(50, ge=1, le=200, description="每页数量"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("task:read"))
):
    """获取项目下的任务列表"""
    tasks, total = TaskService(db).list_project_tasks(project_id, status, page, size)
    return list_response(
        records=[TaskResponse.model_validate(t) for t in tasks],
        total=total,
        page=page,
        size=size,
        message="获取任务列表成功"
    )


@router.post("/tasks", response_model=BaseResponse)
async def create_task(
    task_data: TaskCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("task:write"))
):
    """创建任务"""
    task = TaskService(db).create_task(task_data, current_user)
    return standard_response(data=TaskResponse.model_validate(task), code=CREATED, message="任务创建成功")


@router.get("/tasks/{task_id}", response_model=BaseResponse)
async def get_task(
    task_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("task:read"))
):
    """获取任务详情"""
    task = TaskService(db).get_task(task_id)
    return standard_response(data=TaskResponse.model_validate(task), message="获取任务详情成功")


@router.put("/tasks/{task_id}", response_model=BaseResponse)
async def update_task(
    task_id: str,
    task_data: TaskUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("task:write"))
):
    """更新任务，状态变化会重算关联里程碑"""
    task = TaskService(db).update_task(task_id, task_data, current_user)
    return standard_response(data=TaskResponse.model_validate(task), message="任务更新成功")
