from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from models.database import get_db
from models import User
from schemas import (
    BaseResponse, MilestoneCreate, MilestoneUpdate, MilestoneResponse,
    TaskMilestoneCreate, TaskMilestoneUpdate, TaskMilestoneResponse, TaskMilestoneResult
)
from services.milestone_service import MilestoneService
from utils.auth import require_permission
from utils.response_utils import standard_response
from utils.status_codes import CREATED

router = APIRouter()


# ---------- 里程碑 ----------

@router.get("/projects/{project_id}/milestones", response_model=BaseResponse)
async def get_project_milestones(
    project_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("milestone:read"))
):
    """获取项目里程碑列表"""
    milestones = MilestoneService(db).list_milestones(project_id)
    return standard_response(
        data=[MilestoneResponse.model_validate(m) for m in milestones],
        message="获取里程碑列表成功"
    )


@router.post("/projects/{project_id}/milestones", response_model=BaseResponse)
async def create_milestone(
    project_id: str,
    milestone_data: MilestoneCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("milestone:write"))
):
    """创建里程碑"""
    milestone = MilestoneService(db).create_milestone(project_id, milestone_data)
    return standard_response(data=MilestoneResponse.model_validate(milestone), code=CREATED, message="里程碑创建成功")


@router.get("/milestones/{milestone_id}", response_model=BaseResponse)
async def get_milestone(
    milestone_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("milestone:read"))
):
    """获取里程碑详情"""
    milestone = MilestoneService(db).get_milestone(milestone_id)
    return standard_response(data=MilestoneResponse.model_validate(milestone), message="获取里程碑详情成功")


@router.put("/milestones/{milestone_id}", response_model=BaseResponse)
async def update_milestone(
    milestone_id: str,
    milestone_data: MilestoneUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("milestone:write"))
):
    """更新里程碑基本信息"""
    milestone = MilestoneService(db).update_milestone(milestone_id, milestone_data)
    return standard_response(data=MilestoneResponse.model_validate(milestone), message="里程碑更新成功")


@router.post("/milestones/{milestone_id}/recalculate", response_model=BaseResponse)
async def recalculate_milestone(
    milestone_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("milestone:write"))
):
    """手动重算里程碑进度"""
    service = MilestoneService(db)
    milestone = service.get_milestone(milestone_id)
    recalculated = service.recalculate_progress(milestone.id)
    db.refresh(milestone)
    return standard_response(
        data={"milestone": MilestoneResponse.model_validate(milestone), "recalculated": recalculated},
        message="里程碑进度已重算" if recalculated else "里程碑进度重算失败"
    )


# ---------- 任务-里程碑关联 ----------

@router.get("/tasks/{task_id}/milestones", response_model=BaseResponse)
async def get_task_milestone_links(
    task_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("milestone:read"))
):
    """获取任务关联的里程碑"""
    links = MilestoneService(db).list_task_links(task_id)
    return standard_response(
        data=[TaskMilestoneResponse.model_validate(link) for link in links],
        message="获取任务里程碑关联成功"
    )


@router.post("/tasks/{task_id}/milestones", response_model=BaseResponse)
async def create_task_milestone_link(
    task_id: str,
    link_data: TaskMilestoneCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("milestone:write"))
):
    """关联任务与里程碑，并重算里程碑进度"""
    link, recalculated = MilestoneService(db).create_link(task_id, link_data)
    result = TaskMilestoneResult(
        link=TaskMilestoneResponse.model_validate(link),
        milestone_id=link.milestone_id,
        recalculated=recalculated,
    )
    return standard_response(data=result, code=CREATED, message="关联创建成功")


@router.put("/task-milestones/{link_id}", response_model=BaseResponse)
async def update_task_milestone_link(
    link_id: str,
    link_data: TaskMilestoneUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("milestone:write"))
):
    """更新关联权重，并重算里程碑进度"""
    link, recalculated = MilestoneService(db).update_link_weight(link_id, link_data)
    result = TaskMilestoneResult(
        link=TaskMilestoneResponse.model_validate(link),
        milestone_id=link.milestone_id,
        recalculated=recalculated,
    )
    return standard_response(data=result, message="关联更新成功")


@router.delete("/task-milestones/{link_id}", response_model=BaseResponse)
async def delete_task_milestone_link(
    link_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("milestone:write"))
):
    """删除关联，并重算里程碑进度"""
    milestone_id, recalculated = MilestoneService(db).delete_link(link_id)
    result = TaskMilestoneResult(milestone_id=milestone_id, recalculated=recalculated)
    return standard_response(data=result, message="关联删除成功")
