from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from models.database import get_db
from models import User
from schemas import BaseResponse, WeeklyUpdateCreate, WeeklyUpdateResponse
from services.weekly_update_service import WeeklyUpdateService
from utils.auth import require_permission
from utils.response_utils import standard_response
from utils.status_codes import CREATED

router = APIRouter()


@router.get("/{project_id}/weekly-updates", response_model=BaseResponse)
async def get_weekly_updates(
    project_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("weekly:read"))
):
    """获取项目周报列表"""
    updates = WeeklyUpdateService(db).list_updates(project_id)
    return standard_response(
        data=[WeeklyUpdateResponse.model_validate(u) for u in updates],
        message="获取周报列表成功"
    )


@router.post("/{project_id}/weekly-updates", response_model=BaseResponse)
async def submit_weekly_update(
    project_id: str,
    update_data: WeeklyUpdateCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("weekly:write"))
):
    """提交本周周报"""
    update = WeeklyUpdateService(db).submit_update(project_id, update_data, current_user)
    return standard_response(data=WeeklyUpdateResponse.model_validate(update), code=CREATED, message="周报提交成功")


@router.get("/{project_id}/weekly-updates/missed", response_model=BaseResponse)
async def get_weekly_update_missed(
    project_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("weekly:read"))
):
    """本周周报是否缺失（用于前端提示）"""
    service = WeeklyUpdateService(db)
    service.get_project(project_id)
    return standard_response(data={"missed": service.has_missed_weekly_update(project_id)})
