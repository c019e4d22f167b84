from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from models.database import get_db
from models import User
from schemas import BaseResponse, DeadlineCheckSummary, WeeklyUpdateCheckSummary
from services.deadline_risk_service import run_deadline_check
from services.weekly_update_service import WeeklyUpdateService
from utils.auth import require_permission
from utils.response_utils import standard_response

router = APIRouter()


@router.post("/deadline-check", response_model=BaseResponse)
async def trigger_deadline_check(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("job:run"))
):
    """手动执行截止时间风险检查"""
    result = run_deadline_check(db)
    return standard_response(data=DeadlineCheckSummary(**result.summary()), message="截止时间检查完成")


@router.post("/weekly-update-check", response_model=BaseResponse)
async def trigger_weekly_update_check(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("job:run"))
):
    """手动执行周报检查"""
    result = WeeklyUpdateService(db).run_check()
    summary = WeeklyUpdateCheckSummary(
        action=result.action,
        year=result.year,
        week_number=result.week_number,
        notified_project_ids=result.notified_project_ids,
    )
    return standard_response(data=summary, message="周报检查完成")
