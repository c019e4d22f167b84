from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from models.database import get_db
from models import User, RiskType, RiskStatus
from schemas import BaseResponse, RiskIssueCreate, RiskIssueUpdate, RiskIssueResponse
from services.risk_issue_service import RiskIssueService
from utils.auth import require_permission
from utils.response_utils import list_response, standard_response
from utils.status_codes import CREATED

router = APIRouter()


@router.get("", response_model=BaseResponse)
async def get_risks_issues(
    project_id: Optional[str] = Query(None, description="项目ID"),
    type: Optional[RiskType] = Query(None, description="类型：Risk/Issue"),
    status: Optional[RiskStatus] = Query(None, description="状态"),
    page: int = Query(1, ge=1, description="页码"),
    size: int = Query(20, ge=1, le=100, description="每页数量"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("risk:read"))
):
    """获取风险/问题列表"""
    records, total = RiskIssueService(db).list_risks(project_id, type, status, page, size)
    return list_response(
        records=[RiskIssueResponse.model_validate(r) for r in records],
        total=total,
        page=page,
        size=size,
        message="获取风险/问题列表成功"
    )


@router.post("", response_model=BaseResponse)
async def create_risk_issue(
    risk_data: RiskIssueCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("risk:write"))
):
    """创建风险/问题"""
    risk = RiskIssueService(db).create_risk(risk_data, current_user)
    return standard_response(data=RiskIssueResponse.model_validate(risk), code=CREATED, message="创建成功")


@router.put("/{risk_id}", response_model=BaseResponse)
async def update_risk_issue(
    risk_id: str,
    risk_data: RiskIssueUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("risk:write"))
):
    """更新风险/问题"""
    risk = RiskIssueService(db).update_risk(risk_id, risk_data)
    return standard_response(data=RiskIssueResponse.model_validate(risk), message="更新成功")
