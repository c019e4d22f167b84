"""风险/问题服务模块"""
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from models import Project, RiskIssue, RiskStatus, RiskType, User
from schemas.risk_issue import RiskIssueCreate, RiskIssueUpdate
from utils.exceptions import ResourceNotFoundException
from utils.response_utils import paginate_query


class RiskIssueService:
    """风险/问题服务类"""

    def __init__(self, db: Session):
        self.db = db

    def list_risks(
        self,
        project_id: Optional[str] = None,
        risk_type: Optional[RiskType] = None,
        status: Optional[RiskStatus] = None,
        page: int = 1,
        size: int = 20,
    ) -> Tuple[List[RiskIssue], int]:
        query = self.db.query(RiskIssue)
        if project_id:
            query = query.filter(RiskIssue.project_id == project_id)
        if risk_type:
            query = query.filter(RiskIssue.type == risk_type)
        if status:
            query = query.filter(RiskIssue.status == status)

        total, records = paginate_query(query.order_by(RiskIssue.created_at.desc()), page, size)
        return records, total

    def get_risk(self, risk_id: str) -> RiskIssue:
        risk = self.db.query(RiskIssue).filter(RiskIssue.id == risk_id).first()
        if not risk:
            raise ResourceNotFoundException(message=f"风险/问题 {risk_id} 不存在")
        return risk

    def create_risk(self, data: RiskIssueCreate, current_user: User) -> RiskIssue:
        """手动创建风险/问题，不带自动生成来源"""
        project = self.db.query(Project).filter(Project.id == data.project_id).first()
        if not project:
            raise ResourceNotFoundException(message=f"项目 {data.project_id} 不存在")

        risk = RiskIssue(
            **data.model_dump(),
            status=RiskStatus.OPEN,
            created_by_user_id=current_user.id,
        )
        self.db.add(risk)
        self.db.commit()
        self.db.refresh(risk)
        return risk

    def update_risk(self, risk_id: str, data: RiskIssueUpdate) -> RiskIssue:
        risk = self.get_risk(risk_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(risk, field, value)
        self.db.commit()
        self.db.refresh(risk)
        return risk
