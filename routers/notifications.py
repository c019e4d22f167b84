from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from models.database import get_db
from models import User
from schemas import BaseResponse, NotificationResponse
from services.notification_service import NotificationService
from utils.auth import require_permission
from utils.response_utils import list_response, standard_response

router = APIRouter()


@router.get("", response_model=BaseResponse)
async def get_notifications(
    unread_only: bool = Query(False, description="只看未读"),
    page: int = Query(1, ge=1, description="页码"),
    size: int = Query(20, ge=1, le=100, description="每页数量"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("notification:read"))
):
    """获取当前用户的通知"""
    records, total = NotificationService(db).list_notifications(current_user, unread_only, page, size)
    return list_response(
        records=[NotificationResponse.model_validate(n) for n in records],
        total=total,
        page=page,
        size=size,
        message="获取通知列表成功"
    )


@router.post("/read-all", response_model=BaseResponse)
async def mark_all_notifications_read(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("notification:read"))
):
    """全部标记为已读"""
    count = NotificationService(db).mark_all_read(current_user)
    return standard_response(data={"updated": count}, message="已全部标记为已读")


@router.post("/{notification_id}/read", response_model=BaseResponse)
async def mark_notification_read(
    notification_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("notification:read"))
):
    """标记通知为已读"""
    notification = NotificationService(db).mark_read(notification_id, current_user)
    return standard_response(data=NotificationResponse.model_validate(notification), message="已标记为已读")
