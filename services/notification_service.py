"""通知服务模块"""
import logging
from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models import Notification, User
from utils.exceptions import PermissionException, ResourceNotFoundException
from utils.response_utils import paginate_query

logger = logging.getLogger(__name__)


class NotificationService:
    """通知服务类"""

    def __init__(self, db: Session):
        self.db = db

    def notify(
        self,
        user_id: str,
        related_entity: str,
        related_entity_id: Optional[str],
        message: str,
        requires_approval: bool = False,
    ) -> Optional[Notification]:
        """创建站内通知

        失败时回滚并记录日志，返回 None，不影响调用方的后续处理
        """
        try:
            notification = Notification(
                user_id=user_id,
                related_entity=related_entity,
                related_entity_id=related_entity_id,
                message=message,
                is_read=False,
                requires_approval=requires_approval,
            )
            self.db.add(notification)
            self.db.commit()
            self.db.refresh(notification)
            return notification
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"创建通知失败 (user={user_id}, {related_entity}={related_entity_id}): {e}", exc_info=True)
            return None

    def list_notifications(
        self, user: User, unread_only: bool = False, page: int = 1, size: int = 20
    ) -> Tuple[List[Notification], int]:
        query = self.db.query(Notification).filter(Notification.user_id == user.id)
        if unread_only:
            query = query.filter(Notification.is_read.is_(False))

        total, records = paginate_query(query.order_by(Notification.created_at.desc()), page, size)
        return records, total

    def get_notification(self, notification_id: str) -> Notification:
        notification = self.db.query(Notification).filter(Notification.id == notification_id).first()
        if not notification:
            raise ResourceNotFoundException(message=f"通知 {notification_id} 不存在")
        return notification

    def mark_read(self, notification_id: str, user: User) -> Notification:
        """标记单条通知为已读，只能操作自己的通知"""
        notification = self.get_notification(notification_id)
        if notification.user_id != user.id:
            raise PermissionException(message="无权操作他人的通知")

        notification.is_read = True
        self.db.commit()
        self.db.refresh(notification)
        return notification

    def mark_all_read(self, user: User) -> int:
        count = (
            self.db.query(Notification)
            .filter(Notification.user_id == user.id, Notification.is_read.is_(False))
            .update({Notification.is_read: True}, synchronize_session=False)
        )
        self.db.commit()
        return count

    def notifications_needing_reminders(self, interval_hours: int, now: Optional[datetime] = None) -> List[Notification]:
        """需要发送审批提醒的通知

        条件：未读、需要审批、创建时间早于一个提醒周期，且从未提醒或上次提醒已超过一个周期
        """
        now = now or datetime.now()
        cutoff = now - timedelta(hours=interval_hours)
        return (
            self.db.query(Notification)
            .filter(
                Notification.is_read.is_(False),
                Notification.requires_approval.is_(True),
                Notification.created_at < cutoff,
                or_(
                    Notification.last_reminder_sent.is_(None),
                    Notification.last_reminder_sent < cutoff,
                ),
            )
            .all()
        )

    def mark_reminder_sent(self, notification_id: str, now: Optional[datetime] = None) -> bool:
        notification = self.db.query(Notification).filter(Notification.id == notification_id).first()
        if not notification:
            return False
        try:
            notification.last_reminder_sent = now or datetime.now()
            self.db.commit()
            return True
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"更新通知 {notification_id} 提醒时间失败: {e}", exc_info=True)
            return False
