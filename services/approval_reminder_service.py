"""待审批提醒服务

定期检查需要审批但仍未读的通知，向审批人发送提醒邮件。
数据库查询和邮件发送分开：定时任务在线程池里收集提醒，只在事件循环中等待邮件发送。
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from config.settings import settings
from models import Notification, Project, User
from services.notification_service import NotificationService
from utils.mailer import send_approval_reminder_email

logger = logging.getLogger(__name__)


@dataclass
class ApprovalReminder:
    """一封待发送的审批提醒，只包含普通值，可以脱离会话使用"""
    notification_id: str
    to: str
    item_type: str
    item_name: str
    item_id: Optional[str]
    approval_url: str
    days_waiting: int


async def send_reminders(reminders: Iterable[ApprovalReminder]) -> List[str]:
    """逐封发送提醒，返回发送成功的通知ID"""
    sent = []
    for reminder in reminders:
        ok = await send_approval_reminder_email(
            reminder.to,
            reminder.item_type,
            reminder.item_name,
            reminder.item_id,
            reminder.approval_url,
            reminder.days_waiting,
        )
        if ok:
            sent.append(reminder.notification_id)
    return sent


class ApprovalReminderService:
    """待审批提醒服务类"""

    def __init__(self, db: Session, interval_hours: Optional[int] = None):
        self.db = db
        self.interval_hours = interval_hours or settings.APPROVAL_REMINDER_INTERVAL_HOURS
        self.notification_service = NotificationService(db)

    def _approval_target(self, notification: Notification):
        """返回 (条目名称, 审批链接)"""
        base_url = f"{settings.CLIENT_URL}/approvals"
        item_type = notification.related_entity or "Item"
        item_name = f"{item_type} #{notification.related_entity_id}"

        if notification.related_entity == "Project" and notification.related_entity_id:
            project = self.db.query(Project).filter(Project.id == notification.related_entity_id).first()
            if project:
                return project.title or item_name, f"{base_url}?type=project&id={project.id}"

        return item_name, base_url

    def collect_due_reminders(self, now: Optional[datetime] = None) -> List[ApprovalReminder]:
        """收集需要提醒的审批通知"""
        now = now or datetime.now()
        notifications = self.notification_service.notifications_needing_reminders(self.interval_hours, now)
        if not notifications:
            logger.info("当前没有需要提醒的待审批事项")
            return []

        logger.info(f"发现 {len(notifications)} 条待审批通知需要提醒")
        reminders = []
        for notification in notifications:
            self.db.refresh(notification)
            if notification.is_read:
                continue

            user = self.db.query(User).filter(User.id == notification.user_id).first()
            if not user or not user.email:
                logger.info(f"通知 {notification.id} 的用户没有邮箱，跳过提醒")
                continue

            created_at = notification.created_at or now
            item_name, approval_url = self._approval_target(notification)
            reminders.append(ApprovalReminder(
                notification_id=notification.id,
                to=user.email,
                item_type=(notification.related_entity or "Item").lower(),
                item_name=item_name,
                item_id=notification.related_entity_id,
                approval_url=approval_url,
                days_waiting=(now - created_at).days,
            ))
        return reminders

    def mark_sent(self, notification_ids: Iterable[str], now: Optional[datetime] = None) -> int:
        now = now or datetime.now()
        return sum(1 for nid in notification_ids if self.notification_service.mark_reminder_sent(nid, now))

    async def process_reminders(self, now: Optional[datetime] = None) -> int:
        """收集、发送并记录提醒时间，返回成功发送的数量"""
        now = now or datetime.now()
        sent_ids = await send_reminders(self.collect_due_reminders(now))
        self.mark_sent(sent_ids, now)
        logger.info(f"审批提醒处理完成，已发送 {len(sent_ids)} 封")
        return len(sent_ids)
