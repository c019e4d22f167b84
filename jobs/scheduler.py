"""定时任务调度模块

使用 asyncio 后台任务周期执行：
- 截止时间风险检查
- 周报提醒检查
- 待审批提醒邮件

每个任务启动后先等待初始延迟，再按固定间隔运行。
单次运行失败只记录日志，不影响后续调度。
"""
import asyncio
import logging
from datetime import datetime
from typing import Awaitable, Callable, List, Optional, Tuple

from config.settings import settings
from models import SessionLocal, User
from services.approval_reminder_service import ApprovalReminder, ApprovalReminderService, send_reminders
from services.deadline_risk_service import run_deadline_check
from services.weekly_update_service import WeeklyUpdateService
from utils.mailer import is_email_configured, send_notification_email

logger = logging.getLogger(__name__)


class PeriodicJob:
    """按固定间隔运行的后台任务"""

    def __init__(
        self,
        name: str,
        func: Callable[[], Awaitable[None]],
        interval_hours: float,
        initial_delay_seconds: float = 60,
    ):
        self.name = name
        self.func = func
        self.interval_seconds = interval_hours * 3600
        self.initial_delay_seconds = initial_delay_seconds
        self._task: Optional[asyncio.Task] = None
        self._running = False

    def start(self):
        if self._running:
            logger.warning(f"定时任务 {self.name} 已在运行")
            return
        self._running = True
        self._task = asyncio.create_task(self._loop())
        logger.info(
            f"定时任务 {self.name} 已启动 (首次延迟 {self.initial_delay_seconds}s, 间隔 {self.interval_seconds / 3600:.1f}h)"
        )

    def stop(self):
        self._running = False
        if self._task and not self._task.done():
            self._task.cancel()
            logger.info(f"定时任务 {self.name} 已停止")

    @property
    def is_running(self) -> bool:
        return self._running and self._task is not None and not self._task.done()

    async def run_once(self):
        try:
            await self.func()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"定时任务 {self.name} 执行失败: {e}", exc_info=True)

    async def _loop(self):
        try:
            await asyncio.sleep(self.initial_delay_seconds)
            while self._running:
                await self.run_once()
                await asyncio.sleep(self.interval_seconds)
        except asyncio.CancelledError:
            pass


def _deadline_sweep() -> List[Tuple[str, str, Optional[str]]]:
    """执行截止时间检查，返回需要发送邮件的 (邮箱, 内容, 关联实体)"""
    db = SessionLocal()
    try:
        result = run_deadline_check(db)
        outgoing = []
        for notification in result.notifications:
            user = db.query(User).filter(User.id == notification.user_id).first()
            if user and user.email:
                outgoing.append((user.email, notification.message, notification.related_entity))
        return outgoing
    finally:
        db.close()


def _weekly_update_sweep():
    db = SessionLocal()
    try:
        return WeeklyUpdateService(db).run_check()
    finally:
        db.close()


async def deadline_check_job():
    loop = asyncio.get_running_loop()
    outgoing = await loop.run_in_executor(None, _deadline_sweep)

    if not outgoing or not is_email_configured():
        return
    for to, message, related_entity in outgoing:
        await send_notification_email(to, message, related_entity)


async def weekly_update_check_job():
    loop = asyncio.get_running_loop()
    await loop.run_in_executor(None, _weekly_update_sweep)


def _collect_approval_reminders(now: datetime) -> List[ApprovalReminder]:
    db = SessionLocal()
    try:
        return ApprovalReminderService(db).collect_due_reminders(now)
    finally:
        db.close()


def _mark_approval_reminders(notification_ids: List[str], now: datetime) -> int:
    db = SessionLocal()
    try:
        return ApprovalReminderService(db).mark_sent(notification_ids, now)
    finally:
        db.close()


async def approval_reminder_job():
    if not is_email_configured():
        logger.debug("邮件未配置，跳过审批提醒")
        return

    now = datetime.now()
    loop = asyncio.get_running_loop()
    reminders = await loop.run_in_executor(None, _collect_approval_reminders, now)
    sent_ids = await send_reminders(reminders)
    if sent_ids:
        await loop.run_in_executor(None, _mark_approval_reminders, sent_ids, now)
    logger.info(f"审批提醒处理完成，已发送 {len(sent_ids)} 封")


class JobScheduler:
    """管理所有定时任务"""

    def __init__(self, jobs: Optional[List[PeriodicJob]] = None):
        delay = settings.SCHEDULER_INITIAL_DELAY_SECONDS
        self.jobs = jobs if jobs is not None else [
            PeriodicJob("deadline-check", deadline_check_job, settings.DEADLINE_CHECK_INTERVAL_HOURS, delay),
            PeriodicJob("weekly-update-check", weekly_update_check_job, settings.WEEKLY_UPDATE_CHECK_INTERVAL_HOURS, delay),
            PeriodicJob("approval-reminder", approval_reminder_job, settings.APPROVAL_REMINDER_INTERVAL_HOURS, delay),
        ]

    def start(self):
        logger.info("启动定时任务调度器")
        for job in self.jobs:
            job.start()

    def stop(self):
        for job in self.jobs:
            job.stop()
        logger.info("定时任务调度器已停止")

    def get_status(self) -> dict:
        return {job.name: job.is_running for job in self.jobs}
