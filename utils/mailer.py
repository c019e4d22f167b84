"""异步邮件发送模块

基于 aiosmtplib 的非阻塞SMTP发送。发送失败只记录日志并返回 False，
不会中断调用方（定时任务或请求处理）。
"""
import logging
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

import aiosmtplib

from config.settings import settings

logger = logging.getLogger(__name__)


def is_email_configured() -> bool:
    """检查SMTP是否已配置"""
    return settings.email_configured


def build_message(to: str, subject: str, text: str, html: Optional[str] = None) -> MIMEMultipart:
    """构建邮件对象"""
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = settings.SMTP_FROM
    msg["To"] = to
    msg.attach(MIMEText(text, "plain", "utf-8"))
    if html:
        msg.attach(MIMEText(html, "html", "utf-8"))
    return msg


async def send_email(to: str, subject: str, text: str, html: Optional[str] = None) -> bool:
    """发送邮件

    Returns:
        发送成功返回 True，未配置或失败返回 False
    """
    if not is_email_configured():
        logger.debug("邮件未配置，跳过发送")
        return False

    if not to:
        logger.debug("收件人为空，跳过发送")
        return False

    msg = build_message(to, subject, text, html)

    try:
        await aiosmtplib.send(
            msg,
            hostname=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            start_tls=settings.SMTP_START_TLS,
            username=settings.SMTP_USER,
            password=settings.SMTP_PASSWORD,
        )
        logger.info(f"邮件已发送至 {to}: {subject}")
        return True
    except Exception as e:
        logger.warning(f"邮件发送失败 ({to}): {e}")
        return False


async def send_notification_email(to: Optional[str], message: str, related_entity: Optional[str] = None) -> bool:
    """将站内通知同步发送到用户邮箱"""
    if not to:
        return False

    urgent = message.startswith("URGENT")
    subject = f"[ProjectPulse] {'Urgent: ' if urgent else ''}{related_entity or 'Notification'} update"
    return await send_email(to, subject, message)


async def send_approval_reminder_email(
    to: str,
    item_type: str,
    item_name: str,
    item_id: Optional[str],
    approval_url: str,
    days_waiting: int,
) -> bool:
    """发送待审批提醒邮件"""
    subject = f"[ProjectPulse] Reminder: {item_type} awaiting your approval"
    text = (
        f"The {item_type} \"{item_name}\" (#{item_id}) has been waiting for your approval "
        f"for {days_waiting} day(s).\n\nReview it here: {approval_url}\n"
    )
    html = (
        f"<p>The {item_type} <strong>{item_name}</strong> (#{item_id}) has been waiting "
        f"for your approval for {days_waiting} day(s).</p>"
        f"<p><a href=\"{approval_url}\">Review pending approvals</a></p>"
    )
    return await send_email(to, subject, text, html)
