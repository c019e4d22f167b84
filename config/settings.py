"""应用设置模块

基于 pydantic-settings 从环境变量 / .env 加载配置
"""
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings

load_dotenv()


class Settings(BaseSettings):
    # 应用配置
    APP_NAME: str = "ProjectPulse"
    APP_DESCRIPTION: str = "项目管理与审批工作流系统API"
    VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    API_V1_STR: str = "/api/v1"

    # 服务器配置
    SERVER_HOST: str = "127.0.0.1"
    SERVER_PORT: int = 8000

    # 数据库配置
    DATABASE_URL: str = "sqlite:///./projectpulse.db"  # 开发环境使用SQLite
    DATABASE_ECHO: bool = False  # 是否显示SQLAlchemy的SQL日志

    # JWT配置
    SECRET_KEY: str = "your-secret-key-change-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 8

    # 日志配置
    LOG_LEVEL: str = "INFO"
    LOG_ENABLE_COLORS: bool = True
    LOG_FILE: Optional[str] = None
    LOG_MAX_SIZE: int = 10 * 1024 * 1024  # 10 MB
    LOG_BACKUP_COUNT: int = 5

    # 邮件配置
    SMTP_HOST: Optional[str] = None
    SMTP_PORT: int = 587
    SMTP_USER: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    SMTP_FROM: str = "no-reply@projectpulse.local"
    SMTP_START_TLS: bool = True
    CLIENT_URL: str = "http://localhost:3000"

    # 定时任务配置
    SCHEDULER_ENABLED: bool = True
    SCHEDULER_INITIAL_DELAY_SECONDS: float = 60
    DEADLINE_CHECK_INTERVAL_HOURS: float = 24
    WEEKLY_UPDATE_CHECK_INTERVAL_HOURS: float = 24
    APPROVAL_REMINDER_INTERVAL_HOURS: float = 24

    # 业务规则配置
    RISK_WINDOW_DAYS: int = 7  # 截止日期前多少天生成风险
    MILESTONE_AT_RISK_DAYS: int = 3
    MILESTONE_AT_RISK_THRESHOLD: int = 75
    WEEKLY_UPDATE_REMINDER_WEEKDAY: int = 3  # 周四（datetime.weekday()）
    WEEK_NUMBERING: str = "iso"  # iso | legacy
    SYSTEM_USER_ID: Optional[str] = None  # 自动生成风险/问题的创建人

    # CORS配置
    cors_origins: list[str] = ["*"]  # 允许所有来源，生产环境请修改

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def email_configured(self) -> bool:
        return bool(self.SMTP_HOST and self.SMTP_USER)

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


# 创建全局设置实例
settings = Settings()
