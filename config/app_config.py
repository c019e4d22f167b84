"""应用配置模块

负责创建FastAPI应用实例和配置路由
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from config.logging_config import setup_logging
from config.settings import settings
from jobs.scheduler import JobScheduler
from models.database import Base, engine
from utils.response_utils import standard_response

# 导入路由
from routers import (
    auth, projects, tasks, milestones, risks, notifications, weekly_updates, jobs
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期：初始化日志和数据表，启动/停止定时任务"""
    setup_logging()
    Base.metadata.create_all(bind=engine)
    logger.info(f"{settings.APP_NAME} v{settings.VERSION} 启动 ({settings.ENVIRONMENT})")

    scheduler = None
    if settings.SCHEDULER_ENABLED:
        scheduler = JobScheduler()
        scheduler.start()
        app.state.scheduler = scheduler

    yield

    if scheduler is not None:
        scheduler.stop()
    logger.info(f"{settings.APP_NAME} 已关闭")


def create_app() -> FastAPI:
    """创建FastAPI应用实例"""
    app = FastAPI(
        title=f"{settings.APP_NAME} API",
        description="项目组合管理系统后端API：里程碑进度、截止时间风险和周报跟踪",
        version=settings.VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    return app


def configure_routes(app: FastAPI) -> None:
    """配置应用路由"""
    api = settings.API_V1_STR
    app.include_router(auth.router, prefix=f"{api}/auth", tags=["认证"])
    app.include_router(projects.router, prefix=f"{api}/projects", tags=["项目管理"])
    app.include_router(tasks.router, prefix=api, tags=["任务管理"])
    app.include_router(milestones.router, prefix=api, tags=["里程碑管理"])
    app.include_router(risks.router, prefix=f"{api}/risks-issues", tags=["风险/问题"])
    app.include_router(notifications.router, prefix=f"{api}/notifications", tags=["通知"])
    app.include_router(weekly_updates.router, prefix=f"{api}/projects", tags=["周报"])
    app.include_router(jobs.router, prefix=f"{api}/jobs", tags=["定时任务"])

    # 根路径
    @app.get("/")
    async def root():
        return standard_response(
            data={"name": settings.APP_NAME, "version": settings.VERSION},
            message=f"{settings.APP_NAME} API"
        )

    # 健康检查
    @app.get("/health")
    async def health_check():
        scheduler = getattr(app.state, "scheduler", None)
        return standard_response(
            data={
                "status": "healthy",
                "scheduler": scheduler.get_status() if scheduler else None,
            },
            message="服务运行正常"
        )
