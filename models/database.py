"""数据库连接模块

提供引擎、会话工厂和FastAPI依赖注入用的会话生成器
"""
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from config.settings import settings

# 创建基础模型类
Base = declarative_base()


def _engine_kwargs(database_url: str) -> dict:
    kwargs = {"echo": settings.DATABASE_ECHO, "pool_pre_ping": True}
    if database_url.startswith("sqlite"):
        # SQLite 在定时任务线程和请求线程之间共享连接
        kwargs["connect_args"] = {"check_same_thread": False}
    return kwargs


engine = create_engine(settings.DATABASE_URL, **_engine_kwargs(settings.DATABASE_URL))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """数据库会话依赖注入"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
