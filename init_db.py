#!/usr/bin/env python3
"""
数据库初始化脚本
用于创建数据库表和初始数据（部门、各角色用户、示例项目）
"""
import logging
from datetime import datetime, timedelta

from config.logging_config import setup_logging
from models import (
    Base, Department, Milestone, Project, ProjectStatus, Priority, Task, TaskMilestone,
    TaskStatus, User, UserRole, engine, SessionLocal
)
from services.milestone_service import MilestoneService
from utils.auth import get_password_hash

logger = logging.getLogger(__name__)

DEFAULT_USERS = [
    # 用户名, 邮箱, 密码, 姓名, 角色
    ("admin", "admin@example.com", "admin123", "系统管理员", UserRole.ADMINISTRATOR),
    ("mainpmo", "mainpmo@example.com", "pmo123", "总PMO", UserRole.MAIN_PMO),
    ("subpmo", "subpmo@example.com", "pmo123", "部门PMO", UserRole.SUB_PMO),
    ("director", "director@example.com", "director123", "部门主管", UserRole.DEPARTMENT_DIRECTOR),
    ("manager", "manager@example.com", "manager123", "项目经理", UserRole.PROJECT_MANAGER),
    ("developer", "dev@example.com", "dev123", "开发者", UserRole.USER),
]


def create_tables():
    """创建数据库表"""
    logger.info("正在创建数据库表...")
    Base.metadata.create_all(bind=engine)
    logger.info("数据库表创建完成")


def create_initial_data():
    """创建初始数据，已存在管理员时跳过"""
    db = SessionLocal()
    try:
        if db.query(User).filter(User.username == "admin").first():
            logger.info("管理员用户已存在，跳过创建")
            return

        department = Department(name="信息技术部", code="IT", description="默认部门")
        db.add(department)
        db.flush()

        users = {}
        for username, email, password, name, role in DEFAULT_USERS:
            user = User(
                username=username,
                email=email,
                password_hash=get_password_hash(password),  # 生产环境请修改默认密码
                name=name,
                role=role,
                department_id=department.id,
                is_active=True,
            )
            db.add(user)
            users[username] = user
        db.flush()
        department.director_user_id = users["director"].id

        now = datetime.now()
        project = Project(
            title="示例项目",
            description="用于演示里程碑进度和截止时间检查",
            status=ProjectStatus.IN_PROGRESS,
            priority=Priority.HIGH,
            start_date=now - timedelta(days=30),
            deadline=now + timedelta(days=5),
            department_id=department.id,
            manager_user_id=users["manager"].id,
            created_by_user_id=users["admin"].id,
        )
        db.add(project)
        db.flush()

        milestone = Milestone(project_id=project.id, title="第一阶段交付", deadline=now + timedelta(days=20))
        db.add(milestone)

        tasks = [
            Task(project_id=project.id, title="需求分析", status=TaskStatus.COMPLETED,
                 assigned_user_id=users["developer"].id, created_by_user_id=users["manager"].id),
            Task(project_id=project.id, title="接口开发", status=TaskStatus.IN_PROGRESS,
                 deadline=now + timedelta(days=3), assigned_user_id=users["developer"].id,
                 created_by_user_id=users["manager"].id),
        ]
        db.add_all(tasks)
        db.flush()

        db.add_all([
            TaskMilestone(task_id=tasks[0].id, milestone_id=milestone.id, weight=1),
            TaskMilestone(task_id=tasks[1].id, milestone_id=milestone.id, weight=2),
        ])
        db.commit()

        MilestoneService(db).recalculate_progress(milestone.id)
        logger.info("初始数据创建完成")
        for username, _, password, _, role in DEFAULT_USERS:
            logger.info(f"  {role.value}: {username} / {password}")
    except Exception:
        db.rollback()
        logger.error("创建初始数据失败", exc_info=True)
        raise
    finally:
        db.close()


def main():
    """主函数"""
    setup_logging()
    create_tables()
    create_initial_data()


if __name__ == "__main__":
    main()
