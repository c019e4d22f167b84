"""测试公共夹具：内存 SQLite、数据工厂和带依赖覆盖的 TestClient"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SCHEDULER_ENABLED"] = "false"

from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from models import (
    Base, Department, Milestone, MilestoneStatus, Project, ProjectStatus, Task,
    TaskMilestone, TaskStatus, User, UserRole, get_db
)
from utils.auth import get_current_user

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# 固定的"当前时间"：2024-05-15 周三 09:00
NOW = datetime(2024, 5, 15, 9, 0, 0)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def department(db):
    dept = Department(name="研发部", code="RD")
    db.add(dept)
    db.commit()
    return dept


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(role=UserRole.USER, department_id=None, username=None, email=None):
        counter["n"] += 1
        username = username or f"{role.value.lower()}{counter['n']}"
        user = User(
            username=username,
            email=email or f"{username}@example.com",
            password_hash="not-a-real-hash",
            name=username,
            role=role,
            department_id=department_id,
            is_active=True,
        )
        db.add(user)
        db.commit()
        return user

    return _make


@pytest.fixture
def make_project(db):
    def _make(manager=None, deadline=None, status=ProjectStatus.IN_PROGRESS, title="Apollo", department_id=None):
        project = Project(
            title=title,
            status=status,
            deadline=deadline,
            manager_user_id=manager.id if manager else None,
            department_id=department_id,
        )
        db.add(project)
        db.commit()
        return project

    return _make


@pytest.fixture
def make_task(db):
    def _make(project, status=TaskStatus.TODO, deadline=None, assignee=None, title="Build API"):
        task = Task(
            project_id=project.id,
            title=title,
            status=status,
            deadline=deadline,
            assigned_user_id=assignee.id if assignee else None,
        )
        db.add(task)
        db.commit()
        return task

    return _make


@pytest.fixture
def make_milestone(db):
    def _make(project, deadline=None, title="Phase 1"):
        milestone = Milestone(
            project_id=project.id,
            title=title,
            deadline=deadline,
            completion_percentage=0,
            status=MilestoneStatus.NOT_STARTED,
        )
        db.add(milestone)
        db.commit()
        return milestone

    return _make


@pytest.fixture
def link(db):
    def _link(task, milestone, weight=1):
        row = TaskMilestone(task_id=task.id, milestone_id=milestone.id, weight=weight)
        db.add(row)
        db.commit()
        return row

    return _link


@pytest.fixture
def fail_commit(db, monkeypatch):
    """让会话的第 n 次 commit 抛出数据库异常，返回 commit/rollback 计数"""
    def _install(on_call=1):
        real_commit, real_rollback = db.commit, db.rollback
        calls = {"commits": 0, "rollbacks": 0}

        def commit():
            calls["commits"] += 1
            if calls["commits"] == on_call:
                raise OperationalError("COMMIT", {}, Exception("database is locked"))
            real_commit()

        def rollback():
            calls["rollbacks"] += 1
            real_rollback()

        monkeypatch.setattr(db, "commit", commit)
        monkeypatch.setattr(db, "rollback", rollback)
        return calls

    return _install


@pytest.fixture
def client_as(db):
    """以指定用户身份访问API"""
    from main import app

    app.dependency_overrides[get_db] = lambda: db

    def _client(user):
        app.dependency_overrides[get_current_user] = lambda: user
        return TestClient(app)

    yield _client
    app.dependency_overrides.clear()
