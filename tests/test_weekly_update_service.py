"""项目周报提醒测试"""
from datetime import datetime, timedelta

import pytest

from models import Notification, ProjectStatus, UserRole
from schemas.weekly_update import WeeklyUpdateCreate
from services.weekly_update_service import (
    ACTION_ESCALATION, ACTION_NONE, ACTION_REMINDER, WeeklyUpdateService, week_number
)
from utils.exceptions import PermissionException, ResourceConflictException
from tests.conftest import NOW

THURSDAY = NOW + timedelta(days=1)
FRIDAY = NOW + timedelta(days=2)


class TestWeekNumber:
    def test_iso_week_uses_iso_year(self):
        assert week_number(datetime(2021, 1, 1), "iso") == (2020, 53)
        assert week_number(NOW, "iso") == (2024, 20)

    def test_legacy_week(self):
        assert week_number(datetime(2024, 1, 1), "legacy") == (2024, 1)
        assert week_number(datetime(2024, 1, 7), "legacy") == (2024, 2)


@pytest.fixture
def team(department, make_user):
    return {
        "manager": make_user(UserRole.PROJECT_MANAGER, department.id),
        "director": make_user(UserRole.DEPARTMENT_DIRECTOR, department.id),
        "subpmo": make_user(UserRole.SUB_PMO, department.id),
        "mainpmo": make_user(UserRole.MAIN_PMO),
    }


@pytest.fixture
def project(team, department, make_project):
    return make_project(manager=team["manager"], department_id=department.id)


class TestRunCheck:
    def test_reminder_day_notifies_manager(self, db, team, project):
        result = WeeklyUpdateService(db).run_check(THURSDAY)

        assert result.action == ACTION_REMINDER
        assert result.notified_project_ids == [project.id]
        notifications = db.query(Notification).all()
        assert len(notifications) == 1
        assert notifications[0].user_id == team["manager"].id
        assert notifications[0].message.startswith("Weekly update reminder:")

    def test_escalation_day_notifies_management(self, db, team, project):
        result = WeeklyUpdateService(db).run_check(FRIDAY)

        assert result.action == ACTION_ESCALATION
        notifications = db.query(Notification).all()
        assert len(notifications) == 4
        recipients = {n.user_id for n in notifications}
        assert recipients == {user.id for user in team.values()}
        manager_note = [n for n in notifications if n.user_id == team["manager"].id][0]
        assert manager_note.message.startswith("OVERDUE:")

    def test_other_days_do_nothing(self, db, team, project):
        result = WeeklyUpdateService(db).run_check(NOW)

        assert result.action == ACTION_NONE
        assert db.query(Notification).count() == 0

    def test_submitted_update_suppresses_notifications(self, db, team, project):
        service = WeeklyUpdateService(db)
        service.submit_update(project.id, WeeklyUpdateCreate(comments="按计划推进"), team["manager"], NOW)

        service.run_check(THURSDAY)
        service.run_check(FRIDAY)

        assert db.query(Notification).count() == 0

    def test_inactive_projects_are_ignored(self, db, team, department, make_project):
        make_project(manager=team["manager"], department_id=department.id, status=ProjectStatus.COMPLETED)
        make_project(manager=team["manager"], department_id=department.id, status=ProjectStatus.PENDING)

        result = WeeklyUpdateService(db).run_check(THURSDAY)

        assert result.notified_project_ids == []

    def test_missing_management_is_skipped(self, db, make_user, make_project):
        manager = make_user(UserRole.PROJECT_MANAGER)
        make_project(manager=manager)

        WeeklyUpdateService(db).run_check(FRIDAY)

        assert [n.user_id for n in db.query(Notification).all()] == [manager.id]


class TestWeeklyUpdates:
    def test_has_missed_weekly_update(self, db, team, project):
        service = WeeklyUpdateService(db)
        assert service.has_missed_weekly_update(project.id, NOW) is False
        assert service.has_missed_weekly_update(project.id, FRIDAY) is True

        service.submit_update(project.id, WeeklyUpdateCreate(comments="done"), team["manager"], FRIDAY)
        assert service.has_missed_weekly_update(project.id, FRIDAY) is False

    def test_duplicate_submit_conflicts(self, db, team, project):
        service = WeeklyUpdateService(db)
        service.submit_update(project.id, WeeklyUpdateCreate(comments="first"), team["manager"], NOW)

        with pytest.raises(ResourceConflictException):
            service.submit_update(project.id, WeeklyUpdateCreate(comments="second"), team["manager"], THURSDAY)

    def test_only_manager_may_submit(self, db, make_user, project):
        outsider = make_user(UserRole.USER)
        with pytest.raises(PermissionException):
            WeeklyUpdateService(db).submit_update(project.id, WeeklyUpdateCreate(comments="x"), outsider, NOW)

    def test_submit_records_week(self, db, team, project):
        update = WeeklyUpdateService(db).submit_update(
            project.id, WeeklyUpdateCreate(comments="ok"), team["manager"], NOW
        )
        assert (update.year, update.week_number) == (2024, 20)
        assert update.created_by_user_id == team["manager"].id
