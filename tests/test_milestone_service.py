"""里程碑完成度聚合测试"""
from datetime import timedelta

import pytest

from models import Milestone, MilestoneStatus, TaskStatus
from schemas.milestone import MilestoneCreate, MilestoneUpdate, TaskMilestoneCreate, TaskMilestoneUpdate
from services.milestone_service import (
    MilestoneService, compute_completion_percentage, derive_milestone_status, task_completion_value
)
from utils.exceptions import ResourceConflictException, ResourceNotFoundException
from tests.conftest import NOW


class TestTaskCompletionValue:
    @pytest.mark.parametrize("status,expected", [
        (TaskStatus.COMPLETED, 100),
        (TaskStatus.REVIEW, 90),
        (TaskStatus.IN_PROGRESS, 50),
        (TaskStatus.ON_HOLD, 25),
        (TaskStatus.TODO, 0),
        (None, 0),
    ])
    def test_mapping(self, status, expected):
        assert task_completion_value(status) == expected


class TestComputeCompletionPercentage:
    def test_weight_normalization(self):
        # Completed(权重2) + Todo(权重1) => round(200/3) = 67
        links = [(2, TaskStatus.COMPLETED), (1, TaskStatus.TODO)]
        assert compute_completion_percentage(links) == 67

    def test_review_and_on_hold_scenario(self):
        links = [(3, TaskStatus.REVIEW), (1, TaskStatus.ON_HOLD)]
        assert compute_completion_percentage(links) == 74

    def test_no_links_is_zero(self):
        assert compute_completion_percentage([]) == 0

    def test_falsy_weight_counts_as_one(self):
        links = [(None, TaskStatus.COMPLETED), (0, TaskStatus.TODO)]
        assert compute_completion_percentage(links) == 50

    def test_unresolved_task_is_skipped_but_weighted(self):
        links = [(1, TaskStatus.COMPLETED), (1, None)]
        assert compute_completion_percentage(links) == 50

    def test_result_is_clamped(self):
        # 负权重会让加权结果越界
        links = [(-1, TaskStatus.TODO), (3, TaskStatus.COMPLETED)]
        assert compute_completion_percentage(links) == 100


class TestDeriveMilestoneStatus:
    def test_past_deadline_is_delayed_even_when_in_progress(self):
        assert derive_milestone_status(50, NOW - timedelta(days=1), NOW) == MilestoneStatus.DELAYED

    def test_past_deadline_but_complete(self):
        assert derive_milestone_status(100, NOW - timedelta(days=1), NOW) == MilestoneStatus.COMPLETED

    def test_close_deadline_and_low_progress_is_at_risk(self):
        assert derive_milestone_status(74, NOW + timedelta(days=2), NOW) == MilestoneStatus.AT_RISK

    def test_close_deadline_with_enough_progress(self):
        assert derive_milestone_status(75, NOW + timedelta(days=2), NOW) == MilestoneStatus.IN_PROGRESS

    def test_at_risk_window_rounds_days_up(self):
        assert derive_milestone_status(10, NOW + timedelta(days=3), NOW) == MilestoneStatus.AT_RISK
        assert derive_milestone_status(10, NOW + timedelta(days=3, hours=1), NOW) == MilestoneStatus.IN_PROGRESS

    def test_percentage_rules_without_deadline(self):
        assert derive_milestone_status(0, None, NOW) == MilestoneStatus.NOT_STARTED
        assert derive_milestone_status(100, None, NOW) == MilestoneStatus.COMPLETED
        assert derive_milestone_status(40, None, NOW) == MilestoneStatus.IN_PROGRESS


class TestRecalculateProgress:
    def test_scenario_review_and_on_hold(self, db, make_project, make_task, make_milestone, link):
        project = make_project()
        milestone = make_milestone(project, deadline=NOW + timedelta(days=60))
        link(make_task(project, TaskStatus.REVIEW, title="A"), milestone, weight=3)
        link(make_task(project, TaskStatus.ON_HOLD, title="B"), milestone, weight=1)

        assert MilestoneService(db).recalculate_progress(milestone.id, NOW) is True
        db.refresh(milestone)
        assert milestone.completion_percentage == 74
        assert milestone.status == MilestoneStatus.IN_PROGRESS

    def test_empty_milestone(self, db, make_project, make_milestone):
        milestone = make_milestone(make_project(), deadline=NOW + timedelta(days=30))
        milestone.completion_percentage = 40
        db.commit()

        assert MilestoneService(db).recalculate_progress(milestone.id, NOW) is True
        db.refresh(milestone)
        assert milestone.completion_percentage == 0
        assert milestone.status == MilestoneStatus.NOT_STARTED

    def test_past_deadline_is_delayed(self, db, make_project, make_task, make_milestone, link):
        project = make_project()
        milestone = make_milestone(project, deadline=NOW - timedelta(days=2))
        link(make_task(project, TaskStatus.IN_PROGRESS), milestone)

        MilestoneService(db).recalculate_progress(milestone.id, NOW)
        db.refresh(milestone)
        assert milestone.completion_percentage == 50
        assert milestone.status == MilestoneStatus.DELAYED

    def test_missing_milestone_returns_false(self, db):
        assert MilestoneService(db).recalculate_progress("M404", NOW) is False

    def test_recalculate_for_task(self, db, make_project, make_task, make_milestone, link):
        project = make_project()
        task = make_task(project, TaskStatus.TODO)
        first = make_milestone(project, title="M1")
        second = make_milestone(project, title="M2")
        link(task, first)
        link(task, second)

        task.status = TaskStatus.COMPLETED
        db.commit()
        updated = MilestoneService(db).recalculate_for_task(task.id, NOW)

        assert sorted(updated) == sorted([first.id, second.id])
        db.refresh(first)
        db.refresh(second)
        assert first.completion_percentage == 100
        assert second.status == MilestoneStatus.COMPLETED


class TestLinks:
    def test_create_update_delete_recalculate(self, db, make_project, make_task, make_milestone):
        project = make_project()
        milestone = make_milestone(project)
        done = make_task(project, TaskStatus.COMPLETED, title="done")
        todo = make_task(project, TaskStatus.TODO, title="todo")
        service = MilestoneService(db)

        service.create_link(done.id, TaskMilestoneCreate(milestone_id=milestone.id))
        link_todo, recalculated = service.create_link(todo.id, TaskMilestoneCreate(milestone_id=milestone.id))
        assert recalculated is True
        db.refresh(milestone)
        assert milestone.completion_percentage == 50

        service.update_link_weight(link_todo.id, TaskMilestoneUpdate(weight=3))
        db.refresh(milestone)
        assert milestone.completion_percentage == 25

        milestone_id, recalculated = service.delete_link(link_todo.id)
        assert milestone_id == milestone.id
        assert recalculated is True
        db.refresh(milestone)
        assert milestone.completion_percentage == 100

    def test_default_weight_is_one(self, db, make_project, make_task, make_milestone):
        project = make_project()
        milestone = make_milestone(project)
        row, _ = MilestoneService(db).create_link(
            make_task(project).id, TaskMilestoneCreate(milestone_id=milestone.id)
        )
        assert row.weight == 1

    def test_duplicate_link_conflicts(self, db, make_project, make_task, make_milestone):
        project = make_project()
        milestone = make_milestone(project)
        task = make_task(project)
        service = MilestoneService(db)
        service.create_link(task.id, TaskMilestoneCreate(milestone_id=milestone.id))

        with pytest.raises(ResourceConflictException):
            service.create_link(task.id, TaskMilestoneCreate(milestone_id=milestone.id))

    def test_cross_project_link_rejected(self, db, make_project, make_task, make_milestone):
        task = make_task(make_project(title="A"))
        milestone = make_milestone(make_project(title="B"))

        with pytest.raises(ResourceConflictException):
            MilestoneService(db).create_link(task.id, TaskMilestoneCreate(milestone_id=milestone.id))

    def test_recalculate_failure_does_not_undo_link(self, db, make_project, make_task, make_milestone,
                                                    fail_commit):
        project = make_project()
        milestone = make_milestone(project)
        task = make_task(project, TaskStatus.COMPLETED)
        service = MilestoneService(db)
        # 第1次 commit 保存关联，第2次 commit 保存重算结果
        calls = fail_commit(on_call=2)

        row, recalculated = service.create_link(task.id, TaskMilestoneCreate(milestone_id=milestone.id))

        assert recalculated is False
        assert calls["rollbacks"] == 1
        assert service.get_link(row.id).task_id == task.id
        db.refresh(milestone)
        assert milestone.completion_percentage == 0

    def test_missing_link(self, db):
        with pytest.raises(ResourceNotFoundException):
            MilestoneService(db).delete_link("TM404")


class TestMilestoneCrud:
    def test_create_starts_at_zero(self, db, make_project):
        project = make_project()
        milestone = MilestoneService(db).create_milestone(
            project.id, MilestoneCreate(title="Kickoff", deadline=NOW + timedelta(days=30)), NOW
        )
        assert milestone.completion_percentage == 0
        assert milestone.status == MilestoneStatus.NOT_STARTED

    def test_update_deadline_rederives_status(self, db, make_project):
        project = make_project()
        service = MilestoneService(db)
        milestone = service.create_milestone(project.id, MilestoneCreate(title="Kickoff"), NOW)

        updated = service.update_milestone(milestone.id, MilestoneUpdate(deadline=NOW - timedelta(days=1)), NOW)
        assert updated.status == MilestoneStatus.DELAYED

    def test_list_by_project(self, db, make_project, make_milestone):
        project = make_project()
        make_milestone(project, title="one")
        make_milestone(make_project(title="other"), title="two")
        titles = [m.title for m in MilestoneService(db).list_milestones(project.id)]
        assert titles == ["one"]
        assert db.query(Milestone).count() == 2


class TestRecalculateFailure:
    def test_commit_failure_rolls_back_and_returns_false(self, db, make_project, make_task, make_milestone,
                                                         link, fail_commit):
        project = make_project()
        milestone = make_milestone(project, deadline=NOW + timedelta(days=30))
        link(make_task(project, TaskStatus.COMPLETED), milestone)
        calls = fail_commit(on_call=1)

        assert MilestoneService(db).recalculate_progress(milestone.id, NOW) is False
        assert calls["rollbacks"] == 1

        db.refresh(milestone)
        assert milestone.completion_percentage == 0
        assert milestone.status == MilestoneStatus.NOT_STARTED

    def test_next_recalculation_succeeds(self, db, make_project, make_task, make_milestone, link, fail_commit):
        project = make_project()
        milestone = make_milestone(project)
        link(make_task(project, TaskStatus.COMPLETED), milestone)
        fail_commit(on_call=1)
        service = MilestoneService(db)

        assert service.recalculate_progress(milestone.id, NOW) is False
        assert service.recalculate_progress(milestone.id, NOW) is True
        db.refresh(milestone)
        assert milestone.completion_percentage == 100
