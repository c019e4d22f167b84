"""HTTP 接口测试"""

from fastapi.testclient import TestClient

from models import Notification, ProjectStatus, RiskIssue, RiskType, TaskStatus, UserRole
from tests.conftest import NOW


class TestEnvelope:
    def test_health(self, client_as, make_user):
        response = client_as(make_user()).get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["code"] == "200"
        assert body["data"]["status"] == "healthy"
        assert "timestamp" in body

    def test_missing_credentials_is_401(self, db):
        from main import app
        from models import get_db

        app.dependency_overrides[get_db] = lambda: db
        try:
            response = TestClient(app).get("/api/v1/projects")
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 401
        assert response.json()["code"] == "401"

    def test_missing_resource_is_404(self, client_as, make_user):
        response = client_as(make_user()).get("/api/v1/projects/P404")
        assert response.status_code == 404
        assert response.json()["data"] is None

    def test_validation_error_is_422(self, client_as, make_user):
        client = client_as(make_user(UserRole.ADMINISTRATOR))
        response = client.post("/api/v1/projects", json={"title": ""})
        assert response.status_code == 422
        assert response.json()["code"] == "422"


class TestMilestoneLinksApi:
    def test_link_lifecycle(self, db, client_as, make_user, make_project, make_task, make_milestone):
        client = client_as(make_user(UserRole.PROJECT_MANAGER))
        project = make_project()
        milestone = make_milestone(project)
        done = make_task(project, TaskStatus.COMPLETED, title="done")
        todo = make_task(project, TaskStatus.TODO, title="todo")

        response = client.post(f"/api/v1/tasks/{done.id}/milestones", json={"milestone_id": milestone.id, "weight": 2})
        assert response.status_code == 200
        body = response.json()
        assert body["code"] == "201"
        assert body["data"]["recalculated"] is True
        assert body["data"]["link"]["weight"] == 2

        response = client.post(f"/api/v1/tasks/{todo.id}/milestones", json={"milestone_id": milestone.id})
        todo_link_id = response.json()["data"]["link"]["id"]
        detail = client.get(f"/api/v1/milestones/{milestone.id}").json()["data"]
        assert detail["completion_percentage"] == 67
        assert detail["status"] == "InProgress"

        duplicate = client.post(f"/api/v1/tasks/{todo.id}/milestones", json={"milestone_id": milestone.id})
        assert duplicate.status_code == 409

        response = client.put(f"/api/v1/task-milestones/{todo_link_id}", json={"weight": 2})
        assert response.json()["data"]["link"]["weight"] == 2
        assert client.get(f"/api/v1/milestones/{milestone.id}").json()["data"]["completion_percentage"] == 50

        links = client.get(f"/api/v1/tasks/{todo.id}/milestones").json()["data"]
        assert [row["id"] for row in links] == [todo_link_id]

        response = client.delete(f"/api/v1/task-milestones/{todo_link_id}")
        assert response.json()["data"]["milestone_id"] == milestone.id
        assert response.json()["data"]["link"] is None
        assert client.get(f"/api/v1/milestones/{milestone.id}").json()["data"]["completion_percentage"] == 100

    def test_negative_weight_rejected(self, client_as, make_user, make_project, make_task, make_milestone):
        project = make_project()
        response = client_as(make_user(UserRole.PROJECT_MANAGER)).post(
            f"/api/v1/tasks/{make_task(project).id}/milestones",
            json={"milestone_id": make_milestone(project).id, "weight": -1},
        )
        assert response.status_code == 422

    def test_task_status_change_recalculates(self, db, client_as, make_user, make_project, make_task,
                                             make_milestone, link):
        assignee = make_user(UserRole.USER)
        project = make_project()
        milestone = make_milestone(project)
        task = make_task(project, TaskStatus.TODO, assignee=assignee)
        link(task, milestone)

        response = client_as(assignee).put(f"/api/v1/tasks/{task.id}", json={"status": "Review"})
        assert response.status_code == 200
        assert response.json()["data"]["status"] == "Review"

        db.refresh(milestone)
        assert milestone.completion_percentage == 90

    def test_user_cannot_update_others_task(self, client_as, make_user, make_project, make_task):
        task = make_task(make_project(), assignee=make_user(UserRole.USER))
        response = client_as(make_user(UserRole.USER)).put(f"/api/v1/tasks/{task.id}", json={"status": "Review"})
        assert response.status_code == 403

    def test_create_milestone(self, client_as, make_user, make_project):
        project = make_project()
        response = client_as(make_user(UserRole.PROJECT_MANAGER)).post(
            f"/api/v1/projects/{project.id}/milestones", json={"title": "Beta"}
        )
        data = response.json()["data"]
        assert data["completion_percentage"] == 0
        assert data["status"] == "NotStarted"


class TestProjectApprovalApi:
    def test_manager_project_needs_approval(self, db, client_as, make_user, department):
        director = make_user(UserRole.DEPARTMENT_DIRECTOR, department.id)
        main_pmo = make_user(UserRole.MAIN_PMO)
        manager = make_user(UserRole.PROJECT_MANAGER, department.id)

        response = client_as(manager).post("/api/v1/projects", json={"title": "Gemini"})
        data = response.json()["data"]
        assert data["status"] == "Pending"
        assert data["manager_user_id"] == manager.id
        assert data["department_id"] == department.id

        notifications = db.query(Notification).filter(Notification.requires_approval.is_(True)).all()
        assert {n.user_id for n in notifications} == {director.id, main_pmo.id}

        response = client_as(director).post(f"/api/v1/projects/{data['id']}/approve")
        assert response.json()["data"]["status"] == "Planning"
        assert db.query(Notification).filter(
            Notification.requires_approval.is_(True), Notification.is_read.is_(False)
        ).count() == 0
        creator_notes = db.query(Notification).filter(Notification.user_id == manager.id).all()
        assert len(creator_notes) == 1
        assert "approved" in creator_notes[0].message

        again = client_as(director).post(f"/api/v1/projects/{data['id']}/approve")
        assert again.status_code == 409

    def test_reject_with_reason(self, db, client_as, make_user, department):
        manager = make_user(UserRole.PROJECT_MANAGER, department.id)
        project_id = client_as(manager).post("/api/v1/projects", json={"title": "Gemini"}).json()["data"]["id"]

        response = client_as(make_user(UserRole.MAIN_PMO)).post(
            f"/api/v1/projects/{project_id}/reject", json={"reason": "预算不足"}
        )
        assert response.json()["data"]["status"] == "Rejected"
        note = db.query(Notification).filter(Notification.user_id == manager.id).one()
        assert note.message.endswith("Reason: 预算不足")

    def test_admin_project_skips_approval(self, client_as, make_user):
        response = client_as(make_user(UserRole.ADMINISTRATOR)).post("/api/v1/projects", json={"title": "Apollo"})
        assert response.json()["data"]["status"] == "Planning"

    def test_pending_status_cannot_be_set_directly(self, client_as, make_user, make_project):
        project = make_project(status=ProjectStatus.PLANNING)
        response = client_as(make_user(UserRole.ADMINISTRATOR)).put(
            f"/api/v1/projects/{project.id}", json={"status": "Pending"}
        )
        assert response.status_code == 409

    def test_user_cannot_approve(self, client_as, make_user, make_project):
        project = make_project(status=ProjectStatus.PENDING)
        response = client_as(make_user(UserRole.USER)).post(f"/api/v1/projects/{project.id}/approve")
        assert response.status_code == 403

    def test_list_filters_by_status(self, client_as, make_user, make_project):
        make_project(status=ProjectStatus.PENDING, title="A")
        make_project(status=ProjectStatus.IN_PROGRESS, title="B")
        body = client_as(make_user()).get("/api/v1/projects", params={"status": "Pending"}).json()
        assert body["data"]["total"] == 1
        assert body["data"]["records"][0]["title"] == "A"
        assert body["data"]["totalPages"] == 1


class TestNotificationsApi:
    def test_read_own_notification(self, db, client_as, make_user):
        owner = make_user()
        note = Notification(user_id=owner.id, message="hello", related_entity="Project")
        db.add(note)
        db.commit()

        other = client_as(make_user()).post(f"/api/v1/notifications/{note.id}/read")
        assert other.status_code == 403

        response = client_as(owner).post(f"/api/v1/notifications/{note.id}/read")
        assert response.json()["data"]["is_read"] is True

    def test_list_and_read_all(self, db, client_as, make_user):
        owner = make_user()
        db.add_all([Notification(user_id=owner.id, message=f"m{i}") for i in range(3)])
        db.add(Notification(user_id=make_user().id, message="not mine"))
        db.commit()
        client = client_as(owner)

        body = client.get("/api/v1/notifications", params={"unread_only": True}).json()
        assert body["data"]["total"] == 3

        assert client.post("/api/v1/notifications/read-all").json()["data"]["updated"] == 3
        assert client.get("/api/v1/notifications", params={"unread_only": True}).json()["data"]["total"] == 0


class TestRisksApi:
    def test_filters(self, db, client_as, make_user, make_project):
        project = make_project()
        other = make_project(title="Other")
        client = client_as(make_user(UserRole.PROJECT_MANAGER))

        client.post("/api/v1/risks-issues", json={
            "project_id": project.id, "type": "Risk", "title": "供应商延期", "description": "可能延期两周",
        })
        client.post("/api/v1/risks-issues", json={
            "project_id": project.id, "type": "Issue", "title": "环境故障", "description": "测试环境不可用",
        })
        client.post("/api/v1/risks-issues", json={
            "project_id": other.id, "type": "Risk", "title": "人员变动", "description": "核心成员离职",
        })

        body = client.get("/api/v1/risks-issues", params={"project_id": project.id, "type": "Risk"}).json()
        assert body["data"]["total"] == 1
        assert body["data"]["records"][0]["title"] == "供应商延期"
        assert db.query(RiskIssue).filter(RiskIssue.type == RiskType.ISSUE).count() == 1

    def test_update_status(self, db, client_as, make_user, make_project):
        client = client_as(make_user(UserRole.PROJECT_MANAGER))
        risk_id = client.post("/api/v1/risks-issues", json={
            "project_id": make_project().id, "type": "Risk", "title": "t", "description": "d",
        }).json()["data"]["id"]

        response = client.put(f"/api/v1/risks-issues/{risk_id}", json={"status": "Resolved"})
        assert response.json()["data"]["status"] == "Resolved"


class TestJobsApi:
    def test_admin_can_run_deadline_check(self, db, client_as, make_user, make_project):
        make_project(deadline=None)
        response = client_as(make_user(UserRole.ADMINISTRATOR)).post("/api/v1/jobs/deadline-check")
        assert response.status_code == 200
        assert response.json()["data"]["projects_checked"] == 1

    def test_weekly_check_returns_action(self, client_as, make_user):
        response = client_as(make_user(UserRole.MAIN_PMO)).post("/api/v1/jobs/weekly-update-check")
        assert response.json()["data"]["action"] in ("reminder", "escalation", "none")

    def test_regular_user_forbidden(self, client_as, make_user):
        response = client_as(make_user(UserRole.USER)).post("/api/v1/jobs/deadline-check")
        assert response.status_code == 403


class TestWeeklyUpdatesApi:
    def test_submit_and_list(self, db, client_as, make_user, make_project):
        manager = make_user(UserRole.PROJECT_MANAGER)
        project = make_project(manager=manager)
        client = client_as(manager)

        response = client.post(f"/api/v1/projects/{project.id}/weekly-updates", json={"comments": "进展顺利"})
        assert response.json()["code"] == "201"
        assert client.post(
            f"/api/v1/projects/{project.id}/weekly-updates", json={"comments": "again"}
        ).status_code == 409

        updates = client.get(f"/api/v1/projects/{project.id}/weekly-updates").json()["data"]
        assert len(updates) == 1
        assert client.get(f"/api/v1/projects/{project.id}/weekly-updates/missed").json()["data"]["missed"] is False


class TestNullUpdates:
    def test_null_task_status_rejected(self, db, client_as, make_user, make_project, make_task):
        task = make_task(make_project(), TaskStatus.IN_PROGRESS)
        response = client_as(make_user(UserRole.ADMINISTRATOR)).put(f"/api/v1/tasks/{task.id}", json={"status": None})

        assert response.status_code == 422
        assert response.json()["code"] == "422"
        db.refresh(task)
        assert task.status == TaskStatus.IN_PROGRESS

    def test_null_milestone_title_rejected(self, db, client_as, make_user, make_project, make_milestone):
        milestone = make_milestone(make_project(), title="Beta")
        response = client_as(make_user(UserRole.PROJECT_MANAGER)).put(
            f"/api/v1/milestones/{milestone.id}", json={"title": None}
        )

        assert response.status_code == 422
        db.refresh(milestone)
        assert milestone.title == "Beta"

    def test_null_project_and_risk_fields_rejected(self, client_as, make_user, make_project):
        client = client_as(make_user(UserRole.ADMINISTRATOR))
        project = make_project()
        assert client.put(f"/api/v1/projects/{project.id}", json={"title": None}).status_code == 422

        risk_id = client.post("/api/v1/risks-issues", json={
            "project_id": project.id, "title": "t", "description": "d",
        }).json()["data"]["id"]
        assert client.put(f"/api/v1/risks-issues/{risk_id}", json={"status": None}).status_code == 422

    def test_nullable_fields_can_be_cleared(self, db, client_as, make_user, make_project, make_task):
        task = make_task(make_project(), deadline=NOW, assignee=make_user())
        response = client_as(make_user(UserRole.ADMINISTRATOR)).put(
            f"/api/v1/tasks/{task.id}", json={"deadline": None, "assigned_user_id": None}
        )

        assert response.status_code == 200
        db.refresh(task)
        assert task.deadline is None
        assert task.assigned_user_id is None
