"""
End-to-end tests through the HTTP API.
"""

import uuid

import pytest


async def _project(client, **overrides) -> dict:
    response = await client.post("/projects/", json={"name": "Launch", **overrides})
    assert response.status_code == 201
    return response.json()


async def _task(client, project_id: str, title: str, **fields) -> dict:
    response = await client.post("/tasks/", json={"project_id": project_id, "title": title, **fields})
    assert response.status_code == 201, response.text
    return response.json()


class TestHealth:

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}


class TestScheduleFlow:

    @pytest.mark.asyncio
    async def test_dependency_then_date_change(self, client):
        """
        Scenario: A (Feb 1-3) -> B (Feb 4-8), then A's end moves to Feb 10
        Expected: B is pushed to Feb 11-15 and returned as affected
        """
        project = await _project(client)
        a = await _task(client, project["id"], "A", start_date="2025-02-01", end_date="2025-02-03")
        b = await _task(client, project["id"], "B", start_date="2025-02-04", end_date="2025-02-08")

        dep = await client.post("/dependencies/", json={
            "predecessor_task_id": a["id"],
            "successor_task_id": b["id"],
        })
        assert dep.status_code == 201
        assert dep.json()["affected_tasks"] == []

        response = await client.patch(f"/tasks/{a['id']}", json={"end_date": "2025-02-10"})
        assert response.status_code == 200
        body = response.json()
        assert body["updated_task"]["end_date"] == "2025-02-10"
        assert len(body["affected_tasks"]) == 1
        assert body["affected_tasks"][0]["start_date"] == "2025-02-11"
        assert body["affected_tasks"][0]["end_date"] == "2025-02-15"

        history = await client.get(f"/tasks/{b['id']}/history")
        assert history.status_code == 200
        assert history.json()[0]["field"] == "auto-scheduled"
        assert history.json()[0]["user_id"] == "test-user"

    @pytest.mark.asyncio
    async def test_cycle_returns_400(self, client):
        project = await _project(client)
        a = await _task(client, project["id"], "A")
        b = await _task(client, project["id"], "B")

        first = await client.post("/dependencies/", json={
            "predecessor_task_id": a["id"], "successor_task_id": b["id"],
        })
        assert first.status_code == 201

        back = await client.post("/dependencies/", json={
            "predecessor_task_id": b["id"], "successor_task_id": a["id"],
        })
        assert back.status_code == 400
        assert back.json()["error"] == "cycle_detected"

        duplicate = await client.post("/dependencies/", json={
            "predecessor_task_id": a["id"], "successor_task_id": b["id"],
        })
        assert duplicate.status_code == 409

        listed = await client.get("/dependencies/", params={"project_id": project["id"]})
        assert len(listed.json()) == 1

    @pytest.mark.asyncio
    async def test_manual_project_reports_warning(self, client):
        project = await _project(client, auto_schedule=False)
        a = await _task(client, project["id"], "A", start_date="2025-02-01", end_date="2025-02-10")
        b = await _task(client, project["id"], "B", start_date="2025-02-05", end_date="2025-02-06")
        await client.post("/dependencies/", json={
            "predecessor_task_id": a["id"], "successor_task_id": b["id"],
        })

        response = await client.get(f"/tasks/{b['id']}")

        assert response.json()["has_schedule_warning"] is True
        assert response.json()["schedule_warnings"] == ["SCHEDULE_VIOLATION"]
        assert response.json()["start_date"] == "2025-02-05"


class TestHierarchyFlow:

    @pytest.mark.asyncio
    async def test_summary_rollup_and_read_only(self, client):
        project = await _project(client)
        phase = await _task(client, project["id"], "Phase", type="summary")
        await _task(client, project["id"], "Design", parent_id=phase["id"],
                    start_date="2025-01-01", end_date="2025-01-10", progress=0, estimate_pd=3)
        await _task(client, project["id"], "Build", parent_id=phase["id"],
                    start_date="2025-01-05", end_date="2025-01-20", progress=100, estimate_pd=1)

        response = await client.get(f"/tasks/{phase['id']}")
        body = response.json()
        assert body["start_date"] == "2025-01-01"
        assert body["end_date"] == "2025-01-20"
        assert body["progress"] == 25

        rejected = await client.patch(f"/tasks/{phase['id']}", json={"start_date": "2025-03-01"})
        assert rejected.status_code == 400
        assert rejected.json()["error"] == "summary_fields_read_only"

    @pytest.mark.asyncio
    async def test_list_in_outline_order_without_deleted(self, client):
        project = await _project(client)
        phase = await _task(client, project["id"], "Phase", type="summary")
        await _task(client, project["id"], "Design", parent_id=phase["id"])
        doomed = await _task(client, project["id"], "Doomed", parent_id=phase["id"])
        await _task(client, project["id"], "Wrap-up")

        deleted = await client.delete(f"/tasks/{doomed['id']}")
        assert deleted.status_code == 204

        response = await client.get("/tasks/", params={"project_id": project["id"]})
        assert [(t["title"], t["wbs_code"]) for t in response.json()] == [
            ("Phase", "1"),
            ("Design", "1.1"),
            ("Wrap-up", "2"),
        ]

        missing = await client.get(f"/tasks/{doomed['id']}")
        assert missing.status_code == 404
        assert missing.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_move_under_own_child_rejected(self, client):
        project = await _project(client)
        parent = await _task(client, project["id"], "Parent", type="summary")
        child = await _task(client, project["id"], "Child", type="summary", parent_id=parent["id"])

        response = await client.post(f"/tasks/{parent['id']}/move", json={"new_parent_id": child["id"]})

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_move"


class TestTimeLogsAndBaselines:

    @pytest.mark.asyncio
    async def test_time_logs_feed_actual_pd(self, client):
        project = await _project(client)
        task = await _task(client, project["id"], "Work")

        for day, pd in (("2025-01-06", 0.5), ("2025-01-07", 1.0)):
            response = await client.post(f"/tasks/{task['id']}/time-logs", json={"work_date": day, "pd": pd})
            assert response.status_code == 201

        logs = await client.get(f"/tasks/{task['id']}/time-logs", params={"from": "2025-01-07"})
        assert [log["work_date"] for log in logs.json()] == ["2025-01-07"]

        read = await client.get(f"/tasks/{task['id']}")
        assert read.json()["actual_pd"] == pytest.approx(1.5)

    @pytest.mark.asyncio
    async def test_time_logs_of_missing_task_is_404(self, client):
        project = await _project(client)
        task = await _task(client, project["id"], "Work")
        await client.delete(f"/tasks/{task['id']}")

        deleted = await client.get(f"/tasks/{task['id']}/time-logs")
        unknown = await client.get(f"/tasks/{uuid.uuid4()}/time-logs")

        assert deleted.status_code == 404
        assert unknown.status_code == 404
        assert unknown.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_baseline_diff(self, client):
        project = await _project(client)
        task = await _task(client, project["id"], "Work", start_date="2025-01-01", end_date="2025-01-10")

        baseline = await client.post("/baselines/", json={"project_id": project["id"], "name": "v1"})
        assert baseline.status_code == 201
        assert baseline.json()["created_by"] == "test-user"

        await client.patch(f"/tasks/{task['id']}", json={"end_date": "2025-01-12"})

        diff = await client.get(f"/baselines/{baseline.json()['id']}/diff")
        assert diff.status_code == 200
        assert diff.json()["summary"]["slipped_tasks"] == 1
        assert diff.json()["summary"]["total_delta_days"] == 2


class TestProjects:

    @pytest.mark.asyncio
    async def test_update_and_not_found(self, client):
        project = await _project(client)

        response = await client.patch(f"/projects/{project['id']}", json={"auto_schedule": False})
        assert response.status_code == 200
        assert response.json()["auto_schedule"] is False

        missing = await client.get(f"/projects/{uuid.uuid4()}")
        assert missing.status_code == 404

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field", ["auto_schedule", "name", "status"])
    async def test_null_for_required_field_rejected(self, client, field):
        """
        Scenario: PATCH a project with an explicit null for a required field
        Expected: 422 validation_error, and the project is unchanged
        """
        project = await _project(client)

        response = await client.patch(f"/projects/{project['id']}", json={field: None})

        assert response.status_code == 422
        assert response.json()["error"] == "validation_error"
        assert response.json()["details"][0]["loc"] == ["body", field]

        unchanged = await client.get(f"/projects/{project['id']}")
        assert unchanged.json()[field] == project[field]


class TestAuth:

    @pytest.mark.asyncio
    async def test_dev_mode_uses_token_as_uid(self, monkeypatch):
        from fastapi.security import HTTPAuthorizationCredentials

        from app import auth
        from app.config import Settings

        monkeypatch.setattr(auth, "get_settings", lambda: Settings(auth_dev_mode=True))

        user = await auth.get_current_user(
            HTTPAuthorizationCredentials(scheme="Bearer", credentials="alice")
        )

        assert user.uid == "alice"
        assert user.email is None
