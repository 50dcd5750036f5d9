"""API-level tests for the routine store endpoints."""

from squad_control_tower.routines import DueRoutine, RoutineService, TriggerCommitError

from conftest import utc, weekly_routine

# Monday 2024-06-03 13:45 UTC, 09:45 in New York
NOW_MS = int(utc(2024, 6, 3, 13, 45).timestamp() * 1000)
DUE_PARAMS = {"current_timestamp": NOW_MS, "day_of_week": 1, "hour": 9, "minute": 45}


def create(client, **overrides) -> str:
    response = client.post("/routines", json=weekly_routine(**overrides))
    assert response.status_code == 201
    return response.json()["routine_id"]


class TestRoutineCrud:
    def test_create_routine(self, client):
        response = client.post("/routines", json=weekly_routine())

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "success"
        assert data["routine"]["id"] == data["routine_id"]
        assert data["routine"]["schedule"]["days_of_week"] == [1, 3, 5]
        assert data["routine"]["last_triggered_at"] is None

    def test_create_invalid_routine(self, client):
        response = client.post(
            "/routines",
            json=weekly_routine(schedule={"days_of_week": [1], "hour": 24}),
        )

        assert response.status_code == 422
        assert client.get("/routines").json() == []

    def test_list_and_get(self, client):
        routine_id = create(client)
        create(client, title="Paused", enabled=False)

        assert len(client.get("/routines").json()) == 2
        enabled = client.get("/routines", params={"enabled_only": True}).json()
        assert [r["id"] for r in enabled] == [routine_id]

        response = client.get(f"/routines/{routine_id}")
        assert response.status_code == 200
        assert response.json()["title"] == "Weekly Sync"

    def test_get_missing_routine(self, client):
        response = client.get("/routines/missing")

        assert response.status_code == 404
        assert response.json()["detail"] == {
            "error": "ROUTINE_NOT_FOUND",
            "message": "Routine missing not found",
            "routine_id": "missing",
        }

    def test_patch_routine(self, client):
        routine_id = create(client)

        response = client.patch(f"/routines/{routine_id}", json={"enabled": False})

        assert response.status_code == 200
        assert response.json()["routine"]["enabled"] is False

    def test_patch_missing_routine(self, client):
        response = client.patch("/routines/missing", json={"enabled": False})

        assert response.status_code == 404
        assert response.json()["detail"]["error"] == "ROUTINE_NOT_FOUND"

    def test_patch_cannot_set_last_triggered_at(self, client):
        routine_id = create(client)

        response = client.patch(
            f"/routines/{routine_id}",
            json={"last_triggered_at": "2024-06-03T13:00:00Z"},
        )

        assert response.status_code == 422

    def test_delete_routine(self, client):
        routine_id = create(client)

        assert client.delete(f"/routines/{routine_id}").status_code == 200
        assert client.get(f"/routines/{routine_id}").status_code == 404
        assert client.delete(f"/routines/{routine_id}").status_code == 404


class TestDueEndpoint:
    def test_due_routines(self, client):
        routine_id = create(client)
        create(client, title="Tuesday only", schedule={"days_of_week": [2], "hour": 9})

        response = client.get("/routines/due", params=DUE_PARAMS)

        assert response.status_code == 200
        due = [DueRoutine.model_validate(item) for item in response.json()]
        assert [d.routine_id for d in due] == [routine_id]
        assert due[0].title == "Weekly Sync"
        assert due[0].cycle_start == utc(2024, 6, 3, 13, 0)

    def test_due_requires_local_components(self, client):
        response = client.get("/routines/due", params={"current_timestamp": NOW_MS})
        assert response.status_code == 422

    def test_due_rejects_out_of_range_day(self, client):
        response = client.get("/routines/due", params={**DUE_PARAMS, "day_of_week": 7})
        assert response.status_code == 422


class TestTriggerEndpoint:
    def test_trigger_creates_task(self, client):
        routine_id = create(client, priority="high")

        response = client.post(f"/routines/{routine_id}/trigger")

        assert response.status_code == 200
        task_id = response.json()["task_id"]
        task = client.get(f"/tasks/{task_id}").json()
        assert task["status"] == "inbox"
        assert task["priority"] == "high"
        assert task["title"] == "Weekly Sync"

        routine = client.get(f"/routines/{routine_id}").json()
        assert routine["last_triggered_at"] is not None

        activities = client.get(
            "/activities", params={"type": "task_created_from_routine"}
        ).json()
        assert activities[0]["task_id"] == task_id
        assert activities[0]["metadata"] == {"routine_id": routine_id}

    def test_triggered_routine_leaves_due_list(self, client):
        routine_id = create(client)
        due = client.get("/routines/due", params=DUE_PARAMS).json()
        assert len(due) == 1

        client.post(
            f"/routines/{routine_id}/trigger",
            json={"cycle_start": due[0]["cycle_start"]},
        )

        assert client.get("/routines/due", params=DUE_PARAMS).json() == []

    def test_conditional_trigger_conflict(self, client):
        routine_id = create(client)
        body = {"cycle_start": "2024-06-03T13:00:00+00:00"}

        first = client.post(f"/routines/{routine_id}/trigger", json=body)
        second = client.post(f"/routines/{routine_id}/trigger", json=body)

        assert first.status_code == 200
        assert second.status_code == 409
        assert second.json()["detail"]["error"] == "ALREADY_TRIGGERED"
        assert len(client.get("/tasks").json()) == 1

    def test_trigger_missing_routine(self, client):
        response = client.post("/routines/missing/trigger")

        assert response.status_code == 404
        assert response.json()["detail"]["routine_id"] == "missing"

    def test_trigger_commit_failure(self, client, monkeypatch):
        routine_id = create(client)

        def failing_trigger(self, routine_id, cycle_start=None):
            raise TriggerCommitError(routine_id, "database is locked")

        monkeypatch.setattr(RoutineService, "trigger", failing_trigger)

        response = client.post(f"/routines/{routine_id}/trigger")

        assert response.status_code == 500
        assert response.json()["detail"]["error"] == "TRIGGER_COMMIT_FAILED"
