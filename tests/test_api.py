"""HTTP-level tests: routing, guards, status codes and response shapes."""

from datetime import datetime, timezone

import pytest
from bson import ObjectId

from fitness_api.app.api.v1.endpoints import health

NOW = datetime(2024, 3, 1, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "method, path",
    [
        ("get", "/api/v1/users"),
        ("get", "/api/v1/users/trainers"),
        ("get", "/api/v1/users/admins"),
        ("get", "/api/v1/profiles/stats"),
        ("get", "/api/v1/workout-preferences/stats"),
    ],
)
def test_members_cannot_reach_staff_routes(client, login_as, method, path):
    _, headers = login_as("user")
    response = getattr(client, method)(path, headers=headers)
    assert response.status_code == 403


def test_admin_cannot_create_admins(client, login_as):
    _, headers = login_as("admin")
    response = client.post(
        "/api/v1/users/admins",
        headers=headers,
        json={"first_name": "A", "last_name": "B", "email": "a@b.co", "password": "Password1!"},
    )
    assert response.status_code == 403


def test_super_admin_creates_admin(client, login_as, repositories):
    _, headers = login_as("super_admin")
    repositories.users.create.side_effect = lambda document: {"_id": ObjectId(), **document}
    response = client.post(
        "/api/v1/users/admins",
        headers=headers,
        json={"first_name": "A", "last_name": "B", "email": "new.admin@example.com", "password": "Password1!"},
    )
    assert response.status_code == 201
    body = response.json()
    assert body["role"] == "admin"
    assert "password" not in body


def test_admin_lists_trainers(client, login_as, repositories, make_user):
    _, headers = login_as("admin")
    trainer = make_user("trainer")
    repositories.users.find.return_value = [trainer]
    response = client.get("/api/v1/users/trainers", headers=headers)
    assert response.status_code == 200
    assert response.json()[0]["id"] == str(trainer["_id"])
    assert repositories.users.find.call_args.args[0] == {"role": "trainer"}


def test_list_users_filters(client, login_as, repositories):
    _, headers = login_as("admin")
    response = client.get("/api/v1/users", params={"role": "trainer", "is_active": "true"}, headers=headers)
    assert response.status_code == 200
    assert repositories.users.find.call_args.args[0] == {"role": "trainer", "is_active": True}


def test_get_user_with_invalid_id(client, login_as):
    _, headers = login_as("admin")
    response = client.get("/api/v1/users/not-an-id", headers=headers)
    assert response.status_code == 400
    assert response.json() == {"detail": "Invalid user ID"}


def test_get_unknown_user(client, login_as):
    _, headers = login_as("admin")
    response = client.get(f"/api/v1/users/{ObjectId()}", headers=headers)
    assert response.status_code == 404
    assert response.json() == {"detail": "User not found"}


def test_delete_user(client, login_as, repositories):
    _, headers = login_as("admin")
    target = ObjectId()
    repositories.users.soft_delete.return_value = {"_id": target}
    response = client.delete(f"/api/v1/users/{target}", headers=headers)
    assert response.status_code == 204
    repositories.users.soft_delete.assert_called_once_with({"_id": target})


def test_get_my_profile(client, login_as, repositories):
    document, headers = login_as("user")
    repositories.profiles.find_by_user_id.return_value = {
        "_id": ObjectId(),
        "user_id": document["_id"],
        "date_of_birth": datetime(1990, 1, 1, tzinfo=timezone.utc),
        "gender": "male",
        "address": {"street": "s", "city": "c", "state": "st", "zip_code": "z", "location": [1.0, 2.0]},
        "emergency_contact": {"name": "n", "relationship": "r", "phone_number": "p"},
        "fitness_level": "beginner",
        "fitness_goals": ["strength"],
        "completion_percentage": 70,
        "is_deleted": False,
    }
    response = client.get("/api/v1/profiles/me", headers=headers)
    assert response.status_code == 200
    body = response.json()
    assert body["user_id"] == str(document["_id"])
    assert body["completion_percentage"] == 70
    assert "is_deleted" not in body


def test_missing_profile_is_404(client, login_as):
    _, headers = login_as("user")
    response = client.get("/api/v1/profiles/me", headers=headers)
    assert response.status_code == 404
    assert response.json() == {"detail": "Profile not found"}


def test_search_requires_both_coordinates(client, login_as):
    _, headers = login_as("user")
    response = client.get("/api/v1/profiles/search", params={"longitude": 10}, headers=headers)
    assert response.status_code == 400


def test_search_passes_query_filters(client, login_as, repositories):
    document, headers = login_as("user")
    repositories.profiles.search.return_value = {
        "items": [], "total": 0, "page": 1, "limit": 10, "pages": 0, "has_next": False, "has_prev": False,
    }
    response = client.get(
        "/api/v1/profiles/search",
        params=[("fitness_goals", "strength"), ("fitness_goals", "endurance"), ("fitness_level", "expert")],
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json() == {"profiles": [], "total": 0, "page": 1, "total_pages": 0}
    query = repositories.profiles.search.call_args.args[0]
    assert query["fitness_goals"] == {"$in": ["strength", "endurance"]}
    assert query["fitness_level"] == "expert"
    assert query["user_id"] == {"$ne": document["_id"]}


def test_trainer_sees_profile_stats(client, login_as, repositories):
    _, headers = login_as("trainer")
    repositories.profiles.get_profile_stats.return_value = {
        "total_profiles": 1,
        "average_completion": 70,
        "fitness_level_distribution": {"beginner": 1},
        "goal_distribution": {"strength": 1},
    }
    response = client.get("/api/v1/profiles/stats", headers=headers)
    assert response.status_code == 200
    assert response.json()["total_profiles"] == 1


def test_add_measurement_with_unknown_type(client, login_as):
    _, headers = login_as("user")
    response = client.post(
        "/api/v1/fitness-progress/measurements", params={"type": "height", "value": 180}, headers=headers
    )
    assert response.status_code == 400


def test_add_metric_route(client, login_as, repositories):
    document, headers = login_as("user")
    stored = {
        "_id": ObjectId(),
        "user_id": document["_id"],
        "body_measurements": {},
        "fitness_metrics": {"push_ups": [{"value": 25.0, "date": NOW, "notes": None}]},
        "bmi": None,
        "bmi_category": None,
        "body_fat_percentage": None,
        "progress_percentages": {},
    }
    repositories.progress.push_entry.return_value = stored
    response = client.post(
        "/api/v1/fitness-progress/metrics", params={"type": "push_ups", "value": 25}, headers=headers
    )
    assert response.status_code == 201
    assert response.json()["fitness_metrics"]["push_ups"][0]["value"] == 25.0


def test_duplicate_progress_is_409(client, login_as, repositories):
    _, headers = login_as("user")
    repositories.progress.find_by_user_id.return_value = {"_id": ObjectId()}
    response = client.post("/api/v1/fitness-progress/", json={}, headers=headers)
    assert response.status_code == 409


def test_progress_route_validates_period(client, login_as):
    _, headers = login_as("user")
    response = client.get(
        "/api/v1/fitness-progress/progress", params={"type": "weight", "period": "decade"}, headers=headers
    )
    assert response.status_code == 422


def test_progress_route(client, login_as, repositories):
    _, headers = login_as("user")
    repositories.progress.get_series_since.return_value = [{"value": 10, "date": NOW}, {"value": 12, "date": NOW}]
    response = client.get(
        "/api/v1/fitness-progress/progress", params={"type": "push_ups", "period": "week"}, headers=headers
    )
    assert response.status_code == 200
    assert response.json() == {"change": 2.0, "change_percentage": 20.0, "trend": "up"}


def test_history_route(client, login_as, repositories):
    _, headers = login_as("user")
    repositories.progress.get_series.return_value = [{"value": 80.0, "date": NOW, "notes": "a"}]
    response = client.get(
        "/api/v1/fitness-progress/history",
        params={
            "type": "body_measurements.weight",
            "start_date": "2024-02-01T00:00:00Z",
            "end_date": "2024-03-31T00:00:00Z",
        },
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json()[0]["notes"] == "a"


def test_partners_route(client, login_as, repositories):
    document, headers = login_as("user")
    repositories.preferences.find_by_user_id.return_value = {
        "_id": ObjectId(),
        "user_id": document["_id"],
        "preferred_workout_types": ["YOGA"],
        "available_equipment": [],
        "time_preference": {"preferred_days": ["monday"], "preferred_time_slot": "x", "preferred_duration": 60},
        "intensity_preference": {"cardio_intensity": 2, "strength_intensity": 2, "flexibility_intensity": 2},
        "prefer_group_workouts": False,
    }
    response = client.get("/api/v1/workout-preferences/partners", params={"time_overlap": "false"}, headers=headers)
    assert response.status_code == 200
    assert response.json() == []
    assert repositories.preferences.find_by_workout_type.call_args.args[0] == "YOGA"


def test_create_preference_validation_error(client, login_as):
    _, headers = login_as("user")
    response = client.post("/api/v1/workout-preferences/", json={"preferred_workout_types": []}, headers=headers)
    assert response.status_code == 422


@pytest.mark.parametrize("ok, state", [(True, "up"), (False, "down")])
def test_health(client, monkeypatch, ok, state):
    monkeypatch.setattr(health, "check_connection", lambda: {"ok": ok})
    response = client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "database": state}


def test_null_fields_leave_user_unchanged(client, login_as, make_user, known_users, repositories):
    _, headers = login_as("admin")
    target = make_user("trainer")
    known_users[str(target["_id"])] = target

    response = client.put(f"/api/v1/users/{target['_id']}", json={"role": None, "first_name": None}, headers=headers)

    assert response.status_code == 200
    assert response.json()["role"] == "trainer"
    assert response.json()["first_name"] == "Jane"
    repositories.users.update.assert_not_called()


def test_blank_user_name_is_rejected(client, login_as, make_user, known_users):
    _, headers = login_as("admin")
    target = make_user()
    known_users[str(target["_id"])] = target
    response = client.put(f"/api/v1/users/{target['_id']}", json={"last_name": "   "}, headers=headers)
    assert response.status_code == 422


def test_null_gender_leaves_profile_unchanged(client, login_as, repositories):
    document, headers = login_as("user")
    repositories.profiles.find_by_user_id.return_value = {
        "_id": ObjectId(),
        "user_id": document["_id"],
        "date_of_birth": datetime(1990, 1, 1, tzinfo=timezone.utc),
        "gender": "female",
        "address": {"street": "s", "city": "c", "state": "st", "zip_code": "z", "location": [1.0, 2.0]},
        "emergency_contact": {"name": "n", "relationship": "r", "phone_number": "p"},
        "fitness_level": "beginner",
        "fitness_goals": ["strength"],
        "height": 170.0,
        "weight": 60.0,
        "preferred_workout_types": ["yoga"],
        "health_info": {"allergies": []},
        "completion_percentage": 100,
    }

    response = client.put("/api/v1/profiles/me", json={"gender": None}, headers=headers)

    assert response.status_code == 200
    assert response.json()["gender"] == "female"
    repositories.profiles.update_by_user_id.assert_not_called()
