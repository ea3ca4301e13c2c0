from datetime import date, datetime, timezone

import pytest
from bson import ObjectId

from fitness_api.app.core.exceptions import BadRequestError, NotFoundError
from fitness_api.app.schemas.profile import (
    AgeRange,
    LocationFilter,
    ProfileCreate,
    ProfileSearchFilters,
    ProfileUpdate,
)
from fitness_api.app.services.profile_service import (
    ProfileService,
    completion_percentage,
    missing_profile_fields,
)

USER_ID = ObjectId()


def profile_payload(**overrides):
    payload = {
        "date_of_birth": "1990-05-17",
        "gender": "female",
        "address": {
            "street": "123 Fitness Street",
            "city": "New York",
            "state": "NY",
            "zip_code": "10001",
            "location": [-73.935242, 40.730610],
        },
        "emergency_contact": {"name": "John Doe", "relationship": "Brother", "phone_number": "+15555555555"},
        "fitness_goals": ["weight_loss"],
        "health_info": {"allergies": ["Peanuts"]},
    }
    payload.update(overrides)
    return payload


def stored_profile(**overrides):
    document = ProfileCreate(**profile_payload()).model_dump()
    document["date_of_birth"] = datetime(1990, 5, 17, tzinfo=timezone.utc)
    document.update(_id=ObjectId(), user_id=USER_ID, completion_percentage=70)
    document.update(overrides)
    return document


def test_completion_counts_non_empty_fields():
    document = stored_profile()
    # height, weight and preferred_workout_types are missing
    assert missing_profile_fields(document) == ["height", "weight", "preferred_workout_types"]
    assert completion_percentage(document) == 70
    document.update(height=170, weight=65, preferred_workout_types=["yoga"])
    assert completion_percentage(document) == 100


def test_create_profile_stores_user_and_completion(repositories):
    repositories.profiles.create.side_effect = lambda document: {"_id": ObjectId(), **document}

    profile = ProfileService.create_profile(str(USER_ID), ProfileCreate(**profile_payload(height=170)))

    stored = repositories.profiles.create.call_args.args[0]
    assert stored["user_id"] == USER_ID
    assert stored["date_of_birth"] == datetime(1990, 5, 17, tzinfo=timezone.utc)
    assert stored["fitness_level"] == "beginner"
    assert stored["completion_percentage"] == 80
    assert profile["user_id"] == str(USER_ID)


def test_create_profile_twice_is_rejected(repositories):
    repositories.profiles.find_by_user_id.return_value = stored_profile()
    with pytest.raises(BadRequestError, match="Profile already exists for this user"):
        ProfileService.create_profile(str(USER_ID), ProfileCreate(**profile_payload()))


def test_create_profile_requires_a_goal():
    with pytest.raises(ValueError):
        ProfileCreate(**profile_payload(fitness_goals=[]))


def test_address_rejects_out_of_range_coordinates():
    address = profile_payload()["address"]
    with pytest.raises(ValueError):
        ProfileCreate(**profile_payload(address={**address, "location": [200, 10]}))


def test_get_profile_not_found(repositories):
    with pytest.raises(NotFoundError, match="Profile not found"):
        ProfileService.get_profile(str(USER_ID))


def test_update_profile_refreshes_completion(repositories):
    updated = stored_profile(height=180.0)
    repositories.profiles.update_by_user_id.return_value = updated
    repositories.profiles.set_completion_percentage.return_value = {**updated, "completion_percentage": 80}

    profile = ProfileService.update_profile(str(USER_ID), ProfileUpdate(height=180))

    repositories.profiles.update_by_user_id.assert_called_once_with(USER_ID, {"height": 180.0})
    repositories.profiles.set_completion_percentage.assert_called_once_with(USER_ID, 80)
    assert profile["completion_percentage"] == 80


def test_update_profile_converts_dates(repositories):
    repositories.profiles.update_by_user_id.return_value = stored_profile()
    ProfileService.update_profile(str(USER_ID), ProfileUpdate(date_of_birth=date(1991, 1, 2)))
    fields = repositories.profiles.update_by_user_id.call_args.args[1]
    assert fields == {"date_of_birth": datetime(1991, 1, 2, tzinfo=timezone.utc)}


def test_update_missing_profile(repositories):
    repositories.profiles.update_by_user_id.return_value = None
    with pytest.raises(NotFoundError):
        ProfileService.update_profile(str(USER_ID), ProfileUpdate(weight=60))


def test_delete_profile(repositories):
    repositories.profiles.delete_by_user_id.return_value = False
    with pytest.raises(NotFoundError):
        ProfileService.delete_profile(str(USER_ID))
    repositories.profiles.delete_by_user_id.return_value = True
    ProfileService.delete_profile(str(USER_ID))
    repositories.profiles.delete_by_user_id.assert_called_with(USER_ID)


def test_nearby_profiles_exclude_caller(repositories):
    other = stored_profile(user_id=ObjectId())
    repositories.profiles.find_by_location.return_value = [other]

    profiles = ProfileService.find_nearby_profiles(str(USER_ID), -73.9, 40.7)

    repositories.profiles.find_by_location.assert_called_once_with(-73.9, 40.7, 5000, exclude_user_id=USER_ID)
    assert profiles[0]["user_id"] == str(other["user_id"])


def test_search_combines_filters_into_one_query(repositories):
    repositories.profiles.search.return_value = {
        "items": [stored_profile(user_id=ObjectId())],
        "total": 11,
        "page": 2,
        "limit": 5,
        "pages": 3,
        "has_next": True,
        "has_prev": True,
    }
    filters = ProfileSearchFilters(
        fitness_level="advanced",
        fitness_goals=["strength", "endurance"],
        age_range=AgeRange(min=20, max=40),
        location=LocationFilter(longitude=10.0, latitude=20.0, max_distance=6371),
    )

    result = ProfileService.search_profiles(str(USER_ID), page=2, limit=5, filters=filters)

    query = repositories.profiles.search.call_args.args[0]
    assert query["fitness_level"] == "advanced"
    assert query["fitness_goals"] == {"$in": ["strength", "endurance"]}
    assert query["user_id"] == {"$ne": USER_ID}
    assert query["date_of_birth"]["$gte"] < query["date_of_birth"]["$lte"]
    assert query["address.location"]["$geoWithin"]["$centerSphere"] == [[10.0, 20.0], 0.001]
    assert result["total"] == 11
    assert result["page"] == 2
    assert result["total_pages"] == 3
    assert len(result["profiles"]) == 1


def test_search_without_filters_only_excludes_caller(repositories):
    repositories.profiles.search.return_value = {
        "items": [], "total": 0, "page": 1, "limit": 10, "pages": 0, "has_next": False, "has_prev": False,
    }
    result = ProfileService.search_profiles(str(USER_ID))
    assert repositories.profiles.search.call_args.args[0] == {"user_id": {"$ne": USER_ID}}
    assert result == {"profiles": [], "total": 0, "page": 1, "total_pages": 0}


def test_completion_status(repositories):
    repositories.profiles.find_by_user_id.return_value = stored_profile(weight=70)
    status = ProfileService.get_profile_completion_status(str(USER_ID))
    assert status == {"completion_percentage": 80, "missing_fields": ["height", "preferred_workout_types"]}


def test_update_profile_ignores_null_fields(repositories):
    repositories.profiles.update_by_user_id.return_value = stored_profile()
    ProfileService.update_profile(
        str(USER_ID), ProfileUpdate(gender=None, date_of_birth=None, address=None, fitness_level=None, height=175)
    )
    repositories.profiles.update_by_user_id.assert_called_once_with(USER_ID, {"height": 175.0})


def test_update_profile_with_only_nulls_changes_nothing(repositories):
    repositories.profiles.find_by_user_id.return_value = stored_profile()
    ProfileService.update_profile(str(USER_ID), ProfileUpdate(gender=None, emergency_contact=None))
    repositories.profiles.update_by_user_id.assert_not_called()
