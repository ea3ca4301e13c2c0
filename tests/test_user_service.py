import pytest
from bson import ObjectId
from pydantic import ValidationError
from pymongo.errors import DuplicateKeyError

from fitness_api.app.core.exceptions import BadRequestError, ConflictError, NotFoundError
from fitness_api.app.core.security import verify_password
from fitness_api.app.schemas.user import UserCreate, UserUpdate
from fitness_api.app.services.user_service import PASSWORD_MESSAGE, UserService, is_strong_password


def _stored(document):
    return {"_id": ObjectId(), **document}


def _new_user(**overrides):
    data = {
        "first_name": "John",
        "last_name": "Doe",
        "email": "John.Doe@Example.com",
        "password": "Password1!",
    }
    data.update(overrides)
    return UserCreate(**data)


@pytest.mark.parametrize(
    "password, expected",
    [
        ("Password1!", True),
        ("password1!", False),
        ("PASSWORD1!", False),
        ("Password!!", False),
        ("Password12", False),
        ("Pa1!", False),
        ("Password1!#", False),
    ],
)
def test_password_strength_rule(password, expected):
    assert is_strong_password(password) is expected


def test_create_defaults_role_and_hashes_password(repositories):
    repositories.users.create.side_effect = _stored

    user = UserService.create(_new_user())

    stored = repositories.users.create.call_args.args[0]
    assert stored["email"] == "john.doe@example.com"
    assert stored["role"] == "user"
    assert stored["permissions"] == []
    assert stored["is_active"] is True
    assert verify_password("Password1!", stored["password"])
    assert "password" not in user
    assert user["id"] == str(ObjectId(user["id"]))


def test_create_rejects_existing_email(repositories, make_user):
    repositories.users.find_by_email.return_value = make_user()
    with pytest.raises(ConflictError, match="Email already exists"):
        UserService.create(_new_user())
    repositories.users.create.assert_not_called()


def test_create_rejects_weak_password(repositories):
    with pytest.raises(BadRequestError) as error:
        UserService.create(_new_user(password="password"))
    assert error.value.detail == PASSWORD_MESSAGE


def test_create_maps_duplicate_key_race_to_conflict(repositories):
    repositories.users.create.side_effect = DuplicateKeyError("E11000")
    with pytest.raises(ConflictError):
        UserService.create(_new_user())


def test_create_trainer_gets_trainer_permissions(repositories):
    repositories.users.create.side_effect = _stored
    user = UserService.create_trainer(_new_user())
    assert user["role"] == "trainer"
    assert user["permissions"] == ["manage:workouts", "manage:classes", "view:analytics"]


def test_create_admin_and_super_admin(repositories):
    repositories.users.create.side_effect = _stored
    admin = UserService.create_admin(_new_user())
    owner = UserService.create_admin(_new_user(email="owner@example.com"), super_admin=True)
    assert admin["role"] == "admin"
    assert "system:settings" not in admin["permissions"]
    assert owner["role"] == "super_admin"
    assert "system:settings" in owner["permissions"]


def test_find_all_builds_filter(repositories, make_user):
    repositories.users.find.return_value = [make_user()]
    users = UserService.find_all(role="trainer", is_active=False)
    assert repositories.users.find.call_args.args[0] == {"role": "trainer", "is_active": False}
    assert "password" not in users[0]


def test_find_all_admins_includes_super_admins(repositories):
    UserService.find_all_admins()
    repositories.users.find_by_roles.assert_called_once_with(["admin", "super_admin"])


def test_find_by_id_validates_id(repositories):
    with pytest.raises(BadRequestError, match="Invalid user ID"):
        UserService.find_by_id("not-an-id")
    with pytest.raises(NotFoundError, match="User not found"):
        UserService.find_by_id(str(ObjectId()))


def test_find_by_email_ignores_empty_input(repositories):
    assert UserService.find_by_email("") is None
    repositories.users.find_by_email.assert_not_called()


def test_update_rehashes_password_and_resets_permissions(repositories, known_users, make_user):
    document = make_user()
    known_users[str(document["_id"])] = document
    repositories.users.update.side_effect = lambda query, fields: {**document, **fields}

    user = UserService.update(str(document["_id"]), UserUpdate(password="NewPass1!", role="trainer"))

    fields = repositories.users.update.call_args.args[1]
    assert verify_password("NewPass1!", fields["password"])
    assert fields["permissions"] == ["manage:workouts", "manage:classes", "view:analytics"]
    assert user["role"] == "trainer"
    assert "password" not in user


def test_update_keeps_explicit_permissions(repositories, known_users, make_user):
    document = make_user()
    known_users[str(document["_id"])] = document
    repositories.users.update.side_effect = lambda query, fields: {**document, **fields}

    UserService.update(str(document["_id"]), UserUpdate(role="admin", permissions=["view:analytics"]))

    assert repositories.users.update.call_args.args[1]["permissions"] == ["view:analytics"]


def test_update_rejects_taken_email(repositories, known_users, make_user):
    document = make_user()
    known_users[str(document["_id"])] = document
    repositories.users.find_by_email.return_value = make_user(email="taken@example.com")
    with pytest.raises(ConflictError):
        UserService.update(str(document["_id"]), UserUpdate(email="taken@example.com"))


def test_update_rejects_weak_password(repositories, known_users, make_user):
    document = make_user()
    known_users[str(document["_id"])] = document
    with pytest.raises(BadRequestError):
        UserService.update(str(document["_id"]), UserUpdate(password="lowercase1"))


def test_update_last_login_requires_existing_user(repositories):
    repositories.users.update.return_value = None
    with pytest.raises(NotFoundError):
        UserService.update_last_login(str(ObjectId()))
    with pytest.raises(BadRequestError):
        UserService.update_last_login("123")


def test_validate_credentials(repositories, make_user):
    repositories.users.find_by_email.return_value = make_user()
    assert UserService.validate_credentials("user@example.com", "Password1!")["email"] == "user@example.com"
    assert UserService.validate_credentials("user@example.com", "Wrong1!") is None


def test_validate_credentials_rejects_disabled_and_unknown(repositories, make_user):
    repositories.users.find_by_email.return_value = make_user(is_active=False)
    assert UserService.validate_credentials("user@example.com", "Password1!") is None
    repositories.users.find_by_email.return_value = None
    assert UserService.validate_credentials("nobody@example.com", "Password1!") is None


def test_remove_soft_deletes(repositories):
    user_id = ObjectId()
    repositories.users.soft_delete.return_value = {"_id": user_id, "is_deleted": True}
    UserService.remove(str(user_id))
    repositories.users.soft_delete.assert_called_once_with({"_id": user_id})

    repositories.users.soft_delete.return_value = None
    with pytest.raises(NotFoundError):
        UserService.remove(str(user_id))


def test_update_ignores_null_fields(repositories, known_users, make_user):
    document = make_user()
    known_users[str(document["_id"])] = document
    repositories.users.update.side_effect = lambda query, fields: {**document, **fields}

    user = UserService.update(
        str(document["_id"]), UserUpdate(role=None, first_name=None, email=None, is_active=None, last_name="Smith")
    )

    assert repositories.users.update.call_args.args[1] == {"last_name": "Smith"}
    assert user["role"] == "user"
    assert user["first_name"] == "Jane"


@pytest.mark.parametrize("name", ["", "   "])
def test_update_rejects_blank_names(name):
    with pytest.raises(ValidationError):
        UserUpdate(first_name=name)
    assert UserUpdate(last_name="  Smith ").last_name == "Smith"
