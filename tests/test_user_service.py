import asyncio
import base64
import json
import threading

import pytest

from user_admin_api.app.core.exceptions import (
    DuplicateLoginError,
    InvalidCredentialsError,
    StorageUnavailableError,
    UserNotFoundError,
    ValidationError,
)
from user_admin_api.app.schemas.user import UserUpdate
from user_admin_api.app.services.user_service import (
    UserService,
    dashboard_for,
    decoded_avatar_size,
)


TWO_MB = 2 * 1024 * 1024


def _avatar(size: int) -> str:
    return "data:image/png;base64," + base64.b64encode(b"\x00" * size).decode("ascii")


def test_create_then_list(service, new_user):
    created = asyncio.run(service.create_user(new_user(avatar=_avatar(10))))
    users = asyncio.run(service.list_users())
    assert users == [created]
    assert created.id.startswith("user_")
    assert created.created_at.endswith("Z")
    assert (created.role, created.login, created.password) == ("employee", "a@b.com", "x")
    assert (created.first_name, created.last_name) == ("A", "B")
    assert created.avatar == _avatar(10)


def test_create_without_avatar_stores_null(service, new_user, users_file):
    asyncio.run(service.create_user(new_user()))
    doc = json.loads(users_file.read_text(encoding="utf-8"))
    assert doc[0]["avatar"] is None
    assert "department" not in doc[0]


def test_ids_unique_and_created_at_ordered(service, new_user):
    first = asyncio.run(service.create_user(new_user(login="one@b.com")))
    second = asyncio.run(service.create_user(new_user(login="two@b.com")))
    assert first.id != second.id
    assert first.created_at <= second.created_at


@pytest.mark.parametrize("missing", ["role", "login", "password", "firstName", "lastName"])
def test_create_requires_every_field(service, new_user, missing):
    with pytest.raises(ValidationError):
        asyncio.run(service.create_user(new_user(**{missing: ""})))
    assert asyncio.run(service.list_users()) == []


@pytest.mark.parametrize("login", ["plain", "a@b", "a b@c.com", "@b.com"])
def test_create_rejects_non_email_login(service, new_user, login):
    with pytest.raises(ValidationError):
        asyncio.run(service.create_user(new_user(login=login)))


def test_create_rejects_unknown_role(service, new_user):
    with pytest.raises(ValidationError):
        asyncio.run(service.create_user(new_user(role="intern")))


def test_duplicate_login_leaves_collection_unchanged(service, new_user, users_file):
    asyncio.run(service.create_user(new_user()))
    before = users_file.read_bytes()
    with pytest.raises(DuplicateLoginError):
        asyncio.run(service.create_user(new_user(firstName="Other")))
    assert users_file.read_bytes() == before


def test_avatar_size_ceiling(service, new_user):
    asyncio.run(service.create_user(new_user(login="ok@b.com", avatar=_avatar(TWO_MB))))
    with pytest.raises(ValidationError):
        asyncio.run(service.create_user(new_user(login="big@b.com", avatar=_avatar(TWO_MB + 1))))
    assert [u.login for u in asyncio.run(service.list_users())] == ["ok@b.com"]


def test_decoded_avatar_size():
    assert decoded_avatar_size(None) == 0
    assert decoded_avatar_size(base64.b64encode(b"abcd").decode()) == 4
    assert decoded_avatar_size(_avatar(5)) == 5


def test_authenticate(service, new_user):
    created = asyncio.run(service.create_user(new_user()))
    user = asyncio.run(service.authenticate("a@b.com", "x"))
    assert user.id == created.id
    assert "password" not in user.model_dump(by_alias=True)
    with pytest.raises(InvalidCredentialsError):
        asyncio.run(service.authenticate("a@b.com", "wrong"))
    with pytest.raises(InvalidCredentialsError):
        asyncio.run(service.authenticate("nobody@b.com", "x"))
    with pytest.raises(ValidationError):
        asyncio.run(service.authenticate("a@b.com", ""))


def test_update_changes_only_supplied_fields(service, new_user):
    created = asyncio.run(service.create_user(new_user(department="Sales")))
    updated = asyncio.run(service.update_user(created.id, UserUpdate(firstName="X")))
    assert updated.first_name == "X"
    assert updated.model_dump(exclude={"first_name"}) == created.model_dump(exclude={"first_name"})
    assert asyncio.run(service.get_user(created.id)) == updated


def test_update_ignores_id_and_created_at(service, new_user):
    created = asyncio.run(service.create_user(new_user()))
    body = UserUpdate.model_validate({"id": "hijack", "createdAt": "1970-01-01T00:00:00.000Z", "lastName": "C"})
    updated = asyncio.run(service.update_user(created.id, body))
    assert (updated.id, updated.created_at, updated.last_name) == (created.id, created.created_at, "C")


def test_update_can_clear_avatar(service, new_user):
    created = asyncio.run(service.create_user(new_user(avatar=_avatar(3))))
    updated = asyncio.run(service.update_user(created.id, UserUpdate(avatar=None)))
    assert updated.avatar is None


def test_update_rejects_oversized_avatar(service, new_user, users_file):
    created = asyncio.run(service.create_user(new_user()))
    before = users_file.read_bytes()
    with pytest.raises(ValidationError):
        asyncio.run(service.update_user(created.id, UserUpdate(avatar=_avatar(TWO_MB + 1))))
    assert users_file.read_bytes() == before


def test_update_rejects_null_required_field(service, new_user):
    created = asyncio.run(service.create_user(new_user()))
    with pytest.raises(ValidationError):
        asyncio.run(service.update_user(created.id, UserUpdate(firstName=None)))


def test_update_unknown_id(service):
    with pytest.raises(UserNotFoundError):
        asyncio.run(service.update_user("user_missing", UserUpdate(firstName="X")))


def test_update_allows_login_collision_by_default(service, new_user):
    asyncio.run(service.create_user(new_user(login="one@b.com")))
    second = asyncio.run(service.create_user(new_user(login="two@b.com")))
    updated = asyncio.run(service.update_user(second.id, UserUpdate(login="one@b.com")))
    assert updated.login == "one@b.com"


def test_update_login_collision_when_enforced(store, new_user):
    service = UserService(store, unique_login_on_update=True)
    asyncio.run(service.create_user(new_user(login="one@b.com")))
    second = asyncio.run(service.create_user(new_user(login="two@b.com")))
    with pytest.raises(DuplicateLoginError):
        asyncio.run(service.update_user(second.id, UserUpdate(login="one@b.com")))
    same = asyncio.run(service.update_user(second.id, UserUpdate(login="two@b.com")))
    assert same.login == "two@b.com"


def test_delete_then_delete_again(service, new_user):
    keep = asyncio.run(service.create_user(new_user(login="keep@b.com")))
    gone = asyncio.run(service.create_user(new_user(login="gone@b.com")))
    removed = asyncio.run(service.delete_user(gone.id))
    assert removed == gone
    assert asyncio.run(service.list_users()) == [keep]
    with pytest.raises(UserNotFoundError):
        asyncio.run(service.delete_user(gone.id))


def test_filter_users(service, new_user):
    asyncio.run(service.create_user(new_user(login="anna@corp.io", firstName="Anna", role="director")))
    asyncio.run(service.create_user(new_user(login="boris@corp.io", firstName="Boris", lastName="Annenkov")))
    asyncio.run(service.create_user(new_user(login="clara@corp.io", firstName="Clara")))
    users = asyncio.run(service.list_users())
    assert [u.login for u in UserService.filter_users(users, role="director")] == ["anna@corp.io"]
    assert [u.login for u in UserService.filter_users(users, search="ANN")] == ["anna@corp.io", "boris@corp.io"]
    assert [u.login for u in UserService.filter_users(users, role="employee", search="ann")] == ["boris@corp.io"]
    assert UserService.filter_users(users) == users


def test_dashboard_for():
    assert dashboard_for("director") == "/director"
    assert dashboard_for("admin") == "/admin"
    assert dashboard_for("unknown") == "/"
    assert dashboard_for(None) == "/"


def test_concurrent_creates_are_all_kept(service, new_user):
    asyncio.run(service.create_user(new_user(login="first@b.com")))
    errors = []

    def create(n):
        try:
            asyncio.run(service.create_user(new_user(login=f"user{n}@b.com")))
        except Exception as exc:  # surfaced through the assertion below
            errors.append(exc)

    threads = [threading.Thread(target=create, args=(n,)) for n in range(30)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    logins = {u.login for u in asyncio.run(service.list_users())}
    assert logins == {"first@b.com"} | {f"user{n}@b.com" for n in range(30)}


def test_mutation_does_not_erase_document_with_invalid_entry(service, new_user, users_file):
    asyncio.run(service.create_user(new_user(login="keep@b.com")))
    doc = json.loads(users_file.read_text(encoding="utf-8"))
    doc.append(dict(doc[0], id="user_legacy", login="legacy@b.com", firstName=None))
    users_file.write_text(json.dumps(doc), encoding="utf-8")
    with pytest.raises(StorageUnavailableError):
        asyncio.run(service.create_user(new_user()))
    assert [u["login"] for u in json.loads(users_file.read_text(encoding="utf-8"))] == ["keep@b.com", "legacy@b.com"]
