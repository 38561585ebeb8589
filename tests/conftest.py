import pytest
from fastapi.testclient import TestClient

from user_admin_api.app.core.storage import RecordStore, get_record_store
from user_admin_api.app.main import app
from user_admin_api.app.schemas.user import UserCreate
from user_admin_api.app.services.user_service import UserService


@pytest.fixture
def users_file(tmp_path):
    return tmp_path / "data" / "users.json"


@pytest.fixture
def store(users_file):
    return RecordStore(users_file, strict_reads=False)


@pytest.fixture
def service(store):
    return UserService(store, unique_login_on_update=False)


@pytest.fixture
def client(store):
    app.dependency_overrides[get_record_store] = lambda: store
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def new_user():
    def make(**overrides):
        fields = {
            "role": "employee",
            "login": "a@b.com",
            "password": "x",
            "firstName": "A",
            "lastName": "B",
        }
        fields.update(overrides)
        return UserCreate(**fields)

    return make
