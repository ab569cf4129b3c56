import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from app.settings import Settings
from tests.api.helpers import API, SIGNUP, build_services


@pytest.fixture()
def settings() -> Settings:
    return Settings(token_backend="memory", log_level="WARNING")


@pytest.fixture()
def services(store):
    return build_services(store)


@pytest.fixture()
def make_client(settings):
    def _make(services) -> TestClient:
        app = create_app(services=services, config=settings)
        return TestClient(app, raise_server_exceptions=False)

    return _make


@pytest.fixture()
def client(make_client, services):
    return make_client(services)


@pytest.fixture()
def signup(client):
    def _signup(**overrides) -> dict:
        response = client.post(f"{API}/users", json={**SIGNUP, **overrides})
        assert response.status_code == 201, response.text
        return response.json()

    return _signup


@pytest.fixture()
def login(client):
    def _login(email: str = SIGNUP["email"], password: str = SIGNUP["password"]):
        response = client.post(
            f"{API}/users/login", json={"email": email, "password": password}
        )
        assert response.status_code == 200, response.text
        return response.json()

    return _login


@pytest.fixture()
def auth_headers(signup, login) -> dict[str, str]:
    """A registered user's bearer header."""
    signup()
    return {"Authorization": f"Bearer {login()['token']}"}
