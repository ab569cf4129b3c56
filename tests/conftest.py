import pytest

from app.application.credential_store import CredentialStore
from tests.fakes import FakeErroredOutboxRepo, FakeUoW


def hash_password_stub(plain: str) -> str:
    return "hashed-" + plain


def verify_password_stub(plain: str, password_hash: str) -> bool:
    return password_hash == "hashed-" + plain


@pytest.fixture()
def uow():
    return FakeUoW()


@pytest.fixture()
def errored_uow():
    return FakeUoW(outbox=FakeErroredOutboxRepo())


@pytest.fixture()
def make_store():
    def _make(uow, **kwargs) -> CredentialStore:
        return CredentialStore(
            lambda: uow,
            hash_password=hash_password_stub,
            verify_password=verify_password_stub,
            **kwargs,
        )

    return _make


@pytest.fixture()
def store(uow, make_store) -> CredentialStore:
    return make_store(uow)


@pytest.fixture(autouse=True)
def patch_code(monkeypatch):
    """
    Make the verification code deterministic in all tests.
    You can override in a specific test by re-monkeypatching.
    """
    from app.domain import services as domain_services

    monkeypatch.setattr(
        domain_services, "generate_numeric_code", lambda digits=6: "012345"
    )
    yield
