import pytest

from src.timeclock.timeclock.core.enums import Role
from src.timeclock.timeclock.main import create_app


@pytest.fixture
def make_client(monkeypatch):
    """Flask test client over a prebuilt container, optionally logged in with a role."""

    monkeypatch.setenv("APP_ENV", "testing")

    def _make(container, role: Role = None, user_id: int = 1):
        app = create_app(container=container)
        client = app.test_client()
        if role is not None:
            with client.session_transaction() as sess:
                sess["user_id"] = user_id
                sess["role"] = role.value
        return client

    return _make
