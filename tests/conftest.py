from __future__ import annotations

from typing import Dict, List

import pytest
from fastapi.testclient import TestClient

from enrollment_api.app.core.config import Settings
from enrollment_api.app.common.auth import Principal
from enrollment_api.app.common.exception.errors import InvalidSessionException
from enrollment_api.app.database import create_engine, create_session_factory, init_db
from enrollment_api.app.enroll.crud import EnrollmentStore
from enrollment_api.main import create_app


OWNER_TOKEN = "owner-token"
OTHER_TOKEN = "other-token"
SERVICE_ROLE_KEY = "service-role-secret-value"


class FakeTokenVerifier:
    def __init__(self, principals: Dict[str, Principal]) -> None:
        self.principals = principals
        self.calls: List[str] = []

    async def verify(self, token: str) -> Principal:
        self.calls.append(token)
        principal = self.principals.get(token)
        if principal is None:
            raise InvalidSessionException("unknown token")
        return principal


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture()
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'enrollment.db'}",
        supabase_url="https://idp.example.test",
        supabase_anon_key="public-anon-key",
        supabase_service_role_key=SERVICE_ROLE_KEY,
        static_dir=str(tmp_path / "public"),
    )


@pytest.fixture()
async def store(settings):
    engine = create_engine(settings.database_url)
    await init_db(engine)
    yield EnrollmentStore(create_session_factory(engine))
    await engine.dispose()


@pytest.fixture()
def verifier() -> FakeTokenVerifier:
    return FakeTokenVerifier(
        {
            OWNER_TOKEN: Principal(id="u1", email="owner@example.com"),
            OTHER_TOKEN: Principal(id="u2"),
        }
    )


@pytest.fixture()
def client(settings, verifier):
    app = create_app(settings)
    app.state.token_verifier = verifier
    with TestClient(app) as test_client:
        yield test_client


def auth_headers(token: str = OWNER_TOKEN) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
