"""Fixtures for API tests.

The application runs in-process through ``httpx.ASGITransport`` with its
database dependency pointed at the per-test in-memory session.
"""

from typing import AsyncGenerator, Dict

import httpx
import pytest

from realty_portal.auth.session_tokens import issue_session_token
from realty_portal.core.database import get_session
from realty_portal.server.main import app


def _bearer(user) -> Dict[str, str]:
    return {"Authorization": f"Bearer {issue_session_token(user)}"}


@pytest.fixture
def auth_headers():
    """Build an ``Authorization`` header carrying a fresh session for ``user``."""
    return _bearer


@pytest.fixture
async def client(session) -> AsyncGenerator[httpx.AsyncClient, None]:
    async def _override_session():
        yield session

    app.dependency_overrides[get_session] = _override_session
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    try:
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
    finally:
        app.dependency_overrides.pop(get_session, None)


@pytest.fixture
async def admin(make_user):
    return await make_user(role="ADMIN", name="Admin User")


@pytest.fixture
async def agent(make_user):
    return await make_user(role="AGENT", name="Agent Ana")


@pytest.fixture
async def writer(make_user):
    return await make_user(role="WRITER", name="Writer Wes")
