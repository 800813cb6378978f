"""
Dependency tests
----------------
`get_current_user` and `authorize_roles` on a minimal app.
"""

import pytest
import pytest_asyncio

from fastapi import Depends, FastAPI, Request
from httpx import ASGITransport, AsyncClient

from conftest import ACCESS_SECRET
from middleware.error_handler import register_exception_handlers
from models.helpers import UserRole
from security.helpers import authorize_roles, get_current_user, get_user_store
from utils.config import get_settings


@pytest.fixture
def app(store, settings) -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)
    app.dependency_overrides[get_user_store] = lambda: store
    app.dependency_overrides[get_settings] = lambda: settings

    @app.get("/me")
    async def me(request: Request, current_user=Depends(get_current_user)):
        return {"id": current_user.id, "state_id": request.state.user.id}

    @app.get(
        "/admin",
        dependencies=[Depends(get_current_user), Depends(authorize_roles(UserRole.ADMIN, "SALES"))],
    )
    async def admin():
        return {"ok": True}

    @app.get("/roles-only", dependencies=[Depends(authorize_roles(UserRole.ADMIN))])
    async def roles_only():
        return {"ok": True}

    return app


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


async def auth_headers(store, codec, role: str) -> dict:
    user = await store.create_user(
        {"email": f"{role.lower()}@x.com", "user_name": role.lower(), "password": "hash", "role": role}
    )
    token = await codec.sign({"uid": user.id}, ACCESS_SECRET, "15m")
    return {"Authorization": f"Bearer {token}"}


@pytest.mark.asyncio
async def test_current_user_is_attached_to_request_state(client, store, codec):
    headers = await auth_headers(store, codec, "CUSTOMER")

    response = await client.get("/me", headers=headers)

    body = response.json()
    assert response.status_code == 200
    assert body["id"] == body["state_id"]


@pytest.mark.asyncio
@pytest.mark.parametrize("role", ["ADMIN", "SALES"])
async def test_allowed_roles_pass(client, store, codec, role):
    headers = await auth_headers(store, codec, role)

    response = await client.get("/admin", headers=headers)

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_other_roles_are_forbidden(client, store, codec):
    headers = await auth_headers(store, codec, "CUSTOMER")

    response = await client.get("/admin", headers=headers)

    assert response.status_code == 403
    assert response.json() == {
        "success": False,
        "message": 'Access denied for role "CUSTOMER". Insufficient permissions.',
    }


@pytest.mark.asyncio
async def test_unauthenticated_request_is_rejected_before_role_check(client):
    response = await client.get("/admin")

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_role_check_without_identity_is_unauthorized(client):
    response = await client.get("/roles-only")

    assert response.status_code == 401
    assert response.json()["success"] is False


def test_authorize_roles_rejects_unknown_role():
    with pytest.raises(ValueError):
        authorize_roles("WIZARD")
