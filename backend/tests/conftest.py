import os
import uuid

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.pool import StaticPool

from invoicedesk.db.init_db import init_db
from invoicedesk.db.session import create_engine_for, create_session_factory, get_db
from invoicedesk.main import app

API = "/api/v1"
PASSWORD = "correct-horse-battery"


@pytest.fixture
async def engine():
    engine = create_engine_for("sqlite+aiosqlite://", poolclass=StaticPool)
    await init_db(bind=engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


async def register_user(client: AsyncClient, email: str = None, full_name: str = "Test User") -> dict:
    email = email or f"user_{uuid.uuid4().hex[:10]}@example.com"
    response = await client.post(f"{API}/users/", json={"email": email, "password": PASSWORD, "full_name": full_name})
    assert response.status_code == 201, response.text
    return response.json()


async def auth_headers(client: AsyncClient, email: str) -> dict:
    response = await client.post(f"{API}/login/access-token", data={"username": email, "password": PASSWORD})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


async def create_org(client: AsyncClient, headers: dict, name: str = "Acme Printers", **extra) -> dict:
    response = await client.post(f"{API}/organizations/", json={"name": name, **extra}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


async def create_customer(client: AsyncClient, headers: dict, org_id: str, name: str = "Rahim Traders") -> dict:
    response = await client.post(
        f"{API}/customers/", json={"organization_id": org_id, "name": name, "phone": "01700000000"}, headers=headers
    )
    assert response.status_code == 201, response.text
    return response.json()


async def create_invoice(client: AsyncClient, headers: dict, org_id: str, customer_id: str, items=None, **extra) -> dict:
    payload = {
        "organization_id": org_id,
        "customer_id": customer_id,
        "items": items or [
            {"description": "Business cards", "quantity": 1000, "unit_price": 2.5},
            {"description": "Letterheads", "quantity": 500, "unit_price": 4},
        ],
        **extra,
    }
    response = await client.post(f"{API}/invoices/", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
async def owner(client):
    user = await register_user(client, full_name="Owner")
    return {"user": user, "headers": await auth_headers(client, user["email"])}


@pytest.fixture
async def org(client, owner):
    return await create_org(client, owner["headers"])


@pytest.fixture
async def customer(client, owner, org):
    return await create_customer(client, owner["headers"], org["id"])


@pytest.fixture
async def invoice(client, owner, org, customer):
    return await create_invoice(client, owner["headers"], org["id"], customer["id"])


@pytest.fixture
def add_member(client, owner, org):
    """
    Register a user, add them to the org with the given role and return
    their auth headers. The free plan allows two members besides the owner.
    """
    async def _add(role: str) -> dict:
        user = await register_user(client, full_name=role.title())
        response = await client.post(
            f"{API}/organizations/{org['id']}/members",
            json={"email": user["email"], "role": role},
            headers=owner["headers"],
        )
        assert response.status_code == 201, response.text
        return await auth_headers(client, user["email"])

    return _add
