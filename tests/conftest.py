"""Фикстуры для тестов API: отдельная SQLite-БД и каталог загрузок."""
import asyncio
import os
import tempfile

import pytest

_TMP_DIR = tempfile.mkdtemp(prefix="pest_crm_tests_")

# Настройки должны быть заданы до импорта приложения
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TMP_DIR}/test.db"
os.environ["UPLOADS_DIR"] = os.path.join(_TMP_DIR, "uploads")
os.environ["ADMIN_PASSWORD"] = "test-password"
os.environ["JWT_SECRET"] = "test-secret"

ADMIN_PASSWORD = "test-password"

from fastapi.testclient import TestClient  # noqa: E402

from pest_crm.core.database import Base, engine  # noqa: E402


async def _create_all():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def _drop_all():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def client():
    """Тестовый клиент приложения; таблицы удаляются после теста."""
    from pest_crm.main import app
    with TestClient(app) as c:
        yield c
    asyncio.run(_drop_all())


@pytest.fixture
def auth_headers(client):
    r = client.post("/api/auth/login", json={"password": ADMIN_PASSWORD})
    assert r.status_code == 200, r.text
    token = r.json()["data"]["token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def crm_api(anyio_backend):
    """Клиент CRM поверх ASGI-приложения, уже авторизованный."""
    import httpx

    from pest_crm.client.api import CrmApiClient
    from pest_crm.main import app

    await _create_all()
    api = CrmApiClient(base_url="http://testserver", transport=httpx.ASGITransport(app=app))
    await api.login(ADMIN_PASSWORD)
    yield api
    await api.aclose()
    await _drop_all()


def make_order(client, headers, **overrides):
    body = {
        "orderType": "primary",
        "clientName": "Иванов",
        "pest": "тараканы",
        "objectType": "квартира",
        "address": "ул. Ленина, 1",
        "date": "2024-06-15",
        "time": "09:00",
        "basePrice": 5000,
        "phones": ["+7 495 123-45-67"],
        "clientType": "individual",
        "manager": "Анна",
    }
    body.update(overrides)
    r = client.post("/api/orders", json=body, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()["data"]
