import asyncio
import os
import tempfile
from datetime import date

import pytest

# Settings are read at import time, so the environment must be in place first.
_db_dir = tempfile.mkdtemp(prefix="employee_portal_tests_")
os.environ["SECRET_KEY"] = "test-secret"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_db_dir}/test.db"
os.environ["LOG_LEVEL"] = "WARNING"

from fastapi.testclient import TestClient  # noqa: E402

from employee_portal.core.security import Claims, create_access_token, hash_password  # noqa: E402
from employee_portal.db.base import Base  # noqa: E402
from employee_portal.db.models import Department, Employee, Role, User  # noqa: E402
from employee_portal.db.session import AsyncSessionLocal, engine  # noqa: E402
from employee_portal.main import app  # noqa: E402

PASSWORD = "Secret1"


async def _reset_schema():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


async def _add(obj):
    async with AsyncSessionLocal() as db:
        db.add(obj)
        await db.commit()
        return obj.id


@pytest.fixture(autouse=True)
def fresh_db():
    asyncio.run(_reset_schema())
    yield


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_department():
    def _make(name="Engineering", description=None) -> int:
        return asyncio.run(_add(Department(name=name, description=description)))
    return _make


@pytest.fixture
def make_employee(make_department):
    def _make(email="jane@example.com", name="Jane Doe", department_id=None) -> int:
        if department_id is None:
            department_id = make_department()
        return asyncio.run(_add(Employee(
            name=name,
            email=email,
            position="Developer",
            department_id=department_id,
            salary=5000.0,
            joining_date=date(2023, 1, 15),
        )))
    return _make


@pytest.fixture
def make_user():
    def _make(username="jane", password=PASSWORD, role=Role.employee, employee_id=None) -> int:
        return asyncio.run(_add(User(
            username=username,
            password_hash=hash_password(password),
            role=role,
            employee_id=employee_id,
        )))
    return _make


def bearer(user_id: int, role: Role, employee_id: int | None = None) -> dict[str, str]:
    token = create_access_token(Claims(user_id=user_id, role=role, employee_id=employee_id))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(make_user):
    user_id = make_user(username="boss", role=Role.admin)
    return bearer(user_id, Role.admin)


@pytest.fixture
def employee_headers(make_user, make_employee):
    employee_id = make_employee(email="staff@example.com", name="Staff Member")
    user_id = make_user(username="staff", employee_id=employee_id)
    return bearer(user_id, Role.employee, employee_id)


@pytest.fixture
def auth_headers():
    return bearer
