import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

import tillkeeper.models  # noqa: F401
from tillkeeper.core.database import Base, get_db
from tillkeeper.core.security import get_pin_hash, create_access_token
from tillkeeper.main import app
from tillkeeper.models.employee import Employee, EmployeeRole, EmployeeStatus


@pytest_asyncio.fixture
async def engine():
    test_engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


async def create_employee(
    db: AsyncSession,
    name: str,
    role: EmployeeRole = EmployeeRole.CASHIER,
    pin: str = "1234",
    status: EmployeeStatus = EmployeeStatus.ACTIVE,
) -> Employee:
    employee = Employee(
        name=name,
        role=role,
        pin_hash=get_pin_hash(pin),
        status=status,
    )
    db.add(employee)
    await db.commit()
    return employee


def auth_headers(employee: Employee) -> dict:
    token = create_access_token({"sub": str(employee.id), "role": employee.role.value})
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def cashier(db):
    return await create_employee(db, "Ana Cruz", EmployeeRole.CASHIER, pin="5678")


@pytest_asyncio.fixture
async def other_cashier(db):
    return await create_employee(db, "Paolo Garcia", EmployeeRole.CASHIER, pin="9012")


@pytest_asyncio.fixture
async def manager(db):
    return await create_employee(db, "Jose Reyes", EmployeeRole.MANAGER, pin="1234")


@pytest.fixture
def cashier_headers(cashier):
    return auth_headers(cashier)


@pytest.fixture
def manager_headers(manager):
    return auth_headers(manager)
