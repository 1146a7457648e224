"""
Pytest configuration and fixtures.

Every test gets its own SQLite database file, created from the models.
"""
import os
import tempfile
from datetime import datetime
from decimal import Decimal
from typing import Any, AsyncGenerator, Optional

# Set test environment variables before importing the app.
os.environ.setdefault(
    "DATABASE_URL",
    f"sqlite+aiosqlite:///{os.path.join(tempfile.gettempdir(), 'contract_payments_test.sqlite3')}",
)
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("APP_ENV", "test")

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker  # noqa: E402

from api.main import app  # noqa: E402
from database.connection import build_engine, build_session_factory, get_db, reset_db  # noqa: E402
from database.models import Contract, ContractStatus, Job, Profile, ProfileType  # noqa: E402


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: HTTP-level tests through the FastAPI app")
    config.addinivalue_line("markers", "race: Concurrent access tests")


class Store:
    """Insert and re-read rows, each call in its own committed session."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory
        self._next_id = 1

    def _id(self) -> int:
        value = self._next_id
        self._next_id += 1
        return value

    async def add(self, *rows: Any) -> None:
        async with self.session_factory() as session:
            session.add_all(rows)
            await session.commit()

    async def get(self, model: Any, pk: int) -> Any:
        async with self.session_factory() as session:
            return await session.get(model, pk)

    async def delete(self, model: Any, pk: int) -> None:
        async with self.session_factory() as session:
            row = await session.get(model, pk)
            await session.delete(row)
            await session.commit()

    async def profile(
        self,
        type: ProfileType = ProfileType.CLIENT,
        balance: str = "1000",
        profession: str = "Programmer",
        first_name: str = "Test",
        last_name: str = "User",
        id: Optional[int] = None,
    ) -> Profile:
        profile = Profile(
            id=id or self._id(),
            first_name=first_name,
            last_name=last_name,
            profession=profession,
            balance=Decimal(balance),
            type=type.value,
        )
        await self.add(profile)
        return profile

    async def contract(
        self,
        client: Profile,
        contractor: Profile,
        status: ContractStatus = ContractStatus.IN_PROGRESS,
        id: Optional[int] = None,
    ) -> Contract:
        contract = Contract(
            id=id or self._id(),
            terms="bla bla bla",
            status=status.value,
            client_id=client.id,
            contractor_id=contractor.id,
        )
        await self.add(contract)
        return contract

    async def job(
        self,
        contract: Contract,
        price: str = "100",
        paid: Optional[bool] = None,
        payment_date: Optional[datetime] = None,
        id: Optional[int] = None,
    ) -> Job:
        job = Job(
            id=id or self._id(),
            description="work",
            price=Decimal(price),
            paid=paid,
            payment_date=payment_date,
            contract_id=contract.id,
        )
        await self.add(job)
        return job


@pytest_asyncio.fixture
async def engine(tmp_path: Any) -> AsyncGenerator[AsyncEngine, Any]:
    """Create a fresh SQLite database for one test."""
    test_engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.sqlite3'}")
    await reset_db(test_engine)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test database."""
    return build_session_factory(engine)


@pytest_asyncio.fixture
async def db(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession, Any]:
    """Create test database session."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def store(session_factory: async_sessionmaker[AsyncSession]) -> Store:
    """Row factory writing through its own sessions."""
    return Store(session_factory)


@pytest_asyncio.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncClient, Any]:
    """Create test HTTP client backed by the test database."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, Any]:
        async with session_factory() as session:
            try:
                yield session
            finally:
                await session.close()

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
