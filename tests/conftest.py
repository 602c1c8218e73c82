import os

# must be set before the checkin package is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.pop("REDIS_URL", None)

import httpx
import pytest
import pytest_asyncio

from checkin.db import Base, SessionLocal, engine
from checkin.main import app
from checkin.repository import TicketRepository
from tests.helpers import FakeClock


@pytest.fixture(autouse=True)
def clean_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def repo():
    return TicketRepository(SessionLocal)


@pytest.fixture
def clock():
    return FakeClock(1000)


@pytest.fixture
def ticket(repo):
    return repo.create(team_name="Null Pointers", leader_name="Ada", team_member_count=3, room_number="D31", slot_number="1")


@pytest_asyncio.fixture(scope="function")
async def client():
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test", timeout=10.0) as c:
        yield c
