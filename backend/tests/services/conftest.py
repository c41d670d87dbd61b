"""Service test fixtures — async DB, fake file storage, seeding helpers, FastAPI client.

Invariants:
    - Every test gets a fresh SQLite database file under tmp_path
    - get_db and get_storage dependencies overridden for route tests
    - db_manager patched so health checks hit the test database
    - Seed data is written through its own short-lived sessions: objects in
      test_db are never shared with the seeder, so a service rollback cannot
      expire them under the test

Design Decisions:
    - SQLite file instead of :memory: so each session gets its own connection,
      like a real pool (PostgreSQL row locks are not exercised here)
    - FakeStorage records every signing call and can be told to fail
"""

import uuid
from datetime import date, datetime, timezone

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from sidequest.core.domain_types import Complexity, ProofStatus, QuestStatus
from sidequest.core.errors import StorageError
from sidequest.db.base import Base
from sidequest.infrastructure.database import get_db, DatabaseSessionManager
from sidequest.infrastructure.file_storage import get_storage
from sidequest.models import Belief, Quest, QuestProof, User, UserQuestStatus
import sidequest.infrastructure.database as db_module
from sidequest.main import app

DAY = date(2026, 3, 14)


class FakeStorage:
    """In-memory FileStorage: deterministic URLs, recorded calls, optional failures."""

    def __init__(self):
        self.upload_calls: list[tuple[str, str, int]] = []
        self.download_calls: list[tuple[str, int]] = []
        self.fail_uploads = False
        self.broken_keys: set[str] = set()

    async def get_upload_url(self, key: str, content_type: str, ttl_seconds: int) -> str:
        if self.fail_uploads:
            raise StorageError("upload signing disabled", key)
        self.upload_calls.append((key, content_type, ttl_seconds))
        return f"https://storage.test/put/{key}"

    async def get_download_url(self, key: str, ttl_seconds: int) -> str:
        if key in self.broken_keys:
            raise StorageError("object unavailable", key)
        self.download_calls.append((key, ttl_seconds))
        return f"https://storage.test/get/{key}"


class Seeder:
    """Writes fixtures through fresh sessions and returns plain ids."""

    def __init__(self, factory: async_sessionmaker[AsyncSession]):
        self.factory = factory

    async def _add(self, obj):
        async with self.factory() as s:
            s.add(obj)
            await s.commit()
        return obj

    async def user(self, username: str | None = None, level: int = 1) -> uuid.UUID:
        user = await self._add(User(
            id=uuid.uuid4(),
            username=username or f"user-{uuid.uuid4().hex[:8]}",
            level=level,
        ))
        return user.id

    async def quest(
        self, title: str | None = None, complexity: Complexity = Complexity.EASY,
        xp_reward: int = 10,
    ) -> uuid.UUID:
        quest = await self._add(Quest(
            id=uuid.uuid4(),
            title=title or f"Quest {uuid.uuid4().hex[:8]}",
            description="Do the thing",
            complexity=complexity.value,
            xp_reward=xp_reward,
        ))
        return quest.id

    async def status(
        self, user_id, quest_id, day: date = DAY,
        quest_status: QuestStatus = QuestStatus.NOT_STARTED,
    ) -> None:
        await self._add(UserQuestStatus(
            user_id=user_id,
            quest_id=quest_id,
            assigned_date=day,
            quest_status=quest_status.value,
            is_completed=quest_status is QuestStatus.COMPLETED,
            current_value=0,
        ))

    async def proof(
        self, user_id, quest_id, day: date = DAY,
        status: ProofStatus = ProofStatus.PENDING,
        proof_text: str | None = "Done!",
        photo_keys: list[str] | None = None,
        voice_keys: list[str] | None = None,
        created_at: datetime | None = None,
    ) -> uuid.UUID:
        proof = await self._add(QuestProof(
            id=uuid.uuid4(),
            user_id=user_id,
            quest_id=quest_id,
            assigned_date=day,
            proof_text=proof_text,
            photo_keys=photo_keys or [],
            voice_keys=voice_keys or [],
            status=status.value,
            belief_count=0,
            created_at=created_at or datetime.now(timezone.utc),
        ))
        return proof.id

    async def get(self, model, *pk):
        """Fresh, detached copy of a row (None if absent)."""
        async with self.factory() as s:
            return await s.get(model, pk[0] if len(pk) == 1 else pk)

    async def belief_rows(self, proof_id) -> int:
        proof_id = uuid.UUID(str(proof_id))
        async with self.factory() as s:
            result = await s.execute(
                select(func.count()).select_from(Belief).where(Belief.proof_id == proof_id)
            )
            return result.scalar_one()


@pytest.fixture
async def test_engine(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'sidequest.db'}", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def seeder(test_session_factory):
    return Seeder(test_session_factory)


@pytest.fixture
def fake_storage():
    return FakeStorage()


@pytest.fixture
async def client(test_engine, test_session_factory, fake_storage):
    """FastAPI test client with DB and storage dependencies overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: fake_storage

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager
