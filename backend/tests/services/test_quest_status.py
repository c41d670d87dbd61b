"""Quest Status Projection — verifies completion paths and the journal.

Invariants:
    - complete_quest is idempotent and never commits
    - finish_quest rejects an already-completed quest with a 400
    - failed days cannot be completed
    - The journal skips rows whose quest is gone
"""

from datetime import date, timedelta
from uuid import uuid4

import pytest

from sidequest.core.domain_types import QuestStatus
from sidequest.core.errors import (
    InvalidTransitionError, QuestAlreadyCompletedError, ResourceNotFoundError,
)
from sidequest.models import Quest, UserQuestStatus
from sidequest.services.quest_status import QuestStatusService

DAY = date(2026, 3, 14)


@pytest.fixture
async def assigned(seeder):
    user_id = await seeder.user()
    quest_id = await seeder.quest("Write a haiku")
    await seeder.status(user_id, quest_id, DAY)
    return user_id, quest_id


async def test_finish_quest_completes(test_db, seeder, assigned):
    user_id, quest_id = assigned
    status = await QuestStatusService(test_db).finish_quest(user_id, quest_id, DAY)

    assert status.quest_status == QuestStatus.COMPLETED.value
    stored = await seeder.get(UserQuestStatus, user_id, quest_id, DAY)
    assert stored.is_completed is True


async def test_finish_quest_twice_is_rejected(test_db, seeder, assigned):
    user_id, quest_id = assigned
    service = QuestStatusService(test_db)
    await service.finish_quest(user_id, quest_id, DAY)

    with pytest.raises(QuestAlreadyCompletedError) as exc:
        await service.finish_quest(user_id, quest_id, DAY)
    assert exc.value.http_status == 400


async def test_finish_unknown_quest(test_db, seeder):
    user_id = await seeder.user()
    with pytest.raises(ResourceNotFoundError):
        await QuestStatusService(test_db).finish_quest(user_id, uuid4(), DAY)


async def test_finish_unassigned_day(test_db, assigned):
    user_id, quest_id = assigned
    with pytest.raises(ResourceNotFoundError):
        await QuestStatusService(test_db).finish_quest(
            user_id, quest_id, DAY + timedelta(days=1),
        )


async def test_failed_day_cannot_be_finished(test_db, seeder):
    user_id = await seeder.user()
    quest_id = await seeder.quest("Too late")
    await seeder.status(user_id, quest_id, DAY, QuestStatus.FAILED)

    with pytest.raises(InvalidTransitionError):
        await QuestStatusService(test_db).finish_quest(user_id, quest_id, DAY)
    stored = await seeder.get(UserQuestStatus, user_id, quest_id, DAY)
    assert stored.quest_status == QuestStatus.FAILED.value


async def test_complete_quest_is_idempotent(test_db, assigned):
    user_id, quest_id = assigned
    service = QuestStatusService(test_db)
    await service.complete_quest(user_id, quest_id, DAY)
    stamp = (await service.find_status(user_id, quest_id, DAY)).updated_at
    second = await service.complete_quest(user_id, quest_id, DAY)

    assert second.quest_status == QuestStatus.COMPLETED.value
    assert second.updated_at == stamp
    await test_db.commit()


async def test_complete_quest_missing_row(test_db, seeder):
    user_id = await seeder.user()
    service = QuestStatusService(test_db)
    assert await service.complete_quest(user_id, uuid4(), DAY, missing_ok=True) is None
    with pytest.raises(ResourceNotFoundError):
        await service.complete_quest(user_id, uuid4(), DAY)


async def test_advance_status_skips_illegal_moves(test_db, seeder):
    user_id = await seeder.user()
    quest_id = await seeder.quest("Already done")
    await seeder.status(user_id, quest_id, DAY, QuestStatus.COMPLETED)

    status = await QuestStatusService(test_db).advance_status(
        user_id, quest_id, DAY, QuestStatus.IN_PENDING,
    )
    assert status.quest_status == QuestStatus.COMPLETED.value


async def test_get_status_not_found(test_db, seeder):
    with pytest.raises(ResourceNotFoundError):
        await QuestStatusService(test_db).get_status(uuid4(), uuid4(), DAY)


async def test_journal_newest_day_first(test_db, seeder):
    user_id = await seeder.user()
    older = await seeder.quest("Older")
    newer = await seeder.quest("Newer")
    await seeder.status(user_id, older, DAY - timedelta(days=2))
    await seeder.status(user_id, newer, DAY)

    journal = await QuestStatusService(test_db).get_user_journal(user_id)

    assert [quest.title for _, quest in journal] == ["Newer", "Older"]
    assert [status.assigned_date for status, _ in journal] == [
        DAY, DAY - timedelta(days=2),
    ]


async def test_journal_skips_missing_quests(test_db, seeder):
    user_id = await seeder.user()
    kept = await seeder.quest("Kept")
    gone = await seeder.quest("Gone")
    await seeder.status(user_id, kept, DAY)
    await seeder.status(user_id, gone, DAY)
    async with seeder.factory() as s:
        await s.delete(await s.get(Quest, gone))
        await s.commit()

    journal = await QuestStatusService(test_db).get_user_journal(user_id)

    assert [quest.id for _, quest in journal] == [kept]


async def test_journal_only_lists_own_rows(test_db, seeder, assigned):
    stranger = await seeder.user()
    assert await QuestStatusService(test_db).get_user_journal(stranger) == []
