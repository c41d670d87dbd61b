"""Proof Read Models — verifies details, feed and history views.

Invariants:
    - Download URLs resolved on every read; broken keys are skipped
    - The feed excludes the viewer and pages with has_more
    - is_believed reflects the viewer's own vote
"""

from datetime import date, datetime, timedelta, timezone
from uuid import uuid4

import pytest

from sidequest.core.errors import ResourceNotFoundError
from sidequest.services.belief_ledger import BeliefLedger
from sidequest.services.proof_queries import ProofQueryService

DAY = date(2026, 3, 14)
T0 = datetime(2026, 3, 14, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
async def people(seeder):
    return {
        "alice": await seeder.user("alice"),
        "bob": await seeder.user("bob"),
        "carol": await seeder.user("carol"),
    }


@pytest.fixture
async def quest_id(seeder):
    return await seeder.quest("Bake bread", xp_reward=25)


async def test_details_resolve_download_urls(test_db, seeder, fake_storage, people, quest_id):
    proof_id = await seeder.proof(
        people["alice"], quest_id, photo_keys=["p/0.jpg", "p/1.jpg"], voice_keys=["v/0.ogg"],
    )
    service = ProofQueryService(test_db, fake_storage, download_ttl_seconds=120)

    details = await service.get_proof_details(proof_id, people["bob"])

    assert details.author.username == "alice"
    assert details.quest.title == "Bake bread"
    assert details.photo_urls == [
        "https://storage.test/get/p/0.jpg", "https://storage.test/get/p/1.jpg",
    ]
    assert details.voice_urls == ["https://storage.test/get/v/0.ogg"]
    assert all(ttl == 120 for _, ttl in fake_storage.download_calls)
    assert details.is_believed is False


async def test_broken_key_is_skipped(test_db, seeder, fake_storage, people, quest_id):
    proof_id = await seeder.proof(
        people["alice"], quest_id, photo_keys=["ok.jpg", "broken.jpg"],
    )
    fake_storage.broken_keys.add("broken.jpg")

    details = await ProofQueryService(test_db, fake_storage).get_proof_details(
        proof_id, people["bob"],
    )

    assert details.photo_urls == ["https://storage.test/get/ok.jpg"]


async def test_details_show_viewer_belief(test_db, seeder, fake_storage, people, quest_id):
    proof_id = await seeder.proof(people["alice"], quest_id)
    await BeliefLedger(test_db).toggle_belief(proof_id, people["bob"])
    service = ProofQueryService(test_db, fake_storage)

    as_bob = await service.get_proof_details(proof_id, people["bob"])
    as_carol = await service.get_proof_details(proof_id, people["carol"])

    assert as_bob.is_believed is True
    assert as_carol.is_believed is False
    assert as_bob.proof.belief_count == 1


async def test_details_unknown_proof(test_db, fake_storage, people):
    with pytest.raises(ResourceNotFoundError):
        await ProofQueryService(test_db, fake_storage).get_proof_details(uuid4(), people["bob"])


async def test_feed_excludes_viewer_newest_first(test_db, seeder, fake_storage, people, quest_id):
    await seeder.proof(people["alice"], quest_id, proof_text="a1", created_at=T0)
    await seeder.proof(people["carol"], quest_id, proof_text="c1", created_at=T0 + timedelta(minutes=5))
    await seeder.proof(people["bob"], quest_id, proof_text="mine", created_at=T0 + timedelta(minutes=9))

    page = await ProofQueryService(test_db, fake_storage).get_feed(people["bob"])

    assert [d.proof.proof_text for d in page.items] == ["c1", "a1"]
    assert page.has_more is False


async def test_feed_pagination(test_db, seeder, fake_storage, people, quest_id):
    for i in range(5):
        await seeder.proof(
            people["alice"], quest_id, proof_text=f"p{i}", created_at=T0 + timedelta(minutes=i),
        )
    service = ProofQueryService(test_db, fake_storage)

    first = await service.get_feed(people["bob"], limit=2, offset=0)
    last = await service.get_feed(people["bob"], limit=2, offset=4)

    assert [d.proof.proof_text for d in first.items] == ["p4", "p3"]
    assert first.has_more is True
    assert first.next_offset == 2
    assert [d.proof.proof_text for d in last.items] == ["p0"]
    assert last.has_more is False


async def test_feed_marks_believed_items(test_db, seeder, fake_storage, people, quest_id):
    liked = await seeder.proof(people["alice"], quest_id, created_at=T0)
    await seeder.proof(people["carol"], quest_id, created_at=T0 + timedelta(minutes=1))
    await BeliefLedger(test_db).toggle_belief(liked, people["bob"])

    page = await ProofQueryService(test_db, fake_storage).get_feed(people["bob"])

    believed = {d.proof.id: d.is_believed for d in page.items}
    assert believed[liked] is True
    assert sum(believed.values()) == 1


async def test_history_lists_own_proofs(test_db, seeder, fake_storage, people, quest_id):
    await seeder.proof(people["bob"], quest_id, proof_text="old", created_at=T0)
    await seeder.proof(people["bob"], quest_id, proof_text="new", created_at=T0 + timedelta(hours=1))
    await seeder.proof(people["alice"], quest_id, proof_text="not mine")

    history = await ProofQueryService(test_db, fake_storage).get_user_history(people["bob"])

    assert [d.proof.proof_text for d in history] == ["new", "old"]
