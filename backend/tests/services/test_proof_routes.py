"""Proof Routes — verifies confirm, belief, moderation, details, feed and history endpoints."""

from uuid import uuid4

import pytest

from sidequest.core.calendar import utc_today
from sidequest.core.domain_types import Complexity, ProofStatus, QuestStatus
from sidequest.models import UserQuestStatus


def _as(user_id):
    return {"X-User-Id": str(user_id)}


@pytest.fixture
async def world(seeder):
    author = await seeder.user("author")
    quest_id = await seeder.quest("Fly a kite", Complexity.EASY)
    await seeder.status(author, quest_id, utc_today())
    return {
        "author": author,
        "quest_id": quest_id,
        "v1": await seeder.user("v1"),
        "v2": await seeder.user("v2"),
    }


async def _submit(client, world, **body):
    res = await client.post(
        f"/api/v1/quests/{world['quest_id']}/proofs",
        json=body or {"proof_text": "up it went", "photo_count": 1},
        headers=_as(world["author"]),
    )
    assert res.status_code == 201
    return res.json()["proof_id"]


async def test_community_flow_completes_quest(client, seeder, world):
    proof_id = await _submit(client, world)

    res = await client.post(f"/api/v1/proofs/{proof_id}/confirm", headers=_as(world["author"]))
    assert res.json()["status"] == "pending"

    for voter in ("v1", "v2"):
        res = await client.post(f"/api/v1/proofs/{proof_id}/belief", headers=_as(world[voter]))
        assert res.status_code == 200
        assert res.json() == {"believed": True}

    status = await seeder.get(UserQuestStatus, world["author"], world["quest_id"], utc_today())
    assert status.quest_status == QuestStatus.COMPLETED.value

    details = await client.get(f"/api/v1/proofs/{proof_id}", headers=_as(world["v1"]))
    body = details.json()
    assert body["belief_count"] == 2
    assert body["is_believed"] is True
    assert body["username"] == "author"
    assert body["quest_title"] == "Fly a kite"
    assert len(body["photo_urls"]) == 1


async def test_toggle_belief_off(client, world):
    proof_id = await _submit(client, world)
    url = f"/api/v1/proofs/{proof_id}/belief"
    await client.post(url, headers=_as(world["v1"]))
    res = await client.post(url, headers=_as(world["v1"]))
    assert res.json() == {"believed": False}


async def test_self_belief_returns_400(client, world):
    proof_id = await _submit(client, world)
    res = await client.post(f"/api/v1/proofs/{proof_id}/belief", headers=_as(world["author"]))
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "SELF_BELIEF"


async def test_belief_on_unknown_proof_returns_404(client, world):
    res = await client.post(f"/api/v1/proofs/{uuid4()}/belief", headers=_as(world["v1"]))
    assert res.status_code == 404


async def test_belief_from_unknown_user_returns_404(client, seeder, world):
    proof_id = await _submit(client, world)
    res = await client.post(f"/api/v1/proofs/{proof_id}/belief", headers=_as(uuid4()))

    assert res.status_code == 404
    assert await seeder.belief_rows(proof_id) == 0


async def test_moderation_approves(client, seeder, world):
    proof_id = await _submit(client, world)
    await client.post(f"/api/v1/proofs/{proof_id}/confirm", headers=_as(world["author"]))

    res = await client.patch(
        f"/api/v1/proofs/{proof_id}/status", json={"status": "approved"},
        headers=_as(world["v1"]),
    )

    assert res.status_code == 200
    assert res.json()["status"] == ProofStatus.APPROVED.value
    status = await seeder.get(UserQuestStatus, world["author"], world["quest_id"], utc_today())
    assert status.is_completed is True


async def test_moderation_before_confirm_returns_409(client, world):
    proof_id = await _submit(client, world)
    res = await client.patch(
        f"/api/v1/proofs/{proof_id}/status", json={"status": "rejected"},
        headers=_as(world["v1"]),
    )
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "INVALID_TRANSITION"


async def test_moderation_rejects_unknown_verdict(client, world):
    proof_id = await _submit(client, world)
    res = await client.patch(
        f"/api/v1/proofs/{proof_id}/status", json={"status": "pending"},
        headers=_as(world["v1"]),
    )
    assert res.status_code == 400


async def test_feed_and_history(client, world):
    proof_id = await _submit(client, world)

    feed = await client.get("/api/v1/proofs/feed", headers=_as(world["v1"]))
    assert feed.status_code == 200
    assert [p["proof_id"] for p in feed.json()["items"]] == [proof_id]
    assert feed.json()["has_more"] is False

    own_feed = await client.get("/api/v1/proofs/feed", headers=_as(world["author"]))
    assert own_feed.json()["items"] == []

    history = await client.get("/api/v1/proofs/history", headers=_as(world["author"]))
    assert [p["proof_id"] for p in history.json()] == [proof_id]


@pytest.mark.parametrize("limit", [0, 101])
async def test_feed_limit_bounds(client, world, limit):
    res = await client.get(
        "/api/v1/proofs/feed", params={"limit": limit}, headers=_as(world["v1"]),
    )
    assert res.status_code == 400


async def test_unknown_proof_returns_404(client, world):
    res = await client.get(f"/api/v1/proofs/{uuid4()}", headers=_as(world["v1"]))
    assert res.status_code == 404
