"""Proof Read Models — details, community feed, and a user's proof history.

Invariants:
    - Read-only: no method writes or commits
    - Download URLs are derived from stored keys on every read, never persisted
    - A key whose URL cannot be signed is skipped (logged), the proof is still returned
    - Aggregate reads (feed, history) skip proofs whose author or quest is gone;
      get_proof_details raises ResourceNotFoundError instead
    - The feed never contains the viewer's own proofs

Design Decisions:
    - Feed fetches limit + 1 rows: has_more without a COUNT(*) query
    - Viewer beliefs for a feed page loaded in one IN query, not one per proof
"""

import logging
from dataclasses import dataclass, field
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sidequest.core.errors import ErrorContext, ResourceNotFoundError, StorageError
from sidequest.core.repository_protocols import FileStorage
from sidequest.models.belief import Belief
from sidequest.models.quest import Quest
from sidequest.models.quest_proof import QuestProof
from sidequest.models.user import User

logger = logging.getLogger(__name__)


@dataclass
class ProofDetails:
    proof: QuestProof
    author: User
    quest: Quest
    photo_urls: list[str] = field(default_factory=list)
    voice_urls: list[str] = field(default_factory=list)
    is_believed: bool = False


@dataclass
class ProofFeedPage:
    items: list[ProofDetails]
    has_more: bool
    next_offset: int


class ProofQueryService:
    """Builds client-facing proof views with resolved download URLs."""

    def __init__(
        self, db: AsyncSession, storage: FileStorage, download_ttl_seconds: int = 3600,
    ):
        self.db = db
        self.storage = storage
        self.download_ttl_seconds = download_ttl_seconds

    def _with_relations(self):
        return (
            select(QuestProof, User, Quest)
            .outerjoin(User, User.id == QuestProof.user_id)
            .outerjoin(Quest, Quest.id == QuestProof.quest_id)
        )

    async def get_proof_details(
        self, proof_id: UUID, viewer_id: UUID,
    ) -> ProofDetails:
        result = await self.db.execute(
            self._with_relations().where(QuestProof.id == proof_id)
        )
        row = result.one_or_none()
        if row is None or row[1] is None or row[2] is None:
            raise ResourceNotFoundError(
                "QuestProof", str(proof_id),
                ErrorContext(proof_id=str(proof_id), user_id=str(viewer_id)),
            )
        proof, author, quest = row
        believed = await self._believed_ids(viewer_id, [proof.id])
        return await self._build(proof, author, quest, proof.id in believed)

    async def get_feed(
        self, viewer_id: UUID, limit: int = 20, offset: int = 0,
    ) -> ProofFeedPage:
        """Other users' proofs, newest first."""
        result = await self.db.execute(
            self._with_relations()
            .where(QuestProof.user_id != viewer_id)
            .order_by(QuestProof.created_at.desc())
            .limit(limit + 1)
            .offset(offset)
        )
        rows = result.all()
        has_more = len(rows) > limit
        rows = [r for r in rows[:limit] if r[1] is not None and r[2] is not None]

        believed = await self._believed_ids(viewer_id, [r[0].id for r in rows])
        items = [
            await self._build(proof, author, quest, proof.id in believed)
            for proof, author, quest in rows
        ]
        return ProofFeedPage(
            items=items, has_more=has_more, next_offset=offset + limit,
        )

    async def get_user_history(self, user_id: UUID) -> list[ProofDetails]:
        """A user's own proofs, newest first."""
        result = await self.db.execute(
            self._with_relations()
            .where(QuestProof.user_id == user_id)
            .order_by(QuestProof.created_at.desc())
        )
        return [
            await self._build(proof, author, quest, False)
            for proof, author, quest in result.all()
            if author is not None and quest is not None
        ]

    async def _believed_ids(
        self, viewer_id: UUID, proof_ids: list[UUID],
    ) -> set[UUID]:
        if not proof_ids:
            return set()
        result = await self.db.execute(
            select(Belief.proof_id)
            .where(Belief.user_id == viewer_id)
            .where(Belief.proof_id.in_(proof_ids))
        )
        return set(result.scalars().all())

    async def _build(
        self, proof: QuestProof, author: User, quest: Quest, is_believed: bool,
    ) -> ProofDetails:
        return ProofDetails(
            proof=proof,
            author=author,
            quest=quest,
            photo_urls=await self._resolve_urls(proof.photo_keys),
            voice_urls=await self._resolve_urls(proof.voice_keys),
            is_believed=is_believed,
        )

    async def _resolve_urls(self, keys: list[str] | None) -> list[str]:
        urls = []
        for key in keys or []:
            try:
                urls.append(
                    await self.storage.get_download_url(key, self.download_ttl_seconds)
                )
            except StorageError as e:
                logger.warning(f"Skipping attachment {key}: {e.message}")
        return urls
