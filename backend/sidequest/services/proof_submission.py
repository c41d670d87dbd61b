"""Proof Submission Workflow — two-phase proof creation and moderation.

Invariants:
    - init_submission signs every upload URL BEFORE opening a DB transaction;
      a StorageError leaves no proof row behind
    - Only storage keys are persisted; upload URLs are returned once, never stored
    - Proof status moves only along core/state_transitions.PROOF_TRANSITIONS
    - confirm_submission is idempotent: a proof no longer in "uploading" is
      returned unchanged
    - Approval completes the quest through QuestStatusService.complete_quest,
      inside the same transaction as the proof update

Design Decisions:
    - proof_id generated in the app, not by the DB: keys embed it before the row exists
    - assigned_date pinned at init: confirm/approve after midnight still target
      the day the proof was started for
    - Proof rows are read with FOR UPDATE: confirm and moderation serialize
      with concurrent belief toggles on the same row
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sidequest.core.calendar import utc_now, utc_today
from sidequest.core.domain_types import MediaKind, ProofStatus, QuestStatus
from sidequest.core.errors import ErrorContext, ResourceNotFoundError
from sidequest.core.proof_keys import build_proof_keys
from sidequest.core.proof_payload import normalize_proof_payload
from sidequest.core.repository_protocols import FileStorage
from sidequest.core.state_transitions import check_proof_transition
from sidequest.models.quest import Quest
from sidequest.models.quest_proof import QuestProof
from sidequest.services.quest_status import QuestStatusService

logger = logging.getLogger(__name__)


@dataclass
class SubmissionTicket:
    """Result of init_submission — the new proof plus one-time upload URLs."""
    proof: QuestProof
    photo_upload_urls: list[str] = field(default_factory=list)
    voice_upload_urls: list[str] = field(default_factory=list)


async def load_proof_for_update(db: AsyncSession, proof_id: UUID) -> QuestProof | None:
    """Read a proof with a row lock; refreshes any stale copy in the identity map."""
    result = await db.execute(
        select(QuestProof)
        .where(QuestProof.id == proof_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


class ProofSubmissionService:
    """init → confirm → approve/reject."""

    def __init__(
        self, db: AsyncSession, storage: FileStorage, upload_ttl_seconds: int = 3600,
    ):
        self.db = db
        self.storage = storage
        self.upload_ttl_seconds = upload_ttl_seconds
        self.statuses = QuestStatusService(db)

    async def init_submission(
        self,
        user_id: UUID,
        quest_id: UUID,
        proof_text: str | None,
        photo_count: int = 0,
        voice_count: int = 0,
        assigned_date: date | None = None,
    ) -> SubmissionTicket:
        ctx = ErrorContext(user_id=str(user_id), quest_id=str(quest_id))
        text = normalize_proof_payload(proof_text, photo_count, voice_count, ctx)

        proof_id = uuid.uuid4()
        photo_keys = build_proof_keys(user_id, proof_id, photo_count, MediaKind.PHOTO)
        voice_keys = build_proof_keys(user_id, proof_id, voice_count, MediaKind.VOICE)

        # Storage calls happen before any transaction is opened
        photo_urls = await self._sign_uploads(photo_keys, MediaKind.PHOTO)
        voice_urls = await self._sign_uploads(voice_keys, MediaKind.VOICE)

        try:
            if await self.db.get(Quest, quest_id) is None:
                raise ResourceNotFoundError("Quest", str(quest_id), ctx)
            proof = QuestProof(
                id=proof_id,
                user_id=user_id,
                quest_id=quest_id,
                assigned_date=assigned_date or utc_today(),
                proof_text=text,
                photo_keys=photo_keys,
                voice_keys=voice_keys,
                status=ProofStatus.UPLOADING.value,
                belief_count=0,
            )
            self.db.add(proof)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(
            f"Proof submission started with {photo_count} photo(s), {voice_count} voice note(s)",
            extra={"user_id": user_id, "quest_id": quest_id, "proof_id": proof_id},
        )
        return SubmissionTicket(
            proof=proof, photo_upload_urls=photo_urls, voice_upload_urls=voice_urls,
        )

    async def confirm_submission(self, proof_id: UUID) -> QuestProof:
        """Uploads finished: uploading → pending, day status → in_pending."""
        try:
            proof = await load_proof_for_update(self.db, proof_id)
            if proof is None:
                raise ResourceNotFoundError(
                    "QuestProof", str(proof_id), ErrorContext(proof_id=str(proof_id)),
                )
            current = ProofStatus(proof.status)
            if current is not ProofStatus.UPLOADING:
                logger.info(
                    f"Proof already confirmed (status={current.value}), nothing to do",
                    extra={"proof_id": proof_id},
                )
                await self.db.commit()
                return proof

            check_proof_transition(current, ProofStatus.PENDING)
            proof.status = ProofStatus.PENDING.value
            proof.updated_at = utc_now()
            await self.statuses.advance_status(
                proof.user_id, proof.quest_id, proof.assigned_date,
                QuestStatus.IN_PENDING,
            )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info("Proof confirmed", extra={"proof_id": proof_id})
        return proof

    async def update_status(
        self, proof_id: UUID, new_status: ProofStatus,
    ) -> QuestProof:
        """Moderation: pending → approved | rejected. Approval completes the quest."""
        ctx = ErrorContext(proof_id=str(proof_id))
        try:
            proof = await load_proof_for_update(self.db, proof_id)
            if proof is None:
                raise ResourceNotFoundError("QuestProof", str(proof_id), ctx)
            check_proof_transition(ProofStatus(proof.status), new_status)
            proof.status = new_status.value
            proof.updated_at = utc_now()
            if new_status is ProofStatus.APPROVED:
                await self.statuses.complete_quest(
                    proof.user_id, proof.quest_id, proof.assigned_date,
                    missing_ok=True,
                )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(
            f"Proof moderated: {new_status.value}",
            extra={"proof_id": proof_id, "user_id": proof.user_id},
        )
        return proof

    async def _sign_uploads(self, keys: list[str], kind: MediaKind) -> list[str]:
        return [
            await self.storage.get_upload_url(
                key, kind.content_type, self.upload_ttl_seconds,
            )
            for key in keys
        ]
