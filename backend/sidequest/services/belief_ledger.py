"""Belief Ledger & Consensus Evaluator — one vote per user per proof, and auto-completion.

Invariants:
    - toggle_belief runs as ONE transaction: vote row, counter and completion
      commit together or not at all
    - belief_count is changed only by an in-SQL increment (belief_count + delta)
      and the RETURNING value is the authoritative new count
    - The author can never hold a belief on their own proof
    - Consensus is evaluated only when a belief is added (delta > 0)
    - Completion goes through QuestStatusService.complete_quest (idempotent):
      the (K+1)-th belief changes nothing

Design Decisions:
    - The proof row is locked (SELECT ... FOR UPDATE) before the existence
      check of the vote: same-user double clicks serialize, so the
      delete-vs-insert decision always sees the previous toggle's result
    - Quest and author are optional lookups: a vote on a proof whose quest or
      author vanished still counts, it just cannot complete anything
    - The voter is looked up before any write: an unknown X-User-Id is a 404,
      so the only IntegrityError left is a duplicate vote slipping past the
      lock, which becomes ConcurrencyError
"""

import logging
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import set_committed_value

from sidequest.core.consensus_policy import required_beliefs
from sidequest.core.domain_types import Complexity
from sidequest.core.errors import (
    ConcurrencyError, ErrorContext, ResourceNotFoundError, SelfBeliefError,
)
from sidequest.models.belief import Belief
from sidequest.models.quest import Quest
from sidequest.models.quest_proof import QuestProof
from sidequest.models.user import User
from sidequest.services.proof_submission import load_proof_for_update
from sidequest.services.quest_status import QuestStatusService

logger = logging.getLogger(__name__)


class BeliefLedger:
    """Toggles beliefs and drives community completion."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.statuses = QuestStatusService(db)

    async def toggle_belief(self, proof_id: UUID, user_id: UUID) -> bool:
        """Add the user's belief if absent, remove it if present. Returns the new state."""
        ctx = ErrorContext(user_id=str(user_id), proof_id=str(proof_id))
        try:
            proof = await load_proof_for_update(self.db, proof_id)
            if proof is None:
                raise ResourceNotFoundError("QuestProof", str(proof_id), ctx)
            if proof.user_id == user_id:
                raise SelfBeliefError(ctx)
            if await self.db.get(User, user_id) is None:
                raise ResourceNotFoundError("User", str(user_id), ctx)

            existing = await self._find_belief(proof_id, user_id)
            if existing is not None:
                await self.db.delete(existing)
                delta = -1
            else:
                self.db.add(Belief(user_id=user_id, proof_id=proof_id))
                delta = 1
            await self.db.flush()

            new_count = await self._apply_delta(proof, delta)
            if delta > 0:
                await self._evaluate_consensus(proof, new_count)
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(
                f"Belief toggle lost a race: {e}",
                extra={"user_id": user_id, "proof_id": proof_id},
            )
            raise ConcurrencyError(
                "Belief was changed concurrently, try again", ctx,
            ) from e
        except Exception:
            await self.db.rollback()
            raise

        return delta > 0

    async def is_believed_by(self, proof_id: UUID, user_id: UUID) -> bool:
        return await self._find_belief(proof_id, user_id) is not None

    async def count_beliefs(self, proof_id: UUID) -> int:
        """Live count of belief rows — the value belief_count must always equal."""
        result = await self.db.execute(
            select(func.count()).select_from(Belief).where(Belief.proof_id == proof_id)
        )
        return result.scalar_one()

    async def _find_belief(self, proof_id: UUID, user_id: UUID) -> Belief | None:
        result = await self.db.execute(
            select(Belief)
            .where(Belief.user_id == user_id)
            .where(Belief.proof_id == proof_id)
        )
        return result.scalar_one_or_none()

    async def _apply_delta(self, proof: QuestProof, delta: int) -> int:
        result = await self.db.execute(
            update(QuestProof)
            .where(QuestProof.id == proof.id)
            .values(belief_count=QuestProof.belief_count + delta)
            .returning(QuestProof.belief_count)
            .execution_options(synchronize_session=False)
        )
        new_count = result.scalar_one()
        set_committed_value(proof, "belief_count", new_count)
        return new_count

    async def _evaluate_consensus(self, proof: QuestProof, belief_count: int) -> None:
        quest = await self.db.get(Quest, proof.quest_id)
        author = await self.db.get(User, proof.user_id)
        if quest is None or author is None:
            logger.warning(
                "Consensus skipped: quest or author missing",
                extra={"proof_id": proof.id, "quest_id": proof.quest_id},
            )
            return

        required = required_beliefs(Complexity(quest.complexity), author.level)
        if belief_count < required:
            return

        logger.info(
            "Belief consensus reached",
            extra={
                "proof_id": proof.id,
                "quest_id": quest.id,
                "user_id": author.id,
                "belief_count": belief_count,
                "required_beliefs": required,
            },
        )
        await self.statuses.complete_quest(
            proof.user_id, proof.quest_id, proof.assigned_date, missing_ok=True,
        )
