"""Proof Routes — confirm, belief toggle, moderation, details, feed and history.

Invariants:
    - The caller is identified by the X-User-Id header (api/deps.py)
    - /feed and /history are declared before /{proof_id} so they are never
      parsed as a proof id
    - Download URLs are resolved per request, never cached in responses

Design Decisions:
    - Submission starts under /quests/{quest_id}/proofs (see quests.py): the
      quest is the parent resource of a new proof
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from sidequest.api.deps import get_current_user_id
from sidequest.config import get_settings
from sidequest.core.domain_types import ProofStatus
from sidequest.core.repository_protocols import FileStorage
from sidequest.infrastructure.database import get_db
from sidequest.infrastructure.file_storage import get_storage
from sidequest.schemas.proof import (
    BeliefResponse, ProofDetailsResponse, ProofFeedResponse,
    ProofModeration, ProofStatusResponse,
)
from sidequest.services.belief_ledger import BeliefLedger
from sidequest.services.proof_queries import ProofDetails, ProofQueryService
from sidequest.services.proof_submission import ProofSubmissionService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/proofs", tags=["proofs"])


def _query_service(db: AsyncSession, storage: FileStorage) -> ProofQueryService:
    return ProofQueryService(
        db, storage, download_ttl_seconds=get_settings().download_url_ttl_seconds,
    )


def _submission_service(
    db: AsyncSession, storage: FileStorage,
) -> ProofSubmissionService:
    return ProofSubmissionService(
        db, storage, upload_ttl_seconds=get_settings().upload_url_ttl_seconds,
    )


# ─── Collections ──────────────────────────────────────────────────


@router.get("/feed", response_model=ProofFeedResponse)
async def get_feed(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
):
    """Other users' proofs, newest first."""
    page = await _query_service(db, storage).get_feed(user_id, limit, offset)
    return ProofFeedResponse(
        items=[_to_details_response(d) for d in page.items],
        has_more=page.has_more,
        next_offset=page.next_offset,
    )


@router.get("/history", response_model=list[ProofDetailsResponse])
async def get_history(
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
):
    """The caller's own proofs, newest first."""
    history = await _query_service(db, storage).get_user_history(user_id)
    return [_to_details_response(d) for d in history]


# ─── Single proof ─────────────────────────────────────────────────


@router.get("/{proof_id}", response_model=ProofDetailsResponse)
async def get_proof(
    proof_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
):
    details = await _query_service(db, storage).get_proof_details(proof_id, user_id)
    return _to_details_response(details)


@router.post("/{proof_id}/confirm", response_model=ProofStatusResponse)
async def confirm_proof(
    proof_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
):
    """Client finished uploading attachments."""
    proof = await _submission_service(db, storage).confirm_submission(proof_id)
    return ProofStatusResponse(proof_id=proof.id, status=proof.status)


@router.post("/{proof_id}/belief", response_model=BeliefResponse)
async def toggle_belief(
    proof_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    believed = await BeliefLedger(db).toggle_belief(proof_id, user_id)
    return BeliefResponse(believed=believed)


@router.patch("/{proof_id}/status", response_model=ProofStatusResponse)
async def moderate_proof(
    proof_id: UUID,
    body: ProofModeration,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
):
    """Moderator approves or rejects a pending proof."""
    proof = await _submission_service(db, storage).update_status(
        proof_id, ProofStatus(body.status),
    )
    logger.info(
        f"Moderation by {user_id}: {body.status}", extra={"proof_id": proof_id},
    )
    return ProofStatusResponse(proof_id=proof.id, status=proof.status)


# ─── Response mapping ─────────────────────────────────────────────


def _to_details_response(details: ProofDetails) -> ProofDetailsResponse:
    proof, author, quest = details.proof, details.author, details.quest
    return ProofDetailsResponse(
        proof_id=proof.id,
        user_id=author.id,
        username=author.username,
        avatar_url=author.avatar_url,
        quest_id=quest.id,
        quest_title=quest.title,
        quest_description=quest.description,
        xp_reward=quest.xp_reward,
        proof_text=proof.proof_text,
        status=proof.status,
        photo_urls=details.photo_urls,
        voice_urls=details.voice_urls,
        belief_count=proof.belief_count,
        is_believed=details.is_believed,
        created_at=proof.created_at,
    )
