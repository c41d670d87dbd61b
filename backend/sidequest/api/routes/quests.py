"""Quest Routes — catalog, daily assignment, journal, explicit completion, proof start.

Invariants:
    - The caller is identified by the X-User-Id header (api/deps.py)
    - ?date= defaults to today in UTC
    - Upload URLs are returned once, in the 201 response of proof submission
"""

import logging
from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from sidequest.api.deps import get_current_user_id
from sidequest.config import get_settings
from sidequest.core.calendar import utc_today
from sidequest.core.domain_types import Complexity
from sidequest.core.repository_protocols import FileStorage
from sidequest.infrastructure.database import get_db
from sidequest.infrastructure.file_storage import get_storage
from sidequest.models.quest import Quest
from sidequest.models.user_quest_status import UserQuestStatus
from sidequest.schemas.proof import ProofSubmitRequest, ProofSubmitResponse
from sidequest.schemas.quest import (
    DailyQuestsResponse, QuestResponse, QuestSeed, QuestStatusResponse,
)
from sidequest.services.daily_assignment import DailyAssignmentService
from sidequest.services.proof_submission import ProofSubmissionService
from sidequest.services.quest_catalog import QuestCatalogService
from sidequest.services.quest_status import QuestStatusService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/quests", tags=["quests"])


# ─── Catalog ──────────────────────────────────────────────────────


@router.get("", response_model=list[QuestResponse])
async def list_quests(
    complexity: Complexity | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    return await QuestCatalogService(db).list_quests(complexity)


@router.post("", response_model=QuestResponse, status_code=status.HTTP_201_CREATED)
async def create_quest(
    body: QuestSeed,
    db: AsyncSession = Depends(get_db),
):
    return await QuestCatalogService(db).create_quest(body)


# ─── Per-user day ─────────────────────────────────────────────────


@router.get("/daily", response_model=DailyQuestsResponse)
async def get_daily_quests(
    day: date | None = Query(None, alias="date"),
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Today's (or the given day's) five quests, assigned on first call."""
    day = day or utc_today()
    pairs = await DailyAssignmentService(db).get_or_assign(user_id, day)
    return DailyQuestsResponse(
        date=day,
        quests=[_to_status_response(row, quest) for quest, row in pairs],
    )


@router.get("/journal", response_model=list[QuestStatusResponse])
async def get_journal(
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    journal = await QuestStatusService(db).get_user_journal(user_id)
    return [_to_status_response(row, quest) for row, quest in journal]


@router.post("/{quest_id}/complete", response_model=QuestStatusResponse)
async def complete_quest(
    quest_id: UUID,
    day: date | None = Query(None, alias="date"),
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Explicit completion — 400 if the quest is already completed."""
    service = QuestStatusService(db)
    row = await service.finish_quest(user_id, quest_id, day or utc_today())
    quest = await db.get(Quest, quest_id)
    return _to_status_response(row, quest)


@router.post(
    "/{quest_id}/proofs",
    response_model=ProofSubmitResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_proof(
    quest_id: UUID,
    body: ProofSubmitRequest,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
):
    """Start a proof: returns the proof id and one-time upload URLs."""
    service = ProofSubmissionService(
        db, storage, upload_ttl_seconds=get_settings().upload_url_ttl_seconds,
    )
    ticket = await service.init_submission(
        user_id, quest_id, body.proof_text, body.photo_count, body.voice_count,
    )
    return ProofSubmitResponse(
        proof_id=ticket.proof.id,
        status=ticket.proof.status,
        photo_upload_urls=ticket.photo_upload_urls,
        voice_upload_urls=ticket.voice_upload_urls,
    )


# ─── Response mapping ─────────────────────────────────────────────


def _to_status_response(row: UserQuestStatus, quest: Quest) -> QuestStatusResponse:
    return QuestStatusResponse(
        user_id=row.user_id,
        quest=QuestResponse.model_validate(quest),
        assigned_date=row.assigned_date,
        status=row.quest_status,
        current_value=row.current_value,
        is_completed=row.is_completed,
        completed_at=row.updated_at if row.is_completed else None,
    )
