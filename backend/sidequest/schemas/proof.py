"""Proof Schemas — submission, moderation, belief and proof views.

Invariants:
    - photo_count 0-5, voice_count 0-3 (re-checked in core/proof_payload.py)
    - proof_text stripped; the empty-payload rule lives in core, not here
    - Upload URLs appear only in ProofSubmitResponse
"""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from sidequest.core.proof_payload import MAX_PHOTOS, MAX_VOICE_NOTES


class ProofSubmitRequest(BaseModel):
    proof_text: str | None = Field(None, max_length=5000)
    photo_count: int = Field(0, ge=0, le=MAX_PHOTOS)
    voice_count: int = Field(0, ge=0, le=MAX_VOICE_NOTES)

    @field_validator("proof_text")
    @classmethod
    def strip_text(cls, v: str | None) -> str | None:
        return v.strip() if v is not None else None


class ProofSubmitResponse(BaseModel):
    proof_id: UUID
    status: str
    photo_upload_urls: list[str]
    voice_upload_urls: list[str]


class ProofStatusResponse(BaseModel):
    proof_id: UUID
    status: str


class ProofModeration(BaseModel):
    """Moderator verdict on a pending proof."""
    status: Literal["approved", "rejected"]


class BeliefResponse(BaseModel):
    believed: bool


class ProofDetailsResponse(BaseModel):
    proof_id: UUID
    user_id: UUID
    username: str
    avatar_url: str | None
    quest_id: UUID
    quest_title: str
    quest_description: str | None
    xp_reward: int
    proof_text: str | None
    status: str
    photo_urls: list[str]
    voice_urls: list[str]
    belief_count: int
    is_believed: bool
    created_at: datetime


class ProofFeedResponse(BaseModel):
    items: list[ProofDetailsResponse]
    has_more: bool
    next_offset: int
