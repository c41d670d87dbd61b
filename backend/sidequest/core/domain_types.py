"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - UserId, QuestId, ProofId wrap UUIDs — never use bare UUID in domain logic
    - All valid states encoded as Enums — no raw string matching
    - Complexity members are declared in ascending difficulty order

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON and to String DB columns without custom encoders
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", UUID)
QuestId = NewType("QuestId", UUID)
ProofId = NewType("ProofId", UUID)


# ─── Enums ───────────────────────────────────────────────────────

class Complexity(str, Enum):
    """Quest difficulty tier — drives reward and consensus threshold."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @property
    def rank(self) -> int:
        return _COMPLEXITY_ORDER.index(self)


_COMPLEXITY_ORDER = (Complexity.EASY, Complexity.MEDIUM, Complexity.HARD)


class ProofStatus(str, Enum):
    """Proof lifecycle states — maps to quest_proofs.status."""
    UPLOADING = "uploading"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class QuestStatus(str, Enum):
    """Per-user, per-day quest progress — maps to user_quest_status.quest_status."""
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    IN_PENDING = "in_pending"
    COMPLETED = "completed"
    FAILED = "failed"


class MediaKind(str, Enum):
    """Kind of file attached to a proof — decides folder, prefix and content type."""
    PHOTO = "photo"
    VOICE = "voice"

    @property
    def folder(self) -> str:
        return "photos" if self is MediaKind.PHOTO else "audio"

    @property
    def extension(self) -> str:
        return "jpg" if self is MediaKind.PHOTO else "ogg"

    @property
    def content_type(self) -> str:
        return "image/jpeg" if self is MediaKind.PHOTO else "audio/ogg"
