"""Proof Storage Keys — deterministic object keys for proof attachments.

Invariants:
    - Key format: users/{user_id}/proofs/{proof_id}/{photos|audio}/{photo|voice}_{index}.{jpg|ogg}
    - Only keys are persisted; URLs are derived on demand and never stored
"""

from uuid import UUID

from sidequest.core.domain_types import MediaKind


def build_proof_key(
    user_id: UUID, proof_id: UUID, index: int, kind: MediaKind,
) -> str:
    return (
        f"users/{user_id}/proofs/{proof_id}/{kind.folder}/"
        f"{kind.value}_{index}.{kind.extension}"
    )


def build_proof_keys(
    user_id: UUID, proof_id: UUID, count: int, kind: MediaKind,
) -> list[str]:
    return [build_proof_key(user_id, proof_id, i, kind) for i in range(count)]
