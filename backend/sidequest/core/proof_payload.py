"""Proof Payload Rules — what a submission must carry before any IO happens.

Invariants:
    - A proof carries non-blank text, at least one photo, or at least one voice note
    - 0 <= photo_count <= MAX_PHOTOS, 0 <= voice_count <= MAX_VOICE_NOTES
    - Returned text is stripped; blank text becomes None
"""

from sidequest.core.errors import EmptyProofError, ErrorContext, ValidationFailureError

MAX_PHOTOS = 5
MAX_VOICE_NOTES = 3


def normalize_proof_payload(
    proof_text: str | None,
    photo_count: int,
    voice_count: int,
    context: ErrorContext | None = None,
) -> str | None:
    """Validate counts and emptiness; return the stripped text (or None)."""
    if not 0 <= photo_count <= MAX_PHOTOS:
        raise ValidationFailureError(
            f"photo_count must be between 0 and {MAX_PHOTOS}",
            field="photo_count", context=context,
        )
    if not 0 <= voice_count <= MAX_VOICE_NOTES:
        raise ValidationFailureError(
            f"voice_count must be between 0 and {MAX_VOICE_NOTES}",
            field="voice_count", context=context,
        )
    text = proof_text.strip() if proof_text else ""
    if not text and photo_count == 0 and voice_count == 0:
        raise EmptyProofError(context)
    return text or None
