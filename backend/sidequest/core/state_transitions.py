"""State Transitions — explicit tables for proof and quest-status lifecycles.

Invariants:
    - A transition is legal only if listed in its table — no free-form assignment
    - COMPLETED and FAILED quest statuses have no exits (monotonic completion)
    - APPROVED and REJECTED proofs have no exits
    - Staying in the same state is never a transition (callers treat it as a no-op)
    - Only pending review and completion are ever written; in_progress and
      failed rows come from outside this service and are never a target here

Design Decisions:
    - frozenset per source state: O(1) membership, immutable at import time
    - check_* raises, can_* answers: enforcement paths raise, opportunistic
      paths (confirm advancing a day's status) ask first and skip
"""

from sidequest.core.domain_types import ProofStatus, QuestStatus
from sidequest.core.errors import InvalidTransitionError


PROOF_TRANSITIONS: dict[ProofStatus, frozenset[ProofStatus]] = {
    ProofStatus.UPLOADING: frozenset({ProofStatus.PENDING}),
    ProofStatus.PENDING: frozenset({ProofStatus.APPROVED, ProofStatus.REJECTED}),
    ProofStatus.APPROVED: frozenset(),
    ProofStatus.REJECTED: frozenset(),
}

QUEST_STATUS_TRANSITIONS: dict[QuestStatus, frozenset[QuestStatus]] = {
    QuestStatus.NOT_STARTED: frozenset({QuestStatus.IN_PENDING, QuestStatus.COMPLETED}),
    QuestStatus.IN_PROGRESS: frozenset({QuestStatus.IN_PENDING, QuestStatus.COMPLETED}),
    QuestStatus.IN_PENDING: frozenset({QuestStatus.COMPLETED}),
    QuestStatus.COMPLETED: frozenset(),
    QuestStatus.FAILED: frozenset(),
}


def can_transition_proof(current: ProofStatus, target: ProofStatus) -> bool:
    return target in PROOF_TRANSITIONS[current]


def check_proof_transition(current: ProofStatus, target: ProofStatus) -> None:
    """Raise InvalidTransitionError unless current -> target is in the table."""
    if not can_transition_proof(current, target):
        raise InvalidTransitionError("Proof", current.value, target.value)


def can_transition_quest_status(current: QuestStatus, target: QuestStatus) -> bool:
    return target in QUEST_STATUS_TRANSITIONS[current]


def check_quest_status_transition(current: QuestStatus, target: QuestStatus) -> None:
    """Raise InvalidTransitionError unless current -> target is in the table."""
    if not can_transition_quest_status(current, target):
        raise InvalidTransitionError("Quest status", current.value, target.value)
