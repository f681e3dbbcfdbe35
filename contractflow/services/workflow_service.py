# =====================================================
# FILE: contractflow/services/workflow_service.py
# Contract Status Workflow
# =====================================================

from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, TypeVar, Union
import logging

from contractflow.core.exceptions import InvalidTransitionError, ValidationError

logger = logging.getLogger(__name__)


class ContractStatus(str, Enum):
    CREATED = "created"
    APPROVED = "approved"
    SENT = "sent"
    SIGNED = "signed"
    LOCKED = "locked"
    REVOKED = "revoked"


# Valid status transitions, one hop at a time
STATUS_TRANSITIONS: Dict[ContractStatus, FrozenSet[ContractStatus]] = {
    ContractStatus.CREATED: frozenset({ContractStatus.APPROVED, ContractStatus.REVOKED}),
    ContractStatus.APPROVED: frozenset({ContractStatus.SENT, ContractStatus.REVOKED}),
    ContractStatus.SENT: frozenset({ContractStatus.SIGNED, ContractStatus.REVOKED}),
    ContractStatus.SIGNED: frozenset({ContractStatus.LOCKED}),
    ContractStatus.LOCKED: frozenset(),
    ContractStatus.REVOKED: frozenset(),
}

# Display order of the transition menu
_STATUS_ORDER = list(ContractStatus)

READ_ONLY_STATUSES = frozenset({ContractStatus.LOCKED, ContractStatus.REVOKED})

STATUS_LABELS: Dict[ContractStatus, str] = {
    ContractStatus.CREATED: "Created",
    ContractStatus.APPROVED: "Approved",
    ContractStatus.SENT: "Sent",
    ContractStatus.SIGNED: "Signed",
    ContractStatus.LOCKED: "Locked",
    ContractStatus.REVOKED: "Revoked",
}

# Badge variant used by the UI for each status
STATUS_BADGES: Dict[ContractStatus, str] = {
    ContractStatus.CREATED: "default",
    ContractStatus.APPROVED: "info",
    ContractStatus.SENT: "warning",
    ContractStatus.SIGNED: "success",
    ContractStatus.LOCKED: "success",
    ContractStatus.REVOKED: "danger",
}

# Dashboard filter buckets
STATUS_GROUPS: Dict[str, FrozenSet[ContractStatus]] = {
    "all": frozenset(ContractStatus),
    "active": frozenset({ContractStatus.CREATED, ContractStatus.APPROVED}),
    "pending": frozenset({ContractStatus.SENT}),
    "signed": frozenset({ContractStatus.SIGNED, ContractStatus.LOCKED}),
}


StatusLike = Union[ContractStatus, str]
T = TypeVar("T")


def parse_status(value: StatusLike) -> ContractStatus:
    """Coerce a raw status string, rejecting unknown values"""
    try:
        return ContractStatus(value)
    except ValueError:
        raise ValidationError(f"Unknown contract status: {value}")


def available_transitions(current: StatusLike) -> List[ContractStatus]:
    allowed = STATUS_TRANSITIONS[parse_status(current)]
    return [s for s in _STATUS_ORDER if s in allowed]


def can_transition(current: StatusLike, requested: StatusLike) -> bool:
    """Check if status transition is valid"""
    return parse_status(requested) in STATUS_TRANSITIONS[parse_status(current)]


def transition(current: StatusLike, requested: StatusLike) -> ContractStatus:
    """
    Validate a single status change.

    Returns the new status when `requested` is an allowed next state of
    `current`; raises InvalidTransitionError otherwise. Performs no I/O,
    the caller persists the result.
    """
    current_status = parse_status(current)
    requested_status = parse_status(requested)

    if requested_status not in STATUS_TRANSITIONS[current_status]:
        logger.debug(f"Rejected transition {current_status.value} -> {requested_status.value}")
        raise InvalidTransitionError(current_status.value, requested_status.value)

    return requested_status


def is_terminal(status: StatusLike) -> bool:
    return not STATUS_TRANSITIONS[parse_status(status)]


def is_editable(status: StatusLike) -> bool:
    """Field values may change only outside locked/revoked"""
    return parse_status(status) not in READ_ONLY_STATUSES


def statuses_in_group(group: str) -> FrozenSet[ContractStatus]:
    if group not in STATUS_GROUPS:
        raise ValidationError(
            f"Unknown status group '{group}', expected one of: {', '.join(STATUS_GROUPS)}"
        )
    return STATUS_GROUPS[group]


def filter_by_group(items: Iterable[T], group: str, key=lambda item: item.status) -> List[T]:
    """Keep the items whose status belongs to the given group"""
    statuses = statuses_in_group(group)
    return [item for item in items if parse_status(key(item)) in statuses]


def count_by_group(items: Iterable[T], key=lambda item: item.status) -> Dict[str, int]:
    items = list(items)
    return {
        group: sum(1 for item in items if parse_status(key(item)) in statuses)
        for group, statuses in STATUS_GROUPS.items()
    }
