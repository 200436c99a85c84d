"""
Shift lifecycle.

    open ──close──▶ closed ──cancel──▶ cancelled
      │                                  ▲
      └──────────────cancel──────────────┘
      └──delete (hard removal, open only)

Nothing leaves ``closed`` or ``cancelled``. Only ``open`` shifts may be
dragged, edited or repositioned.
"""
from __future__ import annotations
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any, Iterable, Optional
from typing_extensions import assert_never

from .errors import TransitionError

if TYPE_CHECKING:
    from .schema import Shift


class ShiftStatus(str, Enum):
    open = "open"
    closed = "closed"
    cancelled = "cancelled"


class ShiftAction(str, Enum):
    edit = "edit"
    move = "move"
    close = "close"
    cancel = "cancel"
    delete = "delete"


# fields the scheduling grid is allowed to change on an open shift
SCHEDULING_FIELDS = frozenset({
    "location_id",
    "employee_id",
    "role_id",
    "start_at",
    "end_at",
    "break_minutes",
    "hourly_wage",
    "notes",
})

_TARGETS = {
    ShiftStatus.open: frozenset({ShiftStatus.closed, ShiftStatus.cancelled}),
    ShiftStatus.closed: frozenset({ShiftStatus.cancelled}),
    ShiftStatus.cancelled: frozenset(),
}


def coerce_status(value: Any) -> ShiftStatus:
    # rows written before statuses existed have none; they are open
    if value is None:
        return ShiftStatus.open
    return ShiftStatus(value)


def mutable_fields(status: ShiftStatus) -> frozenset[str]:
    if status is ShiftStatus.open:
        return SCHEDULING_FIELDS
    elif status is ShiftStatus.closed:
        return frozenset()
    elif status is ShiftStatus.cancelled:
        # cancel_reason is written by the cancel transition itself, never edited
        return frozenset()
    else:
        assert_never(status)


def can_transition(current: ShiftStatus, target: ShiftStatus) -> bool:
    return target in _TARGETS[coerce_status(current)]


def ensure_transition(shift_id: Any, current: ShiftStatus, target: ShiftStatus) -> None:
    current = coerce_status(current)
    target = coerce_status(target)
    if target is ShiftStatus.closed:
        action = ShiftAction.close.value
    elif target is ShiftStatus.cancelled:
        action = ShiftAction.cancel.value
    elif target is ShiftStatus.open:
        action = "reopen"
    else:
        assert_never(target)
    if not can_transition(current, target):
        raise TransitionError(shift_id, current.value, action)


def ensure_fields_mutable(shift_id: Any, status: ShiftStatus, fields: Iterable[str]) -> None:
    status = coerce_status(status)
    frozen = sorted(set(fields) - mutable_fields(status))
    if frozen:
        raise TransitionError(shift_id, status.value, f"change {', '.join(frozen)}")


def ensure_editable(shift: "Shift", action: ShiftAction = ShiftAction.edit) -> None:
    """Guard for drag, inline edit and reposition."""
    status = coerce_status(shift.status)
    if status is not ShiftStatus.open:
        raise TransitionError(shift.id, status.value, action.value)


def ensure_deletable(shift: "Shift") -> None:
    status = coerce_status(shift.status)
    if status is not ShiftStatus.open:
        raise TransitionError(shift.id, status.value, ShiftAction.delete.value)


def close(shift: "Shift", *, at: Optional[datetime] = None) -> "Shift":
    ensure_transition(shift.id, shift.status, ShiftStatus.closed)
    return shift.model_copy(update={
        "status": ShiftStatus.closed,
        "closed_at": at or datetime.now(timezone.utc),
    })


def cancel(shift: "Shift", reason: Optional[str] = None, *, at: Optional[datetime] = None) -> "Shift":
    ensure_transition(shift.id, shift.status, ShiftStatus.cancelled)
    return shift.model_copy(update={
        "status": ShiftStatus.cancelled,
        "cancel_reason": reason,
        "cancelled_at": at or datetime.now(timezone.utc),
    })
