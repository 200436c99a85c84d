from __future__ import annotations
from typing import Any


class SchedulingError(Exception):
    """Base class for errors raised synchronously by the scheduling engine."""


class ShiftValidationError(SchedulingError, ValueError):
    """A shift edit was rejected before anything was applied or queued."""


class TransitionError(SchedulingError):
    """An action is not legal for the shift's current lifecycle status."""

    def __init__(self, shift_id: Any, status: str, action: str):
        self.shift_id = shift_id
        self.status = status
        self.action = action
        super().__init__(f"shift {shift_id} is {status}; cannot {action}")
