"""
Typed deletion confirmation.

Irreversible deletes require the caller to type an identifying field
of the target (document title, member name, account email). The typed
value must match exactly: no case folding and no trimming.
"""

from enum import Enum
from typing import Optional

from portal.core.exceptions import ConfirmationMismatchError


class ConfirmationState(str, Enum):
    IDLE = "IDLE"
    AWAITING_TYPED_CONFIRMATION = "AWAITING_TYPED_CONFIRMATION"
    EXECUTING = "EXECUTING"
    DONE = "DONE"


class DeletionConfirmation:
    """
    Small state machine guarding one delete.

    Usage:
        flow = DeletionConfirmation(expected=document.title, field="title")
        flow.submit(payload.title_confirmation)   # raises on mismatch
        db.delete(document)
        flow.complete()
    """

    def __init__(self, expected: str, field: str):
        self.expected = expected
        self.field = field
        self.state = ConfirmationState.IDLE

    def request(self) -> ConfirmationState:
        if self.state is ConfirmationState.IDLE:
            self.state = ConfirmationState.AWAITING_TYPED_CONFIRMATION
        return self.state

    def matches(self, provided: Optional[str]) -> bool:
        return bool(provided) and provided == self.expected

    def submit(self, provided: Optional[str]) -> ConfirmationState:
        """
        Check the typed value and move to EXECUTING on a match.

        Raises:
            ConfirmationMismatchError: value missing or not an exact match.
                The flow stays in AWAITING_TYPED_CONFIRMATION.
        """
        self.request()
        if self.state is not ConfirmationState.AWAITING_TYPED_CONFIRMATION:
            raise RuntimeError(f"Cannot submit confirmation in state {self.state.value}")
        if not self.matches(provided):
            raise ConfirmationMismatchError(field=self.field)
        self.state = ConfirmationState.EXECUTING
        return self.state

    def complete(self) -> ConfirmationState:
        if self.state is not ConfirmationState.EXECUTING:
            raise RuntimeError(f"Cannot complete confirmation in state {self.state.value}")
        self.state = ConfirmationState.DONE
        return self.state


def require_confirmation(expected: str, provided: Optional[str], field: str) -> DeletionConfirmation:
    """Run a confirmation to EXECUTING or raise ConfirmationMismatchError."""
    flow = DeletionConfirmation(expected=expected, field=field)
    flow.submit(provided)
    return flow
