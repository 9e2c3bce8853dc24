"""
Land record status transitions.

All status changes go through ``transition``. It is pure: given the current
status, the requested action and the facts the action depends on, it returns
the target status and the side effects the caller must carry out, or raises
InvalidStateError. Persisting the change is the caller's job (see
services/transfers.py), always with a conditional update on the status
returned here as ``from_status``.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from landchain.core.exceptions import InvalidStateError
from landchain.models.land_record import RecordStatus, TransferStatus


class Action(str, Enum):
    REGISTER = "register"
    VERIFY = "verify"
    REJECT_RECORD = "reject_record"
    REQUEST_TRANSFER = "request_transfer"
    APPROVE_TRANSFER = "approve_transfer"
    REJECT_TRANSFER = "reject_transfer"


class SideEffect(str, Enum):
    ADD_HOLDING = "add_holding"
    NOTIFY_ADMIN = "notify_admin"
    RECORD_ON_CHAIN = "record_on_chain"
    APPEND_PREVIOUS_OWNER = "append_previous_owner"
    MOVE_HOLDING = "move_holding"


@dataclass(frozen=True)
class Transition:
    action: Action
    from_status: Optional[RecordStatus]
    to_status: RecordStatus
    side_effects: tuple = ()

    @property
    def is_noop(self) -> bool:
        return self.from_status == self.to_status and not self.side_effects


# action -> (allowed source statuses, target status, side effects, refusal message)
_RULES = {
    Action.VERIFY: (
        {RecordStatus.PENDING, RecordStatus.VERIFIED, RecordStatus.REJECTED},
        RecordStatus.VERIFIED,
        (),
        "Record has a transfer pending; approve or reject it first",
    ),
    Action.REJECT_RECORD: (
        {RecordStatus.PENDING},
        RecordStatus.REJECTED,
        (),
        "Only pending records can be rejected",
    ),
    Action.REQUEST_TRANSFER: (
        {RecordStatus.VERIFIED},
        RecordStatus.PENDING_TRANSFER,
        (SideEffect.NOTIFY_ADMIN,),
        "Only verified records can be transferred",
    ),
    Action.APPROVE_TRANSFER: (
        {RecordStatus.PENDING_TRANSFER},
        RecordStatus.VERIFIED,
        (SideEffect.RECORD_ON_CHAIN, SideEffect.APPEND_PREVIOUS_OWNER, SideEffect.MOVE_HOLDING),
        "Record is not in pending transfer state",
    ),
    Action.REJECT_TRANSFER: (
        {RecordStatus.PENDING_TRANSFER},
        RecordStatus.VERIFIED,
        (),
        "Record is not in pending transfer state",
    ),
}


def transition(
    current: Optional[RecordStatus],
    action: Action,
    transfer_request: Optional[dict] = None,
) -> Transition:
    """
    Resolve a status change.

    Args:
        current: Current record status, or None for a record that does not exist yet
        action: Requested workflow action
        transfer_request: The record's stored transfer request, if any

    Returns:
        Transition describing the target status and required side effects.

    Raises:
        InvalidStateError: the action is not permitted from ``current``.
    """
    if current is not None:
        current = RecordStatus(current)

    if action is Action.REGISTER:
        if current is not None:
            raise InvalidStateError("Record is already registered")
        return Transition(action, None, RecordStatus.PENDING, (SideEffect.ADD_HOLDING,))

    if current is None:
        raise InvalidStateError(f"Cannot {action.value.replace('_', ' ')} an unregistered record")

    try:
        allowed, target, effects, refusal = _RULES[action]
    except KeyError:
        raise ValueError(f"Unknown action: {action}")

    if current not in allowed:
        raise InvalidStateError(refusal)

    request = transfer_request or {}
    if action is Action.REQUEST_TRANSFER and request.get("status") == TransferStatus.PENDING.value:
        raise InvalidStateError("A transfer request is already pending for this record")
    if action is Action.APPROVE_TRANSFER and not request.get("new_owner_address"):
        raise InvalidStateError("Transfer request information is missing")

    return Transition(action, current, target, effects)
