"""
Land record workflow: registration, verification and ownership transfer.

Each operation reads the record, asks ``workflow.transition`` whether the
action is allowed, then persists the result with a conditional update keyed
on the status it read. If another writer got there first the update matches
no rows and the operation fails with ConflictError before any side effect
runs.

Side effects on the wallet holdings index (after an approval) and on the
admin notification feed are best-effort: failures are logged, the record
change stands.
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from landchain.core.config import settings
from landchain.core.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidStateError,
    UpstreamError,
    ValidationError,
)
from landchain.models.land_record import LandRecord, RecordStatus, TransferStatus
from landchain.services import notifications, records
from landchain.services.chain import ChainClient, ChainError, is_chain_address, synthesize_tx_hash
from landchain.services.workflow import Action, SideEffect, Transition, transition
from landchain.utils.geo import valid_coordinates

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = (
    "survey_number",
    "owner_name",
    "owner_address",
    "owner_phone",
    "latitude",
    "longitude",
    "area",
    "value",
)

DEFAULT_DEED_IMAGE = "default-deed.jpg"


@dataclass
class TransferOutcome:
    """Result of an approved transfer."""
    record: LandRecord
    transaction_hash: Optional[str]
    on_chain: bool
    warning: Optional[str] = None


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _parse_number(data: dict, field: str) -> float:
    raw = data.get(field)
    if isinstance(raw, bool):
        raise ValidationError(f"{field} must be a number")
    try:
        number = float(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a number")
    if math.isnan(number) or math.isinf(number):
        raise ValidationError(f"{field} must be a finite number")
    return number


def _check_address(address: str, validate: Optional[bool], message: str) -> None:
    if validate is None:
        validate = settings.VALIDATE_CHAIN_ADDRESSES
    if validate and not is_chain_address(address):
        raise ValidationError(message)


def _apply(db: Session, record: LandRecord, change: Transition, values: dict) -> None:
    """Persist a transition, guarded on the status and row version it was computed from."""
    record_id = record.id
    values = dict(values, status=change.to_status.value)
    matched = records.conditional_update(
        db, record_id, change.from_status.value, values, expected_version=record.version
    )
    if matched == 0:
        raise ConflictError("Land record changed concurrently; reload and retry")
    logger.info(
        f"Record {record_id} status changed from {change.from_status.value} "
        f"to {change.to_status.value} ({change.action.value})"
    )


# =============================================================================
# Registration and verification
# =============================================================================

def register_land_record(db: Session, data: dict, validate_address: Optional[bool] = None) -> LandRecord:
    """
    Register a new land record in Pending status.

    Args:
        db: Database session
        data: Registration fields (see REQUIRED_FIELDS; deed_image and description optional)
        validate_address: Override VALIDATE_CHAIN_ADDRESSES

    Raises:
        ValidationError: missing or malformed field
        ConflictError: survey number already registered
    """
    missing = [f for f in REQUIRED_FIELDS if data.get(f) is None or str(data.get(f)).strip() == ""]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    area = _parse_number(data, "area")
    value = _parse_number(data, "value")
    latitude = _parse_number(data, "latitude")
    longitude = _parse_number(data, "longitude")

    if area <= 0:
        raise ValidationError("area must be greater than 0")
    if value < 0:
        raise ValidationError("value must not be negative")
    if not valid_coordinates(latitude, longitude):
        raise ValidationError("latitude/longitude out of range")

    owner_address = str(data["owner_address"]).strip()
    _check_address(owner_address, validate_address, "Invalid Ethereum wallet address format")

    change = transition(None, Action.REGISTER)

    survey_number = str(data["survey_number"]).strip()
    if records.get_record_by_survey_number(db, survey_number):
        raise ConflictError("Survey number already exists")

    try:
        record = records.insert_record(
            db,
            commit=False,
            survey_number=survey_number,
            owner_name=str(data["owner_name"]).strip(),
            owner_address=owner_address,
            owner_phone=str(data["owner_phone"]).strip(),
            latitude=latitude,
            longitude=longitude,
            area=area,
            value=value,
            deed_image=data.get("deed_image") or DEFAULT_DEED_IMAGE,
            description=data.get("description") or "",
            token_id=data.get("token_id"),
            status=change.to_status.value,
            previous_owners=[],
            transfer_request=None,
        )
        if SideEffect.ADD_HOLDING in change.side_effects:
            records.add_holding(db, owner_address, record.id, commit=False)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Survey number already exists")

    db.refresh(record)
    logger.info(f"Registered land record {record.id} ({survey_number}) for {owner_address}")
    return record


def verify_record(db: Session, record_id: int) -> LandRecord:
    """Mark a record Verified. Verifying an already Verified record is a no-op."""
    record = records.get_record(db, record_id)
    change = transition(record.status, Action.VERIFY, record.transfer_request)

    if change.is_noop:
        logger.info(f"Record {record_id} already verified")
        return record

    _apply(db, record, change, {})
    return records.get_record(db, record_id)


def reject_record(db: Session, record_id: int) -> LandRecord:
    """Refuse a pending registration."""
    record = records.get_record(db, record_id)
    change = transition(record.status, Action.REJECT_RECORD, record.transfer_request)
    _apply(db, record, change, {})
    return records.get_record(db, record_id)


def set_status(db: Session, record_id: int, status: str) -> LandRecord:
    """
    Generic admin status change.

    PendingTransfer can never be set here; it is only reachable through
    request_transfer so that every transfer goes through admin review.
    """
    try:
        target = RecordStatus(status)
    except ValueError:
        raise ValidationError(f"Invalid status: {status}")

    if target is RecordStatus.PENDING_TRANSFER:
        raise ForbiddenError("Direct transfers are not allowed. Please use the transfer request API.")
    if target is RecordStatus.VERIFIED:
        return verify_record(db, record_id)
    if target is RecordStatus.REJECTED:
        return reject_record(db, record_id)

    raise InvalidStateError("Records cannot be moved back to Pending")


# =============================================================================
# Transfers
# =============================================================================

def request_transfer(
    db: Session,
    record_id: int,
    new_owner_address: str,
    reason: Optional[str] = None,
    validate_address: Optional[bool] = None,
) -> LandRecord:
    """
    Open a transfer request on a Verified record.

    The address is validated before the record is read, so a malformed
    address never causes a write.
    """
    new_owner_address = (new_owner_address or "").strip()
    if not new_owner_address:
        raise ValidationError("New owner address is required")
    _check_address(new_owner_address, validate_address, "Invalid Ethereum address format")

    record = records.get_record(db, record_id)
    change = transition(record.status, Action.REQUEST_TRANSFER, record.transfer_request)

    current_owner = record.owner_address
    if new_owner_address.lower() == current_owner.lower():
        raise ValidationError("New owner address is already the current owner")

    now = _now()
    transfer_request = {
        "new_owner_address": new_owner_address,
        "requested_by": current_owner,
        "reason": reason or "Not specified",
        "requested_at": now,
        "status": TransferStatus.PENDING.value,
        "history": [
            {
                "status": "Requested",
                "timestamp": now,
                "note": f"Transfer requested from {current_owner} to {new_owner_address}",
            }
        ],
    }
    _apply(db, record, change, {"transfer_request": transfer_request})

    record = records.get_record(db, record_id)
    if SideEffect.NOTIFY_ADMIN in change.side_effects:
        notifications.record_transfer_requested(db, record, current_owner, new_owner_address)
    return record


def acquire_transaction_reference(
    chain: Optional[ChainClient],
    token_id: int,
    new_owner_address: str,
    required: bool,
) -> Tuple[str, Optional[str]]:
    """
    Get a transaction hash for a transfer.

    Returns:
        (transaction_hash, note) where note is None for a real on-chain
        transaction and explains the placeholder otherwise.

    Raises:
        UpstreamError: ``required`` is set and the transfer could not be recorded on-chain.
    """
    if chain is not None and chain.is_configured:
        try:
            return chain.submit_transfer(token_id, new_owner_address), None
        except ChainError as e:
            if required:
                raise UpstreamError(f"Blockchain operation failed: {e}")
            logger.warning(f"Blockchain operation failed, using placeholder transaction hash: {e}")
            return synthesize_tx_hash(), "Simulated transaction - blockchain error occurred"

    if required:
        raise UpstreamError("Blockchain recording is required but no chain client is configured")
    logger.warning("Missing blockchain configuration. Using placeholder transaction hash.")
    return synthesize_tx_hash(), "Simulated transaction - blockchain not configured"


def _move_holding(db: Session, record_id: int, old_owner: str, new_owner: str) -> None:
    try:
        records.remove_holding(db, old_owner, record_id)
        records.add_holding(db, new_owner, record_id)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error updating wallet associations for record {record_id}: {e}")


def approve_transfer(
    db: Session,
    record_id: int,
    chain: Optional[ChainClient] = None,
    chain_required: Optional[bool] = None,
) -> TransferOutcome:
    """
    Complete a pending transfer: new owner, previous-owner entry, holdings moved.

    The record store is the source of truth. Unless ``chain_required``
    (default: CHAIN_REQUIRED) is set, a chain failure only downgrades the
    stored transaction hash to a placeholder.
    """
    if chain_required is None:
        chain_required = settings.CHAIN_REQUIRED

    record = records.get_record(db, record_id)
    change = transition(record.status, Action.APPROVE_TRANSFER, record.transfer_request)

    request = dict(record.transfer_request)
    new_owner = request["new_owner_address"]
    old_owner = record.owner_address
    token_id = record.token_id if record.token_id is not None else record.id

    tx_hash, note = None, None
    if SideEffect.RECORD_ON_CHAIN in change.side_effects:
        tx_hash, note = acquire_transaction_reference(chain, token_id, new_owner, chain_required)

    now = _now()
    previous_owners = list(record.previous_owners or [])
    if SideEffect.APPEND_PREVIOUS_OWNER in change.side_effects:
        entry = {"address": old_owner, "transfer_date": now, "transaction_hash": tx_hash}
        if note:
            entry["note"] = note
        previous_owners.append(entry)

    request["status"] = TransferStatus.COMPLETED.value
    request["history"] = list(request.get("history") or []) + [
        {"status": "Completed", "timestamp": now, "note": f"Transfer approved, transaction {tx_hash}"}
    ]

    _apply(db, record, change, {
        "owner_address": new_owner,
        "previous_owners": previous_owners,
        "transfer_request": request,
    })

    if SideEffect.MOVE_HOLDING in change.side_effects:
        _move_holding(db, record_id, old_owner, new_owner)

    logger.info(f"Record {record_id} transferred from {old_owner} to {new_owner} (tx {tx_hash})")
    return TransferOutcome(
        record=records.get_record(db, record_id),
        transaction_hash=tx_hash,
        on_chain=tx_hash is not None and note is None,
        warning=note,
    )


def reject_transfer(db: Session, record_id: int, note: Optional[str] = None) -> LandRecord:
    """Close a pending transfer without changing ownership. The request is kept, marked Rejected."""
    record = records.get_record(db, record_id)
    change = transition(record.status, Action.REJECT_TRANSFER, record.transfer_request)

    request = dict(record.transfer_request or {})
    request["status"] = TransferStatus.REJECTED.value
    request["history"] = list(request.get("history") or []) + [
        {"status": "Rejected", "timestamp": _now(), "note": note or "Transfer rejected by administrator"}
    ]

    _apply(db, record, change, {"transfer_request": request})
    return records.get_record(db, record_id)


def registry_stats(db: Session) -> dict:
    """Record counts per status plus unread admin notifications."""
    counts = {s.value: 0 for s in RecordStatus}
    rows = db.query(LandRecord.status, func.count(LandRecord.id)).group_by(LandRecord.status).all()
    for status, count in rows:
        counts[status] = count

    return {
        "total_records": sum(counts.values()),
        "by_status": counts,
        "unread_notifications": notifications.count_unread(db),
    }
