"""
Ownership transfer endpoints.

Owners request a transfer of a Verified record; an administrator approves
or rejects it. Approval records the transfer on-chain when a chain client is
configured and falls back to a placeholder hash otherwise (see
CHAIN_REQUIRED).
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from landchain.core.database import get_db
from landchain.services import transfers
from landchain.services.chain import ChainClient, get_chain_client
from landchain.api.routes.land_records import LandRecordResponse, to_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/land-records", tags=["transfers"])


# --- Request / Response Models ---

class TransferRequestCreate(BaseModel):
    record_id: int
    new_owner_address: str
    transfer_reason: Optional[str] = None


class TransferDecision(BaseModel):
    record_id: int
    note: Optional[str] = None


class TransferRequestResponse(BaseModel):
    success: bool = True
    message: str
    request_id: int
    record: LandRecordResponse


class ApproveTransferResponse(BaseModel):
    success: bool = True
    message: str
    transaction_hash: Optional[str] = None
    on_chain: bool
    warning: Optional[str] = None
    record: LandRecordResponse


# --- Endpoints ---

@router.post("/request-transfer", response_model=TransferRequestResponse)
def request_transfer(body: TransferRequestCreate, db: Session = Depends(get_db)):
    """Submit a transfer request for admin review."""
    record = transfers.request_transfer(db, body.record_id, body.new_owner_address, body.transfer_reason)
    return TransferRequestResponse(
        message="Transfer request submitted successfully. An admin will review your request.",
        request_id=record.id,
        record=to_response(record),
    )


@router.post("/approve-transfer", response_model=ApproveTransferResponse)
def approve_transfer(
    body: TransferDecision,
    db: Session = Depends(get_db),
    chain: ChainClient = Depends(get_chain_client),
):
    """Approve a pending transfer and hand the record to the new owner."""
    outcome = transfers.approve_transfer(db, body.record_id, chain=chain)
    if outcome.on_chain:
        message = "Transfer completed successfully"
    else:
        message = "Transfer completed in database only"
    return ApproveTransferResponse(
        message=message,
        transaction_hash=outcome.transaction_hash,
        on_chain=outcome.on_chain,
        warning=outcome.warning,
        record=to_response(outcome.record),
    )


@router.post("/reject-transfer", response_model=LandRecordResponse)
def reject_transfer(body: TransferDecision, db: Session = Depends(get_db)):
    """Reject a pending transfer; ownership is unchanged."""
    return to_response(transfers.reject_transfer(db, body.record_id, body.note))
