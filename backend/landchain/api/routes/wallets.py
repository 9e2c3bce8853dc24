"""Wallet holdings lookup."""

from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from landchain.core.database import get_db
from landchain.models.land_record import LandRecord
from landchain.services import records
from landchain.api.routes.land_records import LandRecordResponse, to_response

router = APIRouter(prefix="/wallets", tags=["wallets"])


class WalletResponse(BaseModel):
    address: str
    record_ids: List[int]
    records: List[LandRecordResponse]


@router.get("/{address}", response_model=WalletResponse)
def get_wallet_holdings(address: str, db: Session = Depends(get_db)):
    """
    Land records held by a wallet.

    Unknown wallets return an empty holding list rather than 404; an address
    with no registrations simply owns nothing yet.
    """
    wallet = records.get_wallet(db, address)
    record_ids = list(wallet.land_records or []) if wallet else []

    rows = []
    if record_ids:
        rows = db.query(LandRecord).filter(LandRecord.id.in_(record_ids)).order_by(LandRecord.id).all()

    return WalletResponse(
        address=address.lower(),
        record_ids=record_ids,
        records=[to_response(r) for r in rows],
    )
