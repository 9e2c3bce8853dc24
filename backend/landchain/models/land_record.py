"""
Land Record model.

One row per registered parcel. Custody history and the active transfer
request are nested JSON values on the row, so a single conditional UPDATE
can move the record between statuses atomically.
"""

from enum import Enum

from sqlalchemy import Column, Integer, String, Float, Text, DateTime, JSON
from sqlalchemy.sql import func

from landchain.core.database import Base


class RecordStatus(str, Enum):
    """Land record status values."""
    PENDING = "Pending"
    VERIFIED = "Verified"
    PENDING_TRANSFER = "PendingTransfer"
    REJECTED = "Rejected"


class TransferStatus(str, Enum):
    """Transfer request status values."""
    PENDING = "Pending"
    COMPLETED = "Completed"
    REJECTED = "Rejected"


class LandRecord(Base):
    """
    A land parcel and its current custody state.

    previous_owners entries look like:
        {"address": "0x...", "transfer_date": "<iso>", "transaction_hash": "0x...", "note": "..."}

    transfer_request looks like:
        {"new_owner_address", "requested_by", "reason", "requested_at", "status", "history": [...]}
    """
    __tablename__ = "land_records"

    id = Column(Integer, primary_key=True, index=True)
    survey_number = Column(String(100), nullable=False, unique=True, index=True)

    # Owner
    owner_name = Column(String(200), nullable=False)
    owner_address = Column(String(64), nullable=False, index=True)  # chain wallet address
    owner_phone = Column(String(50), nullable=False)

    # Parcel
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    area = Column(Float, nullable=False)  # square meters
    value = Column(Float, nullable=False)  # assessed value, in ETH
    deed_image = Column(String(500), default="default-deed.jpg")
    description = Column(Text, default="")
    token_id = Column(Integer)  # on-chain token id, when minted

    # Workflow
    status = Column(String(20), nullable=False, default=RecordStatus.PENDING.value, index=True)
    previous_owners = Column(JSON, nullable=False, default=list)
    transfer_request = Column(JSON)
    version = Column(Integer, nullable=False, default=1)  # bumped by every conditional update

    # Timestamps
    registration_date = Column(DateTime, server_default=func.now())
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<LandRecord {self.id}: {self.survey_number} ({self.status})>"
