"""
Wallet holdings index.

Maps an owner address to the ids of the land records it currently holds.
Maintained alongside registrations and completed transfers; the land_records
table stays the source of truth for ownership.
"""

from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.sql import func

from landchain.core.database import Base


class Wallet(Base):
    __tablename__ = "wallets"

    id = Column(Integer, primary_key=True, index=True)
    address = Column(String(64), nullable=False, unique=True, index=True)
    land_records = Column(JSON, nullable=False, default=list)  # list of LandRecord ids

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    def __repr__(self):
        return f"<Wallet {self.address}: {len(self.land_records or [])} records>"
