"""
Record store access for land records and the wallet holdings index.

Thin query helpers over the SQLAlchemy session. Workflow rules live in
services/workflow.py and services/transfers.py; nothing here decides
whether a status change is allowed.
"""

import logging
from typing import Optional, Tuple, List

from sqlalchemy import and_, or_, func
from sqlalchemy.orm import Session

from landchain.core.exceptions import NotFoundError
from landchain.models.land_record import LandRecord
from landchain.models.wallet import Wallet
from landchain.utils.geo import bounding_box, haversine_km

logger = logging.getLogger(__name__)


def find_records(
    db: Session,
    status: Optional[str] = None,
    owner_address: Optional[str] = None,
    limit: int = 100,
    offset: int = 0,
) -> Tuple[int, List[LandRecord]]:
    """Return (total, page) of land records, newest first."""
    query = db.query(LandRecord)

    if status:
        query = query.filter(LandRecord.status == status)
    if owner_address:
        query = query.filter(func.lower(LandRecord.owner_address) == owner_address.lower())

    total = query.count()
    records = (
        query.order_by(LandRecord.created_at.desc(), LandRecord.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return total, records


def get_record(db: Session, record_id: int) -> LandRecord:
    record = db.query(LandRecord).filter(LandRecord.id == record_id).first()
    if not record:
        raise NotFoundError("Land record not found")
    return record


def get_record_by_survey_number(db: Session, survey_number: str) -> Optional[LandRecord]:
    return db.query(LandRecord).filter(LandRecord.survey_number == survey_number).first()


def insert_record(db: Session, commit: bool = True, **fields) -> LandRecord:
    """Add a record. With commit=False the row is only flushed (id assigned)."""
    record = LandRecord(**fields)
    db.add(record)
    if commit:
        db.commit()
        db.refresh(record)
    else:
        db.flush()
    return record


def conditional_update(
    db: Session,
    record_id: int,
    expected_status: str,
    values: dict,
    expected_version: Optional[int] = None,
) -> int:
    """
    Update a record only if it still has ``expected_status``.

    Runs as a single UPDATE ... WHERE id = :id AND status = :expected, so two
    writers racing on the same record cannot both succeed. With
    ``expected_version`` the row must also be unchanged since it was read,
    which catches a record that left and re-entered the same status.
    The row version is incremented on every successful update.

    Returns:
        Number of rows matched (0 or 1).
    """
    query = db.query(LandRecord).filter(LandRecord.id == record_id, LandRecord.status == expected_status)
    if expected_version is not None:
        query = query.filter(LandRecord.version == expected_version)
    matched = query.update(dict(values, version=LandRecord.version + 1), synchronize_session=False)
    db.commit()
    return matched


def records_in_bounds(
    db: Session,
    min_lat: float,
    max_lat: float,
    min_lng: float,
    max_lng: float,
    status: Optional[str] = None,
) -> List[LandRecord]:
    query = db.query(LandRecord).filter(
        and_(
            LandRecord.latitude >= min_lat,
            LandRecord.latitude <= max_lat,
            LandRecord.longitude >= min_lng,
            LandRecord.longitude <= max_lng,
        )
    )
    if status:
        query = query.filter(LandRecord.status == status)
    return query.all()


def records_near(
    db: Session,
    latitude: float,
    longitude: float,
    radius_km: float,
    status: Optional[str] = None,
) -> List[Tuple[LandRecord, float]]:
    """Records within radius_km of a point, nearest first, paired with their distance."""
    min_lat, max_lat, lng_ranges = bounding_box(latitude, longitude, radius_km)
    query = db.query(LandRecord).filter(
        LandRecord.latitude >= min_lat,
        LandRecord.latitude <= max_lat,
        or_(*[and_(LandRecord.longitude >= west, LandRecord.longitude <= east) for west, east in lng_ranges]),
    )
    if status:
        query = query.filter(LandRecord.status == status)
    candidates = query.all()

    results = []
    for record in candidates:
        distance = haversine_km(longitude, latitude, record.longitude, record.latitude)
        if distance <= radius_km:
            results.append((record, round(distance, 3)))

    results.sort(key=lambda item: item[1])
    return results


# =============================================================================
# Wallet holdings index
# =============================================================================

def get_wallet(db: Session, address: str) -> Optional[Wallet]:
    return db.query(Wallet).filter(Wallet.address == address.lower()).first()


def add_holding(db: Session, address: str, record_id: int, commit: bool = True) -> Wallet:
    """Insert the wallet if absent, then append record_id to its holdings."""
    wallet = get_wallet(db, address)
    if wallet is None:
        wallet = Wallet(address=address.lower(), land_records=[])
        db.add(wallet)

    holdings = list(wallet.land_records or [])
    if record_id not in holdings:
        holdings.append(record_id)
    wallet.land_records = holdings

    if commit:
        db.commit()
        db.refresh(wallet)
    else:
        db.flush()
    return wallet


def remove_holding(db: Session, address: str, record_id: int) -> Optional[Wallet]:
    """Drop record_id from the wallet's holdings. No-op if the wallet is unknown."""
    wallet = get_wallet(db, address)
    if wallet is None:
        logger.warning(f"No wallet entry for {address} while removing record {record_id}")
        return None

    wallet.land_records = [rid for rid in (wallet.land_records or []) if rid != record_id]
    db.commit()
    db.refresh(wallet)
    return wallet
