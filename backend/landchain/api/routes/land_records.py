"""
Land Records API endpoints.

Registration, lookup and admin status changes for land parcels. Transfer
endpoints live in transfers.py.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from pydantic import BaseModel, Field
from typing import Optional, List, Any
from datetime import datetime

from landchain.core.database import get_db
from landchain.core.exceptions import NotFoundError
from landchain.models.land_record import LandRecord
from landchain.services import records, transfers

router = APIRouter(prefix="/land-records", tags=["land-records"])


# =============================================================================
# Request/Response Models
# =============================================================================

class Location(BaseModel):
    latitude: float
    longitude: float


class LandRecordCreate(BaseModel):
    """Request model for registering a land record."""
    survey_number: str
    owner_name: str
    owner_address: str
    owner_phone: str
    location: Location
    area: float  # square meters
    value: float  # ETH
    deed_image: Optional[str] = None
    description: Optional[str] = None
    token_id: Optional[int] = None


class StatusUpdate(BaseModel):
    """Request model for an admin status change."""
    status: str


class PreviousOwner(BaseModel):
    address: str
    transfer_date: str
    transaction_hash: str
    note: Optional[str] = None


class LandRecordResponse(BaseModel):
    """Response model for a land record."""
    id: int
    survey_number: str
    owner_name: str
    owner_address: str
    owner_phone: str
    location: Location
    area: float
    value: float
    status: str
    deed_image: Optional[str]
    description: Optional[str]
    token_id: Optional[int]
    previous_owners: List[PreviousOwner]
    transfer_request: Optional[dict[str, Any]]
    registration_date: Optional[datetime]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]


class LandRecordListResponse(BaseModel):
    total: int
    records: List[LandRecordResponse]


class NearbyRecord(BaseModel):
    distance_km: float
    record: LandRecordResponse


class BoundsRequest(BaseModel):
    """Request model for bounds-based search."""
    min_lat: float = Field(..., ge=-90, le=90)
    max_lat: float = Field(..., ge=-90, le=90)
    min_lng: float = Field(..., ge=-180, le=180)
    max_lng: float = Field(..., ge=-180, le=180)
    status: Optional[str] = None


def to_response(row: LandRecord) -> LandRecordResponse:
    """Convert a DB row to a response model."""
    return LandRecordResponse(
        id=row.id,
        survey_number=row.survey_number,
        owner_name=row.owner_name,
        owner_address=row.owner_address,
        owner_phone=row.owner_phone,
        location=Location(latitude=row.latitude, longitude=row.longitude),
        area=row.area,
        value=row.value,
        status=row.status,
        deed_image=row.deed_image,
        description=row.description,
        token_id=row.token_id,
        previous_owners=[PreviousOwner(**entry) for entry in (row.previous_owners or [])],
        transfer_request=row.transfer_request,
        registration_date=row.registration_date,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/", response_model=LandRecordListResponse)
def list_land_records(
    status: Optional[str] = Query(None, description="Pending, Verified, PendingTransfer or Rejected"),
    owner_address: Optional[str] = Query(None, description="Filter by current owner wallet"),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    """List land records, newest first."""
    total, rows = records.find_records(db, status=status, owner_address=owner_address, limit=limit, offset=offset)
    return LandRecordListResponse(total=total, records=[to_response(r) for r in rows])


@router.post("/", response_model=LandRecordResponse, status_code=201)
def register_land_record(body: LandRecordCreate, db: Session = Depends(get_db)):
    """
    Register a new land record.

    The record starts in Pending and must be verified by an administrator
    before it can be transferred.
    """
    data = body.model_dump(exclude={"location"})
    data["latitude"] = body.location.latitude
    data["longitude"] = body.location.longitude
    record = transfers.register_land_record(db, data)
    return to_response(record)


@router.get("/nearby/", response_model=List[NearbyRecord])
def nearby_land_records(
    latitude: float = Query(..., ge=-90, le=90),
    longitude: float = Query(..., ge=-180, le=180),
    radius_km: float = Query(5, gt=0, le=200),
    status: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """Land records within radius_km of a point, nearest first."""
    results = records.records_near(db, latitude, longitude, radius_km, status=status)
    return [NearbyRecord(distance_km=d, record=to_response(r)) for r, d in results]


@router.post("/in-bounds/", response_model=LandRecordListResponse)
def land_records_in_bounds(bounds: BoundsRequest, db: Session = Depends(get_db)):
    """Land records inside a map viewport."""
    rows = records.records_in_bounds(
        db, bounds.min_lat, bounds.max_lat, bounds.min_lng, bounds.max_lng, status=bounds.status
    )
    return LandRecordListResponse(total=len(rows), records=[to_response(r) for r in rows])


@router.get("/survey/{survey_number}", response_model=LandRecordResponse)
def get_by_survey_number(survey_number: str, db: Session = Depends(get_db)):
    record = records.get_record_by_survey_number(db, survey_number)
    if not record:
        raise NotFoundError("Land record not found")
    return to_response(record)


@router.get("/{record_id}", response_model=LandRecordResponse)
def get_land_record(record_id: int, db: Session = Depends(get_db)):
    return to_response(records.get_record(db, record_id))


@router.put("/{record_id}/status", response_model=LandRecordResponse)
def update_status(record_id: int, body: StatusUpdate, db: Session = Depends(get_db)):
    """
    Admin status change.

    Accepts Verified or Rejected. PendingTransfer is refused with 403:
    transfers must go through /land-records/request-transfer.
    """
    return to_response(transfers.set_status(db, record_id, body.status))


@router.post("/{record_id}/verify", response_model=LandRecordResponse)
def verify_land_record(record_id: int, db: Session = Depends(get_db)):
    """Mark a record as verified by an administrator."""
    return to_response(transfers.verify_record(db, record_id))


@router.post("/{record_id}/reject", response_model=LandRecordResponse)
def reject_land_record(record_id: int, db: Session = Depends(get_db)):
    """Reject a pending registration."""
    return to_response(transfers.reject_record(db, record_id))
