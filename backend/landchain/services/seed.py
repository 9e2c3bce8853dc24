import logging
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from landchain.core.exceptions import ConflictError, LandRegistryError
from landchain.services import records
from landchain.services.transfers import register_land_record, verify_record

logger = logging.getLogger(__name__)

# Demo parcels around Bengaluru
SAMPLE_RECORDS = [
    {
        "survey_number": "SRV001",
        "owner_name": "John Doe",
        "owner_address": "0x1234567890abcdef1234567890abcdef12345678",
        "owner_phone": "+1234567890",
        "area": 1000,
        "latitude": 12.9716,
        "longitude": 77.5946,
        "deed_image": "deed1.jpg",
        "value": 1.5,
        "verified": True,
    },
    {
        "survey_number": "SRV002",
        "owner_name": "Jane Smith",
        "owner_address": "0xabcdef1234567890abcdef1234567890abcdef12",
        "owner_phone": "+1987654321",
        "area": 1500,
        "latitude": 12.9717,
        "longitude": 77.5947,
        "deed_image": "deed2.jpg",
        "value": 2.0,
        "verified": True,
    },
    {
        "survey_number": "SRV003",
        "owner_name": "Robert Johnson",
        "owner_address": "0x2345678901abcdef2345678901abcdef23456789",
        "owner_phone": "+1122334455",
        "area": 2000,
        "latitude": 12.9718,
        "longitude": 77.5948,
        "deed_image": "deed3.jpg",
        "value": 2.5,
        "verified": False,
    },
]


def seed_land_records(
    db: Session,
    entries: Optional[Iterable[dict]] = None,
    verify: bool = True,
) -> dict:
    """
    Register sample land records through the normal workflow.

    Existing survey numbers are skipped. Entries flagged ``verified`` are
    verified afterwards when ``verify`` is True.

    Returns:
        Dict with seeding statistics
    """
    stats = {"imported": 0, "skipped": 0, "verified": 0, "errors": 0}

    for entry in entries if entries is not None else SAMPLE_RECORDS:
        data = {k: v for k, v in entry.items() if k != "verified"}
        survey_number = data.get("survey_number")

        if survey_number and records.get_record_by_survey_number(db, survey_number):
            stats["skipped"] += 1
            continue

        try:
            record = register_land_record(db, data)
            stats["imported"] += 1
            if verify and entry.get("verified"):
                verify_record(db, record.id)
                stats["verified"] += 1
        except ConflictError:
            stats["skipped"] += 1
        except LandRegistryError as e:
            logger.error(f"Error seeding {survey_number}: {e.message}")
            stats["errors"] += 1

    logger.info(f"Seeded land records: {stats}")
    return stats
