"""Tests for the record store helpers in services/records.py."""

import pytest

from landchain.models.land_record import LandRecord, RecordStatus
from landchain.services import records, transfers
from landchain.utils.geo import bounding_box, haversine_km

from conftest import NEW_OWNER, record_payload


def _register_at(db, survey_number, latitude, longitude):
    return transfers.register_land_record(
        db, record_payload(survey_number=survey_number, latitude=latitude, longitude=longitude)
    )


def _near(db, latitude, longitude, radius_km):
    return [r.survey_number for r, _ in records.records_near(db, latitude, longitude, radius_km)]


# ═══════════════════════════════════════════════════
# Nearby search
# ═══════════════════════════════════════════════════

class TestRecordsNear:
    def test_high_latitude_record_within_radius(self, db):
        _register_at(db, "NORTH-1", 70.0, 4.5)
        _register_at(db, "NORTH-FAR", 70.0, 10.0)

        assert haversine_km(0.0, 70.0, 4.5, 70.0) < 200
        assert _near(db, 70.0, 0.0, 200) == ["NORTH-1"]

    def test_search_across_the_antimeridian(self, db):
        _register_at(db, "EAST-1", 10.0, -179.9)
        _register_at(db, "WEST-1", 10.0, 179.95)

        assert _near(db, 10.0, 179.9, 50) == ["WEST-1", "EAST-1"]
        assert _near(db, 10.0, -179.95, 50) == ["EAST-1", "WEST-1"]

    def test_circle_containing_the_pole(self, db):
        _register_at(db, "POLAR-1", 89.8, 180.0)

        assert _near(db, 89.8, 0.0, 60) == ["POLAR-1"]

    def test_status_filter(self, db):
        record = _register_at(db, "SRV-1", 12.9716, 77.5946)
        _register_at(db, "SRV-2", 12.972, 77.5946)
        transfers.verify_record(db, record.id)

        found = records.records_near(db, 12.9716, 77.5946, 5, status=RecordStatus.VERIFIED.value)
        assert [r.survey_number for r, _ in found] == ["SRV-1"]


class TestBoundingBox:
    def test_box_widens_with_latitude(self):
        _, _, equator = bounding_box(0.0, 0.0, 100)
        _, _, north = bounding_box(70.0, 0.0, 100)
        assert north[0][1] > equator[0][1]

    def test_box_split_at_antimeridian(self):
        _, _, ranges = bounding_box(0.0, -179.9, 50)
        assert len(ranges) == 2
        assert ranges[1][0] == -180.0

    @pytest.mark.parametrize("latitude", [89.9, -89.9])
    def test_polar_box_covers_all_longitudes(self, latitude):
        min_lat, max_lat, ranges = bounding_box(latitude, 45.0, 50)
        assert ranges == [(-180.0, 180.0)]
        assert -90.0 <= min_lat <= max_lat <= 90.0


# ═══════════════════════════════════════════════════
# Conditional update
# ═══════════════════════════════════════════════════

class TestConditionalUpdate:
    def test_stale_status_matches_nothing(self, db, session_factory, registered):
        stale_status = registered.status

        other = session_factory()
        try:
            transfers.verify_record(other, registered.id)
        finally:
            other.close()

        matched = records.conditional_update(db, registered.id, stale_status, {"description": "stale write"})
        assert matched == 0

        db.expire_all()
        stored = records.get_record(db, registered.id)
        assert stored.status == RecordStatus.VERIFIED.value
        assert stored.description == "Corner plot"

    def test_every_update_bumps_version(self, db, registered):
        before = registered.version
        matched = records.conditional_update(db, registered.id, RecordStatus.PENDING.value, {"description": "x"})
        assert matched == 1
        assert db.get(LandRecord, registered.id).version == before + 1

    def test_stale_version_matches_nothing_even_when_status_returns(self, db, session_factory, registered):
        verified = transfers.verify_record(db, registered.id)
        seen_version = verified.version

        # Record leaves Verified and comes back through a rejected transfer
        other = session_factory()
        try:
            transfers.request_transfer(other, registered.id, NEW_OWNER)
            transfers.reject_transfer(other, registered.id)
        finally:
            other.close()

        status = RecordStatus.VERIFIED.value
        assert records.conditional_update(db, registered.id, status, {}, expected_version=seen_version) == 0
        assert records.conditional_update(db, registered.id, status, {}) == 1
