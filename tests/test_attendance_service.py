# SalesPro Tests - Geofenced Attendance
#
# Tests for:
# - Store location must be mapped first
# - Present twice on one date (time-in kept, time-out set), also when overlapping
# - Rejection outside the radius carries the distance
# - Geolocation failures (denied / unavailable / timeout) write nothing
# - Week Off / Leave and store mapping

import asyncio

import pytest

from salespro.constants import STATUS_PRESENT, STATUS_WEEK_OFF
from salespro.errors import (
    GeofenceRejectedError,
    GeolocationPermissionDeniedError,
    GeolocationTimeoutError,
    GeolocationUnavailableError,
    StoreLocationNotMappedError,
    ValidationError,
)
from salespro.services.attendance_service import AttendanceService
from salespro.services.geofence import Coordinate
from tests.conftest import STORE, FailingLocator, FixedLocator, SlowLocator, run

DAY = "2024-06-10"


@pytest.fixture
def mapped_state(state):
    run(state.update_settings(store_lat=STORE.latitude, store_lng=STORE.longitude))
    return state


class TestMarkPresent:

    def test_requires_mapped_store(self, state):
        locator = FixedLocator(STORE)
        with pytest.raises(StoreLocationNotMappedError):
            run(AttendanceService(state, locator).mark_present(DAY))
        assert locator.calls == 0
        assert state.attendance == []

    def test_twice_on_same_day(self, mapped_state):
        service = AttendanceService(mapped_state, FixedLocator(STORE))
        first = run(service.mark_present(DAY, clock="09:05"))
        second = run(service.mark_present(DAY, clock="18:40"))

        assert first.time_in == "09:05"
        assert first.time_out is None
        assert second.id == first.id
        assert second.time_in == "09:05"
        assert second.time_out == "18:40"
        assert len(mapped_state.attendance) == 1
        assert mapped_state.attendance_for_date(DAY).status == STATUS_PRESENT

    def test_overlapping_checks_keep_time_in(self, mapped_state):
        service = AttendanceService(mapped_state, FixedLocator(STORE))

        async def both():
            return await asyncio.gather(
                service.mark_present(DAY, clock="09:00"),
                service.mark_present(DAY, clock="18:00"),
            )

        run(both())
        record = run(mapped_state.attendance_dao.get_for_date(DAY))
        assert {record.time_in, record.time_out} == {"09:00", "18:00"}
        assert len(run(mapped_state.attendance_dao.list())) == 1

    def test_location_label(self, mapped_state):
        service = AttendanceService(mapped_state, FixedLocator(STORE))
        record = run(service.mark_present(DAY, clock="09:00"))
        assert record.location == "12.9716, 77.5946 (At Store, 0m)"

    def test_outside_radius_rejected_with_distance(self, mapped_state):
        far = Coordinate(STORE.latitude + 0.01, STORE.longitude)  # ~1.1 km north
        service = AttendanceService(mapped_state, FixedLocator(far))
        with pytest.raises(GeofenceRejectedError) as err:
            run(service.mark_present(DAY))
        assert 1000 < err.value.distance_m < 1200
        assert f"{round(err.value.distance_m)}m away" in str(err.value)
        assert mapped_state.attendance == []

    @pytest.mark.parametrize(
        "exc, expected",
        [
            (GeolocationPermissionDeniedError("denied"), GeolocationPermissionDeniedError),
            (GeolocationUnavailableError("no fix"), GeolocationUnavailableError),
            (RuntimeError("gps driver crashed"), GeolocationUnavailableError),
        ],
    )
    def test_geolocation_failures_write_nothing(self, mapped_state, exc, expected):
        service = AttendanceService(mapped_state, FailingLocator(exc))
        with pytest.raises(expected):
            run(service.mark_present(DAY))
        assert run(mapped_state.attendance_dao.list()) == []

    def test_timeout(self, mapped_state):
        service = AttendanceService(mapped_state, SlowLocator(), timeout=0.05)
        with pytest.raises(GeolocationTimeoutError):
            run(service.mark_present(DAY))
        assert run(mapped_state.attendance_dao.list()) == []


class TestAbsenceAndMapping:

    def test_week_off_needs_no_location(self, state):
        service = AttendanceService(state, FailingLocator(GeolocationUnavailableError("off")))
        record = run(service.mark_absence(DAY, STATUS_WEEK_OFF))
        assert record.status == STATUS_WEEK_OFF
        assert record.location is None

    def test_present_is_not_an_absence(self, state):
        with pytest.raises(ValidationError):
            run(AttendanceService(state, FixedLocator(STORE)).mark_absence(DAY, STATUS_PRESENT))

    def test_map_store_location(self, state):
        point = Coordinate(19.076, 72.8777)
        run(AttendanceService(state, FixedLocator(point)).map_store_location())
        assert state.settings.has_store_location
        assert (state.settings.store_lat, state.settings.store_lng) == (19.076, 72.8777)

    def test_map_store_denied(self, state, denied_locator):
        with pytest.raises(GeolocationPermissionDeniedError):
            run(AttendanceService(state, denied_locator).map_store_location())
        assert not state.settings.has_store_location
