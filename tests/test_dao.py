# SalesPro Tests - Domain Repositories
#
# Tests for:
# - Sale validation, ordering, full replace
# - Attendance merge-or-create (one record per date)
# - Target full replace per date
# - CRM status toggling
# - Settings bootstrap and merge

import asyncio

import pytest

from salespro.constants import (
    ATTENDANCE,
    CRM_CLOSED,
    CRM_OPEN,
    DEFAULT_BRAND_TARGET,
    SETTINGS,
    SETTINGS_KEY,
    STATUS_LEAVE,
    STATUS_PRESENT,
    TARGETS,
    THEME_DARK,
)
from salespro.db.dao import AttendanceDAO, CrmDAO, SaleDAO, SettingsDAO, TargetDAO
from salespro.errors import RecordNotFoundError, ValidationError
from salespro.models.target import Target
from tests.conftest import make_issue, make_sale, run


class TestSaleDAO:

    def test_add_and_list_newest_first(self, store):
        dao = SaleDAO(store)
        older = run(dao.add(make_sale(timestamp=1_000)))
        newer = run(dao.add(make_sale(timestamp=2_000)))
        assert [s.id for s in run(dao.list())] == [newer, older]

    def test_equal_timestamps_fall_back_to_id(self, store):
        dao = SaleDAO(store)
        a = run(dao.add(make_sale(timestamp=5)))
        b = run(dao.add(make_sale(timestamp=5)))
        assert [s.id for s in run(dao.list())] == [b, a]

    @pytest.mark.parametrize(
        "changes, field",
        [
            ({"quantity": 0}, "quantity"),
            ({"price": 0}, "price"),
            ({"price": -5}, "price"),
            ({"product": "  "}, "product_name"),
            ({"day": "10/06/2024"}, "date"),
            ({"customer_number": "12345"}, "customer_number"),
        ],
    )
    def test_invalid_sale_rejected_before_write(self, store, changes, field):
        dao = SaleDAO(store)
        with pytest.raises(ValidationError) as err:
            run(dao.add(make_sale(**changes)))
        assert err.value.field == field
        assert run(dao.list()) == []

    def test_update_replaces_record(self, store):
        dao = SaleDAO(store)
        sale_id = run(dao.add(make_sale(quantity=1, price=100.0)))
        sale = run(dao.get(sale_id))
        sale.quantity = 3
        run(dao.update(sale))
        assert run(dao.get(sale_id)).value == 300.0

    def test_update_unknown_id(self, store):
        sale = make_sale()
        sale.id = 404
        with pytest.raises(RecordNotFoundError):
            run(SaleDAO(store).update(sale))

    def test_list_by_date(self, store):
        dao = SaleDAO(store)
        run(dao.add(make_sale(day="2024-06-01")))
        run(dao.add(make_sale(day="2024-06-02")))
        assert [s.date for s in run(dao.list_by_date("2024-06-02"))] == ["2024-06-02"]


class TestAttendanceDAO:

    def test_second_mark_merges_into_same_record(self, store):
        dao = AttendanceDAO(store)
        first = run(dao.mark_for_date("2024-06-10", status=STATUS_PRESENT, time_in="09:05"))
        second = run(dao.mark_for_date("2024-06-10", time_out="18:30"))
        assert second.id == first.id
        assert second.time_in == "09:05"
        assert second.time_out == "18:30"
        assert run(store.count(ATTENDANCE)) == 1

    def test_create_requires_status(self, store):
        with pytest.raises(ValidationError):
            run(AttendanceDAO(store).mark_for_date("2024-06-10", time_in="09:00"))

    def test_invalid_status_and_clock(self, store):
        dao = AttendanceDAO(store)
        with pytest.raises(ValidationError):
            run(dao.mark_for_date("2024-06-10", status="Sick"))
        with pytest.raises(ValidationError):
            run(dao.mark_for_date("2024-06-10", status=STATUS_PRESENT, time_in="9am"))

    def test_status_change_keeps_times(self, store):
        dao = AttendanceDAO(store)
        run(dao.mark_for_date("2024-06-10", status=STATUS_PRESENT, time_in="09:00"))
        rec = run(dao.mark_for_date("2024-06-10", status=STATUS_LEAVE))
        assert rec.status == STATUS_LEAVE
        assert rec.time_in == "09:00"

    def test_concurrent_marks_make_one_record(self, store):
        dao = AttendanceDAO(store)

        async def both():
            await asyncio.gather(
                dao.mark_for_date("2024-06-11", status=STATUS_PRESENT, time_in="09:00"),
                dao.mark_for_date("2024-06-11", status=STATUS_PRESENT, time_out="18:00"),
            )
            return await dao.get_for_date("2024-06-11")

        rec = run(both())
        assert run(store.count(ATTENDANCE)) == 1
        assert rec.time_in == "09:00"
        assert rec.time_out == "18:00"

    def test_mark_present_picks_time_in_then_time_out(self, store):
        dao = AttendanceDAO(store)
        first = run(dao.mark_present("2024-06-12", "09:10", "at store"))
        second = run(dao.mark_present("2024-06-12", "13:00"))
        third = run(dao.mark_present("2024-06-12", "18:20"))
        assert (first.time_in, first.time_out) == ("09:10", None)
        assert (second.time_in, second.time_out) == ("09:10", "13:00")
        assert (third.time_in, third.time_out) == ("09:10", "18:20")
        assert third.status == STATUS_PRESENT
        assert third.location == "at store"

    def test_mark_present_after_leave_sets_time_in(self, store):
        dao = AttendanceDAO(store)
        run(dao.mark_for_date("2024-06-12", status=STATUS_LEAVE))
        rec = run(dao.mark_present("2024-06-12", "10:00"))
        assert rec.status == STATUS_PRESENT
        assert (rec.time_in, rec.time_out) == ("10:00", None)

    def test_mark_present_needs_clock(self, store):
        with pytest.raises(ValidationError):
            run(AttendanceDAO(store).mark_present("2024-06-12", "9:5"))


class TestTargetDAO:

    def test_save_twice_replaces_in_place(self, store):
        dao = TargetDAO(store)
        first = run(dao.save_for_date(Target(date="2024-06-10", day_target=10, week_target=70)))
        second = run(dao.save_for_date(Target(date="2024-06-10", day_target=12)))
        assert second.id == first.id
        assert run(store.count(TARGETS)) == 1
        stored = run(dao.get_for_date("2024-06-10"))
        assert stored.day_target == 12
        # full replace: fields not given are reset
        assert stored.week_target == 0

    def test_negative_values_rejected(self, store):
        with pytest.raises(ValidationError):
            run(TargetDAO(store).save_for_date(Target(date="2024-06-10", eol_target=-1)))


class TestCrmDAO:

    def test_toggle_flips_both_ways(self, store):
        dao = CrmDAO(store)
        issue_id = run(dao.add(make_issue()))
        assert run(dao.toggle_status(issue_id)).status == CRM_CLOSED
        assert run(dao.toggle_status(issue_id)).status == CRM_OPEN

    def test_list_by_status(self, store):
        dao = CrmDAO(store)
        keep = run(dao.add(make_issue()))
        closed = run(dao.add(make_issue()))
        run(dao.set_status(closed, CRM_CLOSED))
        assert [i.id for i in run(dao.list_by_status(CRM_OPEN))] == [keep]

    def test_contact_number_must_be_ten_digits(self, store):
        with pytest.raises(ValidationError):
            run(CrmDAO(store).add(make_issue(contact_number="98765")))

    def test_unknown_category(self, store):
        with pytest.raises(ValidationError):
            run(CrmDAO(store).add(make_issue(category="Refund")))

    def test_toggle_missing_issue(self, store):
        with pytest.raises(RecordNotFoundError):
            run(CrmDAO(store).toggle_status(12))


class TestSettingsDAO:

    def test_bootstrap_defaults(self, store):
        settings = run(SettingsDAO(store).load())
        assert settings.id == SETTINGS_KEY
        assert settings.brand_target == DEFAULT_BRAND_TARGET
        assert settings.is_logged_in is False
        assert settings.theme == THEME_DARK

    def test_bootstrap_is_idempotent(self, store):
        dao = SettingsDAO(store)
        run(dao.load())
        run(dao.update(user_name="Asha"))
        again = run(dao.load())
        assert again.user_name == "Asha"
        assert run(store.count(SETTINGS)) == 1

    def test_update_merges(self, store):
        dao = SettingsDAO(store)
        run(dao.update(user_name="Asha", emp_id="E17"))
        updated = run(dao.update(theme="light"))
        assert (updated.user_name, updated.emp_id, updated.theme) == ("Asha", "E17", "light")

    def test_ai_key_prefix(self, store):
        dao = SettingsDAO(store)
        with pytest.raises(ValidationError):
            run(dao.update(ai_api_key="sk-not-gemini"))
        assert run(dao.update(ai_api_key="AIzaExample")).ai_api_key == "AIzaExample"

    def test_unknown_field_rejected(self, store):
        with pytest.raises(ValidationError):
            run(SettingsDAO(store).update(favourite_colour="blue"))

    def test_coordinates_range_checked(self, store):
        with pytest.raises(ValidationError):
            run(SettingsDAO(store).update(store_lat=123.0))
