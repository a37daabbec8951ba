# SalesPro Tests - Formatting and Field Validators

import pytest

from salespro import validators
from salespro.utils import camel_to_snake, format_inr, money, snake_to_camel


class TestFormatInr:

    @pytest.mark.parametrize(
        "value, expected",
        [
            (0, "0"),
            (999, "999"),
            (1000, "1,000"),
            (100000, "1,00,000"),
            (1234567.5, "12,34,567.5"),
            (250.25, "250.25"),
            (-45000, "-45,000"),
            ("not a number", "0"),
        ],
    )
    def test_indian_grouping(self, value, expected):
        assert format_inr(value) == expected

    def test_money_prefix(self):
        assert money(500000) == "₹5,00,000"


class TestFieldNames:

    @pytest.mark.parametrize(
        "snake, camel",
        [
            ("product_name", "productName"),
            ("eol_achieve", "eolAchieve"),
            ("ai_api_key", "aiApiKey"),
            ("id", "id"),
        ],
    )
    def test_both_directions(self, snake, camel):
        assert snake_to_camel(snake) == camel
        assert camel_to_snake(camel) == snake


class TestValidators:

    def test_phone(self):
        assert validators.phone10("9876543210")
        assert not validators.phone10("987654321")
        assert not validators.phone10("98765432100")
        assert not validators.phone10("98765abcde")

    def test_quantity_must_be_whole(self):
        assert validators.pos_int(3)
        assert not validators.pos_int(0)
        assert not validators.pos_int(2.5)
        assert not validators.pos_int("x")

    def test_iso_date(self):
        assert validators.iso_date("2024-02-29")
        assert not validators.iso_date("2023-02-29")
        assert not validators.iso_date("2024-6-1")

    def test_clock(self):
        assert validators.hhmm("09:05")
        assert not validators.hhmm("24:00")
        assert not validators.hhmm("9:05")
