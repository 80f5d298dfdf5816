"""Unit tests for regatta_stats.normalize."""

from datetime import date, datetime

from regatta_stats.normalize import (
    coerce_date,
    location_key,
    normalize_space,
    parse_int,
    parse_season_year,
    split_display_name,
    trim,
)


# ---------------------------------------------------------------------------
# trim
# ---------------------------------------------------------------------------

class TestTrim:
    def test_strips_whitespace(self):
        assert trim("  hello  ") == "hello"

    def test_empty_string_returns_none(self):
        assert trim("") is None

    def test_whitespace_only_returns_none(self):
        assert trim("   ") is None

    def test_none_returns_none(self):
        assert trim(None) is None


# ---------------------------------------------------------------------------
# normalize_space
# ---------------------------------------------------------------------------

class TestNormalizeSpace:
    def test_collapses_internal_spaces(self):
        assert normalize_space("Kieler   Woche") == "Kieler Woche"

    def test_collapses_tabs(self):
        assert normalize_space("Kieler\t\tWoche") == "Kieler Woche"

    def test_none(self):
        assert normalize_space(None) is None


# ---------------------------------------------------------------------------
# location_key
# ---------------------------------------------------------------------------

class TestLocationKey:
    def test_lowercases_and_trims(self):
        assert location_key("  Steinhuder MEER ") == "steinhuder meer"

    def test_keeps_umlauts(self):
        assert location_key("Warnemünde") == "warnemünde"

    def test_blank(self):
        assert location_key("   ") is None


# ---------------------------------------------------------------------------
# split_display_name
# ---------------------------------------------------------------------------

class TestSplitDisplayName:
    def test_first_last(self):
        assert split_display_name("Anna Schmidt") == ("Anna", "Schmidt")

    def test_splits_on_first_space_only(self):
        assert split_display_name("Anna Maria Schmidt") == ("Anna", "Maria Schmidt")

    def test_single_token(self):
        assert split_display_name("Anna") == ("Anna", "")

    def test_none(self):
        assert split_display_name(None) == ("", "")

    def test_trims_outer_whitespace(self):
        assert split_display_name("  Jan Berg  ") == ("Jan", "Berg")


# ---------------------------------------------------------------------------
# parse_int
# ---------------------------------------------------------------------------

class TestParseInt:
    def test_int(self):
        assert parse_int(4) == 4

    def test_numeric_string(self):
        assert parse_int(" 12 ") == 12

    def test_garbage(self):
        assert parse_int("n/a") is None

    def test_integral_float(self):
        assert parse_int(3.0) == 3

    def test_fractional_float(self):
        assert parse_int(3.5) is None

    def test_bool_rejected(self):
        assert parse_int(True) is None

    def test_none(self):
        assert parse_int(None) is None


# ---------------------------------------------------------------------------
# coerce_date
# ---------------------------------------------------------------------------

class TestCoerceDate:
    def test_date_passthrough(self):
        assert coerce_date(date(2024, 6, 1)) == date(2024, 6, 1)

    def test_datetime(self):
        assert coerce_date(datetime(2024, 6, 1, 10, 30)) == date(2024, 6, 1)

    def test_iso_string(self):
        assert coerce_date("2024-06-01") == date(2024, 6, 1)

    def test_iso_timestamp_string(self):
        assert coerce_date("2024-06-01T10:00:00+00:00") == date(2024, 6, 1)

    def test_invalid(self):
        assert coerce_date("June 1st") is None

    def test_none(self):
        assert coerce_date(None) is None


# ---------------------------------------------------------------------------
# parse_season_year
# ---------------------------------------------------------------------------

class TestParseSeasonYear:
    def test_plain_year(self):
        assert parse_season_year("2024") == 2024

    def test_prefixed(self):
        assert parse_season_year("Saison 2023") == 2023

    def test_split_season(self):
        assert parse_season_year("2023/24") == 2023

    def test_int(self):
        assert parse_season_year(2022) == 2022

    def test_no_year(self):
        assert parse_season_year("summer") is None

    def test_none(self):
        assert parse_season_year(None) is None
