# SPDX-License-Identifier: MIT

import pendulum
import pytest
import typer

from insights.terminal.parse import parse_date, parse_month, parse_weekdays
from insights.time import minutes_from_str, minutes_to_str, today


class TestParseDate:
    def test_iso_date(self):
        assert parse_date("2024-02-29") == pendulum.date(2024, 2, 29)

    @pytest.mark.parametrize(
        "raw, offset",
        [(None, 0), ("today", 0), ("t", 0), ("yesterday", -1), ("y", -1), ("-3", -3)],
    )
    def test_relative(self, raw, offset):
        assert parse_date(raw) == today().add(days=offset)

    @pytest.mark.parametrize("raw", ["2024-02-30", "tomorrow-ish", "02/03/2024"])
    def test_rejects(self, raw):
        with pytest.raises(typer.BadParameter):
            parse_date(raw)


class TestParseMonth:
    def test_month(self):
        assert parse_month("2024-02") == pendulum.date(2024, 2, 1)

    @pytest.mark.parametrize("raw", ["2024-13", "2024", "Feb"])
    def test_rejects(self, raw):
        with pytest.raises(typer.BadParameter):
            parse_month(raw)


class TestParseWeekdays:
    def test_prefixes(self):
        assert parse_weekdays(["Mon", "wednesday", "fri"]) == [
            "monday",
            "wednesday",
            "friday",
        ]

    def test_rejects_ambiguous(self):
        with pytest.raises(typer.BadParameter):
            parse_weekdays(["t"])


class TestDuration:
    @pytest.mark.parametrize("raw, minutes", [("1:30", 90), ("0:05", 5), ("45", 45)])
    def test_parse(self, raw, minutes):
        assert minutes_from_str(raw) == minutes

    def test_format(self):
        assert minutes_to_str(90) == "1:30"
        assert minutes_to_str(5) == "0:05"
