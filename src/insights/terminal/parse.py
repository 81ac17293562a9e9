# SPDX-License-Identifier: MIT

import re
from typing import Optional

import pendulum
import typer

from insights.model.weekday_mask import WEEKDAYS, Weekday
from insights.time import date_from_str, today


def parse_date(date_param: Optional[str]) -> pendulum.Date:
    """
    YYYY-MM-DD, today/t, yesterday/y, or a day offset such as -1.
    Missing input means today.
    """
    if date_param is None:
        return today()

    date = date_param.strip()

    if re.match(r"^\d{4}-\d{2}-\d{2}$", date):
        try:
            return date_from_str(date)
        except ValueError as e:
            raise typer.BadParameter(f"Invalid date: {e}")

    if re.match(r"^-?\d+$", date):
        return today().add(days=int(date))

    if date == "today" or date == "t":
        return today()
    if date == "yesterday" or date == "y":
        return today().subtract(days=1)

    raise typer.BadParameter(f"Unrecognised date: {date_param}")


def parse_date_optional(date_param: Optional[str]) -> Optional[pendulum.Date]:
    if date_param is None:
        return None
    return parse_date(date_param)


def parse_month(month_param: Optional[str]) -> pendulum.Date:
    """YYYY-MM, or the current month when missing."""
    if month_param is None:
        return today().start_of("month")
    match = re.match(r"^(\d{4})-(\d{2})$", month_param.strip())
    if not match:
        raise typer.BadParameter(f"Month must look like YYYY-MM, got {month_param}")
    month = int(match.group(2))
    if not 1 <= month <= 12:
        raise typer.BadParameter(f"Month must be between 01 and 12, got {month}")
    return pendulum.date(int(match.group(1)), month, 1)


def parse_weekdays(days: Optional[list[str]]) -> list[Weekday]:
    """Accept full names or three-letter prefixes: mon, tue, ..."""
    if days is None:
        return []
    parsed: list[Weekday] = []
    for day in days:
        candidate = day.strip().lower()
        matches = [w for w in WEEKDAYS if w.startswith(candidate[:3])]
        if len(candidate) < 3 or len(matches) != 1:
            raise typer.BadParameter(f"Unrecognised weekday: {day}")
        parsed.append(matches[0])
    return parsed
