# SPDX-License-Identifier: MIT

import re
from typing import cast

import pendulum


def today() -> pendulum.Date:
    return pendulum.today("local").date()


def date_to_iso_str(date: pendulum.Date) -> str:
    return date.to_date_string()


def date_from_str(date: str) -> pendulum.Date:
    """Parse 'YYYY-MM-DD' (a trailing time component is ignored)."""
    parsed = pendulum.parse(date[:10], exact=True)
    return cast(pendulum.Date, parsed)


def date_to_display_str(date: pendulum.Date) -> str:
    return date.format("YYYY-MM-DD ddd")


def start_of_week(date: pendulum.Date) -> pendulum.Date:
    """Most recent Monday on or before date, independent of locale."""
    return date.subtract(days=date.weekday())


def end_of_week(date: pendulum.Date) -> pendulum.Date:
    return start_of_week(date).add(days=6)


def minutes_to_str(minutes: int) -> str:
    return f"{minutes // 60}:{minutes % 60:02d}"


def minutes_from_str(duration: str) -> int:
    """Accept 'H:MM' or plain minutes."""
    match = re.match(r"^(\d+):([0-5]\d)$", duration.strip())
    if match:
        return int(match.group(1)) * 60 + int(match.group(2))
    return int(duration.strip())
