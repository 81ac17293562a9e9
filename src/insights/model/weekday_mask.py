# SPDX-License-Identifier: MIT

from dataclasses import dataclass
from typing import Literal, get_args

import pendulum

Weekday = Literal[
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
]

WEEKDAYS: tuple[Weekday, ...] = get_args(Weekday)

ALL_DAYS = 0b1111111


@dataclass(frozen=True)
class WeekdayMask:
    """
    Set of weekdays packed into 7 bits: bit 0 is Monday ... bit 6 is Sunday.

    Example:

    Monday, Wednesday and Friday -> 1 + 4 + 16 = 21
    """

    bits: int = ALL_DAYS

    def __post_init__(self) -> None:
        if not 0 <= self.bits <= ALL_DAYS:
            raise ValueError(f"weekday mask out of range: {self.bits}")

    @classmethod
    def of(cls, *days: Weekday) -> "WeekdayMask":
        bits = 0
        for day in days:
            bits |= cls.flag(day)
        return cls(bits)

    @staticmethod
    def flag(day: Weekday) -> int:
        return 1 << WEEKDAYS.index(day)

    def has(self, day: Weekday) -> bool:
        return (self.bits & self.flag(day)) != 0

    def toggle(self, day: Weekday) -> "WeekdayMask":
        return WeekdayMask(self.bits ^ self.flag(day))

    def includes_date(self, date: pendulum.Date) -> bool:
        return (self.bits >> date.weekday()) & 1 == 1

    def is_empty(self) -> bool:
        return self.bits == 0

    def days(self) -> list[Weekday]:
        return [day for day in WEEKDAYS if self.has(day)]

    @property
    def monday(self) -> bool:
        return self.has("monday")

    @property
    def tuesday(self) -> bool:
        return self.has("tuesday")

    @property
    def wednesday(self) -> bool:
        return self.has("wednesday")

    @property
    def thursday(self) -> bool:
        return self.has("thursday")

    @property
    def friday(self) -> bool:
        return self.has("friday")

    @property
    def saturday(self) -> bool:
        return self.has("saturday")

    @property
    def sunday(self) -> bool:
        return self.has("sunday")
