# SPDX-License-Identifier: MIT

import asyncio
import inspect
import logging
import math
from typing import Any, Callable, Literal, Optional, Protocol

logger = logging.getLogger(__name__)

ARMING_DELAY_MS = 300

# (held below ms, step magnitude, repeat interval ms)
ACCELERATION_PROFILE: tuple[tuple[float, int, int], ...] = (
    (500, 1, 180),
    (1000, 1, 140),
    (1500, 2, 100),
    (2500, 5, 80),
    (math.inf, 10, 60),
)

ControllerState = Literal["idle", "holding"]
Direction = Literal[1, -1]


def clamp(value: float, minimum: float, maximum: Optional[float] = None) -> float:
    result = max(minimum, value)
    if maximum is not None:
        result = min(maximum, result)
    return result


def step_for_held_ms(held_ms: float) -> int:
    for below, step, _ in ACCELERATION_PROFILE:
        if held_ms < below:
            return step
    return ACCELERATION_PROFILE[-1][1]


def interval_for_held_ms(held_ms: float) -> int:
    for below, _, interval in ACCELERATION_PROFILE:
        if held_ms < below:
            return interval
    return ACCELERATION_PROFILE[-1][2]


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def now_ms(self) -> float: ...

    def call_later(
        self, delay_ms: float, callback: Callable[[], None]
    ) -> TimerHandle: ...


class AsyncioScheduler:
    """Scheduler backed by the running event loop."""

    def now_ms(self) -> float:
        return asyncio.get_running_loop().time() * 1000

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        return asyncio.get_running_loop().call_later(delay_ms / 1000, callback)


class SteppedInputController:
    """
    Press-and-hold numeric input with acceleration, plus a manual edit path.

    get_value reads the canonical value; on_change receives the next value
    and is expected to route it into the mutation pipeline. Awaitables it
    returns are scheduled, never awaited inline.
    """

    def __init__(
        self,
        get_value: Callable[[], int],
        on_change: Callable[[int], Any],
        minimum: int = 0,
        maximum: Optional[int] = None,
        scheduler: Optional[Scheduler] = None,
        supports_hold: bool = True,
    ) -> None:
        self._get_value = get_value
        self._on_change = on_change
        self.minimum = minimum
        self.maximum = maximum
        self._scheduler: Scheduler = (
            scheduler if scheduler is not None else AsyncioScheduler()
        )
        self.supports_hold = supports_hold
        self.disabled = False

        self.state: ControllerState = "idle"
        self._direction: Direction = 1
        self._hold_started_ms = 0.0
        self._timer: Optional[TimerHandle] = None
        self._hold_generation = 0
        self._background: set[asyncio.Future[Any]] = set()

        self.editing = False
        self.draft: Optional[str] = None

    # ─────────────────────────────────────────────────────────────
    # Stepping
    # ─────────────────────────────────────────────────────────────

    def press(self, direction: Direction) -> None:
        """Single discrete step, for devices without sustained-hold semantics."""
        if self.disabled:
            return
        self.__nudge(direction)

    def start_hold(self, direction: Direction) -> None:
        if self.disabled:
            return
        self.stop_hold()
        if not self.supports_hold:
            self.press(direction)
            return

        self.state = "holding"
        self._direction = direction
        self._hold_started_ms = self._scheduler.now_ms()
        self._hold_generation += 1

        self.__nudge(direction)
        self.__arm(ARMING_DELAY_MS, self._hold_generation)

    def stop_hold(self) -> None:
        """Release, pointer-leave and teardown all end a hold here."""
        self.state = "idle"
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def close(self) -> None:
        self.stop_hold()
        self.cancel_edit()

    def __arm(self, delay_ms: float, generation: int) -> None:
        self._timer = self._scheduler.call_later(
            delay_ms, lambda: self.__tick(generation)
        )

    def __tick(self, generation: int) -> None:
        self._timer = None
        if self.state != "holding" or generation != self._hold_generation:
            return
        held_ms = self._scheduler.now_ms() - self._hold_started_ms
        step = step_for_held_ms(held_ms)
        interval = interval_for_held_ms(held_ms)

        self.__nudge(self._direction * step)

        # on_change may have released the hold
        if self.state == "holding" and generation == self._hold_generation:
            self.__arm(interval, generation)

    def __nudge(self, delta: int) -> None:
        value = self._get_value()
        next_value = int(clamp(value + delta, self.minimum, self.maximum))
        if next_value != value:
            self.__emit(next_value)

    # ─────────────────────────────────────────────────────────────
    # Manual edit
    # ─────────────────────────────────────────────────────────────

    def begin_edit(self) -> None:
        self.editing = True
        self.draft = str(self._get_value())

    def set_draft(self, text: str) -> None:
        if not self.editing:
            self.begin_edit()
        self.draft = text

    def commit_edit(self) -> Optional[int]:
        """
        Confirm or focus loss. Returns the committed value, or None when the
        draft was not a finite number and was discarded. A blank draft commits
        zero.
        """
        if not self.editing:
            return None
        draft = self.draft if self.draft is not None else ""
        self.editing = False
        self.draft = None

        try:
            parsed = float(draft.strip() or "0")
        except ValueError:
            logger.debug("discarded non-numeric draft %r", draft)
            return None
        if not math.isfinite(parsed):
            logger.debug("discarded non-finite draft %r", draft)
            return None

        next_value = int(clamp(math.floor(parsed), self.minimum, self.maximum))
        if next_value != self._get_value():
            self.__emit(next_value)
        return next_value

    def cancel_edit(self) -> None:
        self.editing = False
        self.draft = None

    def __emit(self, next_value: int) -> None:
        result = self._on_change(next_value)
        if inspect.isawaitable(result):
            future = asyncio.ensure_future(result)
            self._background.add(future)
            future.add_done_callback(self._background.discard)
