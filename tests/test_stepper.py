# SPDX-License-Identifier: MIT

"""Tests for press-and-hold stepping and the manual edit path."""

import asyncio
from typing import Optional

import pytest

from insights.service.stepper import (
    ARMING_DELAY_MS,
    SteppedInputController,
    clamp,
    interval_for_held_ms,
    step_for_held_ms,
)


class Counter:
    """Canonical value holder standing in for the entry store."""

    def __init__(self, value: int = 0) -> None:
        self.value = value
        self.emitted: list[int] = []

    def get(self) -> int:
        return self.value

    def set(self, value: int) -> None:
        self.emitted.append(value)
        self.value = value


def make_controller(
    scheduler,
    counter: Counter,
    minimum: int = 0,
    maximum: Optional[int] = None,
    supports_hold: bool = True,
) -> SteppedInputController:
    return SteppedInputController(
        counter.get,
        counter.set,
        minimum=minimum,
        maximum=maximum,
        scheduler=scheduler,
        supports_hold=supports_hold,
    )


class TestAccelerationProfile:
    @pytest.mark.parametrize(
        "held_ms, step, interval",
        [
            (0, 1, 180),
            (499, 1, 180),
            (500, 1, 140),
            (1000, 2, 100),
            (1500, 5, 80),
            (2499, 5, 80),
            (2500, 10, 60),
            (60_000, 10, 60),
        ],
    )
    def test_thresholds(self, held_ms, step, interval):
        assert step_for_held_ms(held_ms) == step
        assert interval_for_held_ms(held_ms) == interval

    def test_clamp(self):
        assert clamp(-3, 0) == 0
        assert clamp(12, 0, 10) == 10
        assert clamp(7, 0, 10) == 7
        assert clamp(1_000_000, 0) == 1_000_000


class TestHold:
    def test_steps_immediately_then_after_arming_delay(self, scheduler):
        counter = Counter()
        controller = make_controller(scheduler, counter)

        controller.start_hold(1)
        assert counter.emitted == [1]
        assert controller.state == "holding"

        scheduler.advance(ARMING_DELAY_MS - 1)
        assert counter.emitted == [1]

        scheduler.advance(1)
        assert counter.emitted == [1, 2]

        scheduler.advance(180)
        assert counter.emitted == [1, 2, 3]

    def test_steps_grow_and_intervals_shrink_while_held(self, scheduler):
        counter = Counter()
        controller = make_controller(scheduler, counter)

        controller.start_hold(1)
        scheduler.advance(4000)
        controller.stop_hold()

        values = [0, *counter.emitted]
        steps = [b - a for a, b in zip(values, values[1:])]
        assert set(steps) == {1, 2, 5, 10}
        assert steps == sorted(steps)

    def test_release_cancels_pending_repeat(self, scheduler):
        counter = Counter()
        controller = make_controller(scheduler, counter)

        controller.start_hold(1)
        scheduler.advance(ARMING_DELAY_MS)
        controller.stop_hold()
        emitted = list(counter.emitted)

        scheduler.advance(5000)

        assert counter.emitted == emitted
        assert controller.state == "idle"
        assert scheduler.pending == 0

    def test_restarting_hold_resets_acceleration(self, scheduler):
        counter = Counter()
        controller = make_controller(scheduler, counter)

        controller.start_hold(1)
        scheduler.advance(3000)
        controller.start_hold(-1)
        before = counter.value
        scheduler.advance(ARMING_DELAY_MS)

        assert counter.value == before - 1
        assert scheduler.pending == 1

    def test_never_steps_past_bounds(self, scheduler):
        counter = Counter(3)
        controller = make_controller(scheduler, counter, minimum=0, maximum=5)

        controller.start_hold(1)
        scheduler.advance(4000)
        controller.stop_hold()

        assert counter.value == 5
        assert all(0 <= v <= 5 for v in counter.emitted)
        assert counter.emitted[-1] == 5
        assert counter.emitted.count(5) == 1

    def test_step_down_at_minimum_emits_nothing(self, scheduler):
        counter = Counter(0)
        controller = make_controller(scheduler, counter)

        controller.press(-1)
        controller.start_hold(-1)
        scheduler.advance(1000)

        assert counter.emitted == []

    def test_hold_degrades_to_single_press(self, scheduler):
        counter = Counter()
        controller = make_controller(scheduler, counter, supports_hold=False)

        controller.start_hold(1)
        scheduler.advance(2000)

        assert counter.emitted == [1]
        assert controller.state == "idle"
        assert scheduler.pending == 0

    def test_disabled_controller_ignores_input(self, scheduler):
        counter = Counter()
        controller = make_controller(scheduler, counter)
        controller.disabled = True

        controller.press(1)
        controller.start_hold(1)
        scheduler.advance(1000)

        assert counter.emitted == []


class TestManualEdit:
    def test_commit_floors_and_clamps(self, scheduler):
        counter = Counter(2)
        controller = make_controller(scheduler, counter, maximum=10)

        controller.begin_edit()
        assert controller.draft == "2"
        controller.set_draft("7.9")
        assert controller.commit_edit() == 7

        controller.set_draft("42")
        assert controller.commit_edit() == 10

        controller.set_draft("-3")
        assert controller.commit_edit() == 0

        assert counter.emitted == [7, 10, 0]
        assert not controller.editing

    @pytest.mark.parametrize("draft", ["abc", "inf", "nan"])
    def test_invalid_draft_is_discarded(self, scheduler, draft):
        counter = Counter(4)
        controller = make_controller(scheduler, counter)

        controller.set_draft(draft)

        assert controller.commit_edit() is None
        assert counter.emitted == []
        assert counter.value == 4

    @pytest.mark.parametrize("draft", ["", "   "])
    def test_blank_draft_commits_zero(self, scheduler, draft):
        counter = Counter(4)
        controller = make_controller(scheduler, counter)

        controller.set_draft(draft)

        assert controller.commit_edit() == 0
        assert counter.emitted == [0]
        assert counter.value == 0

    def test_unchanged_value_emits_nothing(self, scheduler):
        counter = Counter(4)
        controller = make_controller(scheduler, counter)

        controller.set_draft("4")

        assert controller.commit_edit() == 4
        assert counter.emitted == []

    def test_cancel_discards_draft(self, scheduler):
        counter = Counter(4)
        controller = make_controller(scheduler, counter)

        controller.set_draft("9")
        controller.cancel_edit()

        assert controller.commit_edit() is None
        assert counter.emitted == []

    @pytest.mark.asyncio
    async def test_awaitable_changes_are_scheduled(self, scheduler):
        received = []

        async def on_change(value: int) -> None:
            received.append(value)

        controller = SteppedInputController(lambda: 0, on_change, scheduler=scheduler)
        controller.press(1)
        assert received == []

        await asyncio.sleep(0)
        assert received == [1]

    def test_close_ends_hold_and_edit(self, scheduler):
        counter = Counter()
        controller = make_controller(scheduler, counter)

        controller.start_hold(1)
        controller.set_draft("9")
        controller.close()
        scheduler.advance(1000)

        assert counter.emitted == [1]
        assert not controller.editing
        assert controller.state == "idle"
