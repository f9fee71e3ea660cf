"""Tests for the countdown timer state machine."""

from __future__ import annotations

import asyncio

import pytest

from prodtimer.domain.errors import TimerStateError
from prodtimer.domain.timer import CountdownTimer, TimerBrief, TimerInfo, TimerSpec
from prodtimer.domain.timer_state import TimerState
from tests.conftest import FakeClock

DURATION_MS = 25 * 60 * 1000


def _timer(clock: FakeClock, **kwargs: object) -> CountdownTimer:
    return CountdownTimer(
        name="coding",
        duration_ms=DURATION_MS,
        clock=clock,
        wall_clock=lambda: 1_700_000_000.0,
        **kwargs,  # type: ignore[arg-type]
    )


class TestTimerSpec:
    @pytest.mark.parametrize(
        ("duration", "unit", "expected"),
        [(500, "ms", 500), (2, "s", 2000), (1.5, "m", 90_000), (1, "h", 3_600_000)],
    )
    def test_duration_ms(self, duration: float, unit: str, expected: int) -> None:
        assert TimerSpec(name="x", duration=duration, unit=unit).duration_ms() == expected

    def test_custom_second_length(self) -> None:
        assert TimerSpec(name="x", duration=2, unit="s").duration_ms(ms_in_one_second=10) == 20

    def test_rejects_extra_fields(self) -> None:
        with pytest.raises(Exception):
            TimerSpec(name="x", duration=1, colour="red")  # type: ignore[call-arg]

    @pytest.mark.parametrize("duration", [0, -5])
    def test_rejects_non_positive(self, duration: float) -> None:
        with pytest.raises(Exception):
            TimerSpec(name="x", duration=duration)


class TestConstruction:
    def test_initial_state(self, clock: FakeClock) -> None:
        timer = _timer(clock, description="deep work")
        info = timer.info()
        assert isinstance(info, TimerInfo)
        assert info.state == TimerState.CREATED
        assert info.elapsed_ms == 0
        assert info.remaining_ms == DURATION_MS
        assert info.started_at is None
        assert info.description == "deep work"

    def test_rejects_non_positive_duration(self, clock: FakeClock) -> None:
        with pytest.raises(ValueError, match="positive"):
            CountdownTimer(name="x", duration_ms=0, clock=clock)

    def test_from_spec(self, clock: FakeClock) -> None:
        spec = TimerSpec(name="tea", duration=3, unit="m", description="green")
        timer = CountdownTimer.from_spec(spec, clock=clock)
        assert (timer.name, timer.duration, timer.description) == ("tea", 180_000, "green")

    def test_brief_info(self, clock: FakeClock) -> None:
        brief = _timer(clock).info(brief=True)
        assert type(brief) is TimerBrief
        assert brief.model_dump() == {"name": "coding", "description": None, "duration": DURATION_MS}


class TestLifecycle:
    def test_start_then_pause_after_one_second(self, clock: FakeClock) -> None:
        timer = _timer(clock)
        started = timer.start()
        assert started.state == TimerState.RUNNING
        assert started.started_at == 1_700_000_000_000

        clock.advance(1000)
        paused = timer.pause()
        assert paused.state == TimerState.PAUSED
        assert paused.elapsed_ms == 1000
        assert paused.remaining_ms == DURATION_MS - 1000

    def test_paused_time_does_not_count(self, clock: FakeClock) -> None:
        timer = _timer(clock)
        timer.start()
        clock.advance(1000)
        timer.pause()
        clock.advance(60_000)
        assert timer.elapsed_ms == 1000
        timer.start()
        clock.advance(500)
        assert timer.elapsed_ms == 1500

    def test_resume_keeps_first_start_time(self, clock: FakeClock) -> None:
        timer = _timer(clock)
        first = timer.start()
        timer.pause()
        assert timer.start().started_at == first.started_at

    def test_elapsed_never_exceeds_duration(self, clock: FakeClock) -> None:
        timer = _timer(clock)
        timer.start()
        clock.advance(DURATION_MS * 2)
        assert timer.elapsed_ms == DURATION_MS
        assert timer.remaining_ms == 0

    def test_reset_returns_to_created(self, clock: FakeClock) -> None:
        timer = _timer(clock)
        timer.start()
        clock.advance(5000)
        info = timer.reset()
        assert info.state == TimerState.CREATED
        assert info.elapsed_ms == 0
        assert info.started_at is None

    def test_reset_from_created_is_allowed(self, clock: FakeClock) -> None:
        assert _timer(clock).reset().state == TimerState.CREATED

    def test_pause_from_created_rejected(self, clock: FakeClock) -> None:
        with pytest.raises(TimerStateError, match='Cannot pause a timer that is "CREATED"'):
            _timer(clock).pause()

    def test_double_start_rejected(self, clock: FakeClock) -> None:
        timer = _timer(clock)
        timer.start()
        with pytest.raises(TimerStateError) as exc_info:
            timer.start()
        assert exc_info.value.code == "INVALID_TRANSITION"


@pytest.mark.anyio
class TestEnding:
    async def test_end_runs_callback_once(self, clock: FakeClock) -> None:
        seen: list[TimerInfo] = []

        async def on_done(info: TimerInfo) -> None:
            seen.append(info)

        timer = _timer(clock, callback=on_done)
        timer.start()
        clock.advance(3000)
        info = await timer.end()

        assert info.state == TimerState.ENDED
        assert info.elapsed_ms == 3000
        assert seen == [info]

        with pytest.raises(TimerStateError):
            await timer.end()
        assert len(seen) == 1

    async def test_end_from_created_rejected(self, clock: FakeClock) -> None:
        with pytest.raises(TimerStateError):
            await _timer(clock).end()

    async def test_ended_is_terminal(self, clock: FakeClock) -> None:
        timer = _timer(clock)
        timer.start()
        await timer.end()
        for op in (timer.start, timer.pause, timer.reset):
            with pytest.raises(TimerStateError):
                op()

    async def test_natural_elapsation(self) -> None:
        seen: list[TimerInfo] = []

        async def on_done(info: TimerInfo) -> None:
            seen.append(info)

        timer = CountdownTimer(name="short", duration_ms=30, callback=on_done)
        timer.start()
        await asyncio.wait_for(timer.wait_ended(), timeout=2)

        assert timer.state == TimerState.ENDED
        assert len(seen) == 1
        assert seen[0].elapsed_ms == 30
        assert seen[0].remaining_ms == 0

    async def test_pause_cancels_elapsation(self) -> None:
        seen: list[TimerInfo] = []

        async def on_done(info: TimerInfo) -> None:
            seen.append(info)

        timer = CountdownTimer(name="short", duration_ms=30, callback=on_done)
        timer.start()
        timer.pause()
        await asyncio.sleep(0.08)
        assert timer.state == TimerState.PAUSED
        assert seen == []

    async def test_aclose_drops_pending_elapsation(self) -> None:
        timer = CountdownTimer(name="short", duration_ms=30)
        timer.start()
        await timer.aclose()
        await asyncio.sleep(0.08)
        assert timer.state == TimerState.RUNNING

    async def test_aclose_waits_for_completion(self) -> None:
        seen: list[str] = []

        async def slow_done(info: TimerInfo) -> None:
            await asyncio.sleep(0.02)
            seen.append(info.name)

        timer = CountdownTimer(name="short", duration_ms=10, callback=slow_done)
        timer.start()
        await asyncio.sleep(0.05)
        await timer.aclose()
        assert seen == ["short"]
