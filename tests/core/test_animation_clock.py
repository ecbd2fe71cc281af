from __future__ import annotations

import pytest

from engine.core.animation_clock import AnimationClock, ClockState, ClockStateError, Tick
from engine.core.scheduler import ManualScheduler
from engine.runtime.context import ExecutionContext

# What this tests
# - 状態遷移（IDLE/PLAYING/PAUSED）と不正遷移の ClockStateError
# - 非ループの自動停止、seek_to、ループ時のフレーム連続性
# - 予約は常に高々 1 件


def _clock(sched: ManualScheduler, **kw) -> AnimationClock:
    kw.setdefault("duration", 1.0)
    kw.setdefault("fps", 60)
    return AnimationClock(sched, **kw)


def test_non_loop_clock_auto_enters_idle_and_stops_ticking() -> None:
    sched = ManualScheduler(frame_interval=0.25)
    clock = _clock(sched, loop=False)
    ticks: list[Tick] = []
    clock.play(ticks.append)

    sched.run_frames(4)
    assert clock.state is ClockState.IDLE
    assert [t.raw_fraction for t in ticks] == [0.25, 0.5, 0.75, 1.0]
    assert ticks[-1].normalized_time == 1.0
    assert clock.has_pending_callback is False

    sched.run_frames(5)
    assert len(ticks) == 4
    assert sched.pending_count == 0


def test_seek_then_immediate_tick_is_near_target() -> None:
    sched = ManualScheduler(frame_interval=1 / 60)
    clock = _clock(sched, duration=2.0, fps=30)
    ticks: list[Tick] = []
    clock.play(ticks.append)
    sched.advance(0.25)

    clock.seek_to(0.5)
    sched.advance()
    assert ticks[-1].normalized_time == pytest.approx(0.5, abs=1 / 60)


def test_seek_rejects_out_of_range() -> None:
    clock = _clock(ManualScheduler())
    with pytest.raises(ValueError):
        clock.seek_to(1.0)
    with pytest.raises(ValueError):
        clock.seek_to(-0.1)


def test_play_pause_resume_stop_with_seeded_context() -> None:
    sched = ManualScheduler(frame_interval=1 / 30)
    clock = AnimationClock(sched, duration=2.0, fps=30)
    ctx = ExecutionContext("abc", clock)
    clock.play(ctx.observe_tick)

    sched.run_frames(30)
    assert ctx.animate_time() == pytest.approx(0.5, abs=1 / 30)
    assert ctx.seed == "abc"

    clock.pause()
    assert clock.state is ClockState.PAUSED
    assert clock.cursor_epoch == sched.now()
    frozen = ctx.animate_time()
    sched.run_frames(10)
    assert ctx.animate_time() == frozen

    start_before = clock.start_epoch
    paused_for = sched.now() - clock.cursor_epoch
    clock.resume()
    assert clock.state is ClockState.PLAYING
    assert clock.cursor_epoch is None
    assert clock.start_epoch == pytest.approx(start_before + paused_for)

    sched.advance()
    assert ctx.animate_time() == pytest.approx(frozen + (1 / 30) / 2.0, abs=1e-9)

    clock.stop()
    assert clock.state is ClockState.IDLE
    assert clock.cursor_epoch is None
    assert clock.start_epoch is None
    assert clock.last_tick is None
    assert sched.pending_count == 0


def test_illegal_transitions_raise() -> None:
    clock = _clock(ManualScheduler())
    with pytest.raises(ClockStateError):
        clock.pause()
    with pytest.raises(ClockStateError):
        clock.resume()
    clock.play()
    with pytest.raises(ClockStateError):
        clock.resume()


def test_play_while_playing_keeps_single_pending_callback() -> None:
    sched = ManualScheduler()
    clock = _clock(sched)
    clock.play()
    clock.play()
    assert sched.pending_count == 1
    clock.pause()
    clock.resume()
    assert sched.pending_count == 1


def test_play_from_paused_behaves_like_resume() -> None:
    sched = ManualScheduler(frame_interval=0.25)
    clock = _clock(sched)
    clock.play()
    sched.advance()
    clock.pause()
    clock.play()
    assert clock.state is ClockState.PLAYING
    assert sched.pending_count == 1


def test_loop_wraps_time_and_frames_keep_counting() -> None:
    sched = ManualScheduler(frame_interval=0.25)
    clock = _clock(sched, loop=True)
    ticks: list[Tick] = []
    clock.play(ticks.append)
    sched.run_frames(6)
    assert [t.raw_fraction for t in ticks] == [0.25, 0.5, 0.75, 0.0, 0.25, 0.5]
    assert [t.frame for t in ticks] == [15, 30, 45, 60, 75, 90]
    assert clock.state is ClockState.PLAYING


def test_easing_shapes_normalized_time_only() -> None:
    sched = ManualScheduler(frame_interval=0.5)
    clock = _clock(sched, easing="easeInQuad")
    ticks: list[Tick] = []
    clock.play(ticks.append)
    sched.advance()
    assert ticks[0].raw_fraction == 0.5
    assert ticks[0].normalized_time == pytest.approx(0.25)
    assert clock.easing == "easeInQuad"


def test_stop_from_on_tick_leaves_nothing_scheduled() -> None:
    sched = ManualScheduler()
    clock = _clock(sched)
    clock.play(lambda _t: clock.stop())
    sched.advance()
    assert clock.state is ClockState.IDLE
    assert sched.pending_count == 0


def test_constructor_and_setters_validate() -> None:
    sched = ManualScheduler()
    with pytest.raises(ValueError):
        AnimationClock(sched, duration=0)
    with pytest.raises(ValueError):
        AnimationClock(sched, duration=1, fps=-1)
    with pytest.raises(KeyError):
        AnimationClock(sched, duration=1, easing="no_such_easing")
    clock = _clock(sched)
    with pytest.raises(ValueError):
        clock.duration = -2


def test_total_frames_and_snapshot() -> None:
    sched = ManualScheduler()
    clock = AnimationClock(sched, duration=2.0, fps=30, loop=False, easing="bounce")
    assert clock.total_frames == 60
    snap = clock.snapshot()
    assert snap.playing is False and snap.paused is False
    assert (snap.duration, snap.fps, snap.loop, snap.easing) == (2.0, 30, False, "bounce")
    clock.play()
    assert clock.snapshot().playing is True
    assert clock.snapshot().start_epoch == sched.now()
