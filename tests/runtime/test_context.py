from __future__ import annotations

import math

import pytest

from engine.compiler import SourceCompiler
from engine.core import AnimationClock, ManualScheduler, SeededStream, Tick
from engine.runtime import ExecutionContext


def _tick(t: float, frame: int = 0) -> Tick:
    return Tick(normalized_time=t, raw_fraction=t, elapsed=t, frame=frame)


def test_animate_values_before_any_tick_are_zero(context: ExecutionContext) -> None:
    assert context.animate_time() == 0.0
    assert context.animate_frame() == 0
    assert context.animate_value(3.0, 9.0) == 3.0
    assert context.animate_sin() == 0.0
    assert context.animate_cos(amplitude=2.0, offset=1.0) == pytest.approx(3.0)


def test_animate_values_follow_latest_tick(context: ExecutionContext) -> None:
    context.observe_tick(_tick(0.25, frame=12))
    assert context.animate_time() == 0.25
    assert context.animate_frame() == 12
    assert context.animate_value(0.0, 8.0) == pytest.approx(2.0)
    assert context.animate_sin() == pytest.approx(1.0)
    assert context.animate_cos(2.0, 3.0, 1.0) == pytest.approx(1.0 + 3.0 * math.cos(math.pi))
    context.observe_tick(_tick(0.5))
    assert context.animate_value(0.0, 8.0) == pytest.approx(4.0)


def test_attached_clock_last_tick_is_used_without_observer() -> None:
    sched = ManualScheduler(frame_interval=0.25)
    clock = AnimationClock(sched, duration=1.0)
    ctx = ExecutionContext("abc", clock)
    clock.play()
    sched.advance()
    assert ctx.animate_time() == 0.25
    assert ctx.clock is clock


def test_begin_frame_replays_same_draws(context: ExecutionContext) -> None:
    context.begin_frame()
    first = [context.random() for _ in range(5)]
    context.begin_frame()
    assert [context.random() for _ in range(5)] == first
    fresh = SeededStream("abc")
    assert [fresh.random() for _ in range(5)] == first


def test_set_seed_is_seen_by_already_bound_functions(context: ExecutionContext) -> None:
    bindings = context.bindings()
    before = bindings["random"]()
    context.set_seed("other")
    assert context.seed == "other"
    assert bindings["random"]() == SeededStream("other").random()
    assert before == SeededStream("abc").random()


def test_bindings_delegate_to_stream(context: ExecutionContext) -> None:
    b = context.bindings()
    assert 2 <= b["randomRange"](2, 3) < 3
    assert b["randomInt"](4, 4) == 4
    assert b["choice"](["z"]) == "z"
    assert sorted(b["shuffle"]([3, 1, 2])) == [1, 2, 3]


def test_bindings_scene_namespace_only_in_scene_mode(context: ExecutionContext) -> None:
    marker = object()
    assert "three" not in context.bindings("canvas2d", scene_namespace=marker)
    assert "three" not in context.bindings("scene3d")
    assert context.bindings("scene3d", scene_namespace=marker)["three"] is marker


def test_load_resets_stream_before_top_level(compiler: SourceCompiler) -> None:
    ctx = ExecutionContext("abc")
    ctx.random()
    ctx.random()
    artifact = compiler.compile(
        "first = random()\n\ndef draw(surface):\n    surface.append(first)\n"
    )
    program = ctx.load(artifact)
    seen: list = []
    program(seen).draw()
    assert seen == [SeededStream("abc").random()]


def test_try_load_reports_top_level_error(compiler: SourceCompiler, context: ExecutionContext) -> None:
    result = context.try_load(compiler.compile("raise RuntimeError('nope')\n"))
    assert not result.ok
    assert result.program is None
    assert result.error.line == 1
    assert "nope" in str(result.error)
