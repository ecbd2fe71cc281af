from __future__ import annotations

from typing import Any

import pytest

from engine.compiler import CompileError, SketchRuntimeError, SourceCompiler
from engine.core import AnimationClock, ClockState, ManualScheduler
from engine.runtime import Canvas2DRunner, ExecutionContext, Scene3DRunner

# What this tests
# - 1 フレーム内の順序（tick → 乱数リセット → draw）と決定性
# - 読み込み失敗時に直前のプログラムを保持し、エラーを通知する
# - 実行時エラーでループが止まる / close の冪等性 / Scene3D の teardown


def _runner(
    sched: ManualScheduler,
    surface: Any,
    *,
    clock: AnimationClock | None = None,
    errors: list | None = None,
    frames: list | None = None,
) -> Canvas2DRunner:
    return Canvas2DRunner(
        ExecutionContext("abc"),
        SourceCompiler(cache_maxsize=4),
        sched,
        surface,
        clock=clock,
        on_error=errors.append if errors is not None else None,
        on_frame=frames.append if frames is not None else None,
    )


def test_setup_once_then_identical_draws_each_frame(scheduler, surface, dots_sketch) -> None:
    frames: list[int] = []
    runner = _runner(scheduler, surface, frames=frames)
    assert runner.load(dots_sketch) is None
    runner.start()
    scheduler.run_frames(3)

    names = surface.names()
    assert names.count("background") == 1
    assert names[0] == "background"
    dots = [args for name, args in surface.calls if name == "dot"]
    assert len(dots) == 9
    assert dots[0:3] == dots[3:6] == dots[6:9]
    assert dots[0][2] == "#ff0000"
    assert frames == [1, 2, 3]


def test_values_are_injected_before_load(scheduler, surface, dots_sketch) -> None:
    runner = _runner(scheduler, surface)
    runner.load(dots_sketch, {"count": 1, "tint": "#00ff00"})
    runner.start()
    scheduler.advance()
    dots = [args for name, args in surface.calls if name == "dot"]
    assert len(dots) == 1
    assert dots[0][2] == "#00ff00"


def test_tick_precedes_reset_and_draw_within_a_frame(surface) -> None:
    sched = ManualScheduler(frame_interval=0.125)
    clock = AnimationClock(sched, duration=1.0, fps=8)
    runner = _runner(sched, surface, clock=clock)
    runner.load("def draw(surface):\n    surface.mark(animateFrame(), animateTime(), random())\n")
    runner.start()
    assert clock.state is ClockState.PLAYING

    sched.run_frames(3)
    marks = [args for name, args in surface.calls if name == "mark"]
    assert [m[0] for m in marks] == [1, 2, 3]
    assert [m[1] for m in marks] == [0.125, 0.25, 0.375]
    assert len({m[2] for m in marks}) == 1


def test_failed_reload_keeps_previous_program(
    scheduler, surface, dots_sketch, broken_syntax_sketch
) -> None:
    errors: list = []
    runner = _runner(scheduler, surface, errors=errors)
    runner.load(dots_sketch)
    runner.start()
    scheduler.advance()
    artifact = runner.artifact

    err = runner.load(broken_syntax_sketch)
    assert isinstance(err, CompileError)
    assert errors == [err]
    assert runner.last_error is err
    assert runner.artifact is artifact

    before = len(surface.calls)
    scheduler.advance()
    assert len(surface.calls) == before + 3
    assert runner.is_running


def test_nothing_renders_until_a_program_loads(
    scheduler, surface, top_level_error_sketch, dots_sketch
) -> None:
    errors: list = []
    runner = _runner(scheduler, surface, errors=errors)
    err = runner.load(top_level_error_sketch)
    assert err is not None and err.line == 3
    runner.start()
    scheduler.run_frames(2)
    assert surface.calls == []

    assert runner.load(dots_sketch) is None
    assert runner.last_error is None
    scheduler.advance()
    assert surface.names()[0] == "background"


def test_runtime_error_is_reported_and_halts_loop(surface, draw_error_sketch) -> None:
    sched = ManualScheduler(frame_interval=0.125)
    clock = AnimationClock(sched, duration=10.0, fps=4)
    errors: list = []
    runner = _runner(sched, surface, clock=clock, errors=errors)
    runner.load(draw_error_sketch)
    runner.start()
    sched.run_frames(5)

    assert len(errors) == 1
    err = errors[0]
    assert isinstance(err, SketchRuntimeError)
    assert err.line == 4
    assert err.frame == 1
    assert isinstance(err.original, ValueError)
    assert not runner.is_running
    assert clock.state is ClockState.PAUSED
    assert sched.pending_count == 0
    assert surface.calls == [("mark", (0,)), ("mark", (1,))]


def test_pause_and_resume(scheduler, surface, dots_sketch) -> None:
    clock = AnimationClock(scheduler, duration=2.0)
    runner = _runner(scheduler, surface, clock=clock)
    runner.load(dots_sketch)
    runner.start()
    scheduler.advance()
    runner.pause()
    assert clock.is_paused
    assert scheduler.pending_count == 0
    calls = len(surface.calls)
    scheduler.run_frames(3)
    assert len(surface.calls) == calls

    runner.resume()
    assert clock.is_playing
    scheduler.advance()
    assert len(surface.calls) == calls + 3


def test_close_is_idempotent_and_cancels_everything(scheduler, surface, dots_sketch) -> None:
    clock = AnimationClock(scheduler, duration=1.0)
    runner = _runner(scheduler, surface, clock=clock)
    runner.load(dots_sketch)
    runner.start()
    scheduler.advance()
    runner.close()
    runner.close()

    assert runner.is_closed
    assert scheduler.pending_count == 0
    assert clock.state is ClockState.IDLE
    assert runner.context.animate_time() == 0.0
    with pytest.raises(RuntimeError):
        runner.start()
    with pytest.raises(RuntimeError):
        runner.load(dots_sketch)


class _Renderer:
    def __init__(self) -> None:
        self.rendered: list[tuple[Any, Any]] = []

    def render(self, scene: Any, camera: Any) -> None:
        self.rendered.append((scene, camera))


def test_scene3d_setup_render_reload_and_teardown(scheduler, scene_sketch) -> None:
    scene: list = []
    camera = object()
    renderer = _Renderer()
    runner = Scene3DRunner(
        ExecutionContext("abc"), SourceCompiler(), scheduler, scene, camera, renderer
    )
    assert runner.load(scene_sketch) is None
    runner.start()
    scheduler.run_frames(2)
    assert scene == [("mesh", True)]
    assert len(renderer.rendered) == 2
    assert renderer.rendered[0][1] is camera

    runner.load(scene_sketch)
    assert scene[-1] == ("teardown",)
    scheduler.advance()
    assert scene[-1] == ("mesh", True)

    runner.close()
    runner.close()
    assert scene.count(("teardown",)) == 2


def test_scene3d_custom_render_and_failing_teardown(scheduler) -> None:
    errors: list = []
    rendered: list = []
    runner = Scene3DRunner(
        ExecutionContext("abc"),
        SourceCompiler(),
        scheduler,
        scene=[],
        camera=None,
        renderer=None,
        on_error=errors.append,
        render=lambda scene, camera: rendered.append(scene),
    )
    runner.load(
        "def setup(scene, camera, renderer):\n"
        "    def teardown():\n"
        "        raise RuntimeError('teardown failed')\n"
        "    return teardown\n"
    )
    runner.start()
    scheduler.advance()
    assert rendered == [[]]
    runner.close()
    assert len(errors) == 1
    assert isinstance(errors[0], SketchRuntimeError)
    assert errors[0].line == 3


def test_setup_runs_again_after_it_failed(scheduler, surface) -> None:
    errors: list = []
    runner = _runner(scheduler, surface, errors=errors)
    runner.load(
        "attempts = []\n"
        "\n"
        "def setup(surface):\n"
        "    attempts.append(1)\n"
        "    if len(attempts) == 1:\n"
        "        raise ValueError('first setup fails')\n"
        "    surface.background(0)\n"
        "\n"
        "def draw(surface):\n"
        "    surface.mark(len(attempts))\n"
    )
    runner.start()
    scheduler.advance()
    assert len(errors) == 1
    assert errors[0].line == 6
    assert not runner.is_running
    assert surface.calls == []

    runner.start()
    scheduler.run_frames(2)
    assert surface.calls == [("background", (0,)), ("mark", (2,)), ("mark", (2,))]
