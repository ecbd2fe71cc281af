"""
どこで: `engine.runtime.runner`
何を: コンパイル → 束縛 → フレームループ駆動を担うバックエンド非依存のランナー
      （`Canvas2DRunner` / `Scene3DRunner`）。
なぜ: 構文/評価/実行時のエラーをこの層で回収して `on_error` へ通知し、
      ホストを止めずに直前の正常なプログラムを描き続けるため。

フレームの順序（1 フレーム内）:
1) 時計の tick（`start()` で時計を先に再生するため、FIFO のスケジューラでは常に先）
2) `context.begin_frame()`（乱数ストリームをリセット）
3) 初回のみ setup、続いて毎フレームのフック（draw / render）

エラー方針:
- `load()` の失敗は `CompileError` を通知して返す。読み込み済みのプログラムはそのまま。
- フレーム中の例外は `SketchRuntimeError` に包んで通知し、ループを止める（時計は一時停止）。
  `start()` で再開できる。
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, ClassVar, Mapping, Union

from ..compiler.compiler import Artifact, SourceCompiler
from ..compiler.errors import CompileError, SketchRuntimeError
from ..compiler.harness import Program, Scene3DProgram, SketchHooks, SketchMode
from ..core.animation_clock import AnimationClock
from ..core.scheduler import CancelToken, FrameScheduler
from ..params.schema import ParameterValue
from .context import ExecutionContext

logger = logging.getLogger(__name__)

SketchError = Union[CompileError, SketchRuntimeError]
ErrorCallback = Callable[[SketchError], None]
FrameCallback = Callable[[int], None]


class SketchRunner(ABC):
    """フレームループの共通部分。モード固有の処理はサブクラスが実装する。"""

    mode: ClassVar[SketchMode]

    def __init__(
        self,
        context: ExecutionContext,
        compiler: SourceCompiler,
        scheduler: FrameScheduler,
        clock: AnimationClock | None = None,
        on_error: ErrorCallback | None = None,
        on_frame: FrameCallback | None = None,
    ) -> None:
        self._context = context
        self._compiler = compiler
        self._scheduler = scheduler
        self._clock = clock
        self._on_error = on_error
        self._on_frame = on_frame
        if clock is not None:
            context.attach_clock(clock)

        self._artifact: Artifact | None = None
        self._program: Program | None = None
        self._needs_setup = False
        self._token: CancelToken | None = None
        self._running = False
        self._closed = False
        self._frame_count = 0
        self._last_error: SketchError | None = None

    # ---- 状態 -------------------------------------------------------------
    @property
    def context(self) -> ExecutionContext:
        return self._context

    @property
    def clock(self) -> AnimationClock | None:
        return self._clock

    @property
    def artifact(self) -> Artifact | None:
        return self._artifact

    @property
    def program(self) -> Program | None:
        return self._program

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def frame_count(self) -> int:
        return self._frame_count

    @property
    def last_error(self) -> SketchError | None:
        return self._last_error

    # ---- 読み込み ---------------------------------------------------------
    def load(
        self, source: str, values: Mapping[str, ParameterValue | Any] | None = None
    ) -> CompileError | None:
        """ソースをコンパイルして束縛する。失敗時はエラーを通知して返す（例外は投げない）。"""
        if self._closed:
            raise RuntimeError("runner is closed")
        result = self._compiler.try_compile(source, values, self.mode)
        if result.error is not None:
            self._report(result.error)
            return result.error
        assert result.artifact is not None
        loaded = self._context.try_load(result.artifact)
        if loaded.error is not None:
            self._report(loaded.error)
            return loaded.error
        assert loaded.program is not None
        self._install(result.artifact, loaded.program)
        self._last_error = None
        logger.debug("sketch loaded (%s)", self.mode.value)
        return None

    def _install(self, artifact: Artifact, program: Program) -> None:
        self._artifact = artifact
        self._program = program
        self._needs_setup = True
        self._adopt(program)

    # ---- ループ制御 -------------------------------------------------------
    def start(self) -> None:
        """時計を再生（一時停止中なら再開）してから最初のフレームを予約する。"""
        if self._closed:
            raise RuntimeError("runner is closed")
        if self._running:
            return
        self._running = True
        clock = self._clock
        if clock is not None:
            if clock.is_paused:
                clock.resume()
            elif not clock.is_playing:
                clock.play(self._context.observe_tick)
        self._token = self._scheduler.schedule_next_frame(self._frame)

    def pause(self) -> None:
        if not self._running:
            return
        self._halt()

    def resume(self) -> None:
        self.start()

    def close(self) -> None:
        """予約をすべて取り消し、時計を止め、後始末を呼ぶ（冪等）。"""
        if self._closed:
            return
        self._closed = True
        self._running = False
        self._cancel_token()
        if self._clock is not None:
            self._clock.stop()
        self._dispose()
        self._context.observe_tick(None)
        logger.debug("runner closed (%s)", self.mode.value)

    def _halt(self) -> None:
        self._running = False
        self._cancel_token()
        if self._clock is not None and self._clock.is_playing:
            self._clock.pause()

    def _cancel_token(self) -> None:
        token, self._token = self._token, None
        if token is not None:
            token.cancel()

    def _frame(self, _now: float) -> None:
        self._token = None
        if not self._running or self._program is None:
            if self._running:
                self._token = self._scheduler.schedule_next_frame(self._frame)
            return
        try:
            if self._needs_setup:
                self._context.begin_frame()
                self._run_setup()
                self._needs_setup = False
            self._context.begin_frame()
            self._render_frame()
        except Exception as exc:
            artifact = self._artifact
            error = SketchRuntimeError.from_exception(
                exc,
                source=artifact.source if artifact is not None else None,
                frame=self._frame_count,
                line_offset=artifact.harness.line_offset if artifact is not None else 0,
            )
            self._halt()
            self._report(error)
            return
        self._frame_count += 1
        if self._on_frame is not None:
            self._on_frame(self._frame_count)
        if self._running:
            self._token = self._scheduler.schedule_next_frame(self._frame)

    def _report(self, error: SketchError) -> None:
        self._last_error = error
        logger.warning("sketch error: %s", error)
        if self._on_error is not None:
            self._on_error(error)

    # ---- モード固有 -------------------------------------------------------
    @abstractmethod
    def _adopt(self, program: Program) -> None:
        """新しいプログラムへ切り替える（前プログラムの後始末を含む）。"""

    @abstractmethod
    def _run_setup(self) -> None: ...

    @abstractmethod
    def _render_frame(self) -> None: ...

    def _dispose(self) -> None:
        """終了時の後始末。既定では何もしない。"""


class Canvas2DRunner(SketchRunner):
    mode = SketchMode.CANVAS2D

    def __init__(
        self,
        context: ExecutionContext,
        compiler: SourceCompiler,
        scheduler: FrameScheduler,
        surface: Any,
        clock: AnimationClock | None = None,
        on_error: ErrorCallback | None = None,
        on_frame: FrameCallback | None = None,
    ) -> None:
        super().__init__(context, compiler, scheduler, clock, on_error, on_frame)
        self._surface = surface
        self._hooks = SketchHooks()

    @property
    def surface(self) -> Any:
        return self._surface

    @property
    def hooks(self) -> SketchHooks:
        return self._hooks

    def _adopt(self, program: Program) -> None:
        self._hooks = program(self._surface)  # type: ignore[call-arg]

    def _run_setup(self) -> None:
        if self._hooks.setup is not None:
            self._hooks.setup()

    def _render_frame(self) -> None:
        if self._hooks.draw is not None:
            self._hooks.draw()


class Scene3DRunner(SketchRunner):
    """`render` 未指定時は毎フレーム `renderer.render(scene, camera)` を試みる。"""

    mode = SketchMode.SCENE3D

    def __init__(
        self,
        context: ExecutionContext,
        compiler: SourceCompiler,
        scheduler: FrameScheduler,
        scene: Any,
        camera: Any,
        renderer: Any,
        clock: AnimationClock | None = None,
        on_error: ErrorCallback | None = None,
        on_frame: FrameCallback | None = None,
        render: Callable[[Any, Any], Any] | None = None,
    ) -> None:
        super().__init__(context, compiler, scheduler, clock, on_error, on_frame)
        self._scene = scene
        self._camera = camera
        self._renderer = renderer
        self._render = render
        self._teardown: Callable[[], Any] | None = None

    @property
    def scene(self) -> Any:
        return self._scene

    def _adopt(self, program: Program) -> None:
        self._dispose()

    def _run_setup(self) -> None:
        program = self._program
        if isinstance(program, Scene3DProgram):
            self._teardown = program(self._scene, self._camera, self._renderer)

    def _render_frame(self) -> None:
        render = self._render
        if render is None:
            render = getattr(self._renderer, "render", None)
        if callable(render):
            render(self._scene, self._camera)

    def _dispose(self) -> None:
        teardown, self._teardown = self._teardown, None
        if teardown is None:
            return
        try:
            teardown()
        except Exception as exc:
            artifact = self._artifact
            error = SketchRuntimeError.from_exception(
                exc,
                source=artifact.source if artifact is not None else None,
                frame=self._frame_count,
            )
            self._report(error)


__all__ = ["SketchRunner", "Canvas2DRunner", "Scene3DRunner", "SketchError"]
