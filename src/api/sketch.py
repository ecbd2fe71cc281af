"""
どこで: `api.sketch`（実行ランナーの高レベル入口）。
何を: スケッチソースを受け取り、パラメータ解決 → 文脈/コンパイラ/時計/ランナーの結線 →
      読み込み → 開始までを 1 呼び出しで行う `run_sketch` を提供。
なぜ: 少ない記述で決定的なスケッチ実行（同じシード + 同じ値で同じ絵）を始められるようにするため。

実行フロー（概要）:
1) ロギング: `setup_default_logging(SKS_LOG_LEVEL)`（既存設定があれば何もしない）。
2) 設定解決: 引数 > `util.utils.load_config()`（`animation` / `runtime` 節）> 既定値。
3) パラメータ: `@param` 注釈を解析し、`values`（素の値でも可）を照合して現在値を決める。
4) 結線: `ExecutionContext(seed)`・`SourceCompiler`・`AnimationClock`・モード別ランナー。
   スケジューラ未指定時は `PygletScheduler(fps)`。
5) 読み込み: 失敗しても例外は投げず `on_error` へ通知（`runner.last_error` でも参照可）。
6) 開始: `init_only=False` なら `runner.start()`。`block=True` なら `pyglet.app.run()` を回し、
   終了時に `runner.close()`。

例（最小スケッチ）:
    from api import run_sketch

    SOURCE = '''
    # @param {number} size - Circle size [min=1, max=100, default=40]
    size = 40

    def draw(surface):
        r = size * (0.5 + 0.5 * animateSin())
        surface.circle(randomRange(0, 400), randomRange(0, 400), r)
    '''

    runner = run_sketch(SOURCE, surface=my_surface, seed="abc", duration=2.0, fps=30)

注意:
- スケッチは Python で書き、束縛名（`random` / `animateTime` など）と組込みのみが見える。
- `values` に含まれていても `@param` で宣言されていない名前は無視される。
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Mapping

from common.logging import setup_default_logging
from common.settings import get as get_settings
from engine.compiler import SketchMode, SourceCompiler
from engine.core import AnimationClock, FrameScheduler, PygletScheduler
from engine.params import ParameterDirectory, ParameterValue
from engine.runtime import Canvas2DRunner, ExecutionContext, Scene3DRunner, SketchRunner
from engine.runtime.runner import ErrorCallback, FrameCallback
from util.utils import load_config

from .sketch_runner.utils import resolve_fps, resolve_seed, resolve_timeline

logger = logging.getLogger(__name__)


def run_sketch(
    source: str,
    *,
    mode: SketchMode | str = SketchMode.CANVAS2D,
    seed: str | None = None,
    values: Mapping[str, ParameterValue | Any] | None = None,
    surface: Any = None,
    scene: Any = None,
    camera: Any = None,
    renderer: Any = None,
    render: Callable[[Any, Any], Any] | None = None,
    duration: float | None = None,
    fps: int | None = None,
    loop: bool | None = None,
    easing: str | None = None,
    scheduler: FrameScheduler | None = None,
    compiler: SourceCompiler | None = None,
    on_error: ErrorCallback | None = None,
    on_frame: FrameCallback | None = None,
    animate: bool = True,
    init_only: bool = False,
    block: bool = False,
) -> SketchRunner:
    """スケッチを読み込み、（`init_only` でなければ）フレームループを開始してランナーを返す。

    引数:
        source: スケッチのソース（Python）。
        mode: `canvas2d`（別名 `p5`/`2d`）または `scene3d`（別名 `three`/`3d`）。
        seed: シード文字列。None なら構成の `runtime.seed`、それも無ければ新規生成。
        values: パラメータ現在値（`ParameterValue` または素の値）。
        surface: Canvas2D の描画面（`setup(surface)` / `draw(surface)` に渡す）。
        scene, camera, renderer, render: Scene3D のバックエンド一式。
        duration, fps, loop, easing: アニメーション時計の設定（None は構成 → 既定）。
        scheduler: フレーム予約。None なら `PygletScheduler(fps)`。
        compiler: 共有する `SourceCompiler`（Artifact キャッシュを使い回す場合）。
        on_error: `CompileError` / `SketchRuntimeError` の通知先。
        on_frame: フレーム描画後に描画済みフレーム数で呼ばれる。
        animate: False で時計を作らない（animate 系は常に 0）。
        init_only: True で読み込みまで行い、開始しない。
        block: True で `pyglet.app.run()` を回し、戻ったらランナーを閉じる。
    """
    settings = get_settings()
    setup_default_logging(settings.LOG_LEVEL)

    cfg = load_config()
    sketch_mode = SketchMode.parse(mode)
    fps_val = resolve_fps(fps, config=cfg)
    duration_val, loop_val, easing_name = resolve_timeline(
        duration=duration, loop=loop, easing=easing, config=cfg
    )
    seed_val = resolve_seed(seed, config=cfg)

    directory = ParameterDirectory()
    current = directory.resolve(source, values)

    if scheduler is None:
        scheduler = PygletScheduler(fps_val)
    clock = (
        AnimationClock(scheduler, duration_val, fps_val, loop_val, easing_name)
        if animate
        else None
    )
    context = ExecutionContext(seed_val, clock)
    if compiler is None:
        compiler = SourceCompiler()

    runner: SketchRunner
    if sketch_mode is SketchMode.SCENE3D:
        runner = Scene3DRunner(
            context,
            compiler,
            scheduler,
            scene,
            camera,
            renderer,
            clock=clock,
            on_error=on_error,
            on_frame=on_frame,
            render=render,
        )
    else:
        runner = Canvas2DRunner(
            context,
            compiler,
            scheduler,
            surface,
            clock=clock,
            on_error=on_error,
            on_frame=on_frame,
        )

    logger.info(
        "run_sketch: mode=%s seed=%s duration=%s fps=%s loop=%s easing=%s params=%d",
        sketch_mode.value,
        context.seed,
        duration_val,
        fps_val,
        loop_val,
        easing_name,
        len(current),
    )
    runner.load(source, current)
    if init_only:
        return runner

    runner.start()
    if block:
        import pyglet

        try:
            pyglet.app.run()
        finally:
            runner.close()
    return runner


def run_sketch_file(path: str | Path, **kwargs: Any) -> SketchRunner:
    """ファイルからソースを読み込んで `run_sketch` を呼ぶ。"""
    source = Path(path).read_text(encoding="utf-8")
    return run_sketch(source, **kwargs)


__all__ = ["run_sketch", "run_sketch_file"]
