"""
どこで: `api` 入口（高レベル公開 API）。
何を: `run_sketch` と、実行時の主要な型（文脈・コンパイラ・時計・パラメータ）を再輸出。
なぜ: 利用者が単一名前空間からパラメータ解決 → コンパイル → 実行まで完結できるようにするため。

Usage:
    from api import run_sketch, ManualScheduler

    runner = run_sketch(source, surface=surface, seed="abc", scheduler=ManualScheduler())
    runner.context.animate_time()
"""

from common.easing import ANIMATION_PRESETS, animate_parameter, get_easing
from engine.compiler import (
    Artifact,
    CompileError,
    SketchHooks,
    SketchMode,
    SketchRuntimeError,
    SourceCompiler,
    format_error,
)
from engine.core import (
    AnimationClock,
    ClockState,
    ManualScheduler,
    PygletScheduler,
    SeededStream,
    Tick,
    generate_seed,
)
from engine.params import ParameterDirectory, ParameterSchema, ParameterValue, ParseError
from engine.runtime import Canvas2DRunner, ExecutionContext, Scene3DRunner, SketchRunner

# 主要API
from .sketch import run_sketch as run
from .sketch import run_sketch as run_sketch
from .sketch import run_sketch_file

__all__ = [
    # メインAPI
    "run_sketch",  # 実行（詳細指定）
    "run",  # 実行（エイリアス、簡易）
    "run_sketch_file",
    # 実行時の型
    "ExecutionContext",
    "SketchRunner",
    "Canvas2DRunner",
    "Scene3DRunner",
    "SourceCompiler",
    "Artifact",
    "SketchHooks",
    "SketchMode",
    "AnimationClock",
    "ClockState",
    "Tick",
    "ManualScheduler",
    "PygletScheduler",
    "SeededStream",
    "generate_seed",
    "ParameterDirectory",
    "ParameterSchema",
    "ParameterValue",
    # エラー
    "CompileError",
    "SketchRuntimeError",
    "ParseError",
    "format_error",
    # イージング
    "get_easing",
    "animate_parameter",
    "ANIMATION_PRESETS",
]

# バージョン情報
__version__ = "2026.10"
__api_version__ = "1.0"
