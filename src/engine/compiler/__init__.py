"""
どこで: `engine.compiler` サブパッケージ。
何を: スケッチソースのコード化（`SourceCompiler`）、モード別ハーネス、型付きエラー。
なぜ: 値の注入からバックエンド向け Program までを 1 か所で決定的に扱うため。
"""

from .compiler import Artifact, CompileResult, SourceCompiler
from .errors import CompileError, SketchRuntimeError, error_context, format_error
from .harness import (
    BOUND_NAMES,
    SCENE_NAMESPACE_NAME,
    Canvas2DProgram,
    Scene3DProgram,
    SketchHooks,
    SketchMode,
    get_harness,
)

__all__ = [
    "Artifact",
    "CompileResult",
    "SourceCompiler",
    "CompileError",
    "SketchRuntimeError",
    "error_context",
    "format_error",
    "BOUND_NAMES",
    "SCENE_NAMESPACE_NAME",
    "Canvas2DProgram",
    "Scene3DProgram",
    "SketchHooks",
    "SketchMode",
    "get_harness",
]
