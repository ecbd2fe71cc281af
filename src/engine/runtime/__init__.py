"""
どこで: `engine.runtime` サブパッケージ。
何を: スケッチの実行文脈（`ExecutionContext`）とフレームループ駆動（`SketchRunner`）を提供。
なぜ: 乱数/時刻の束縛とエラー回収を、描画バックエンドから独立した層にまとめるため。
"""

from .context import ExecutionContext, LoadResult
from .runner import Canvas2DRunner, Scene3DRunner, SketchError, SketchRunner

__all__ = [
    "ExecutionContext",
    "LoadResult",
    "SketchRunner",
    "Canvas2DRunner",
    "Scene3DRunner",
    "SketchError",
]
