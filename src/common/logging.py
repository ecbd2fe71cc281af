"""
ランタイム向けの軽量ロギングユーティリティ。

要点:
- 各モジュールは `logging.getLogger(__name__)` でロガーを取得する。
- アプリ側で設定が無い場合でも、妥当な最小構成を 1 度だけ適用するヘルパーを提供する。
- スケッチ由来の例外（CompileError/SketchRuntimeError）は WARNING で記録し、ホストは停止させない。
"""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def resolve_level(level: int | str) -> int:
    """レベル指定（名前/数値）を `logging` の数値レベルへ解決する。不明な名前は INFO。"""
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.INFO)
    return int(level)


def setup_default_logging(level: int | str = "INFO") -> None:
    """最小限のロギング設定を 1 度だけ適用する。

    - ルートロガーにハンドラが既にあれば何もしない（no-op）
    - 上位のランナー（`api.run_sketch`）から呼び出す想定
    """
    root = logging.getLogger()
    if root.handlers:
        # Assume the app has configured logging
        return
    logging.basicConfig(level=resolve_level(level), format=LOG_FORMAT)


__all__ = ["setup_default_logging", "resolve_level", "LOG_FORMAT"]
