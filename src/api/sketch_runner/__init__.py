"""
内部ヘルパ群（API 非公開）。

どこで: `api.sketch_runner`
何を: `api.sketch` の補助（FPS/タイムライン/シードの解決）を分離する内部モジュール群。
なぜ: `run_sketch` 本体を結線だけに保ち、解決規則を単体でテストできるようにするため。
"""

from __future__ import annotations

__all__: list[str] = []
