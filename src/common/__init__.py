"""
どこで: `common` パッケージ。
何を: engine/api の双方で使う軽量ユーティリティ（BaseRegistry・イージング・設定など）。
なぜ: 実行時の上位層から再利用する共通基盤を分離し、依存の向きを単純化するため。
"""

from .base_registry import BaseRegistry

__all__ = [
    "BaseRegistry",
]
