"""
どこで: `common` の数値ユーティリティ。
何を: 区間へのクランプ。
なぜ: 時計の進捗率などを [0, 1] に収める処理を一箇所にまとめるため。
"""

from __future__ import annotations


def clamp01(x: float) -> float:
    return 0.0 if x <= 0.0 else 1.0 if x >= 1.0 else x


def clamp(x: float, lo: float, hi: float) -> float:
    return lo if x <= lo else hi if x >= hi else x


__all__ = [
    "clamp01",
    "clamp",
]
