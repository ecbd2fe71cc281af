"""
どこで: `engine.core.random_stream`
何を: 文字列シードから決定的に導出される擬似乱数ストリーム `SeededStream` と派生分布
      （range/int/choice/shuffle）を提供。
なぜ: 同じシード + 同じパラメータで常に同じ絵を再現するため。フレームごとに `reset()` で
      シード直後の状態へ戻し、描画コードが何回乱数を引いても毎フレーム同じ列を返す。

設計方針:
- シード → 生成器: UTF-8 の SHA-256 先頭 64bit を `numpy.random.default_rng` に渡す。
- `reset()` は描画履歴ではなくシードのみから再初期化する（O(1)、毎フレーム呼んでよい）。
- 暗号学的強度は目的外。
"""

from __future__ import annotations

import hashlib
import math
import secrets
import string
from typing import MutableSequence, Sequence, TypeVar

import numpy as np

T = TypeVar("T")

_SEED_ALPHABET = string.digits + string.ascii_lowercase
_SEED_LENGTH = 26


def seed_to_int(seed: str) -> int:
    """シード文字列を 64bit 整数へ決定的に写像する。"""
    return int(hashlib.sha256(seed.encode("utf-8")).hexdigest()[:16], 16)


def generate_seed() -> str:
    """新しいランダムシード（base36 の 26 文字）を返す。"""
    return "".join(secrets.choice(_SEED_ALPHABET) for _ in range(_SEED_LENGTH))


class SeededStream:
    """シードから導出された単一の生成器を所有する乱数ストリーム。

    引数:
        seed: シード文字列。None で `generate_seed()` による新規シード。
              str 以外は `str()` で文字列化する。
    """

    __slots__ = ("_seed", "_seed_int", "_rng", "_draws")

    def __init__(self, seed: str | None = None) -> None:
        if seed is None:
            seed = generate_seed()
        self._seed = seed if isinstance(seed, str) else str(seed)
        self._seed_int = seed_to_int(self._seed)
        self._rng = np.random.default_rng(self._seed_int)
        self._draws = 0

    @classmethod
    def from_seed(cls, seed: str) -> "SeededStream":
        return cls(seed)

    @property
    def seed(self) -> str:
        return self._seed

    @property
    def draw_count(self) -> int:
        """直近の `reset()`（または生成）以降に `random()` を引いた回数。"""
        return self._draws

    # ---- 基本分布 -------------------------------------------------------
    def random(self) -> float:
        """[0, 1) の一様乱数。内部状態を 1 ステップ進める。"""
        self._draws += 1
        return float(self._rng.random())

    def random_range(self, min_value: float, max_value: float) -> float:
        return min_value + self.random() * (max_value - min_value)

    def random_int(self, min_value: int, max_value: int) -> int:
        """両端を含む整数乱数。"""
        return int(math.floor(self.random_range(min_value, max_value + 1)))

    def choice(self, items: Sequence[T]) -> T:
        if len(items) == 0:
            raise IndexError("choice() from an empty sequence")
        return items[self.random_int(0, len(items) - 1)]

    def shuffle(self, items: Sequence[T]) -> list[T]:
        """Fisher–Yates で並べ替えた新しいリストを返す（入力は変更しない）。"""
        shuffled: MutableSequence[T] = list(items)
        for i in range(len(shuffled) - 1, 0, -1):
            j = self.random_int(0, i)
            shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
        return list(shuffled)

    # ---- 状態管理 -------------------------------------------------------
    def reset(self) -> None:
        """シードのみから生成器を作り直す。"""
        self._rng = np.random.default_rng(self._seed_int)
        self._draws = 0

    def clone(self) -> "SeededStream":
        """同じシードの新しいストリーム（カーソルは引き継がない）。"""
        return SeededStream(self._seed)

    def __repr__(self) -> str:
        return f"SeededStream(seed={self._seed!r}, draws={self._draws})"


__all__ = ["SeededStream", "generate_seed", "seed_to_int"]
