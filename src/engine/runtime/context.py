"""
どこで: `engine.runtime.context`
何を: スケッチへ束縛する組込み名（random 系 / animate 系）の実体を持つ `ExecutionContext`。
なぜ: 乱数とアニメーション時刻をグローバル状態ではなく明示的な文脈として所有し、
      フレームごとのリセットと tick の観測を 1 か所で制御するため。

不変条件:
- `begin_frame()` はストリームをシード直後の状態へ戻す（同じフレーム内の draw は常に同じ列）。
- animate 系は呼び出しごとに直近の tick から再計算する（tick 前は 0）。
- 束縛される関数は呼び出し時点のストリームを参照するため、`set_seed` 後も差し替え不要。
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Sequence, TypeVar

from ..compiler.compiler import Artifact
from ..compiler.errors import CompileError
from ..compiler.harness import SCENE_NAMESPACE_NAME, Program, SketchMode
from ..core.animation_clock import AnimationClock, Tick
from ..core.random_stream import SeededStream

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class LoadResult:
    program: Program | None = None
    error: CompileError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ExecutionContext:
    """1 つのシードストリームと 1 つの時計の観測値を持つ実行文脈。"""

    def __init__(self, seed: str | None = None, clock: AnimationClock | None = None) -> None:
        self._stream = SeededStream(seed)
        self._clock = clock
        self._tick: Tick | None = None

    # ---- 乱数 -------------------------------------------------------------
    @property
    def seed(self) -> str:
        return self._stream.seed

    @property
    def stream(self) -> SeededStream:
        return self._stream

    def set_seed(self, seed: str | None) -> None:
        """ストリームを新しいシードで置き換える。"""
        self._stream = SeededStream(seed)
        logger.debug("context seed set: %s", self._stream.seed)

    def begin_frame(self) -> None:
        self._stream.reset()

    def random(self) -> float:
        return self._stream.random()

    def random_range(self, min_value: float, max_value: float) -> float:
        return self._stream.random_range(min_value, max_value)

    def random_int(self, min_value: int, max_value: int) -> int:
        return self._stream.random_int(min_value, max_value)

    def choice(self, items: Sequence[T]) -> T:
        return self._stream.choice(items)

    def shuffle(self, items: Sequence[T]) -> list[T]:
        return self._stream.shuffle(items)

    # ---- 時刻 -------------------------------------------------------------
    @property
    def clock(self) -> AnimationClock | None:
        return self._clock

    def attach_clock(self, clock: AnimationClock | None) -> None:
        self._clock = clock
        self._tick = None

    def observe_tick(self, tick: Tick | None) -> None:
        self._tick = tick

    @property
    def tick(self) -> Tick | None:
        if self._tick is not None:
            return self._tick
        if self._clock is not None:
            return self._clock.last_tick
        return None

    def animate_time(self) -> float:
        tick = self.tick
        return tick.normalized_time if tick is not None else 0.0

    def animate_frame(self) -> int:
        tick = self.tick
        return tick.frame if tick is not None else 0

    def animate_value(self, start: float, end: float) -> float:
        return start + (end - start) * self.animate_time()

    def animate_sin(self, frequency: float = 1.0, amplitude: float = 1.0, offset: float = 0.0) -> float:
        return offset + amplitude * math.sin(self.animate_time() * frequency * 2.0 * math.pi)

    def animate_cos(self, frequency: float = 1.0, amplitude: float = 1.0, offset: float = 0.0) -> float:
        return offset + amplitude * math.cos(self.animate_time() * frequency * 2.0 * math.pi)

    # ---- 束縛 -------------------------------------------------------------
    def bindings(
        self, mode: SketchMode | str | None = None, *, scene_namespace: Any = None
    ) -> dict[str, Callable[..., Any] | Any]:
        """スケッチへ渡す束縛名 → 実体。Scene3D で名前空間が与えられれば `three` も含める。"""
        names: dict[str, Any] = {
            "random": self.random,
            "randomRange": self.random_range,
            "randomInt": self.random_int,
            "choice": self.choice,
            "shuffle": self.shuffle,
            "animateTime": self.animate_time,
            "animateFrame": self.animate_frame,
            "animateValue": self.animate_value,
            "animateSin": self.animate_sin,
            "animateCos": self.animate_cos,
        }
        if (
            mode is not None
            and SketchMode.parse(mode) is SketchMode.SCENE3D
            and scene_namespace is not None
        ):
            names[SCENE_NAMESPACE_NAME] = scene_namespace
        return names

    def load(self, artifact: Artifact) -> Program:
        """ストリームをリセットしてからトップレベルを評価する。

        Raises:
            CompileError: トップレベル評価が失敗した。
        """
        self.begin_frame()
        return artifact.bind(self.bindings())

    def try_load(self, artifact: Artifact) -> LoadResult:
        try:
            return LoadResult(program=self.load(artifact))
        except CompileError as exc:
            return LoadResult(error=exc)


__all__ = ["ExecutionContext", "LoadResult"]
