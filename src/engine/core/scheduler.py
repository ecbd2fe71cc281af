"""
どこで: `engine.core.scheduler`
何を: 協調的な「次フレームで呼ぶ」スケジューラ抽象 `FrameScheduler` と、その実装
      （仮想時間の `ManualScheduler` / pyglet 時計の `PygletScheduler`）を提供。
なぜ: AnimationClock とランナーのフレーム駆動を、ホストの表示同期/タイマ機構から切り離すため。

契約:
- `schedule_next_frame(cb)` は次フレームで `cb(now)` を 1 度だけ呼び、キャンセル用トークンを返す。
- `CancelToken.cancel()` は冪等（発火済み/キャンセル済みでも安全）。
- 同一フレーム内の発火順は登録順（FIFO）。ランナーはこれに依存して
  「クロックの tick → RNG reset → draw」の順序を保証する。
"""

from __future__ import annotations

import time
from typing import Callable, Protocol

FrameCallback = Callable[[float], None]


class CancelToken(Protocol):
    def cancel(self) -> None:
        """予約を取り消す（冪等）。"""


class FrameScheduler(Protocol):
    """次フレームのコールバック予約と現在時刻 [秒] を提供するインターフェース。"""

    def now(self) -> float: ...

    def schedule_next_frame(self, callback: FrameCallback) -> CancelToken: ...


class _Handle:
    """1 回限りの予約。"""

    __slots__ = ("callback", "cancelled", "fired")

    def __init__(self, callback: FrameCallback) -> None:
        self.callback = callback
        self.cancelled = False
        self.fired = False

    @property
    def active(self) -> bool:
        return not (self.cancelled or self.fired)

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self, now: float) -> None:
        if not self.active:
            return
        self.fired = True
        self.callback(now)


class ManualScheduler:
    """仮想時間で進むスケジューラ（ヘッドレス実行/テスト用）。

    `advance(dt)` で時刻を進め、直前までに予約された 1 フレーム分のコールバックを
    登録順に発火する。発火中に予約されたものは次の `advance` で発火する。
    """

    def __init__(self, start: float = 0.0, *, frame_interval: float = 1.0 / 60.0) -> None:
        if frame_interval <= 0.0:
            raise ValueError("frame_interval must be > 0")
        self._now = float(start)
        self._interval = float(frame_interval)
        self._pending: list[_Handle] = []

    @property
    def frame_interval(self) -> float:
        return self._interval

    @property
    def pending_count(self) -> int:
        """未発火・未キャンセルの予約数。"""
        return sum(1 for h in self._pending if h.active)

    def now(self) -> float:
        return self._now

    def schedule_next_frame(self, callback: FrameCallback) -> _Handle:
        handle = _Handle(callback)
        self._pending.append(handle)
        return handle

    def advance(self, dt: float | None = None) -> int:
        """時刻を `dt`（既定: frame_interval）進めて 1 フレーム分を発火。発火数を返す。"""
        step = self._interval if dt is None else float(dt)
        if step < 0.0:
            raise ValueError("dt must be >= 0")
        self._now += step
        batch, self._pending = self._pending, []
        fired = 0
        for handle in batch:
            if handle.active:
                handle.fire(self._now)
                fired += 1
        return fired

    def run_frames(self, count: int, dt: float | None = None) -> int:
        """`advance` を `count` 回繰り返す。総発火数を返す。"""
        total = 0
        for _ in range(max(0, int(count))):
            total += self.advance(dt)
        return total


class _PygletHandle:
    __slots__ = ("_fn", "_done")

    def __init__(self, fn: Callable[[float], None]) -> None:
        self._fn = fn
        self._done = False

    def cancel(self) -> None:
        if self._done:
            return
        self._done = True
        import pyglet

        pyglet.clock.unschedule(self._fn)


class PygletScheduler:
    """`pyglet.clock.schedule_once` によるフレーム予約。

    - pyglet は最初の予約時に遅延 import する（ヘッドレス環境で生成だけなら import しない）。
    - 実際の発火には `pyglet.app.run()`（または `pyglet.clock.tick()`）でホストループを回すこと。
    """

    def __init__(self, fps: float = 60) -> None:
        fps = float(fps)
        if fps <= 0:
            raise ValueError(f"fps must be > 0, got {fps}")
        self._interval = 1.0 / fps

    def now(self) -> float:
        return time.perf_counter()

    def schedule_next_frame(self, callback: FrameCallback) -> _PygletHandle:
        import pyglet

        def _fire(_dt: float) -> None:
            handle._done = True
            callback(self.now())

        handle = _PygletHandle(_fire)
        pyglet.clock.schedule_once(_fire, self._interval)
        return handle


__all__ = [
    "FrameCallback",
    "CancelToken",
    "FrameScheduler",
    "ManualScheduler",
    "PygletScheduler",
]
