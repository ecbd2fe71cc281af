"""
どこで: `engine.core.animation_clock`
何を: 再生/一時停止/停止の状態機械を持つタイムライン `AnimationClock`。フレームごとに
      正規化時間（イージング適用済み）とフレーム番号を `Tick` として通知する。
なぜ: スケッチの `animateTime()` / `animateFrame()` に、ホストの時計から独立した決定的な値を供給するため。

状態遷移:
    IDLE → PLAYING → {PAUSED, IDLE}
    PAUSED → {PLAYING, IDLE}

補足:
- 予約中のコールバックは常に高々 1 件（新規予約の前に既存をキャンセル）。
- ループ時は `start_epoch` を周期単位で前へ繰り上げるが、フレーム番号は連続する。
- 非ループ時は `elapsed >= duration` の最終 tick（raw=1.0）で IDLE へ戻り、以降は予約しない。
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from common.easing import EasingFn, get_easing
from common.param_utils import clamp

from .scheduler import CancelToken, FrameScheduler

logger = logging.getLogger(__name__)


class ClockState(str, Enum):
    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"


class ClockStateError(RuntimeError):
    """現在の状態では許されない遷移（例: IDLE での pause）。"""


@dataclass(frozen=True)
class Tick:
    """1 回分の通知値。"""

    normalized_time: float
    raw_fraction: float
    elapsed: float
    frame: int


@dataclass(frozen=True)
class TimelineState:
    """タイムラインのスナップショット（デバッグ/UI 表示用）。"""

    start_epoch: float | None
    cursor_epoch: float | None
    playing: bool
    paused: bool
    duration: float
    fps: float
    loop: bool
    easing: str


TickCallback = Callable[[Tick], None]


class AnimationClock:
    """フレーム駆動のアニメーション時計。

    引数:
        scheduler: 次フレーム予約と現在時刻を提供する `FrameScheduler`。
        duration: 1 周期の長さ [秒]（> 0）。
        fps: フレーム番号の算出レート（> 0）。
        loop: True で周期的に繰り返す。
        easing: イージング名（`easeInOutQuad` / `ease_in_out_quad` 等）または関数。
    """

    def __init__(
        self,
        scheduler: FrameScheduler,
        duration: float,
        fps: float = 60,
        loop: bool = True,
        easing: str | EasingFn = "linear",
    ) -> None:
        self._scheduler = scheduler
        self._duration = self._check_positive("duration", duration)
        self._fps = self._check_positive("fps", fps)
        self._loop = bool(loop)
        self._easing_name, self._easing = self._resolve_easing(easing)

        self._state = ClockState.IDLE
        self._start_epoch: float | None = None
        self._cursor_epoch: float | None = None
        self._looped = 0.0  # ループで繰り上げ済みの時間 [秒]
        self._last_frame = 0
        self._last_tick: Tick | None = None
        self._token: CancelToken | None = None
        self._on_tick: TickCallback | None = None

    # ---- 設定 -----------------------------------------------------------
    @staticmethod
    def _check_positive(name: str, value: float) -> float:
        v = float(value)
        if not v > 0.0:
            raise ValueError(f"{name} must be > 0, got {value}")
        return v

    @staticmethod
    def _resolve_easing(easing: str | EasingFn) -> tuple[str, EasingFn]:
        fn = get_easing(easing)
        name = easing if isinstance(easing, str) else getattr(fn, "__name__", "custom")
        return name, fn

    @property
    def duration(self) -> float:
        return self._duration

    @duration.setter
    def duration(self, value: float) -> None:
        self._duration = self._check_positive("duration", value)

    @property
    def fps(self) -> float:
        return self._fps

    @fps.setter
    def fps(self, value: float) -> None:
        self._fps = self._check_positive("fps", value)

    @property
    def loop(self) -> bool:
        return self._loop

    @loop.setter
    def loop(self, value: bool) -> None:
        self._loop = bool(value)

    @property
    def easing(self) -> str:
        return self._easing_name

    @easing.setter
    def easing(self, value: str | EasingFn) -> None:
        self._easing_name, self._easing = self._resolve_easing(value)

    # ---- 状態 -----------------------------------------------------------
    @property
    def state(self) -> ClockState:
        return self._state

    @property
    def is_playing(self) -> bool:
        return self._state is ClockState.PLAYING

    @property
    def is_paused(self) -> bool:
        return self._state is ClockState.PAUSED

    @property
    def start_epoch(self) -> float | None:
        return self._start_epoch

    @property
    def cursor_epoch(self) -> float | None:
        return self._cursor_epoch

    @property
    def last_tick(self) -> Tick | None:
        return self._last_tick

    @property
    def total_frames(self) -> int:
        return int(math.floor(self._duration * self._fps))

    @property
    def has_pending_callback(self) -> bool:
        return self._token is not None

    def snapshot(self) -> TimelineState:
        return TimelineState(
            start_epoch=self._start_epoch,
            cursor_epoch=self._cursor_epoch,
            playing=self._state is ClockState.PLAYING,
            paused=self._state is ClockState.PAUSED,
            duration=self._duration,
            fps=self._fps,
            loop=self._loop,
            easing=self._easing_name,
        )

    # ---- 遷移 -----------------------------------------------------------
    def play(self, on_tick: TickCallback | None = None) -> None:
        """再生を開始する。再生中は no-op、一時停止中は `resume()` と同じ。"""
        if self._state is ClockState.PLAYING:
            return
        if self._state is ClockState.PAUSED:
            if on_tick is not None:
                self._on_tick = on_tick
            self.resume()
            return
        self._on_tick = on_tick
        self._start_epoch = self._scheduler.now()
        self._cursor_epoch = None
        self._looped = 0.0
        self._last_frame = 0
        self._state = ClockState.PLAYING
        logger.debug("clock play: duration=%s fps=%s loop=%s", self._duration, self._fps, self._loop)
        self._schedule()

    def pause(self) -> None:
        if self._state is not ClockState.PLAYING:
            raise ClockStateError(f"pause() requires PLAYING, clock is {self._state.value}")
        self._cancel()
        self._cursor_epoch = self._scheduler.now()
        self._state = ClockState.PAUSED

    def resume(self) -> None:
        if self._state is not ClockState.PAUSED:
            raise ClockStateError(f"resume() requires PAUSED, clock is {self._state.value}")
        now = self._scheduler.now()
        if self._start_epoch is not None and self._cursor_epoch is not None:
            self._start_epoch += now - self._cursor_epoch
        self._cursor_epoch = None
        self._state = ClockState.PLAYING
        self._schedule()

    def stop(self) -> None:
        """どの状態からでも IDLE へ。予約を取り消し、エポックを初期化する（冪等）。"""
        self._cancel()
        self._start_epoch = None
        self._cursor_epoch = None
        self._looped = 0.0
        self._last_frame = 0
        self._last_tick = None
        self._state = ClockState.IDLE

    def seek_to(self, normalized_time: float) -> None:
        """現在時刻で `elapsed / duration == normalized_time` となるよう開始時刻を置き直す。"""
        t = float(normalized_time)
        if not 0.0 <= t < 1.0:
            raise ValueError(f"normalized_time must be in [0, 1), got {normalized_time}")
        now = self._scheduler.now()
        self._start_epoch = now - t * self._duration
        # 一時停止中は再開時のシフト量が seek 時点から数えられるようにする
        if self._state is ClockState.PAUSED:
            self._cursor_epoch = now
        self._last_frame = 0

    # ---- 内部 -----------------------------------------------------------
    def _schedule(self) -> None:
        self._cancel()
        self._token = self._scheduler.schedule_next_frame(self._on_frame)

    def _cancel(self) -> None:
        token, self._token = self._token, None
        if token is not None:
            token.cancel()

    def _compute(self, elapsed: float) -> Tick:
        ratio = elapsed / self._duration
        if self._loop:
            ratio = ratio % 1.0
        raw = clamp(ratio, 0.0, 1.0)
        frame = int(math.floor((elapsed + self._looped) * self._fps))
        frame = max(0, frame, self._last_frame)
        self._last_frame = frame
        return Tick(
            normalized_time=float(self._easing(raw)),
            raw_fraction=raw,
            elapsed=elapsed,
            frame=frame,
        )

    def _on_frame(self, now: float) -> None:
        self._token = None
        if self._state is not ClockState.PLAYING or self._start_epoch is None:
            return
        elapsed = now - self._start_epoch
        tick = self._compute(elapsed)
        self._last_tick = tick

        if elapsed >= self._duration and not self._loop:
            # 最終 tick: 予約は残さず IDLE に戻してから通知する（on_tick 内の再 play を許す）
            self._state = ClockState.IDLE
            logger.debug("clock finished after %.3fs (frame %d)", elapsed, tick.frame)
            if self._on_tick is not None:
                self._on_tick(tick)
            return

        if self._loop and elapsed >= self._duration:
            shift = math.floor(elapsed / self._duration) * self._duration
            self._start_epoch += shift
            self._looped += shift

        # 先に次フレームを予約し、on_tick 内の pause()/stop() がそれを取り消せるようにする
        self._schedule()
        if self._on_tick is not None:
            self._on_tick(tick)


__all__ = [
    "AnimationClock",
    "ClockState",
    "ClockStateError",
    "Tick",
    "TickCallback",
    "TimelineState",
]
