"""
どこで: `engine.core` サブパッケージ。
何を: 乱数ストリーム・フレームスケジューラ・アニメーション時計といった実行時の基盤部品を提供。
なぜ: コンパイラ/ランナー（上位層）から再利用でき、ホストの描画系に依存しない決定的な部品として分離するため。
"""

from .animation_clock import AnimationClock, ClockState, ClockStateError, Tick, TimelineState
from .random_stream import SeededStream, generate_seed
from .scheduler import FrameScheduler, ManualScheduler, PygletScheduler

__all__ = [
    "AnimationClock",
    "ClockState",
    "ClockStateError",
    "Tick",
    "TimelineState",
    "SeededStream",
    "generate_seed",
    "FrameScheduler",
    "ManualScheduler",
    "PygletScheduler",
]
