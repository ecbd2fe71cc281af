"""
どこで: `common.easing`
何を: 正規化時間 t∈[0,1] を写像するイージング関数群と、その名前付きレジストリ・プリセットを提供。
なぜ: AnimationClock とスケッチ側の補間（`animate_parameter`）で同じ写像を共有するため。

設計方針:
- 純粋・決定的。副作用なし。公開されている標準式（easings.net と同形）に従う。
- back 系は [0,1] の外にはみ出す（オーバーシュート）ので clamp しない。
- 名前は `easeInOutQuad` / `ease_in_out_quad` のどちらでも引ける（`BaseRegistry` の正規化）。
"""

from __future__ import annotations

from typing import Callable

from .base_registry import BaseRegistry

EasingFn = Callable[[float], float]

# back 系の定数
C1 = 1.70158
C2 = C1 * 1.525
C3 = C1 + 1.0

# bounce の定数
N1 = 7.5625
D1 = 2.75


class EasingRegistry(BaseRegistry):
    """イージング関数のレジストリ。"""

    def resolve(self, easing: str | EasingFn) -> EasingFn:
        """名前なら登録関数を、呼び出し可能ならそのまま返す。"""
        if callable(easing):
            return easing
        return self.get(easing)


easings = EasingRegistry()


@easings.register()
def linear(t: float) -> float:
    return t


# ---- Quad / Cubic / Quart ---------------------------------------------


@easings.register()
def ease_in_quad(t: float) -> float:
    return t * t


@easings.register()
def ease_out_quad(t: float) -> float:
    return 1.0 - (1.0 - t) * (1.0 - t)


@easings.register()
def ease_in_out_quad(t: float) -> float:
    if t < 0.5:
        return 2.0 * t * t
    return 1.0 - (-2.0 * t + 2.0) ** 2 / 2.0


@easings.register()
def ease_in_cubic(t: float) -> float:
    return t * t * t


@easings.register()
def ease_out_cubic(t: float) -> float:
    return 1.0 - (1.0 - t) ** 3


@easings.register()
def ease_in_out_cubic(t: float) -> float:
    if t < 0.5:
        return 4.0 * t * t * t
    return 1.0 - (-2.0 * t + 2.0) ** 3 / 2.0


@easings.register()
def ease_in_quart(t: float) -> float:
    return t * t * t * t


@easings.register()
def ease_out_quart(t: float) -> float:
    return 1.0 - (1.0 - t) ** 4


@easings.register()
def ease_in_out_quart(t: float) -> float:
    if t < 0.5:
        return 8.0 * t * t * t * t
    return 1.0 - (-2.0 * t + 2.0) ** 4 / 2.0


# ---- Back（オーバーシュートあり） ----------------------------------------


@easings.register()
def ease_in_back(t: float) -> float:
    return C3 * t * t * t - C1 * t * t


@easings.register()
def ease_out_back(t: float) -> float:
    return 1.0 + C3 * (t - 1.0) ** 3 + C1 * (t - 1.0) ** 2


@easings.register()
def ease_in_out_back(t: float) -> float:
    if t < 0.5:
        return ((2.0 * t) ** 2 * ((C2 + 1.0) * 2.0 * t - C2)) / 2.0
    return ((2.0 * t - 2.0) ** 2 * ((C2 + 1.0) * (t * 2.0 - 2.0) + C2) + 2.0) / 2.0


# ---- Bounce（4 区間の区分二次） ------------------------------------------


@easings.register()
def bounce(t: float) -> float:
    if t < 1.0 / D1:
        return N1 * t * t
    if t < 2.0 / D1:
        u = t - 1.5 / D1
        return N1 * u * u + 0.75
    if t < 2.5 / D1:
        u = t - 2.25 / D1
        return N1 * u * u + 0.9375
    u = t - 2.625 / D1
    return N1 * u * u + 0.984375


def get_easing(name: str | EasingFn) -> EasingFn:
    """イージングを名前（キャメル/スネーク）または関数で解決する。未登録名は KeyError。"""
    return easings.resolve(name)


def animate_parameter(
    start: float, end: float, normalized_time: float, easing: str | EasingFn = "linear"
) -> float:
    """`start`→`end` を正規化時間とイージングで補間した値を返す。"""
    eased = get_easing(easing)(float(normalized_time))
    return start + (end - start) * eased


# 典型的なアニメーション設定（UI のプリセット一覧用）
ANIMATION_PRESETS: dict[str, dict[str, object]] = {
    "fade_in": {
        "name": "Fade In",
        "duration": 2.0,
        "easing": "ease_out_quad",
        "description": "Gentle fade in effect",
    },
    "bounce_in": {
        "name": "Bounce In",
        "duration": 1.5,
        "easing": "bounce",
        "description": "Bouncy entrance animation",
    },
    "slide_in": {
        "name": "Slide In",
        "duration": 1.0,
        "easing": "ease_in_out_cubic",
        "description": "Smooth sliding motion",
    },
    "elastic": {
        "name": "Elastic",
        "duration": 2.5,
        "easing": "ease_in_out_back",
        "description": "Elastic spring effect",
    },
    "pulse": {
        "name": "Pulse",
        "duration": 1.0,
        "easing": "ease_in_out_quad",
        "description": "Rhythmic pulsing animation",
    },
}


__all__ = [
    "EasingFn",
    "EasingRegistry",
    "easings",
    "get_easing",
    "animate_parameter",
    "ANIMATION_PRESETS",
    "linear",
    "ease_in_quad",
    "ease_out_quad",
    "ease_in_out_quad",
    "ease_in_cubic",
    "ease_out_cubic",
    "ease_in_out_cubic",
    "ease_in_quart",
    "ease_out_quart",
    "ease_in_out_quart",
    "ease_in_back",
    "ease_out_back",
    "ease_in_out_back",
    "bounce",
]
