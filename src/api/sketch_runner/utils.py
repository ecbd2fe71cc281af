"""
どこで: `api.sketch_runner.utils`（純粋関数/小ヘルパ）。
何を: FPS・タイムライン（長さ/ループ/イージング）・シードを「引数 > 構成ファイル > 既定」で解決。
なぜ: `api.sketch` を薄く保ち、解決規則を単体でテストできるようにするため。
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from common.easing import easings
from common.settings import get as get_settings
from util.utils import config_section

logger = logging.getLogger(__name__)

DEFAULT_DURATION = 5.0
DEFAULT_EASING = "linear"


def resolve_fps(
    requested_fps: int | None,
    *,
    config: Mapping[str, Any] | None = None,
    default: int | None = None,
) -> int:
    """FPS を解決して 1 以上の int を返す。

    - 明示指定があればそれを優先（数値化できない/<=0 は既定へ）。
    - 次に構成の `animation.fps`、最後に `SKS_DEFAULT_FPS`。
    """
    if default is None:
        default = get_settings().DEFAULT_FPS
    if requested_fps is not None:
        try:
            return max(1, int(requested_fps))
        except (TypeError, ValueError):
            logger.warning("invalid fps %r; falling back to %d", requested_fps, default)
            return max(1, int(default))
    raw = config_section(dict(config or {}), "animation").get("fps")
    if raw is None:
        return max(1, int(default))
    try:
        return max(1, int(raw))
    except (TypeError, ValueError):
        logger.warning("invalid animation.fps in config: %r", raw)
        return max(1, int(default))


def resolve_timeline(
    *,
    duration: float | None = None,
    loop: bool | None = None,
    easing: str | None = None,
    config: Mapping[str, Any] | None = None,
) -> tuple[float, bool, str]:
    """(duration, loop, easing) を返す。

    構成値が不正なら警告して既定値へ。明示引数の検証は `AnimationClock` に任せる。
    """
    section = config_section(dict(config or {}), "animation")

    if duration is None:
        raw = section.get("duration", DEFAULT_DURATION)
        try:
            duration = float(raw)
        except (TypeError, ValueError):
            duration = -1.0
        if not duration > 0.0:
            logger.warning("invalid animation.duration in config: %r", raw)
            duration = DEFAULT_DURATION

    if loop is None:
        loop = bool(section.get("loop", True))

    if easing is None:
        raw_easing = section.get("easing", DEFAULT_EASING)
        if isinstance(raw_easing, str) and easings.is_registered(raw_easing):
            easing = raw_easing
        else:
            logger.warning("unknown animation.easing in config: %r", raw_easing)
            easing = DEFAULT_EASING

    return float(duration), bool(loop), easing


def resolve_seed(seed: str | None, *, config: Mapping[str, Any] | None = None) -> str | None:
    """明示シード > 構成の `runtime.seed`。どちらも無ければ None（新規生成）。"""
    if seed is not None:
        return str(seed)
    raw = config_section(dict(config or {}), "runtime").get("seed")
    return None if raw is None else str(raw)


__all__ = [
    "DEFAULT_DURATION",
    "DEFAULT_EASING",
    "resolve_fps",
    "resolve_timeline",
    "resolve_seed",
]
