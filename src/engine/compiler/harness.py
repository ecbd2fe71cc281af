"""
どこで: `engine.compiler.harness`
何を: モード別ハーネス。トップレベル評価後の名前空間から `setup`/`draw` を拾い、
      バックエンドが呼ぶ呼び出し規約（Program）へ適合させる。
なぜ: 同じスケッチ言語を 2D キャンバスと 3D シーンの両バックエンドへ、最小の約束で渡すため。

呼び出し規約:
- Canvas2D: `program(surface) -> SketchHooks(setup, draw)`。`setup(surface)` を 1 度、
  `draw(surface)` を毎フレーム。どちらも未定義なら None。
- Scene3D: `program(scene, camera, renderer) -> teardown | None`。`setup` が無ければ no-op。
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, ClassVar, Mapping, Union

BOUND_NAMES: tuple[str, ...] = (
    "random",
    "randomRange",
    "randomInt",
    "choice",
    "shuffle",
    "animateTime",
    "animateFrame",
    "animateValue",
    "animateSin",
    "animateCos",
)
SCENE_NAMESPACE_NAME = "three"


class SketchMode(str, Enum):
    CANVAS2D = "canvas2d"
    SCENE3D = "scene3d"

    @classmethod
    def parse(cls, value: "SketchMode | str") -> "SketchMode":
        """モード名を解決する（`p5`/`2d` と `three`/`3d` の別名を許容）。"""
        if isinstance(value, SketchMode):
            return value
        key = str(value).strip().lower()
        alias = _MODE_ALIASES.get(key)
        if alias is None:
            raise ValueError(f"unknown sketch mode: {value!r}")
        return alias


_MODE_ALIASES = {
    "canvas2d": SketchMode.CANVAS2D,
    "2d": SketchMode.CANVAS2D,
    "p5": SketchMode.CANVAS2D,
    "scene3d": SketchMode.SCENE3D,
    "3d": SketchMode.SCENE3D,
    "three": SketchMode.SCENE3D,
}


@dataclass(frozen=True)
class SketchHooks:
    """surface に束縛済みの引数なしフック。"""

    setup: Callable[[], Any] | None = None
    draw: Callable[[], Any] | None = None


class Canvas2DProgram:
    def __init__(self, setup: Callable[..., Any] | None, draw: Callable[..., Any] | None) -> None:
        self._setup = setup
        self._draw = draw

    @property
    def has_setup(self) -> bool:
        return self._setup is not None

    @property
    def has_draw(self) -> bool:
        return self._draw is not None

    def __call__(self, surface: Any) -> SketchHooks:
        setup, draw = self._setup, self._draw
        return SketchHooks(
            setup=(lambda: setup(surface)) if setup is not None else None,
            draw=(lambda: draw(surface)) if draw is not None else None,
        )


class Scene3DProgram:
    def __init__(self, setup: Callable[..., Any] | None) -> None:
        self._setup = setup

    @property
    def has_setup(self) -> bool:
        return self._setup is not None

    def __call__(self, scene: Any, camera: Any, renderer: Any) -> Callable[[], Any] | None:
        if self._setup is None:
            return None
        teardown = self._setup(scene, camera, renderer)
        return teardown if callable(teardown) else None


Program = Union[Canvas2DProgram, Scene3DProgram]


def _callable_named(namespace: Mapping[str, Any], name: str) -> Callable[..., Any] | None:
    obj = namespace.get(name)
    return obj if callable(obj) else None


class Harness(ABC):
    """モード別の包み方。"""

    mode: ClassVar[SketchMode]
    # ソース先頭に挿入した行数（位置情報の補正量）。名前空間を直接渡すので 0。
    line_offset: ClassVar[int] = 0
    extra_names: ClassVar[tuple[str, ...]] = ()

    def bound_names(self) -> tuple[str, ...]:
        return BOUND_NAMES + self.extra_names

    @abstractmethod
    def adapt(self, namespace: Mapping[str, Any]) -> Program:
        """トップレベル評価後の名前空間から Program を作る。"""


class Canvas2DHarness(Harness):
    mode = SketchMode.CANVAS2D

    def adapt(self, namespace: Mapping[str, Any]) -> Canvas2DProgram:
        return Canvas2DProgram(
            setup=_callable_named(namespace, "setup"),
            draw=_callable_named(namespace, "draw"),
        )


class Scene3DHarness(Harness):
    mode = SketchMode.SCENE3D
    extra_names = (SCENE_NAMESPACE_NAME,)

    def adapt(self, namespace: Mapping[str, Any]) -> Scene3DProgram:
        return Scene3DProgram(setup=_callable_named(namespace, "setup"))


_HARNESSES: dict[SketchMode, Harness] = {
    SketchMode.CANVAS2D: Canvas2DHarness(),
    SketchMode.SCENE3D: Scene3DHarness(),
}


def get_harness(mode: SketchMode | str) -> Harness:
    return _HARNESSES[SketchMode.parse(mode)]


__all__ = [
    "BOUND_NAMES",
    "SCENE_NAMESPACE_NAME",
    "SketchMode",
    "SketchHooks",
    "Canvas2DProgram",
    "Scene3DProgram",
    "Program",
    "Harness",
    "Canvas2DHarness",
    "Scene3DHarness",
    "get_harness",
]
