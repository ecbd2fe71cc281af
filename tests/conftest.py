"""共通フィクスチャ。

- 仮想時間のスケジューラ
- 小さなコンパイラ/実行文脈
- 呼び出しを記録するだけの描画面
- 典型的なスケッチ試料
"""

from __future__ import annotations

from typing import Any, Iterator

import pytest

from common.settings import reload_from_env
from engine.compiler import SourceCompiler
from engine.core import ManualScheduler
from engine.runtime import ExecutionContext


class RecordingSurface:
    """描画呼び出しを `(name, args)` で記録するダミーの描画面。"""

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)

        def _record(*args: Any) -> None:
            self.calls.append((name, args))

        return _record

    def names(self) -> list[str]:
        return [name for name, _ in self.calls]


@pytest.fixture()
def scheduler() -> ManualScheduler:
    return ManualScheduler(frame_interval=0.125)


@pytest.fixture()
def compiler() -> SourceCompiler:
    return SourceCompiler(cache_maxsize=8)


@pytest.fixture()
def context() -> ExecutionContext:
    return ExecutionContext("abc")


@pytest.fixture()
def surface() -> RecordingSurface:
    return RecordingSurface()


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[pytest.MonkeyPatch]:
    """SKS_* を消した状態で設定を読み直し、終了時にも読み直す。"""
    for name in (
        "SKS_COMPILED_CACHE_MAXSIZE",
        "SKS_STRICT_PARAMS",
        "SKS_DEFAULT_FPS",
        "SKS_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    reload_from_env()
    yield monkeypatch
    monkeypatch.undo()
    reload_from_env()


DOTS_SKETCH = '''\
# @param {number} count - Dot count [min=1, max=50, step=1, default=3]
# @param {color} tint - Dot color [default=#ff0000]
count = 3
tint = "#ff0000"


def setup(surface):
    surface.background(0)


def draw(surface):
    for _ in range(int(count)):
        surface.dot(random(), random(), tint)
'''

BROKEN_SYNTAX_SKETCH = """\
x = 1
y = (2
def draw(surface):
    pass
"""

TOP_LEVEL_ERROR_SKETCH = """\
a = 1
b = 2
c = a / 0
"""

DRAW_ERROR_SKETCH = """\
def draw(surface):
    surface.mark(animateFrame())
    if animateFrame() >= 1:
        raise ValueError("boom")
"""

SCENE_SKETCH = """\
def setup(scene, camera, renderer):
    scene.append(("mesh", three.pi > 3))

    def teardown():
        scene.append(("teardown",))

    return teardown
"""


@pytest.fixture()
def dots_sketch() -> str:
    return DOTS_SKETCH


@pytest.fixture()
def broken_syntax_sketch() -> str:
    return BROKEN_SYNTAX_SKETCH


@pytest.fixture()
def top_level_error_sketch() -> str:
    return TOP_LEVEL_ERROR_SKETCH


@pytest.fixture()
def draw_error_sketch() -> str:
    return DRAW_ERROR_SKETCH


@pytest.fixture()
def scene_sketch() -> str:
    return SCENE_SKETCH
