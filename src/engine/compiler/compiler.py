"""
どこで: `engine.compiler.compiler`
何を: パラメータ値を注入したスケッチソースをコード化し、モード別ハーネスと束ねた
      不変の `Artifact` を返す `SourceCompiler`。注入後のソースと mode を鍵にした LRU 付き。
なぜ: 同じ入力からは同じ Artifact を再利用し、構文エラーは例外の型と位置で返すため。

流れ:
1) `inject(source, values)` で宣言の右辺を現在値へ書き換える。
2) `compile(..., "<sketch>", "exec")` で構文検査しコード化（ここで SyntaxError → CompileError）。
3) `Artifact.bind(bindings)` で、束縛名ちょうどの名前空間にトップレベルを評価し、
   ハーネスが `setup`/`draw` を Program へ包む（評価時の例外も CompileError）。

束縛名以外に見えるのは Python の組込みのみ。スケッチ自身の import は許容する。
"""

from __future__ import annotations

import builtins
import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from types import CodeType
from typing import Any, Mapping

import numpy as np

from common.settings import get as get_settings

from ..params.inject import inject
from ..params.schema import ParameterValue
from .errors import SKETCH_FILENAME, CompileError
from .harness import SCENE_NAMESPACE_NAME, Harness, Program, SketchMode, get_harness

logger = logging.getLogger(__name__)

SKETCH_MODULE_NAME = "__sketch__"


@dataclass(frozen=True, eq=False)
class Artifact:
    """コンパイル済みスケッチ。生成後は不変。"""

    source: str
    mode: SketchMode
    code: CodeType = field(repr=False)
    harness: Harness = field(repr=False)
    extra_bindings: tuple[tuple[str, Any], ...] = field(default=(), repr=False)

    @property
    def bound_names(self) -> tuple[str, ...]:
        return self.harness.bound_names()

    def bind(self, bindings: Mapping[str, Any]) -> Program:
        """束縛名を与えてトップレベルを評価し、モード別の Program を返す。

        Raises:
            ValueError: 束縛名の過不足。
            CompileError: トップレベル評価で例外が出た。
        """
        merged: dict[str, Any] = dict(self.extra_bindings)
        merged.update(bindings)
        expected = set(self.bound_names)
        missing = sorted(expected - set(merged))
        extra = sorted(set(merged) - expected)
        if missing:
            raise ValueError(f"missing sketch bindings: {', '.join(missing)}")
        if extra:
            raise ValueError(f"unexpected sketch bindings: {', '.join(extra)}")

        namespace: dict[str, Any] = {
            "__builtins__": builtins,
            "__name__": SKETCH_MODULE_NAME,
            **merged,
        }
        try:
            exec(self.code, namespace)
        except Exception as exc:
            raise CompileError.from_exception(
                exc, source=self.source, line_offset=self.harness.line_offset
            ) from exc
        return self.harness.adapt(namespace)


@dataclass(frozen=True)
class CompileResult:
    artifact: Artifact | None = None
    error: CompileError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class SourceCompiler:
    """スケッチソース → Artifact。

    引数:
        cache_maxsize: LRU 上限。None なら `SKS_COMPILED_CACHE_MAXSIZE`、0 で無効。
        scene_namespace: Scene3D で `three` として束縛するオブジェクト（既定は numpy）。
    """

    def __init__(self, *, cache_maxsize: int | None = None, scene_namespace: Any = None) -> None:
        if cache_maxsize is None:
            cache_maxsize = get_settings().COMPILED_CACHE_MAXSIZE
        self._maxsize = max(0, int(cache_maxsize))
        self._cache: "OrderedDict[tuple, Artifact]" = OrderedDict()
        self._scene_namespace = np if scene_namespace is None else scene_namespace
        self._hits = 0
        self._misses = 0

    def compile(
        self,
        source: str,
        values: Mapping[str, ParameterValue | Any] | None = None,
        mode: SketchMode | str = SketchMode.CANVAS2D,
    ) -> Artifact:
        mode = SketchMode.parse(mode)
        injected = inject(source, values or {})
        key = (injected, mode.value)

        cached = self._cache_get(key)
        if cached is not None:
            self._hits += 1
            logger.debug("sketch cache hit (%s)", mode.value)
            return cached
        self._misses += 1

        harness = get_harness(mode)
        try:
            code = builtins.compile(injected, SKETCH_FILENAME, "exec", dont_inherit=True)
        except (SyntaxError, ValueError) as exc:
            error = CompileError.from_exception(
                exc, source=injected, line_offset=harness.line_offset
            )
            logger.debug("sketch compile failed: %s", error)
            raise error from exc

        extra: tuple[tuple[str, Any], ...] = ()
        if mode is SketchMode.SCENE3D:
            extra = ((SCENE_NAMESPACE_NAME, self._scene_namespace),)
        artifact = Artifact(
            source=injected, mode=mode, code=code, harness=harness, extra_bindings=extra
        )
        self._cache_store(key, artifact)
        return artifact

    def try_compile(
        self,
        source: str,
        values: Mapping[str, ParameterValue | Any] | None = None,
        mode: SketchMode | str = SketchMode.CANVAS2D,
    ) -> CompileResult:
        """`compile` の例外を結果値へ落とした版。"""
        try:
            return CompileResult(artifact=self.compile(source, values, mode))
        except CompileError as exc:
            return CompileResult(error=exc)

    # ---- LRU ---------------------------------------------------------------
    def _cache_get(self, key: tuple) -> Artifact | None:
        artifact = self._cache.pop(key, None)
        if artifact is not None:
            self._cache[key] = artifact
        return artifact

    def _cache_store(self, key: tuple, artifact: Artifact) -> None:
        if self._maxsize == 0:
            return
        self._cache[key] = artifact
        while len(self._cache) > self._maxsize:
            self._cache.popitem(last=False)

    def cache_info(self) -> dict[str, int]:
        return {
            "hits": self._hits,
            "misses": self._misses,
            "size": len(self._cache),
            "maxsize": self._maxsize,
        }

    def clear_cache(self) -> None:
        self._cache.clear()
        self._hits = 0
        self._misses = 0


__all__ = ["Artifact", "CompileResult", "SourceCompiler", "SKETCH_MODULE_NAME"]
