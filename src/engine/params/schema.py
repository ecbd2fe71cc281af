"""
どこで: `engine.params` のスキーマ層。
何を: `@param` 注釈から得るパラメータ定義 `ParameterSchema`（種別・既定値・制約）と、
      呼び出し側が保持する値 `ParameterValue`（種別タグ付き）を定義。
なぜ: パーサ/照合/注入/コンパイラが同じ不変な記述子を共有するため。

補足:
- vector2/vector3/range の値は保存形式 `"1, 2, 3"`（カンマ区切り文字列）で保持する。
  シーケンスで渡された場合は生成時に保存形式へ正規化する（ハッシュ可能に保つ）。
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Literal, Sequence

ParameterKind = Literal["number", "boolean", "color", "select", "vector2", "vector3", "range"]

PARAMETER_KINDS: tuple[str, ...] = (
    "number",
    "boolean",
    "color",
    "select",
    "vector2",
    "vector3",
    "range",
)
VECTOR_KINDS = frozenset({"vector2", "vector3", "range"})

_KIND_DEFAULTS: dict[str, Any] = {
    "number": 0.0,
    "boolean": False,
    "color": "#000000",
    "select": "",
    "vector2": "0, 0",
    "vector3": "0, 0, 0",
    "range": "0, 100",
}


def kind_default(kind: str) -> Any:
    """種別ごとの既定値（注釈に `default` が無い場合）。"""
    try:
        return _KIND_DEFAULTS[kind]
    except KeyError:
        raise ValueError(f"unknown parameter kind: {kind!r}") from None


def format_number(value: float | int) -> str:
    """数値をソースへ埋め込むリテラルへ。整数値の float は `.0` を付けない。"""
    if isinstance(value, bool):
        raise TypeError("format_number() does not accept bool")
    if isinstance(value, int):
        return str(value)
    v = float(value)
    if math.isfinite(v) and v.is_integer() and abs(v) < 1e16:
        return str(int(v))
    return repr(v)


def vector_components(value: Any) -> list[str]:
    """保存形式の文字列またはシーケンスから成分のテキスト列を取り出す。"""
    if isinstance(value, str):
        return [c.strip() for c in value.split(",") if c.strip()]
    if isinstance(value, Sequence):
        out: list[str] = []
        for c in value:
            if isinstance(c, (int, float)) and not isinstance(c, bool):
                out.append(format_number(c))
            else:
                out.append(str(c).strip())
        return out
    return [str(value).strip()]


def format_vector(value: Any) -> str:
    """成分を保存形式 `"a, b, c"` に整形する。"""
    return ", ".join(vector_components(value))


@dataclass(frozen=True)
class ParameterConstraints:
    """UI 表示用の制約（実値のクランプには使わない）。"""

    min: float | None = None
    max: float | None = None
    step: float | None = None
    options: tuple[str, ...] | None = None


@dataclass(frozen=True)
class ParameterSchema:
    """1 つのユーザ公開コントロールの宣言的な形。"""

    name: str
    kind: ParameterKind
    default: Any
    constraints: ParameterConstraints = field(default_factory=ParameterConstraints)
    description: str | None = None
    line: int | None = None

    @property
    def min(self) -> float | None:
        return self.constraints.min

    @property
    def max(self) -> float | None:
        return self.constraints.max

    @property
    def step(self) -> float | None:
        return self.constraints.step

    @property
    def options(self) -> tuple[str, ...] | None:
        return self.constraints.options


@dataclass(frozen=True)
class ParameterValue:
    """種別タグ付きの現在値。所有者は呼び出し側（UI/ストア）。"""

    kind: ParameterKind
    value: Any

    def __post_init__(self) -> None:
        if self.kind not in PARAMETER_KINDS:
            raise ValueError(f"unknown parameter kind: {self.kind!r}")
        if self.kind in VECTOR_KINDS and not isinstance(self.value, str):
            object.__setattr__(self, "value", format_vector(self.value))
        elif isinstance(self.value, list):
            object.__setattr__(self, "value", tuple(self.value))


@dataclass(frozen=True)
class ParseIssue:
    """不正な `@param` 注釈 1 件分の診断。"""

    line: int
    message: str
    text: str


class ParseError(ValueError):
    """strict モードで不正な注釈が見つかった場合に送出。"""

    def __init__(self, issues: Sequence[ParseIssue]) -> None:
        self.issues = list(issues)
        lines = [f"line {i.line}: {i.message}" for i in self.issues]
        super().__init__("invalid @param annotation(s): " + "; ".join(lines))


__all__ = [
    "ParameterKind",
    "PARAMETER_KINDS",
    "VECTOR_KINDS",
    "ParameterConstraints",
    "ParameterSchema",
    "ParameterValue",
    "ParseIssue",
    "ParseError",
    "kind_default",
    "format_number",
    "format_vector",
    "vector_components",
]
