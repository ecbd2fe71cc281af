"""
どこで: `engine.params.parser`
何を: スケッチのソース文字列から `@param` 注釈を走査し、`ParameterSchema` の列を作る。
なぜ: コメントだけで UI コントロールを宣言できるようにするため（同じテキストなら同じスキーマ）。

文法:
    @param {kind} name [- description] [[key=value, key=value, ...]]

- kind: number / boolean / color / select / vector2 / vector3 / range（それ以外は黙ってスキップ）
- key: min / max / step / default / options
- 値にカンマを含められる: `=` を含まない区切りは直前のキーの値の続きとみなす
  （例: `[options=red,blue,green]`, `[default=0,0, step=0.1]`）。
- 壊れた注釈（名前なし・数値として読めない・重複名など）は `ParseIssue` として集め、
  既定では WARNING ログを出して捨てる。strict 時は `ParseError` を送出する。
"""

from __future__ import annotations

import logging
import re
from typing import Any

from common.settings import get as get_settings

from .schema import (
    PARAMETER_KINDS,
    ParameterConstraints,
    ParameterSchema,
    ParseError,
    ParseIssue,
    kind_default,
)

logger = logging.getLogger(__name__)

_ANNOTATION_RE = re.compile(r"@param\b")
_PARAM_RE = re.compile(
    r"@param[ \t]+\{(?P<kind>\w+)\}[ \t]+(?P<name>\w+)"
    r"(?:[ \t]*-[ \t]*(?P<description>[^\[\n]+))?"
    r"(?:[ \t]*\[(?P<options>[^\]\n]*)\])?"
)
_LEADING_NUMBER_RE = re.compile(r"\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")

OPTION_KEYS = ("min", "max", "step", "default", "options")


def _line_of(source: str, pos: int) -> int:
    return source.count("\n", 0, pos) + 1


def _line_text(source: str, pos: int) -> str:
    start = source.rfind("\n", 0, pos) + 1
    end = source.find("\n", pos)
    return source[start : end if end >= 0 else len(source)].strip()


def parse_number(text: str) -> float | None:
    """先頭の十進数を読む（`"10px"` → 10.0）。読めなければ None。"""
    m = _LEADING_NUMBER_RE.match(text)
    if m is None:
        return None
    return float(m.group(0))


def split_options(raw: str) -> tuple[list[tuple[str, str]], list[str]]:
    """`key=value, ...` を (key, value) 列へ分解する。

    `=` を含まない区切りは直前の値に `", "` で連結する。先頭で宙に浮いた区切りは
    2 つ目の戻り値（孤立セグメント）として返す。
    """
    pairs: list[list[str]] = []
    stray: list[str] = []
    for segment in raw.split(","):
        seg = segment.strip()
        if not seg:
            continue
        if "=" in seg:
            key, _, value = seg.partition("=")
            pairs.append([key.strip(), value.strip()])
        elif pairs:
            prev = pairs[-1][1]
            pairs[-1][1] = f"{prev}, {seg}" if prev else seg
        else:
            stray.append(seg)
    return [(k, v) for k, v in pairs], stray


def _coerce_default(kind: str, raw: str) -> Any:
    if kind == "number":
        return parse_number(raw)
    if kind == "boolean":
        return raw.strip().lower() == "true"
    return raw


def _build_entry(
    kind: str,
    name: str,
    description: str | None,
    options_raw: str | None,
    *,
    line: int,
    text: str,
    issues: list[ParseIssue],
) -> ParameterSchema:
    lo: float | None = None
    hi: float | None = None
    step: float | None = None
    options: tuple[str, ...] | None = None
    default: Any = kind_default(kind)
    explicit_default = False

    if options_raw is not None:
        pairs, stray = split_options(options_raw)
        for seg in stray:
            issues.append(ParseIssue(line, f"option segment without key: {seg!r}", text))
        for key, value in pairs:
            if key in ("min", "max", "step"):
                num = parse_number(value)
                if num is None:
                    issues.append(ParseIssue(line, f"{key} is not a number: {value!r}", text))
                    continue
                if key == "min":
                    lo = num
                elif key == "max":
                    hi = num
                else:
                    step = num
            elif key == "default":
                coerced = _coerce_default(kind, value)
                if coerced is None:
                    issues.append(ParseIssue(line, f"default is not a number: {value!r}", text))
                    continue
                default = coerced
                explicit_default = True
            elif key == "options":
                options = tuple(s.strip() for s in value.split(",") if s.strip())
            else:
                issues.append(ParseIssue(line, f"unknown option key: {key!r}", text))

    if kind == "select" and options and not explicit_default:
        default = options[0]

    desc = description.strip() if description else None
    return ParameterSchema(
        name=name,
        kind=kind,  # type: ignore[arg-type]
        default=default,
        constraints=ParameterConstraints(min=lo, max=hi, step=step, options=options),
        description=desc or None,
        line=line,
    )


def parse_with_issues(source: str) -> tuple[list[ParameterSchema], list[ParseIssue]]:
    """スキーマ列と、捨てた/無視した注釈の診断を返す（例外は送出しない）。"""
    schema: list[ParameterSchema] = []
    issues: list[ParseIssue] = []
    seen: set[str] = set()

    for anchor in _ANNOTATION_RE.finditer(source):
        pos = anchor.start()
        line = _line_of(source, pos)
        text = _line_text(source, pos)
        m = _PARAM_RE.match(source, pos)
        if m is None:
            issues.append(ParseIssue(line, "malformed @param annotation", text))
            continue
        kind = m.group("kind")
        name = m.group("name")
        if kind not in PARAMETER_KINDS:
            logger.debug("skip @param with unknown kind %r (line %d)", kind, line)
            continue
        if name in seen:
            issues.append(ParseIssue(line, f"duplicate parameter name: {name!r}", text))
            continue
        entry = _build_entry(
            kind,
            name,
            m.group("description"),
            m.group("options"),
            line=line,
            text=text,
            issues=issues,
        )
        seen.add(name)
        schema.append(entry)
    return schema, issues


def parse(source: str, *, strict: bool | None = None) -> list[ParameterSchema]:
    """ソースから順序付きのパラメータスキーマを抽出する。

    Parameters
    ----------
    source : str
        スケッチのソース文字列。
    strict : bool | None
        True で不正な注釈を `ParseError` として送出。None で設定
        （`SKS_STRICT_PARAMS`）に従う。

    Returns
    -------
    list[ParameterSchema]
        出現順のスキーマ。同名は先勝ち。
    """
    schema, issues = parse_with_issues(source)
    if issues:
        if strict is None:
            strict = get_settings().STRICT_PARAMS
        if strict:
            raise ParseError(issues)
        for issue in issues:
            logger.warning("@param ignored (line %d): %s", issue.line, issue.message)
    return schema


__all__ = ["parse", "parse_with_issues", "parse_number", "split_options", "OPTION_KEYS"]
