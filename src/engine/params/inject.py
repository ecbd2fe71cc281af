"""
どこで: `engine.params.inject`
何を: 現在のパラメータ値をソース文字列の変数宣言へ書き込む（テキスト置換のみ、AST は使わない）。
なぜ: コンパイル前に UI の値をスケッチへ焼き込み、同じ値なら同じソース（= 同じ Artifact）にするため。

置換対象（名前ごとに、見つかったものすべて）:
1) キーワード宣言 `(const|let|var) name = <expr>`（`;` か改行まで）。
   ネストしたスコープの同名宣言も書き換わる（既知の制限）。
2) Python のモジュールレベル代入: 行頭（0 桁目）の `name = <expr>`（`==` と型注釈付きは対象外）。
   右辺は文の終わりまで（括弧内の改行や文字列中の `;` を越えて複数行にまたがってよい）。
   行末コメント `# ...` は残す。

直列化:
- number → 数値リテラル、boolean → 1) は `true/false`、2) は `True/False`
- color/select → ダブルクォート文字列
- vector2/vector3/range → `[a, b, c]`
置換した式以外のテキストはバイト単位で変えない。
"""

from __future__ import annotations

import json
import re
from typing import Any, Mapping

from .schema import VECTOR_KINDS, ParameterValue, format_number, vector_components


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


def _bool_literal(flag: bool, *, python: bool) -> str:
    if python:
        return "True" if flag else "False"
    return "true" if flag else "false"


def _number_literal(value: Any) -> str:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return format_number(value)
    try:
        return format_number(float(str(value).strip()))
    except ValueError:
        return str(value)


def serialize_value(value: Any, kind: str | None = None, *, python: bool = False) -> str | None:
    """値をソースに埋め込むリテラル文字列へ。埋め込めない値（None）は None。"""
    if kind is not None:
        if kind == "number":
            return _number_literal(value)
        if kind == "boolean":
            flag = value if isinstance(value, bool) else str(value).strip().lower() == "true"
            return _bool_literal(flag, python=python)
        if kind in VECTOR_KINDS:
            return "[" + ", ".join(vector_components(value)) + "]"
        return _quote(str(value))

    # 種別タグなし: Python の型で決める
    if value is None:
        return None
    if isinstance(value, bool):
        return _bool_literal(value, python=python)
    if isinstance(value, (int, float)):
        return format_number(value)
    if isinstance(value, str):
        return _quote(value)
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(vector_components(value)) + "]"
    return repr(value)


def _trailing_space(expr: str) -> str:
    head = expr.rstrip()
    return expr[len(head) :]


def _skip_string(text: str, i: int) -> int:
    """`text[i]` の引用符で始まる文字列リテラルの直後の位置。"""
    delim = text[i : i + 3] if text[i : i + 3] in ('"""', "'''") else text[i]
    i += len(delim)
    while i < len(text):
        if text[i] == "\\":
            i += 2
            continue
        if text.startswith(delim, i):
            return i + len(delim)
        if len(delim) == 1 and text[i] == "\n":
            return i
        i += 1
    return len(text)


def _expression_end(text: str, start: int) -> int:
    """`start` から始まる右辺の終端（末尾の空白と `#` コメントは含めない）。

    括弧の内側・文字列リテラルの中・行継続 `\\` の `;` / 改行 / `#` では文を終えない。
    """
    depth = 0
    end = start
    i = start
    while i < len(text):
        ch = text[i]
        if ch in "'\"":
            i = end = _skip_string(text, i)
            continue
        if ch == "#":
            if depth == 0:
                return end
            nl = text.find("\n", i)
            i = len(text) if nl < 0 else nl
            continue
        if ch == "\\" and text.startswith("\n", i + 1):
            i += 2
            continue
        if depth == 0 and ch in ";\n":
            return end
        if ch in "([{":
            depth += 1
        elif ch in ")]}":
            depth = max(0, depth - 1)
        i += 1
        if not ch.isspace():
            end = i
    return end


def _keyword_pattern(name: str) -> re.Pattern[str]:
    return re.compile(rf"(\b(?:const|let|var)\s+{re.escape(name)}\s*=\s*)([^;\n]+)")


def _module_pattern(name: str) -> re.Pattern[str]:
    return re.compile(rf"^{re.escape(name)}[ \t]*=(?!=)[ \t]*", re.MULTILINE)


def _rewrite_module_assignments(source: str, name: str, literal: str) -> str:
    parts: list[str] = []
    pos = 0
    for m in _module_pattern(name).finditer(source):
        if m.start() < pos:
            # 直前に置き換えた複数行の右辺の内側
            continue
        end = _expression_end(source, m.end())
        if end == m.end():
            continue
        parts.append(source[pos : m.end()])
        parts.append(literal)
        pos = end
    parts.append(source[pos:])
    return "".join(parts)


def inject(source: str, values: Mapping[str, ParameterValue | Any]) -> str:
    """各パラメータの宣言の右辺を現在値で書き換えたソースを返す。"""
    updated = source
    for name, entry in values.items():
        if isinstance(entry, ParameterValue):
            kind: str | None = entry.kind
            raw = entry.value
        else:
            kind, raw = None, entry

        keyword_literal = serialize_value(raw, kind, python=False)
        python_literal = serialize_value(raw, kind, python=True)
        if keyword_literal is None or python_literal is None:
            continue

        def _keyword_sub(m: re.Match[str], lit: str = keyword_literal) -> str:
            return m.group(1) + lit + _trailing_space(m.group(2))

        updated = _keyword_pattern(name).sub(_keyword_sub, updated)
        updated = _rewrite_module_assignments(updated, name, python_literal)
    return updated


__all__ = ["inject", "serialize_value"]
