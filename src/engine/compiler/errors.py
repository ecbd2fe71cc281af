"""
どこで: `engine.compiler.errors`
何を: スケッチ由来の型付き例外（`CompileError` / `SketchRuntimeError`）と、例外から
      行/列を取り出して周辺行つきで整形するヘルパを提供。
なぜ: 構文エラーやトップレベル評価時・フレーム実行時の例外を、ホストを止めずに
      「Line N: message」＋周辺コードとして利用者へ返すため。

行/列の決め方:
- `SyntaxError`（ファイル名が `<sketch>`）: 例外自身の `lineno` / `offset`。
- それ以外: トレースバック中で `<sketch>` に属する最も深いフレームの行/列。
- いずれもハーネスが先頭に挿入した行数を引き、ソース範囲外なら None。
"""

from __future__ import annotations

import traceback
from typing import Optional

SKETCH_FILENAME = "<sketch>"


def exception_location(
    exc: BaseException, *, filename: str = SKETCH_FILENAME
) -> tuple[Optional[int], Optional[int]]:
    """例外の位置メタデータから (line, column)（いずれも 1 始まり）を取り出す。"""
    if isinstance(exc, SyntaxError) and exc.filename == filename:
        return exc.lineno, exc.offset
    frames = [f for f in traceback.extract_tb(exc.__traceback__) if f.filename == filename]
    if not frames:
        return None, None
    last = frames[-1]
    colno = getattr(last, "colno", None)
    return last.lineno, (colno + 1 if colno is not None else None)


def resolve_location(
    exc: BaseException, source: str, *, line_offset: int = 0
) -> tuple[Optional[int], Optional[int]]:
    """`exception_location` の結果からハーネス分を引き、範囲外を落とす。"""
    line, column = exception_location(exc)
    if line is None:
        return None, None
    line -= line_offset
    line_count = source.count("\n") + 1
    if not 1 <= line <= line_count:
        return None, None
    return line, column


def _message_of(exc: BaseException) -> str:
    if isinstance(exc, SyntaxError) and exc.msg:
        return str(exc.msg)
    text = str(exc)
    return text if text else type(exc).__name__


class CompileError(Exception):
    """ソースの構築（構文）またはトップレベル評価の失敗。"""

    def __init__(
        self,
        message: str,
        *,
        line: int | None = None,
        column: int | None = None,
        kind: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column
        self.kind = kind

    @classmethod
    def from_exception(
        cls, exc: BaseException, *, source: str, line_offset: int = 0
    ) -> "CompileError":
        line, column = resolve_location(exc, source, line_offset=line_offset)
        return cls(_message_of(exc), line=line, column=column, kind=type(exc).__name__)

    def __str__(self) -> str:
        if self.line is not None:
            return f"Line {self.line}: {self.message}"
        return self.message


class SketchRuntimeError(Exception):
    """フレームごとのフック（setup/draw/render）が例外を送出した。"""

    def __init__(
        self,
        message: str,
        *,
        line: int | None = None,
        column: int | None = None,
        frame: int | None = None,
        original: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column
        self.frame = frame
        self.original = original

    @classmethod
    def from_exception(
        cls,
        exc: BaseException,
        *,
        source: str | None = None,
        frame: int | None = None,
        line_offset: int = 0,
    ) -> "SketchRuntimeError":
        if source is not None:
            line, column = resolve_location(exc, source, line_offset=line_offset)
        else:
            line, column = None, None
        message = f"{type(exc).__name__}: {_message_of(exc)}"
        return cls(message, line=line, column=column, frame=frame, original=exc)

    def __str__(self) -> str:
        if self.line is not None:
            return f"Line {self.line}: {self.message}"
        return self.message


def error_context(source: str, line: int, *, radius: int = 2) -> str:
    """エラー行の前後 `radius` 行を `"> 12 | text"` 形式で返す（エラー行に `>`）。"""
    lines = source.split("\n")
    start = max(0, line - 1 - radius)
    end = min(len(lines), line + radius)
    out = []
    for index in range(start, end):
        number = index + 1
        prefix = ">" if number == line else " "
        out.append(f"{prefix} {str(number).rjust(3)} | {lines[index]}")
    return "\n".join(out)


def format_error(error: BaseException, source: str | None = None) -> str:
    """UI 表示用の文字列。行が分かれば周辺コードを付ける。"""
    text = str(error)
    line = getattr(error, "line", None)
    if source and line:
        text += "\n\n" + error_context(source, line)
    return text


__all__ = [
    "SKETCH_FILENAME",
    "CompileError",
    "SketchRuntimeError",
    "exception_location",
    "resolve_location",
    "error_context",
    "format_error",
]
