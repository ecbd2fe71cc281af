"""
どこで: `engine.params.directory`
何を: parse/reconcile/inject を 1 つの窓口にまとめた `ParameterDirectory`。
なぜ: コンパイラ/ランナー/UI が strict 設定を共有したまま同じ操作列を呼べるようにするため。
"""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from .inject import inject
from .parser import parse, parse_with_issues
from .reconcile import defaults, reconcile, values_from_mapping
from .schema import ParameterSchema, ParameterValue, ParseIssue


class ParameterDirectory:
    """パラメータ操作のファサード（状態は strict フラグのみ）。"""

    def __init__(self, *, strict: bool | None = None) -> None:
        self._strict = strict

    def parse(self, source: str) -> list[ParameterSchema]:
        return parse(source, strict=self._strict)

    def diagnose(self, source: str) -> list[ParseIssue]:
        return parse_with_issues(source)[1]

    def reconcile(
        self, existing: Mapping[str, ParameterValue], schema: Sequence[ParameterSchema]
    ) -> dict[str, ParameterValue]:
        return reconcile(existing, schema)

    def defaults(self, schema: Sequence[ParameterSchema]) -> dict[str, ParameterValue]:
        return defaults(schema)

    def inject(self, source: str, values: Mapping[str, ParameterValue | Any]) -> str:
        return inject(source, values)

    def resolve(
        self, source: str, existing: Mapping[str, ParameterValue | Any] | None = None
    ) -> dict[str, ParameterValue]:
        """ソースを解析し、既存値（素の値も可）を照合した現在値を返す。"""
        schema = self.parse(source)
        tagged = values_from_mapping(existing or {}, schema)
        return reconcile(tagged, schema)


__all__ = ["ParameterDirectory"]
