"""
どこで: `engine.params.reconcile`
何を: 既存のパラメータ値を新しいスキーマへ突き合わせる（削除/保持/既定値化）。
なぜ: ソース編集でスキーマが変わっても、種別が変わっていないユーザ値は失わないため。

規則:
- スキーマに無い名前は捨てる。
- 両方にある名前は種別が同じなら既存値を保持、違えば新しい既定値へ。
- 新しく現れた名前はスキーマの既定値。
- 出力はスキーマ順。2 回適用しても結果は変わらない（冪等）。
"""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from .schema import ParameterSchema, ParameterValue


def reconcile(
    existing: Mapping[str, ParameterValue], schema: Sequence[ParameterSchema]
) -> dict[str, ParameterValue]:
    updated: dict[str, ParameterValue] = {}
    for entry in schema:
        current = existing.get(entry.name)
        if current is not None and current.kind == entry.kind:
            updated[entry.name] = current
        else:
            updated[entry.name] = ParameterValue(entry.kind, entry.default)
    return updated


def defaults(schema: Sequence[ParameterSchema]) -> dict[str, ParameterValue]:
    """スキーマの既定値だけで作る初期値（空の既存値との照合）。"""
    return reconcile({}, schema)


def values_from_mapping(
    raw: Mapping[str, Any], schema: Sequence[ParameterSchema]
) -> dict[str, ParameterValue]:
    """素の `{name: value}` をスキーマの種別でタグ付けする。

    `ParameterValue` はそのまま通す。スキーマに無い素の値は種別が決まらないので捨てる。
    """
    kinds = {entry.name: entry.kind for entry in schema}
    tagged: dict[str, ParameterValue] = {}
    for name, value in raw.items():
        if isinstance(value, ParameterValue):
            tagged[name] = value
        elif name in kinds:
            tagged[name] = ParameterValue(kinds[name], value)
    return tagged


__all__ = ["reconcile", "defaults", "values_from_mapping"]
