"""
どこで: `engine.params` サブパッケージ。
何を: `@param` 注釈からのスキーマ抽出・既存値との照合・ソースへの値注入を提供。
なぜ: スケッチの UI コントロールをコメントだけで宣言し、値をコンパイル前に決定的に焼き込むため。
"""

from .directory import ParameterDirectory
from .inject import inject, serialize_value
from .parser import parse, parse_with_issues
from .reconcile import defaults, reconcile, values_from_mapping
from .schema import (
    PARAMETER_KINDS,
    ParameterConstraints,
    ParameterKind,
    ParameterSchema,
    ParameterValue,
    ParseError,
    ParseIssue,
)

__all__ = [
    "ParameterDirectory",
    "parse",
    "parse_with_issues",
    "reconcile",
    "defaults",
    "values_from_mapping",
    "inject",
    "serialize_value",
    "PARAMETER_KINDS",
    "ParameterConstraints",
    "ParameterKind",
    "ParameterSchema",
    "ParameterValue",
    "ParseError",
    "ParseIssue",
]
