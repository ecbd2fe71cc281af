"""
共通レジストリ基底クラス
名前付きの純粋関数（イージング等）を、表記ゆれを吸収したキーで登録・取得する。
"""

import re
from abc import ABC
from typing import Any, Callable


class BaseRegistry(ABC):
    """レジストリの基底クラス。

    - 文字列キーは正規化されます（大文字小文字・キャメル→スネークを吸収）。
      例: "easeInOutQuad" / "ease-in-out-quad" / "ease_in_out_quad" は同一キー。
    - デコレータは名前省略可。省略時は関数/クラス名から自動推論します。
    """

    def __init__(self):
        self._registry: dict[str, Any] = {}

    # === 内部ユーティリティ ===
    @staticmethod
    def _camel_to_snake(name: str) -> str:
        s1 = re.sub(r"(.)([A-Z][a-z]+)", r"\1_\2", name)
        s2 = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", s1)
        return s2.lower()

    @classmethod
    def _normalize_key(cls, name: str) -> str:
        """レジストリキーの正規化（例: "easeOutBack" -> "ease_out_back"）。"""
        if not isinstance(name, str):
            raise TypeError("registry key must be str")
        if not name:
            raise ValueError("registry key must not be empty")
        name = name.replace("-", "_")
        # 大文字を含む場合のみキャメル→スネーク変換
        return cls._camel_to_snake(name) if any(c.isupper() for c in name) else name.lower()

    def register(self, name: str | None = None) -> Callable:
        """関数/クラスをレジストリに登録するデコレータ。"""

        def decorator(obj: Any) -> Any:
            key = self._normalize_key(name) if name else self._normalize_key(obj.__name__)
            if key in self._registry and self._registry[key] is not obj:
                raise ValueError(f"'{key}' is already registered")
            self._registry[key] = obj
            return obj

        return decorator

    def get(self, name: str) -> Any:
        """登録された関数/クラスを取得（未登録は KeyError）。"""
        key = self._normalize_key(name)
        if key not in self._registry:
            raise KeyError(f"'{name}' is not registered")
        return self._registry[key]

    def list_all(self) -> list[str]:
        """登録順のキー一覧。"""
        return list(self._registry.keys())

    def is_registered(self, name: str) -> bool:
        return self._normalize_key(name) in self._registry

    def unregister(self, name: str) -> None:
        """レジストリから削除（名前が存在しない場合は無視）。"""
        self._registry.pop(self._normalize_key(name), None)

    @property
    def registry(self) -> dict[str, Any]:
        """レジストリの読み取り専用コピー"""
        return self._registry.copy()
