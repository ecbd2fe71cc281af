"""
どこで: `common.settings`
何を: ランタイムの環境変数を型付きで一元管理し、起動時に読み込む。
なぜ: `os.getenv` の散在を解消し、既定値/型の一貫性とテスト容易性（monkeypatch + reload）を高めるため。

対応する環境変数:
- `SKS_COMPILED_CACHE_MAXSIZE`: コンパイル済み Artifact の LRU 上限（0 で無効、負値は 0）。
- `SKS_STRICT_PARAMS`: 不正な `@param` 注釈を `ParseError` として送出する。
- `SKS_DEFAULT_FPS`: 設定ファイルにも引数にも FPS が無い場合の既定値。
- `SKS_LOG_LEVEL`: `api.run_sketch` が適用する既定ログレベル。
"""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_bool, env_int, env_str


@dataclass
class _Settings:
    # Compiler
    COMPILED_CACHE_MAXSIZE: int = 128

    # Parameters
    STRICT_PARAMS: bool = False

    # Animation
    DEFAULT_FPS: int = 60

    # Misc
    LOG_LEVEL: str = "INFO"


_settings = _Settings()


def reload_from_env() -> None:
    """環境変数から設定を再読込。

    - bool は `env_bool`、int は `env_int` を使用。
    - キャッシュ上限は負値を 0 に、FPS は 1 未満を 1 に丸める。
    """
    cache_max = env_int("SKS_COMPILED_CACHE_MAXSIZE", 128)
    _settings.COMPILED_CACHE_MAXSIZE = max(0, cache_max if cache_max is not None else 128)

    _settings.STRICT_PARAMS = env_bool("SKS_STRICT_PARAMS", False)

    _settings.DEFAULT_FPS = env_int("SKS_DEFAULT_FPS", 60, min_value=1) or 60

    _settings.LOG_LEVEL = env_str("SKS_LOG_LEVEL", "INFO").upper()


def get() -> _Settings:
    """現在の設定スナップショットを返す。"""
    return _settings


# 初期ロード
reload_from_env()


__all__ = ["get", "reload_from_env", "_Settings"]
