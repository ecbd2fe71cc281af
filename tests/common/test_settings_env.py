from __future__ import annotations

import logging

import pytest

from common import settings
from common.env import env_bool, env_int, env_str
from common.logging import resolve_level, setup_default_logging
from common.param_utils import clamp, clamp01


def test_defaults_without_env(clean_env: pytest.MonkeyPatch) -> None:
    s = settings.get()
    assert s.COMPILED_CACHE_MAXSIZE == 128
    assert s.STRICT_PARAMS is False
    assert s.DEFAULT_FPS == 60
    assert s.LOG_LEVEL == "INFO"


def test_reload_from_env(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("SKS_COMPILED_CACHE_MAXSIZE", "-5")
    clean_env.setenv("SKS_STRICT_PARAMS", "yes")
    clean_env.setenv("SKS_DEFAULT_FPS", "0")
    clean_env.setenv("SKS_LOG_LEVEL", "debug")
    settings.reload_from_env()
    s = settings.get()
    assert s.COMPILED_CACHE_MAXSIZE == 0
    assert s.STRICT_PARAMS is True
    assert s.DEFAULT_FPS == 1
    assert s.LOG_LEVEL == "DEBUG"


def test_env_helpers(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SKS_TEST_INT", " 12 ")
    monkeypatch.setenv("SKS_TEST_BAD", "twelve")
    monkeypatch.setenv("SKS_TEST_BOOL", "off")
    monkeypatch.setenv("SKS_TEST_STR", "   ")
    assert env_int("SKS_TEST_INT", 0) == 12
    assert env_int("SKS_TEST_INT", 0, min_value=20) == 20
    assert env_int("SKS_TEST_BAD", 7) == 7
    assert env_int("SKS_TEST_MISSING") is None
    assert env_bool("SKS_TEST_BOOL", True) is False
    assert env_bool("SKS_TEST_MISSING", True) is True
    assert env_str("SKS_TEST_STR", "fallback") == "fallback"


def test_resolve_level() -> None:
    assert resolve_level("warning") == logging.WARNING
    assert resolve_level("nonsense") == logging.INFO
    assert resolve_level(10) == logging.DEBUG


def test_setup_default_logging_keeps_existing_handlers() -> None:
    root = logging.getLogger()
    before = list(root.handlers)
    handler = logging.NullHandler()
    root.addHandler(handler)
    try:
        setup_default_logging("DEBUG")
        assert root.handlers == before + [handler]
    finally:
        root.removeHandler(handler)


def test_clamp_helpers() -> None:
    assert clamp01(-1.0) == 0.0
    assert clamp01(2.0) == 1.0
    assert clamp(5.0, 0.0, 3.0) == 3.0
