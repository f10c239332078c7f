import importlib
import sys
import types
import logging
import os
from pathlib import Path

import pytest


def _reload_config():
    sys.modules.pop("kbcrawl.config", None)
    return importlib.import_module("kbcrawl.config")


@pytest.fixture(autouse=True)
def _restore_config_module():
    yield
    sys.modules.pop("kbcrawl.config", None)
    importlib.import_module("kbcrawl.config")


def test_dotenv_present_but_fails_to_load(monkeypatch, tmp_path):
    tmp_path.joinpath(".env").write_text("USER_AGENT=FromFile")
    monkeypatch.chdir(tmp_path)

    fake = types.SimpleNamespace(load_dotenv=lambda: False)
    monkeypatch.setitem(sys.modules, "dotenv", fake)
    with pytest.raises(RuntimeError):
        _reload_config()


def test_dotenv_loads_sets_variables(monkeypatch, tmp_path):
    tmp_path.joinpath(".env").write_text("USER_AGENT=DotenvAgent")
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("USER_AGENT", raising=False)

    def fake_load():
        # emulate dotenv behavior: read .env and set os.environ
        p = Path(".env")
        for line in p.read_text().splitlines():
            if "=" in line:
                k, v = line.split("=", 1)
                monkeypatch.setenv(k, v)
        return True

    fake = types.SimpleNamespace(load_dotenv=fake_load)
    monkeypatch.setitem(sys.modules, "dotenv", fake)
    cfg = _reload_config()
    assert cfg.get_str_env("USER_AGENT", "KBCrawlBot/1.0") == "DotenvAgent"
    assert cfg.USER_AGENT == "DotenvAgent"


def test_numeric_helpers_fall_back_on_bad_values(monkeypatch, caplog):
    cfg = importlib.import_module("kbcrawl.config")
    caplog.set_level(logging.ERROR)

    monkeypatch.setenv("HTTP_TIMEOUT", "fast")
    assert cfg.get_int_env("HTTP_TIMEOUT", 10) == 10
    assert "Invalid HTTP_TIMEOUT" in caplog.text

    monkeypatch.setenv("KBCRAWL_BACKOFF_BASE_SECONDS", "0.25")
    assert cfg.get_float_env("KBCRAWL_BACKOFF_BASE_SECONDS", 1.0) == 0.25

    monkeypatch.setenv("KBCRAWL_API_PORT", "")
    assert cfg.get_optional_str_env("KBCRAWL_API_PORT") is None


def test_mode_timeouts_read_from_environment(monkeypatch):
    cfg = importlib.import_module("kbcrawl.config")
    monkeypatch.setenv("KBCRAWL_TIMEOUT_LIMITED_SECONDS", "120")
    monkeypatch.delenv("KBCRAWL_TIMEOUT_SINGLE_SECONDS", raising=False)
    monkeypatch.delenv("KBCRAWL_TIMEOUT_DEEP_SECONDS", raising=False)
    assert cfg.mode_timeouts() == {"single": 30.0, "limited": 120.0, "deep": 600.0}
    assert os.getenv("KBCRAWL_TIMEOUT_LIMITED_SECONDS") == "120"
