import os

import pytest

from config import (
    DEFAULT_MAX_ROUNDS,
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL,
    load_anthropic_config,
    load_bridge_config,
    load_sandbox_config,
)


def test_load_config_uses_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("ANTHROPIC_MODEL", raising=False)
    monkeypatch.delenv("ANTHROPIC_MAX_TOKENS", raising=False)

    cfg = load_anthropic_config()

    assert cfg.model == DEFAULT_MODEL
    assert cfg.max_tokens == DEFAULT_MAX_TOKENS


def test_load_config_honours_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ANTHROPIC_MODEL", "claude-test")
    monkeypatch.setenv("ANTHROPIC_MAX_TOKENS", "2048")

    cfg = load_anthropic_config()

    assert cfg.model == "claude-test"
    assert cfg.max_tokens == 2048


def test_load_config_invalid_tokens_falls_back(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ANTHROPIC_MODEL", " ")
    monkeypatch.setenv("ANTHROPIC_MAX_TOKENS", "not-an-int")

    cfg = load_anthropic_config()

    assert cfg.model == DEFAULT_MODEL
    assert cfg.max_tokens == DEFAULT_MAX_TOKENS


def test_sandbox_defaults_resolve_against_cwd(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    monkeypatch.delenv("MCP_BASE_REPOS", raising=False)
    monkeypatch.delenv("MCP_BASE_DEMO", raising=False)

    cfg = load_sandbox_config(tmp_path)

    root = str(tmp_path.resolve())
    assert cfg.repos_base == os.path.join(root, "repos")
    assert cfg.demo_base == os.path.join(root, "demo")


def test_sandbox_env_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    monkeypatch.setenv("MCP_BASE_REPOS", "/srv/repos/")
    monkeypatch.setenv("MCP_BASE_DEMO", "work/../scratch")

    cfg = load_sandbox_config(tmp_path)

    assert cfg.repos_base == "/srv/repos"
    assert cfg.demo_base == os.path.join(str(tmp_path.resolve()), "scratch")


@pytest.mark.parametrize("raw, expected", [(None, DEFAULT_MAX_ROUNDS), ("3", 3), ("0", DEFAULT_MAX_ROUNDS), ("x", DEFAULT_MAX_ROUNDS)])
def test_bridge_config_max_rounds(monkeypatch: pytest.MonkeyPatch, raw, expected) -> None:
    if raw is None:
        monkeypatch.delenv("TOOLBRIDGE_MAX_ROUNDS", raising=False)
    else:
        monkeypatch.setenv("TOOLBRIDGE_MAX_ROUNDS", raw)

    assert load_bridge_config().max_rounds == expected
