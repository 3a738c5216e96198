"""Shared pytest fixtures for the tool bridge test suite."""
from __future__ import annotations

import os

import pytest

from config import SandboxConfig
from session.state import SessionState
from tests.mocking import MockAnthropic


@pytest.fixture
def anthropic_mock() -> MockAnthropic:
    """Provide a scripted ``MockAnthropic`` client."""
    return MockAnthropic()


@pytest.fixture
def sandbox(tmp_path) -> SandboxConfig:
    """Sandbox rooted in a temporary directory."""
    root = os.path.realpath(str(tmp_path))
    return SandboxConfig(
        repos_base=os.path.join(root, "repos"),
        demo_base=os.path.join(root, "demo"),
    )


@pytest.fixture
def session_state() -> SessionState:
    return SessionState()
