import os

import pytest

from config import SandboxConfig
from errors import ErrorType, SanitizationError
from session.state import SessionState
from tools.sanitizer import SanitizerKind, force_under_base, is_within, sanitize_arguments


BASE = "/sandbox/repos"
SANDBOX = SandboxConfig(repos_base="/sandbox/repos", demo_base="/sandbox/demo")


def _vc(name, args, state):
    return sanitize_arguments(name, args, state, SanitizerKind.VERSION_CONTROL, SANDBOX)


def _fs(args, state):
    return sanitize_arguments("write_file", args, state, SanitizerKind.FILESYSTEM, SANDBOX)


def test_escape_is_coerced_to_basename():
    assert force_under_base(BASE, "../../etc/passwd") == "/sandbox/repos/passwd"


@pytest.mark.parametrize(
    "value, expected",
    [
        ("notes.txt", "/sandbox/repos/notes.txt"),
        ("a/b/c.txt", "/sandbox/repos/a/b/c.txt"),
        ("/sandbox/repos/project/file", "/sandbox/repos/project/file"),
        ("/etc/passwd", "/sandbox/repos/passwd"),
        ("a/../../b", "/sandbox/repos/b"),
        ("/sandbox/repos-evil/x", "/sandbox/repos/x"),
        ("/sandbox/repos", "/sandbox/repos"),
        ("", "/sandbox/repos"),
        (".", "/sandbox/repos"),
        ("..", "/sandbox/repos"),
        ("../", "/sandbox/repos"),
        ("/", "/sandbox/repos"),
    ],
)
def test_force_under_base(value, expected):
    assert force_under_base(BASE, value) == expected


@pytest.mark.parametrize(
    "value",
    [
        "../../../../../../",
        "../..",
        "/sandbox",
        "/sandbox/",
        "sub/../../..",
        "./../repos/../..",
        "//etc//passwd",
        "~/secret",
        "../repos-other/file",
        "a/./b/../../../../c",
    ],
)
def test_confinement_invariant(value):
    result = force_under_base(BASE, value)
    assert result == BASE or result.startswith(BASE + os.sep)
    assert is_within(BASE, result)
    assert ".." not in result.split(os.sep)


def test_version_control_explicit_path_is_confined_and_remembered():
    state = SessionState()

    args = _vc("git_status", {"repo_path": "project"}, state)

    assert args["repo_path"] == "/sandbox/repos/project"
    assert state.current_repo_path == "/sandbox/repos/project"


def test_version_control_session_path_propagates():
    state = SessionState()

    first = _vc("git_init", {"repo_path": "/home/user/work/demo-repo"}, state)
    second = _vc("git_status", {}, state)

    assert first["repo_path"] == "/sandbox/repos/demo-repo"
    assert second["repo_path"] == first["repo_path"]


def test_version_control_defaults_to_repo_mcp():
    state = SessionState()

    args = _vc("git_log", {"max_count": 3}, state)

    assert args == {"max_count": 3, "repo_path": "/sandbox/repos/repo-mcp"}
    assert state.current_repo_path == "/sandbox/repos/repo-mcp"


def test_version_control_escape_in_repo_path():
    state = SessionState()

    args = _vc("git_status", {"repo_path": "../../../etc"}, state)

    assert args["repo_path"] == "/sandbox/repos/etc"


def test_stage_files_absolute_entries_become_relative():
    state = SessionState()
    args = _vc(
        "git_add",
        {
            "repo_path": "proj",
            "files": [
                "/sandbox/repos/proj/src/app.py",
                "/sandbox/repos/proj",
                "README.md",
                "/elsewhere/notes.txt",
            ],
        },
        state,
    )

    assert args["files"] == ["src/app.py", ".", "README.md", "notes.txt"]


def test_files_untouched_for_other_tools():
    state = SessionState()
    args = _vc("git_diff", {"files": ["/abs/path.txt"]}, state)
    assert args["files"] == ["/abs/path.txt"]


def test_raw_arguments_are_not_mutated():
    state = SessionState()
    raw = {"repo_path": "../x", "files": ["/sandbox/repos/x/a"]}
    _vc("git_add", raw, state)
    assert raw == {"repo_path": "../x", "files": ["/sandbox/repos/x/a"]}


def test_filesystem_without_repo_uses_demo_base():
    state = SessionState()

    args = _fs({"path": "notes/today.txt", "content": "hi"}, state)

    assert args == {"path": "/sandbox/demo/notes/today.txt", "content": "hi"}
    assert state.current_repo_path is None


def test_filesystem_source_and_destination_are_confined():
    state = SessionState()

    args = _fs({"source": "../../etc/shadow", "destination": "/tmp/out.txt"}, state)

    assert args["source"] == "/sandbox/demo/shadow"
    assert args["destination"] == "/sandbox/demo/out.txt"


def test_filesystem_with_repo_resolves_against_repo():
    state = SessionState(current_repo_path="/sandbox/repos/proj")

    args = _fs({"path": "/somewhere/else/main.py", "source": "src/lib.py", "destination": "../../x"}, state)

    assert args["path"] == "/sandbox/repos/proj/main.py"
    assert args["source"] == "/sandbox/repos/proj/src/lib.py"
    assert args["destination"] == "/sandbox/repos/proj/x"


def test_filesystem_follows_repo_set_by_version_control():
    state = SessionState()
    _vc("git_init", {"repo_path": "site"}, state)

    args = _fs({"path": "index.html"}, state)

    assert args["path"] == "/sandbox/repos/site/index.html"


def test_filesystem_skips_empty_values():
    state = SessionState()

    args = _fs({"path": "", "source": None, "other": "../x"}, state)

    assert args == {"path": "", "source": None, "other": "../x"}


@pytest.mark.parametrize("key", ["path", "source", "destination"])
@pytest.mark.parametrize("value", [["/etc/passwd"], {"p": "/etc"}, 42, []])
def test_filesystem_rejects_non_string_paths(key, value):
    state = SessionState(current_repo_path="/sandbox/repos/proj")

    with pytest.raises(SanitizationError) as exc:
        _fs({key: value}, state)

    assert exc.value.argument == key
    assert exc.value.error_type is ErrorType.VALIDATION


@pytest.mark.parametrize("entry", [["/etc/passwd"], {"p": "/etc"}, 42])
def test_stage_files_rejects_non_string_entries(entry):
    state = SessionState()

    with pytest.raises(SanitizationError):
        _vc("git_add", {"repo_path": "proj", "files": ["ok.txt", entry]}, state)

    assert state.current_repo_path is None


def test_stage_files_single_string_is_confined():
    state = SessionState()

    args = _vc("git_add", {"repo_path": "proj", "files": "/etc/passwd"}, state)

    assert args["files"] == ["passwd"]


def test_stage_files_rejects_mapping():
    with pytest.raises(SanitizationError):
        _vc("git_add", {"files": {"a": "/etc/passwd"}}, SessionState())


def test_none_kind_is_identity():
    state = SessionState(current_repo_path="/sandbox/repos/proj")
    raw = {"path": "/etc/passwd", "q": "egg"}

    args = sanitize_arguments("jokes_search", raw, state, SanitizerKind.NONE, SANDBOX)

    assert args == raw
    assert state.current_repo_path == "/sandbox/repos/proj"


def test_missing_arguments_are_treated_as_empty():
    state = SessionState()
    assert sanitize_arguments("list", None, state, SanitizerKind.NONE, SANDBOX) == {}
    assert _fs(None, state) == {}


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("filesystem", SanitizerKind.FILESYSTEM),
        ("fs", SanitizerKind.FILESYSTEM),
        ("git", SanitizerKind.VERSION_CONTROL),
        ("version-control", SanitizerKind.VERSION_CONTROL),
        (" NONE ", SanitizerKind.NONE),
        (None, SanitizerKind.NONE),
        (SanitizerKind.FILESYSTEM, SanitizerKind.FILESYSTEM),
    ],
)
def test_sanitizer_kind_parse(raw, expected):
    assert SanitizerKind.parse(raw) is expected


def test_sanitizer_kind_parse_rejects_unknown():
    with pytest.raises(ValueError):
        SanitizerKind.parse("shell")
