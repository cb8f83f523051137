"""Pytest fixtures for rectify tests."""

import os
import stat
from typing import Callable, Dict, List, Optional, Tuple

import pytest

from rectify.protocol import ExecutionResult, InputMode


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep tests away from the user's home config and trace log."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    monkeypatch.setenv("RECTIFY_TRACE_LOG", "")
    monkeypatch.delenv("RECTIFY_CONFIG", raising=False)
    return home


@pytest.fixture
def bin_dir(tmp_path):
    path = tmp_path / "bin"
    path.mkdir()
    return path


@pytest.fixture
def make_stub(bin_dir):
    """Create an executable shell script standing in for a formatter.

    Usage:
        make_stub("prettier", 'cat')                   # pass-through
        make_stub("phpcbf", 'printf "x" > "$2"; exit 1')
    """
    def _make(name: str, body: str, directory=None) -> str:
        target = (directory or bin_dir) / name
        target.write_text(f"#!/bin/sh\n{body}\n")
        target.chmod(target.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return str(target)
    return _make


@pytest.fixture
def path_env(bin_dir):
    """Environment whose PATH is the stub directory plus /bin and /usr/bin."""
    return {"PATH": os.pathsep.join([str(bin_dir), "/usr/bin", "/bin"])}


# Script entry: text -> (exit status or None for a launch failure, output)
Script = Callable[[str], Tuple[Optional[int], str]]


class FakeRunner:
    """In-memory ProcessRunner returning scripted results.

    STDIN tools return their output on stdout. TEMP_FILE tools get an
    in-memory "file" holding their output.
    """

    def __init__(self, scripts: Dict[str, Script]):
        self.scripts = scripts
        self.calls: List[Tuple[str, str]] = []
        self.files: Dict[str, str] = {}
        self.discarded: List[str] = []
        self.reads: List[str] = []

    def invoke(self, executable_path, tool, target_path, text, project_root=None,
               on_start=None):
        self.calls.append((tool.identifier, text))
        if on_start is not None:
            on_start([executable_path])
        status, output = self.scripts[tool.identifier](text)

        temp_file = None
        if tool.input_mode is InputMode.TEMP_FILE:
            temp_file = f"/fake-tmp/{tool.identifier}-{len(self.calls)}.php"
            self.files[temp_file] = output if status is not None else text

        if status is None:
            return ExecutionResult(tool=tool.identifier, succeeded=False,
                                   produced_temp_file=temp_file, error="launch failed")

        return ExecutionResult(
            tool=tool.identifier,
            succeeded=tool.classify_result(executable_path, status),
            exit_status=status,
            stdout=output if tool.input_mode is InputMode.STDIN else "",
            produced_temp_file=temp_file,
        )

    def read_output(self, path):
        self.reads.append(path)
        if path not in self.files:
            raise FileNotFoundError(path)
        return self.files[path]

    def discard(self, path):
        self.discarded.append(path)
        if path not in self.files:
            raise FileNotFoundError(path)
        del self.files[path]


def _resolve_all(name, search_dirs, project_root=None):
    return f"/usr/local/bin/{name}"


@pytest.fixture
def fake_runner():
    """Factory for FakeRunner instances: fake_runner({"prettier": fn})."""
    return FakeRunner


@pytest.fixture
def resolve_all():
    """Resolver that finds every executable under /usr/local/bin."""
    return _resolve_all


@pytest.fixture
def resolve_none():
    """Resolver that finds nothing."""
    return lambda name, search_dirs, project_root=None: None
