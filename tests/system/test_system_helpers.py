import subprocess
from types import SimpleNamespace

import mend.system as system
from mend.system import read_clipboard


def _fake_run(outputs, calls):
    def run(cmd, **kwargs):
        calls.append(cmd[0])
        rc, out = outputs[cmd[0]]
        return SimpleNamespace(returncode=rc, stdout=out)
    return run


def test_read_clipboard_uses_first_available_tool(monkeypatch):
    calls = []
    monkeypatch.setattr(system, "_which", lambda cmd: cmd in ("wl-paste", "xclip"))
    monkeypatch.setattr(
        subprocess, "run",
        _fake_run({"wl-paste": (0, b"@@ -1 +1 @@\n-a\n+b\n"), "xclip": (0, b"unused")}, calls),
    )
    assert read_clipboard() == "@@ -1 +1 @@\n-a\n+b\n"
    assert calls == ["wl-paste"]


def test_read_clipboard_falls_through_failures(monkeypatch):
    calls = []
    monkeypatch.setattr(system, "_which", lambda cmd: cmd in ("pbpaste", "xsel"))
    monkeypatch.setattr(
        subprocess, "run",
        _fake_run({"pbpaste": (1, b""), "xsel": (0, b"from xsel")}, calls),
    )
    assert read_clipboard() == "from xsel"
    assert calls == ["pbpaste", "xsel"]


def test_read_clipboard_survives_os_errors(monkeypatch):
    def boom(cmd, **kwargs):
        raise OSError("no such tool")

    monkeypatch.setattr(system, "_which", lambda cmd: True)
    monkeypatch.setattr(subprocess, "run", boom)
    assert read_clipboard() is None


def test_read_clipboard_without_tools(monkeypatch):
    monkeypatch.setattr(system, "_which", lambda cmd: False)
    assert read_clipboard() is None


def test_which_finds_executables_on_path(tmp_path, monkeypatch):
    tool = tmp_path / "fakepaste"
    tool.write_text("#!/bin/sh\n")
    tool.chmod(0o755)
    monkeypatch.setenv("PATH", str(tmp_path))
    assert system._which("fakepaste")
    assert not system._which("definitely-not-here")
