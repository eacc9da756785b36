from __future__ import annotations

import io

from tmux_quickstart.report import (
    COLOR,
    PLAIN,
    detect_markers,
    format_result,
    format_session_header,
    supports_color,
    truncate,
)


class _Tty(io.StringIO):
    def isatty(self):
        return True


def test_plain_result_line_layout():
    line = format_result(PLAIN, "win1", "echo hi", "pass")
    assert line == "  [PASS] " + "win1".ljust(20) + " echo hi"


def test_reason_suffix():
    assert format_result(PLAIN, "w", "cmd", "pass", "restarted").endswith("cmd (restarted)")
    assert format_result(PLAIN, "w", "cmd", "skip", "already exists").startswith("  [SKIP] w ")
    assert "[FAIL]" in format_result(PLAIN, "w", "cmd", "fail", "restart failed")


def test_long_command_is_truncated():
    cmd = ("echo this is a very long command that should be truncated at sixty "
           "characters by the log_result function")
    shown = truncate(cmd)
    assert len(shown) == 60
    assert shown.endswith("...")
    assert shown[:-3] == cmd[:57]

    line = format_result(PLAIN, "longwin", cmd, "pass")
    assert "..." in line
    assert cmd not in line
    assert "log_result function" not in line


def test_command_at_limit_is_untouched():
    cmd = "x" * 60
    assert truncate(cmd) == cmd


def test_plain_output_has_no_escape_codes():
    line = format_result(PLAIN, "w", "cmd", "skip", "already exists")
    assert "\033[" not in line
    assert format_session_header(PLAIN, "alpha") == "\n[alpha]"


def test_color_markers_use_glyphs():
    assert "✓" in format_result(COLOR, "w", "cmd", "pass")
    assert "⊘" in format_result(COLOR, "w", "cmd", "skip")
    assert "✗" in format_result(COLOR, "w", "cmd", "fail")


def test_detect_markers(monkeypatch):
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.setenv("TERM", "xterm-256color")
    assert detect_markers(io.StringIO()) is PLAIN
    assert detect_markers(_Tty()) is COLOR

    monkeypatch.setenv("NO_COLOR", "1")
    assert not supports_color(_Tty())

    monkeypatch.delenv("NO_COLOR")
    monkeypatch.setenv("TERM", "dumb")
    assert not supports_color(_Tty())
