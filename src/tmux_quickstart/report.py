# -*- coding: utf-8 -*-
"""
report.py

One-line result formatting for tmux-start and the output capability
strategy shared with tmux-list. Nothing here feeds back into
reconciliation.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional, TextIO


NAME_WIDTH = 20
MAX_COMMAND_WIDTH = 60
ELLIPSIS = "..."


@dataclass(frozen=True)
class Markers:
    passed: str
    failed: str
    skipped: str
    bold: str = ""
    yellow: str = ""
    cyan: str = ""
    reset: str = ""

    def marker(self, status: str) -> str:
        return {"pass": self.passed, "fail": self.failed, "skip": self.skipped}[status]


PLAIN = Markers(passed="[PASS]", failed="[FAIL]", skipped="[SKIP]")

COLOR = Markers(
    passed="\033[32m✓\033[0m",
    failed="\033[31m✗\033[0m",
    skipped="\033[33m⊘\033[0m",
    bold="\033[1m",
    yellow="\033[33m",
    cyan="\033[36m",
    reset="\033[0m",
)


def supports_color(stream: TextIO) -> bool:
    """! @brief Decide whether @p stream should get ANSI styling.

    Colors are used only for a TTY, with NO_COLOR unset and a TERM other
    than "dumb".
    """
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("TERM", "") == "dumb":
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def detect_markers(stream: TextIO) -> Markers:
    return COLOR if supports_color(stream) else PLAIN


def truncate(command: str, width: int = MAX_COMMAND_WIDTH) -> str:
    """! @brief Shorten @p command to at most @p width characters.

    Longer commands keep their first `width - 3` characters followed by
    "...".
    """
    if len(command) <= width:
        return command
    return command[: width - len(ELLIPSIS)] + ELLIPSIS


def format_result(markers: Markers, name: str, command: str, status: str,
                  reason: Optional[str] = None) -> str:
    """! @brief Render the result line of one window.

    @param markers Output strategy (glyphs or bracketed labels).
    @param name Window name.
    @param command Window command, truncated for display.
    @param status One of "pass", "fail", "skip".
    @param reason Optional parenthesised suffix ("restarted", failure reason).
    @return The line, without trailing newline.
    """
    suffix = ""
    if reason:
        suffix = f" {markers.yellow}({reason}){markers.reset}"
    return f"  {markers.marker(status)} {name:<{NAME_WIDTH}} {truncate(command)}{suffix}"


def format_session_header(markers: Markers, name: str) -> str:
    return f"\n{markers.bold}[{name}]{markers.reset}"
