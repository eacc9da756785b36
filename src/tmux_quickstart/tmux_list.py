#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
tmux_list.py

Print every tmux window grouped by session, marking the active window of
each session with "*". Read-only.
"""

from __future__ import annotations

import sys
from typing import Iterable, List, Optional

from .report import Markers, detect_markers
from .tmux import LibtmuxMultiplexer, WindowRow


SESSION_WIDTH = 17
WINDOW_WIDTH = 20
NO_SESSIONS = "No tmux sessions running."


def render_table(rows: Iterable[WindowRow], markers: Markers) -> List[str]:
    """! @brief Lay out window rows as a table.

    The session name is printed on the first row of each session only, and
    sessions are separated by a blank line.

    @param rows Windows in tmux order.
    @param markers Output strategy; the active window is cyan when colored.
    @return Output lines.
    """
    lines = [
        f"{'SESSION':<{SESSION_WIDTH}} #  {'WINDOW':<{WINDOW_WIDTH}} COMMAND",
        f"{'─' * 15:<{SESSION_WIDTH}} ──  {'─' * 19:<{WINDOW_WIDTH}} {'─' * 19}",
    ]
    prev: Optional[str] = None
    for row in rows:
        if prev is not None and row.session != prev:
            lines.append("")
        session = row.session if row.session != prev else ""

        name = row.name
        if row.active:
            # pad before styling so escape codes do not eat into the column
            name = f"{markers.cyan}{(name + ' *'):<{WINDOW_WIDTH}}{markers.reset}"
        else:
            name = f"{name:<{WINDOW_WIDTH}}"
        lines.append(f"{session:<{SESSION_WIDTH}} {row.index:>2}  {name} {row.command}")
        prev = row.session
    return lines


def main(argv: Optional[List[str]] = None) -> int:
    rows = LibtmuxMultiplexer().list_windows()
    if not rows:
        print(NO_SESSIONS)
        return 0
    for line in render_table(rows, detect_markers(sys.stdout)):
        print(line)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
