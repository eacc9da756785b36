# -*- coding: utf-8 -*-
"""
tmux.py

The tmux collaborator used by the launcher: read-only probes plus the few
mutating calls the reconciler needs. The reconciler only sees the
`Multiplexer` protocol, so tests (or a future atomic create-if-absent
backend) can stand in for libtmux.
"""

from __future__ import annotations

from typing import List, NamedTuple, Optional, Protocol

import libtmux
from libtmux import exc


class WindowRow(NamedTuple):
    session: str
    index: str
    name: str
    command: str
    active: bool


class Multiplexer(Protocol):
    def session_exists(self, session: str) -> bool: ...

    def window_exists(self, session: str, window: str) -> bool: ...

    def new_session(self, session: str, window: str) -> bool: ...

    def new_window(self, session: str, window: str) -> bool: ...

    def kill_window(self, session: str, window: str) -> bool: ...

    def send_keys(self, session: str, window: str, text: str) -> bool: ...


def tmux_server() -> libtmux.Server:
    """! @brief Create a libtmux Server object.

    @return A libtmux.Server bound to the default tmux socket (honours
    TMUX_TMPDIR like the tmux client does).
    """
    return libtmux.Server()


def find_session(server: libtmux.Server, name: str) -> Optional[libtmux.Session]:
    """! @brief Find a tmux session by name.

    @param server libtmux server.
    @param name Session name.
    @return Session if found, otherwise None.
    """
    try:
        ql = server.sessions.filter(session_name=name)
    except exc.LibTmuxException:
        # no server running
        return None
    return ql[0] if ql else None


def find_window(session: libtmux.Session, name: str) -> Optional[libtmux.Window]:
    ql = session.windows.filter(window_name=name)
    return ql[0] if ql else None


class LibtmuxMultiplexer:
    """Multiplexer backed by a live tmux server through libtmux.

    Every probe re-queries the server; nothing is cached between calls,
    because a window created for one config line must be visible when the
    next line is reconciled.

    Mutators return whether libtmux reported success. That signal is only
    informational: `new-window` can fail with "no current client" while
    still creating the window, so callers verify with `window_exists`.
    """

    def __init__(self, server: Optional[libtmux.Server] = None) -> None:
        self.server = server if server is not None else tmux_server()

    # probes

    def session_exists(self, session: str) -> bool:
        try:
            return self.server.has_session(session)
        except exc.LibTmuxException:
            return False

    def window_exists(self, session: str, window: str) -> bool:
        sess = find_session(self.server, session)
        return sess is not None and find_window(sess, window) is not None

    # mutators

    def new_session(self, session: str, window: str) -> bool:
        try:
            self.server.new_session(session_name=session, window_name=window, attach=False)
        except exc.LibTmuxException:
            return False
        return True

    def new_window(self, session: str, window: str) -> bool:
        sess = find_session(self.server, session)
        if sess is None:
            return False
        try:
            sess.new_window(window_name=window, attach=False)
        except exc.LibTmuxException:
            return False
        return True

    def kill_window(self, session: str, window: str) -> bool:
        sess = find_session(self.server, session)
        win = find_window(sess, window) if sess is not None else None
        if win is None:
            return False
        try:
            win.kill()
        except exc.LibTmuxException:
            return False
        return True

    def send_keys(self, session: str, window: str, text: str) -> bool:
        """! @brief Type @p text into the window's active pane, then Enter."""
        sess = find_session(self.server, session)
        win = find_window(sess, window) if sess is not None else None
        if win is None:
            return False
        pane = win.active_pane or win.panes[0]
        pane.send_keys(text, enter=True, suppress_history=False)
        return True

    # listing

    def list_windows(self) -> List[WindowRow]:
        """! @brief All windows of all sessions, grouped by session.

        @return Rows in tmux order; empty when no server is running.
        """
        if not self.server.is_alive():
            return []
        rows: List[WindowRow] = []
        for sess in self.server.sessions:
            for win in sess.windows:
                pane = win.active_pane
                rows.append(
                    WindowRow(
                        session=sess.session_name or "",
                        index=str(win.window_index),
                        name=win.window_name or "",
                        command=(pane.pane_current_command if pane is not None else "") or "",
                        active=str(win.window_active) == "1",
                    )
                )
        return rows
