from __future__ import annotations

from typing import Dict, List, Set, Tuple

import pytest


class FakeMux:
    """In-memory tmux: sessions map to ordered window names.

    `calls` records every mutating call. `broken` windows are never created,
    `benign_failures` are created but the call reports failure (like
    new-window without a client).
    """

    def __init__(self) -> None:
        self.sessions: Dict[str, List[str]] = {}
        self.calls: List[Tuple[str, ...]] = []
        self.sent: List[Tuple[str, str, str]] = []
        self.broken: Set[str] = set()
        self.benign_failures: Set[str] = set()

    def session_exists(self, session: str) -> bool:
        return session in self.sessions

    def window_exists(self, session: str, window: str) -> bool:
        return window in self.sessions.get(session, [])

    def _create(self, session: str, window: str) -> bool:
        if window in self.broken:
            return False
        self.sessions.setdefault(session, []).append(window)
        return window not in self.benign_failures

    def new_session(self, session: str, window: str) -> bool:
        self.calls.append(("new_session", session, window))
        if session in self.sessions:
            return False
        return self._create(session, window)

    def new_window(self, session: str, window: str) -> bool:
        self.calls.append(("new_window", session, window))
        if session not in self.sessions:
            return False
        return self._create(session, window)

    def kill_window(self, session: str, window: str) -> bool:
        self.calls.append(("kill_window", session, window))
        windows = self.sessions.get(session, [])
        if window not in windows:
            return False
        windows.remove(window)
        if not windows:
            del self.sessions[session]
        return True

    def send_keys(self, session: str, window: str, text: str) -> bool:
        self.calls.append(("send_keys", session, window, text))
        self.sent.append((session, window, text))
        return True

    def mutations(self) -> List[Tuple[str, ...]]:
        return [c for c in self.calls if c[0] != "send_keys"]

    def sent_to(self, session: str, window: str) -> List[str]:
        return [text for s, w, text in self.sent if (s, w) == (session, window)]


@pytest.fixture
def mux() -> FakeMux:
    return FakeMux()
