# -*- coding: utf-8 -*-
"""
reconcile.py

Window reconciliation for tmux-start.

For every declared window the live tmux state is probed and exactly one
action is taken:

    session missing                      -> CREATE  (new session, window first)
    session present, window missing      -> ADD     (new window)
    both present, no --restart           -> SKIP    (nothing is sent)
    both present, --restart              -> RESTART (kill, then recreate)

Windows are reconciled strictly in source order: the probe for one window
must observe the mutations made for the previous one.

`Launcher` drives the reconciler from the config event stream and keeps the
per-session bookkeeping (window count, continuation target) in a `RunState`.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, TextIO

from .config import (
    Continuation,
    Event,
    OptionLine,
    SessionBlock,
    SessionHeader,
    Unrecognized,
    WindowIntent,
    WindowLine,
    warn,
)
from .report import PLAIN, Markers, format_result, format_session_header
from .tmux import Multiplexer


class Action(Enum):
    CREATE = "create"
    ADD = "add"
    SKIP = "skip"
    RESTART = "restart"


class Outcome(Enum):
    CREATED = "created"
    ADDED = "added"
    SKIPPED = "skipped"
    RESTARTED = "restarted"
    FAILED = "failed"

    @property
    def status(self) -> str:
        """Reporter status for this outcome."""
        if self is Outcome.SKIPPED:
            return "skip"
        if self is Outcome.FAILED:
            return "fail"
        return "pass"

    @property
    def gates_continuations(self) -> bool:
        return self in (Outcome.SKIPPED, Outcome.FAILED)


@dataclass(frozen=True)
class ReconcileResult:
    window: str
    command: str
    outcome: Outcome
    reason: Optional[str] = None


def choose_action(session_exists: bool, window_exists: bool, restart: bool) -> Action:
    """! @brief Pick the action for one window; first matching row wins.

    @param session_exists Whether the target session is live.
    @param window_exists Whether the window is live (ignored without a session).
    @param restart The run-wide --restart flag.
    """
    if not session_exists:
        return Action.CREATE
    if not window_exists:
        return Action.ADD
    if not restart:
        return Action.SKIP
    return Action.RESTART


class Reconciler:
    """Applies the chosen action for a window and verifies the result.

    Success of a mutation is never taken from the mutating call itself;
    each handler re-probes `window_exists` afterwards.
    """

    def __init__(self, mux: Multiplexer, restart: bool = False) -> None:
        self.mux = mux
        self.restart = restart
        self._handlers: Dict[Action, Callable[[WindowIntent], ReconcileResult]] = {
            Action.CREATE: self._create,
            Action.ADD: self._add,
            Action.SKIP: self._skip,
            Action.RESTART: self._restart,
        }

    def probe(self, intent: WindowIntent) -> Action:
        session_exists = self.mux.session_exists(intent.session)
        window_exists = session_exists and self.mux.window_exists(intent.session, intent.name)
        return choose_action(session_exists, window_exists, self.restart)

    def reconcile(self, intent: WindowIntent) -> ReconcileResult:
        """! @brief Bring one window to its declared state.

        On CREATED/ADDED/RESTARTED the window receives `cd <workdir>` (when
        set) and then its command. SKIPPED and FAILED windows receive
        nothing.
        """
        result = self._handlers[self.probe(intent)](intent)
        if result.outcome in (Outcome.CREATED, Outcome.ADDED, Outcome.RESTARTED):
            if intent.workdir:
                self.mux.send_keys(intent.session, intent.name, f"cd {intent.workdir}")
            self.mux.send_keys(intent.session, intent.name, intent.command)
        return result

    def _verified(self, intent: WindowIntent, outcome: Outcome, reason: Optional[str],
                  failure: str) -> ReconcileResult:
        if self.mux.window_exists(intent.session, intent.name):
            return ReconcileResult(intent.name, intent.command, outcome, reason)
        return ReconcileResult(intent.name, intent.command, Outcome.FAILED, failure)

    def _create(self, intent: WindowIntent) -> ReconcileResult:
        self.mux.new_session(intent.session, intent.name)
        return self._verified(intent, Outcome.CREATED, None, "session create failed")

    def _add(self, intent: WindowIntent) -> ReconcileResult:
        self.mux.new_window(intent.session, intent.name)
        return self._verified(intent, Outcome.ADDED, None, "window create failed")

    def _skip(self, intent: WindowIntent) -> ReconcileResult:
        return ReconcileResult(intent.name, intent.command, Outcome.SKIPPED, "already exists")

    def _restart(self, intent: WindowIntent) -> ReconcileResult:
        self.mux.kill_window(intent.session, intent.name)
        # killing the last window takes the session down with it
        if self.mux.session_exists(intent.session):
            self.mux.new_window(intent.session, intent.name)
        else:
            self.mux.new_session(intent.session, intent.name)
        return self._verified(intent, Outcome.RESTARTED, "restarted", "restart failed")


@dataclass
class RunState:
    block: Optional[SessionBlock] = None
    window_count: int = 0
    # last window that reached tmux (skipped windows included)
    last_window: Optional[WindowIntent] = None
    # last window line of the block, whatever its outcome; owns "+" lines
    last_declared: Optional[WindowIntent] = None
    last_window_skipped: bool = False

    def reset(self) -> None:
        self.block = None
        self.window_count = 0
        self.last_window = None
        self.last_declared = None
        self.last_window_skipped = False


@dataclass
class Launcher:
    """! @brief Consume config events and reconcile windows as they appear.

    @param reconciler Window reconciler bound to a multiplexer.
    @param markers Output strategy for result lines.
    @param out Stream for progress output (stdout by default).
    """

    reconciler: Reconciler
    markers: Markers = PLAIN
    out: Optional[TextIO] = None
    state: RunState = field(default_factory=RunState)
    results: List[ReconcileResult] = field(default_factory=list)

    @property
    def mux(self) -> Multiplexer:
        return self.reconciler.mux

    def _print(self, line: str = "") -> None:
        print(line, file=self.out if self.out is not None else sys.stdout)

    def run(self, events: Iterable[Event]) -> List[ReconcileResult]:
        for event in events:
            self.handle(event)
        self.flush()
        return self.results

    def handle(self, event: Event) -> None:
        if isinstance(event, SessionHeader):
            self.flush()
            self.start_session(event.name)
            return
        block = self.state.block
        if block is None:
            return
        if isinstance(event, Continuation):
            self.continuation(event.command)
        elif isinstance(event, WindowLine):
            self.window(block, event.name, event.command)
        elif isinstance(event, OptionLine):
            self.option(block, event.key, event.value)
        elif isinstance(event, Unrecognized):
            warn(f"unrecognized line: {event.line}")

    def start_session(self, name: str) -> None:
        self.state.block = SessionBlock(name)
        self._print(format_session_header(self.markers, name))

    def flush(self) -> None:
        """! @brief Close the current session block and reset the run state."""
        block = self.state.block
        if block is not None and self.state.window_count == 0:
            warn(f"session [{block.name}] has no windows, skipping")
        self.state.reset()

    def option(self, block: SessionBlock, key: str, value: str) -> None:
        if key == "workdir":
            block.workdir = value
        else:
            warn(f"unknown session option: {key}")

    def window(self, block: SessionBlock, name: str, command: str) -> ReconcileResult:
        intent = block.add_window(name, command)
        result = self.reconciler.reconcile(intent)
        self.results.append(result)
        self._print(format_result(self.markers, result.window, result.command,
                                  result.outcome.status, result.reason))

        self.state.last_declared = intent
        self.state.last_window_skipped = result.outcome.gates_continuations
        if result.outcome is not Outcome.FAILED:
            self.state.window_count += 1
            self.state.last_window = intent
        return result

    def continuation(self, command: str) -> None:
        """! @brief Deliver a "+" line to the most recently declared window.

        Skipped and failed windows keep the line on record but nothing is
        sent to tmux.
        """
        target = self.state.last_declared
        if self.state.block is None or target is None:
            warn(f"'+' line with no prior window, ignoring: {command}")
            return
        target.continuations.append(command)
        if self.state.last_window_skipped:
            return
        self.mux.send_keys(target.session, target.name, command)
