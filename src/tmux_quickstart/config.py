# -*- coding: utf-8 -*-
"""
config.py

Config model and parser for tmux-start.

The text format is line oriented:

    # comment
    [session-name]
    workdir = /path
    - window-name = shell command
    + additional command sent to the most recently declared window

Lines are classified into events and streamed to the launcher, so a config
is never held in memory as a whole. A YAML rendition of the same model is
accepted for `.yaml` / `.yml` files and yields the same event stream.
"""

from __future__ import annotations

import re
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Union

import yaml


class ConfigError(ValueError):
    """Raised when a config file cannot be turned into sessions."""


def warn(msg: str) -> None:
    """! @brief Print a non-fatal diagnostic to stderr."""
    print(f"[warn] {msg}", file=sys.stderr)


# ---------------------------
# Config model
# ---------------------------

@dataclass
class WindowIntent:
    session: str
    name: str
    command: str
    # copied from the session when the window line is read (not retroactive)
    workdir: str = ""
    continuations: List[str] = field(default_factory=list)


@dataclass
class SessionBlock:
    name: str
    workdir: str = ""
    windows: List[WindowIntent] = field(default_factory=list)

    def add_window(self, name: str, command: str) -> WindowIntent:
        intent = WindowIntent(session=self.name, name=name, command=command, workdir=self.workdir)
        self.windows.append(intent)
        return intent


# ---------------------------
# Events
# ---------------------------

@dataclass(frozen=True)
class SessionHeader:
    name: str


@dataclass(frozen=True)
class Continuation:
    command: str


@dataclass(frozen=True)
class WindowLine:
    name: str
    command: str


@dataclass(frozen=True)
class OptionLine:
    key: str
    value: str


@dataclass(frozen=True)
class Unrecognized:
    line: str


Event = Union[SessionHeader, Continuation, WindowLine, OptionLine, Unrecognized]


HEADER_RE = re.compile(r"^\[([^\]]+)\]$")
CONTINUATION_RE = re.compile(r"^\+ +(.+)$")
WINDOW_RE = re.compile(r"^- ([^=]+)= *(.+)$")
OPTION_RE = re.compile(r"^([^=]+)= *(.+)$")


def strip_comment(line: str) -> str:
    """! @brief Remove a trailing comment and trailing whitespace.

    Everything from the first unescaped `#` is dropped. `\\#` stands for a
    literal `#` and loses its backslash.

    @param line Raw config line.
    @return The significant part of the line (possibly empty).
    """
    out: List[str] = []
    i = 0
    while i < len(line):
        ch = line[i]
        if ch == "\\" and line[i + 1:i + 2] == "#":
            out.append("#")
            i += 2
            continue
        if ch == "#":
            break
        out.append(ch)
        i += 1
    return "".join(out).rstrip()


def classify(line: str) -> Event:
    """! @brief Classify one comment-stripped, non-empty line.

    Patterns are tried in priority order: header, continuation, window,
    option. The first match wins.
    """
    m = HEADER_RE.match(line)
    if m:
        return SessionHeader(m.group(1))

    m = CONTINUATION_RE.match(line)
    if m:
        return Continuation(m.group(1))

    m = WINDOW_RE.match(line)
    if m:
        name = m.group(1).rstrip()
        if not name:
            return Unrecognized(line)
        return WindowLine(name, m.group(2))

    m = OPTION_RE.match(line)
    if m:
        return OptionLine(m.group(1).strip(), m.group(2).strip())

    return Unrecognized(line)


def iter_events(lines: Iterable[str]) -> Iterator[Event]:
    """! @brief Stream config lines as classified events.

    Blank and comment-only lines are skipped. Anything before the first
    session header is dropped silently.

    @param lines Config lines (trailing newlines allowed).
    @return Iterator of events in source order.
    """
    in_session = False
    for raw in lines:
        line = strip_comment(raw.rstrip("\r\n"))
        if not line:
            continue
        event = classify(line)
        if isinstance(event, SessionHeader):
            in_session = True
        elif not in_session:
            continue
        yield event


# ---------------------------
# YAML configs
# ---------------------------

def events_from_yaml(data: Any) -> Iterator[Event]:
    """! @brief Turn a YAML config document into the text format's events.

    Expected shape:
    @code
    sessions:
      alpha:
        workdir: /tmp
        windows:
          win1: [echo hi, echo bye]
          win2: echo hello
    @endcode

    The first item of a window list is its command, the rest are
    continuations.

    @param data Document returned by yaml.safe_load.
    @throws ConfigError if the document does not have this shape.
    """
    if not isinstance(data, dict) or not isinstance(data.get("sessions"), dict):
        raise ConfigError("expected a top-level 'sessions:' mapping")

    sessions: Dict[str, Any] = data["sessions"]
    for session_name, body in sessions.items():
        body = body or {}
        if not isinstance(body, dict):
            raise ConfigError(f"session '{session_name}' must be a mapping")
        yield SessionHeader(str(session_name))

        if body.get("workdir"):
            yield OptionLine("workdir", str(body["workdir"]))
        for key in body:
            if key not in ("workdir", "windows"):
                yield OptionLine(str(key), str(body[key]))

        windows = body.get("windows") or {}
        if not isinstance(windows, dict):
            raise ConfigError(f"session '{session_name}': 'windows' must be a mapping")
        for window_name, items in windows.items():
            if isinstance(items, str):
                items = [items]
            if not isinstance(items, list) or not items or not all(isinstance(i, str) for i in items):
                raise ConfigError(
                    f"window '{window_name}' in session '{session_name}' needs a command "
                    "string or a list of command strings"
                )
            yield WindowLine(str(window_name), items[0])
            for extra in items[1:]:
                yield Continuation(extra)


def is_yaml_config(path: Path) -> bool:
    return path.suffix.lower() in (".yaml", ".yml")


def iter_config(path: Path) -> Iterator[Event]:
    """! @brief Stream events from a config file of either format.

    Text configs are read lazily line by line. YAML configs are parsed up
    front so that a malformed document fails before any tmux call is made.

    @param path Config file path.
    @throws ConfigError for malformed YAML configs.
    """
    if is_yaml_config(path):
        try:
            data = yaml.safe_load(path.read_text())
        except yaml.YAMLError as e:
            raise ConfigError(str(e)) from e
        return iter(list(events_from_yaml(data)))
    return _iter_text(path)


def _iter_text(path: Path) -> Iterator[Event]:
    # undecodable bytes become U+FFFD rather than aborting a half-applied run
    with path.open(encoding="utf-8", errors="replace") as f:
        yield from iter_events(f)
