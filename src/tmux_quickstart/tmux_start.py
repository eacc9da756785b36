#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
tmux_start.py

Provision tmux sessions and windows from a sessions config.

Re-running is safe: windows that already exist are skipped. With
`--restart` existing windows are killed and recreated instead.

Requires:
- tmux
- libtmux (Python), PyYAML for `.yaml` configs

Example:
  tmux-start                      # reads ./sessions.conf
  tmux-start -r ~/work/dev.conf   # recreate every declared window

Individual window failures are reported on their result line only; the
exit status stays 0 so one bad window does not hide the rest of the run.
Two tmux-start processes running against the same server at once may race
between probing and creating a window.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, NoReturn, Optional

from .config import ConfigError, iter_config
from .reconcile import Launcher, Reconciler
from .report import detect_markers
from .tmux import LibtmuxMultiplexer, Multiplexer


DEFAULT_CONFIG = "./sessions.conf"

USAGE = """\
Usage: {prog} [options] [config-file]

Options:
  -r, --restart   Kill and recreate windows that already exist
  -h, --help      Show this help message

Arguments:
  config-file     Path to session config (default: {default})
"""


class UsageError(Exception):
    pass


class _Parser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        raise UsageError(message)


def build_parser() -> argparse.ArgumentParser:
    p = _Parser(prog="tmux-start", add_help=False, allow_abbrev=False)
    p.add_argument("-r", "--restart", action="store_true")
    p.add_argument("-h", "--help", action="store_true")
    p.add_argument("config", nargs="*")
    return p


def usage(prog: str = "tmux-start") -> str:
    return USAGE.format(prog=prog, default=DEFAULT_CONFIG)


def parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    """! @brief Parse the command line.

    @throws UsageError for unknown flags or more than one config file.
    """
    args, extra = build_parser().parse_known_args(argv)
    for item in extra:
        if item.startswith("-"):
            raise UsageError(f"Unknown option: {item}")
    positional = list(args.config) + [x for x in extra if not x.startswith("-")]
    if len(positional) > 1:
        raise UsageError("Error: multiple config files specified")
    args.config = positional[0] if positional else DEFAULT_CONFIG
    return args


def run(config_path: Path, restart: bool, mux: Multiplexer) -> int:
    """! @brief Reconcile every window declared in @p config_path.

    @param config_path Text or YAML sessions config.
    @param restart Recreate windows that already exist.
    @param mux tmux collaborator.
    @return Process exit code.
    """
    try:
        events = iter_config(config_path)
    except ConfigError as e:
        print(f"Invalid config: {e}", file=sys.stderr)
        return 1

    launcher = Launcher(Reconciler(mux, restart=restart), markers=detect_markers(sys.stdout))
    launcher.run(events)

    print()
    print("Done.")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    try:
        args = parse_args(argv)
    except UsageError as e:
        print(str(e), file=sys.stderr)
        return 1

    if args.help:
        print(usage(), end="")
        return 0

    config_path = Path(args.config).expanduser()
    if not config_path.is_file():
        print(f"Config not found: {args.config}", file=sys.stderr)
        return 1

    return run(config_path, args.restart, LibtmuxMultiplexer())


if __name__ == "__main__":
    raise SystemExit(main())
