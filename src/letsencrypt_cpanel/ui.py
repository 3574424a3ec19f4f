# LetsEncrypt cPanel - Certificate Automation for cPanel Hosting Accounts
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

from __future__ import annotations

from collections.abc import Callable

from prompt_toolkit.formatted_text import ANSI
from prompt_toolkit.shortcuts import print_formatted_text

from .config import ANSI_COLORS, TAG_COLORS


def _default_write(text: str) -> None:
    print_formatted_text(ANSI(text), end="")


def format_tagged(tag: str, text: str, color: bool = True) -> str:
    """Prefix every line of text with a ``[TAG]`` marker."""
    if color:
        c = ANSI_COLORS.get(TAG_COLORS.get(tag, ""), "")
        marker = f"{c}[{tag}]{ANSI_COLORS['reset']}"
    else:
        marker = f"[{tag}]"
    return "".join(
        f"{marker} {line}\n" for line in text.splitlines() or [""]
    )


class TerminalPrinter:
    """Hooks implementation that writes to the terminal.

    Commands and output are always shown; debug text (stderr, error
    logs, raw API responses) only when verbose.
    """

    def __init__(
        self,
        verbose: bool = False,
        color: bool = True,
        write_fn: Callable[[str], None] | None = None,
    ) -> None:
        self.verbose = verbose
        self.color = color
        self._write = write_fn or _default_write

    def write(self, text: str) -> None:
        """Write EXACTLY what we receive (no extra newline)."""
        if not text:
            return
        self._write(text)

    def on_command(self, command: str) -> None:
        self.write(format_tagged("RUN", command, self.color))

    def on_output(self, output: str) -> None:
        self.write(output if output.endswith("\n") else output + "\n")

    def on_debug(self, debug: str) -> None:
        if self.verbose:
            self.write(format_tagged("DEBUG", debug, self.color))

    def warn(self, message: str) -> None:
        self.write(format_tagged("WARN", message, self.color))

    def error(self, message: str) -> None:
        self.write(format_tagged("ERR", message, self.color))


class SilentPrinter:
    """Hooks implementation that discards everything."""

    def on_command(self, command: str) -> None:
        pass

    def on_output(self, output: str) -> None:
        pass

    def on_debug(self, debug: str) -> None:
        pass
