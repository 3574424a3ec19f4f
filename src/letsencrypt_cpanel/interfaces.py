# LetsEncrypt cPanel - Certificate Automation for cPanel Hosting Accounts
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Protocol definitions for dependency injection.

These interfaces separate command execution from configuration
loading, presentation and notification.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from .executor import RunResult  # pragma: no cover


class Executor(Protocol):
    """Protocol for command execution."""

    def run(self, command: str, timeout: float | None = None) -> RunResult:
        """Run a shell command and return its buffered result."""
        ...


class Hooks(Protocol):
    """Printing hooks exposed to the presentation layer."""

    def on_command(self, command: str) -> None:
        """Called with the (display) command string before execution."""
        ...

    def on_output(self, output: str) -> None:
        """Called with the normalized printable output."""
        ...

    def on_debug(self, debug: str) -> None:
        """Called with stderr / error log / raw response text."""
        ...


class ConfigModel(Protocol):
    """Protocol for configuration access."""

    @property
    def aliases(self) -> dict[str, str]:
        """Logical command name -> executable."""
        ...

    @property
    def defaults(self) -> dict[str, list[Any]]:
        """Logical command name -> default arguments."""
        ...

    @property
    def interpreter(self) -> str:
        """Interpreter binary used for self invocations."""
        ...

    @property
    def uapi_binary(self) -> str:
        """Management API binary."""
        ...

    @property
    def account(self) -> str | None:
        """Hosting account the management API acts on when run as root."""
        ...

    @property
    def tmp_dir(self) -> str | None:
        """Directory for temporary error logs (None = system default)."""
        ...

    @property
    def timeout(self) -> float | None:
        """Command timeout in seconds (None waits forever)."""
        ...


class Notifier(Protocol):
    """Protocol for sending out-of-band notifications."""

    def send(self, subject: str, message: str) -> bool:
        """Send a notification, return False when it could not be sent."""
        ...
