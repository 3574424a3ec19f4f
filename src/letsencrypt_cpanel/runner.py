# LetsEncrypt cPanel - Certificate Automation for cPanel Hosting Accounts
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Command runner.

The runner is the call contract used by the certificate workflow:
execute(name, args) builds, dispatches and runs one command and hands
back an ExecutionOutcome. It keeps no record of previous commands;
callers that need history store the outcomes themselves.

Important boundary:
- Runner does not load YAML. It consumes the injected ConfigModel.
- Runner does not print. It calls the injected Hooks.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from .command import CommandSpec
from .executor import ExecutionOutcome
from .handlers import dispatch, handler_for
from .interfaces import ConfigModel, Executor, Hooks

SELF_MODULE = "letsencrypt_cpanel"


@dataclass
class Runner:
    """Executes logical commands one at a time."""

    executor: Executor
    config: ConfigModel
    hooks: Hooks

    def build(self, name: str, args: Any = None) -> CommandSpec:
        return CommandSpec.build(
            name,
            args,
            aliases=self.config.aliases,
            defaults=self.config.defaults,
        )

    def execute(
        self, name: str, args: Any = None, timeout: float | None = None
    ) -> ExecutionOutcome:
        """Run one logical command and return its outcome.

        Args:
            name: logical command name (resolved through aliases)
            args: mapping or sequence of positional / (key, value) entries
            timeout: seconds; overrides the configured timeout

        Returns:
            ExecutionOutcome
        """
        spec = self.build(name, args)
        kind = dispatch(spec, self.config)
        handler = handler_for(
            kind,
            self.executor,
            self.config,
            self.hooks,
            timeout=timeout if timeout is not None else self.config.timeout,
        )

        outcome = handler.execute(spec)

        if outcome.output:
            self.hooks.on_output(outcome.output)
        if outcome.debug_log and handler.reports_debug:
            self.hooks.on_debug(outcome.debug_log)

        return outcome

    def execute_self(
        self, args: Sequence[Any] = (), timeout: float | None = None
    ) -> ExecutionOutcome:
        """Run this tool's own entry point under the interpreter."""
        return self.execute(
            "self", ["-m", SELF_MODULE, *args], timeout=timeout
        )

    def uapi(
        self, module: str, function: str, args: Any = None,
        timeout: float | None = None
    ) -> ExecutionOutcome:
        """Call ``uapi <module> <function> [key=value ...]``."""
        entries: list[Any] = [module, function]
        if isinstance(args, dict):
            entries.extend(args.items())
        elif args:
            entries.extend(args)
        return self.execute("uapi", entries, timeout=timeout)
