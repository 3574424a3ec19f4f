# LetsEncrypt cPanel - Certificate Automation for cPanel Hosting Accounts
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Execution strategies for built commands.

Every CommandSpec is routed to exactly one handler by its identity:
- the configured interpreter -> InterpreterHandler (self invocations)
- the configured uapi binary -> ManagementApiHandler (JSON responses)
- anything else -> GenericHandler (plain shell utilities)

Handlers report the command through the hooks before running it and
return an ExecutionOutcome; they never raise for process failures.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from enum import Enum

from .command import CommandSpec
from .executor import ExecutionOutcome, ExitCode, RunResult
from .interfaces import ConfigModel, Executor, Hooks
from .utils import (
    escape_arg,
    normalize_output,
    normalize_quotes,
    redact_certificates,
    strip_log_timestamps,
)

logger = logging.getLogger(__name__)

UAPI_INVALID_RESPONSE = "The UAPI call did not return a valid response."
UAPI_UNKNOWN_FAILURE = "The UAPI call failed for an unknown reason."


class HandlerKind(Enum):
    GENERIC = "generic"
    INTERPRETER = "interpreter"
    MANAGEMENT_API = "management_api"


def running_as_root() -> bool:
    geteuid = getattr(os, "geteuid", None)
    return geteuid is not None and geteuid() == 0


@contextmanager
def temporary_path(
    tmp_dir: str | None = None, prefix: str = "letsencrypt-cpanel-"
) -> Iterator[str]:
    """Yield a fresh, uniquely named file path and delete it afterwards."""
    fd, path = tempfile.mkstemp(prefix=prefix, suffix=".log", dir=tmp_dir)
    os.close(fd)
    try:
        yield path
    finally:
        try:
            os.unlink(path)
        except FileNotFoundError:
            pass


def read_text(path: str) -> str:
    """Read a temp capture file; a missing file reads as empty."""
    try:
        with open(path, encoding="utf-8", errors="replace") as f:
            return f.read()
    except FileNotFoundError:
        return ""


def join_text(*parts: str) -> str:
    return "\n".join(p.strip("\n") for p in parts if p and p.strip())


class Handler:
    """Base class: runs a built command through the executor."""

    kind: HandlerKind
    # False when debug text is already folded into the output
    reports_debug = True

    def __init__(
        self,
        executor: Executor,
        config: ConfigModel,
        hooks: Hooks,
        timeout: float | None = None,
    ):
        self.executor = executor
        self.config = config
        self.hooks = hooks
        self.timeout = timeout

    def _run(self, executed: str, displayed: str) -> RunResult:
        self.hooks.on_command(displayed)
        logger.debug("executing (%s): %s", self.kind.value, displayed)
        result = self.executor.run(executed, timeout=self.timeout)
        logger.debug("exit code %s after %sms",
                     result.exit_code, result.duration_ms)
        return result

    def execute(self, spec: CommandSpec) -> ExecutionOutcome:
        raise NotImplementedError


class GenericHandler(Handler):
    """Plain shell command: stdout in, exit code out."""

    kind = HandlerKind.GENERIC

    def execute(self, spec: CommandSpec) -> ExecutionOutcome:
        executed = spec.render()
        result = self._run(executed, executed)

        return ExecutionOutcome(
            exit_code=result.exit_code,
            output=normalize_output(result.stdout),
            debug_log=result.stderr,
            executed=executed,
            displayed=executed,
        )


class InterpreterHandler(Handler):
    """Self invocation with the interpreter error log routed to a temp file.

    The error log path is handed over as ``-X error_log=<path>``; CPython
    exposes it to the child through ``sys._xoptions``.
    """

    kind = HandlerKind.INTERPRETER
    reports_debug = False

    def execute(self, spec: CommandSpec) -> ExecutionOutcome:
        tmp_dir = self.config.tmp_dir

        with temporary_path(tmp_dir, "error-log-") as log_path, \
                temporary_path(tmp_dir, "stderr-") as stderr_path:
            spec.insert(["-X", "error_log=" + escape_arg(log_path)], 1)
            spec.insert(["2>", escape_arg(stderr_path)])

            executed = spec.render()
            result = self._run(executed, executed)

            error_log = strip_log_timestamps(read_text(log_path))
            stderr = read_text(stderr_path)

        debug = join_text(error_log, stderr, result.stderr)
        output = normalize_output(join_text(result.stdout, debug))

        return ExecutionOutcome(
            exit_code=result.exit_code,
            output=output,
            debug_log=debug,
            executed=executed,
            displayed=executed,
        )


class ManagementApiHandler(Handler):
    """cPanel UAPI call returning a JSON envelope."""

    kind = HandlerKind.MANAGEMENT_API

    def default_options(self) -> list[str]:
        options = ["--output=jsonpretty"]
        # non-root execution already runs as the target account
        account = self.config.account
        if running_as_root() and account:
            options.append("--user=" + escape_arg(account))
        return options

    def execute(self, spec: CommandSpec) -> ExecutionOutcome:
        spec.insert(self.default_options(), 1)
        displayed = redact_certificates(spec.render())

        with temporary_path(self.config.tmp_dir, "uapi-") as stderr_path:
            spec.insert(["2>", escape_arg(stderr_path)])

            executed = spec.render()
            result = self._run(executed, displayed)
            stderr = read_text(stderr_path)

        raw = result.stdout
        exit_code, output = self.parse_response(raw)

        return ExecutionOutcome(
            exit_code=exit_code,
            output=output,
            debug_log=join_text(stderr, result.stderr, raw),
            executed=executed,
            displayed=displayed,
        )

    @staticmethod
    def parse_response(raw: str) -> tuple[int, str]:
        """Map a raw UAPI response onto (exit code, printable output)."""
        try:
            data = json.loads(raw)
        except ValueError:
            data = None

        if not data or not isinstance(data, dict):
            return ExitCode.UNKNOWN_ERROR, UAPI_INVALID_RESPONSE

        result = data.get("result")
        if not isinstance(result, dict):
            result = {}

        lines = []
        for key in ("errors", "messages"):
            entries = result.get(key) or []
            if isinstance(entries, str):
                entries = [entries]
            lines.extend(normalize_quotes(str(entry)) for entry in entries)

        output = normalize_output("\n".join(lines)) or UAPI_UNKNOWN_FAILURE

        if not result.get("status"):
            return ExitCode.CALL_FAILED, output

        return ExitCode.SUCCESS, output


HANDLERS: dict[HandlerKind, type[Handler]] = {
    HandlerKind.GENERIC: GenericHandler,
    HandlerKind.INTERPRETER: InterpreterHandler,
    HandlerKind.MANAGEMENT_API: ManagementApiHandler,
}


def dispatch(spec: CommandSpec, config: ConfigModel) -> HandlerKind:
    """Select the handler kind from the command's leading identity."""
    if spec.identity == config.interpreter:
        return HandlerKind.INTERPRETER
    if spec.identity == config.uapi_binary:
        return HandlerKind.MANAGEMENT_API
    return HandlerKind.GENERIC


def handler_for(
    kind: HandlerKind,
    executor: Executor,
    config: ConfigModel,
    hooks: Hooks,
    timeout: float | None = None,
) -> Handler:
    return HANDLERS[kind](executor, config, hooks, timeout=timeout)
