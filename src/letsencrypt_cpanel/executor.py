# LetsEncrypt cPanel - Certificate Automation for cPanel Hosting Accounts
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Subprocess-backed executor and execution result types.

This module provides:
- ExitCode: process-wide exit code contract
- RunResult: raw result of one shell invocation
- ExecutionOutcome: normalized result handed back to callers
- SubprocessExecutor.run(): buffered, synchronous shell execution
"""

from __future__ import annotations

import os
import subprocess
from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum


class ExitCode(IntEnum):
    SUCCESS = 0
    PROCESSING_ERROR = 1
    UNKNOWN_ERROR = 2
    CALL_FAILED = 3


@dataclass(frozen=True)
class RunResult:
    exit_code: int
    stdout: str
    stderr: str
    started_at: str
    duration_ms: int


@dataclass(frozen=True)
class ExecutionOutcome:
    """Result of running one command.

    ``executed`` is the exact string passed to the shell; ``displayed`` is
    what was reported through the command hook (possibly redacted).
    """

    exit_code: int
    output: str
    debug_log: str
    executed: str
    displayed: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_code == ExitCode.SUCCESS


class SubprocessExecutor:
    """Subprocess implementation of Executor protocol."""

    def __init__(self, timeout: float | None = None, env: dict | None = None):
        """Initialize executor with configuration.

        Args:
            timeout: Default command timeout in seconds (None waits forever)
            env: Extra environment variables for every command
        """
        self.timeout = timeout
        self.env = dict(env or {})

    def _build_env(self) -> dict:
        env = os.environ.copy()
        env.update(self.env)
        return env

    def run(
        self, command: str, timeout: float | None = None
    ) -> RunResult:
        """Run a shell command and return buffered results.

        Args:
            command: shell command to execute
            timeout: overrides self.timeout

        Returns:
            RunResult
        """
        env = self._build_env()
        timeout = timeout if timeout is not None else self.timeout

        started_at = datetime.now().isoformat()
        start_time = datetime.now()

        try:
            result = subprocess.run(
                command,
                shell=True,
                capture_output=True,
                text=True,
                timeout=timeout,
                env=env,
            )
            duration_ms = int(
                (datetime.now() - start_time).total_seconds() * 1000
            )
            return RunResult(
                exit_code=result.returncode,
                stdout=result.stdout,
                stderr=result.stderr,
                started_at=started_at,
                duration_ms=duration_ms,
            )
        except subprocess.TimeoutExpired:
            duration_ms = int(
                (datetime.now() - start_time).total_seconds() * 1000
            )
            return RunResult(
                exit_code=1,
                stdout="",
                stderr=f"Command timed out after {timeout} seconds",
                started_at=started_at,
                duration_ms=duration_ms,
            )
        except Exception as e:
            duration_ms = int(
                (datetime.now() - start_time).total_seconds() * 1000
            )
            return RunResult(
                exit_code=1,
                stdout="",
                stderr=f"Error executing command: {e}",
                started_at=started_at,
                duration_ms=duration_ms,
            )
