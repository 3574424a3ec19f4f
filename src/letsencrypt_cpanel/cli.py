# LetsEncrypt cPanel - Certificate Automation for cPanel Hosting Accounts
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
letsencrypt-cpanel CLI entry point.

Design:
- CLI owns process startup, config loading and the process exit code.
- Runner is the execution engine (config + executor + hooks injected).
- Unexpected failures are reported here: printed, written to the crash
  log, optionally e-mailed, then the process exits with PROCESSING_ERROR.
- When started with ``-X error_log=<path>`` (a self invocation), log
  records go to that file so the parent process can collect them.
"""

from __future__ import annotations

import argparse
import logging
import sys
import traceback
from datetime import datetime
from pathlib import Path

from . import config
from .executor import ExecutionOutcome, ExitCode, SubprocessExecutor
from .interfaces import Notifier
from .notify import MailNotifier
from .runner import Runner
from .ui import TerminalPrinter
from .utils import extract_kwargs_and_posargs

ERROR_LOG_FORMAT = "[%(asctime)s] %(message)s"


def write_crash_log(
    error: BaseException,
    command: str = "",
    executed: str = "",
) -> None:
    """Write an entry to the crash log.

    Only creates the log directory when actually needed.
    Appends to crash.log (never overwrites).
    """
    try:
        log_path = config.crash_log_path(config.get_data_root())

        # Create logs directory only when we need to write
        log_path.parent.mkdir(parents=True, exist_ok=True)

        lines = [datetime.now().isoformat()]

        if command:
            lines.append(f"command={command}")
        if executed:
            lines.append(f"executed={executed}")

        lines.append(f"error={type(error).__name__}: {error}")
        lines.append("traceback:")
        lines.append(
            "".join(traceback.format_exception(
                type(error), error, error.__traceback__
            ))
        )
        lines.append("----")

        with log_path.open("a", encoding="utf-8") as f:
            f.write("\n".join(lines) + "\n")

    except Exception:
        # If we can't write the crash log, fail silently
        # (we're already in an error state)
        pass


def configure_error_log(xoptions: dict | None = None) -> logging.Handler | None:
    """Route log records to the file given as ``-X error_log=<path>``."""
    if xoptions is None:
        xoptions = getattr(sys, "_xoptions", {})

    path = xoptions.get("error_log")
    if not path or path is True:
        return None

    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(logging.Formatter(ERROR_LOG_FORMAT))
    handler.setLevel(logging.WARNING)
    logging.getLogger().addHandler(handler)
    return handler


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=config.APP_NAME,
        description="Run hosting-panel commands for certificate automation.",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="show stderr, error logs and raw API responses",
    )
    parser.add_argument(
        "--notify", action="store_true",
        help="e-mail failures to the configured address",
    )
    parser.add_argument(
        "--notify-to", default=None, metavar="ADDRESS",
        help="e-mail failures to ADDRESS (implies --notify)",
    )
    parser.add_argument(
        "--config", default=None, metavar="PATH",
        help="config file to merge over the packaged defaults",
    )
    parser.add_argument(
        "--timeout", type=float, default=None, metavar="SECONDS",
        help="kill the command after SECONDS",
    )
    parser.add_argument(
        "--no-color", action="store_true", help="disable ANSI colors",
    )

    sub = parser.add_subparsers(dest="action", required=True)
    run = sub.add_parser("run", help="run one logical command")
    run.add_argument("name", help="command name or alias")
    run.add_argument(
        "args", nargs=argparse.REMAINDER,
        help="arguments; key=value becomes a keyed argument",
    )
    return parser


def build_notifier(
    address: str | None,
    cfg: config.YAMLConfig,
    printer: TerminalPrinter,
) -> Notifier | None:
    """Create the notifier when notification was requested.

    None means no notification; an empty address falls back to the
    configured one.
    """
    if address is None:
        return None

    address = address or cfg.notify
    if not address:
        printer.warn("--notify given but no notification address configured")
        return None

    return MailNotifier(
        address,
        sender=cfg.get_path("notification.sender"),
        host=cfg.get_path("notification.smtp_host", "localhost"),
        port=int(cfg.get_path("notification.smtp_port", 25)),
        on_failure=printer.error,
    )


def notification_body(outcome: ExecutionOutcome) -> str:
    """Command line and output of an outcome, safe to send by e-mail.

    Uses the displayed command so redacted key material stays redacted.
    """
    return (outcome.displayed or outcome.executed) + "\n" + outcome.output


def report_error_and_exit(
    message: str,
    printer: TerminalPrinter,
    notifier: Notifier | None = None,
    last: ExecutionOutcome | None = None,
) -> None:
    """Report a processing error and terminate with PROCESSING_ERROR."""
    printer.error(message)

    if notifier is not None:
        body = ""
        if last is not None:
            body = notification_body(last)
        notifier.send(message, body)

    raise SystemExit(int(ExitCode.PROCESSING_ERROR))


def main(argv: list[str] | None = None) -> int:
    """Main entry point for letsencrypt-cpanel."""
    args = build_parser().parse_args(argv)

    configure_error_log()

    printer = TerminalPrinter(verbose=args.verbose, color=not args.no_color)

    try:
        cfg = config.load_config(Path(args.config) if args.config else None)
    except (config.ConfigError, FileNotFoundError) as e:
        write_crash_log(e)
        report_error_and_exit(f"Failed to load configuration: {e}", printer)

    printer.verbose = args.verbose or cfg.verbose
    if printer.verbose:
        logging.basicConfig(
            level=logging.DEBUG, format="[%(levelname)s] %(name)s: %(message)s"
        )

    if args.notify_to:
        address = args.notify_to
    elif args.notify:
        address = ""
    else:
        address = None
    notifier = build_notifier(address, cfg, printer)
    runner = Runner(executor=SubprocessExecutor(), config=cfg, hooks=printer)

    try:
        outcome = runner.execute(
            args.name,
            extract_kwargs_and_posargs(args.args),
            timeout=args.timeout,
        )
    except Exception as e:
        logging.getLogger(__name__).exception("processing %s failed",
                                              args.name)
        write_crash_log(e, command=args.name)
        report_error_and_exit(
            f"Unhandled exception: {type(e).__name__}: {e}",
            printer, notifier,
        )

    if not outcome.ok and notifier is not None:
        notifier.send(
            f"{args.name} failed with exit code {int(outcome.exit_code)}",
            notification_body(outcome),
        )

    return int(outcome.exit_code)
