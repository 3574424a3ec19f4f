# LetsEncrypt cPanel - Certificate Automation for cPanel Hosting Accounts
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Text transforms used around command execution.

All functions here are pure: plain text in, plain text out.
"""

from __future__ import annotations

import re
import shlex

REDACTED = "[REDACTED]"

_WHITESPACE = re.compile(r"\s")
_LOG_TIMESTAMP = re.compile(r"^\[.+?\] ", re.MULTILINE)
_LEADING_INDENT = re.compile(r"^[\t ]+")

# A PEM block inside a rendered command ends where its quoted token ends.
_PEM_BLOCK = re.compile(r"-----BEGIN.*?(?=' |'$|\Z)", re.DOTALL)

_QUOTE_MAP = {
    "“": '"',
    "”": '"',
    "„": '"',
    "‘": "'",
    "’": "'",
    "‚": "'",
    "&quot;": '"',
    "&#39;": "'",
    "&#039;": "'",
}


def shell_quote(s: str) -> str:
    """Shell-escape string for safe substitution in shell commands.

    Args:
        s: String to escape

    Returns:
        Shell-safe quoted string
    """
    return shlex.quote(s)


def escape_arg(value) -> str:
    """Escape a single command token.

    Only values containing whitespace are quoted. Everything else passes
    through untouched so flags like ``--output=jsonpretty`` or ``2>`` keep
    their shell meaning.
    """
    text = str(value)
    if _WHITESPACE.search(text):
        return shell_quote(text)
    return text


def strip_log_timestamps(text: str) -> str:
    """Remove a leading ``[...] `` bracket from every line."""
    return _LOG_TIMESTAMP.sub("", text)


def normalize_quotes(text: str) -> str:
    """Replace typographic quotes and quote entities with ASCII quotes."""
    for src, dst in _QUOTE_MAP.items():
        text = text.replace(src, dst)
    return text


def redact_certificates(text: str) -> str:
    """Replace PEM payloads (certificates, keys) with a redaction marker."""
    return _PEM_BLOCK.sub(REDACTED, text)


def normalize_output(text: str) -> str:
    """Drop leading indentation from each line and remove blank lines."""
    lines = []
    for line in text.splitlines():
        line = _LEADING_INDENT.sub("", line)
        if line.strip():
            lines.append(line)
    return "\n".join(lines)


def extract_kwargs_and_posargs(
    args: list[str]
) -> list[str | tuple[str, str]]:
    """Split CLI tokens into keyed and positional command arguments.

    ``key=value`` tokens become ``(key, value)`` pairs, anything else stays
    a bare positional value. Relative order is preserved.

    Args:
        args: List of argument tokens

    Returns:
        Ordered list of ``(key, value)`` tuples and plain strings
    """
    kwarg_pattern = re.compile(r'^([A-Za-z_][A-Za-z0-9_-]*)=(.*)$',
                               re.DOTALL)

    parsed: list[str | tuple[str, str]] = []
    for arg in args:
        match = kwarg_pattern.match(arg)
        if match:
            parsed.append((match.group(1), match.group(2)))
        else:
            parsed.append(arg)

    return parsed
