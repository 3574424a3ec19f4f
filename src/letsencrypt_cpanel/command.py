# LetsEncrypt cPanel - Certificate Automation for cPanel Hosting Accounts
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Command assembly.

A logical command (name + arguments) becomes a CommandSpec:
- the name is resolved through the alias table
- per-command default arguments are merged in
- every argument is rendered into an escaped token

Handlers may splice extra, already rendered tokens into the sequence
with insert() before the command is executed.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from .utils import escape_arg


@dataclass(frozen=True)
class Argument:
    """A single command argument: positional when key is None."""

    value: Any
    key: str | None = None

    @property
    def is_keyed(self) -> bool:
        return self.key is not None

    def render(self) -> str:
        if self.key is None:
            return escape_arg(self.value)
        return f"{self.key}={escape_arg(self.value)}"


def to_arguments(args: Any) -> list[Argument]:
    """Normalize a caller-supplied argument collection.

    Accepts a mapping (all keyed, in insertion order) or a sequence whose
    entries are bare values, ``(key, value)`` pairs or Argument objects.
    """
    if args is None:
        return []

    if isinstance(args, Mapping):
        return [Argument(value, key) for key, value in args.items()]

    if isinstance(args, (str, bytes)):
        raise TypeError("arguments must be a sequence or mapping, not a string")

    result: list[Argument] = []
    for entry in args:
        if isinstance(entry, Argument):
            result.append(entry)
        elif isinstance(entry, tuple) and len(entry) == 2:
            key, value = entry
            result.append(Argument(value, str(key)))
        elif isinstance(entry, Mapping):
            for key, value in entry.items():
                result.append(Argument(value, str(key)))
        else:
            result.append(Argument(entry))
    return result


def merge_defaults(
    arguments: list[Argument], defaults: Iterable[Any]
) -> list[Argument]:
    """Merge default arguments into the caller's arguments.

    Keyed defaults overwrite a caller key in place (or are appended).
    Positional defaults are appended only when no existing argument
    carries an equal value.
    """
    merged = list(arguments)

    for default in to_arguments(list(defaults)):
        if default.is_keyed:
            for i, arg in enumerate(merged):
                if arg.key == default.key:
                    merged[i] = default
                    break
            else:
                merged.append(default)
        elif not any(arg.value == default.value for arg in merged):
            merged.append(default)

    return merged


@dataclass
class CommandSpec:
    """Built invocation of one logical command."""

    name: str
    identity: str
    arguments: list[Argument] = field(default_factory=list)
    tokens: list[str] = field(default_factory=list)

    @classmethod
    def build(
        cls,
        name: str,
        args: Any = None,
        aliases: Mapping[str, str] | None = None,
        defaults: Mapping[str, Sequence[Any]] | None = None,
    ) -> CommandSpec:
        """Resolve aliases, merge defaults and render tokens."""
        aliases = aliases or {}
        defaults = defaults or {}

        identity = aliases.get(name, name)

        arguments = to_arguments(args)
        if name in defaults:
            arguments = merge_defaults(arguments, defaults[name] or [])

        # None removes the argument, it is never rendered as "key="
        arguments = [arg for arg in arguments if arg.value is not None]

        tokens = [escape_arg(identity)]
        tokens.extend(arg.render() for arg in arguments)

        return cls(
            name=name, identity=identity, arguments=arguments, tokens=tokens
        )

    def insert(
        self, entries: str | Iterable[str], position: int | None = None
    ) -> None:
        """Splice rendered tokens at position (None appends).

        Tokens are inserted verbatim; callers escape what needs escaping.
        """
        if isinstance(entries, str):
            entries = [entries]
        entries = list(entries)

        if position is None:
            position = len(self.tokens)
        if position < 0 or position > len(self.tokens):
            raise IndexError(
                f"insert position {position} out of range "
                f"0..{len(self.tokens)}"
            )

        self.tokens[position:position] = entries

    def render(self) -> str:
        return " ".join(self.tokens)

    def __len__(self) -> int:
        return len(self.tokens)
