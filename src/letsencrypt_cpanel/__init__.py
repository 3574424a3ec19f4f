# LetsEncrypt cPanel - Certificate Automation for cPanel Hosting Accounts
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
letsencrypt-cpanel core package.

Builds, dispatches and runs the shell, self-invocation and UAPI commands
the certificate workflow is made of.
"""
from .executor import ExecutionOutcome as ExecutionOutcome  # noqa: F401
from .executor import ExitCode as ExitCode  # noqa: F401
from .runner import Runner as Runner  # noqa: F401 (re-export)
