# LetsEncrypt cPanel - Certificate Automation for cPanel Hosting Accounts
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
E-mail notifications for failed runs.
"""

from __future__ import annotations

import getpass
import smtplib
import socket
from collections.abc import Callable
from email.message import EmailMessage


class MailNotifier:
    """Notifier protocol implementation sending plain-text e-mail."""

    def __init__(
        self,
        address: str,
        sender: str | None = None,
        host: str = "localhost",
        port: int = 25,
        on_failure: Callable[[str], None] | None = None,
    ) -> None:
        self.address = address
        self.sender = sender or f"{getpass.getuser()}@{socket.getfqdn()}"
        self.host = host
        self.port = port
        self.on_failure = on_failure

    def build_message(self, subject: str, message: str) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self.sender
        msg["To"] = self.address
        msg.set_content(message)
        return msg

    def send(self, subject: str, message: str) -> bool:
        """Send the message; report (never raise) delivery failures."""
        try:
            with smtplib.SMTP(self.host, self.port, timeout=30) as smtp:
                smtp.send_message(self.build_message(subject, message))
        except (OSError, smtplib.SMTPException) as e:
            if self.on_failure:
                self.on_failure(f"Failed to send email notification: {e}")
            return False
        return True
