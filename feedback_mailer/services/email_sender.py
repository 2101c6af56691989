# feedback_mailer/services/email_sender.py
from __future__ import annotations

import base64
import binascii
import logging
import mimetypes
from dataclasses import dataclass, field
from email.message import EmailMessage
from typing import List, Optional, Protocol

import aiosmtplib

from feedback_mailer.config import Settings
from feedback_mailer.models import Attachment

logger = logging.getLogger(__name__)


class EmailSendError(Exception):
    """The transport refused or failed to deliver a message."""


@dataclass
class OutgoingEmail:
    sender: str
    to: str
    subject: str
    html: str
    attachments: List[Attachment] = field(default_factory=list)


@dataclass
class SendResult:
    ok: bool
    response: Optional[str] = None
    error: Optional[BaseException] = None


class EmailSender(Protocol):
    async def send(self, email: OutgoingEmail) -> SendResult: ...


def _attachment_payload(att: Attachment) -> bytes:
    encoding = (att.encoding or "").lower()
    if encoding == "base64":
        return base64.b64decode(att.content or "", validate=True)
    if encoding == "hex":
        return bytes.fromhex(att.content or "")
    return (att.content or "").encode(att.encoding or "utf-8")


def _guess_type(att: Attachment) -> tuple[str, str]:
    ctype = att.content_type
    if not ctype and att.filename:
        ctype, _ = mimetypes.guess_type(att.filename)
    if not ctype or "/" not in ctype:
        ctype = "application/octet-stream"
    maintype, subtype = ctype.split("/", 1)
    return maintype, subtype


def build_mime_message(email: OutgoingEmail) -> EmailMessage:
    msg = EmailMessage()
    msg["From"] = email.sender
    msg["To"] = email.to
    msg["Subject"] = email.subject
    msg.set_content(email.html, subtype="html")

    for att in email.attachments:
        if att.content is None:
            logger.warning("⚠️ Skipping attachment without inline content: %s", att.filename or "<unnamed>")
            continue
        try:
            payload = _attachment_payload(att)
        except (binascii.Error, LookupError, ValueError) as exc:
            logger.warning("⚠️ Skipping unreadable attachment %s: %s", att.filename or "<unnamed>", exc)
            continue

        maintype, subtype = _guess_type(att)
        msg.add_attachment(
            payload,
            maintype=maintype,
            subtype=subtype,
            filename=att.filename,
            cid=f"<{att.cid}>" if att.cid else None,
        )

    return msg


class SmtpEmailSender:
    """
    Sends through one configured SMTP account. Built once at startup and shared
    by every request; it keeps no per-message state.
    """

    def __init__(self, settings: Settings):
        self.hostname = settings.smtp_host
        self.port = settings.smtp_port
        self.username = settings.email_user
        self.password = settings.email_pass
        self.start_tls = settings.smtp_starttls
        self.timeout = settings.smtp_timeout

    async def send(self, email: OutgoingEmail) -> SendResult:
        msg = build_mime_message(email)
        try:
            errors, response = await aiosmtplib.send(
                msg,
                hostname=self.hostname,
                port=self.port,
                username=self.username or None,
                password=self.password or None,
                start_tls=self.start_tls,
                timeout=self.timeout,
            )
        except aiosmtplib.SMTPException as exc:
            logger.error("❌ SMTP send to %s failed: %s", email.to, exc)
            return SendResult(ok=False, error=EmailSendError(str(exc)))

        if errors:
            refused = ", ".join(sorted(errors))
            logger.error("❌ SMTP server refused recipients: %s", refused)
            return SendResult(ok=False, error=EmailSendError(f"recipients refused: {refused}"))

        logger.info("📨 Email sent to %s: %s", email.to, response)
        return SendResult(ok=True, response=response)


def sender_from_settings(settings: Settings) -> SmtpEmailSender:
    if not settings.mail_configured():
        logger.warning("⚠️ EMAIL_USER / EMAIL_PASS / EMAIL_REPORT not fully set; sends will fail")
    return SmtpEmailSender(settings)


__all__ = [
    "EmailSendError", "OutgoingEmail", "SendResult", "EmailSender",
    "SmtpEmailSender", "build_mime_message", "sender_from_settings",
]
