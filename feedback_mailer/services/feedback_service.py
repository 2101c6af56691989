# feedback_mailer/services/feedback_service.py
from __future__ import annotations

import logging
from typing import Optional

from feedback_mailer.config import EMAIL_STYLES, Settings
from feedback_mailer.models import FeedbackSubmission
from feedback_mailer.services.email_sender import EmailSender, EmailSendError, OutgoingEmail
from feedback_mailer.services.message_composer import Clock, utc_now, compose_message

logger = logging.getLogger(__name__)


def wrap_html(content: Optional[str]) -> str:
    return f"<html><head>{EMAIL_STYLES}</head><body>{content or ''}</body></html>"


def build_feedback_email(
    submission: FeedbackSubmission,
    settings: Settings,
    now: Clock = utc_now,
) -> OutgoingEmail:
    content = compose_message(submission.message, submission.structured_fields(), now=now)
    return OutgoingEmail(
        sender=settings.email_user,
        to=settings.email_report,
        subject=submission.subject,
        html=wrap_html(content),
        attachments=list(submission.attachments),
    )


async def submit_feedback(
    submission: FeedbackSubmission,
    settings: Settings,
    sender: EmailSender,
) -> bool:
    """
    One delivery attempt, no retry. Returns False on any transport failure;
    the cause is logged here and never handed back to the caller.
    """
    email = build_feedback_email(submission, settings)
    try:
        result = await sender.send(email)
        if not result.ok:
            raise result.error or EmailSendError("email sender reported failure")
    except Exception:
        logger.exception("❌ Error sending feedback email (subject=%r)", email.subject)
        return False

    logger.info("✅ Feedback email delivered (subject=%r, attachments=%d)", email.subject, len(email.attachments))
    return True
