# feedback_mailer/services/message_composer.py
from __future__ import annotations

import html
from datetime import datetime, timezone
from typing import Callable, List, Optional

from feedback_mailer.models import FeedbackFields

HEADING = "DrawDB Feedback Submission"

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _iso_timestamp(moment: datetime) -> str:
    # 2025-01-31T12:00:00.000Z, millisecond precision like a browser Date
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def _field(label: str, value: str) -> str:
    return f"<p><strong>{label}:</strong> {value}</p>"


def _yes_no(flag: bool) -> str:
    return "Yes" if flag else "No"


def compose_message(
    message: Optional[str],
    fields: FeedbackFields,
    now: Clock = utc_now,
) -> Optional[str]:
    """
    Body of the feedback mail.

    A caller-supplied message always wins and is returned untouched. Without one,
    a summary is built only when at least one rating was given; otherwise the
    (empty) message is returned as-is.
    """
    if message:
        return message
    if not fields.has_rating():
        return message

    parts: List[str] = [f"<h2>{HEADING}</h2>"]

    if fields.satisfaction is not None:
        parts.append(_field("Satisfaction Rating", f"{fields.satisfaction}/100"))
    if fields.ease_of_use is not None:
        parts.append(_field("Ease of Use Rating", f"{fields.ease_of_use}/100"))
    if fields.likelihood is not None:
        parts.append(_field("Likelihood to Recommend", f"{fields.likelihood}/100"))
    if fields.difficulties is not None:
        parts.append(_field("Encountered Difficulties", _yes_no(fields.difficulties)))
    if fields.tried_similar_apps is not None:
        parts.append(_field("Tried Similar Apps", _yes_no(fields.tried_similar_apps)))
    if fields.occupation:
        parts.append(_field("Occupation", html.escape(fields.occupation)))

    # feedbackText comes from the rich-text editor: already HTML
    if fields.feedback_text:
        parts.append(f"<h3>Feedback:</h3><div>{fields.feedback_text}</div>")

    parts.append(f"<p><em>Submitted on: {_iso_timestamp(now())}</em></p>")
    return "\n".join(parts)
