# feedback_mailer/models/__init__.py

# Re-export request models so callers can do: from feedback_mailer.models import FeedbackSubmission
from .feedback import Attachment, FeedbackFields, FeedbackSubmission

__all__ = [
    "Attachment",
    "FeedbackFields",
    "FeedbackSubmission",
]
