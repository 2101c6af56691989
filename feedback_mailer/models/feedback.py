# models/feedback.py
from __future__ import annotations

import logging
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from feedback_mailer.config import DEFAULT_SUBJECT

logger = logging.getLogger(__name__)

Rating = Union[int, float]


class Attachment(BaseModel):
    """Mailer-style attachment descriptor; unknown keys are ignored."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    filename: Optional[str] = None
    content: Optional[str] = None
    encoding: Optional[str] = None  # "base64" → content is encoded bytes
    content_type: Optional[str] = Field(default=None, alias="contentType")
    cid: Optional[str] = None


class FeedbackFields(BaseModel):
    """
    The structured survey answers. Each one is independently optional:
    None means "not sent", which is different from False or 0.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    satisfaction: Optional[Rating] = None
    ease_of_use: Optional[Rating] = Field(default=None, alias="easeOfUse")
    likelihood: Optional[Rating] = None
    difficulties: Optional[bool] = None
    tried_similar_apps: Optional[bool] = Field(default=None, alias="triedSimilarApps")
    occupation: Optional[str] = None
    feedback_text: Optional[str] = Field(default=None, alias="feedbackText")

    @field_validator(
        "satisfaction", "ease_of_use", "likelihood",
        "difficulties", "tried_similar_apps", "occupation", "feedback_text",
        mode="wrap",
    )
    @classmethod
    def _absent_when_invalid(cls, value: Any, handler):
        # Submissions are never rejected: a value of the wrong shape counts as absent.
        try:
            parsed = handler(value)
        except ValidationError:
            return None
        # 80.0 renders as 80
        if isinstance(parsed, float) and parsed.is_integer():
            return int(parsed)
        return parsed

    def has_rating(self) -> bool:
        return any(v is not None for v in (self.satisfaction, self.ease_of_use, self.likelihood))


class FeedbackSubmission(FeedbackFields):
    subject: str = DEFAULT_SUBJECT
    message: Optional[str] = None
    attachments: List[Attachment] = Field(default_factory=list)

    @field_validator("subject", mode="wrap")
    @classmethod
    def _default_subject(cls, value: Any, handler):
        try:
            subject = handler(value) if value is not None else DEFAULT_SUBJECT
        except ValidationError:
            return DEFAULT_SUBJECT
        # header values cannot carry line breaks
        return " ".join(subject.splitlines())

    @field_validator("message", mode="wrap")
    @classmethod
    def _message_or_none(cls, value: Any, handler):
        try:
            return handler(value)
        except ValidationError:
            return None

    @field_validator("attachments", mode="before")
    @classmethod
    def _keep_descriptors(cls, value: Any):
        if not isinstance(value, list):
            return []
        kept = []
        for item in value:
            try:
                kept.append(Attachment.model_validate(item))
            except ValidationError as exc:
                logger.warning("⚠️ Dropping malformed attachment descriptor: %s", exc.errors(include_url=False))
        return kept

    def structured_fields(self) -> FeedbackFields:
        return FeedbackFields.model_validate(
            {name: getattr(self, name) for name in FeedbackFields.model_fields}
        )
