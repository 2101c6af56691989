# feedback_mailer/routers/feedback.py
from typing import Any

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from feedback_mailer.config import FAILURE_MESSAGE, SUCCESS_MESSAGE, Settings
from feedback_mailer.dependencies import get_email_sender, get_settings
from feedback_mailer.models import FeedbackSubmission
from feedback_mailer.services.email_sender import EmailSender
from feedback_mailer.services.feedback_service import submit_feedback

feedback_router = APIRouter(tags=["feedback"])


@feedback_router.post("/send_email")
async def send_email(
    payload: Any = Body(default=None),
    settings: Settings = Depends(get_settings),
    sender: EmailSender = Depends(get_email_sender),
):
    # Every field is optional; anything that is not an object is an empty submission.
    submission = FeedbackSubmission.model_validate(payload if isinstance(payload, dict) else {})

    if not await submit_feedback(submission, settings, sender):
        return JSONResponse(status_code=500, content={"error": FAILURE_MESSAGE})

    return {"message": SUCCESS_MESSAGE}
