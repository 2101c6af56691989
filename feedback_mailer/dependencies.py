# feedback_mailer/dependencies.py
from fastapi import Request

from feedback_mailer.config import Settings
from feedback_mailer.services.email_sender import EmailSender


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_email_sender(request: Request) -> EmailSender:
    return request.app.state.email_sender
