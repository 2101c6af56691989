# feedback_mailer/config/__init__.py
"""
Lightweight config package initializer (no logging imports, no cycles).

Rules:
- Read from env when present, else use sensible defaults.
- Everything is gathered into one frozen Settings value by load_settings();
  request handlers receive it by injection and never touch os.environ.
"""

from __future__ import annotations
import os, json
from dataclasses import dataclass, field
from typing import List, Tuple

from dotenv import load_dotenv
load_dotenv()  # ensure .env loads even in python shell

from .email_styles import EMAIL_STYLES


# ----------------- helpers -----------------
def _env_bool(name: str, default: bool = False) -> bool:
    v = os.getenv(name)
    if v is None: return default
    s = v.strip().lower()
    if s in ("1","true","yes","on"): return True
    if s in ("0","false","no","off",""): return False
    return True

def _env_str(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else str(v)

def _env_list(name: str, default: List[str] | None = None) -> List[str]:
    raw = os.getenv(name)
    if not raw: return list(default or [])
    s = raw.strip()
    if s.startswith("["):
        try:
            val = json.loads(s)
            if isinstance(val, list): return [str(x).strip() for x in val]
        except ValueError:
            pass
    return [item.strip() for item in s.split(",") if item.strip()]

def _env_int(name: str, default: int) -> int:
    try:
        return int(_env_str(name, str(default)))
    except ValueError:
        return default

def _env_float(name: str, default: float) -> float:
    try:
        return float(_env_str(name, str(default)))
    except ValueError:
        return default


# ----------------- fixed copy -----------------
DEFAULT_SUBJECT: str = "DrawDB Feedback Submission"
SUCCESS_MESSAGE: str = "Thank you for your feedback!"
FAILURE_MESSAGE: str = "There was a problem submitting your feedback. Please try again later."
CORS_REJECTED_MESSAGE: str = "Not allowed by CORS"

DEVELOPMENT = "development"


@dataclass(frozen=True)
class Settings:
    # CORS allow-list (exact origin strings, e.g. "https://drawdb.app")
    client_urls: Tuple[str, ...] = ()

    # Mail account / routing
    email_user: str = ""
    email_pass: str = field(default="", repr=False)
    email_report: str = ""

    # Transport (Outlook defaults)
    smtp_host: str = "smtp-mail.outlook.com"
    smtp_port: int = 587
    smtp_starttls: bool = True
    smtp_timeout: float = 60.0

    # Runtime
    app_env: str = "production"
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"

    @property
    def is_development(self) -> bool:
        return self.app_env == DEVELOPMENT

    def mail_configured(self) -> bool:
        return bool(self.email_user and self.email_pass and self.email_report)

    def origin_allowed(self, origin: str | None) -> bool:
        """No Origin header (curl, mobile apps) is always fine."""
        if not origin:
            return True
        return self.is_development or origin in self.client_urls


def load_settings() -> Settings:
    """Build Settings from the current environment (call once at startup)."""
    return Settings(
        client_urls=tuple(_env_list("CLIENT_URLS")),
        email_user=_env_str("EMAIL_USER").strip(),
        email_pass=_env_str("EMAIL_PASS"),
        email_report=_env_str("EMAIL_REPORT").strip(),
        smtp_host=_env_str("SMTP_HOST", "smtp-mail.outlook.com"),
        smtp_port=_env_int("SMTP_PORT", 587),
        smtp_starttls=_env_bool("SMTP_STARTTLS", True),
        smtp_timeout=_env_float("SMTP_TIMEOUT", 60.0),
        app_env=(_env_str("APP_ENV") or _env_str("NODE_ENV", "production")).strip().lower(),
        host=_env_str("HOST", "0.0.0.0"),
        port=_env_int("PORT", 3000),
        log_level=_env_str("LOG_LEVEL", "INFO").upper(),
    )


__all__ = [
    "Settings", "load_settings",
    "DEFAULT_SUBJECT", "SUCCESS_MESSAGE", "FAILURE_MESSAGE", "CORS_REJECTED_MESSAGE",
    "DEVELOPMENT", "EMAIL_STYLES",
]
