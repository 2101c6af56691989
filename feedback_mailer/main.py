import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from feedback_mailer import __version__
from feedback_mailer.config import CORS_REJECTED_MESSAGE, Settings, load_settings
from feedback_mailer.routers import feedback_router, health_router
from feedback_mailer.services.email_sender import EmailSender, sender_from_settings

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, email_sender: Optional[EmailSender] = None) -> FastAPI:
    settings = settings or load_settings()

    app = FastAPI(
        title="Feedback Mailer API",
        version=__version__,
    )
    app.state.settings = settings
    app.state.email_sender = email_sender or sender_from_settings(settings)

    # 🔓 CORS — allow-listed origins get headers; development mode lets everything through
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.client_urls),
        allow_origin_regex=".*" if settings.is_development else None,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Registered after CORSMiddleware so it runs first: unknown origins never reach a route
    @app.middleware("http")
    async def reject_unknown_origins(request: Request, call_next):
        origin = request.headers.get("origin")
        if not settings.origin_allowed(origin):
            logger.warning("🚫 Rejected request from origin %s to %s", origin, request.url.path)
            return JSONResponse(status_code=403, content={"error": CORS_REJECTED_MESSAGE})
        return await call_next(request)

    app.include_router(health_router)
    app.include_router(feedback_router)

    logger.info(
        "🚀 Feedback mailer ready (env=%s, origins=%d, report=%s)",
        settings.app_env, len(settings.client_urls), settings.email_report or "<unset>",
    )
    return app


def resolve_log_level(name: str) -> int:
    level = logging.getLevelName(name)
    if isinstance(level, int):
        return level
    logger.warning("⚠️ Unknown LOG_LEVEL %r, using INFO", name)
    return logging.INFO


settings = load_settings()
logging.basicConfig(level=resolve_log_level(settings.log_level))

app = create_app(settings)


def run() -> None:
    import uvicorn

    logger.info("Server starting on port %s", settings.port)
    if settings.is_development:
        uvicorn.run("feedback_mailer.main:app", host=settings.host, port=settings.port, reload=True)
    else:
        uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
