from .feedback import feedback_router
from .health import router as health_router

__all__ = [
    "feedback_router",
    "health_router",
]
