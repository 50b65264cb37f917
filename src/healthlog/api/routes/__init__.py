from .health import router as health_router
from .weights import router as weights_router

__all__ = [
    "health_router",
    "weights_router",
]
