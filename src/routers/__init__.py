from .chat import router as chat_router
from .tools import router as tools_router

__all__ = ["chat_router", "tools_router"]
