"""Run the FastAPI app for the memory agent."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from main_config import LOG_LEVEL
from src.agent_orchestrator.dispatcher import ToolDispatcher
from src.agent_orchestrator.providers import LLMProvider
from src.conversation_memory import ConversationStore, ConversationStoreConfig
from src.routers import chat_router, tools_router

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(
    store: ConversationStore | None = None,
    llm_provider: LLMProvider | None = None,
) -> FastAPI:
    """Build the app. A store passed in is shared but not closed on shutdown."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = store is None
        active = store or ConversationStore.from_config(ConversationStoreConfig())
        app.state.store = active
        app.state.dispatcher = ToolDispatcher(active)
        app.state.llm_provider = llm_provider
        logger.info(
            "Conversation store ready at %s; tools: %s",
            active.db_path,
            ", ".join(t.name for t in app.state.dispatcher.list_tools()),
        )
        try:
            yield
        finally:
            if owned:
                active.close()
                logger.info("Conversation store closed")

    app = FastAPI(title="Memory Agent", version="0.1.0", lifespan=lifespan)
    app.include_router(chat_router)
    app.include_router(tools_router)
    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
