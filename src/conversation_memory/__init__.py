"""Durable, queryable log of conversation messages."""

from .config import ConversationStoreConfig
from .errors import ConversationStoreError, PersistenceError, ValidationError
from .models import ConversationQuery, ConversationRecord, ConversationStats
from .store import ConversationStore

__all__ = [
    "ConversationStore",
    "ConversationStoreConfig",
    "ConversationQuery",
    "ConversationRecord",
    "ConversationStats",
    "ConversationStoreError",
    "PersistenceError",
    "ValidationError",
]
