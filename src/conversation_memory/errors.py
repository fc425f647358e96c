"""Exceptions raised by the conversation store."""

from __future__ import annotations


class ConversationStoreError(Exception):
    """Base class for conversation store failures."""


class ValidationError(ConversationStoreError, ValueError):
    """Malformed or missing input (bad role, empty content, unparsable timestamp)."""


class PersistenceError(ConversationStoreError):
    """The underlying database could not complete a read or write."""
