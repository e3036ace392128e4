"""Storage interfaces and implementations for articles and mentions."""

from newsmentions.storage.factory import Store, create_memory_store, create_store
from newsmentions.storage.interfaces import (
    ArticleStorageInterface,
    MentionStorageInterface,
)
from newsmentions.storage.memory import (
    InMemoryArticleStorage,
    InMemoryMentionStorage,
)
from newsmentions.storage.sql import SQLArticleStorage, SQLMentionStorage

__all__ = [
    "ArticleStorageInterface",
    "MentionStorageInterface",
    "InMemoryArticleStorage",
    "InMemoryMentionStorage",
    "SQLArticleStorage",
    "SQLMentionStorage",
    "Store",
    "create_store",
    "create_memory_store",
]
