"""AskEBL - rule-based banking assistant."""

from .auth import authenticate
from .conversation import ConversationEngine, ConversationManager
from .knowledge import KnowledgeBase, default_knowledge_base, load_knowledge_base
from .models import (
    CatalogItem,
    ConversationState,
    KnowledgeEntry,
    Message,
    PendingMode,
    Sender,
    SuggestedQuestion,
    TurnResult,
)
from .store import BankingStore

__all__ = [
    "BankingStore",
    "CatalogItem",
    "ConversationEngine",
    "ConversationManager",
    "ConversationState",
    "KnowledgeBase",
    "KnowledgeEntry",
    "Message",
    "PendingMode",
    "Sender",
    "SuggestedQuestion",
    "TurnResult",
    "authenticate",
    "default_knowledge_base",
    "load_knowledge_base",
]
