"""Test configuration and fixtures for AskEBL tests.

This module provides reusable test fixtures organized by functionality:
- Constants and test data
- Knowledge base fixtures
- Conversation engine and manager fixtures
- Banking store fixtures
"""

from unittest.mock import create_autospec

import pytest

from askebl import (
    BankingStore,
    ConversationEngine,
    ConversationManager,
    ConversationState,
    KnowledgeBase,
    KnowledgeEntry,
    PendingMode,
)


class TestConstants:
    """Centralized test constants to avoid repetition across test files.

    All test constants are defined here to maintain consistency across
    the test suite and make it easy to update values globally.
    """

    # Matching Configuration
    DEFAULT_THRESHOLD = 3

    # Session Configuration
    TEST_SESSION_ID = "session_1700000000000_abc123xyz"

    # Demo Credentials
    DEMO_PASSWORD = "demo123"


@pytest.fixture
def sample_faqs() -> tuple[KnowledgeEntry, ...]:
    """Small FAQ collection with known scores."""
    return (
        KnowledgeEntry(
            question="How do I open an account?",
            answer="Visit any branch with your National ID card and a photograph.",
            keywords=("open", "new account"),
            category="Accounts",
        ),
        KnowledgeEntry(
            question="What are the banking hours?",
            answer="Branches are open Sunday to Thursday, 10 AM to 4 PM.",
            keywords=("hours", "timing"),
            category="General",
        ),
        KnowledgeEntry(
            question="How can I reset my internet banking password?",
            answer="Use 'Forgot Password' on the login page.",
            keywords=("password", "reset"),
            category="Digital Banking",
        ),
    )


@pytest.fixture
def sample_popular_questions() -> tuple[KnowledgeEntry, ...]:
    """Popular questions shown as quick buttons."""
    return (
        KnowledgeEntry(
            question="How do I contact customer service?",
            answer="Call our contact center at 16230.",
            keywords=("contact", "helpline"),
            category="General",
        ),
    )


@pytest.fixture
def knowledge_base_factory(sample_faqs, sample_popular_questions):
    """Factory for knowledge bases with the default catalogs."""

    def _create_knowledge_base(
        faqs: tuple[KnowledgeEntry, ...] | None = None,
        popular_questions: tuple[KnowledgeEntry, ...] | None = None,
    ) -> KnowledgeBase:
        return KnowledgeBase(
            faqs=sample_faqs if faqs is None else faqs,
            popular_questions=(
                sample_popular_questions
                if popular_questions is None
                else popular_questions
            ),
        )

    return _create_knowledge_base


@pytest.fixture
def knowledge_base(knowledge_base_factory) -> KnowledgeBase:
    """Knowledge base built from the sample collections."""
    return knowledge_base_factory()


@pytest.fixture
def engine(knowledge_base) -> ConversationEngine:
    """Conversation engine with the default threshold."""
    return ConversationEngine(knowledge_base, threshold=TestConstants.DEFAULT_THRESHOLD)


@pytest.fixture
def idle_state() -> ConversationState:
    return ConversationState()


@pytest.fixture
def state_factory():
    """Factory for conversation states in a given pending mode."""

    def _create_state(
        mode: PendingMode = PendingMode.IDLE, pending_payload: str | None = None
    ) -> ConversationState:
        return ConversationState(mode=mode, pending_payload=pending_payload)

    return _create_state


@pytest.fixture
def mock_suggestion_sink():
    """Autospec'd store standing in for the suggestion sink."""
    return create_autospec(BankingStore, instance=True)


@pytest.fixture
def conversation_manager(engine, mock_suggestion_sink) -> ConversationManager:
    """Pre-configured ConversationManager with a mock suggestion sink."""
    return ConversationManager(
        engine,
        suggestion_sink=mock_suggestion_sink,
        session_id=TestConstants.TEST_SESSION_ID,
    )


@pytest.fixture
def temp_store(tmp_path) -> BankingStore:
    """Create an empty temporary banking store."""
    return BankingStore(tmp_path / "test_bank.db")


@pytest.fixture
def seeded_store(temp_store) -> BankingStore:
    """Temporary banking store loaded with demo data."""
    temp_store.seed_demo_data(TestConstants.DEMO_PASSWORD)
    return temp_store
