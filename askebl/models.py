"""Data models for the banking assistant."""

import datetime
import uuid
from dataclasses import dataclass, field
from enum import Enum


def _utc_now() -> datetime.datetime:
    return datetime.datetime.now(tz=datetime.UTC)


@dataclass(frozen=True)
class KnowledgeEntry:
    """A question/answer pair from the FAQ or popular-question collections."""

    question: str
    answer: str
    keywords: tuple[str, ...] = ()
    category: str | None = None


@dataclass(frozen=True)
class CatalogItem:
    """A named offering (card, account, loan, location) with one description."""

    name: str
    description: str


class Sender(str, Enum):
    """Author of a chat message."""

    USER = "user"
    BOT = "bot"


class PendingMode(str, Enum):
    """The sub-dialogue the conversation is waiting to resolve."""

    IDLE = "idle"
    AWAITING_SUGGESTION_CONFIRMATION = "awaiting_suggestion_confirmation"
    AWAITING_CARD_SELECTION = "awaiting_card_selection"
    AWAITING_ACCOUNT_SELECTION = "awaiting_account_selection"
    AWAITING_LOAN_SELECTION = "awaiting_loan_selection"
    AWAITING_ATM_LOCATION = "awaiting_atm_location"
    AWAITING_BRANCH_LOCATION = "awaiting_branch_location"


@dataclass(frozen=True)
class Message:
    """A single chat message.

    ``options`` lists labels the UI may render as selectable buttons and
    ``confirmation`` marks a bot message that expects a Yes/No answer.
    """

    text: str
    sender: Sender
    options: tuple[str, ...] = ()
    confirmation: bool = False
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    timestamp: datetime.datetime = field(default_factory=_utc_now)


@dataclass(frozen=True)
class ConversationState:
    """Snapshot of one chat session."""

    mode: PendingMode = PendingMode.IDLE
    pending_payload: str | None = None
    history: tuple[Message, ...] = ()


@dataclass(frozen=True)
class SuggestedQuestion:
    """An unanswered question the user agreed to send to the admin team."""

    question: str
    session_id: str
    submitted_at: datetime.datetime = field(default_factory=_utc_now)


@dataclass(frozen=True)
class TurnResult:
    """Outcome of processing one user utterance."""

    reply: Message
    state: ConversationState
    suggestion: SuggestedQuestion | None = None


@dataclass
class UserAccount:
    """An authenticated dashboard user."""

    user_id: str
    full_name: str


@dataclass
class Profile:
    """Account holder details and balances."""

    user_id: str
    full_name: str | None
    account_number: str | None
    balance: float
    savings_balance: float
    created_at: str
    updated_at: str

    @property
    def total_balance(self) -> float:
        return self.balance + self.savings_balance


@dataclass
class Loan:
    """An outstanding loan held by a user."""

    id: int
    user_id: str
    loan_type: str
    total_amount: float
    paid_amount: float
    remaining_amount: float
    interest_rate: float
    monthly_payment: float
    next_payment_date: str | None
    created_at: str

    @property
    def progress(self) -> int:
        """Repaid share of the loan as a whole percentage."""
        if self.total_amount <= 0:
            return 0
        return round(self.paid_amount / self.total_amount * 100)


@dataclass
class Transaction:
    """A posted account transaction. Negative amounts are debits."""

    id: int
    user_id: str
    transaction_type: str
    amount: float
    description: str | None
    balance_after: float | None
    transaction_date: str


@dataclass
class SuggestionRecord:
    """A stored suggestion awaiting review."""

    id: int
    question: str
    session_id: str
    status: str
    created_at: str
