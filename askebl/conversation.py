"""Rule-based conversation engine and per-session chat management."""

import re
import secrets
import string
import time
from dataclasses import replace
from typing import Protocol

from .config import config
from .errors import InvalidInputError, PersistenceError
from .knowledge import ChoiceFlow, KnowledgeBase
from .matching import classify_intent, find_best_match, resolve_choice
from .models import (
    ConversationState,
    Message,
    PendingMode,
    Sender,
    SuggestedQuestion,
    TurnResult,
)

logger = config.get_logger(__name__)

GREETING = "Hello! I'm AskEBL, your banking assistant. How can I help you today?"

SUGGESTION_PROMPT = (
    'I couldn\'t find a specific answer to your question: "{question}"\n\n'
    "Would you like me to suggest this question to our admin team so they can "
    "add it to our FAQ database? This will help us serve you and other "
    "customers better.\n\n"
    "Please respond with 'Yes' or 'No'."
)
SUGGESTION_REPROMPT = (
    "Please respond with 'Yes' or 'No' only. Would you like me to suggest your "
    "question to our admin team to add to our FAQ database?"
)
SUGGESTION_THANKS = (
    "Thank you! Your question has been submitted to our admin team. They will "
    "review it and may add it to our FAQ database soon. Is there anything else "
    "I can help you with?"
)
SUGGESTION_DECLINED = (
    "No problem! Is there anything else I can help you with? You can ask about "
    "loans, accounts, credit cards, or any other banking services."
)
SUGGESTION_FAILED = (
    "I'm sorry, there was an error submitting your suggestion. Please try again "
    "later. Is there anything else I can help you with?"
)
LOST_CARD_ANSWER = (
    "If your card is lost or stolen, please act immediately:\n"
    "1. Call our 24/7 contact center at 16230 to block the card.\n"
    "2. Or block it yourself from EBL Skybanking under 'Card Services'.\n"
    "3. Review recent transactions and report any you don't recognise.\n"
    "4. Visit your nearest branch to request a replacement card."
)

YES_ANSWERS = frozenset({"yes", "y"})
NO_ANSWERS = frozenset({"no", "n"})
CONFIRMATION_OPTIONS = ("Yes", "No")

LOST_CARD_PATTERN = re.compile(
    r"\b(lost|stolen|misplaced)\b.*\bcards?\b|\bcards?\b.*\b(lost|stolen|misplaced)\b",
    re.IGNORECASE,
)

SESSION_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits


def new_session_id() -> str:
    """Generate an opaque per-session token used to tag suggestions.

    Returns:
        A token of the form ``session_<epoch-ms>_<9 random characters>``.
    """
    suffix = "".join(secrets.choice(SESSION_SUFFIX_ALPHABET) for _ in range(9))
    return f"session_{int(time.time() * 1000)}_{suffix}"


class ConversationEngine:
    """Turns (state, utterance) into a bot reply and the next state.

    The engine performs no I/O. A confirmed suggestion is returned on the
    TurnResult for the caller to persist.
    """

    def __init__(
        self, knowledge_base: KnowledgeBase, threshold: int | None = None
    ) -> None:
        """Initialize ConversationEngine.

        Args:
            knowledge_base: FAQ entries, catalogs and guided flows.
            threshold: Minimum score a match must exceed. If None, uses
                config.MATCH_THRESHOLD.
        """
        self.knowledge_base = knowledge_base
        self.threshold = config.MATCH_THRESHOLD if threshold is None else threshold

    def greet(self, text: str | None = None) -> Message:
        """Build the opening bot message."""  # noqa: DOC201
        return Message(text=text or GREETING, sender=Sender.BOT)

    def respond(
        self, state: ConversationState, utterance: str, session_id: str
    ) -> TurnResult:
        """Process one user utterance.

        Args:
            state: Current conversation state.
            utterance: Raw user text, kept verbatim in history and suggestions.
            session_id: Session token attached to any suggestion.

        Returns:
            TurnResult with the bot reply, the next state and an optional
            suggestion to persist.

        Raises:
            InvalidInputError: If the utterance or the session id is empty.
        """
        if not utterance.strip():
            msg = "Cannot respond to an empty message"
            raise InvalidInputError(msg)
        if not session_id:
            msg = "A session id is required to respond"
            raise InvalidInputError(msg)

        user_message = Message(text=utterance, sender=Sender.USER)
        flow = self.knowledge_base.flow_for(state.mode)

        if flow is not None:
            reply, mode = self._continue_choice(flow, utterance)
            return self._finish(state, user_message, reply, mode)

        if state.mode is PendingMode.AWAITING_SUGGESTION_CONFIRMATION:
            return self._confirm_suggestion(state, user_message, session_id)

        return self._answer(state, user_message)

    def submission_failed(self, result: TurnResult) -> TurnResult:
        """Replace a confirmed suggestion's thank-you with an error reply.

        Returns:
            TurnResult in IDLE whose last history message reports the failure.
        """
        reply = Message(text=SUGGESTION_FAILED, sender=Sender.BOT)
        state = replace(
            result.state,
            mode=PendingMode.IDLE,
            pending_payload=None,
            history=(*result.state.history[:-1], reply),
        )
        return TurnResult(reply=reply, state=state)

    @staticmethod
    def _continue_choice(
        flow: ChoiceFlow, utterance: str
    ) -> tuple[Message, PendingMode]:
        selected = resolve_choice(utterance, flow.options)
        if selected is None:
            logger.info("Unresolved %s reply: %s", flow.mode.value, utterance)
            reply = Message(
                text=flow.reprompt, sender=Sender.BOT, options=flow.option_names
            )
            return reply, flow.mode

        logger.info("Resolved %s to %s", flow.mode.value, selected.name)
        return Message(text=selected.description, sender=Sender.BOT), PendingMode.IDLE

    def _confirm_suggestion(
        self, state: ConversationState, user_message: Message, session_id: str
    ) -> TurnResult:
        answer = user_message.text.strip().lower()
        pending = state.pending_payload or ""

        if answer in YES_ANSWERS:
            suggestion = SuggestedQuestion(question=pending, session_id=session_id)
            reply = Message(text=SUGGESTION_THANKS, sender=Sender.BOT)
            result = self._finish(state, user_message, reply, PendingMode.IDLE)
            return replace(result, suggestion=suggestion)

        if answer in NO_ANSWERS:
            reply = Message(text=SUGGESTION_DECLINED, sender=Sender.BOT)
            return self._finish(state, user_message, reply, PendingMode.IDLE)

        reply = Message(
            text=SUGGESTION_REPROMPT,
            sender=Sender.BOT,
            options=CONFIRMATION_OPTIONS,
            confirmation=True,
        )
        return self._finish(
            state,
            user_message,
            reply,
            PendingMode.AWAITING_SUGGESTION_CONFIRMATION,
            pending_payload=pending,
        )

    def _answer(self, state: ConversationState, user_message: Message) -> TurnResult:
        utterance = user_message.text

        if LOST_CARD_PATTERN.search(utterance):
            reply = Message(text=LOST_CARD_ANSWER, sender=Sender.BOT)
            return self._finish(state, user_message, reply, PendingMode.IDLE)

        flow = classify_intent(utterance, self.knowledge_base.choice_flows())
        if flow is not None:
            logger.info("Routing to %s", flow.mode.value)
            reply = Message(
                text=flow.prompt, sender=Sender.BOT, options=flow.option_names
            )
            return self._finish(state, user_message, reply, flow.mode)

        match = find_best_match(utterance, self.knowledge_base.entries, self.threshold)
        if match is not None:
            reply = Message(text=match.answer, sender=Sender.BOT)
            return self._finish(state, user_message, reply, PendingMode.IDLE)

        logger.info("No answer found, offering suggestion for: %s", utterance)
        reply = Message(
            text=SUGGESTION_PROMPT.format(question=utterance),
            sender=Sender.BOT,
            options=CONFIRMATION_OPTIONS,
            confirmation=True,
        )
        return self._finish(
            state,
            user_message,
            reply,
            PendingMode.AWAITING_SUGGESTION_CONFIRMATION,
            pending_payload=utterance,
        )

    @staticmethod
    def _finish(
        state: ConversationState,
        user_message: Message,
        reply: Message,
        mode: PendingMode,
        pending_payload: str | None = None,
    ) -> TurnResult:
        new_state = ConversationState(
            mode=mode,
            pending_payload=pending_payload,
            history=(*state.history, user_message, reply),
        )
        return TurnResult(reply=reply, state=new_state)


class SuggestionSink(Protocol):
    """Destination for suggested questions."""

    def submit_suggestion(self, suggestion: SuggestedQuestion) -> None: ...


class ConversationManager:
    """Manages a single chat session on top of a ConversationEngine."""

    def __init__(
        self,
        engine: ConversationEngine,
        suggestion_sink: SuggestionSink,
        session_id: str | None = None,
        greeting: str | None = None,
    ) -> None:
        """Initialize ConversationManager.

        Args:
            engine: Conversation engine that produces replies.
            suggestion_sink: Store that persists confirmed suggestions.
            session_id: Session token. If None, a new one is generated.
            greeting: Opening bot message. If None, uses the default greeting.
        """
        self.engine = engine
        self.suggestion_sink = suggestion_sink
        self.session_id = session_id or new_session_id()
        self.state: ConversationState
        self.reset(greeting)

    @property
    def history(self) -> tuple[Message, ...]:
        return self.state.history

    @property
    def mode(self) -> PendingMode:
        return self.state.mode

    @property
    def pending_question(self) -> str | None:
        return self.state.pending_payload

    def send_message(self, text: str) -> Message:
        """Process a user message and persist any confirmed suggestion.

        Returns:
            The bot reply.

        Raises:
            InvalidInputError: If ``text`` is empty or whitespace.
        """
        if not text.strip():
            msg = "Message must not be empty"
            raise InvalidInputError(msg)

        result = self.engine.respond(self.state, text, session_id=self.session_id)

        if result.suggestion is not None:
            try:
                self.suggestion_sink.submit_suggestion(result.suggestion)
            except PersistenceError:
                logger.exception("Failed to submit suggestion")
                result = self.engine.submission_failed(result)
            else:
                logger.info(
                    "Suggestion submitted for session %s: %s",
                    self.session_id,
                    result.suggestion.question,
                )

        self.state = result.state
        return result.reply

    def ask_popular_question(self, question: str) -> Message:
        """Send a quick question, cancelling any pending sub-dialogue.

        Returns:
            The bot reply.
        """
        if self.state.mode is not PendingMode.IDLE:
            logger.info("Cancelling %s for quick question", self.state.mode.value)
            self.state = replace(
                self.state, mode=PendingMode.IDLE, pending_payload=None
            )
        return self.send_message(question)

    def reset(self, greeting: str | None = None) -> None:
        """Clear the conversation and start again with a greeting."""
        self.state = ConversationState(history=(self.engine.greet(greeting),))
        logger.info("Conversation history cleared.")
