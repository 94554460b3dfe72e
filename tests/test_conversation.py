"""Tests for ConversationEngine and ConversationManager."""

import re

import pytest

from askebl import (
    ConversationEngine,
    ConversationManager,
    KnowledgeEntry,
    PendingMode,
    Sender,
    SuggestedQuestion,
)
from askebl.conversation import (
    CONFIRMATION_OPTIONS,
    GREETING,
    LOST_CARD_ANSWER,
    SUGGESTION_DECLINED,
    SUGGESTION_FAILED,
    SUGGESTION_PROMPT,
    SUGGESTION_REPROMPT,
    SUGGESTION_THANKS,
    new_session_id,
)
from askebl.errors import InvalidInputError, PersistenceError
from askebl.knowledge import (
    ACCOUNT_TYPES,
    ATM_LOCATIONS,
    BRANCH_LOCATIONS,
    CARD_TYPES,
    LOAN_TYPES,
)
from askebl.matching import find_best_match

UNKNOWN_QUESTION = "xyzzy plugh"
SESSION_ID = "session_1700000000000_engine123"
CARD_NAMES = tuple(item.name for item in CARD_TYPES)


def test_card_selection_flow(engine, idle_state):
    first = engine.respond(idle_state, "What cards do you offer?", SESSION_ID)

    assert first.state.mode is PendingMode.AWAITING_CARD_SELECTION
    assert first.reply.text.startswith("I'd be happy to help you with information")
    assert first.reply.options == CARD_NAMES

    second = engine.respond(first.state, "Debit Card", SESSION_ID)

    assert second.reply.text == CARD_TYPES[1].description
    assert second.reply.options == ()
    assert second.state.mode is PendingMode.IDLE
    assert second.state.pending_payload is None
    assert len(second.state.history) == 4


def test_card_services_question_opens_card_menu(engine, idle_state):
    first = engine.respond(idle_state, "What are your card services?", SESSION_ID)

    assert first.state.mode is PendingMode.AWAITING_CARD_SELECTION
    assert first.reply.options == CARD_NAMES

    second = engine.respond(first.state, "Credit Card", SESSION_ID)

    assert second.reply.text == CARD_TYPES[0].description
    assert second.state.mode is PendingMode.IDLE


def test_intent_takes_priority_over_strong_faq_match(
    knowledge_base_factory, sample_faqs, idle_state
):
    card_faq = KnowledgeEntry(
        question="What card services do you offer?",
        answer="We offer card replacement, PIN reset and limit changes.",
        keywords=("card", "services"),
    )
    faqs = (*sample_faqs, card_faq)
    engine = ConversationEngine(knowledge_base_factory(faqs=faqs), threshold=3)
    question = "What are your card services?"
    assert find_best_match(question, faqs, threshold=3) is card_faq

    result = engine.respond(idle_state, question, SESSION_ID)

    assert result.state.mode is PendingMode.AWAITING_CARD_SELECTION
    assert result.reply.text == engine.knowledge_base.flow_for(
        PendingMode.AWAITING_CARD_SELECTION
    ).prompt
    assert card_faq.answer not in result.reply.text


def test_unknown_question_offers_suggestion(engine, idle_state):
    result = engine.respond(idle_state, UNKNOWN_QUESTION, SESSION_ID)

    assert result.reply.text == SUGGESTION_PROMPT.format(question=UNKNOWN_QUESTION)
    assert f'"{UNKNOWN_QUESTION}"' in result.reply.text
    assert result.reply.options == CONFIRMATION_OPTIONS
    assert result.reply.confirmation is True
    assert result.state.mode is PendingMode.AWAITING_SUGGESTION_CONFIRMATION
    assert result.state.pending_payload == UNKNOWN_QUESTION
    assert result.suggestion is None


def test_confirmed_suggestion_is_returned(engine, idle_state):
    pending = engine.respond(idle_state, UNKNOWN_QUESTION, SESSION_ID)

    result = engine.respond(pending.state, "Yes", SESSION_ID)

    assert result.reply.text == SUGGESTION_THANKS
    assert result.state.mode is PendingMode.IDLE
    assert result.state.pending_payload is None
    assert isinstance(result.suggestion, SuggestedQuestion)
    assert result.suggestion.question == UNKNOWN_QUESTION
    assert result.suggestion.session_id == SESSION_ID


def test_faq_question_is_answered(engine, idle_state, sample_faqs):
    result = engine.respond(idle_state, "How do I open an account?", SESSION_ID)

    assert result.reply.text == sample_faqs[0].answer
    assert result.state.mode is PendingMode.IDLE
    assert result.suggestion is None


def test_popular_question_is_answered(engine, idle_state, sample_popular_questions):
    result = engine.respond(idle_state, "How do I contact customer service?", SESSION_ID)

    assert result.reply.text == sample_popular_questions[0].answer


def test_invalid_selection_reprompts_without_changing_mode(engine, state_factory):
    state = state_factory(PendingMode.AWAITING_CARD_SELECTION)

    first = engine.respond(state, "mortgage", SESSION_ID)
    second = engine.respond(first.state, "mortgage", SESSION_ID)

    expected = (
        "Please select one of the card types I mentioned: Credit Card, Debit Card, "
        "Corporate Card, Prepaid Card, or Islamic Credit Card."
    )
    assert first.reply.text == expected
    assert second.reply.text == expected
    assert first.reply.options == CARD_NAMES
    assert first.state.mode is PendingMode.AWAITING_CARD_SELECTION
    assert second.state.mode is PendingMode.AWAITING_CARD_SELECTION


def test_selection_mode_does_not_reroute_to_other_intents(engine, state_factory):
    state = state_factory(PendingMode.AWAITING_CARD_SELECTION)

    result = engine.respond(state, "What loans do you have?", SESSION_ID)

    assert result.state.mode is PendingMode.AWAITING_CARD_SELECTION
    assert result.reply.text.startswith("Please select one of the card types")


@pytest.mark.parametrize(
    ("question", "mode", "selection", "expected"),
    [
        (
            "What cards do you offer?",
            PendingMode.AWAITING_CARD_SELECTION,
            "corporate card",
            CARD_TYPES[2],
        ),
        (
            "What types of accounts do you have?",
            PendingMode.AWAITING_ACCOUNT_SELECTION,
            "Student Account",
            ACCOUNT_TYPES[3],
        ),
        (
            "Tell me about your loans",
            PendingMode.AWAITING_LOAN_SELECTION,
            "Home Loan",
            LOAN_TYPES[1],
        ),
        (
            "Where can I find an ATM?",
            PendingMode.AWAITING_ATM_LOCATION,
            "Sylhet",
            ATM_LOCATIONS[2],
        ),
        (
            "Where is your nearest branch?",
            PendingMode.AWAITING_BRANCH_LOCATION,
            "khulna",
            BRANCH_LOCATIONS[4],
        ),
    ],
)
def test_guided_flows(engine, idle_state, question, mode, selection, expected):
    prompt = engine.respond(idle_state, question, SESSION_ID)

    assert prompt.state.mode is mode
    assert expected.name in prompt.reply.options

    answer = engine.respond(prompt.state, selection, SESSION_ID)

    assert answer.reply.text == expected.description
    assert answer.state.mode is PendingMode.IDLE


@pytest.mark.parametrize(
    "mode",
    [
        PendingMode.AWAITING_ATM_LOCATION,
        PendingMode.AWAITING_BRANCH_LOCATION,
    ],
)
def test_location_reprompt_lists_cities(engine, state_factory, mode):
    result = engine.respond(state_factory(mode), "Barisal", SESSION_ID)

    assert result.reply.text == (
        "Please select one of the cities I mentioned: Dhaka, Chittagong, Sylhet, "
        "Rajshahi, or Khulna."
    )
    assert result.state.mode is mode


@pytest.mark.parametrize("answer", ["yes", "YES", " Y ", "y"])
def test_suggestion_accepts_yes_variants(engine, state_factory, answer):
    state = state_factory(PendingMode.AWAITING_SUGGESTION_CONFIRMATION, "question")

    result = engine.respond(state, answer, SESSION_ID)

    assert result.reply.text == SUGGESTION_THANKS
    assert result.suggestion.question == "question"


@pytest.mark.parametrize("answer", ["no", "No", " n "])
def test_suggestion_declined(engine, state_factory, answer):
    state = state_factory(PendingMode.AWAITING_SUGGESTION_CONFIRMATION, "question")

    result = engine.respond(state, answer, SESSION_ID)

    assert result.reply.text == SUGGESTION_DECLINED
    assert result.state.mode is PendingMode.IDLE
    assert result.state.pending_payload is None
    assert result.suggestion is None


@pytest.mark.parametrize("answer", ["maybe", "yes please", "What are the banking hours?"])
def test_suggestion_other_reply_reprompts(engine, state_factory, answer):
    state = state_factory(PendingMode.AWAITING_SUGGESTION_CONFIRMATION, "question")

    result = engine.respond(state, answer, SESSION_ID)

    assert result.reply.text == SUGGESTION_REPROMPT
    assert result.reply.confirmation is True
    assert result.reply.options == CONFIRMATION_OPTIONS
    assert result.state.mode is PendingMode.AWAITING_SUGGESTION_CONFIRMATION
    assert result.state.pending_payload == "question"
    assert result.suggestion is None


@pytest.mark.parametrize(
    "question",
    ["I lost my card", "My credit card was stolen!", "CARD MISPLACED"],
)
def test_lost_card_shortcut(engine, idle_state, question):
    result = engine.respond(idle_state, question, SESSION_ID)

    assert result.reply.text == LOST_CARD_ANSWER
    assert result.state.mode is PendingMode.IDLE


def test_lost_without_card_is_not_shortcut(engine, idle_state, sample_faqs):
    result = engine.respond(idle_state, "I lost my password", SESSION_ID)

    assert result.reply.text == sample_faqs[2].answer


def test_empty_knowledge_base_always_offers_suggestion(
    knowledge_base_factory, idle_state
):
    engine = ConversationEngine(
        knowledge_base_factory(faqs=(), popular_questions=()), threshold=3
    )

    result = engine.respond(idle_state, "How do I open an account?", SESSION_ID)

    assert result.state.mode is PendingMode.AWAITING_SUGGESTION_CONFIRMATION
    assert result.state.pending_payload == "How do I open an account?"


def test_threshold_controls_matching(knowledge_base, idle_state):
    strict = ConversationEngine(knowledge_base, threshold=100)

    result = strict.respond(idle_state, "How do I open an account?", SESSION_ID)

    assert result.state.mode is PendingMode.AWAITING_SUGGESTION_CONFIRMATION


@pytest.mark.parametrize("utterance", ["", "   ", "\n\t"])
def test_blank_utterance_rejected(engine, idle_state, utterance):
    with pytest.raises(InvalidInputError, match="empty message"):
        engine.respond(idle_state, utterance, SESSION_ID)


def test_session_id_is_required(engine, idle_state):
    with pytest.raises(TypeError):
        engine.respond(idle_state, "What are the banking hours?")

    with pytest.raises(InvalidInputError, match="session id is required"):
        engine.respond(idle_state, "What are the banking hours?", "")


def test_history_records_both_sides_and_keeps_utterance_verbatim(engine, idle_state):
    result = engine.respond(idle_state, "  What are the banking hours?  ", SESSION_ID)

    user_message, bot_message = result.state.history
    assert user_message.sender is Sender.USER
    assert user_message.text == "  What are the banking hours?  "
    assert bot_message.sender is Sender.BOT
    assert bot_message is result.reply
    assert user_message.id != bot_message.id


def test_respond_does_not_mutate_input_state(engine, idle_state):
    engine.respond(idle_state, UNKNOWN_QUESTION, SESSION_ID)

    assert idle_state.mode is PendingMode.IDLE
    assert idle_state.history == ()


def test_submission_failed_replaces_thanks(engine, idle_state):
    pending = engine.respond(idle_state, UNKNOWN_QUESTION, SESSION_ID)
    accepted = engine.respond(pending.state, "yes", SESSION_ID)

    failed = engine.submission_failed(accepted)

    assert failed.reply.text == SUGGESTION_FAILED
    assert failed.suggestion is None
    assert failed.state.mode is PendingMode.IDLE
    assert len(failed.state.history) == len(accepted.state.history)
    assert failed.state.history[-1] is failed.reply
    assert failed.state.history[-2].text == "yes"


def test_greet_default_and_custom(engine):
    assert engine.greet().text == GREETING
    assert engine.greet("Welcome!").text == "Welcome!"
    assert engine.greet().sender is Sender.BOT


def test_new_session_id_format():
    first = new_session_id()

    assert re.fullmatch(r"session_\d+_[a-z0-9]{9}", first)
    assert first != new_session_id()


def test_manager_starts_with_greeting(conversation_manager):
    assert len(conversation_manager.history) == 1
    assert conversation_manager.history[0].text == GREETING
    assert conversation_manager.mode is PendingMode.IDLE
    assert conversation_manager.session_id == "session_1700000000000_abc123xyz"


def test_manager_generates_session_id(engine, mock_suggestion_sink):
    manager = ConversationManager(
        engine, suggestion_sink=mock_suggestion_sink, greeting="Welcome!"
    )

    assert manager.session_id.startswith("session_")
    assert manager.history[0].text == "Welcome!"


def test_manager_submits_confirmed_suggestion(
    conversation_manager, mock_suggestion_sink
):
    conversation_manager.send_message(UNKNOWN_QUESTION)
    assert conversation_manager.pending_question == UNKNOWN_QUESTION

    reply = conversation_manager.send_message("Yes")

    assert reply.text == SUGGESTION_THANKS
    mock_suggestion_sink.submit_suggestion.assert_called_once()
    suggestion = mock_suggestion_sink.submit_suggestion.call_args.args[0]
    assert suggestion.question == UNKNOWN_QUESTION
    assert suggestion.session_id == conversation_manager.session_id
    assert conversation_manager.mode is PendingMode.IDLE


def test_manager_reports_persistence_failure(
    conversation_manager, mock_suggestion_sink
):
    mock_suggestion_sink.submit_suggestion.side_effect = PersistenceError("disk full")
    conversation_manager.send_message(UNKNOWN_QUESTION)

    reply = conversation_manager.send_message("yes")

    assert reply.text == SUGGESTION_FAILED
    assert conversation_manager.history[-1].text == SUGGESTION_FAILED
    assert conversation_manager.mode is PendingMode.IDLE
    assert conversation_manager.pending_question is None


def test_manager_does_not_submit_declined_suggestion(
    conversation_manager, mock_suggestion_sink
):
    conversation_manager.send_message(UNKNOWN_QUESTION)
    conversation_manager.send_message("no")

    mock_suggestion_sink.submit_suggestion.assert_not_called()


def test_manager_rejects_blank_message(conversation_manager):
    with pytest.raises(InvalidInputError, match="must not be empty"):
        conversation_manager.send_message("   ")

    assert len(conversation_manager.history) == 1


@pytest.mark.parametrize(
    ("setup_message", "pending_mode"),
    [
        ("What cards do you offer?", PendingMode.AWAITING_CARD_SELECTION),
        (UNKNOWN_QUESTION, PendingMode.AWAITING_SUGGESTION_CONFIRMATION),
    ],
)
def test_popular_question_cancels_pending_mode(
    conversation_manager,
    mock_suggestion_sink,
    sample_popular_questions,
    setup_message,
    pending_mode,
):
    conversation_manager.send_message(setup_message)
    assert conversation_manager.mode is pending_mode

    reply = conversation_manager.ask_popular_question(
        sample_popular_questions[0].question
    )

    assert reply.text == sample_popular_questions[0].answer
    assert conversation_manager.mode is PendingMode.IDLE
    assert conversation_manager.pending_question is None
    mock_suggestion_sink.submit_suggestion.assert_not_called()


def test_manager_reset(conversation_manager):
    conversation_manager.send_message("What cards do you offer?")

    conversation_manager.reset("How can I assist you today?")

    assert [m.text for m in conversation_manager.history] == [
        "How can I assist you today?"
    ]
    assert conversation_manager.mode is PendingMode.IDLE
