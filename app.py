"""Banking dashboard and chat assistant using Streamlit."""

import time

import streamlit as st

from askebl import (
    BankingStore,
    ConversationEngine,
    ConversationManager,
    PendingMode,
    Sender,
    authenticate,
    load_knowledge_base,
)
from askebl.calculators import (
    EXCHANGE_RATES,
    LOAN_PRODUCTS,
    RATE_SHEET,
    amortization_schedule,
    calculate_emi,
    convert_to_bdt,
    get_loan_product,
)
from askebl.config import config
from askebl.conversation import SUGGESTION_THANKS
from askebl.errors import AuthenticationError
from askebl.models import UserAccount

WELCOME_MESSAGE = "Welcome! How can I assist you today?"
HELP_MESSAGE = "How can I assist you today?"

config.setup_logging()
logger = config.get_logger(__name__)


def format_currency(amount: float) -> str:
    """Format an amount in Bangladeshi taka."""  # noqa: DOC201
    return f"৳{amount:,.2f}"


@st.cache_resource
def get_store() -> BankingStore:
    """Open the banking store once per server process."""  # noqa: DOC201
    store = BankingStore(config.DATABASE_PATH)
    store.seed_demo_data(config.DEMO_PASSWORD)
    return store


class SessionState:
    """Centralized session state management."""

    @staticmethod
    def initialize() -> None:
        """Initialize all session state variables."""
        defaults = {
            "user": None,
            "conversation_manager": None,
        }

        for key, default_value in defaults.items():
            if key not in st.session_state:
                st.session_state[key] = default_value

    @staticmethod
    def start_session(user: UserAccount) -> None:
        """Store the logged-in user and open a fresh chat."""
        store = get_store()
        if config.KNOWLEDGE_BASE_PATH is not None:
            knowledge_base = load_knowledge_base(config.KNOWLEDGE_BASE_PATH)
        else:
            knowledge_base = store.load_knowledge_base()

        st.session_state.user = user
        st.session_state.conversation_manager = ConversationManager(
            ConversationEngine(knowledge_base),
            suggestion_sink=store,
            greeting=WELCOME_MESSAGE,
        )
        logger.info(
            "Started chat session %s for user %s",
            st.session_state.conversation_manager.session_id,
            user.user_id,
        )

    @staticmethod
    def end_session() -> None:
        """Log out and drop the chat."""
        st.session_state.user = None
        st.session_state.conversation_manager = None

    @staticmethod
    def is_logged_in() -> bool:
        """Check if a user is logged in.

        Returns:
            bool: True if a user and a conversation manager are present.
        """
        return (
            st.session_state.get("user") is not None
            and st.session_state.get("conversation_manager") is not None
        )


def render_login() -> None:
    """Render the login form."""
    st.title("Login to AskEBL")
    st.caption("Eastern Bank PLC Banking Assistant")

    with st.form("login"):
        user_id = st.text_input(
            "User ID (5 digits)",
            max_chars=5,
            placeholder="Enter your 5-digit user ID",
        )
        password = st.text_input(
            "Password", type="password", placeholder="Enter your password"
        )
        submitted = st.form_submit_button("Login", use_container_width=True)

    if submitted:
        try:
            user = authenticate(get_store(), user_id, password)
        except AuthenticationError as e:
            st.error(str(e))
            return
        SessionState.start_session(user)
        st.rerun()

    st.info("Demo user IDs: 12345, 67890, 11111, 22222, 33333, 55555")


def render_sidebar() -> None:
    """Render balances, transactions, loans and rates for the logged-in user."""
    store = get_store()
    user = st.session_state.user

    with st.sidebar:
        st.header(f"Welcome, {user.full_name}")
        st.caption(f"User ID: {user.user_id}")

        profile = store.get_profile(user.user_id)
        with st.expander("Account Balance", expanded=True):
            if profile is None:
                st.write("Information not available")
            else:
                st.metric("Current Account", format_currency(profile.balance))
                st.metric("Savings Account", format_currency(profile.savings_balance))
                st.write(f"**Account Holder:** {profile.full_name}")
                st.write(f"**Account Number:** {profile.account_number}")
                st.write(
                    f"**Total Balance:** {format_currency(profile.total_balance)}"
                )

        with st.expander("Recent Transactions"):
            for transaction in store.get_transactions(user.user_id):
                sign = "+" if transaction.amount > 0 else ""
                st.write(
                    f"**{transaction.transaction_type}** - {transaction.description}"
                )
                st.caption(
                    f"{transaction.transaction_date[:10]} | "
                    f"{sign}{format_currency(transaction.amount)}"
                    + (
                        f" | Balance: {format_currency(transaction.balance_after)}"
                        if transaction.balance_after is not None
                        else ""
                    )
                )

        with st.expander("My Loans"):
            loans = store.get_loans(user.user_id)
            if not loans:
                st.write("No active loans.")
            for loan in loans:
                st.write(f"**{loan.loan_type}** ({loan.interest_rate}% APR)")
                st.caption(
                    f"Remaining: {format_currency(loan.remaining_amount)} | "
                    f"Monthly: {format_currency(loan.monthly_payment)}"
                )
                if loan.next_payment_date:
                    st.caption(f"Next payment: {loan.next_payment_date}")
                st.progress(loan.progress / 100, text=f"{loan.progress}% repaid")

        with st.expander("Interest Rates"):
            for section, rates in RATE_SHEET.items():
                st.write(f"**{section}**")
                for product, rate in rates.items():
                    st.caption(f"{product}: {rate}")
            st.caption(
                "* Rates are subject to change and may vary based on loan "
                "amount, tenure, and other factors."
            )

        st.divider()
        st.subheader("Need Help?")
        st.write("Use the chat to ask any banking questions!")
        if st.button("Start Chat", use_container_width=True):
            st.session_state.conversation_manager.reset(HELP_MESSAGE)
            st.rerun()
        if st.button("Logout", use_container_width=True):
            SessionState.end_session()
            st.rerun()


def send_to_bot(text: str, *, quick: bool = False) -> None:
    """Forward a message to the conversation manager."""
    if not text.strip():
        return

    manager: ConversationManager = st.session_state.conversation_manager
    with st.spinner("Typing..."):
        if config.RESPONSE_DELAY_SECONDS > 0:
            time.sleep(config.RESPONSE_DELAY_SECONDS)
        if quick:
            manager.ask_popular_question(text)
        else:
            manager.send_message(text)

    last_reply = manager.history[-1]
    if last_reply.text == SUGGESTION_THANKS:
        st.toast("Your suggestion has been sent to our admin team for review.")


def render_chat_interface() -> None:
    """Render popular questions, the message history and the input box."""
    manager: ConversationManager = st.session_state.conversation_manager

    st.subheader("AskEBL - Your Banking Assistant")
    st.caption("Get instant help with all your banking needs")

    popular = get_store().get_popular_questions(limit=config.POPULAR_QUESTION_LIMIT)
    if popular:
        st.write("**Popular Questions:**")
        columns = st.columns(3)
        for i, entry in enumerate(popular):
            if columns[i % 3].button(
                entry.question, key=f"popular_{i}", use_container_width=True
            ):
                send_to_bot(entry.question, quick=True)
                st.rerun()

    last_index = len(manager.history) - 1
    for i, message in enumerate(manager.history):
        role = "user" if message.sender is Sender.USER else "assistant"
        with st.chat_message(role):
            st.markdown(message.text.replace("\n", "  \n"))
            st.caption(message.timestamp.astimezone().strftime("%H:%M"))
            # Only the latest bot message keeps its buttons active.
            if i == last_index and message.options:
                render_options(message.options, message.id)

    placeholder = (
        "Type 'Yes' or 'No' to respond..."
        if manager.mode is PendingMode.AWAITING_SUGGESTION_CONFIRMATION
        else "Ask me about loans, accounts, credit cards, or any banking service..."
    )
    if prompt := st.chat_input(placeholder):
        send_to_bot(prompt)
        st.rerun()


def render_options(options: tuple[str, ...], message_id: str) -> None:
    """Render selectable options for the latest bot message."""
    columns = st.columns(min(len(options), 3))
    for i, option in enumerate(options):
        if columns[i % len(columns)].button(
            option, key=f"option_{message_id}_{i}", use_container_width=True
        ):
            send_to_bot(option)
            st.rerun()


def build_schedule_rows(
    principal: float, annual_rate: float, tenure_years: int
) -> list[dict[str, float]]:
    """Turn the amortization schedule into table rows for display."""  # noqa: DOC201
    schedule = amortization_schedule(principal, annual_rate, tenure_years)
    return [
        {
            "Month": int(month),
            "EMI": round(float(payment), 2),
            "Principal": round(float(principal_part), 2),
            "Interest": round(float(interest), 2),
            "Balance": round(float(balance), 2),
        }
        for month, payment, principal_part, interest, balance in schedule
    ]


def render_emi_calculator() -> None:
    """Render the EMI calculator."""
    st.subheader("EMI Calculator")
    product_key = st.selectbox(
        "Loan Type",
        [product.key for product in LOAN_PRODUCTS],
        format_func=lambda key: (
            f"{get_loan_product(key).label} ({get_loan_product(key).rate_range})"
        ),
    )
    product = get_loan_product(product_key)
    principal = st.number_input("Loan Amount (BDT)", min_value=0.0, step=10_000.0)
    rate = st.number_input(
        "Interest Rate (% per annum)",
        min_value=0.0,
        step=0.1,
        value=product.default_rate,
    )
    tenure = st.number_input("Tenure (years)", min_value=1, step=1, value=5)

    if st.button("Calculate EMI", use_container_width=True):
        try:
            result = calculate_emi(principal, rate, int(tenure))
        except ValueError as e:
            st.error(str(e))
            return
        col1, col2, col3 = st.columns(3)
        col1.metric("Monthly EMI", format_currency(result.emi))
        col2.metric("Total Amount", format_currency(result.total_amount))
        col3.metric("Total Interest", format_currency(result.total_interest))

        st.write(f"**Repayment schedule: {product.label}**")
        st.dataframe(
            build_schedule_rows(principal, rate, int(tenure)),
            hide_index=True,
            use_container_width=True,
        )


def render_currency_converter() -> None:
    """Render the currency converter."""
    st.subheader("Currency Converter")
    amount = st.number_input("Amount", min_value=0.0, step=0.01)
    currency = st.selectbox(
        "From",
        list(EXCHANGE_RATES),
        format_func=lambda code: f"{code} - {EXCHANGE_RATES[code][1]}",
    )

    if st.button("Convert to BDT", use_container_width=True):
        try:
            converted = convert_to_bdt(amount, currency)
        except ValueError as e:
            st.error(str(e))
            return
        st.metric(f"{amount:,.2f} {currency} =", format_currency(converted))
        st.caption(f"1 {currency} = ৳{EXCHANGE_RATES[currency][0]} (indicative rate)")


def main() -> None:
    """Main entry point for the Streamlit web application.

    Sets up the page configuration, initializes session state, and renders
    either the login form or the dashboard with chat and tools.
    """
    st.set_page_config(
        page_title="AskEBL - Banking Assistant",
        layout="wide",
    )

    SessionState.initialize()

    if not SessionState.is_logged_in():
        render_login()
        return

    render_sidebar()

    st.title("AskEBL - Banking Assistant")
    st.caption("Banking Dashboard")

    chat_tab, tools_tab = st.tabs(["Chat", "Tools"])
    with chat_tab:
        render_chat_interface()
    with tools_tab:
        col1, col2 = st.columns(2)
        with col1:
            render_emi_calculator()
        with col2:
            render_currency_converter()


if __name__ == "__main__":
    main()
