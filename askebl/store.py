"""SQLite-backed storage for banking records, FAQs and suggested questions."""

from __future__ import annotations

import datetime
import hashlib
import json
import sqlite3
from collections.abc import Sequence
from pathlib import Path

from .config import config
from .errors import PersistenceError
from .knowledge import DEFAULT_FAQS, DEFAULT_POPULAR_QUESTIONS, KnowledgeBase
from .models import (
    KnowledgeEntry,
    Loan,
    Profile,
    SuggestedQuestion,
    SuggestionRecord,
    Transaction,
    UserAccount,
)
from .seed import DEMO_LOANS, DEMO_PROFILES, DEMO_TRANSACTION_TEMPLATES, DEMO_USERS

logger = config.get_logger(__name__)


def hash_password(password: str) -> str:
    """Return the stored digest for a password."""  # noqa: DOC201
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


class BankingStore:
    """Data access for the dashboard and chat, backed by a single SQLite file."""

    def __init__(self, db_path: Path | None = None) -> None:
        """Initialize the store and ensure the schema exists.

        Args:
            db_path: Path to the SQLite database file. If None, uses
                config.DATABASE_PATH.
        """
        self.db_path = Path(db_path if db_path is not None else config.DATABASE_PATH)
        self.db_path.parent.mkdir(exist_ok=True, parents=True)
        self._create_tables()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        return conn

    def _create_tables(self) -> None:
        """Create tables and indexes if they don't exist."""
        with self._connect() as conn:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS users (
                    user_id TEXT PRIMARY KEY,
                    password_hash TEXT NOT NULL,
                    full_name TEXT NOT NULL
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS profiles (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id TEXT NOT NULL UNIQUE,
                    full_name TEXT,
                    account_number TEXT,
                    balance REAL NOT NULL DEFAULT 0,
                    savings_balance REAL NOT NULL DEFAULT 0,
                    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
                    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP,
                    FOREIGN KEY (user_id) REFERENCES users (user_id)
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS loans (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id TEXT NOT NULL,
                    loan_type TEXT NOT NULL,
                    total_amount REAL NOT NULL,
                    paid_amount REAL NOT NULL DEFAULT 0,
                    remaining_amount REAL NOT NULL,
                    interest_rate REAL NOT NULL,
                    monthly_payment REAL NOT NULL,
                    next_payment_date TEXT,
                    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
                    FOREIGN KEY (user_id) REFERENCES users (user_id)
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS transactions (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id TEXT NOT NULL,
                    transaction_type TEXT NOT NULL,
                    amount REAL NOT NULL,
                    description TEXT,
                    balance_after REAL,
                    transaction_date DATETIME DEFAULT CURRENT_TIMESTAMP,
                    FOREIGN KEY (user_id) REFERENCES users (user_id)
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS faqs (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    question TEXT NOT NULL,
                    answer TEXT NOT NULL,
                    keywords TEXT,
                    category TEXT,
                    created_at DATETIME DEFAULT CURRENT_TIMESTAMP
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS popular_questions (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    question TEXT NOT NULL,
                    answer TEXT NOT NULL,
                    keywords TEXT,
                    category TEXT,
                    display_order INTEGER NOT NULL DEFAULT 0,
                    is_active INTEGER NOT NULL DEFAULT 1
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS suggested_faqs (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    question TEXT NOT NULL,
                    suggested_by_session TEXT NOT NULL,
                    status TEXT NOT NULL DEFAULT 'pending' CHECK(
                        status IN ('pending','approved','rejected')
                    ),
                    created_at DATETIME DEFAULT CURRENT_TIMESTAMP
                )
            """)

            cursor.execute(
                "CREATE INDEX IF NOT EXISTS idx_loans_user ON loans(user_id)",
            )
            cursor.execute(
                (
                    "CREATE INDEX IF NOT EXISTS idx_transactions_user_date "
                    "ON transactions(user_id, transaction_date DESC)"
                ),
            )
            conn.commit()

    def seed_demo_data(self, password: str | None = None) -> bool:
        """Insert demo users, balances, loans, transactions and FAQs.

        Seeding only happens on an empty store.

        Args:
            password: Password given to every demo user. If None, uses
                config.DEMO_PASSWORD.

        Returns:
            True if data was inserted, False if the store already had users.
        """
        password_hash = hash_password(password or config.DEMO_PASSWORD)
        now = datetime.datetime.now(tz=datetime.UTC)

        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT COUNT(*) FROM users")
            if cursor.fetchone()[0]:
                logger.info("Store already seeded, skipping demo data")
                return False

            for user_id, full_name in DEMO_USERS:
                cursor.execute(
                    "INSERT INTO users (user_id, password_hash, full_name) "
                    "VALUES (?, ?, ?)",
                    (user_id, password_hash, full_name),
                )
                account_number, balance, savings = DEMO_PROFILES[user_id]
                cursor.execute(
                    """
                    INSERT INTO profiles (
                        user_id, full_name, account_number, balance, savings_balance
                    )
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (user_id, full_name, account_number, balance, savings),
                )

                running_balance = balance
                for kind, amount, description, days_ago in DEMO_TRANSACTION_TEMPLATES:
                    posted = now - datetime.timedelta(days=days_ago)
                    cursor.execute(
                        """
                        INSERT INTO transactions (
                            user_id, transaction_type, amount, description,
                            balance_after, transaction_date
                        )
                        VALUES (?, ?, ?, ?, ?, ?)
                        """,
                        (
                            user_id,
                            kind,
                            amount,
                            description,
                            round(running_balance, 2),
                            posted.isoformat(),
                        ),
                    )
                    running_balance -= amount

            for loan in DEMO_LOANS:
                cursor.execute(
                    """
                    INSERT INTO loans (
                        user_id, loan_type, total_amount, paid_amount,
                        remaining_amount, interest_rate, monthly_payment,
                        next_payment_date, created_at
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        loan["user_id"],
                        loan["loan_type"],
                        loan["total_amount"],
                        loan["paid_amount"],
                        loan["total_amount"] - loan["paid_amount"],
                        loan["interest_rate"],
                        loan["monthly_payment"],
                        loan["next_payment_date"],
                        loan["created_at"],
                    ),
                )

            conn.commit()

        self.add_faqs(DEFAULT_FAQS)
        for order, entry in enumerate(DEFAULT_POPULAR_QUESTIONS, start=1):
            self.add_popular_question(entry, display_order=order)

        logger.info("Seeded demo data for %d users", len(DEMO_USERS))
        return True

    def find_user(self, user_id: str, password: str) -> UserAccount | None:
        """Look up a user by id and password.

        Returns:
            The matching UserAccount, or None if the credentials don't match.
        """
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT user_id, full_name FROM users "
                "WHERE user_id = ? AND password_hash = ?",
                (user_id, hash_password(password)),
            )
            row = cursor.fetchone()

        if row is None:
            return None
        return UserAccount(user_id=row["user_id"], full_name=row["full_name"])

    def get_profile(self, user_id: str) -> Profile | None:
        """Fetch the profile and balances for a user.

        Returns:
            Profile if found; otherwise None.
        """
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT user_id, full_name, account_number, balance,
                       savings_balance, created_at, updated_at
                FROM profiles
                WHERE user_id = ?
                """,
                (user_id,),
            )
            row = cursor.fetchone()

        if row is None:
            return None
        return Profile(**dict(row))

    def get_loans(self, user_id: str) -> list[Loan]:
        """Fetch a user's loans, newest first.

        Returns:
            List of Loan records.
        """
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT id, user_id, loan_type, total_amount, paid_amount,
                       remaining_amount, interest_rate, monthly_payment,
                       next_payment_date, created_at
                FROM loans
                WHERE user_id = ?
                ORDER BY created_at DESC, id DESC
                """,
                (user_id,),
            )
            return [Loan(**dict(row)) for row in cursor.fetchall()]

    def get_transactions(
        self, user_id: str, limit: int | None = None
    ) -> list[Transaction]:
        """Fetch a user's most recent transactions, newest first.

        Args:
            user_id: Owner of the transactions.
            limit: Maximum rows to return. If None, uses config.TRANSACTION_LIMIT.

        Returns:
            List of Transaction records.
        """
        if limit is None:
            limit = config.TRANSACTION_LIMIT

        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT id, user_id, transaction_type, amount, description,
                       balance_after, transaction_date
                FROM transactions
                WHERE user_id = ?
                ORDER BY transaction_date DESC, id DESC
                LIMIT ?
                """,
                (user_id, int(limit)),
            )
            return [Transaction(**dict(row)) for row in cursor.fetchall()]

    def add_faqs(self, entries: Sequence[KnowledgeEntry]) -> None:
        """Append FAQ entries."""
        with self._connect() as conn:
            cursor = conn.cursor()
            for entry in entries:
                cursor.execute(
                    "INSERT INTO faqs (question, answer, keywords, category) "
                    "VALUES (?, ?, ?, ?)",
                    (
                        entry.question,
                        entry.answer,
                        json.dumps(list(entry.keywords)),
                        entry.category,
                    ),
                )
            conn.commit()
        logger.info("Added %d FAQs", len(entries))

    def add_popular_question(
        self,
        entry: KnowledgeEntry,
        *,
        display_order: int = 0,
        is_active: bool = True,
    ) -> None:
        """Append a popular question shown as a quick-question button."""
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO popular_questions (
                    question, answer, keywords, category, display_order, is_active
                )
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    entry.question,
                    entry.answer,
                    json.dumps(list(entry.keywords)),
                    entry.category,
                    display_order,
                    int(is_active),
                ),
            )
            conn.commit()

    def get_faqs(self) -> list[KnowledgeEntry]:
        """Fetch all FAQs in insertion order.

        Returns:
            List of KnowledgeEntry.
        """
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT question, answer, keywords, category FROM faqs "
                "ORDER BY created_at, id"
            )
            return [self._build_entry_from_row(row) for row in cursor.fetchall()]

    def get_popular_questions(self, limit: int | None = None) -> list[KnowledgeEntry]:
        """Fetch active popular questions by display order.

        Returns:
            List of KnowledgeEntry, at most ``limit`` long when given.
        """
        query = (
            "SELECT question, answer, keywords, category FROM popular_questions "
            "WHERE is_active = 1 ORDER BY display_order, id"
        )
        params: tuple[int, ...] = ()
        if limit is not None:
            query += " LIMIT ?"
            params = (int(limit),)

        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return [self._build_entry_from_row(row) for row in cursor.fetchall()]

    def load_knowledge_base(self) -> KnowledgeBase:
        """Build a knowledge base from stored FAQs and popular questions.

        Returns:
            KnowledgeBase with the default catalogs.
        """
        knowledge_base = KnowledgeBase(
            faqs=tuple(self.get_faqs()),
            popular_questions=tuple(self.get_popular_questions()),
        )
        logger.info(
            "Loaded knowledge base with %d entries", len(knowledge_base.entries)
        )
        return knowledge_base

    def submit_suggestion(self, suggestion: SuggestedQuestion) -> None:
        """Persist a suggested question for admin review.

        Raises:
            PersistenceError: If the database write fails.
        """
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO suggested_faqs (
                        question, suggested_by_session, created_at
                    )
                    VALUES (?, ?, ?)
                    """,
                    (
                        suggestion.question,
                        suggestion.session_id,
                        suggestion.submitted_at.isoformat(),
                    ),
                )
                conn.commit()
        except sqlite3.Error as e:
            msg = f"Could not store suggested question: {e}"
            raise PersistenceError(msg) from e

    def get_suggestions(self, status: str | None = None) -> list[SuggestionRecord]:
        """List stored suggestions, oldest first.

        Returns:
            List of SuggestionRecord, optionally filtered by status.
        """
        query = (
            "SELECT id, question, suggested_by_session AS session_id, status, "
            "created_at FROM suggested_faqs"
        )
        params: tuple[str, ...] = ()
        if status is not None:
            query += " WHERE status = ?"
            params = (status,)
        query += " ORDER BY id"

        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return [SuggestionRecord(**dict(row)) for row in cursor.fetchall()]

    @staticmethod
    def _build_entry_from_row(row: sqlite3.Row) -> KnowledgeEntry:
        keywords = json.loads(row["keywords"]) if row["keywords"] else []
        return KnowledgeEntry(
            question=row["question"],
            answer=row["answer"],
            keywords=tuple(keywords),
            category=row["category"],
        )
