"""Knowledge base: FAQ collections, product catalogs and guided-flow definitions."""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .config import config
from .models import CatalogItem, KnowledgeEntry, PendingMode

logger = config.get_logger(__name__)

CARD_TYPES: tuple[CatalogItem, ...] = (
    CatalogItem(
        "Credit Card",
        "EBL Credit Cards offer worldwide acceptance with attractive rewards, "
        "cashback, and exclusive privileges. Features include EMI facilities, "
        "balance transfer options, and comprehensive insurance coverage. Annual "
        "fees vary by card type with competitive interest rates.",
    ),
    CatalogItem(
        "Debit Card",
        "EBL Debit Cards provide instant access to your account funds with ATM "
        "withdrawals, online purchases, and POS transactions. Features include "
        "contactless payments, international usage, and real-time SMS alerts for "
        "all transactions.",
    ),
    CatalogItem(
        "Corporate Card",
        "EBL Corporate Cards are designed for business expenses with centralized "
        "billing, expense tracking, and detailed monthly statements. Benefits "
        "include higher credit limits, business rewards, and comprehensive "
        "reporting for accounting purposes.",
    ),
    CatalogItem(
        "Prepaid Card",
        "EBL Prepaid Cards offer secure payment solutions without requiring a bank "
        "account. Load money as needed, control spending, and enjoy the "
        "convenience of card payments with enhanced security features.",
    ),
    CatalogItem(
        "Islamic Credit Card",
        "EBL Islamic Credit Cards are Shariah-compliant financial products offering "
        "ethical banking solutions. Features include profit-sharing instead of "
        "interest, halal reward programs, and compliance with Islamic financial "
        "principles.",
    ),
)

ACCOUNT_TYPES: tuple[CatalogItem, ...] = (
    CatalogItem(
        "Savings Account",
        "EBL Savings Account offers competitive interest rates with flexible "
        "deposit and withdrawal options. Features include free ATM transactions, "
        "online banking, mobile banking, and SMS alerts. Minimum balance "
        "requirements apply with attractive monthly profit rates.",
    ),
    CatalogItem(
        "Current Account",
        "EBL Current Account is designed for frequent transactions with no "
        "transaction limits. Perfect for businesses and individuals with high "
        "transaction volumes. Features include checkbook facility, overdraft "
        "options, and dedicated relationship manager.",
    ),
    CatalogItem(
        "Fixed Deposit Account",
        "EBL Fixed Deposit Account offers guaranteed returns with flexible tenure "
        "options from 1 month to 5 years. Higher interest rates than savings "
        "accounts, with premature encashment facility. Choose from monthly, "
        "quarterly, or maturity profit payments.",
    ),
    CatalogItem(
        "Student Account",
        "EBL Student Account is specially designed for students with zero balance "
        "requirements and reduced charges. Features include free debit card, "
        "online banking, student loan facilities, and educational discounts at "
        "partner merchants.",
    ),
    CatalogItem(
        "Islamic Savings Account",
        "EBL Islamic Savings Account is Shariah-compliant offering ethical banking "
        "solutions. Features include profit-sharing based on Islamic principles, "
        "halal investment options, and compliance with Shariah guidelines. No "
        "interest-based transactions.",
    ),
    CatalogItem(
        "Foreign Currency Account",
        "EBL Foreign Currency Account allows you to maintain balances in major "
        "foreign currencies including USD, EUR, GBP. Features include competitive "
        "exchange rates, international wire transfers, and protection against "
        "currency fluctuations.",
    ),
)

LOAN_TYPES: tuple[CatalogItem, ...] = (
    CatalogItem(
        "Personal Loan",
        "EBL Personal Loan helps you meet personal needs such as weddings, travel, "
        "or medical expenses. Borrow up to BDT 20 lakh with tenures from 12 to 60 "
        "months at rates starting from 9.5% per annum. No security is required "
        "for salaried individuals.",
    ),
    CatalogItem(
        "Home Loan",
        "EBL Home Loan finances the purchase, construction, or renovation of your "
        "home. Borrow up to BDT 2 crore with tenures up to 25 years at rates "
        "starting from 9.0% per annum, with flexible repayment options and "
        "takeover facility.",
    ),
    CatalogItem(
        "Car Loan",
        "EBL Car Loan lets you buy a new or reconditioned car with up to 50% "
        "financing of the vehicle price. Tenures range from 12 to 72 months at "
        "rates starting from 12.0% per annum, with quick processing and "
        "competitive insurance packages.",
    ),
    CatalogItem(
        "Education Loan",
        "EBL Education Loan supports higher studies at home and abroad, covering "
        "tuition fees, living costs, and travel. Rates range from 8% to 12% per "
        "annum with a grace period until course completion.",
    ),
)

ATM_LOCATIONS: tuple[CatalogItem, ...] = (
    CatalogItem(
        "Dhaka",
        "EBL ATMs in Dhaka: Gulshan Avenue (Gulshan 1), Dhanmondi 27, Motijheel "
        "C/A, Uttara Sector 7, Banani Road 11, and Bashundhara City. All booths "
        "are open 24/7.",
    ),
    CatalogItem(
        "Chittagong",
        "EBL ATMs in Chittagong: Agrabad C/A, GEC Circle, Nasirabad, and "
        "Chawkbazar. All booths are open 24/7.",
    ),
    CatalogItem(
        "Sylhet",
        "EBL ATMs in Sylhet: Zindabazar, Amberkhana, and Sylhet Osmani Airport. "
        "All booths are open 24/7.",
    ),
    CatalogItem(
        "Rajshahi",
        "EBL ATMs in Rajshahi: Shaheb Bazar and Rajshahi University Gate. All "
        "booths are open 24/7.",
    ),
    CatalogItem(
        "Khulna",
        "EBL ATMs in Khulna: KDA Avenue and Sonadanga. All booths are open 24/7.",
    ),
)

BRANCH_LOCATIONS: tuple[CatalogItem, ...] = (
    CatalogItem(
        "Dhaka",
        "EBL branches in Dhaka: Principal Branch (100 Gulshan Avenue), Dhanmondi "
        "Branch (Road 27), Motijheel Branch (Dilkusha C/A), and Uttara Branch "
        "(Sector 7). Open Sunday to Thursday, 10:00 AM to 4:00 PM.",
    ),
    CatalogItem(
        "Chittagong",
        "EBL branches in Chittagong: Agrabad Branch (Agrabad C/A) and O.R. Nizam "
        "Road Branch. Open Sunday to Thursday, 10:00 AM to 4:00 PM.",
    ),
    CatalogItem(
        "Sylhet",
        "EBL branches in Sylhet: Zindabazar Branch. Open Sunday to Thursday, "
        "10:00 AM to 4:00 PM.",
    ),
    CatalogItem(
        "Rajshahi",
        "EBL branches in Rajshahi: Shaheb Bazar Branch. Open Sunday to Thursday, "
        "10:00 AM to 4:00 PM.",
    ),
    CatalogItem(
        "Khulna",
        "EBL branches in Khulna: KDA Avenue Branch. Open Sunday to Thursday, "
        "10:00 AM to 4:00 PM.",
    ),
)

CARD_KEYWORDS: tuple[str, ...] = (
    "card",
    "cards",
    "credit card",
    "debit card",
    "corporate card",
    "prepaid card",
    "islamic card",
)
# Bare "account" is left out so account how-to questions reach the FAQ matcher.
ACCOUNT_KEYWORDS: tuple[str, ...] = (
    "accounts",
    "account type",
    "type of account",
    "types of account",
    "savings account",
    "current account",
    "fixed deposit",
    "student account",
    "islamic savings",
    "foreign currency account",
)
LOAN_KEYWORDS: tuple[str, ...] = (
    "loan",
    "loans",
    "personal loan",
    "home loan",
    "car loan",
    "education loan",
)
ATM_KEYWORDS: tuple[str, ...] = ("atm", "atms", "cash machine")
BRANCH_KEYWORDS: tuple[str, ...] = ("branch", "branches")

DEFAULT_FAQS: tuple[KnowledgeEntry, ...] = (
    KnowledgeEntry(
        "How do I open an account?",
        "You can open an account by visiting any EBL branch with your National ID "
        "card, two passport-size photographs, and an initial deposit. You can also "
        "start the process online through EBL Skybanking and complete verification "
        "at a branch.",
        ("open", "opening", "new account", "documents"),
        "Accounts",
    ),
    KnowledgeEntry(
        "How can I reset my internet banking password?",
        "Open the EBL Skybanking login page, choose 'Forgot Password', and follow "
        "the OTP verification sent to your registered mobile number. You can then "
        "set a new password.",
        ("password", "reset", "forgot", "internet banking", "skybanking"),
        "Digital Banking",
    ),
    KnowledgeEntry(
        "What are the banking hours?",
        "EBL branches are open Sunday to Thursday from 10:00 AM to 4:00 PM. Our "
        "contact center is available 24/7 at 16230.",
        ("hours", "timing", "open", "close", "working"),
        "General",
    ),
    KnowledgeEntry(
        "How do I transfer money to another bank?",
        "You can transfer funds to other banks through EBL Skybanking using BEFTN, "
        "NPSB, or RTGS. Add the beneficiary, enter the amount, and confirm with "
        "the OTP sent to your phone.",
        ("transfer", "send money", "beftn", "npsb", "rtgs", "fund"),
        "Payments",
    ),
    KnowledgeEntry(
        "How can I check my account balance?",
        "You can check your balance through EBL Skybanking, by SMS, at any EBL ATM, "
        "or by calling our contact center at 16230.",
        ("balance", "check", "statement"),
        "Accounts",
    ),
    KnowledgeEntry(
        "How do I update my mobile number?",
        "Visit your nearest branch with your National ID card and fill in the "
        "contact update form. The change takes effect within one working day.",
        ("mobile", "phone", "update", "contact", "number"),
        "Services",
    ),
    KnowledgeEntry(
        "What is the minimum balance requirement?",
        "Most savings accounts require a minimum balance of BDT 1,000. Student "
        "accounts have no minimum balance requirement.",
        ("minimum", "balance", "requirement"),
        "Accounts",
    ),
    KnowledgeEntry(
        "How do I get a cheque book?",
        "Request a cheque book through EBL Skybanking or at your home branch. It is "
        "usually ready for collection within three working days.",
        ("cheque", "check book", "chequebook"),
        "Services",
    ),
)

DEFAULT_POPULAR_QUESTIONS: tuple[KnowledgeEntry, ...] = (
    KnowledgeEntry(
        "What are the current interest rates?",
        "Savings accounts earn 3.5% per annum and fixed deposits earn 5.5% to 7.5% "
        "per annum. Loan rates start from 9.0% per annum for home loans.",
        ("interest", "rate", "rates", "profit"),
        "Rates",
    ),
    KnowledgeEntry(
        "How do I register for mobile banking?",
        "Download the EBL Skybanking app, tap 'Register', and enter your account "
        "number and registered mobile number. Complete the OTP verification to "
        "activate your profile.",
        ("mobile banking", "app", "register", "skybanking"),
        "Digital Banking",
    ),
    KnowledgeEntry(
        "How can I pay my utility bills?",
        "Utility bills for electricity, gas, water, and internet can be paid from "
        "EBL Skybanking under 'Bill Pay'.",
        ("bill", "bills", "utility", "electricity", "gas", "water"),
        "Payments",
    ),
    KnowledgeEntry(
        "How do I contact customer service?",
        "Call our 24/7 contact center at 16230 or email info@ebl-bd.com.",
        ("contact", "customer", "service", "helpline", "call"),
        "General",
    ),
    KnowledgeEntry(
        "What documents are needed for KYC?",
        "KYC requires your National ID card or passport, a recent photograph, and "
        "proof of address such as a utility bill.",
        ("kyc", "documents", "verification", "identity"),
        "Accounts",
    ),
    KnowledgeEntry(
        "How do I activate internet banking?",
        "Visit EBL Skybanking, choose 'Sign Up', and verify yourself with your "
        "account details and OTP.",
        ("internet banking", "activate", "online"),
        "Digital Banking",
    ),
)


@dataclass(frozen=True)
class ChoiceFlow:
    """A guided flow that asks the user to pick one item from a fixed catalog."""

    mode: PendingMode
    keywords: tuple[str, ...]
    prompt: str
    reprompt: str
    options: tuple[CatalogItem, ...]

    @property
    def option_names(self) -> tuple[str, ...]:
        return tuple(item.name for item in self.options)


def _join_options(names: tuple[str, ...]) -> str:
    if len(names) <= 1:
        return "".join(names)
    return f"{', '.join(names[:-1])}, or {names[-1]}"


@dataclass(frozen=True)
class KnowledgeBase:
    """Read-only data the conversation engine answers from."""

    faqs: tuple[KnowledgeEntry, ...] = ()
    popular_questions: tuple[KnowledgeEntry, ...] = ()
    card_types: tuple[CatalogItem, ...] = CARD_TYPES
    account_types: tuple[CatalogItem, ...] = ACCOUNT_TYPES
    loan_types: tuple[CatalogItem, ...] = LOAN_TYPES
    atm_locations: tuple[CatalogItem, ...] = ATM_LOCATIONS
    branch_locations: tuple[CatalogItem, ...] = BRANCH_LOCATIONS
    card_keywords: tuple[str, ...] = CARD_KEYWORDS
    account_keywords: tuple[str, ...] = ACCOUNT_KEYWORDS
    loan_keywords: tuple[str, ...] = LOAN_KEYWORDS
    atm_keywords: tuple[str, ...] = ATM_KEYWORDS
    branch_keywords: tuple[str, ...] = BRANCH_KEYWORDS
    _flows: tuple[ChoiceFlow, ...] = field(
        init=False, repr=False, compare=False, default=()
    )

    def __post_init__(self) -> None:
        """Build the guided flows once; their order is the intent priority."""
        flows = (
            self._selection_flow(
                PendingMode.AWAITING_CARD_SELECTION,
                self.card_keywords,
                self.card_types,
                "cards",
                "card",
            ),
            self._selection_flow(
                PendingMode.AWAITING_ACCOUNT_SELECTION,
                self.account_keywords,
                self.account_types,
                "accounts",
                "account",
            ),
            self._selection_flow(
                PendingMode.AWAITING_LOAN_SELECTION,
                self.loan_keywords,
                self.loan_types,
                "loans",
                "loan",
            ),
            self._location_flow(
                PendingMode.AWAITING_ATM_LOCATION,
                self.atm_keywords,
                self.atm_locations,
                "ATMs",
            ),
            self._location_flow(
                PendingMode.AWAITING_BRANCH_LOCATION,
                self.branch_keywords,
                self.branch_locations,
                "branches",
            ),
        )
        object.__setattr__(self, "_flows", flows)

    @staticmethod
    def _selection_flow(
        mode: PendingMode,
        keywords: tuple[str, ...],
        options: tuple[CatalogItem, ...],
        plural: str,
        singular: str,
    ) -> ChoiceFlow:
        names = tuple(item.name for item in options)
        return ChoiceFlow(
            mode=mode,
            keywords=keywords,
            prompt=(
                f"I'd be happy to help you with information about our {plural}! "
                f"Please select which type of {singular} you'd like to know about:"
            ),
            reprompt=(
                f"Please select one of the {singular} types I mentioned: "
                f"{_join_options(names)}."
            ),
            options=options,
        )

    @staticmethod
    def _location_flow(
        mode: PendingMode,
        keywords: tuple[str, ...],
        options: tuple[CatalogItem, ...],
        place: str,
    ) -> ChoiceFlow:
        names = tuple(item.name for item in options)
        return ChoiceFlow(
            mode=mode,
            keywords=keywords,
            prompt=(
                f"I can help you find our {place}! Please select your city:"
            ),
            reprompt=(
                f"Please select one of the cities I mentioned: {_join_options(names)}."
            ),
            options=options,
        )

    @property
    def entries(self) -> tuple[KnowledgeEntry, ...]:
        """FAQ entries followed by popular-question entries."""
        return self.faqs + self.popular_questions

    def choice_flows(self) -> tuple[ChoiceFlow, ...]:
        """Return the guided flows in intent-classification order."""
        return self._flows

    def flow_for(self, mode: PendingMode) -> ChoiceFlow | None:
        """Return the guided flow that owns ``mode``, if any."""
        for flow in self._flows:
            if flow.mode is mode:
                return flow
        return None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "KnowledgeBase":
        """Build a knowledge base from plain JSON-style data.

        Catalog keys that are absent keep their defaults.

        Returns:
            KnowledgeBase populated from ``data``.
        """
        kwargs: dict[str, Any] = {
            "faqs": tuple(_entry_from_dict(item) for item in data.get("faqs", [])),
            "popular_questions": tuple(
                _entry_from_dict(item) for item in data.get("popular_questions", [])
            ),
        }
        for key in (
            "card_types",
            "account_types",
            "loan_types",
            "atm_locations",
            "branch_locations",
        ):
            if key in data:
                kwargs[key] = tuple(
                    CatalogItem(name=item["name"], description=item["description"])
                    for item in data[key]
                )
        return cls(**kwargs)


def _entry_from_dict(item: dict[str, Any]) -> KnowledgeEntry:
    return KnowledgeEntry(
        question=item["question"],
        answer=item["answer"],
        keywords=tuple(item.get("keywords") or ()),
        category=item.get("category"),
    )


def default_knowledge_base() -> KnowledgeBase:
    """Return the built-in demo knowledge base."""
    return KnowledgeBase(
        faqs=DEFAULT_FAQS,
        popular_questions=DEFAULT_POPULAR_QUESTIONS,
    )


def load_knowledge_base(file_path: Path) -> KnowledgeBase:
    """Load a knowledge base from a JSON file.

    Args:
        file_path: Path to a ``.json`` file with ``faqs`` and
            ``popular_questions`` arrays and optional catalog overrides.

    Returns:
        The loaded KnowledgeBase.

    Raises:
        ValueError: If the file type is not supported or the content is not a
            JSON object.
    """
    file_ext = file_path.suffix.lower()
    if file_ext != ".json":
        msg = f"Unsupported knowledge base file type: {file_ext}"
        raise ValueError(msg)

    try:
        with file_path.open(encoding="utf-8") as file:
            data = json.load(file)
    except Exception:
        logger.exception("Error loading knowledge base %s", file_path)
        raise

    if not isinstance(data, dict):
        msg = "Knowledge base file must contain a JSON object"
        raise ValueError(msg)

    knowledge_base = KnowledgeBase.from_dict(data)
    logger.info(
        "Loaded %d FAQs and %d popular questions from %s",
        len(knowledge_base.faqs),
        len(knowledge_base.popular_questions),
        file_path,
    )
    return knowledge_base
