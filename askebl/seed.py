"""Demo users and banking records loaded into a fresh store."""

from typing import Any

DEMO_USERS: tuple[tuple[str, str], ...] = (
    ("12345", "Rahim Uddin"),
    ("67890", "Nusrat Jahan"),
    ("11111", "Karim Ahmed"),
    ("22222", "Farhana Akter"),
    ("33333", "Tanvir Hasan"),
    ("55555", "Sadia Islam"),
)

# user_id -> (account_number, current balance, savings balance)
DEMO_PROFILES: dict[str, tuple[str, float, float]] = {
    "12345": ("1011060012345", 125_450.75, 350_000.00),
    "67890": ("1011060067890", 48_200.00, 120_500.50),
    "11111": ("1011060011111", 9_870.25, 15_000.00),
    "22222": ("1011060022222", 310_000.00, 875_250.00),
    "33333": ("1011060033333", 22_340.10, 0.00),
    "55555": ("1011060055555", 67_500.00, 210_000.00),
}

DEMO_LOANS: tuple[dict[str, Any], ...] = (
    {
        "user_id": "12345",
        "loan_type": "Home Loan",
        "total_amount": 2_500_000.00,
        "paid_amount": 750_000.00,
        "interest_rate": 9.0,
        "monthly_payment": 28_500.00,
        "next_payment_date": "2026-11-05",
        "created_at": "2022-03-10T09:00:00+00:00",
    },
    {
        "user_id": "12345",
        "loan_type": "Car Loan",
        "total_amount": 900_000.00,
        "paid_amount": 600_000.00,
        "interest_rate": 12.0,
        "monthly_payment": 20_000.00,
        "next_payment_date": "2026-11-12",
        "created_at": "2024-01-15T09:00:00+00:00",
    },
    {
        "user_id": "67890",
        "loan_type": "Personal Loan",
        "total_amount": 300_000.00,
        "paid_amount": 120_000.00,
        "interest_rate": 9.5,
        "monthly_payment": 9_800.00,
        "next_payment_date": "2026-11-01",
        "created_at": "2025-02-01T09:00:00+00:00",
    },
    {
        "user_id": "22222",
        "loan_type": "Education Loan",
        "total_amount": 600_000.00,
        "paid_amount": 150_000.00,
        "interest_rate": 10.0,
        "monthly_payment": 12_750.00,
        "next_payment_date": "2026-11-20",
        "created_at": "2023-08-20T09:00:00+00:00",
    },
)

# (transaction_type, amount, description, days ago)
DEMO_TRANSACTION_TEMPLATES: tuple[tuple[str, float, str, int], ...] = (
    ("Deposit", 45_000.00, "Salary credit", 1),
    ("Withdrawal", -5_000.00, "ATM withdrawal - Gulshan", 2),
    ("Payment", -2_350.50, "Electricity bill (DESCO)", 4),
    ("Transfer", -10_000.00, "Fund transfer to savings", 6),
    ("Payment", -1_200.00, "Mobile recharge", 8),
    ("Deposit", 3_500.00, "Interest credit", 12),
    ("Payment", -8_450.00, "Card payment - Shwapno", 15),
    ("Withdrawal", -2_000.00, "ATM withdrawal - Dhanmondi", 18),
)
