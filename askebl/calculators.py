"""EMI and currency conversion tools shown next to the chat."""

import math
from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class LoanProduct:
    """A loan type offered in the EMI calculator."""

    key: str
    label: str
    rate_range: str
    default_rate: float


LOAN_PRODUCTS: tuple[LoanProduct, ...] = (
    LoanProduct("personal", "Personal Loan", "12-16%", 14.0),
    LoanProduct("home", "Home Loan", "7.5-10%", 8.5),
    LoanProduct("car", "Car Loan", "10-14%", 12.0),
    LoanProduct("education", "Education Loan", "8-12%", 10.0),
)

# Taka per unit of foreign currency. Mock values, not live rates.
EXCHANGE_RATES: dict[str, tuple[float, str]] = {
    "USD": (110.0, "US Dollar"),
    "EUR": (120.5, "Euro"),
    "GBP": (140.2, "British Pound"),
    "JPY": (0.75, "Japanese Yen"),
    "AUD": (72.8, "Australian Dollar"),
    "CAD": (81.5, "Canadian Dollar"),
    "CHF": (122.3, "Swiss Franc"),
    "CNY": (15.2, "Chinese Yuan"),
    "INR": (1.32, "Indian Rupee"),
    "SGD": (81.7, "Singapore Dollar"),
    "MYR": (24.8, "Malaysian Ringgit"),
    "THB": (3.1, "Thai Baht"),
    "SAR": (29.3, "Saudi Riyal"),
    "AED": (30.0, "UAE Dirham"),
    "PKR": (0.39, "Pakistani Rupee"),
}

RATE_SHEET: dict[str, dict[str, str]] = {
    "Deposit Rates": {
        "Savings Account": "3.5% per annum",
        "Fixed Deposit": "5.5% to 7.5% per annum",
    },
    "Loan Rates": {
        "Personal Loan": "Starting from 9.5% per annum",
        "Home Loan": "Starting from 9.0% per annum",
        "Car Loan": "Starting from 12.0% per annum",
    },
}


@dataclass(frozen=True)
class EMIResult:
    """Monthly instalment and totals, in whole taka."""

    emi: int
    total_amount: int
    total_interest: int


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def get_loan_product(key: str) -> LoanProduct:
    """Look up a loan product by key.

    Returns:
        The matching LoanProduct.

    Raises:
        ValueError: If the key is unknown.
    """
    for product in LOAN_PRODUCTS:
        if product.key == key:
            return product
    msg = f"Unknown loan type: {key}"
    raise ValueError(msg)


def _validate_loan_terms(
    principal: float, annual_rate: float, tenure_years: int
) -> None:
    if principal <= 0:
        msg = f"Principal must be positive, got {principal}"
        raise ValueError(msg)
    if annual_rate < 0:
        msg = f"Interest rate must not be negative, got {annual_rate}"
        raise ValueError(msg)
    if tenure_years <= 0:
        msg = f"Tenure must be at least one year, got {tenure_years}"
        raise ValueError(msg)


def monthly_instalment(principal: float, annual_rate: float, tenure_years: int) -> float:
    """Unrounded EMI using P * r * (1 + r)^n / ((1 + r)^n - 1).

    Returns:
        Monthly instalment; principal / months when the rate is zero.

    Raises:
        ValueError: If the loan terms are out of range.
    """
    _validate_loan_terms(principal, annual_rate, tenure_years)
    months = tenure_years * 12
    monthly_rate = annual_rate / 100 / 12
    if monthly_rate == 0:
        return principal / months
    growth = (1 + monthly_rate) ** months
    return principal * monthly_rate * growth / (growth - 1)


def calculate_emi(principal: float, annual_rate: float, tenure_years: int) -> EMIResult:
    """Calculate the EMI and repayment totals for a loan.

    Args:
        principal: Loan amount in taka.
        annual_rate: Annual interest rate in percent.
        tenure_years: Loan tenure in years.

    Returns:
        EMIResult rounded to whole taka.
    """
    emi = monthly_instalment(principal, annual_rate, tenure_years)
    total = emi * tenure_years * 12
    return EMIResult(
        emi=_round_half_up(emi),
        total_amount=_round_half_up(total),
        total_interest=_round_half_up(total - principal),
    )


def amortization_schedule(
    principal: float, annual_rate: float, tenure_years: int
) -> np.ndarray:
    """Build the month-by-month repayment schedule.

    Returns:
        Array of shape (months, 5) with columns month, payment, principal part,
        interest part and remaining balance.
    """
    emi = monthly_instalment(principal, annual_rate, tenure_years)
    months = tenure_years * 12
    monthly_rate = annual_rate / 100 / 12

    periods = np.arange(1, months + 1)
    growth = (1 + monthly_rate) ** periods
    if monthly_rate == 0:
        balance = principal - emi * periods
    else:
        balance = principal * growth - emi * (growth - 1) / monthly_rate
    balance = np.clip(balance, 0.0, None)

    opening = np.concatenate(([principal], balance[:-1]))
    interest = opening * monthly_rate
    principal_part = emi - interest
    payment = np.full(months, emi)

    return np.column_stack((periods, payment, principal_part, interest, balance))


def convert_to_bdt(amount: float, currency: str) -> float:
    """Convert a foreign currency amount to Bangladeshi taka.

    Returns:
        Converted amount rounded to 2 decimals.

    Raises:
        ValueError: If the currency is unsupported or the amount is not positive.
    """
    code = currency.upper()
    if code not in EXCHANGE_RATES:
        msg = f"Unsupported currency: {currency}"
        raise ValueError(msg)
    if amount <= 0:
        msg = f"Amount must be positive, got {amount}"
        raise ValueError(msg)
    rate, _name = EXCHANGE_RATES[code]
    return round(amount * rate, 2)
