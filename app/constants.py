"""Shared constants used across the application."""

# Bank identifier code: 4-letter bank, 2-letter country, 2-char location,
# optional 3-char branch (e.g. ABSAZAJJ, DEUTDEFF500)
SWIFT_CODE_PATTERN = r"^[A-Z]{4}[A-Z]{2}[A-Z0-9]{2}([A-Z0-9]{3})?$"

# Beneficiary account numbers are digits only
BENEFICIARY_ACCOUNT_PATTERN = r"^[0-9]{5,20}$"

# Customer profile fields
ACCOUNT_NUMBER_PATTERN = r"^[0-9]{5,15}$"
ID_NUMBER_PATTERN = r"^[0-9]{6,13}$"
USERNAME_PATTERN = r"^[a-zA-Z0-9_]{3,20}$"
FULL_NAME_PATTERN = r"^[A-Za-z\s'-]{2,50}$"
PASSWORD_PATTERN = r"^[A-Za-z0-9@$!%*?&]{8,20}$"

# Free-text payment reference
REFERENCE_PATTERN = r"^[a-zA-Z0-9\s.,!?'-]{1,200}$"

# ISO 4217 codes accepted for outbound payments
SUPPORTED_CURRENCIES: frozenset[str] = frozenset(
    {
        "AUD",
        "BWP",
        "CAD",
        "CHF",
        "CNY",
        "EUR",
        "GBP",
        "HKD",
        "INR",
        "JPY",
        "KES",
        "LSL",
        "MUR",
        "MZN",
        "NAD",
        "NGN",
        "NZD",
        "SEK",
        "SGD",
        "SZL",
        "USD",
        "ZAR",
        "ZMW",
    }
)
