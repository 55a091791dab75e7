"""
Account Product Definitions

The account variants offered by the ledger. Each variant carries its
fixed annual interest rate (in percent) and whether it has a tenure.
"""

from decimal import Decimal
from enum import Enum


class AccountVariant(Enum):
    """Account variants with their annual interest rate in percent"""
    SAVINGS = ("savings", Decimal('4.5'), "Savings Account")
    CURRENT = ("current", Decimal('2.0'), "Current Account")
    FIXED_DEPOSIT = ("fixed_deposit", Decimal('7.5'), "Fixed Deposit")

    def __init__(self, code: str, interest_rate: Decimal, display_name: str):
        self.code = code
        self.interest_rate = interest_rate
        self.display_name = display_name

    @property
    def has_tenure(self) -> bool:
        """Only fixed deposits are opened for a tenure"""
        return self is AccountVariant.FIXED_DEPOSIT

    @classmethod
    def from_code(cls, code: str) -> 'AccountVariant':
        """Look up a variant by its code ("savings", "current", "fixed_deposit")"""
        for variant in cls:
            if variant.code == code:
                return variant
        raise ValueError(f"Unknown account variant: {code}")
