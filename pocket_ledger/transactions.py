"""
Transaction Records Module

A Transaction is the immutable record of one balance-affecting event on
one account. Accounts create them; everything else only reads them.
"""

from decimal import Decimal
from datetime import datetime, timezone
from dataclasses import dataclass, field
from typing import Any, Dict
from enum import Enum
import itertools


class TransactionKind(Enum):
    """Balance-affecting event types"""
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"
    TRANSFER_OUT = "transfer-out"
    TRANSFER_IN = "transfer-in"

    @property
    def is_credit(self) -> bool:
        """True if the kind increases the balance"""
        return self in (TransactionKind.DEPOSIT, TransactionKind.TRANSFER_IN)

    @property
    def is_debit(self) -> bool:
        """True if the kind decreases the balance"""
        return not self.is_credit


# Process-wide sequence; ids only order records for display
_transaction_ids = itertools.count(1)


def next_transaction_id() -> int:
    """Return the next transaction id"""
    return next(_transaction_ids)


@dataclass(frozen=True)
class Transaction:
    """
    Immutable record of a single deposit, withdrawal or transfer leg.

    resulting_balance is the owning account's balance immediately after
    the transaction was applied.
    """
    kind: TransactionKind
    amount: Decimal
    description: str
    resulting_balance: Decimal
    account_number: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    id: int = field(default_factory=next_transaction_id)

    def __post_init__(self):
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, 'amount', Decimal(str(self.amount)))
        if not isinstance(self.resulting_balance, Decimal):
            object.__setattr__(self, 'resulting_balance', Decimal(str(self.resulting_balance)))

        if self.amount <= Decimal('0'):
            raise ValueError("Transaction amount must be positive")

    @property
    def signed_amount(self) -> Decimal:
        """Amount with the sign of its effect on the balance"""
        return self.amount if self.kind.is_credit else -self.amount

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for display or serialization"""
        return {
            'id': self.id,
            'kind': self.kind.value,
            'amount': str(self.amount),
            'description': self.description,
            'resulting_balance': str(self.resulting_balance),
            'account_number': self.account_number,
            'timestamp': self.timestamp.isoformat()
        }
