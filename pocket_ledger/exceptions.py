"""
Exception hierarchy for the ledger.

Every error derives from BankingError, which is itself a ValueError, so
callers that only care about "the operation was rejected" can keep
catching ValueError.

    BankingError
    ├── InvalidAmountError          non-positive or non-numeric amount
    ├── InsufficientFundsError      withdrawal larger than the balance
    ├── TransferError               transfer built with the same account twice
    ├── UnknownAccountError         session lookup of a missing account
    ├── EmptyLogError               undo with nothing logged
    ├── StrategyNotConfiguredError  interest calculator used before set_strategy
    └── CommandStateError           command lifecycle misuse (caller bug)
        ├── AlreadyExecutedError
        └── NotExecutedError
"""

from decimal import Decimal
from typing import Optional


class BankingError(ValueError):
    """Base exception for all ledger errors"""

    def __init__(self, detail: str = "Banking operation failed"):
        self.detail = detail
        super().__init__(detail)


class InvalidAmountError(BankingError):
    """Raised when an amount is not a positive number"""

    def __init__(self, detail: str = "Amount must be positive", amount=None):
        self.amount = amount
        super().__init__(detail)


class InsufficientFundsError(BankingError):
    """
    Raised when a withdrawal would take the balance below zero.

    Attributes:
        account_number: Account that lacks the funds
        requested: Amount the caller tried to withdraw
        available: Balance at the time of the attempt
    """

    def __init__(self, account_number: str, requested: Decimal, available: Decimal):
        self.account_number = account_number
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient balance in account {account_number}: "
            f"available {available}, requested {requested}"
        )


class TransferError(BankingError):
    """Raised when a transfer is constructed with invalid accounts"""


class UnknownAccountError(BankingError):
    """Raised when a session has no account with the given number"""

    def __init__(self, account_number: str):
        self.account_number = account_number
        super().__init__(f"Account {account_number} not found")


class EmptyLogError(BankingError):
    """Raised when undo is requested on an empty command log"""

    def __init__(self, detail: str = "No commands to undo"):
        super().__init__(detail)


class StrategyNotConfiguredError(BankingError):
    """Raised when the interest calculator has no strategy selected"""

    def __init__(self, detail: str = "Interest strategy not set"):
        super().__init__(detail)


class CommandStateError(BankingError):
    """Base class for command lifecycle misuse"""

    def __init__(self, detail: str, command_name: Optional[str] = None):
        self.command_name = command_name
        super().__init__(detail)


class AlreadyExecutedError(CommandStateError):
    """Raised when execute() is called on an executed command"""

    def __init__(self, command_name: Optional[str] = None):
        super().__init__("Command already executed", command_name)


class NotExecutedError(CommandStateError):
    """Raised when undo() is called on a command that is not executed"""

    def __init__(self, command_name: Optional[str] = None):
        super().__init__("Command not executed yet", command_name)
