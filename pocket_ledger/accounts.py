"""
Account Management Module

A single Account class covers every variant; variant-specific behaviour
(interest rate, tenure, interest formula) is selected by the
AccountVariant tag. Deposits, withdrawals and the two transfer legs are
the only operations that change a balance. Each one validates, updates
balance and history, and only then notifies observers.
"""

from decimal import Decimal
from typing import List, Optional, Union

from .config import get_config
from .currency import AmountLike, ZERO, to_decimal
from .exceptions import InsufficientFundsError, InvalidAmountError
from .interest import InterestStrategy, strategy_for
from .logging_config import get_logger, log_action
from .notifications import Observer, ObserverRegistry
from .products import AccountVariant
from .transactions import Transaction, TransactionKind


def positive_amount(amount: AmountLike) -> Decimal:
    """
    Convert and validate an operation amount.

    Raises:
        InvalidAmountError: If the amount is not a number greater than zero
    """
    value = to_decimal(amount)
    if value <= ZERO:
        raise InvalidAmountError("Amount must be positive", amount=amount)
    return value


class Account:
    """
    Bank account holding a Decimal balance that never goes negative.

    The balance always equals the initial balance plus all credits minus
    all debits recorded in the history.
    """

    def __init__(
        self,
        account_number: str,
        variant: AccountVariant,
        initial_balance: AmountLike = ZERO,
        tenure_months: Optional[int] = None,
        interest_strategy: Optional[InterestStrategy] = None
    ):
        if not account_number:
            raise ValueError("Account number is required")

        initial = to_decimal(initial_balance)
        if initial < ZERO:
            raise InvalidAmountError("Initial balance cannot be negative", amount=initial_balance)

        if variant.has_tenure:
            if tenure_months is None:
                tenure_months = get_config().default_tenure_months
            if isinstance(tenure_months, bool) or not isinstance(tenure_months, int) or tenure_months <= 0:
                raise ValueError("Tenure must be a positive number of months")
        elif tenure_months is not None:
            raise ValueError(f"{variant.display_name} does not have a tenure")

        self._account_number = account_number
        self._variant = variant
        self._initial_balance = initial
        self._balance = initial
        self._tenure_months = tenure_months
        self._history: List[Transaction] = []
        self._observers = ObserverRegistry(owner=account_number)
        self._interest_strategy = interest_strategy
        self.logger = get_logger("pocket_ledger.accounts")

    # Read-only state

    @property
    def account_number(self) -> str:
        return self._account_number

    @property
    def variant(self) -> AccountVariant:
        return self._variant

    @property
    def balance(self) -> Decimal:
        return self._balance

    @property
    def initial_balance(self) -> Decimal:
        return self._initial_balance

    @property
    def interest_rate(self) -> Decimal:
        """Annual interest rate in percent"""
        return self._variant.interest_rate

    @property
    def tenure_months(self) -> Optional[int]:
        """Deposit tenure; None for variants without one"""
        return self._tenure_months

    @property
    def observer_count(self) -> int:
        return len(self._observers)

    def history(self) -> List[Transaction]:
        """Snapshot of the transaction history, oldest first"""
        return list(self._history)

    # Observers

    def add_observer(self, observer: Observer) -> int:
        """Register an observer and return its token"""
        return self._observers.add(observer)

    def remove_observer(self, observer_or_token: Union[Observer, int]) -> bool:
        """Unregister an observer by object or token"""
        return self._observers.remove(observer_or_token)

    def has_observer(self, observer: Observer) -> bool:
        return observer in self._observers

    # Interest

    @property
    def interest_strategy(self) -> InterestStrategy:
        """Strategy used by calculate_interest(); the variant default unless overridden"""
        return self._interest_strategy or strategy_for(self._variant)

    def set_interest_strategy(self, strategy: Optional[InterestStrategy]) -> None:
        """Override the interest formula; None restores the variant default"""
        self._interest_strategy = strategy

    def calculate_interest(self) -> Decimal:
        """Interest on the current balance. Pure; never fails"""
        return self.interest_strategy.calculate(self)

    # Balance mutations

    def deposit(self, amount: AmountLike, description: str = "Deposit") -> Transaction:
        """
        Credit the account.

        Raises:
            InvalidAmountError: If amount is not positive
        """
        return self._credit(TransactionKind.DEPOSIT, positive_amount(amount), description)

    def withdraw(self, amount: AmountLike, description: str = "Withdrawal") -> Transaction:
        """
        Debit the account.

        Raises:
            InvalidAmountError: If amount is not positive
            InsufficientFundsError: If amount exceeds the balance
        """
        return self._debit(TransactionKind.WITHDRAW, positive_amount(amount), description)

    def transfer_in(self, amount: AmountLike, description: str) -> Transaction:
        """Credit leg of a transfer"""
        return self._credit(TransactionKind.TRANSFER_IN, positive_amount(amount), description)

    def transfer_out(self, amount: AmountLike, description: str) -> Transaction:
        """Debit leg of a transfer"""
        return self._debit(TransactionKind.TRANSFER_OUT, positive_amount(amount), description)

    def _credit(self, kind: TransactionKind, amount: Decimal, description: str) -> Transaction:
        return self._commit(kind, amount, description, self._balance + amount)

    def _debit(self, kind: TransactionKind, amount: Decimal, description: str) -> Transaction:
        if amount > self._balance:
            log_action(
                self.logger, "warning", f"Rejected {kind.value}: insufficient balance",
                action=kind.value, resource=f"account:{self._account_number}",
                extra={"requested": str(amount), "available": str(self._balance)}
            )
            raise InsufficientFundsError(self._account_number, amount, self._balance)
        return self._commit(kind, amount, description, self._balance - amount)

    def _commit(self, kind: TransactionKind, amount: Decimal, description: str,
                new_balance: Decimal) -> Transaction:
        transaction = Transaction(
            kind=kind,
            amount=amount,
            description=description,
            resulting_balance=new_balance,
            account_number=self._account_number
        )
        self._balance = new_balance
        self._history.append(transaction)

        log_action(
            self.logger, "debug", f"{kind.value} of {amount} committed",
            action=kind.value, resource=f"account:{self._account_number}",
            extra={"transaction_id": transaction.id, "balance": str(new_balance)}
        )

        self._observers.notify_all(transaction)
        return transaction

    # Invariants

    def computed_balance(self) -> Decimal:
        """Balance recomputed from the initial balance and the history"""
        return self._initial_balance + sum((tx.signed_amount for tx in self._history), ZERO)

    def verify_balance(self) -> bool:
        """True if the stored balance matches the history"""
        return self.computed_balance() == self._balance

    def __repr__(self) -> str:
        return (
            f"Account(account_number={self._account_number!r}, "
            f"variant={self._variant.name}, balance={self._balance})"
        )


def open_savings_account(account_number: str, initial_balance: AmountLike = ZERO) -> Account:
    """Open a 4.5% savings account"""
    return Account(account_number, AccountVariant.SAVINGS, initial_balance)


def open_current_account(account_number: str, initial_balance: AmountLike = ZERO) -> Account:
    """Open a 2.0% current account"""
    return Account(account_number, AccountVariant.CURRENT, initial_balance)


def open_fixed_deposit(account_number: str, initial_balance: AmountLike = ZERO,
                       tenure_months: Optional[int] = None) -> Account:
    """Open a 7.5% fixed deposit; tenure defaults to the configured default"""
    return Account(account_number, AccountVariant.FIXED_DEPOSIT, initial_balance, tenure_months)
