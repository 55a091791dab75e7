"""
Banking Session Module

A BankingSession is the explicit context a presentation layer works
against: it owns the accounts, the optional customer observing them, the
command invoker and an interest calculator. Build one per user session
and pass it to whatever needs it.
"""

from decimal import Decimal
from typing import Dict, List, Optional

from .accounts import Account
from .commands import CommandInvoker, DepositCommand, TransferCommand, WithdrawCommand
from .config import PocketLedgerConfig, get_config
from .currency import AmountLike, ZERO, format_amount
from .exceptions import UnknownAccountError
from .interest import InterestCalculator, interest_summary
from .ledger import all_transactions, total_balance
from .logging_config import get_logger, log_action
from .notifications import Customer
from .products import AccountVariant
from .transactions import Transaction


class BankingSession:
    """Accounts, their observer and the command log for one user"""

    def __init__(self, settings: Optional[PocketLedgerConfig] = None):
        self.settings = settings or get_config()
        self._accounts: Dict[str, Account] = {}
        self._customer: Optional[Customer] = None
        self.invoker = CommandInvoker()
        self.interest_calculator = InterestCalculator()
        self.logger = get_logger("pocket_ledger.session")

    # Accounts

    def open_account(
        self,
        variant: AccountVariant,
        account_number: str,
        initial_balance: AmountLike = ZERO,
        tenure_months: Optional[int] = None
    ) -> Account:
        """
        Open an account in this session.

        Raises:
            ValueError: If the account number is already in use
        """
        if account_number in self._accounts:
            raise ValueError(f"Account {account_number} already exists")

        if variant.has_tenure and tenure_months is None:
            tenure_months = self.settings.default_tenure_months

        account = Account(account_number, variant, initial_balance, tenure_months)
        self._accounts[account_number] = account
        if self._customer is not None:
            account.add_observer(self._customer)

        log_action(
            self.logger, "info", f"Opened {variant.display_name} {account_number}",
            action="open_account", resource=f"account:{account_number}",
            extra={"initial_balance": str(account.balance)}
        )
        return account

    def account(self, account_number: str) -> Account:
        """
        Look up an account by number.

        Raises:
            UnknownAccountError: If no such account was opened
        """
        try:
            return self._accounts[account_number]
        except KeyError:
            raise UnknownAccountError(account_number) from None

    @property
    def accounts(self) -> Dict[str, Account]:
        """Snapshot of the session's accounts keyed by account number"""
        return dict(self._accounts)

    # Customer

    @property
    def customer(self) -> Optional[Customer]:
        return self._customer

    def attach_customer(self, customer: Customer) -> None:
        """Subscribe a customer to every current and future account"""
        if self._customer is not None:
            for account in self._accounts.values():
                account.remove_observer(self._customer)
        self._customer = customer
        for account in self._accounts.values():
            account.add_observer(customer)

    # Commands

    def deposit(self, account_number: str, amount: AmountLike, description: str = "Deposit") -> bool:
        return self.invoker.execute_command(DepositCommand(self.account(account_number), amount, description))

    def withdraw(self, account_number: str, amount: AmountLike, description: str = "Withdrawal") -> bool:
        return self.invoker.execute_command(WithdrawCommand(self.account(account_number), amount, description))

    def transfer(self, source_number: str, destination_number: str, amount: AmountLike,
                 description: Optional[str] = None) -> bool:
        command = TransferCommand(
            self.account(source_number), self.account(destination_number), amount, description
        )
        return self.invoker.execute_command(command)

    def undo(self):
        """Undo the most recent command; raises EmptyLogError if there is none"""
        return self.invoker.undo_last_command()

    # Queries

    def all_transactions(self) -> List[Transaction]:
        return all_transactions(self._accounts.values())

    def total_balance(self) -> Decimal:
        return total_balance(self._accounts.values())

    def interest_summary(self) -> Dict[str, Decimal]:
        return interest_summary(self._accounts.values())

    def format_amount(self, amount: AmountLike) -> str:
        return format_amount(
            amount,
            symbol=self.settings.currency_symbol,
            grouping=self.settings.number_grouping,
            precision=self.settings.display_precision
        )
