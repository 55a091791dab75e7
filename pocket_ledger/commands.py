"""
Command Module

Wraps deposits, withdrawals and transfers as commands that can be undone
with a compensating operation. Undo never erases history: the original
transaction and its compensation both stay in the account's history.

Command lifecycle:
    created -> executed -> undone -> executed -> ...

execute() on an executed command and undo() on a command that is not
executed are caller bugs and raise CommandStateError subclasses.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional, Tuple
import uuid

from .accounts import Account
from .currency import AmountLike
from .exceptions import (
    AlreadyExecutedError, BankingError, EmptyLogError, NotExecutedError, TransferError
)
from .logging_config import get_logger, log_action
from .transactions import Transaction


UNDO_PREFIX = "Undo: "


class Command(ABC):
    """Base class for reversible account operations"""

    def __init__(self, amount: AmountLike, description: str):
        self.amount = amount
        self.description = description
        self.correlation_id = str(uuid.uuid4())
        self._executed = False
        self.logger = get_logger("pocket_ledger.commands")

    @property
    def executed(self) -> bool:
        return self._executed

    @property
    def name(self) -> str:
        return type(self).__name__

    def execute(self) -> Any:
        """
        Run the wrapped operation.

        Raises:
            AlreadyExecutedError: If the command is already executed
            BankingError: If the account rejects the operation; the command
                stays not executed
        """
        if self._executed:
            raise AlreadyExecutedError(self.name)

        result = self._apply()
        self._executed = True

        log_action(
            self.logger, "info", f"{self.name} executed: {self.description}",
            action="execute", correlation_id=self.correlation_id,
            extra={"amount": str(self.amount)}
        )
        return result

    def undo(self) -> None:
        """
        Apply the compensating operation.

        Raises:
            NotExecutedError: If the command is not executed
            BankingError: If the compensation is rejected (for example the
                deposited money was already spent); the command stays executed
        """
        if not self._executed:
            raise NotExecutedError(self.name)

        self._revert()
        self._executed = False

        log_action(
            self.logger, "info", f"{self.name} undone: {self.description}",
            action="undo", correlation_id=self.correlation_id,
            extra={"amount": str(self.amount)}
        )

    @abstractmethod
    def _apply(self) -> Any:
        pass

    @abstractmethod
    def _revert(self) -> None:
        pass

    def __repr__(self) -> str:
        return f"{self.name}(amount={self.amount}, description={self.description!r}, executed={self._executed})"


class DepositCommand(Command):
    """Deposit into one account; undo withdraws the same amount"""

    def __init__(self, account: Account, amount: AmountLike, description: str = "Deposit"):
        super().__init__(amount, description)
        self.account = account

    def _apply(self) -> Transaction:
        return self.account.deposit(self.amount, self.description)

    def _revert(self) -> None:
        self.account.withdraw(self.amount, f"{UNDO_PREFIX}{self.description}")


class WithdrawCommand(Command):
    """Withdraw from one account; undo deposits the same amount back"""

    def __init__(self, account: Account, amount: AmountLike, description: str = "Withdrawal"):
        super().__init__(amount, description)
        self.account = account

    def _apply(self) -> Transaction:
        return self.account.withdraw(self.amount, self.description)

    def _revert(self) -> None:
        self.account.deposit(self.amount, f"{UNDO_PREFIX}{self.description}")


class TransferCommand(Command):
    """
    Move money between two accounts: debit the source, then credit the
    destination. If the credit leg is rejected the debit is compensated
    before the error is re-raised, so a failed transfer leaves both
    balances as they were.
    """

    def __init__(self, source: Account, destination: Account, amount: AmountLike,
                 description: Optional[str] = None):
        if source is destination or source.account_number == destination.account_number:
            raise TransferError("Cannot transfer to the same account")
        super().__init__(amount, description or f"Transfer to {destination.account_number}")
        self.source = source
        self.destination = destination

    def _apply(self) -> Tuple[Transaction, Transaction]:
        out_tx = self.source.transfer_out(
            self.amount, f"Transfer to {self.destination.account_number}"
        )
        try:
            in_tx = self.destination.transfer_in(
                self.amount, f"Transfer from {self.source.account_number}"
            )
        except BankingError:
            self._compensate(self.source, f"Reversal: Transfer to {self.destination.account_number}")
            raise
        return out_tx, in_tx

    def _revert(self) -> None:
        self.destination.transfer_out(
            self.amount, f"{UNDO_PREFIX}Transfer from {self.source.account_number}"
        )
        try:
            self.source.transfer_in(
                self.amount, f"{UNDO_PREFIX}Transfer to {self.destination.account_number}"
            )
        except BankingError:
            self._compensate(self.destination, f"Reversal: {UNDO_PREFIX}Transfer from {self.source.account_number}")
            raise

    def _compensate(self, account: Account, description: str) -> None:
        log_action(
            self.logger, "warning", f"Second leg of {self.name} rejected, compensating {account.account_number}",
            action="compensate", resource=f"account:{account.account_number}",
            correlation_id=self.correlation_id, extra={"amount": str(self.amount)}
        )
        account.transfer_in(self.amount, description)


class CommandInvoker:
    """
    Executes commands and keeps a log of the successful ones so the most
    recent can be undone. There is no redo.
    """

    def __init__(self):
        self._history: List[Command] = []
        self.last_error: Optional[BankingError] = None
        self.logger = get_logger("pocket_ledger.commands")

    def execute_command(self, command: Command) -> bool:
        """
        Execute a command, logging it only if it succeeded.

        Failures are reported through the return value; the exception is
        kept in last_error for callers that need the detail.
        """
        try:
            command.execute()
        except BankingError as e:
            self.last_error = e
            log_action(
                self.logger, "warning", f"Command execution failed: {e}",
                action="execute_command", correlation_id=command.correlation_id,
                extra={"command": command.name, "error": type(e).__name__}
            )
            return False

        self.last_error = None
        self._history.append(command)
        return True

    def undo_last_command(self) -> Command:
        """
        Undo the most recently executed command and drop it from the log.

        A command whose undo is rejected stays in the log.

        Raises:
            EmptyLogError: If there is nothing to undo
        """
        if not self._history:
            raise EmptyLogError()

        command = self._history[-1]
        command.undo()
        self._history.pop()
        return command

    def history(self) -> List[Command]:
        """Logged commands in execution order"""
        return list(self._history)

    @property
    def last_command(self) -> Optional[Command]:
        return self._history[-1] if self._history else None

    @property
    def can_undo(self) -> bool:
        return bool(self._history)

    def __len__(self) -> int:
        return len(self._history)
