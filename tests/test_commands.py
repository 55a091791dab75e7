"""
Test suite for commands module

Tests the command lifecycle, compensating undo operations, transfer
hardening and the command invoker's log.
"""

import logging
import pytest
from decimal import Decimal
from unittest.mock import patch

from pocket_ledger.accounts import open_current_account, open_fixed_deposit, open_savings_account
from pocket_ledger.commands import (
    CommandInvoker, DepositCommand, TransferCommand, WithdrawCommand
)
from pocket_ledger.exceptions import (
    AlreadyExecutedError, CommandStateError, EmptyLogError, InsufficientFundsError,
    InvalidAmountError, NotExecutedError, TransferError
)
from pocket_ledger.transactions import TransactionKind


class TestDepositCommand:
    """Test deposit command lifecycle"""

    def setup_method(self):
        self.account = open_savings_account("SAV-1", 1000)

    def test_execute_and_undo(self):
        """Test undo restores the balance and keeps both records"""
        command = DepositCommand(self.account, 500, "Salary Credit")

        tx = command.execute()
        assert command.executed
        assert tx.kind == TransactionKind.DEPOSIT
        assert self.account.balance == Decimal('1500')

        command.undo()
        assert not command.executed
        assert self.account.balance == Decimal('1000')

        history = self.account.history()
        assert len(history) == 2
        assert history[1].kind == TransactionKind.WITHDRAW
        assert history[1].description == "Undo: Salary Credit"

    def test_execute_twice_fails(self):
        command = DepositCommand(self.account, 500)
        command.execute()

        with pytest.raises(AlreadyExecutedError, match="already executed"):
            command.execute()
        assert self.account.balance == Decimal('1500')

    def test_undo_before_execute_fails(self):
        command = DepositCommand(self.account, 500)
        with pytest.raises(NotExecutedError, match="not executed"):
            command.undo()

    def test_undo_twice_fails(self):
        command = DepositCommand(self.account, 500)
        command.execute()
        command.undo()

        with pytest.raises(NotExecutedError):
            command.undo()
        assert self.account.balance == Decimal('1000')

    def test_reexecute_after_undo(self):
        """Test the lifecycle allows executing again after an undo"""
        command = DepositCommand(self.account, 500)
        command.execute()
        command.undo()
        command.execute()

        assert command.executed
        assert self.account.balance == Decimal('1500')
        assert len(self.account.history()) == 3

    def test_invalid_amount_leaves_command_unexecuted(self):
        command = DepositCommand(self.account, 0)
        with pytest.raises(InvalidAmountError):
            command.execute()

        assert not command.executed
        assert self.account.history() == []

    def test_undo_rejected_when_money_spent(self):
        """Test undo fails cleanly if the deposit was already withdrawn"""
        account = open_current_account("CUR-1", 0)
        command = DepositCommand(account, 500)
        command.execute()
        account.withdraw(400)

        with pytest.raises(InsufficientFundsError):
            command.undo()
        assert command.executed
        assert account.balance == Decimal('100')

    def test_state_errors_share_a_base(self):
        assert issubclass(AlreadyExecutedError, CommandStateError)
        assert issubclass(NotExecutedError, CommandStateError)


class TestWithdrawCommand:
    """Test withdraw command lifecycle"""

    def test_execute_and_undo(self):
        account = open_current_account("CUR-1", 85420)
        command = WithdrawCommand(account, 2500, "ATM Withdrawal")

        command.execute()
        assert account.balance == Decimal('82920')

        command.undo()
        assert account.balance == Decimal('85420')
        assert account.history()[-1].kind == TransactionKind.DEPOSIT
        assert account.history()[-1].description == "Undo: ATM Withdrawal"

    def test_insufficient_funds_not_executed(self):
        account = open_current_account("CUR-1", 100)
        command = WithdrawCommand(account, 101)

        with pytest.raises(InsufficientFundsError):
            command.execute()
        assert not command.executed
        assert account.balance == Decimal('100')
        assert account.history() == []


class TestTransferCommand:
    """Test two-account transfers"""

    def setup_method(self):
        self.source = open_savings_account("A", 5000)
        self.destination = open_current_account("B", 1000)

    def test_execute(self):
        """Test A -> B moves the amount and records one leg per account"""
        command = TransferCommand(self.source, self.destination, 1000)
        out_tx, in_tx = command.execute()

        assert self.source.balance == Decimal('4000')
        assert self.destination.balance == Decimal('2000')
        assert out_tx.kind == TransactionKind.TRANSFER_OUT
        assert out_tx.description == "Transfer to B"
        assert in_tx.kind == TransactionKind.TRANSFER_IN
        assert in_tx.description == "Transfer from A"
        assert len(self.source.history()) == 1
        assert len(self.destination.history()) == 1

    def test_undo_restores_both_balances(self):
        """Test undo reverses both legs and keeps the audit trail"""
        command = TransferCommand(self.source, self.destination, 1000)
        command.execute()
        command.undo()

        assert self.source.balance == Decimal('5000')
        assert self.destination.balance == Decimal('1000')
        assert len(self.source.history()) == 2
        assert len(self.destination.history()) == 2
        assert self.destination.history()[-1].description == "Undo: Transfer from A"
        assert self.source.history()[-1].description == "Undo: Transfer to B"

    def test_undo_debits_destination_first(self):
        """Test the compensation runs in reverse order"""
        command = TransferCommand(self.source, self.destination, 1000)
        command.execute()
        command.undo()

        undo_out = self.destination.history()[-1]
        undo_in = self.source.history()[-1]
        assert undo_out.kind == TransactionKind.TRANSFER_OUT
        assert undo_in.kind == TransactionKind.TRANSFER_IN
        assert undo_out.id < undo_in.id

    def test_default_description(self):
        command = TransferCommand(self.source, self.destination, 10)
        assert command.description == "Transfer to B"

        custom = TransferCommand(self.source, self.destination, 10, "Rent share")
        assert custom.description == "Rent share"

    def test_insufficient_funds_leaves_both_untouched(self):
        command = TransferCommand(self.source, self.destination, 5001)

        with pytest.raises(InsufficientFundsError):
            command.execute()
        assert not command.executed
        assert self.source.balance == Decimal('5000')
        assert self.destination.balance == Decimal('1000')
        assert self.destination.history() == []

    def test_failed_credit_leg_is_compensated(self):
        """Test a rejected second leg re-credits the source"""
        command = TransferCommand(self.source, self.destination, 1000)

        with patch.object(self.destination, "transfer_in", side_effect=InvalidAmountError("rejected")):
            with pytest.raises(InvalidAmountError, match="rejected"):
                command.execute()

        assert not command.executed
        assert self.source.balance == Decimal('5000')
        assert self.destination.balance == Decimal('1000')
        assert self.source.verify_balance()
        assert self.source.history()[-1].description == "Reversal: Transfer to B"

    def test_undo_rejected_when_destination_spent(self):
        """Test undo fails without changes if the destination can't repay"""
        command = TransferCommand(self.source, self.destination, 1000)
        command.execute()
        self.destination.withdraw(1500)

        with pytest.raises(InsufficientFundsError):
            command.undo()
        assert command.executed
        assert self.source.balance == Decimal('4000')
        assert self.destination.balance == Decimal('500')

    def test_same_account_rejected(self):
        with pytest.raises(TransferError, match="same account"):
            TransferCommand(self.source, self.source, 100)

    def test_fixed_deposit_can_fund_transfer(self):
        fd = open_fixed_deposit("FD", 400000)
        TransferCommand(fd, self.destination, 10000).execute()
        assert fd.balance == Decimal('390000')


class TestCommandInvoker:
    """Test command log and undo-last"""

    def setup_method(self):
        self.invoker = CommandInvoker()
        self.savings = open_savings_account("****4589", 245750)
        self.current = open_current_account("****9210", 85420)

    def test_successful_command_logged(self):
        command = DepositCommand(self.savings, 5000, "Salary Credit")

        assert self.invoker.execute_command(command) is True
        assert self.invoker.history() == [command]
        assert self.invoker.last_command is command
        assert self.invoker.can_undo
        assert len(self.invoker) == 1
        assert self.invoker.last_error is None

    def test_failed_command_returns_false(self, caplog):
        """Test failures are swallowed into False and kept for inspection"""
        command = WithdrawCommand(self.current, 10 ** 7)

        with caplog.at_level(logging.WARNING, logger="pocket_ledger.commands"):
            assert self.invoker.execute_command(command) is False

        assert self.invoker.history() == []
        assert isinstance(self.invoker.last_error, InsufficientFundsError)
        assert self.current.balance == Decimal('85420')
        assert any("Command execution failed" in r.getMessage() for r in caplog.records)

    def test_already_executed_returns_false(self):
        command = DepositCommand(self.savings, 1)
        assert self.invoker.execute_command(command)
        assert self.invoker.execute_command(command) is False
        assert isinstance(self.invoker.last_error, AlreadyExecutedError)
        assert len(self.invoker) == 1

    def test_last_error_cleared_on_success(self):
        self.invoker.execute_command(DepositCommand(self.savings, 0))
        assert self.invoker.last_error is not None

        self.invoker.execute_command(DepositCommand(self.savings, 1))
        assert self.invoker.last_error is None

    def test_undo_last_command(self):
        """Test undo reverses the most recent command only"""
        first = DepositCommand(self.savings, 5000)
        second = WithdrawCommand(self.current, 2500)
        self.invoker.execute_command(first)
        self.invoker.execute_command(second)

        undone = self.invoker.undo_last_command()

        assert undone is second
        assert not second.executed
        assert first.executed
        assert self.current.balance == Decimal('85420')
        assert self.savings.balance == Decimal('250750')
        assert self.invoker.history() == [first]

    def test_undo_everything_then_empty(self):
        self.invoker.execute_command(DepositCommand(self.savings, 5000))
        self.invoker.execute_command(TransferCommand(self.savings, self.current, 10000))

        self.invoker.undo_last_command()
        self.invoker.undo_last_command()

        assert self.savings.balance == Decimal('245750')
        assert self.current.balance == Decimal('85420')
        assert not self.invoker.can_undo
        with pytest.raises(EmptyLogError, match="No commands to undo"):
            self.invoker.undo_last_command()

    def test_empty_log(self):
        with pytest.raises(EmptyLogError):
            self.invoker.undo_last_command()

    def test_failed_undo_keeps_command_logged(self):
        command = DepositCommand(self.current, 1000)
        self.invoker.execute_command(command)
        self.current.withdraw(86000)

        with pytest.raises(InsufficientFundsError):
            self.invoker.undo_last_command()
        assert self.invoker.history() == [command]

    def test_history_is_a_snapshot(self):
        self.invoker.execute_command(DepositCommand(self.savings, 1))
        self.invoker.history().clear()
        assert len(self.invoker.history()) == 1

    def test_balance_invariant_after_mixed_commands(self):
        """Test every account still reconciles with its history"""
        commands = [
            DepositCommand(self.savings, 5000, "Salary Credit"),
            WithdrawCommand(self.current, 2500, "ATM Withdrawal"),
            TransferCommand(self.savings, self.current, 10000),
            WithdrawCommand(self.current, 1500, "Electricity Bill Payment"),
            WithdrawCommand(self.current, 10 ** 9, "Too much"),
        ]
        results = [self.invoker.execute_command(c) for c in commands]
        self.invoker.undo_last_command()

        assert results == [True, True, True, True, False]
        assert self.savings.verify_balance()
        assert self.current.verify_balance()
        assert self.current.balance == Decimal('92920')
