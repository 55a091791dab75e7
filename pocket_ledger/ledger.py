"""
Ledger Query Module

Read-only aggregation over the histories of a set of accounts. Nothing is
cached: every query rebuilds its result from the account histories, which
is fine for a handful of accounts.

Transfers between the accounts queried are internal movements, so the
monthly spending and growth figures count only deposits and withdrawals.
"""

from decimal import Decimal, ROUND_FLOOR
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Tuple, Union

from .accounts import Account
from .currency import ZERO
from .transactions import Transaction, TransactionKind


ALL_KINDS = "all"


def all_transactions(accounts: Iterable[Account]) -> List[Transaction]:
    """
    Every transaction of every account, most recent first.

    Transactions with equal timestamps are ordered by id, later ones first.
    """
    merged: List[Transaction] = []
    for account in accounts:
        merged.extend(account.history())
    return sorted(merged, key=lambda tx: (tx.timestamp, tx.id), reverse=True)


def filter_transactions(
    transactions: Iterable[Transaction],
    search: Optional[str] = None,
    kind: Union[TransactionKind, str, None] = None
) -> List[Transaction]:
    """
    Filter transactions by a search term and/or kind.

    Args:
        transactions: Transactions to filter; order is preserved
        search: Case-insensitive substring matched against the description
            and the kind value
        kind: TransactionKind, its value ("withdraw"), or "all"/None for any
    """
    if isinstance(kind, str):
        kind = None if kind == ALL_KINDS else TransactionKind(kind)

    term = search.strip().lower() if search else ""

    result = []
    for tx in transactions:
        if kind is not None and tx.kind is not kind:
            continue
        if term and term not in tx.description.lower() and term not in tx.kind.value:
            continue
        result.append(tx)
    return result


def transactions_in_month(transactions: Iterable[Transaction], year: int, month: int) -> List[Transaction]:
    """Transactions whose timestamp falls in the given calendar month"""
    return [tx for tx in transactions if tx.timestamp.year == year and tx.timestamp.month == month]


def total_balance(accounts: Iterable[Account]) -> Decimal:
    """Sum of all balances"""
    return sum((account.balance for account in accounts), ZERO)


def transaction_count(accounts: Iterable[Account]) -> int:
    """Number of transactions across all accounts"""
    return sum(len(account.history()) for account in accounts)


def _percent(part: Decimal, whole: Decimal) -> int:
    # Halves round towards positive infinity: 2.5 -> 3, -2.5 -> -2
    ratio = part / whole * Decimal('100')
    return int((ratio + Decimal('0.5')).to_integral_value(rounding=ROUND_FLOOR))


def account_distribution(accounts: Iterable[Account]) -> Dict[str, int]:
    """
    Share of the total balance held by each account, as rounded percentages.

    When the total is zero every share is 0. Rounded shares need not add up
    to exactly 100.
    """
    accounts = list(accounts)
    total = total_balance(accounts)
    if total == ZERO:
        return {account.account_number: 0 for account in accounts}
    return {account.account_number: _percent(account.balance, total) for account in accounts}


def _sum_kind(transactions: Iterable[Transaction], kind: TransactionKind) -> Decimal:
    return sum((tx.amount for tx in transactions if tx.kind is kind), ZERO)


def monthly_spending(accounts: Iterable[Account], year: Optional[int] = None,
                     month: Optional[int] = None) -> Decimal:
    """Total withdrawn in a month (defaults to the current UTC month)"""
    year, month = _default_month(year, month)
    monthly = transactions_in_month(all_transactions(accounts), year, month)
    return _sum_kind(monthly, TransactionKind.WITHDRAW)


def monthly_growth(accounts: Iterable[Account], year: Optional[int] = None,
                   month: Optional[int] = None) -> Tuple[Decimal, int]:
    """
    Net deposits minus withdrawals for a month and that net as a percentage.

    A positive net is expressed relative to the month's deposits, a zero or
    negative net relative to the month's withdrawals. A zero denominator is
    treated as 1.

    Returns:
        (net amount, rounded percentage)
    """
    year, month = _default_month(year, month)
    monthly = transactions_in_month(all_transactions(accounts), year, month)
    deposits = _sum_kind(monthly, TransactionKind.DEPOSIT)
    withdrawals = _sum_kind(monthly, TransactionKind.WITHDRAW)

    net = deposits - withdrawals
    if net > ZERO:
        return net, _percent(net, deposits or Decimal('1'))
    return net, _percent(net, withdrawals or Decimal('1'))


def format_growth(percent: int) -> str:
    """Display form of a growth percentage: "+12%", "-4%", "0%" """
    return f"+{percent}%" if percent > 0 else f"{percent}%"


def _default_month(year: Optional[int], month: Optional[int]) -> Tuple[int, int]:
    if year is None or month is None:
        now = datetime.now(timezone.utc)
        year = now.year if year is None else year
        month = now.month if month is None else month
    return year, month
