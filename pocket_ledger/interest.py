"""
Interest Strategy Module

Interest formulas are strategies, looked up by account variant, so a new
account variant only needs a new strategy. All strategies compute simple
interest from the current balance and never touch the account.
"""

from decimal import Decimal
from abc import ABC, abstractmethod
from types import MappingProxyType
from typing import TYPE_CHECKING, Dict, Iterable, Mapping, Optional

from .exceptions import StrategyNotConfiguredError
from .products import AccountVariant

if TYPE_CHECKING:
    from .accounts import Account


HUNDRED = Decimal('100')
MONTHS_PER_YEAR = Decimal('12')


class InterestStrategy(ABC):
    """Interest calculation capability"""

    @abstractmethod
    def calculate(self, account: 'Account') -> Decimal:
        """Return the interest amount for the account's current state"""
        pass


class SimpleInterestStrategy(InterestStrategy):
    """Annual simple interest: balance * rate / 100"""

    def __init__(self, annual_rate: Decimal):
        self.annual_rate = Decimal(str(annual_rate))

    def calculate(self, account: 'Account') -> Decimal:
        return account.balance * self.annual_rate / HUNDRED

    def __repr__(self) -> str:
        return f"{type(self).__name__}(annual_rate={self.annual_rate})"


class SavingsInterestStrategy(SimpleInterestStrategy):
    """4.5% simple annual interest"""

    def __init__(self):
        super().__init__(AccountVariant.SAVINGS.interest_rate)


class CurrentInterestStrategy(SimpleInterestStrategy):
    """2.0% simple annual interest"""

    def __init__(self):
        super().__init__(AccountVariant.CURRENT.interest_rate)


class FixedDepositInterestStrategy(InterestStrategy):
    """
    7.5% annual interest prorated over the deposit tenure:
    balance * rate * tenure_months / (12 * 100)

    Accounts without a tenure are treated as a 12 month deposit.
    """

    def __init__(self, default_tenure_months: int = 12):
        self.annual_rate = AccountVariant.FIXED_DEPOSIT.interest_rate
        self.default_tenure_months = default_tenure_months

    def calculate(self, account: 'Account') -> Decimal:
        tenure = getattr(account, 'tenure_months', None) or self.default_tenure_months
        return account.balance * self.annual_rate * Decimal(tenure) / (MONTHS_PER_YEAR * HUNDRED)

    def __repr__(self) -> str:
        return f"FixedDepositInterestStrategy(default_tenure_months={self.default_tenure_months})"


DEFAULT_STRATEGIES: Mapping[AccountVariant, InterestStrategy] = MappingProxyType({
    AccountVariant.SAVINGS: SavingsInterestStrategy(),
    AccountVariant.CURRENT: CurrentInterestStrategy(),
    AccountVariant.FIXED_DEPOSIT: FixedDepositInterestStrategy(),
})


def strategy_for(variant: AccountVariant) -> InterestStrategy:
    """Return the default interest strategy for an account variant"""
    return DEFAULT_STRATEGIES[variant]


class InterestCalculator:
    """
    Strategy context: calculates interest with whichever strategy was
    selected last, independent of the account's own variant.
    """

    def __init__(self, strategy: Optional[InterestStrategy] = None):
        self._strategy = strategy

    @property
    def strategy(self) -> Optional[InterestStrategy]:
        return self._strategy

    def set_strategy(self, strategy: InterestStrategy) -> None:
        """Select the strategy used by calculate_interest()"""
        self._strategy = strategy

    def calculate_interest(self, account: 'Account') -> Decimal:
        """
        Calculate interest for an account with the selected strategy.

        Raises:
            StrategyNotConfiguredError: If no strategy has been selected
        """
        if self._strategy is None:
            raise StrategyNotConfiguredError()
        return self._strategy.calculate(account)

    def calculate_for_variant(self, account: 'Account') -> Decimal:
        """Select the account's default strategy, then calculate"""
        self.set_strategy(strategy_for(account.variant))
        return self.calculate_interest(account)


def interest_summary(accounts: Iterable['Account']) -> Dict[str, Decimal]:
    """Annual interest per account number, using each account's own strategy"""
    return {account.account_number: account.calculate_interest() for account in accounts}
