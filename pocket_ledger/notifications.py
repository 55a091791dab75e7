"""
Transaction Notification Module

Accounts notify observers synchronously after every committed balance
change. Observer objects and bound methods are held weakly so the account
never keeps them alive, while bare callbacks are owned by the registry.
An observer that raises is logged and skipped so the account's own state
is never affected.
"""

from datetime import datetime, timezone
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Protocol, Union, runtime_checkable
import inspect
import itertools
import weakref

from .config import get_config
from .currency import format_amount
from .logging_config import get_logger, log_action
from .transactions import Transaction


@runtime_checkable
class TransactionObserver(Protocol):
    """Anything that wants to hear about committed transactions"""

    def notify(self, transaction: Transaction) -> None:
        ...


Observer = Union[TransactionObserver, Callable[[Transaction], None]]


def _handler(observer) -> Optional[Callable[[Transaction], None]]:
    """The callable to invoke for an observer, or None if it is not one"""
    notify = getattr(observer, "notify", None)
    if callable(notify):
        return notify
    if callable(observer):
        return observer
    return None


class _StrongRef:
    """Same call shape as weakref.ref, for callbacks the registry owns"""

    __slots__ = ("_obj",)

    def __init__(self, obj):
        self._obj = obj

    def __call__(self):
        return self._obj


class ObserverRegistry:
    """
    Registry of observers keyed by integer tokens.

    Objects with a notify() method are held weakly, and bound methods are
    tracked with WeakMethod so registering ``customer.notify`` does not keep
    ``customer`` alive either. Any other callable (a function or lambda
    passed inline) has no other owner, so it is held strongly until it is
    removed.
    """

    def __init__(self, owner: str = ""):
        self.owner = owner
        self._refs: Dict[int, Callable[[], Optional[Observer]]] = {}
        self._tokens = itertools.count(1)
        self.logger = get_logger("pocket_ledger.notifications")

    @staticmethod
    def _same(existing, observer) -> bool:
        if existing is observer:
            return True
        return inspect.ismethod(observer) and existing == observer

    def _find(self, observer: Observer) -> Optional[int]:
        for token, ref in self._refs.items():
            existing = ref()
            if existing is not None and self._same(existing, observer):
                return token
        return None

    def _prune(self) -> None:
        dead = [token for token, ref in self._refs.items() if ref() is None]
        for token in dead:
            del self._refs[token]

    def add(self, observer: Observer) -> int:
        """Register an observer and return its token; re-adding returns the same token"""
        if _handler(observer) is None:
            raise TypeError(f"Observer {observer!r} must define notify() or be callable")

        self._prune()
        token = self._find(observer)
        if token is not None:
            return token

        if inspect.ismethod(observer):
            ref = weakref.WeakMethod(observer)
        elif callable(getattr(observer, "notify", None)):
            ref = weakref.ref(observer)
        else:
            ref = _StrongRef(observer)

        token = next(self._tokens)
        self._refs[token] = ref
        return token

    def remove(self, observer_or_token: Union[Observer, int]) -> bool:
        """Unregister by observer or token. Returns False if it was not registered"""
        if isinstance(observer_or_token, int) and not isinstance(observer_or_token, bool):
            token = observer_or_token
        else:
            token = self._find(observer_or_token)

        if token is None or token not in self._refs:
            return False
        del self._refs[token]
        return True

    def observers(self) -> List[Observer]:
        """Live observers in registration order"""
        self._prune()
        return [obs for obs in (ref() for ref in self._refs.values()) if obs is not None]

    def notify_all(self, transaction: Transaction) -> int:
        """
        Deliver a transaction to every live observer.

        Returns the number of observers that handled it without raising.
        """
        delivered = 0
        for observer in self.observers():
            handler = _handler(observer)
            try:
                handler(transaction)
                delivered += 1
            except Exception as e:
                # Balance and history are already committed
                self.logger.error(
                    f"Error in observer {getattr(handler, '__qualname__', repr(handler))} "
                    f"for transaction {transaction.id} on {self.owner}: {e}"
                )
        return delivered

    def __len__(self) -> int:
        return len(self.observers())

    def __contains__(self, observer) -> bool:
        return self._find(observer) is not None


_notification_ids = itertools.count(1)


@dataclass(frozen=True)
class Notification:
    """User-facing message produced for one transaction"""
    message: str
    transaction: Transaction
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    id: int = field(default_factory=lambda: next(_notification_ids))


def build_message(transaction: Transaction) -> str:
    """Human readable summary of a transaction"""
    return (
        f"Transaction on account {transaction.account_number}: "
        f"{transaction.kind.value.upper()} of {format_amount(transaction.amount)}"
    )


class Customer:
    """
    Account holder that observes their accounts and keeps a local
    notification history.
    """

    def __init__(self, name: str, email: str, max_notifications: Optional[int] = None):
        self.name = name
        self.email = email
        if max_notifications is None:
            max_notifications = get_config().max_notifications
        if max_notifications < 0:
            raise ValueError("max_notifications cannot be negative")
        self.max_notifications = max_notifications
        self._notifications: List[Notification] = []
        self.logger = get_logger("pocket_ledger.notifications")

    @property
    def notifications(self) -> List[Notification]:
        """Copy of the notification history, oldest first"""
        return list(self._notifications)

    def notify(self, transaction: Transaction) -> None:
        notification = Notification(message=build_message(transaction), transaction=transaction)
        self._notifications.append(notification)

        if self.max_notifications and len(self._notifications) > self.max_notifications:
            del self._notifications[:len(self._notifications) - self.max_notifications]

        self.display_notification(notification)

    def display_notification(self, notification: Notification) -> None:
        """Hook for presentation layers; logs by default"""
        log_action(
            self.logger, "info", f"Notification for {self.name}: {notification.message}",
            action="notify", resource=f"account:{notification.transaction.account_number}",
            extra={"notification_id": notification.id, "transaction_id": notification.transaction.id}
        )

    def clear_notifications(self) -> None:
        self._notifications.clear()

    def __repr__(self) -> str:
        return f"Customer(name={self.name!r}, email={self.email!r})"
