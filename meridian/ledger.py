"""
Meridian Ledger Substrate Interface

The account storage and balance substrate is an external collaborator.
The control plane talks to it through ``TokenLedger``; ``InMemoryTokenLedger``
backs development, tests and the CLI demonstration.

Implementations must be:
- Consistent (balance checks and mutations are atomic per account)
- Non-negative (no account balance may go below zero)
- Freeze-aware (``move`` refuses frozen accounts unless told otherwise)
"""

import hashlib
import threading
from abc import ABC, abstractmethod
from typing import Dict, Set

from .errors import AccountFrozen, InsufficientBalance, InvalidAmount


def derive_address(seed_prefix: bytes, *keys: str) -> str:
    """
    Deterministic record address from a namespace tag and identities.

    The same (prefix, keys) always yields the same address, so a wallet's
    whitelist entry or an issuer's record can be located without an index.
    """
    h = hashlib.sha256()
    h.update(seed_prefix)
    for key in keys:
        h.update(b"\x00")
        h.update(key.encode("utf-8"))
    return h.hexdigest()


class TokenLedger(ABC):
    """Abstract balance and freeze-state primitives."""

    @abstractmethod
    def balance_of(self, account: str) -> int:
        pass

    @abstractmethod
    def credit(self, account: str, amount: int) -> int:
        """Add ``amount`` to ``account``. Returns the new balance."""
        pass

    @abstractmethod
    def debit(self, account: str, amount: int) -> int:
        """Remove ``amount`` from ``account``. Returns the new balance."""
        pass

    @abstractmethod
    def move(self, source: str, destination: str, amount: int, allow_frozen: bool = False) -> None:
        """
        Atomically debit ``source`` and credit ``destination``.

        Frozen accounts on either side raise ``AccountFrozen`` unless
        ``allow_frozen`` is set.
        """
        pass

    @abstractmethod
    def freeze(self, account: str) -> None:
        pass

    @abstractmethod
    def thaw(self, account: str) -> None:
        pass

    @abstractmethod
    def is_frozen(self, account: str) -> bool:
        pass


class InMemoryTokenLedger(TokenLedger):
    """
    In-memory ledger for development/testing.

    WARNING: Not suitable for production.
    - Not persistent across restarts
    - Not distributed/clustered
    """

    def __init__(self):
        self._balances: Dict[str, int] = {}
        self._frozen: Set[str] = set()
        self._lock = threading.RLock()

    def balance_of(self, account: str) -> int:
        with self._lock:
            return self._balances.get(account, 0)

    def credit(self, account: str, amount: int) -> int:
        _require_positive(amount)
        with self._lock:
            self._balances[account] = self._balances.get(account, 0) + amount
            return self._balances[account]

    def debit(self, account: str, amount: int) -> int:
        _require_positive(amount)
        with self._lock:
            balance = self._balances.get(account, 0)
            if amount > balance:
                raise InsufficientBalance(
                    f"balance {balance} < {amount}",
                    {"account": account, "balance": balance, "amount": amount},
                )
            self._balances[account] = balance - amount
            return self._balances[account]

    def move(self, source: str, destination: str, amount: int, allow_frozen: bool = False) -> None:
        with self._lock:
            if not allow_frozen:
                for account in (source, destination):
                    if account in self._frozen:
                        raise AccountFrozen(f"{account} is frozen", {"account": account})
            self.debit(source, amount)
            self.credit(destination, amount)

    def freeze(self, account: str) -> None:
        with self._lock:
            self._frozen.add(account)

    def thaw(self, account: str) -> None:
        with self._lock:
            self._frozen.discard(account)

    def is_frozen(self, account: str) -> bool:
        with self._lock:
            return account in self._frozen

    def total(self) -> int:
        """Sum of all balances."""
        with self._lock:
            return sum(self._balances.values())


def _require_positive(amount: int) -> None:
    if not isinstance(amount, int) or isinstance(amount, bool) or amount <= 0:
        raise InvalidAmount("amount must be a positive integer", {"amount": amount})
