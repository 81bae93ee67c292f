"""Fungible token primitive used for settlement.

The pool never trusts amounts a caller claims to have paid: it measures its
own balance_of before and after every settlement callback.

InMemoryToken is a plain balance ledger. Every change it makes inside a pool
transaction is journaled as an inverse delta, so a failed operation takes
back only its own transfers and leaves other holders' activity intact.
"""

from __future__ import annotations

import threading
from functools import partial
from typing import Protocol, runtime_checkable

from clamm.errors import InsufficientInput
from clamm.models.types import normalize_address
from clamm.pool.transaction import record_undo

__all__ = ["Token", "InMemoryToken", "InsufficientBalance", "InsufficientAllowance"]


class InsufficientBalance(InsufficientInput):
    """Sender holds less than the transfer amount."""

    pass


class InsufficientAllowance(InsufficientInput):
    """Spender is approved for less than the transfer amount."""

    pass


@runtime_checkable
class Token(Protocol):
    """Minimal token interface the pool depends on."""

    address: str

    def balance_of(self, holder: str) -> int: ...

    def transfer(self, sender: str, recipient: str, amount: int) -> bool: ...

    def transfer_from(self, spender: str, holder: str, recipient: str, amount: int) -> bool: ...


class InMemoryToken:
    """Token balances and allowances held in dictionaries."""

    def __init__(self, address: str, symbol: str = "", decimals: int = 18) -> None:
        self.address = normalize_address(address)
        self.symbol = symbol
        self.decimals = decimals
        self._balances: dict[str, int] = {}
        self._allowances: dict[tuple[str, str], int] = {}
        self._lock = threading.RLock()

    def __repr__(self) -> str:
        return f"InMemoryToken({self.symbol or self.address})"

    @property
    def total_supply(self) -> int:
        with self._lock:
            return sum(self._balances.values())

    def balance_of(self, holder: str) -> int:
        with self._lock:
            return self._balances.get(normalize_address(holder), 0)

    def allowance(self, holder: str, spender: str) -> int:
        with self._lock:
            return self._allowances.get((normalize_address(holder), normalize_address(spender)), 0)

    # --- Ledger deltas ---

    def _add_balance(self, holder: str, delta: int) -> None:
        with self._lock:
            self._balances[holder] = self._balances.get(holder, 0) + delta

    def _add_allowance(self, key: tuple[str, str], delta: int) -> None:
        with self._lock:
            self._allowances[key] = self._allowances.get(key, 0) + delta

    def _move(self, sender: str, recipient: str, amount: int) -> None:
        with self._lock:
            self._add_balance(sender, -amount)
            self._add_balance(recipient, amount)

    # --- Operations ---

    def mint(self, holder: str, amount: int) -> None:
        """Create `amount` new tokens for `holder`."""
        if amount < 0:
            raise ValueError(f"Cannot mint negative amount {amount}")
        holder = normalize_address(holder)
        self._add_balance(holder, amount)
        record_undo(partial(self._add_balance, holder, -amount))

    def approve(self, holder: str, spender: str, amount: int) -> bool:
        key = (normalize_address(holder), normalize_address(spender))
        with self._lock:
            delta = amount - self._allowances.get(key, 0)
            self._add_allowance(key, delta)
        record_undo(partial(self._add_allowance, key, -delta))
        return True

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        """Move tokens from sender to recipient.

        Raises:
            InsufficientBalance: If sender's balance is below amount
        """
        if amount < 0:
            raise ValueError(f"Cannot transfer negative amount {amount}")
        sender, recipient = normalize_address(sender), normalize_address(recipient)
        with self._lock:
            balance = self._balances.get(sender, 0)
            if balance < amount:
                raise InsufficientBalance(
                    f"{self.symbol or self.address}: {sender} holds {balance}, needs {amount}"
                )
            self._move(sender, recipient, amount)
        record_undo(partial(self._move, recipient, sender, amount))
        return True

    def transfer_from(self, spender: str, holder: str, recipient: str, amount: int) -> bool:
        """Move tokens on behalf of `holder` using the spender's allowance.

        Raises:
            InsufficientAllowance: If the allowance is below amount
            InsufficientBalance: If holder's balance is below amount
        """
        key = (normalize_address(holder), normalize_address(spender))
        with self._lock:
            allowed = self._allowances.get(key, 0)
            if allowed < amount:
                raise InsufficientAllowance(
                    f"{self.symbol or self.address}: {key[1]} may spend {allowed} of {key[0]}, "
                    f"needs {amount}"
                )
            self.transfer(holder, recipient, amount)
            self._add_allowance(key, -amount)
        record_undo(partial(self._add_allowance, key, amount))
        return True
