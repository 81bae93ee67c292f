"""Settlement callbacks.

The pool pays out first and then asks the caller to pay in, by invoking one of
the callback methods below synchronously. Whatever the callback does, the pool
re-measures its own token balances afterwards; the callback's word is never
trusted.

Payloads are opaque bytes to the pool. TokenPayer reads ABI-encoded payloads
naming the pool's tokens and the account to pull tokens from.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple, Protocol

import structlog
from eth_abi import decode, encode  # type: ignore[attr-defined]

from clamm.models.types import normalize_address

if TYPE_CHECKING:
    from clamm.pool.pool import Pool
    from clamm.pool.token import Token

__all__ = [
    "SettlementCallback",
    "CallbackData",
    "FlashCallbackData",
    "encode_callback_data",
    "decode_callback_data",
    "encode_flash_callback_data",
    "decode_flash_callback_data",
    "TokenPayer",
]

logger = structlog.get_logger()

CALLBACK_DATA_TYPES = ["address", "address", "address"]
FLASH_CALLBACK_DATA_TYPES = ["address", "address", "address", "uint256", "uint256"]


class SettlementCallback(Protocol):
    """Caller-side hooks invoked by the pool during settlement.

    Each hook must move the owed tokens into pool.address before returning.
    """

    def on_mint_settle(self, pool: Pool, amount0: int, amount1: int, payload: bytes) -> None:
        """Pay amount0 of token0 and amount1 of token1 for minted liquidity."""
        ...

    def on_swap_settle(
        self, pool: Pool, amount0_delta: int, amount1_delta: int, payload: bytes
    ) -> None:
        """Pay the positive delta; the negative delta has already been sent out."""
        ...

    def on_flash_settle(self, pool: Pool, fee0: int, fee1: int, payload: bytes) -> None:
        """Return the borrowed amounts plus fee0/fee1."""
        ...


class CallbackData(NamedTuple):
    token0: str
    token1: str
    payer: str


class FlashCallbackData(NamedTuple):
    token0: str
    token1: str
    payer: str
    # Total amounts to return, principal plus fee
    pay0: int
    pay1: int


def encode_callback_data(token0: str, token1: str, payer: str) -> bytes:
    """ABI-encode (address token0, address token1, address payer)."""
    return encode(CALLBACK_DATA_TYPES, [token0, token1, payer])


def decode_callback_data(payload: bytes) -> CallbackData:
    token0, token1, payer = decode(CALLBACK_DATA_TYPES, payload)
    return CallbackData(normalize_address(token0), normalize_address(token1), normalize_address(payer))


def encode_flash_callback_data(token0: str, token1: str, payer: str, pay0: int, pay1: int) -> bytes:
    """ABI-encode flash repayment instructions."""
    return encode(FLASH_CALLBACK_DATA_TYPES, [token0, token1, payer, pay0, pay1])


def decode_flash_callback_data(payload: bytes) -> FlashCallbackData:
    token0, token1, payer, pay0, pay1 = decode(FLASH_CALLBACK_DATA_TYPES, payload)
    return FlashCallbackData(
        normalize_address(token0),
        normalize_address(token1),
        normalize_address(payer),
        pay0,
        pay1,
    )


class TokenPayer:
    """Settles callbacks by pulling tokens from the payer named in the payload.

    The payer must have approved this object's address as a spender on both
    tokens. Payloads naming tokens other than the calling pool's are rejected.
    """

    def __init__(self, address: str) -> None:
        self.address = normalize_address(address)

    def _check_pool(self, pool: Pool, token0: str, token1: str) -> None:
        if token0 != pool.token0.address or token1 != pool.token1.address:
            raise ValueError(
                f"Callback payload tokens ({token0}, {token1}) do not match pool {pool.address}"
            )

    def _pay(self, pool: Pool, token: Token, payer: str, amount: int) -> None:
        if amount <= 0:
            return
        token.transfer_from(self.address, payer, pool.address, amount)

    def on_mint_settle(self, pool: Pool, amount0: int, amount1: int, payload: bytes) -> None:
        data = decode_callback_data(payload)
        self._check_pool(pool, data.token0, data.token1)
        self._pay(pool, pool.token0, data.payer, amount0)
        self._pay(pool, pool.token1, data.payer, amount1)

    def on_swap_settle(
        self, pool: Pool, amount0_delta: int, amount1_delta: int, payload: bytes
    ) -> None:
        data = decode_callback_data(payload)
        self._check_pool(pool, data.token0, data.token1)
        if amount0_delta > 0:
            self._pay(pool, pool.token0, data.payer, amount0_delta)
        if amount1_delta > 0:
            self._pay(pool, pool.token1, data.payer, amount1_delta)

    def on_flash_settle(self, pool: Pool, fee0: int, fee1: int, payload: bytes) -> None:
        data = decode_flash_callback_data(payload)
        self._check_pool(pool, data.token0, data.token1)
        logger.debug("flash_repay", pool=pool.address, pay0=data.pay0, pay1=data.pay1, fee0=fee0, fee1=fee1)
        self._pay(pool, pool.token0, data.payer, data.pay0)
        self._pay(pool, pool.token1, data.payer, data.pay1)
