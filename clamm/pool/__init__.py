"""Concentrated-liquidity pool and its ledgers."""

from .oracle import Observation, Oracle, PriceOracle
from .pool import Pool
from .position import PositionInfo, PositionKey, PositionLedger
from .settlement import (
    CallbackData,
    FlashCallbackData,
    SettlementCallback,
    TokenPayer,
    decode_callback_data,
    decode_flash_callback_data,
    encode_callback_data,
    encode_flash_callback_data,
)
from .tick import TickInfo, TickLedger, tick_spacing_to_max_liquidity_per_tick
from .tick_bitmap import TickBitmap
from .token import InMemoryToken, InsufficientAllowance, InsufficientBalance, Token
from .transaction import Transaction, atomic, current_transaction, record_undo

__all__ = [
    "Pool",
    # Ledgers
    "TickInfo",
    "TickLedger",
    "tick_spacing_to_max_liquidity_per_tick",
    "TickBitmap",
    "PositionInfo",
    "PositionKey",
    "PositionLedger",
    # Oracle
    "Observation",
    "Oracle",
    "PriceOracle",
    # Tokens and settlement
    "Token",
    "InMemoryToken",
    "InsufficientBalance",
    "InsufficientAllowance",
    "SettlementCallback",
    "TokenPayer",
    "CallbackData",
    "FlashCallbackData",
    "encode_callback_data",
    "decode_callback_data",
    "encode_flash_callback_data",
    "decode_flash_callback_data",
    # Transactions
    "Transaction",
    "atomic",
    "current_transaction",
    "record_undo",
]
