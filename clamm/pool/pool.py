"""Concentrated-liquidity pool state machine.

The pool owns all of its state: current price and tick, active liquidity,
global fee growth, the tick ledger and bitmap, positions and the oracle.
Every mutating operation is a transaction:
- it runs under the pool lock (other threads wait, re-entrant calls fail)
- pool-side state is fully updated before any settlement callback runs
- if anything raises, pool state and journaled token transfers are rolled back,
  together with any other pool or token the operation reached through a callback
"""

from __future__ import annotations

import copy
import threading
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from functools import partial
from typing import Any

import structlog

from clamm.errors import (
    AlreadyInitialized,
    FlashLoanNotPaid,
    InsufficientInput,
    InvalidPriceLimit,
    InvalidRange,
    Locked,
    NotEnoughLiquidity,
    PoolNotInitialized,
    TransferFailed,
    ZeroAmount,
    ZeroLiquidity,
)
from clamm.math.fixed_point import Q128, add_delta, mul_div, mul_div_rounding_up
from clamm.math.sqrt_price_math import get_amount0_delta_signed, get_amount1_delta_signed
from clamm.math.swap_math import FEE_DENOMINATOR, compute_swap_step
from clamm.math.tick_math import (
    MAX_SQRT_RATIO,
    MAX_TICK,
    MIN_SQRT_RATIO,
    MIN_TICK,
    get_sqrt_ratio_at_tick,
    get_tick_at_sqrt_ratio,
)
from clamm.models.state import PoolSnapshot, PositionSnapshot, Slot0, TickSnapshot
from clamm.models.types import normalize_address
from clamm.pool.oracle import Oracle, PriceOracle
from clamm.pool.position import PositionInfo, PositionLedger
from clamm.pool.settlement import SettlementCallback
from clamm.pool.tick import TickLedger, tick_spacing_to_max_liquidity_per_tick
from clamm.pool.tick_bitmap import TickBitmap
from clamm.pool.token import Token
from clamm.pool.transaction import atomic
from clamm.safe_int import S

__all__ = ["Pool"]

logger = structlog.get_logger()

_STATE_FIELDS = (
    "sqrt_price_x96",
    "tick",
    "observation_index",
    "observation_cardinality",
    "observation_cardinality_next",
    "liquidity",
    "fee_growth_global0_x128",
    "fee_growth_global1_x128",
    "ticks",
    "tick_bitmap",
    "positions",
    "oracle",
)


class Pool:
    """A single token pair at a single fee tier.

    Attributes:
        address: Holder identity of the pool in the token ledgers
        token0: Token with the lower address
        token1: Token with the higher address
        fee: Swap fee in hundredths of a bip
        tick_spacing: Positions may only use ticks that are multiples of this
        sqrt_price_x96: Current Q64.96 sqrt price (0 until initialized)
        tick: Current tick, consistent with sqrt_price_x96 between calls
        liquidity: Liquidity active at the current tick
        fee_growth_global0_x128: Token0 fees per unit of liquidity, ever
        fee_growth_global1_x128: Token1 fees per unit of liquidity, ever
    """

    def __init__(
        self,
        address: str,
        token0: Token,
        token1: Token,
        fee: int,
        tick_spacing: int,
        oracle: PriceOracle | None = None,
        clock: Callable[[], int] | None = None,
    ) -> None:
        if not 0 <= fee < FEE_DENOMINATOR:
            raise ValueError(f"Fee {fee} must be in [0, {FEE_DENOMINATOR})")
        if tick_spacing <= 0:
            raise ValueError(f"Tick spacing {tick_spacing} must be positive")

        self.address = normalize_address(address)
        self.token0 = token0
        self.token1 = token1
        self.fee = fee
        self.tick_spacing = tick_spacing
        self.max_liquidity_per_tick = tick_spacing_to_max_liquidity_per_tick(tick_spacing)

        self.sqrt_price_x96 = 0
        self.tick = 0
        self.observation_index = 0
        self.observation_cardinality = 0
        self.observation_cardinality_next = 0
        self.liquidity = 0
        self.fee_growth_global0_x128 = 0
        self.fee_growth_global1_x128 = 0

        self.ticks = TickLedger(self.max_liquidity_per_tick)
        self.tick_bitmap = TickBitmap()
        self.positions = PositionLedger()
        self.oracle: PriceOracle = oracle if oracle is not None else Oracle()

        self._clock = clock or (lambda: int(time.time()))
        self._mutex = threading.RLock()
        self._unlocked = False

    def __repr__(self) -> str:
        return (
            f"Pool({self.address}, fee={self.fee}, tick={self.tick}, "
            f"liquidity={self.liquidity})"
        )

    @property
    def initialized(self) -> bool:
        return self.sqrt_price_x96 != 0

    # --- Transactions ---

    def _capture(self) -> dict[str, Any]:
        return copy.deepcopy({name: getattr(self, name) for name in _STATE_FIELDS})

    def _restore(self, state: dict[str, Any]) -> None:
        with self._mutex:
            for name, value in state.items():
                setattr(self, name, value)

    @contextmanager
    def _transaction(self, operation: str) -> Iterator[None]:
        """Run one operation atomically under the pool lock.

        Called from another pool's settlement callback, the operation joins
        that pool's transaction and keeps this pool locked until it ends.

        Raises:
            PoolNotInitialized: If the pool has no price yet
            Locked: If called from inside this pool's own settlement callback
        """
        with atomic() as transaction:
            self._mutex.acquire()
            transaction.on_close(self._mutex.release)
            if not self.initialized:
                raise PoolNotInitialized(f"Pool {self.address} is not initialized")
            if not self._unlocked:
                raise Locked(f"Pool {self.address} is locked during {operation}")
            self._unlocked = False
            try:
                transaction.record(partial(self._restore, self._capture()))
                yield
            except Exception as err:
                logger.debug(
                    "pool_operation_reverted",
                    pool=self.address,
                    operation=operation,
                    error=type(err).__name__,
                )
                raise
            finally:
                self._unlocked = True

    # --- Token helpers ---

    def _balance0(self) -> int:
        return self.token0.balance_of(self.address)

    def _balance1(self) -> int:
        return self.token1.balance_of(self.address)

    def _transfer(self, token: Token, recipient: str, amount: int) -> None:
        try:
            ok = token.transfer(self.address, recipient, amount)
        except Exception as err:
            raise TransferFailed(f"Transfer of {amount} {token.address} to {recipient} failed") from err
        if not ok:
            raise TransferFailed(f"Transfer of {amount} {token.address} to {recipient} returned False")

    def _now(self) -> int:
        return self._clock()

    # --- Initialization ---

    def initialize(self, sqrt_price_x96: int) -> int:
        """Set the starting price. Can only be called once.

        Args:
            sqrt_price_x96: Initial Q64.96 sqrt price

        Returns:
            The tick of the initial price

        Raises:
            AlreadyInitialized: If the price was already set
            DomainError: If the price is outside the legal domain
        """
        with self._mutex:
            if self.initialized:
                raise AlreadyInitialized(f"Pool {self.address} is already initialized")
            tick = get_tick_at_sqrt_ratio(sqrt_price_x96)
            cardinality, cardinality_next = self.oracle.initialize(self._now())

            self.sqrt_price_x96 = sqrt_price_x96
            self.tick = tick
            self.observation_index = 0
            self.observation_cardinality = cardinality
            self.observation_cardinality_next = cardinality_next
            self._unlocked = True

        logger.info(
            "pool_initialized",
            pool=self.address,
            sqrt_price_x96=sqrt_price_x96,
            tick=tick,
        )
        return tick

    # --- Positions ---

    def _check_ticks(self, tick_lower: int, tick_upper: int) -> None:
        if tick_lower >= tick_upper:
            raise InvalidRange(f"Lower tick {tick_lower} must be below upper tick {tick_upper}")
        if tick_lower < MIN_TICK or tick_upper > MAX_TICK:
            raise InvalidRange(
                f"Range [{tick_lower}, {tick_upper}] outside [{MIN_TICK}, {MAX_TICK}]"
            )
        if tick_lower % self.tick_spacing or tick_upper % self.tick_spacing:
            raise InvalidRange(
                f"Range [{tick_lower}, {tick_upper}] not aligned to spacing {self.tick_spacing}"
            )

    def _update_position(
        self,
        owner: str,
        tick_lower: int,
        tick_upper: int,
        liquidity_delta: int,
    ) -> PositionInfo:
        position = self.positions.get(owner, tick_lower, tick_upper)
        fee_growth_global0 = self.fee_growth_global0_x128
        fee_growth_global1 = self.fee_growth_global1_x128

        flipped_lower = False
        flipped_upper = False
        if liquidity_delta != 0:
            flipped_lower = self.ticks.update(
                tick_lower, self.tick, liquidity_delta, fee_growth_global0, fee_growth_global1, False
            )
            flipped_upper = self.ticks.update(
                tick_upper, self.tick, liquidity_delta, fee_growth_global0, fee_growth_global1, True
            )
            if flipped_lower:
                self.tick_bitmap.flip_tick(tick_lower, self.tick_spacing)
            if flipped_upper:
                self.tick_bitmap.flip_tick(tick_upper, self.tick_spacing)

        fee_growth_inside0, fee_growth_inside1 = self.ticks.get_fee_growth_inside(
            tick_lower, tick_upper, self.tick, fee_growth_global0, fee_growth_global1
        )
        position.update(liquidity_delta, fee_growth_inside0, fee_growth_inside1)

        # Ticks no longer referenced by any position are dropped
        if liquidity_delta < 0:
            if flipped_lower:
                self.ticks.clear(tick_lower)
            if flipped_upper:
                self.ticks.clear(tick_upper)
        return position

    def _modify_position(
        self,
        owner: str,
        tick_lower: int,
        tick_upper: int,
        liquidity_delta: int,
    ) -> tuple[PositionInfo, int, int]:
        """Apply a liquidity change and compute the signed token amounts it moves."""
        self._check_ticks(tick_lower, tick_upper)
        position = self._update_position(owner, tick_lower, tick_upper, liquidity_delta)

        amount0 = 0
        amount1 = 0
        sqrt_lower = get_sqrt_ratio_at_tick(tick_lower)
        sqrt_upper = get_sqrt_ratio_at_tick(tick_upper)
        if self.tick < tick_lower:
            # Range entirely above the price: only token0 is needed
            amount0 = get_amount0_delta_signed(sqrt_lower, sqrt_upper, liquidity_delta)
        elif self.tick < tick_upper:
            amount0 = get_amount0_delta_signed(self.sqrt_price_x96, sqrt_upper, liquidity_delta)
            amount1 = get_amount1_delta_signed(sqrt_lower, self.sqrt_price_x96, liquidity_delta)
            self.liquidity = add_delta(self.liquidity, liquidity_delta)
        else:
            # Range entirely below the price: only token1 is needed
            amount1 = get_amount1_delta_signed(sqrt_lower, sqrt_upper, liquidity_delta)
        return position, amount0, amount1

    def mint(
        self,
        owner: str,
        tick_lower: int,
        tick_upper: int,
        amount: int,
        callback: SettlementCallback,
        payload: bytes = b"",
    ) -> tuple[int, int]:
        """Add liquidity to a position and collect the tokens it requires.

        Args:
            owner: Position owner
            tick_lower: Lower tick of the range
            tick_upper: Upper tick of the range
            amount: Liquidity to add
            callback: Pays the computed amounts via on_mint_settle
            payload: Passed through to the callback

        Returns:
            (amount0, amount1) that were required

        Raises:
            ZeroLiquidity: If amount is zero
            InvalidRange: If the range is empty, unaligned or out of bounds
            InsufficientInput: If the callback did not pay in full
        """
        if amount <= 0:
            raise ZeroLiquidity(f"Mint amount must be positive, got {amount}")
        owner = normalize_address(owner)

        with self._transaction("mint"):
            _, amount0, amount1 = self._modify_position(owner, tick_lower, tick_upper, amount)

            balance0_before = self._balance0() if amount0 > 0 else 0
            balance1_before = self._balance1() if amount1 > 0 else 0
            callback.on_mint_settle(self, amount0, amount1, payload)
            if amount0 > 0 and balance0_before + amount0 > self._balance0():
                raise InsufficientInput(f"Mint callback paid less than {amount0} token0")
            if amount1 > 0 and balance1_before + amount1 > self._balance1():
                raise InsufficientInput(f"Mint callback paid less than {amount1} token1")

        logger.debug(
            "pool_mint",
            pool=self.address,
            owner=owner,
            tick_lower=tick_lower,
            tick_upper=tick_upper,
            amount=amount,
            amount0=amount0,
            amount1=amount1,
        )
        return amount0, amount1

    def burn(self, owner: str, tick_lower: int, tick_upper: int, amount: int) -> tuple[int, int]:
        """Remove liquidity from a position.

        The released tokens are credited to the position's owed balances and
        must be withdrawn with collect().

        Returns:
            (amount0, amount1) credited to the position

        Raises:
            ZeroLiquidity: If amount is zero
            Overflow: If the position holds less than amount
        """
        if amount <= 0:
            raise ZeroLiquidity(f"Burn amount must be positive, got {amount}")
        owner = normalize_address(owner)

        with self._transaction("burn"):
            position, amount0_int, amount1_int = self._modify_position(
                owner, tick_lower, tick_upper, -amount
            )
            amount0 = -amount0_int
            amount1 = -amount1_int
            if amount0 > 0 or amount1 > 0:
                position.tokens_owed0 += amount0
                position.tokens_owed1 += amount1

        logger.debug(
            "pool_burn",
            pool=self.address,
            owner=owner,
            tick_lower=tick_lower,
            tick_upper=tick_upper,
            amount=amount,
            amount0=amount0,
            amount1=amount1,
        )
        return amount0, amount1

    def poke(self, owner: str, tick_lower: int, tick_upper: int) -> tuple[int, int]:
        """Credit fees earned so far to an existing position.

        Returns:
            (tokens_owed0, tokens_owed1) after the update

        Raises:
            ZeroLiquidity: If the position holds no liquidity
        """
        owner = normalize_address(owner)
        with self._transaction("poke"):
            self._check_ticks(tick_lower, tick_upper)
            position = self._update_position(owner, tick_lower, tick_upper, 0)
        return position.tokens_owed0, position.tokens_owed1

    def collect(
        self,
        owner: str,
        recipient: str,
        tick_lower: int,
        tick_upper: int,
        amount0_requested: int,
        amount1_requested: int,
    ) -> tuple[int, int]:
        """Withdraw owed tokens from a position.

        Does not recompute fees; burn() or poke() does that. Requesting more
        than is owed withdraws everything owed.

        Returns:
            (amount0, amount1) actually transferred

        Raises:
            ValueError: If a requested amount is negative
            TransferFailed: If a token transfer to the recipient fails
        """
        if amount0_requested < 0 or amount1_requested < 0:
            raise ValueError(
                f"Collect amounts must be non-negative, got {amount0_requested}, {amount1_requested}"
            )
        owner = normalize_address(owner)
        with self._transaction("collect"):
            position = self.positions.find(owner, tick_lower, tick_upper)
            if position is None:
                return 0, 0

            amount0 = min(amount0_requested, position.tokens_owed0)
            amount1 = min(amount1_requested, position.tokens_owed1)
            if amount0 > 0:
                position.tokens_owed0 -= amount0
                self._transfer(self.token0, recipient, amount0)
            if amount1 > 0:
                position.tokens_owed1 -= amount1
                self._transfer(self.token1, recipient, amount1)

        logger.debug(
            "pool_collect",
            pool=self.address,
            owner=owner,
            recipient=recipient,
            amount0=amount0,
            amount1=amount1,
        )
        return amount0, amount1

    # --- Swaps ---

    def _check_price_limit(self, zero_for_one: bool, sqrt_price_limit_x96: int) -> None:
        if zero_for_one:
            if not MIN_SQRT_RATIO < sqrt_price_limit_x96 < self.sqrt_price_x96:
                raise InvalidPriceLimit(
                    f"Limit {sqrt_price_limit_x96} must be in "
                    f"({MIN_SQRT_RATIO}, {self.sqrt_price_x96}) when selling token0"
                )
        elif not self.sqrt_price_x96 < sqrt_price_limit_x96 < MAX_SQRT_RATIO:
            raise InvalidPriceLimit(
                f"Limit {sqrt_price_limit_x96} must be in "
                f"({self.sqrt_price_x96}, {MAX_SQRT_RATIO}) when selling token1"
            )

    def swap(
        self,
        recipient: str,
        zero_for_one: bool,
        amount_specified: int,
        sqrt_price_limit_x96: int,
        callback: SettlementCallback,
        payload: bytes = b"",
    ) -> tuple[int, int]:
        """Swap token0 for token1 or token1 for token0.

        The swap walks the curve range by range until the specified amount is
        used up or the price limit is reached. Stopping at the limit with
        amount left over is a partial fill, not an error.

        Args:
            recipient: Receives the output token
            zero_for_one: True to sell token0 (price falls)
            amount_specified: Exact input if positive, exact output if negative
            sqrt_price_limit_x96: Price the swap may not pass
            callback: Pays the input token via on_swap_settle
            payload: Passed through to the callback

        Returns:
            (amount0, amount1) signed pool balance changes, positive = paid in

        Raises:
            ZeroAmount: If amount_specified is zero
            InvalidPriceLimit: If the limit is on the wrong side of the price
            NotEnoughLiquidity: If active liquidity runs out before the swap ends
            InsufficientInput: If the callback did not pay in full
        """
        if amount_specified == 0:
            raise ZeroAmount("Swap amount must be non-zero")

        with self._transaction("swap"):
            self._check_price_limit(zero_for_one, sqrt_price_limit_x96)

            exact_input = amount_specified > 0
            amount_specified_remaining = amount_specified
            amount_calculated = 0
            sqrt_price_x96 = self.sqrt_price_x96
            tick = self.tick
            liquidity = self.liquidity
            fee_growth_global_x128 = (
                self.fee_growth_global0_x128 if zero_for_one else self.fee_growth_global1_x128
            )
            steps = 0

            while amount_specified_remaining != 0 and sqrt_price_x96 != sqrt_price_limit_x96:
                if liquidity == 0:
                    raise NotEnoughLiquidity(
                        f"No active liquidity at tick {tick} with {amount_specified_remaining} remaining"
                    )
                steps += 1
                sqrt_price_start_x96 = sqrt_price_x96

                tick_next, initialized = self.tick_bitmap.next_initialized_tick_within_one_word(
                    tick, self.tick_spacing, zero_for_one
                )
                # The bitmap is unaware of the domain bounds
                tick_next = max(MIN_TICK, min(MAX_TICK, tick_next))
                sqrt_price_next_x96 = get_sqrt_ratio_at_tick(tick_next)

                if zero_for_one:
                    sqrt_price_target_x96 = max(sqrt_price_next_x96, sqrt_price_limit_x96)
                else:
                    sqrt_price_target_x96 = min(sqrt_price_next_x96, sqrt_price_limit_x96)

                step = compute_swap_step(
                    sqrt_price_x96,
                    sqrt_price_target_x96,
                    liquidity,
                    amount_specified_remaining,
                    self.fee,
                )
                sqrt_price_x96 = step.sqrt_price_next_x96

                if exact_input:
                    amount_specified_remaining -= step.amount_in + step.fee_amount
                    amount_calculated -= step.amount_out
                else:
                    amount_specified_remaining += step.amount_out
                    amount_calculated += step.amount_in + step.fee_amount

                fee_growth_global_x128 = (
                    S(fee_growth_global_x128)
                    .wrapping_add(mul_div(step.fee_amount, Q128, liquidity))
                    .value
                )

                if sqrt_price_x96 == sqrt_price_next_x96:
                    if initialized:
                        if zero_for_one:
                            liquidity_net = self.ticks.cross(
                                tick_next, fee_growth_global_x128, self.fee_growth_global1_x128
                            )
                            liquidity_net = -liquidity_net
                        else:
                            liquidity_net = self.ticks.cross(
                                tick_next, self.fee_growth_global0_x128, fee_growth_global_x128
                            )
                        liquidity = add_delta(liquidity, liquidity_net)
                    # Moving down, the price sits at the bottom of the tick below
                    tick = tick_next - 1 if zero_for_one else tick_next
                elif sqrt_price_x96 != sqrt_price_start_x96:
                    tick = get_tick_at_sqrt_ratio(sqrt_price_x96)

            if tick != self.tick:
                self.observation_index, self.observation_cardinality = self.oracle.write(
                    self.observation_index,
                    self._now(),
                    self.tick,
                    self.observation_cardinality,
                    self.observation_cardinality_next,
                )
                self.tick = tick
            self.sqrt_price_x96 = sqrt_price_x96

            if liquidity != self.liquidity:
                self.liquidity = liquidity

            if zero_for_one:
                self.fee_growth_global0_x128 = fee_growth_global_x128
            else:
                self.fee_growth_global1_x128 = fee_growth_global_x128

            if zero_for_one == exact_input:
                amount0 = amount_specified - amount_specified_remaining
                amount1 = amount_calculated
            else:
                amount0 = amount_calculated
                amount1 = amount_specified - amount_specified_remaining

            if zero_for_one:
                if amount1 < 0:
                    self._transfer(self.token1, recipient, -amount1)
                balance0_before = self._balance0()
                callback.on_swap_settle(self, amount0, amount1, payload)
                if balance0_before + amount0 > self._balance0():
                    raise InsufficientInput(f"Swap callback paid less than {amount0} token0")
            else:
                if amount0 < 0:
                    self._transfer(self.token0, recipient, -amount0)
                balance1_before = self._balance1()
                callback.on_swap_settle(self, amount0, amount1, payload)
                if balance1_before + amount1 > self._balance1():
                    raise InsufficientInput(f"Swap callback paid less than {amount1} token1")

        logger.debug(
            "pool_swap",
            pool=self.address,
            zero_for_one=zero_for_one,
            amount0=amount0,
            amount1=amount1,
            sqrt_price_x96=sqrt_price_x96,
            tick=tick,
            liquidity=liquidity,
            steps=steps,
        )
        return amount0, amount1

    # --- Flash loans ---

    def flash(
        self,
        recipient: str,
        amount0: int,
        amount1: int,
        callback: SettlementCallback,
        payload: bytes = b"",
    ) -> tuple[int, int]:
        """Lend tokens for the duration of a callback.

        The callback must return each borrowed amount plus
        ceil(amount * fee / 1e6). Anything paid beyond principal accrues to
        in-range liquidity providers.

        Returns:
            (paid0, paid1) fees actually received

        Raises:
            NotEnoughLiquidity: If the pool has no active liquidity
            FlashLoanNotPaid: If the callback repaid less than principal plus fee
        """
        with self._transaction("flash"):
            if self.liquidity == 0:
                raise NotEnoughLiquidity("Flash loans need active liquidity")

            fee0 = mul_div_rounding_up(amount0, self.fee, FEE_DENOMINATOR)
            fee1 = mul_div_rounding_up(amount1, self.fee, FEE_DENOMINATOR)
            balance0_before = self._balance0()
            balance1_before = self._balance1()

            if amount0 > 0:
                self._transfer(self.token0, recipient, amount0)
            if amount1 > 0:
                self._transfer(self.token1, recipient, amount1)

            callback.on_flash_settle(self, fee0, fee1, payload)

            balance0_after = self._balance0()
            balance1_after = self._balance1()
            if balance0_before + fee0 > balance0_after:
                raise FlashLoanNotPaid(f"Flash loan of {amount0} token0 not repaid with fee {fee0}")
            if balance1_before + fee1 > balance1_after:
                raise FlashLoanNotPaid(f"Flash loan of {amount1} token1 not repaid with fee {fee1}")

            paid0 = balance0_after - balance0_before
            paid1 = balance1_after - balance1_before
            if paid0 > 0:
                self.fee_growth_global0_x128 = (
                    S(self.fee_growth_global0_x128)
                    .wrapping_add(mul_div(paid0, Q128, self.liquidity))
                    .value
                )
            if paid1 > 0:
                self.fee_growth_global1_x128 = (
                    S(self.fee_growth_global1_x128)
                    .wrapping_add(mul_div(paid1, Q128, self.liquidity))
                    .value
                )

        logger.debug(
            "pool_flash",
            pool=self.address,
            recipient=recipient,
            amount0=amount0,
            amount1=amount1,
            paid0=paid0,
            paid1=paid1,
        )
        return paid0, paid1

    # --- Oracle ---

    def increase_observation_cardinality_next(self, observation_cardinality_next: int) -> int:
        """Reserve oracle slots so more history can be kept.

        Returns:
            The cardinality the oracle will grow to
        """
        with self._transaction("increase_observation_cardinality_next"):
            old = self.observation_cardinality_next
            new = self.oracle.grow(old, observation_cardinality_next)
            self.observation_cardinality_next = new
        if new != old:
            logger.debug("pool_observation_cardinality_next", pool=self.address, old=old, new=new)
        return new

    def observe(self, seconds_agos: list[int]) -> list[int]:
        """Tick cumulatives as of each of `seconds_agos` before now.

        Raises:
            OracleError: If a requested time predates the stored history
        """
        with self._mutex:
            return self.oracle.observe(
                self._now(),
                seconds_agos,
                self.tick,
                self.observation_index,
                self.observation_cardinality,
            )

    # --- Read-only queries ---
    # Reads wait for any operation in progress on another thread, so they
    # never see a half-applied swap or one that is about to be rolled back.

    def slot0(self) -> Slot0:
        with self._mutex:
            return Slot0(
                sqrt_price_x96=self.sqrt_price_x96,
                tick=self.tick,
                observation_index=self.observation_index,
                observation_cardinality=self.observation_cardinality,
                observation_cardinality_next=self.observation_cardinality_next,
                unlocked=self._unlocked,
            )

    def tick_info(self, tick: int) -> TickSnapshot | None:
        with self._mutex:
            info = self.ticks.get(tick)
            if info is None:
                return None
            return TickSnapshot(
                tick=tick,
                liquidity_gross=info.liquidity_gross,
                liquidity_net=info.liquidity_net,
                fee_growth_outside0_x128=info.fee_growth_outside0_x128,
                fee_growth_outside1_x128=info.fee_growth_outside1_x128,
                initialized=info.initialized,
            )

    def position_info(self, owner: str, tick_lower: int, tick_upper: int) -> PositionSnapshot | None:
        owner = normalize_address(owner)
        with self._mutex:
            info = self.positions.find(owner, tick_lower, tick_upper)
            if info is None:
                return None
            return PositionSnapshot(
                owner=owner,
                tick_lower=tick_lower,
                tick_upper=tick_upper,
                liquidity=info.liquidity,
                fee_growth_inside0_last_x128=info.fee_growth_inside0_last_x128,
                fee_growth_inside1_last_x128=info.fee_growth_inside1_last_x128,
                tokens_owed0=info.tokens_owed0,
                tokens_owed1=info.tokens_owed1,
            )

    def snapshot(self) -> PoolSnapshot:
        """Full pool state, including every initialized tick."""
        with self._mutex:
            ticks = [self.tick_info(tick) for tick in self.ticks.initialized_ticks()]
            return PoolSnapshot(
                address=self.address,
                token0=self.token0.address,
                token1=self.token1.address,
                fee=self.fee,
                tick_spacing=self.tick_spacing,
                max_liquidity_per_tick=self.max_liquidity_per_tick,
                slot0=self.slot0(),
                liquidity=self.liquidity,
                fee_growth_global0_x128=self.fee_growth_global0_x128,
                fee_growth_global1_x128=self.fee_growth_global1_x128,
                ticks=[t for t in ticks if t is not None],
            )
