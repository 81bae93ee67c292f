"""Tests for callback payload encoding and TokenPayer."""

import pytest

from clamm.pool.settlement import (
    CallbackData,
    TokenPayer,
    decode_callback_data,
    decode_flash_callback_data,
    encode_callback_data,
    encode_flash_callback_data,
)
from clamm.pool.token import InsufficientAllowance
from tests.helpers import ALICE, POOL_ADDRESS, ROUTER, TOKEN0, TOKEN1, TOKEN2, fund, make_pool


class TestCallbackData:
    """Tests for ABI payload encoding."""

    def test_encoded_as_three_abi_words(self):
        payload = encode_callback_data(TOKEN0, TOKEN1, ALICE)
        assert len(payload) == 3 * 32
        # Addresses are left-padded to 32 bytes
        assert payload[12:32].hex() == TOKEN0[2:]

    def test_decode_returns_lowercase_addresses(self):
        data = decode_callback_data(encode_callback_data(TOKEN0, TOKEN1, ALICE))
        assert data == CallbackData(TOKEN0, TOKEN1, ALICE)

    def test_flash_payload_carries_repayment(self):
        payload = encode_flash_callback_data(TOKEN0, TOKEN1, ALICE, 1001, 2002)
        assert len(payload) == 5 * 32
        data = decode_flash_callback_data(payload)
        assert (data.payer, data.pay0, data.pay1) == (ALICE, 1001, 2002)


class TestTokenPayer:
    """Tests for TokenPayer pulling tokens into the pool."""

    def test_mint_settle_pulls_both_tokens(self):
        pool = make_pool()
        fund(pool, ALICE)
        payer = TokenPayer(ROUTER)

        payer.on_mint_settle(pool, 10, 20, encode_callback_data(TOKEN0, TOKEN1, ALICE))
        assert pool.token0.balance_of(POOL_ADDRESS) == 10
        assert pool.token1.balance_of(POOL_ADDRESS) == 20

    def test_swap_settle_pays_only_positive_delta(self):
        pool = make_pool()
        fund(pool, ALICE)
        payer = TokenPayer(ROUTER)

        payer.on_swap_settle(pool, -5, 30, encode_callback_data(TOKEN0, TOKEN1, ALICE))
        assert pool.token0.balance_of(POOL_ADDRESS) == 0
        assert pool.token1.balance_of(POOL_ADDRESS) == 30

    def test_flash_settle_pays_requested_amounts(self):
        pool = make_pool()
        fund(pool, ALICE)
        payer = TokenPayer(ROUTER)

        payer.on_flash_settle(pool, 1, 2, encode_flash_callback_data(TOKEN0, TOKEN1, ALICE, 7, 9))
        assert pool.token0.balance_of(POOL_ADDRESS) == 7
        assert pool.token1.balance_of(POOL_ADDRESS) == 9

    def test_rejects_payload_for_other_pool(self):
        pool = make_pool()
        fund(pool, ALICE)
        payer = TokenPayer(ROUTER)

        with pytest.raises(ValueError):
            payer.on_mint_settle(pool, 10, 20, encode_callback_data(TOKEN0, TOKEN2, ALICE))

    def test_requires_allowance(self):
        pool = make_pool()
        fund(pool, ALICE, spender=ALICE)
        payer = TokenPayer(ROUTER)

        with pytest.raises(InsufficientAllowance):
            payer.on_mint_settle(pool, 10, 20, encode_callback_data(TOKEN0, TOKEN1, ALICE))
