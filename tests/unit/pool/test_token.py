"""Tests for InMemoryToken."""

import threading

import pytest

from clamm.errors import InsufficientInput, PoolError
from clamm.pool.token import (
    InMemoryToken,
    InsufficientAllowance,
    InsufficientBalance,
    Token,
)
from clamm.pool.transaction import atomic
from tests.helpers import ALICE, BOB, ROUTER, TOKEN0


@pytest.fixture
def token() -> InMemoryToken:
    token = InMemoryToken(TOKEN0, symbol="ETH")
    token.mint(ALICE, 100)
    return token


class TestInMemoryToken:
    def test_implements_protocol(self, token):
        assert isinstance(token, Token)

    def test_addresses_are_normalized(self):
        token = InMemoryToken(TOKEN0.upper().replace("0X", "0x"))
        token.mint(ALICE.upper().replace("0X", "0x"), 5)
        assert token.address == TOKEN0
        assert token.balance_of(ALICE) == 5

    def test_transfer(self, token):
        assert token.transfer(ALICE, BOB, 40) is True
        assert token.balance_of(ALICE) == 60
        assert token.balance_of(BOB) == 40
        assert token.total_supply == 100

    def test_transfer_insufficient_balance(self, token):
        with pytest.raises(InsufficientBalance):
            token.transfer(ALICE, BOB, 101)
        assert token.balance_of(ALICE) == 100

    def test_negative_amounts_rejected(self, token):
        with pytest.raises(ValueError):
            token.transfer(ALICE, BOB, -1)
        with pytest.raises(ValueError):
            token.mint(ALICE, -1)

    def test_transfer_from_spends_allowance(self, token):
        token.approve(ALICE, ROUTER, 50)
        token.transfer_from(ROUTER, ALICE, BOB, 30)
        assert token.balance_of(BOB) == 30
        assert token.allowance(ALICE, ROUTER) == 20

    def test_transfer_from_insufficient_allowance(self, token):
        token.approve(ALICE, ROUTER, 10)
        with pytest.raises(InsufficientAllowance):
            token.transfer_from(ROUTER, ALICE, BOB, 11)
        assert token.allowance(ALICE, ROUTER) == 10

    def test_errors_are_insufficient_input(self):
        """A payer short of funds fails settlement like any other underpayment."""
        assert issubclass(InsufficientBalance, InsufficientInput)
        assert issubclass(InsufficientAllowance, InsufficientInput)
        assert issubclass(InsufficientBalance, PoolError)


class TestJournaling:
    def test_outside_transaction_changes_are_final(self, token):
        token.transfer(ALICE, BOB, 10)
        assert token.balance_of(BOB) == 10

    def test_failed_transaction_undoes_every_change(self, token):
        token.approve(ALICE, ROUTER, 10)
        with pytest.raises(RuntimeError):
            with atomic():
                token.mint(BOB, 7)
                token.transfer(ALICE, BOB, 50)
                token.transfer_from(ROUTER, ALICE, BOB, 10)
                token.approve(ALICE, ROUTER, 99)
                raise RuntimeError("boom")

        assert token.balance_of(ALICE) == 100
        assert token.balance_of(BOB) == 0
        assert token.allowance(ALICE, ROUTER) == 10
        assert token.total_supply == 100

    def test_committed_transaction_keeps_changes(self, token):
        with atomic():
            token.transfer(ALICE, BOB, 50)
        assert token.balance_of(BOB) == 50

    def test_rollback_keeps_changes_made_by_other_threads(self, token):
        """Undo applies inverse deltas instead of restoring an old ledger."""
        started = threading.Event()
        release = threading.Event()
        errors = []

        def failing_transfer():
            try:
                with atomic():
                    token.transfer(ALICE, BOB, 30)
                    started.set()
                    release.wait(timeout=5)
                    raise RuntimeError("boom")
            except RuntimeError as err:
                errors.append(err)

        worker = threading.Thread(target=failing_transfer)
        worker.start()
        assert started.wait(timeout=5)
        token.transfer(ALICE, ROUTER, 20)
        token.mint(BOB, 5)
        release.set()
        worker.join(timeout=5)

        assert len(errors) == 1
        assert token.balance_of(ALICE) == 80
        assert token.balance_of(BOB) == 5
        assert token.balance_of(ROUTER) == 20
