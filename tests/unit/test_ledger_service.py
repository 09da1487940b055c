"""Unit tests for LedgerService over the in-memory ledger repository."""

import random
from decimal import Decimal

import pytest

from src.bp_common.enums import TransactionType
from src.bp_common.errors import InsufficientBalanceError, InvalidAmountError
from src.bp_ledger.application.schemas import BalanceResponse, TopupResponse
from src.bp_ledger.application.service import LedgerService
from src.bp_ledger.domain.invariants import verify_transaction_chain


class TestCredit:
    async def test_creates_account_and_records_topup(self, db, ledger_repo) -> None:
        svc = LedgerService(repo=ledger_repo)
        tx = await svc.credit(db, "stu-1", Decimal("25.00"), TransactionType.TOPUP, "cash")
        assert tx.tx_type == "TOPUP"
        assert tx.amount == Decimal("25.00")
        assert tx.balance_after == Decimal("25.00")
        assert await svc.balance_of(db, "stu-1") == Decimal("25.00")

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-1.00"), "abc"])
    async def test_rejects_non_positive(self, db, ledger_repo, amount) -> None:
        svc = LedgerService(repo=ledger_repo)
        with pytest.raises(InvalidAmountError):
            await svc.credit(db, "stu-1", amount, TransactionType.TOPUP, "bad")
        assert ledger_repo.transactions == []

    async def test_rejects_billing_type(self, db, ledger_repo) -> None:
        svc = LedgerService(repo=ledger_repo)
        with pytest.raises(ValueError):
            await svc.credit(db, "stu-1", Decimal("1.00"), TransactionType.BILLING, "nope")

    async def test_refund_credit_tagged_refund(self, db, ledger_repo) -> None:
        svc = LedgerService(repo=ledger_repo)
        tx = await svc.refund_credit(db, "stu-1", Decimal("4.00"), "deleted doc")
        assert tx.tx_type == "REFUND"
        assert tx.amount > 0


class TestDebit:
    async def test_scenario_hundred_minus_ten(self, db, ledger_repo) -> None:
        svc = LedgerService(repo=ledger_repo)
        await svc.credit(db, "stu-1", Decimal("100.00"), TransactionType.TOPUP, "seed")

        tx = await svc.debit(db, "stu-1", Decimal("10.00"), "5-page SIMPLEX")

        assert tx.tx_type == "BILLING"
        assert tx.amount == Decimal("-10.00")
        assert tx.balance_after == Decimal("90.00")
        assert await svc.balance_of(db, "stu-1") == Decimal("90.00")
        billing = [t for t in ledger_repo.transactions if t.tx_type == "BILLING"]
        assert len(billing) == 1

    async def test_insufficient_balance_has_no_side_effects(self, db, ledger_repo) -> None:
        svc = LedgerService(repo=ledger_repo)
        await svc.credit(db, "stu-1", Decimal("5.00"), TransactionType.TOPUP, "seed")
        with pytest.raises(InsufficientBalanceError):
            await svc.debit(db, "stu-1", Decimal("5.01"), "too much")
        assert await svc.balance_of(db, "stu-1") == Decimal("5.00")
        assert len(ledger_repo.transactions) == 1

    async def test_unknown_account_cannot_be_debited(self, db, ledger_repo) -> None:
        svc = LedgerService(repo=ledger_repo)
        with pytest.raises(InsufficientBalanceError):
            await svc.debit(db, "ghost", Decimal("1.00"), "x")

    async def test_exact_balance_allowed(self, db, ledger_repo) -> None:
        svc = LedgerService(repo=ledger_repo)
        await svc.credit(db, "stu-1", Decimal("3.00"), TransactionType.TOPUP, "seed")
        tx = await svc.debit(db, "stu-1", Decimal("3.00"), "all")
        assert tx.balance_after == Decimal("0.00")

    async def test_has_sufficient_balance(self, db, ledger_repo) -> None:
        svc = LedgerService(repo=ledger_repo)
        await svc.credit(db, "stu-1", Decimal("3.00"), TransactionType.TOPUP, "seed")
        assert await svc.has_sufficient_balance(db, "stu-1", Decimal("3.00"))
        assert not await svc.has_sufficient_balance(db, "stu-1", Decimal("3.01"))


class TestReplayProperty:
    async def test_random_sequences_replay_and_never_go_negative(self, db, ledger_repo) -> None:
        svc = LedgerService(repo=ledger_repo)
        rng = random.Random(1234)
        for _ in range(300):
            amount = Decimal(rng.randint(1, 5000)) / 100
            op = rng.choice(["topup", "refund", "debit", "debit"])
            if op == "topup":
                await svc.credit(db, "stu-1", amount, TransactionType.TOPUP, "t")
            elif op == "refund":
                await svc.refund_credit(db, "stu-1", amount, "r")
            else:
                try:
                    await svc.debit(db, "stu-1", amount, "d")
                except InsufficientBalanceError:
                    pass

        txs = await ledger_repo.list_transactions(db, "stu-1", None, oldest_first=True)
        running = Decimal("0")
        for tx in txs:
            running += tx.amount
            assert running == tx.balance_after
            assert tx.balance_after >= 0
        account = await ledger_repo.get_account(db, "stu-1")
        assert verify_transaction_chain(txs, account) == []


class TestQueriesAndTopup:
    async def test_balance_zero_for_new_member(self, db, ledger_repo) -> None:
        result = await LedgerService(repo=ledger_repo).get_balance(db, "new")
        assert isinstance(result, BalanceResponse)
        assert result.balance == Decimal("0.00")
        assert result.balance_display == "0.00"

    async def test_list_transactions_newest_first_with_limit(self, db, ledger_repo) -> None:
        svc = LedgerService(repo=ledger_repo)
        for amount in ("1.00", "2.00", "3.00"):
            await svc.credit(db, "stu-1", Decimal(amount), TransactionType.TOPUP, "t")
        result = await svc.list_transactions(db, "stu-1", limit=2)
        assert [i.amount for i in result.items] == [Decimal("3.00"), Decimal("2.00")]

    async def test_topup_commits(self, db, ledger_repo) -> None:
        result = await LedgerService(repo=ledger_repo).topup(
            db, "stu-1", Decimal("50.00"), "pay_123"
        )
        assert isinstance(result, TopupResponse)
        assert result.balance == Decimal("50.00")
        assert ledger_repo.transactions[0].reference_id == "pay_123"
        db.commit.assert_awaited_once()
        db.rollback.assert_not_awaited()

    async def test_topup_rolls_back_on_error(self, db, ledger_repo) -> None:
        with pytest.raises(InvalidAmountError):
            await LedgerService(repo=ledger_repo).topup(db, "stu-1", Decimal("0"), None)
        db.rollback.assert_awaited_once()
        db.commit.assert_not_awaited()

    async def test_verify_account_ok(self, db, ledger_repo) -> None:
        svc = LedgerService(repo=ledger_repo)
        await svc.credit(db, "stu-1", Decimal("10.00"), TransactionType.TOPUP, "t")
        await svc.debit(db, "stu-1", Decimal("4.00"), "d")
        report = await svc.verify_account(db, "stu-1")
        assert report.ok
        assert report.transactions_checked == 2
