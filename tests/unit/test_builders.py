"""
test_builders.py - Tests for the transaction builders

Builders compute the outputs and signer sets the verifiers require, so every
transaction they return should validate. Arguments that could never produce
a valid transaction are refused with ValueError.
"""

import pytest

from ledgercheck import (
    AddressRecord, ObligationRecord, CashPayment, CommandKind, validate,
    publish_address, move_address, find_address_by_issuer,
    issue_obligation, issue_obligation_with_lookup,
    transfer_obligation, transfer_obligation_to_key, settle_obligation,
    IdentityProvider, StateLookup, CurrencyMismatch, ReferenceMismatch,
    pay, payments_to,
)
from tests.fakes import FakeLookup, FakeIdentities, usd, cash_to


class TestAddressBuilders:

    def test_publish(self, bob):
        tx = publish_address(bob, "1 Main St")
        assert validate(tx).ok
        record, = tx.outputs
        assert record.issuer == bob
        assert tx.commands[0].kind is CommandKind.PUBLISH

    def test_publish_empty_address(self, bob):
        with pytest.raises(ValueError):
            publish_address(bob, "   ")

    def test_move(self, bob_address):
        tx = move_address(bob_address, "2 High St")
        assert validate(tx).ok
        assert tx.outputs[0].id == bob_address.id

    def test_move_to_same_address(self, bob_address):
        with pytest.raises(ValueError, match="already publishes"):
            move_address(bob_address, bob_address.address)

    def test_find_by_issuer(self, alice, bob, bob_address):
        alice_address = AddressRecord.create(alice, "9 Elm St")
        lookup = FakeLookup([alice_address, usd("5"), bob_address])
        assert find_address_by_issuer(lookup, bob) is bob_address
        assert find_address_by_issuer(FakeLookup(), bob) is None

    def test_fakes_satisfy_protocols(self):
        assert isinstance(FakeLookup(), StateLookup)
        assert isinstance(FakeIdentities(), IdentityProvider)


class TestIssueBuilders:

    def test_issue(self, alice, bob):
        tx = issue_obligation(alice, bob, usd("100"))
        assert validate(tx).ok
        obligation, = tx.outputs
        assert obligation.paid == usd("0")
        assert tx.references == ()

    def test_issue_with_reference(self, alice, bob, bob_address, strict_validator):
        tx = issue_obligation(alice, bob, usd("100"), reference=bob_address)
        assert strict_validator.validate(tx).ok

    def test_zero_face(self, alice, bob):
        with pytest.raises(ValueError, match="positive"):
            issue_obligation(alice, bob, usd("0"))

    def test_self_dealing(self, alice):
        with pytest.raises(ValueError):
            issue_obligation(alice, alice, usd("100"))

    def test_issue_with_lookup(self, alice, bob, bob_address, strict_validator):
        tx = issue_obligation_with_lookup(FakeLookup([bob_address]), alice, bob, usd("100"), bob)
        assert tx.references == (bob_address,)
        assert strict_validator.validate(tx).ok

    def test_issue_with_lookup_missing_address(self, alice, bob, validator, strict_validator):
        tx = issue_obligation_with_lookup(FakeLookup(), alice, bob, usd("100"), bob)
        assert tx.references == ()
        assert validator.validate(tx).ok
        assert isinstance(strict_validator.validate(tx).error, ReferenceMismatch)

    def test_issue_with_lookup_wrong_issuer(self, alice, bob, validator):
        alice_address = AddressRecord.create(alice, "9 Elm St")
        tx = issue_obligation_with_lookup(FakeLookup([alice_address]), alice, bob, usd("100"), alice)
        assert isinstance(validator.validate(tx).error, ReferenceMismatch)


class TestTransferBuilders:

    def test_transfer(self, obligation, carol):
        tx = transfer_obligation(obligation, carol)
        assert validate(tx).ok
        assert tx.commands[0].signers == frozenset({"key-alice", "key-bob", "key-carol"})

    def test_transfer_to_current_lender(self, obligation, alice):
        with pytest.raises(ValueError, match="already the lender"):
            transfer_obligation(obligation, alice)

    def test_transfer_to_borrower(self, obligation, bob):
        with pytest.raises(ValueError, match="borrower"):
            transfer_obligation(obligation, bob)

    def test_transfer_to_key(self, obligation, alice, bob, carol):
        identities = FakeIdentities([alice, bob, carol])
        tx = transfer_obligation_to_key(identities, obligation, "key-carol")
        assert tx.outputs[0].lender == carol
        assert validate(tx).ok

    def test_transfer_to_unknown_key(self, obligation, alice, bob):
        with pytest.raises(ValueError, match="key-dave"):
            transfer_obligation_to_key(FakeIdentities([alice, bob]), obligation, "key-dave")


class TestSettleBuilder:

    def test_full_settlement(self, obligation, alice):
        tx = settle_obligation(obligation, [cash_to(alice, "100")])
        assert validate(tx).ok
        assert [type(s) for s in tx.outputs] == [CashPayment]

    def test_partial_settlement(self, obligation, alice):
        tx = settle_obligation(obligation, [cash_to(alice, "40")])
        assert validate(tx).ok
        successor = tx.outputs[-1]
        assert isinstance(successor, ObligationRecord)
        assert successor.paid == usd("40")
        assert successor.outstanding == usd("60")
        assert successor.id == obligation.id

    def test_other_payments_carried_through(self, obligation, alice, bob):
        change = cash_to(bob, "7")
        tx = settle_obligation(obligation, [change, pay(alice, "40", "USD")])
        assert validate(tx).ok
        cash = [s for s in tx.outputs if isinstance(s, CashPayment)]
        assert payments_to(cash, bob) == [change]

    def test_no_lender_payment(self, obligation, carol):
        with pytest.raises(ValueError, match="lender"):
            settle_obligation(obligation, [cash_to(carol, "100")])

    def test_overpayment(self, obligation, alice):
        with pytest.raises(ValueError, match="exceed"):
            settle_obligation(obligation, [cash_to(alice, "60"), cash_to(alice, "60")])

    def test_wrong_currency(self, obligation, alice):
        with pytest.raises(CurrencyMismatch):
            settle_obligation(obligation, [cash_to(alice, "100", "GBP")])

    def test_settles_partly_paid(self, obligation, alice):
        partly_paid = obligation.pay(usd("30"))
        tx = settle_obligation(partly_paid, [cash_to(alice, "70")])
        assert validate(tx).ok
        assert not any(isinstance(s, ObligationRecord) for s in tx.outputs)
