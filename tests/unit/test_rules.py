"""
test_rules.py - Tests for the rule predicates

Predicates either return None or raise the VerificationError they were given.
"""

import pytest
from typing import Optional, get_type_hints

from ledgercheck import (
    NoInputsExpected, SingleOutputRequired, CardinalityMismatch,
    SignerSetIncomplete, NonPositiveAmount, AddressRecord,
)
from ledgercheck.rules import (
    require, require_no_inputs, require_single_output, require_one_in_one_out,
    require_instance, require_signers, signers_exactly, field_changes,
)


class TestRequire:

    def test_true_condition_passes(self):
        assert require(True, NonPositiveAmount()) is None

    def test_false_condition_raises_given_error(self):
        error = NonPositiveAmount("custom", amount=0)
        with pytest.raises(NonPositiveAmount) as exc:
            require(False, error)
        assert exc.value is error


class TestCardinality:

    def test_no_inputs(self):
        require_no_inputs([])
        with pytest.raises(NoInputsExpected) as exc:
            require_no_inputs([object(), object()])
        assert exc.value.details == {"count": 2}

    def test_single_output(self):
        require_single_output([object()])
        with pytest.raises(SingleOutputRequired):
            require_single_output([])

    def test_single_output_custom_message(self):
        with pytest.raises(SingleOutputRequired, match="exactly one widget"):
            require_single_output([], "exactly one widget")

    def test_one_in_one_out(self):
        require_one_in_one_out([1], [2])
        with pytest.raises(CardinalityMismatch) as exc:
            require_one_in_one_out([1], [2, 3])
        assert exc.value.details == {"inputs": 1, "outputs": 2}

    def test_instance(self, bob_address):
        require_instance(bob_address, AddressRecord, SingleOutputRequired)
        with pytest.raises(SingleOutputRequired) as exc:
            require_instance("not a record", AddressRecord, SingleOutputRequired)
        assert exc.value.details == {"expected": "AddressRecord", "found": "str"}


class TestSigners:

    def test_exact_match(self):
        assert signers_exactly(frozenset({"a", "b"}), {"a", "b"}, 2)

    def test_superset_rejected(self):
        assert not signers_exactly(frozenset({"a", "b", "c"}), {"a", "b"}, 2)

    def test_subset_rejected(self):
        assert not signers_exactly(frozenset({"a"}), {"a", "b"}, 2)

    def test_collapsed_required_set_rejected(self):
        # Two parties sharing one key cannot satisfy a two-signer rule.
        assert not signers_exactly(frozenset({"a"}), ["a", "a"], 2)

    def test_require_signers_reports_sorted_keys(self):
        with pytest.raises(SignerSetIncomplete) as exc:
            require_signers(frozenset({"b"}), {"b", "a"}, 2, SignerSetIncomplete)
        assert exc.value.details == {"expected": ["a", "b"], "found": ["b"], "size": 2}


class TestFieldChanges:

    def test_reports_changed_fields_in_given_order(self, bob_address):
        moved = bob_address.with_address("2 High St")
        assert field_changes(bob_address, moved, ("issuer", "address", "id")) == ["address"]

    def test_no_changes(self, bob_address):
        assert field_changes(bob_address, bob_address, ("issuer", "address", "id")) == []


class TestSignatures:

    @pytest.mark.parametrize("predicate", [
        require_no_inputs, require_single_output, require_one_in_one_out,
        require_instance, require_signers,
    ])
    def test_message_is_optional(self, predicate):
        assert get_type_hints(predicate)["message"] == Optional[str]
