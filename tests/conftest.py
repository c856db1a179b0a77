"""
conftest.py - Shared pytest fixtures for ledgercheck tests

Provides common fixtures used across unit and conformance tests:
- Parties (alice, bob, carol) with distinct keys
- Address records and obligations in a known state
- Validators with each reference policy
"""

import pytest

from ledgercheck import (
    Party, LinearId, AddressRecord, ObligationRecord,
    Validator, ValidationSettings, ReferencePolicy,
)

from tests.fakes import usd


# =============================================================================
# PARTIES
# =============================================================================

@pytest.fixture
def alice():
    return Party("O=Alice,L=London,C=GB", "key-alice")


@pytest.fixture
def bob():
    return Party("O=Bob,L=New York,C=US", "key-bob")


@pytest.fixture
def carol():
    return Party("O=Carol,L=Paris,C=FR", "key-carol")


# =============================================================================
# STATES
# =============================================================================

@pytest.fixture
def address_id():
    return LinearId.new()


@pytest.fixture
def bob_address(bob, address_id):
    """Bob's published address record."""
    return AddressRecord(issuer=bob, address="1 Main St", id=address_id)


@pytest.fixture
def obligation(alice, bob):
    """Bob owes Alice 100 USD, nothing paid yet."""
    return ObligationRecord(
        lender=alice,
        borrower=bob,
        amount=usd("100"),
        paid=usd("0"),
        id=LinearId.new(),
    )


# =============================================================================
# VALIDATORS
# =============================================================================

@pytest.fixture
def validator():
    return Validator()


@pytest.fixture
def strict_validator():
    """Validator that requires the borrower's AddressRecord on ISSUE."""
    return Validator(ValidationSettings(reference_policy=ReferencePolicy.MANDATORY))
