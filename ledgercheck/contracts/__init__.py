"""
Contracts module - state types, command verifiers and transaction builders.

Each module owns one state type and the rules for every command that
touches it:
- address: AddressRecord (PUBLISH, MOVE)
- obligation: ObligationRecord (ISSUE, TRANSFER, SETTLE)
- cash: CashPayment, the external cash record read during settlement

All state types, verifiers and builders are re-exported here for convenience.
"""

# Address records
from .address import (
    AddressRecord,
    verify_publish,
    verify_move,
    publish_address,
    move_address,
    find_address_by_issuer,
)

# Obligations
from .obligation import (
    ObligationRecord,
    verify_issue,
    verify_transfer,
    verify_settle,
    issue_obligation,
    issue_obligation_with_lookup,
    transfer_obligation,
    transfer_obligation_to_key,
    settle_obligation,
)

# Cash
from .cash import (
    CashPayment,
    pay,
    payments_to,
)

__all__ = [
    # Address records
    'AddressRecord', 'verify_publish', 'verify_move',
    'publish_address', 'move_address', 'find_address_by_issuer',
    # Obligations
    'ObligationRecord', 'verify_issue', 'verify_transfer', 'verify_settle',
    'issue_obligation', 'issue_obligation_with_lookup',
    'transfer_obligation', 'transfer_obligation_to_key', 'settle_obligation',
    # Cash
    'CashPayment', 'pay', 'payments_to',
]
