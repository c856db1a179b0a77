"""
ledgercheck - Transaction Validation Engine

Deterministic, side-effect free validation of proposed ledger transactions
over typed, versioned records (address records and debt obligations).

Usage:
    from ledgercheck import (
        Party, Transaction, CommandKind, command, amount, validate,
        publish_address, issue_obligation,
    )

    alice = Party("Alice", "key-alice")
    bob = Party("Bob", "key-bob")

    # Bob publishes his address, then borrows 100 USD from Alice
    published = publish_address(bob, "1 Main St")
    assert validate(published)

    tx = issue_obligation(alice, bob, amount("100", "USD"), reference=published.outputs[0])
    result = validate(tx)
    result.ok    # True

    # A malformed transaction reports the first rule it breaks
    unsigned = Transaction.single(command(CommandKind.ISSUE, "key-alice"), outputs=tx.outputs)
    result = validate(unsigned)
    result.ok    # False
    result.rule  # 'SignerSetIncomplete'
"""

# Core types
from .core import (
    Party,
    LinearId,
    Amount,
    amount,
    sum_amounts,
    CommandKind,
    Command,
    command,
    Transaction,
    ReferencePolicy,
    ValidationSettings,
    DEFAULT_SETTINGS,
    IdentityProvider,
    StateLookup,
    ADDRESS_CONTRACT_ID,
    OBLIGATION_CONTRACT_ID,
    # Errors
    LedgerCheckError,
    CurrencyMismatch,
    VerificationError,
    AmbiguousCommand,
    UnknownCommand,
    NoInputsExpected,
    SingleOutputRequired,
    SignerMismatch,
    CardinalityMismatch,
    AddressUnchanged,
    ImmutableFieldChanged,
    NonPositiveAmount,
    SelfDealingNotAllowed,
    SignerSetIncomplete,
    ReferenceMismatch,
    LenderUnchanged,
    NoInputGroup,
    MultipleGroups,
    NoCashOutput,
    NoAcceptableCash,
    Overpayment,
    OutputExpectedOnFullSettlement,
    OutputCardinalityMismatch,
)

# Transaction view
from .view import TransactionView, StateGroup

# Contracts
from .contracts import (
    AddressRecord,
    verify_publish,
    verify_move,
    publish_address,
    move_address,
    find_address_by_issuer,
    ObligationRecord,
    verify_issue,
    verify_transfer,
    verify_settle,
    issue_obligation,
    issue_obligation_with_lookup,
    transfer_obligation,
    transfer_obligation_to_key,
    settle_obligation,
    CashPayment,
    pay,
    payments_to,
)

# Dispatch
from .engine import (
    Validator,
    ValidationResult,
    ACCEPTED,
    DEFAULT_VERIFIERS,
    validate,
    verify,
)

__all__ = [
    # Core
    'Party', 'LinearId', 'Amount', 'amount', 'sum_amounts',
    'CommandKind', 'Command', 'command', 'Transaction',
    'ReferencePolicy', 'ValidationSettings', 'DEFAULT_SETTINGS',
    'IdentityProvider', 'StateLookup',
    'ADDRESS_CONTRACT_ID', 'OBLIGATION_CONTRACT_ID',
    # Errors
    'LedgerCheckError', 'CurrencyMismatch', 'VerificationError',
    'AmbiguousCommand', 'UnknownCommand',
    'NoInputsExpected', 'SingleOutputRequired', 'SignerMismatch',
    'CardinalityMismatch', 'AddressUnchanged', 'ImmutableFieldChanged',
    'NonPositiveAmount', 'SelfDealingNotAllowed', 'SignerSetIncomplete',
    'ReferenceMismatch', 'LenderUnchanged', 'NoInputGroup', 'MultipleGroups',
    'NoCashOutput', 'NoAcceptableCash', 'Overpayment',
    'OutputExpectedOnFullSettlement', 'OutputCardinalityMismatch',
    # View
    'TransactionView', 'StateGroup',
    # Address records
    'AddressRecord', 'verify_publish', 'verify_move',
    'publish_address', 'move_address', 'find_address_by_issuer',
    # Obligations
    'ObligationRecord', 'verify_issue', 'verify_transfer', 'verify_settle',
    'issue_obligation', 'issue_obligation_with_lookup',
    'transfer_obligation', 'transfer_obligation_to_key', 'settle_obligation',
    # Cash
    'CashPayment', 'pay', 'payments_to',
    # Dispatch
    'Validator', 'ValidationResult', 'ACCEPTED', 'DEFAULT_VERIFIERS',
    'validate', 'verify',
]

__version__ = '1.0.0'
