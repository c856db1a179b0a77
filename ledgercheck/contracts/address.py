"""
address.py - AddressRecord and the address contract

=== ADDRESS MODEL ===

An AddressRecord publishes a party's postal address on the ledger so that
other transactions can reference it:

    AddressRecord(issuer=alice, address="1 Main St", id=<LinearId>)

Lifecycle:
    PUBLISH: no AddressRecord consumed, exactly one produced, signed by the issuer only.
    MOVE:    one consumed, one produced with the same issuer and id but a new
             address, signed by the issuer only.

Records are never destroyed explicitly; each MOVE supersedes the prior version.

=== FUNCTIONS ===

    verify_publish(view, command, settings)   - PUBLISH rule
    verify_move(view, command, settings)      - MOVE rule
    publish_address(issuer, address)          - build a PUBLISH transaction
    move_address(record, new_address)         - build a MOVE transaction
    find_address_by_issuer(lookup, issuer)    - locate a published record
"""
from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from ..core import (
    Command, CommandKind, LinearId, Party, StateLookup,
    Transaction, ValidationSettings, ADDRESS_CONTRACT_ID,
    AddressUnchanged, ImmutableFieldChanged, SignerMismatch,
    command,
)
from ..rules import (
    field_changes, require, require_no_inputs, require_one_in_one_out,
    require_signers, require_single_output,
)
from ..view import TransactionView


# =============================================================================
# STATE
# =============================================================================

@dataclass(frozen=True, slots=True)
class AddressRecord:
    """
    A party's published address.

    Attributes:
        issuer: Party that published the record; never changes.
        address: The published address.
        id: Lifeline identifier shared by every version of this record.
    """
    issuer: Party
    address: str
    id: LinearId

    contract = ADDRESS_CONTRACT_ID

    @classmethod
    def create(cls, issuer: Party, address: str) -> AddressRecord:
        """Create the first version of a record with a fresh LinearId."""
        return cls(issuer=issuer, address=address, id=LinearId.new())

    @property
    def participants(self) -> Tuple[Party, ...]:
        return (self.issuer,)

    @property
    def participant_keys(self) -> frozenset:
        return frozenset(p.owning_key for p in self.participants)

    def with_address(self, address: str) -> AddressRecord:
        """Return the successor version carrying a new address."""
        return replace(self, address=address)

    def __repr__(self) -> str:
        return f"AddressRecord({self.issuer.name}: {self.address!r}, id={self.id})"


# =============================================================================
# VERIFIERS
# =============================================================================

def verify_publish(view: TransactionView, cmd: Command, settings: ValidationSettings) -> None:
    """
    PUBLISH: create the first version of an AddressRecord.

    Rules, in order:
        1. No AddressRecord is consumed.
        2. Exactly one AddressRecord is produced.
        3. The signer set is exactly {issuer}.

    Raises:
        NoInputsExpected, SingleOutputRequired, SignerMismatch
    """
    inputs = view.input_list(AddressRecord)
    outputs = view.output_list(AddressRecord)

    require_no_inputs(
        inputs, "No AddressRecord should be consumed when publishing an address.")
    require_single_output(
        outputs, "Only one AddressRecord should be created when publishing an address.")

    issuer_key = outputs[0].issuer.owning_key
    require_signers(
        cmd.signers, {issuer_key}, 1, SignerMismatch,
        "The issuer must be the only signer of a publish transaction.",
    )


def verify_move(view: TransactionView, cmd: Command, settings: ValidationSettings) -> None:
    """
    MOVE: replace an AddressRecord's address.

    Rules, in order:
        1. Exactly one AddressRecord consumed and exactly one produced.
        2. The address changed.
        3. issuer and id did not change.
        4. The signer set is exactly {input issuer}.

    Raises:
        CardinalityMismatch, AddressUnchanged, ImmutableFieldChanged, SignerMismatch
    """
    inputs = view.input_list(AddressRecord)
    outputs = view.output_list(AddressRecord)

    require_one_in_one_out(
        inputs, outputs,
        "A move transaction should consume exactly one AddressRecord and create exactly one.",
    )
    before, after = inputs[0], outputs[0]

    require(
        before.address != after.address,
        AddressUnchanged(address=after.address),
    )

    changed = field_changes(before, after, ('issuer', 'id'))
    require(
        not changed,
        ImmutableFieldChanged("Only the address may change in a move transaction.", fields=changed),
    )

    require_signers(
        cmd.signers, {before.issuer.owning_key}, 1, SignerMismatch,
        "A move transaction must be signed by the issuer only.",
    )


# =============================================================================
# TRANSACTION BUILDERS
# =============================================================================

def publish_address(issuer: Party, address: str) -> Transaction:
    """
    Build a PUBLISH transaction for a new AddressRecord.

    Example:
        tx = publish_address(alice, "1 Main St")
        validate(tx).ok  # True
    """
    if not address or not address.strip():
        raise ValueError("address cannot be empty")
    record = AddressRecord.create(issuer, address)
    return Transaction.single(
        command(CommandKind.PUBLISH, issuer.owning_key),
        outputs=(record,),
    )


def move_address(record: AddressRecord, new_address: str) -> Transaction:
    """
    Build a MOVE transaction superseding record with a new address.

    Raises:
        ValueError: If new_address is empty or equal to the current address.
    """
    if not new_address or not new_address.strip():
        raise ValueError("new_address cannot be empty")
    if new_address == record.address:
        raise ValueError(f"{record.issuer.name} already publishes {new_address!r}")
    return Transaction.single(
        command(CommandKind.MOVE, record.issuer.owning_key),
        inputs=(record,),
        outputs=(record.with_address(new_address),),
    )


# =============================================================================
# LOOKUP
# =============================================================================

def find_address_by_issuer(lookup: StateLookup, issuer: Party) -> Optional[AddressRecord]:
    """
    Return the first AddressRecord published by issuer, or None.

    Args:
        lookup: Read-only source of unconsumed states
        issuer: Party whose record is wanted
    """
    for record in lookup.states_of_type(AddressRecord):
        if record.issuer == issuer:
            return record
    return None
