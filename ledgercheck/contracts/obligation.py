"""
obligation.py - ObligationRecord and the obligation contract

=== OBLIGATION MODEL ===

An ObligationRecord is a bilateral debt: the borrower owes the lender `amount`,
of which `paid` has been settled so far.

    ObligationRecord(lender=alice, borrower=bob, amount=100 USD, paid=0 USD, id=<LinearId>)

Invariants:
    amount > 0 at issuance
    lender != borrower
    0 <= paid <= amount
    id is stable across the whole lifeline

Lifecycle:
    ISSUE:    nothing consumed, one obligation produced, signed by lender and borrower.
    TRANSFER: one consumed, one produced; only the lender changes. Signed by
              the borrower, the old lender and the new lender.
    SETTLE:   one obligation consumed together with cash paid to the lender.
              Full settlement ends the lifeline (no successor); partial
              settlement produces one successor with the same amount, lender
              and borrower. Signed by lender and borrower.

=== SETTLEMENT ACCOUNTING ===

    acceptable = CashPayment outputs owned by the lender
    settled    = sum(acceptable.amount)          (exact Decimal, one currency)
    outstanding = input.amount - input.paid

    settled >  outstanding  -> Overpayment
    settled == outstanding  -> full settlement, no obligation output
    settled <  outstanding  -> partial settlement, exactly one obligation output
"""
from __future__ import annotations
from dataclasses import dataclass, replace
from typing import List, Optional, Sequence, Tuple

from ..core import (
    Amount, Command, CommandKind, CurrencyMismatch, IdentityProvider, LinearId,
    Party, PublicKeyId, ReferencePolicy, StateLookup, Transaction, ValidationSettings,
    OBLIGATION_CONTRACT_ID,
    CardinalityMismatch, ImmutableFieldChanged, LenderUnchanged,
    MultipleGroups, NoAcceptableCash, NoCashOutput, NoInputGroup,
    NonPositiveAmount, OutputCardinalityMismatch,
    OutputExpectedOnFullSettlement, Overpayment, ReferenceMismatch,
    SelfDealingNotAllowed, SignerSetIncomplete, SingleOutputRequired,
    command, sum_amounts,
)
from ..rules import (
    field_changes, require, require_instance, require_no_inputs,
    require_one_in_one_out, require_signers, require_single_output,
)
from ..view import TransactionView
from .address import AddressRecord, find_address_by_issuer
from .cash import CashPayment, payments_to


# =============================================================================
# STATE
# =============================================================================

@dataclass(frozen=True, slots=True)
class ObligationRecord:
    """
    A debt owed by borrower to lender.

    Attributes:
        lender: Party owed the money. Changes on TRANSFER.
        borrower: Party owing the money.
        amount: Face amount of the debt.
        paid: Amount settled so far (defaults to zero in amount's currency).
        id: Lifeline identifier (defaults to a fresh LinearId).

    paid and id are Optional only as constructor arguments: __post_init__
    fills both in, so on a constructed record neither is ever None.

    Construction enforces currency consistency and paid <= amount. Positivity
    of amount and lender != borrower are issuance rules checked by the
    contract, so such records can still be built and then rejected.
    """
    lender: Party
    borrower: Party
    amount: Amount
    paid: Optional[Amount] = None
    id: Optional[LinearId] = None

    contract = OBLIGATION_CONTRACT_ID

    def __post_init__(self):
        if self.paid is None:
            object.__setattr__(self, 'paid', Amount.zero(self.amount.currency))
        if self.id is None:
            object.__setattr__(self, 'id', LinearId.new())
        if self.paid.currency != self.amount.currency:
            raise ValueError(
                f"paid currency {self.paid.currency} does not match amount currency {self.amount.currency}"
            )
        if self.paid > self.amount:
            raise ValueError(f"paid {self.paid} exceeds amount {self.amount}")

    @property
    def participants(self) -> Tuple[Party, ...]:
        return (self.lender, self.borrower)

    @property
    def participant_keys(self) -> frozenset:
        return frozenset(p.owning_key for p in self.participants)

    @property
    def outstanding(self) -> Amount:
        return self.amount - self.paid

    @property
    def is_fully_paid(self) -> bool:
        return self.paid == self.amount

    def with_new_lender(self, lender: Party) -> ObligationRecord:
        """Return the successor version owed to a new lender."""
        return replace(self, lender=lender)

    def pay(self, payment: Amount) -> ObligationRecord:
        """
        Return the successor version after a payment.

        Raises:
            ValueError: If the payment exceeds the outstanding amount.
            CurrencyMismatch: If the payment is in another currency.
        """
        return replace(self, paid=self.paid + payment)

    def __repr__(self) -> str:
        return (
            f"ObligationRecord({self.borrower.name} owes {self.lender.name} "
            f"{self.amount}, paid {self.paid.quantity}, id={self.id})"
        )


# =============================================================================
# VERIFIERS
# =============================================================================

def verify_issue(view: TransactionView, cmd: Command, settings: ValidationSettings) -> None:
    """
    ISSUE: create a new obligation.

    Rules, in order:
        1. The transaction consumes nothing.
        2. The transaction produces exactly one state, an ObligationRecord.
        3. amount > 0.
        4. lender and borrower have different keys.
        5. The signer set is exactly {lender, borrower}.
        6. If an AddressRecord reference is present, its issuer is the borrower.
           Under ReferencePolicy.MANDATORY the reference must be present.

    Raises:
        NoInputsExpected, SingleOutputRequired, NonPositiveAmount,
        SelfDealingNotAllowed, SignerSetIncomplete, ReferenceMismatch
    """
    require_no_inputs(view.inputs, "No inputs should be consumed when issuing an obligation.")
    require_single_output(
        view.outputs, "Only one output state should be created when issuing an obligation.")

    output = view.outputs[0]
    require_instance(
        output, ObligationRecord, SingleOutputRequired,
        "The output of an issue transaction must be an ObligationRecord.",
    )

    require(not output.amount.is_zero(), NonPositiveAmount(amount=output.amount))
    require(
        output.lender.owning_key != output.borrower.owning_key,
        SelfDealingNotAllowed(key=output.lender.owning_key),
    )
    require_signers(
        cmd.signers, output.participant_keys, 2, SignerSetIncomplete,
        "Both lender and borrower together only may sign an obligation issue transaction.",
    )

    reference = view.single_reference(AddressRecord)
    if reference is None:
        require(
            settings.reference_policy is not ReferencePolicy.MANDATORY,
            ReferenceMismatch("An AddressRecord reference for the borrower is required."),
        )
    else:
        require(
            reference.issuer == output.borrower,
            ReferenceMismatch(issuer=reference.issuer.name, borrower=output.borrower.name),
        )


def verify_transfer(view: TransactionView, cmd: Command, settings: ValidationSettings) -> None:
    """
    TRANSFER: re-assign an obligation to a new lender.

    Rules, in order:
        1. Exactly one input and one output, both ObligationRecords.
        2. amount, id, borrower and paid are unchanged.
        3. The lender changed.
        4. The signer set is exactly {borrower, old lender, new lender}, three keys.

    Raises:
        CardinalityMismatch, ImmutableFieldChanged, LenderUnchanged, SignerSetIncomplete
    """
    require_one_in_one_out(
        view.inputs, view.outputs,
        "An obligation transfer should consume exactly one input and create exactly one output.",
    )
    before, after = view.inputs[0], view.outputs[0]
    require_instance(before, ObligationRecord, CardinalityMismatch,
                     "The input of a transfer must be an ObligationRecord.")
    require_instance(after, ObligationRecord, CardinalityMismatch,
                     "The output of a transfer must be an ObligationRecord.")

    changed = field_changes(before, after, ('amount', 'id', 'borrower', 'paid'))
    require(
        not changed,
        ImmutableFieldChanged("Only the lender property may change.", fields=changed),
    )
    require(
        after.lender.owning_key != before.lender.owning_key,
        LenderUnchanged(lender=before.lender.name),
    )

    required = {
        before.borrower.owning_key,
        before.lender.owning_key,
        after.lender.owning_key,
    }
    require_signers(
        cmd.signers, required, 3, SignerSetIncomplete,
        "The borrower, old lender and new lender only must sign an obligation transfer.",
    )


def verify_settle(view: TransactionView, cmd: Command, settings: ValidationSettings) -> None:
    """
    SETTLE: pay down an obligation with cash sent to the lender.

    Rules, in order:
        1. At least one ObligationRecord is consumed.
        2. Exactly one obligation lifeline (LinearId) appears.
        3. At least one CashPayment output exists.
        4. At least one CashPayment output is owned by the lender, and all
           cash to the lender is in the obligation's currency.
        5. Cash to the lender does not exceed the outstanding amount.
        6. An obligation output exists exactly when the settlement is partial.
        7. A partial settlement produces exactly one successor...
        8. ...whose amount, lender and borrower are unchanged...
        9. ...and whose paid amount has not decreased.
        10. The signer set is exactly {lender, borrower}.

    Raises:
        NoInputGroup, MultipleGroups, NoCashOutput, NoAcceptableCash,
        Overpayment, OutputExpectedOnFullSettlement,
        OutputCardinalityMismatch, ImmutableFieldChanged, SignerSetIncomplete
    """
    groups = view.group_states(ObligationRecord)
    require(
        any(g.inputs for g in groups),
        NoInputGroup(groups=len(groups)),
    )
    require(
        len(groups) == 1,
        MultipleGroups(ids=[str(g.key) for g in groups]),
    )
    group = groups[0]
    obligation: ObligationRecord = group.inputs[0]

    cash = view.output_list(CashPayment)
    require(len(cash) > 0, NoCashOutput())

    acceptable = payments_to(cash, obligation.lender)
    require(
        len(acceptable) > 0,
        NoAcceptableCash(
            lender=obligation.lender.name,
            owners=[p.owner.name for p in cash],
        ),
    )

    try:
        settled = sum_amounts((p.amount for p in acceptable), obligation.amount.currency)
    except CurrencyMismatch as e:
        raise NoAcceptableCash(
            "Cash paid to the lender must be in the currency of the obligation.",
            currency=obligation.amount.currency,
            found=sorted({p.amount.currency for p in acceptable}),
        ) from e
    outstanding = obligation.outstanding
    require(
        outstanding >= settled,
        Overpayment(outstanding=outstanding, settled=settled),
    )

    successors = group.outputs
    if outstanding == settled:
        require(
            len(successors) == 0,
            OutputExpectedOnFullSettlement(
                "There must be no output obligation as it has been fully settled.",
                outputs=len(successors),
            ),
        )
    else:
        require(
            len(successors) > 0,
            OutputExpectedOnFullSettlement(
                "There must be an output obligation as it has only been partially settled.",
                outstanding=outstanding,
                settled=settled,
            ),
        )
        require(
            len(successors) == 1,
            OutputCardinalityMismatch(outputs=len(successors)),
        )
        changed = field_changes(obligation, successors[0], ('amount', 'lender', 'borrower'))
        require(
            not changed,
            ImmutableFieldChanged(
                "The amount, lender and borrower may not change when settling.",
                fields=changed,
            ),
        )
        require(
            successors[0].paid >= obligation.paid,
            ImmutableFieldChanged(
                "The paid amount may only increase when settling.",
                fields=["paid"],
                before=obligation.paid,
                after=successors[0].paid,
            ),
        )

    require_signers(
        cmd.signers, obligation.participant_keys, 2, SignerSetIncomplete,
        "Both lender and borrower must sign an obligation settle transaction.",
    )


# =============================================================================
# TRANSACTION BUILDERS
# =============================================================================

def issue_obligation(
    lender: Party,
    borrower: Party,
    face: Amount,
    reference: Optional[AddressRecord] = None,
) -> Transaction:
    """
    Build an ISSUE transaction.

    Args:
        lender: Party owed the money
        borrower: Party owing the money
        face: Amount of the debt (must be positive)
        reference: Optional AddressRecord of the borrower to include as a reference

    Returns:
        Transaction signed (in its command) by lender and borrower

    Example:
        tx = issue_obligation(alice, bob, amount("100", "USD"))
    """
    if face.is_zero():
        raise ValueError(f"face amount must be positive, got {face}")
    if lender.owning_key == borrower.owning_key:
        raise ValueError("lender and borrower must be different")

    obligation = ObligationRecord(lender=lender, borrower=borrower, amount=face)
    references = (reference,) if reference is not None else ()
    return Transaction.single(
        command(CommandKind.ISSUE, lender.owning_key, borrower.owning_key),
        outputs=(obligation,),
        references=references,
    )


def issue_obligation_with_lookup(
    lookup: StateLookup,
    lender: Party,
    borrower: Party,
    face: Amount,
    address_issuer: Party,
) -> Transaction:
    """
    Build an ISSUE transaction referencing address_issuer's AddressRecord.

    If address_issuer has not published an address the transaction carries
    no reference; whether that is acceptable is decided by the validator's
    ReferencePolicy.
    """
    reference = find_address_by_issuer(lookup, address_issuer)
    return issue_obligation(lender, borrower, face, reference=reference)


def transfer_obligation(obligation: ObligationRecord, new_lender: Party) -> Transaction:
    """
    Build a TRANSFER transaction moving obligation to new_lender.

    Raises:
        ValueError: If new_lender already holds the obligation or is the borrower.
    """
    if new_lender.owning_key == obligation.lender.owning_key:
        raise ValueError(f"{new_lender.name} is already the lender")
    if new_lender.owning_key == obligation.borrower.owning_key:
        raise ValueError("an obligation cannot be transferred to its borrower")

    return Transaction.single(
        command(
            CommandKind.TRANSFER,
            obligation.borrower.owning_key,
            obligation.lender.owning_key,
            new_lender.owning_key,
        ),
        inputs=(obligation,),
        outputs=(obligation.with_new_lender(new_lender),),
    )


def transfer_obligation_to_key(
    identities: IdentityProvider,
    obligation: ObligationRecord,
    new_lender_key: PublicKeyId,
) -> Transaction:
    """
    Build a TRANSFER transaction to the party owning new_lender_key.

    Raises:
        ValueError: If the key resolves to no known party, or per transfer_obligation.
    """
    new_lender = identities.party_from_key(new_lender_key)
    if new_lender is None:
        raise ValueError(f"no party is known for key {new_lender_key!r}")
    return transfer_obligation(obligation, new_lender)


def settle_obligation(
    obligation: ObligationRecord,
    payments: Sequence[CashPayment],
) -> Transaction:
    """
    Build a SETTLE transaction.

    Payments owned by the lender reduce the outstanding amount; other payments
    are carried through unchanged. A successor obligation is produced unless
    the payments settle it in full.

    Raises:
        ValueError: If no payment goes to the lender or the lender would be overpaid.
        CurrencyMismatch: If a lender payment is in another currency.
    """
    to_lender = payments_to(payments, obligation.lender)
    if not to_lender:
        raise ValueError(f"no payment is owned by lender {obligation.lender.name}")

    settled = sum_amounts((p.amount for p in to_lender), obligation.amount.currency)
    if settled > obligation.outstanding:
        raise ValueError(
            f"payments of {settled} exceed outstanding {obligation.outstanding}"
        )

    outputs: List[object] = list(payments)
    if settled != obligation.outstanding:
        outputs.append(obligation.pay(settled))

    return Transaction.single(
        command(CommandKind.SETTLE, obligation.lender.owning_key, obligation.borrower.owning_key),
        inputs=(obligation,),
        outputs=outputs,
    )
