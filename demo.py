#!/usr/bin/env python3
"""
demo.py - Walkthrough: one obligation from address to settlement

Each step builds a transaction, validates it with a verbose Validator and
then shows a malformed variant being rejected. Press Enter to advance.

STEPS:
  1: Publish an address record
  2: Move the address
  3: Issue an obligation referencing the borrower's address
  4: Transfer the obligation to a new lender
  5: Settle part of it
  6: Settle the rest

Run:
    python demo.py           # Interactive mode (press Enter for each step)
    python demo.py --quick   # Run all steps without pausing
"""

from dataclasses import dataclass
from decimal import Decimal
import sys

from ledgercheck import (
    Party, Transaction, CommandKind, command, amount, pay,
    Validator, ValidationSettings, ReferencePolicy,
    publish_address, move_address, issue_obligation, transfer_obligation,
    settle_obligation,
)


# ============================================================================
# CONFIGURATION
# ============================================================================

@dataclass
class DemoConfig:
    """Configuration for the walkthrough. Modify these to experiment."""
    currency: str = "USD"
    face_value: Decimal = Decimal("1000.00")
    first_installment: Decimal = Decimal("400.00")
    first_address: str = "1 Main St, Springfield"
    second_address: str = "42 Harbour Rd, Shelbyville"


CONFIG = DemoConfig()


def wait_for_enter(quick: bool):
    if not quick:
        input("\n[Press Enter to continue...]")


def step_header(number: int, title: str, objective: str):
    """Print a step header with learning objective."""
    print(f"\n{'='*70}")
    print(f"STEP {number}: {title}")
    print(f"{'='*70}")
    print(f"\nObjective: {objective}\n")


def section_header(text: str):
    print(f"\n--- {text} ---\n")


# ============================================================================
# STEPS
# ============================================================================

def step_01_publish(validator: Validator, bob: Party):
    step_header(1, "Publish an Address",
        "An issuer publishes an AddressRecord, signed by the issuer alone.")

    print(">>> tx = publish_address(bob, ...)")
    tx = publish_address(bob, CONFIG.first_address)
    print(f"    {tx!r}")
    validator.validate(tx)

    section_header("Rejected: signed by nobody")
    unsigned = Transaction.single(command(CommandKind.PUBLISH), outputs=tx.outputs)
    validator.validate(unsigned)
    return tx.outputs[0]


def step_02_move(validator: Validator, record):
    step_header(2, "Move the Address",
        "A MOVE supersedes the record; only the address may change.")

    tx = move_address(record, CONFIG.second_address)
    validator.validate(tx)

    section_header("Rejected: nothing changed")
    validator.validate(Transaction.single(
        command(CommandKind.MOVE, record.issuer.owning_key), inputs=[record], outputs=[record]))
    return tx.outputs[0]


def step_03_issue(validator: Validator, alice: Party, bob: Party, address):
    step_header(3, "Issue an Obligation",
        "Lender and borrower both sign; the borrower's address is referenced.")

    face = amount(CONFIG.face_value, CONFIG.currency)
    tx = issue_obligation(alice, bob, face, reference=address)
    validator.validate(tx)

    section_header("Rejected: lender signature only")
    validator.validate(Transaction.single(
        command(CommandKind.ISSUE, alice.owning_key), outputs=tx.outputs, references=tx.references))
    return tx.outputs[0]


def step_04_transfer(validator: Validator, obligation, carol: Party):
    step_header(4, "Transfer the Obligation",
        "Only the lender changes; borrower, old lender and new lender sign.")

    tx = transfer_obligation(obligation, carol)
    validator.validate(tx)
    return tx.outputs[0]


def step_05_partial_settle(validator: Validator, obligation):
    step_header(5, "Partial Settlement",
        "Cash to the lender reduces what is outstanding; a successor remains.")

    payment = pay(obligation.lender, CONFIG.first_installment, CONFIG.currency)
    tx = settle_obligation(obligation, [payment])
    validator.validate(tx)
    successor = tx.outputs[-1]
    print(f"    outstanding now {successor.outstanding}")

    section_header("Rejected: successor dropped")
    validator.validate(Transaction.single(
        tx.commands[0], inputs=tx.inputs, outputs=[payment]))
    return successor


def step_06_full_settle(validator: Validator, obligation):
    step_header(6, "Full Settlement",
        "Paying exactly what is outstanding ends the lifeline.")

    final = pay(obligation.lender, obligation.outstanding.quantity, CONFIG.currency)
    tx = settle_obligation(obligation, [final])
    validator.validate(tx)

    section_header("Rejected: one cent too much")
    over = pay(obligation.lender, obligation.outstanding.quantity + Decimal("0.01"), CONFIG.currency)
    validator.validate(Transaction.single(tx.commands[0], inputs=tx.inputs, outputs=[over]))


# ============================================================================
# MAIN
# ============================================================================

def main(quick: bool = False):
    """Run the walkthrough."""
    print("=" * 70)
    print("       LEDGERCHECK - OBLIGATION LIFECYCLE")
    print("=" * 70)

    alice = Party("O=Alice,L=London,C=GB", "key-alice")
    bob = Party("O=Bob,L=New York,C=US", "key-bob")
    carol = Party("O=Carol,L=Paris,C=FR", "key-carol")
    validator = Validator(
        ValidationSettings(reference_policy=ReferencePolicy.MANDATORY),
        verbose=True,
    )
    print(f"\n>>> {validator!r}")

    address = step_01_publish(validator, bob)
    wait_for_enter(quick)
    address = step_02_move(validator, address)
    wait_for_enter(quick)
    obligation = step_03_issue(validator, alice, bob, address)
    wait_for_enter(quick)
    obligation = step_04_transfer(validator, obligation, carol)
    wait_for_enter(quick)
    obligation = step_05_partial_settle(validator, obligation)
    wait_for_enter(quick)
    step_06_full_settle(validator, obligation)

    print(f"\n{'='*70}")
    print("Done.")


if __name__ == "__main__":
    main(quick="--quick" in sys.argv)
