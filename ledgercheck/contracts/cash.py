"""
cash.py - CashPayment, the external record of a cash transfer

CashPayments are produced by a separate payment subsystem. The engine never
verifies them; the settle rule only reads them as outputs to see how much cash
a lender receives.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, List

from ..core import Amount, Party, amount


@dataclass(frozen=True, slots=True)
class CashPayment:
    """
    Cash now owned by a party.

    Attributes:
        owner: Party that owns the cash after the transaction.
        amount: How much cash, in one currency.
    """
    owner: Party
    amount: Amount

    def __repr__(self) -> str:
        return f"CashPayment({self.amount} -> {self.owner.name})"


def pay(owner: Party, quantity, currency: str) -> CashPayment:
    """
    Shorthand for a CashPayment of amount(quantity, currency) to owner.

    Example:
        pay(alice, "40", "USD")
    """
    return CashPayment(owner=owner, amount=amount(quantity, currency))


def payments_to(payments: Iterable[CashPayment], owner: Party) -> List[CashPayment]:
    """
    Select the payments owned by a party, matched on owning key.

    Order is preserved.
    """
    return [p for p in payments if p.owner.owning_key == owner.owning_key]
