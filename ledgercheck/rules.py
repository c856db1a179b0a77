"""
rules.py - Reusable rule predicates for command verifiers

Every predicate either returns normally or raises a VerificationError. A
verifier is an ordered sequence of these calls, so the first violation stops
verification and becomes the transaction's single rejection reason.

Predicates hold no state and never mutate their arguments.
"""

from __future__ import annotations
from typing import Any, Iterable, List, Optional, Sequence, Type

from .core import (
    PublicKeyId, SignerSet, VerificationError,
    NoInputsExpected, SingleOutputRequired, CardinalityMismatch,
)


def require(condition: bool, error: VerificationError) -> None:
    """
    Raise error unless condition holds.

    Example:
        require(output.amount > zero, NonPositiveAmount(amount=output.amount))
    """
    if not condition:
        raise error


def require_no_inputs(states: Sequence[Any], message: Optional[str] = None) -> None:
    require(len(states) == 0, NoInputsExpected(message, count=len(states)))


def require_single_output(states: Sequence[Any], message: Optional[str] = None) -> None:
    require(len(states) == 1, SingleOutputRequired(message, count=len(states)))


def require_one_in_one_out(
    inputs: Sequence[Any],
    outputs: Sequence[Any],
    message: Optional[str] = None,
) -> None:
    require(
        len(inputs) == 1 and len(outputs) == 1,
        CardinalityMismatch(message, inputs=len(inputs), outputs=len(outputs)),
    )


def require_instance(
    state: Any,
    state_type: Type[Any],
    error_type: Type[VerificationError],
    message: Optional[str] = None,
) -> None:
    """Raise error_type unless state is an instance of state_type."""
    require(
        isinstance(state, state_type),
        error_type(message, expected=state_type.__name__, found=type(state).__name__),
    )


def signers_exactly(
    signers: SignerSet,
    required: Iterable[PublicKeyId],
    size: int,
) -> bool:
    """
    True if the signer set is exactly the required keys and has the expected size.

    The size check is part of the rule: when two required parties share a key
    the required set collapses below `size` and the transaction is malformed.
    """
    required_set = frozenset(required)
    return len(required_set) == size and signers == required_set


def require_signers(
    signers: SignerSet,
    required: Iterable[PublicKeyId],
    size: int,
    error_type: Type[VerificationError],
    message: Optional[str] = None,
) -> None:
    required_set = frozenset(required)
    require(
        signers_exactly(signers, required_set, size),
        error_type(
            message,
            expected=sorted(required_set),
            found=sorted(signers),
            size=size,
        ),
    )


def field_changes(before: Any, after: Any, names: Iterable[str]) -> List[str]:
    """Return the names of fields whose values differ between two states."""
    return [n for n in names if getattr(before, n) != getattr(after, n)]
