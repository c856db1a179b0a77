"""
Core types for the transaction validation engine.

This module provides the foundational data structures shared by every contract:
1. Value types: Party, LinearId, Amount
2. Commands: CommandKind (closed tagged variant) and Command
3. Transaction: immutable proposal of inputs, outputs, references and commands
4. Exceptions: LedgerCheckError and the closed set of VerificationError variants
5. Configuration: ReferencePolicy and ValidationSettings
6. Protocols: IdentityProvider and StateLookup for external collaborators

Everything here is immutable. Validation never mutates a Transaction or any
state it holds, so a single Transaction value can be verified concurrently on
any number of threads.
"""

from __future__ import annotations
from dataclasses import dataclass, field, fields, is_dataclass
from decimal import Decimal, ROUND_HALF_EVEN, getcontext
from enum import Enum
import hashlib
import uuid
from typing import (
    Any, Dict, FrozenSet, Iterable, Optional, Protocol, Tuple, Type, TypeVar,
    runtime_checkable,
)


# ============================================================================
# DECIMAL CONTEXT CONFIGURATION
# ============================================================================
#
# Every node must reach the same verdict for the same transaction, so Decimal
# arithmetic uses one fixed context configured at import time.
#
# PRECONDITION: No other code should modify the global Decimal context.
# If thread-local contexts are needed, use decimal.localcontext().
#
_LEDGERCHECK_DECIMAL_CONTEXT = getcontext()
_LEDGERCHECK_DECIMAL_CONTEXT.prec = 50
_LEDGERCHECK_DECIMAL_CONTEXT.rounding = ROUND_HALF_EVEN


# ============================================================================
# CONSTANTS
# ============================================================================

ADDRESS_CONTRACT_ID = "ledgercheck.contracts.AddressContract"
OBLIGATION_CONTRACT_ID = "ledgercheck.contracts.ObligationContract"

# Default number of decimal places used by the amount() factory.
CURRENCY_DECIMAL_PLACES = 2

# Per-currency overrides (ISO 4217 minor units).
CURRENCY_PRECISION = {
    'JPY': 0,
    'KRW': 0,
    'BHD': 3,
    'KWD': 3,
}


# Type aliases
PublicKeyId = str
SignerSet = FrozenSet[PublicKeyId]

S = TypeVar('S')


# ============================================================================
# EXCEPTIONS
# ============================================================================

class LedgerCheckError(Exception):
    """Base exception for all ledgercheck errors."""
    pass


class CurrencyMismatch(ValueError):
    """Raised when amounts in different currencies are combined."""
    pass


class VerificationError(LedgerCheckError):
    """
    A transaction violated a rule.

    Each subclass is one rule in the closed set of rules the engine enforces.
    The subclass carries a fixed human-readable message, which callers may
    override with a more specific one, plus optional diagnostic details
    (counts, keys, amounts) as keyword arguments.

    Attributes:
        rule: Stable name of the violated rule (the subclass name).
        message: Human-readable description of the violation.
        details: Offending values, for diagnostics only.
    """
    message: str = "Transaction verification failed."

    def __init__(self, message: Optional[str] = None, **details: Any):
        if message is not None:
            self.message = message
        self.details: Dict[str, Any] = details
        super().__init__(self.message)

    @property
    def rule(self) -> str:
        return type(self).__name__

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VerificationError):
            return NotImplemented
        return (
            type(self) is type(other)
            and self.message == other.message
            and self.details == other.details
        )

    def __hash__(self) -> int:
        return hash((type(self), self.message))

    def __repr__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v!r}" for k, v in sorted(self.details.items()))
            return f"{self.rule}({self.message!r}, {detail_str})"
        return f"{self.rule}({self.message!r})"


# Structural errors: raised by dispatch before any verifier runs.

class AmbiguousCommand(VerificationError):
    message = "A transaction must carry exactly one command."


class UnknownCommand(VerificationError):
    message = "No verifier is registered for the transaction's command."


# Business rule violations.

class NoInputsExpected(VerificationError):
    message = "No input state should be consumed by this command."


class SingleOutputRequired(VerificationError):
    message = "Exactly one output state should be created by this command."


class SignerMismatch(VerificationError):
    message = "The issuer must be the only signer."


class CardinalityMismatch(VerificationError):
    message = "This command must consume exactly one input and create exactly one output."


class AddressUnchanged(VerificationError):
    message = "The address must change in a move transaction."


class ImmutableFieldChanged(VerificationError):
    message = "A field that may not change in this transaction was changed."


class NonPositiveAmount(VerificationError):
    message = "A newly issued obligation must have a positive amount."


class SelfDealingNotAllowed(VerificationError):
    message = "The lender and borrower cannot have the same identity."


class SignerSetIncomplete(VerificationError):
    message = "The signer set does not match the required participants."


class ReferenceMismatch(VerificationError):
    message = "The borrower of the obligation and the issuer of the referenced address record must match."


class LenderUnchanged(VerificationError):
    message = "The lender must change in a transfer."


class NoInputGroup(VerificationError):
    message = "There must be one input obligation."


class MultipleGroups(VerificationError):
    message = "Only one obligation may be settled per transaction."


class NoCashOutput(VerificationError):
    message = "There must be output cash."


class NoAcceptableCash(VerificationError):
    message = "There must be output cash paid to the lender."


class Overpayment(VerificationError):
    message = "The amount settled cannot be more than the amount outstanding."


class OutputExpectedOnFullSettlement(VerificationError):
    message = "An obligation output must exist if and only if the obligation is not fully settled."


class OutputCardinalityMismatch(VerificationError):
    message = "There must be exactly one output obligation after a partial settlement."


# ============================================================================
# VALUE TYPES
# ============================================================================

@dataclass(frozen=True, slots=True)
class Party:
    """
    A well-known ledger identity.

    Attributes:
        name: Human-readable legal name (e.g., "O=Bank A,L=London,C=GB").
        owning_key: Identifier of the public key that signs on this party's behalf.
    """
    name: str
    owning_key: PublicKeyId

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValueError("Party name cannot be empty")
        if not self.owning_key or not self.owning_key.strip():
            raise ValueError("Party owning_key cannot be empty")

    def __repr__(self) -> str:
        return f"Party({self.name})"


@dataclass(frozen=True, slots=True)
class LinearId:
    """
    Identifier shared by every version of one record's lifeline.

    Two states with equal LinearIds are versions of the same logical record.
    The optional external_id lets callers correlate a lifeline with an
    identifier from another system; it takes part in equality.
    """
    id: uuid.UUID
    external_id: Optional[str] = None

    @classmethod
    def new(cls, external_id: Optional[str] = None) -> LinearId:
        return cls(id=uuid.uuid4(), external_id=external_id)

    def __str__(self) -> str:
        if self.external_id:
            return f"{self.external_id}_{self.id}"
        return str(self.id)


def _places_for(currency: str) -> int:
    return CURRENCY_PRECISION.get(currency, CURRENCY_DECIMAL_PLACES)


@dataclass(frozen=True, slots=True, order=False)
class Amount:
    """
    An exact, non-negative quantity of a currency.

    Arithmetic and ordering are only defined between amounts of the same
    currency; mixing currencies raises CurrencyMismatch.

    Attributes:
        quantity: Exact decimal quantity (never negative, never NaN/Infinity).
        currency: Currency code (e.g., "USD").
    """
    quantity: Decimal
    currency: str

    def __post_init__(self):
        if not self.currency or not self.currency.strip():
            raise ValueError("Amount currency cannot be empty")
        if not isinstance(self.quantity, Decimal):
            raise ValueError(f"Amount quantity must be Decimal, got {type(self.quantity)}")
        if self.quantity.is_infinite() or self.quantity.is_nan():
            raise ValueError(f"Amount quantity must be finite, got {self.quantity}")
        if self.quantity < 0:
            raise ValueError(f"Amount quantity cannot be negative, got {self.quantity}")

    @classmethod
    def zero(cls, currency: str) -> Amount:
        return cls(Decimal("0"), currency)

    def _check_currency(self, other: Amount) -> None:
        if not isinstance(other, Amount):
            raise TypeError(f"Expected Amount, got {type(other)}")
        if other.currency != self.currency:
            raise CurrencyMismatch(
                f"Cannot combine {self.currency} with {other.currency}"
            )

    def __add__(self, other: Amount) -> Amount:
        self._check_currency(other)
        return Amount(self.quantity + other.quantity, self.currency)

    def __sub__(self, other: Amount) -> Amount:
        self._check_currency(other)
        result = self.quantity - other.quantity
        if result < 0:
            raise ValueError(f"Amount subtraction would go negative: {self} - {other}")
        return Amount(result, self.currency)

    def __lt__(self, other: Amount) -> bool:
        self._check_currency(other)
        return self.quantity < other.quantity

    def __le__(self, other: Amount) -> bool:
        self._check_currency(other)
        return self.quantity <= other.quantity

    def __gt__(self, other: Amount) -> bool:
        self._check_currency(other)
        return self.quantity > other.quantity

    def __ge__(self, other: Amount) -> bool:
        self._check_currency(other)
        return self.quantity >= other.quantity

    def __eq__(self, other: object) -> bool:
        # Decimal("1.0") and Decimal("1.00") are the same money.
        if not isinstance(other, Amount):
            return NotImplemented
        return self.currency == other.currency and self.quantity == other.quantity

    def __hash__(self) -> int:
        return hash((self.currency, self.quantity.normalize()))

    def is_zero(self) -> bool:
        return self.quantity == 0

    def __repr__(self) -> str:
        return f"{self.quantity} {self.currency}"


def amount(quantity: Any, currency: str) -> Amount:
    """
    Create an Amount, quantized to the currency's minor units.

    Accepts Decimal, int or str. Floats are converted through str() so that
    amount(0.1, "USD") is exactly 0.10 USD.

    Example:
        amount("100", "USD")  # 100.00 USD
        amount(5, "JPY")      # 5 JPY
    """
    if isinstance(quantity, float):
        quantity = str(quantity)
    value = Decimal(quantity)
    quantizer = Decimal(10) ** -_places_for(currency)
    return Amount(value.quantize(quantizer, rounding=ROUND_HALF_EVEN), currency)


def sum_amounts(amounts: Iterable[Amount], currency: str) -> Amount:
    """Sum amounts exactly, starting from zero in the given currency."""
    total = Amount.zero(currency)
    for a in amounts:
        total = total + a
    return total


# ============================================================================
# COMMANDS
# ============================================================================

class CommandKind(Enum):
    """
    Closed set of transaction intents.

    Dispatch matches on the kind tag; command values are never compared by
    constructing fresh instances.
    """
    PUBLISH = "publish"
    MOVE = "move"
    ISSUE = "issue"
    TRANSFER = "transfer"
    SETTLE = "settle"

    @property
    def contract_id(self) -> str:
        if self in (CommandKind.PUBLISH, CommandKind.MOVE):
            return ADDRESS_CONTRACT_ID
        return OBLIGATION_CONTRACT_ID


@dataclass(frozen=True, slots=True)
class Command:
    """
    A declared intent plus the keys that must have signed for it.

    Attributes:
        kind: What the transaction does.
        signers: Public keys that signed the transaction. Normalised to a frozenset.
    """
    kind: CommandKind
    signers: SignerSet = frozenset()

    def __post_init__(self):
        if not isinstance(self.kind, CommandKind):
            raise ValueError(f"Command kind must be a CommandKind, got {self.kind!r}")
        if not isinstance(self.signers, frozenset):
            object.__setattr__(self, 'signers', frozenset(self.signers))

    def __repr__(self) -> str:
        return f"Command({self.kind.value}, signers={sorted(self.signers)})"


def command(kind: CommandKind, *keys: PublicKeyId) -> Command:
    """Build a Command signed by the given keys."""
    return Command(kind=kind, signers=frozenset(keys))


# ============================================================================
# CANONICAL SERIALISATION
# ============================================================================

def _normalize_decimal(d: Decimal) -> str:
    """
    Normalize a Decimal to a canonical string representation.

    Decimal("1.0") and Decimal("1.00") both become "1".
    """
    normalized = d.normalize()
    if normalized == normalized.to_integral_value():
        return str(int(normalized))
    return format(normalized, 'f')


def _canonicalize(value: Any) -> str:
    """
    Produce a canonical string representation of a value for hashing.

    Output depends only on content: dict and set ordering, Decimal scale and
    object construction history do not affect it.
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return f"E:{type(value).__name__}.{value.name}"
    if isinstance(value, Decimal):
        return f"D:{_normalize_decimal(value)}"
    if isinstance(value, int):
        return f"N:{value}"
    if isinstance(value, str):
        return f"S:{value}"
    if isinstance(value, uuid.UUID):
        return f"U:{value}"
    if isinstance(value, (frozenset, set)):
        serialized = ",".join(sorted(_canonicalize(item) for item in value))
        return f"<{serialized}>"
    if isinstance(value, (list, tuple)):
        serialized = ",".join(_canonicalize(item) for item in value)
        return f"[{serialized}]"
    if isinstance(value, dict):
        items = sorted(value.items(), key=lambda kv: str(kv[0]))
        serialized = ",".join(f"{_canonicalize(k)}:{_canonicalize(v)}" for k, v in items)
        return f"{{{serialized}}}"
    if is_dataclass(value):
        serialized = ",".join(
            f"{f.name}={_canonicalize(getattr(value, f.name))}" for f in fields(value)
        )
        return f"{type(value).__name__}({serialized})"
    raise TypeError(f"Cannot canonicalize value of type {type(value).__name__}")


def _compute_tx_id(
    inputs: Tuple[Any, ...],
    outputs: Tuple[Any, ...],
    references: Tuple[Any, ...],
    commands: Tuple[Command, ...],
) -> str:
    """
    Compute a deterministic content hash for a transaction.

    State order is significant (it is part of the transaction); signer order
    is not.
    """
    content = "|".join([
        f"inputs:{_canonicalize(inputs)}",
        f"outputs:{_canonicalize(outputs)}",
        f"references:{_canonicalize(references)}",
        f"commands:{_canonicalize(commands)}",
    ])
    return hashlib.sha256(content.encode()).hexdigest()


# ============================================================================
# TRANSACTION
# ============================================================================

@dataclass(frozen=True, slots=True)
class Transaction:
    """
    A proposed ledger transition.

    Attributes:
        inputs: Prior states consumed by the transaction.
        outputs: New states produced by the transaction.
        references: States read for cross-checks, neither consumed nor produced.
        commands: Declared intents. A valid transaction carries exactly one.
        tx_id: Content hash of all of the above (auto-computed).

    This class is immutable (frozen=True) and memory-optimized (slots=True).
    Sequences passed in are copied into tuples.
    """
    inputs: Tuple[Any, ...] = ()
    outputs: Tuple[Any, ...] = ()
    references: Tuple[Any, ...] = ()
    commands: Tuple[Command, ...] = ()
    tx_id: str = field(default="", compare=False)

    def __post_init__(self):
        for name in ('inputs', 'outputs', 'references', 'commands'):
            value = getattr(self, name)
            if not isinstance(value, tuple):
                object.__setattr__(self, name, tuple(value))
        for cmd in self.commands:
            if not isinstance(cmd, Command):
                raise ValueError(f"Transaction commands must be Command, got {type(cmd)}")
        if not self.tx_id:
            object.__setattr__(
                self, 'tx_id',
                _compute_tx_id(self.inputs, self.outputs, self.references, self.commands),
            )

    @classmethod
    def single(
        cls,
        cmd: Command,
        inputs: Iterable[Any] = (),
        outputs: Iterable[Any] = (),
        references: Iterable[Any] = (),
    ) -> Transaction:
        """Build a transaction carrying exactly one command."""
        return cls(
            inputs=tuple(inputs),
            outputs=tuple(outputs),
            references=tuple(references),
            commands=(cmd,),
        )

    def __repr__(self) -> str:
        kinds = ",".join(c.kind.value for c in self.commands) or "none"
        return (
            f"Transaction({self.tx_id[:16]}: {len(self.inputs)} in, "
            f"{len(self.outputs)} out, {len(self.references)} ref, cmd={kinds})"
        )


# ============================================================================
# CONFIGURATION
# ============================================================================

class ReferencePolicy(Enum):
    """
    How the issue rule treats the address-record reference.

    OPTIONAL: the borrower/issuer cross-check runs only when an AddressRecord
              reference is supplied.
    MANDATORY: an AddressRecord reference must be supplied and must match.
    """
    OPTIONAL = "optional"
    MANDATORY = "mandatory"


@dataclass(frozen=True, slots=True)
class ValidationSettings:
    """Immutable policy knobs passed to every command verifier."""
    reference_policy: ReferencePolicy = ReferencePolicy.OPTIONAL


DEFAULT_SETTINGS = ValidationSettings()


# ============================================================================
# PROTOCOLS
# ============================================================================

@runtime_checkable
class IdentityProvider(Protocol):
    """
    Resolves public keys to well-known parties.

    Supplied by the node's identity service. Builders that are handed a key
    instead of a Party use it; validation only compares keys.
    """

    def party_from_key(self, key: PublicKeyId) -> Optional[Party]:
        """Return the party owning the key, or None if unknown."""
        ...


@runtime_checkable
class StateLookup(Protocol):
    """
    Read-only access to states known to the calling node.

    Used by transaction builders to find reference states before a
    Transaction is constructed. Validation itself never queries.
    """

    def states_of_type(self, state_type: Type[S]) -> Iterable[S]:
        """Return unconsumed states of the given type, in a stable order."""
        ...
