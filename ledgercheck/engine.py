"""
engine.py - Command dispatch and the validate() entry point

The Validator is the only entry point callers need:

    result = Validator().validate(tx)
    if not result:
        print(result.rule, result.reason)

Dispatch runs the structural checks first (exactly one command, a verifier
registered for its kind), then hands the transaction to that verifier. The
verifier's first failure is the result; nothing is aggregated.

A Validator holds only immutable configuration, so one instance can validate
any number of transactions concurrently.
"""

from __future__ import annotations
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Dict, Mapping, Optional

from .core import (
    Command, CommandKind, Transaction, ValidationSettings, VerificationError,
    UnknownCommand, DEFAULT_SETTINGS,
)
from .view import TransactionView
from .contracts.address import verify_move, verify_publish
from .contracts.obligation import verify_issue, verify_settle, verify_transfer


# Type alias for command verifiers.
# Verifiers return None on success and raise VerificationError on the first violated rule.
Verifier = Callable[[TransactionView, Command, ValidationSettings], None]


DEFAULT_VERIFIERS: Mapping[CommandKind, Verifier] = MappingProxyType({
    CommandKind.PUBLISH: verify_publish,
    CommandKind.MOVE: verify_move,
    CommandKind.ISSUE: verify_issue,
    CommandKind.TRANSFER: verify_transfer,
    CommandKind.SETTLE: verify_settle,
})


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """
    Outcome of validating one transaction.

    Attributes:
        ok: True if every rule held.
        error: The first violated rule, or None when ok.

    Truthiness follows ok, so `if validator.validate(tx):` reads naturally.
    """
    ok: bool
    error: Optional[VerificationError] = None

    def __post_init__(self):
        if self.ok and self.error is not None:
            raise ValueError("An accepted result cannot carry an error")
        if not self.ok and self.error is None:
            raise ValueError("A rejected result must carry an error")

    def __bool__(self) -> bool:
        return self.ok

    @property
    def rule(self) -> Optional[str]:
        return self.error.rule if self.error is not None else None

    @property
    def reason(self) -> Optional[str]:
        return self.error.message if self.error is not None else None

    @classmethod
    def rejected(cls, error: VerificationError) -> ValidationResult:
        return cls(ok=False, error=error)

    def __repr__(self) -> str:
        if self.ok:
            return "ValidationResult(OK)"
        return f"ValidationResult(REJECTED: {self.error!r})"


ACCEPTED = ValidationResult(ok=True)


class Validator:
    """
    Routes each transaction to the verifier for its command.

    Design Principles:
        - Structural before semantic: AmbiguousCommand and UnknownCommand are
          decided before any verifier runs.
        - Fail fast: the first violated rule is the whole answer.
        - No side effects: validation reads the transaction and nothing else.

    Example:
        validator = Validator(ValidationSettings(reference_policy=ReferencePolicy.MANDATORY))
        result = validator.validate(tx)
        result.ok      # False
        result.rule    # 'ReferenceMismatch'
    """

    def __init__(
        self,
        settings: Optional[ValidationSettings] = None,
        verifiers: Optional[Mapping[CommandKind, Verifier]] = None,
        verbose: bool = False,
    ):
        """
        Create a validator.

        Args:
            settings: Policy passed to every verifier (default: DEFAULT_SETTINGS)
            verifiers: Command kind -> verifier table (default: DEFAULT_VERIFIERS)
            verbose: Print one line per accepted or rejected transaction (default: False)
        """
        self.settings = settings or DEFAULT_SETTINGS
        table: Dict[CommandKind, Verifier] = dict(
            DEFAULT_VERIFIERS if verifiers is None else verifiers
        )
        self.verifiers: Mapping[CommandKind, Verifier] = MappingProxyType(table)
        self.verbose = verbose

    def verify(self, tx: Transaction) -> None:
        """
        Verify a transaction, raising on the first violated rule.

        Raises:
            AmbiguousCommand: If the transaction does not carry exactly one command.
            UnknownCommand: If no verifier is registered for the command's kind.
            VerificationError: The first business rule the transaction violates.
        """
        view = TransactionView(tx)
        cmd = view.command

        verifier = self.verifiers.get(cmd.kind)
        if verifier is None:
            raise UnknownCommand(
                kind=cmd.kind.value,
                registered=sorted(k.value for k in self.verifiers),
            )

        verifier(view, cmd, self.settings)

    def validate(self, tx: Transaction) -> ValidationResult:
        """
        Validate a transaction.

        Returns:
            ACCEPTED if every rule holds, otherwise a rejected ValidationResult
            carrying the first violated rule.
        """
        try:
            self.verify(tx)
        except VerificationError as e:
            if self.verbose:
                print(f"✗ REJECTED: [{e.rule}] {e.message} tx={tx.tx_id[:16]}")
            return ValidationResult.rejected(e)

        if self.verbose:
            print(f"✓ ACCEPTED: {tx.commands[0].kind.value} tx={tx.tx_id[:16]}")
        return ACCEPTED

    def __repr__(self) -> str:
        kinds = ",".join(k.value for k in self.verifiers)
        return f"Validator(policy={self.settings.reference_policy.value}, verifiers=[{kinds}])"


_DEFAULT_VALIDATOR = Validator()


def validate(tx: Transaction) -> ValidationResult:
    """Validate a transaction with the default verifiers and settings."""
    return _DEFAULT_VALIDATOR.validate(tx)


def verify(tx: Transaction) -> None:
    """Verify a transaction with the default verifiers and settings, raising on failure."""
    _DEFAULT_VALIDATOR.verify(tx)
