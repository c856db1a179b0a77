"""
view.py - Read-only projection of a proposed Transaction

TransactionView gives command verifiers typed, order-preserving access to a
Transaction's states without any ability to change them:

    view.inputs_of_type(ObligationRecord)      -> lazy iterator
    view.output_list(AddressRecord)            -> list snapshot
    view.single_reference(AddressRecord)       -> Optional[AddressRecord]
    view.group_states(ObligationRecord)        -> [StateGroup(key, inputs, outputs)]

Filtering preserves the transaction's insertion order. Grouping orders groups
by the first appearance of their key, scanning inputs before outputs, so the
result is identical on every node.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, Iterator, List, Optional, Tuple, Type, TypeVar

from .core import (
    AmbiguousCommand, Command, SignerSet, Transaction,
)


S = TypeVar('S')


@dataclass(frozen=True, slots=True)
class StateGroup:
    """
    All inputs and outputs of one type that share a grouping key.

    For linear states the key is the LinearId, so one group is one lifeline
    as seen by this transaction.
    """
    key: Hashable
    inputs: Tuple[Any, ...]
    outputs: Tuple[Any, ...]


def _of_type(states: Tuple[Any, ...], state_type: Type[S]) -> Iterator[S]:
    return (s for s in states if isinstance(s, state_type))


class TransactionView:
    """
    Typed, read-only access to a Transaction.

    The view borrows the transaction's states and never copies or mutates them.
    """

    __slots__ = ('_tx',)

    def __init__(self, tx: Transaction):
        self._tx = tx

    @property
    def transaction(self) -> Transaction:
        return self._tx

    @property
    def inputs(self) -> Tuple[Any, ...]:
        return self._tx.inputs

    @property
    def outputs(self) -> Tuple[Any, ...]:
        return self._tx.outputs

    @property
    def references(self) -> Tuple[Any, ...]:
        return self._tx.references

    @property
    def command(self) -> Command:
        """
        The transaction's single command.

        Raises:
            AmbiguousCommand: If the transaction does not carry exactly one command.
        """
        commands = self._tx.commands
        if len(commands) != 1:
            raise AmbiguousCommand(
                count=len(commands),
                kinds=[c.kind.value for c in commands],
            )
        return commands[0]

    @property
    def signers(self) -> SignerSet:
        return self.command.signers

    # ------------------------------------------------------------------
    # Typed filters (lazy)
    # ------------------------------------------------------------------

    def inputs_of_type(self, state_type: Type[S]) -> Iterator[S]:
        return _of_type(self._tx.inputs, state_type)

    def outputs_of_type(self, state_type: Type[S]) -> Iterator[S]:
        return _of_type(self._tx.outputs, state_type)

    def references_of_type(self, state_type: Type[S]) -> Iterator[S]:
        return _of_type(self._tx.references, state_type)

    # List snapshots, for rules that need len() and indexing

    def input_list(self, state_type: Type[S]) -> List[S]:
        return list(self.inputs_of_type(state_type))

    def output_list(self, state_type: Type[S]) -> List[S]:
        return list(self.outputs_of_type(state_type))

    def reference_list(self, state_type: Type[S]) -> List[S]:
        return list(self.references_of_type(state_type))

    def single_reference(self, state_type: Type[S]) -> Optional[S]:
        """
        Return the first reference state of the given type, or None.

        Absence is reported explicitly rather than inferred from an empty list
        of some other type.
        """
        return next(self.references_of_type(state_type), None)

    # ------------------------------------------------------------------
    # Grouping
    # ------------------------------------------------------------------

    def group_states(
        self,
        state_type: Type[S],
        key: Callable[[S], Hashable] = lambda s: s.id,
    ) -> List[StateGroup]:
        """
        Group inputs and outputs of a type by key.

        Args:
            state_type: Type of state to group.
            key: Function returning the grouping key (default: the LinearId).

        Returns:
            One StateGroup per distinct key, ordered by first appearance.
        """
        order: List[Hashable] = []
        grouped: Dict[Hashable, Tuple[List[S], List[S]]] = {}

        for s in self.inputs_of_type(state_type):
            k = key(s)
            if k not in grouped:
                grouped[k] = ([], [])
                order.append(k)
            grouped[k][0].append(s)

        for s in self.outputs_of_type(state_type):
            k = key(s)
            if k not in grouped:
                grouped[k] = ([], [])
                order.append(k)
            grouped[k][1].append(s)

        return [
            StateGroup(key=k, inputs=tuple(grouped[k][0]), outputs=tuple(grouped[k][1]))
            for k in order
        ]

    def __repr__(self) -> str:
        return f"TransactionView({self._tx!r})"
