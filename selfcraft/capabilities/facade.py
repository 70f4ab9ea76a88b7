"""
Façade base classes shared by every domain's capability set.

A CapabilitySet owns a closed tuple of argument variants and one handler per
variant. The pairing is checked when the set is built, so adding a variant
without a handler (or the reverse) fails at startup instead of at the
agent's first call.

A RecordFacade adds the persisted-record shape on top: every mutating
handler goes through _commit(), which runs load → transition → save as one
locked unit and then dispatches the transition's effects.
"""

from __future__ import annotations

from typing import Any, Callable, ClassVar, Generic, Optional, TypeVar

import structlog
from pydantic import BaseModel

from selfcraft.capabilities.registry import CapabilityArguments, CapabilityDefinition
from selfcraft.effects import EffectDispatcher, Transition
from selfcraft.errors import InvalidArgument
from selfcraft.records import now_ms
from selfcraft.store import RecordStore

logger = structlog.get_logger(__name__)

R = TypeVar("R", bound=BaseModel)
T = TypeVar("T")

Handler = Callable[[Any], Any]


class CapabilitySet:
    """A closed group of capabilities dispatched by argument type."""

    category: ClassVar[str] = "general"
    operations: ClassVar[tuple[type[CapabilityArguments], ...]] = ()

    def __init__(self) -> None:
        self._dispatch: dict[type[CapabilityArguments], Handler] = self._handlers()
        missing = [op.__name__ for op in self.operations if op not in self._dispatch]
        extra = [op.__name__ for op in self._dispatch if op not in self.operations]
        if missing or extra:
            raise TypeError(
                f"{type(self).__name__} handlers do not match its operations "
                f"(missing: {missing}, unexpected: {extra})"
            )

    def _handlers(self) -> dict[type[CapabilityArguments], Handler]:
        raise NotImplementedError

    def apply(self, op: CapabilityArguments) -> Any:
        """Run the handler for ``op``'s variant."""
        handler = self._dispatch.get(type(op))
        if handler is None:
            raise InvalidArgument(
                f"{type(op).__name__} is not a {self.category} operation"
            )
        return handler(op)

    def definitions(self) -> list[CapabilityDefinition]:
        return [
            CapabilityDefinition(
                name=op.capability_name,
                description=op.capability_description,
                arguments=op,
                handler=self.apply,
                category=self.category,
            )
            for op in self.operations
        ]


class RecordFacade(CapabilitySet, Generic[R]):
    """A capability set over one persisted record."""

    storage_key: ClassVar[str] = ""

    def __init__(
        self,
        store: RecordStore,
        dispatcher: EffectDispatcher,
        clock: Optional[Callable[[], int]] = None,
    ) -> None:
        self._store = store
        self._dispatcher = dispatcher
        self._clock = clock or now_ms
        super().__init__()

    def default_record(self) -> R:
        raise NotImplementedError

    def current(self) -> R:
        """Read-only view of the stored record (the UI read path)."""
        return self._store.load(self.storage_key, self.default_record())

    def _commit(self, fn: Callable[[R], tuple[Transition[R], T]]) -> tuple[R, T]:
        """Apply ``fn`` atomically, then run the effects it produced."""
        transition, result = self._store.transact(self.storage_key, self.default_record(), fn)
        if transition.effects:
            self._dispatcher.dispatch(transition.effects)
        return transition.record, result

    def _commit_transition(self, fn: Callable[[R], Transition[R]]) -> R:
        record, _ = self._commit(lambda current: (fn(current), None))
        return record
