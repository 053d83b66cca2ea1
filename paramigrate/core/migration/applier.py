"""Operation appliers -- the side of the engine that performs edits.

The engine only knows the :class:`OperationApplier` protocol.  The
built-in :class:`ProjectStateApplier` projects every edit onto an
in-memory working copy of the scanned :class:`ProjectState`, so
post-migration validation runs against the state the project will be in
once code generation writes the operations' text.

An operation's ``before`` records are removed and its ``after`` records
added.  Rollback uses the very same path with
:meth:`ReplacementOperation.inverse`, which swaps the two.
"""

import logging
from typing import Dict, List, Protocol, runtime_checkable

from ..errors import OperationError
from .models import (
    DependencyEntry,
    FileImport,
    HookUsage,
    ProjectState,
    ProviderUsage,
    Record,
    ReplacementOperation,
    StyleImport,
)

logger = logging.getLogger(__name__)


@runtime_checkable
class OperationApplier(Protocol):
    """Applies operations and reports the resulting project state."""

    def apply(self, operation: ReplacementOperation) -> None:
        """Apply one operation or raise :class:`OperationError`."""
        ...

    def current_state(self) -> ProjectState:
        ...


class ProjectStateApplier:
    """Applies operations to a mutable working copy of a ProjectState.

    An operation is atomic: either all of its records move or none do.
    """

    def __init__(self, state: ProjectState):
        self._dependencies: Dict[str, str] = dict(state.dependencies)
        self._collections: Dict[type, List] = {
            FileImport: list(state.imports),
            ProviderUsage: list(state.providers),
            HookUsage: list(state.hooks),
            StyleImport: list(state.styles),
        }
        self._entry_points = state.entry_points

    def current_state(self) -> ProjectState:
        return ProjectState(
            dependencies=self._dependencies,
            imports=self._collections[FileImport],
            providers=self._collections[ProviderUsage],
            hooks=self._collections[HookUsage],
            styles=self._collections[StyleImport],
            entry_points=self._entry_points,
        )

    def apply(self, operation: ReplacementOperation) -> None:
        # Stage on copies so a failure part-way leaves nothing half-applied
        dependencies = dict(self._dependencies)
        collections = {kind: list(items) for kind, items in self._collections.items()}
        slots: Dict[type, int] = {}

        for record in operation.before:
            if isinstance(record, DependencyEntry):
                if dependencies.get(record.name) != record.version:
                    raise OperationError(
                        operation.id,
                        f"dependency {record.name}@{record.version} not present",
                    )
                del dependencies[record.name]
                continue
            items = self._collection(collections, record, operation.id)
            try:
                index = items.index(record)
            except ValueError:
                raise OperationError(
                    operation.id, f"{_describe(record)} not found in project state"
                ) from None
            items.pop(index)
            slots.setdefault(type(record), index)

        for record in operation.after:
            if isinstance(record, DependencyEntry):
                dependencies[record.name] = record.version
                continue
            items = self._collection(collections, record, operation.id)
            # Replacement records take the slot of the record they replaced
            index = slots.get(type(record))
            if index is None:
                items.append(record)
            else:
                items.insert(index, record)
                slots[type(record)] = index + 1

        self._dependencies = dependencies
        self._collections = collections
        logger.debug("Applied %s (%s)", operation.id, operation.kind.value)

    @staticmethod
    def _collection(collections: Dict[type, List], record: Record, operation_id: str) -> List:
        items = collections.get(type(record))
        if items is None:
            raise OperationError(operation_id, f"unsupported record type {type(record).__name__}")
        return items


def _describe(record: Record) -> str:
    file = getattr(record, "file", "?")
    line = getattr(record, "line", "?")
    return f"{type(record).__name__} at {file}:{line}"
