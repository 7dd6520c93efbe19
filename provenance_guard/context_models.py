"""
Provenance Guard: Execution Context Models

These models describe ONE triggering operation as the host hands it over:
- PURELY STRUCTURAL (no policy logic)
- READ-ONLY (frozen; the engine never mutates a context or its parents)
- BORROWED (the parent chain belongs to the host; it is traversed, never copied)

The parent link points at the operation that caused this one. Following it
walks the ancestry chain from the nearest trigger up to the outermost one.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, Iterator, List, Optional, Protocol, runtime_checkable
from uuid import uuid4


class ExecutionMode(IntEnum):
    """How the host runs the step (values match the host platform)."""
    SYNCHRONOUS = 0
    ASYNCHRONOUS = 1


class ExecutionStage(IntEnum):
    """
    Pipeline stage of the step, ordered.

    Anything after PRE_OPERATION runs once the data write has happened.
    """
    PRE_VALIDATION = 10
    PRE_OPERATION = 20
    MAIN_OPERATION = 30
    POST_OPERATION = 40


def parse_mode(value: Any) -> ExecutionMode:
    """Accept an ExecutionMode, its name (any case) or its integer value."""
    return _parse_enum(ExecutionMode, value)


def parse_stage(value: Any) -> ExecutionStage:
    """Accept an ExecutionStage, its name (any case) or its integer value."""
    return _parse_enum(ExecutionStage, value)


def _parse_enum(enum_cls, value):
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Invalid {enum_cls.__name__}: {value!r}")
    if isinstance(value, int):
        try:
            return enum_cls(value)
        except ValueError:
            raise ValueError(f"Invalid {enum_cls.__name__}: {value!r}") from None
    if isinstance(value, str):
        key = value.strip().replace("-", "_").replace(" ", "_").upper()
        # Host names are CamelCase ("PreOperation")
        compact = {member.name.replace("_", ""): member for member in enum_cls}
        if key in enum_cls.__members__:
            return enum_cls[key]
        if key.replace("_", "") in compact:
            return compact[key.replace("_", "")]
        if key.isdigit():
            return _parse_enum(enum_cls, int(key))
    raise ValueError(f"Invalid {enum_cls.__name__}: {value!r}")


@runtime_checkable
class TriggeringContext(Protocol):
    """
    Minimal view of a context needed to walk the ancestry chain.

    Host objects only have to expose these two attributes.
    """

    @property
    def operation_name(self) -> str: ...

    @property
    def parent(self) -> Optional["TriggeringContext"]: ...


@dataclass(frozen=True)
class ExecutionContextSnapshot:
    """
    Immutable snapshot of one triggering operation.

    NO LOGIC IN THIS CLASS beyond walking and (de)serializing the chain.
    """

    # Entity being mutated (e.g., "salesorder")
    entity_name: str

    # Operation kind (e.g., "create")
    operation_name: str

    execution_mode: ExecutionMode = ExecutionMode.SYNCHRONOUS
    execution_stage: ExecutionStage = ExecutionStage.PRE_OPERATION

    # Actor that started the operation. Recorded, not evaluated.
    initiating_principal: Optional[str] = None

    # The context that triggered this one (back-reference, not ownership)
    parent: Optional[TriggeringContext] = field(default=None, repr=False)

    context_id: str = field(default_factory=lambda: str(uuid4()))

    def ancestors(self) -> Iterator[TriggeringContext]:
        """Yield parents nearest first. Unbounded; callers impose a limit."""
        current = self.parent
        while current is not None:
            yield current
            current = current.parent

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a nested dictionary (parents nested under "parent")."""
        root = self._level_dict(self)
        current = root
        parent = self.parent
        while parent is not None:
            if isinstance(parent, ExecutionContextSnapshot):
                level = self._level_dict(parent)
            else:
                # Host context: only the traversal attributes are known
                level = {"operation_name": parent.operation_name, "parent": None}
            current["parent"] = level
            current = level
            # Snapshots cannot form cycles; host chains are not followed
            parent = parent.parent if isinstance(parent, ExecutionContextSnapshot) else None
        return root

    @staticmethod
    def _level_dict(context: "ExecutionContextSnapshot") -> Dict[str, Any]:
        return {
            "context_id": context.context_id,
            "entity_name": context.entity_name,
            "operation_name": context.operation_name,
            "execution_mode": context.execution_mode.name,
            "execution_stage": context.execution_stage.name,
            "initiating_principal": context.initiating_principal,
            "parent": None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExecutionContextSnapshot":
        """
        Build a snapshot chain from a nested mapping.

        Parents may omit entity_name; mode and stage default like the
        dataclass does.

        Raises:
            ValueError: missing operation/entity or unknown mode/stage value
        """
        if not isinstance(data, dict):
            raise ValueError(f"Context must be a mapping, got {type(data).__name__}")

        # Parents first so a deep payload does not recurse while half-built
        levels: List[Dict[str, Any]] = []
        current: Optional[Dict[str, Any]] = data
        while current is not None:
            if not isinstance(current, dict):
                raise ValueError(f"Parent context must be a mapping, got {type(current).__name__}")
            levels.append(current)
            current = current.get("parent")

        built: Optional[ExecutionContextSnapshot] = None
        for index, level in reversed(list(enumerate(levels))):
            operation = level.get("operation_name")
            if not operation:
                raise ValueError(f"Context at depth {index} is missing operation_name")
            entity = level.get("entity_name")
            if index == 0 and not entity:
                raise ValueError("Context is missing entity_name")
            kwargs: Dict[str, Any] = {
                "entity_name": entity or "",
                "operation_name": operation,
                "execution_mode": parse_mode(level.get("execution_mode", ExecutionMode.SYNCHRONOUS)),
                "execution_stage": parse_stage(level.get("execution_stage", ExecutionStage.PRE_OPERATION)),
                "initiating_principal": level.get("initiating_principal"),
                "parent": built,
            }
            if level.get("context_id"):
                kwargs["context_id"] = str(level["context_id"])
            built = cls(**kwargs)
        return built

    @classmethod
    def chain(
        cls,
        entity_name: str,
        operation_name: str,
        ancestry: Optional[List[str]] = None,
        execution_mode: ExecutionMode = ExecutionMode.SYNCHRONOUS,
        execution_stage: ExecutionStage = ExecutionStage.PRE_OPERATION,
        initiating_principal: Optional[str] = None,
    ) -> "ExecutionContextSnapshot":
        """
        Build a context whose parents carry the given operation names.

        ``ancestry`` is nearest first: ancestry[0] is the direct parent.
        """
        parent = None
        for name in reversed(ancestry or []):
            parent = cls(entity_name="", operation_name=name, parent=parent)
        return cls(
            entity_name=entity_name,
            operation_name=operation_name,
            execution_mode=execution_mode,
            execution_stage=execution_stage,
            initiating_principal=initiating_principal,
            parent=parent,
        )
