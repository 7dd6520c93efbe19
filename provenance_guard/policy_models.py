"""
Provenance Guard: Policy Models

Rule configuration and evaluation results.

A PolicyRule is created once at configuration time and shared read-only by
every evaluation. A PolicyResult is created once per evaluation and carries
the exact message shown to the actor plus a kind for programmatic handling.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, Optional

from provenance_guard.context_models import ExecutionMode, ExecutionStage


class PolicyOutcome(Enum):
    """Outcome of a policy evaluation."""
    NOT_APPLICABLE = "not_applicable"
    DENIED = "denied"
    ALLOWED = "allowed"


class PolicyResultKind(Enum):
    """
    Machine-distinguishable reason behind an outcome.

    ADVISORY_STAGE_MISMATCH is only ever recorded as a diagnostic; no result
    carries it.
    """
    APPROVED_ORIGIN_FOUND = "approved_origin_found"
    MISCONFIGURED_TARGET = "misconfigured_target"
    UNSUPPORTED_MODE = "unsupported_mode"
    POLICY_VIOLATION = "policy_violation"
    MALFORMED_ANCESTRY = "malformed_ancestry"
    ADVISORY_STAGE_MISMATCH = "advisory_stage_mismatch"


@dataclass(frozen=True)
class ApprovedOperations:
    """Case-insensitive predicate matching any of a fixed set of operation names."""

    names: FrozenSet[str]

    def __post_init__(self):
        normalized = frozenset(name.strip().lower() for name in self.names if name and name.strip())
        if not normalized:
            raise ValueError("At least one approved operation name is required")
        object.__setattr__(self, "names", normalized)

    def __call__(self, operation_name: Optional[str]) -> bool:
        if not operation_name:
            return False
        return operation_name.lower() in self.names

    def describe(self) -> str:
        return ", ".join(sorted(self.names))


@dataclass(frozen=True)
class PolicyRule:
    """
    Immutable provenance rule.

    "A mutation of ``applies_to_entity`` via ``applies_to_operation`` is only
    permitted when some ancestor operation satisfies ``approved_origin``."
    """

    name: str
    applies_to_entity: str
    applies_to_operation: str
    approved_origin: Callable[[str], bool] = field(compare=False)
    violation_message: str
    required_mode: ExecutionMode = ExecutionMode.SYNCHRONOUS
    recommended_stage: ExecutionStage = ExecutionStage.PRE_OPERATION

    # Label for the approved process used in diagnostics (e.g. "convertquotetosalesorder")
    approved_process: str = ""

    def __post_init__(self):
        if not self.name:
            raise ValueError("Policy rule requires a name")
        if not self.applies_to_entity:
            raise ValueError("Policy rule requires applies_to_entity")
        if not self.applies_to_operation:
            raise ValueError("Policy rule requires applies_to_operation")
        if not callable(self.approved_origin):
            raise ValueError("approved_origin must be callable")
        if not self.violation_message:
            raise ValueError("Policy rule requires a violation_message")
        if not self.approved_process and isinstance(self.approved_origin, ApprovedOperations):
            object.__setattr__(self, "approved_process", self.approved_origin.describe())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "applies_to_entity": self.applies_to_entity,
            "applies_to_operation": self.applies_to_operation,
            "approved_process": self.approved_process,
            "required_mode": self.required_mode.name,
            "recommended_stage": self.recommended_stage.name,
            "violation_message": self.violation_message,
        }


@dataclass(frozen=True)
class PolicyResult:
    """
    Result of evaluating one rule against one context.

    No timestamp: evaluating the same (context, rule) twice gives equal results.
    """

    outcome: PolicyOutcome
    kind: PolicyResultKind
    message: str
    rule_name: str
    entity_name: Optional[str] = None
    operation_name: Optional[str] = None

    # Set only when an approved ancestor was found
    matched_operation: Optional[str] = None
    matched_depth: Optional[int] = None

    @property
    def allowed(self) -> bool:
        return self.outcome is PolicyOutcome.ALLOWED

    @property
    def denied(self) -> bool:
        return self.outcome is PolicyOutcome.DENIED

    @property
    def not_applicable(self) -> bool:
        return self.outcome is PolicyOutcome.NOT_APPLICABLE

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "outcome": self.outcome.value,
            "kind": self.kind.value,
            "message": self.message,
            "rule_name": self.rule_name,
            "entity_name": self.entity_name,
            "operation_name": self.operation_name,
            "matched_operation": self.matched_operation,
            "matched_depth": self.matched_depth,
        }
