"""
Provenance Guard

Enforces "operation X may only happen inside process Y" rules on entity
mutations. A protected mutation is allowed only when the chain of triggering
operations that led to it contains an approved originating operation
(e.g. a sales order may only be created while a quote is being converted).

PURPOSE:
- Check that a rule is attached where it makes sense (entity, message, mode)
- Search the triggering-context ancestry for an approved origin
- Report ALLOWED / DENIED / NOT_APPLICABLE with the exact message for the actor
- Record non-fatal advisories (late pipeline stage) without changing the outcome

ARCHITECTURE:
- context_models.py: ExecutionContextSnapshot, ExecutionMode, ExecutionStage
- policy_models.py: PolicyRule, PolicyResult, outcome and kind enums
- precondition_validator.py: ordered, fail-fast structural checks
- ancestry_matcher.py: bounded walk of the parent chain
- policy_engine.py: evaluate(context) -> PolicyResult
- host_adapter.py: service-provider plugin that raises on refusal
- audit_logger.py: append-only decision log

DEFAULT BEHAVIOR: DENY unless an approved origin is found.
"""

from provenance_guard.context_models import (
    ExecutionContextSnapshot,
    ExecutionMode,
    ExecutionStage,
    TriggeringContext,
)
from provenance_guard.policy_models import (
    ApprovedOperations,
    PolicyOutcome,
    PolicyResult,
    PolicyResultKind,
    PolicyRule,
)
from provenance_guard.errors import (
    AncestryDepthExceeded,
    OperationStatus,
    PolicyEnforcementError,
)
from provenance_guard.diagnostics import (
    DiagnosticsSink,
    LoggingDiagnosticsSink,
    MemoryDiagnosticsSink,
)
from provenance_guard.precondition_validator import (
    PreconditionCheck,
    PreconditionStatus,
    PreconditionValidator,
)
from provenance_guard.ancestry_matcher import (
    DEFAULT_MAX_ANCESTRY_DEPTH,
    AncestryMatch,
    AncestryMatcher,
)
from provenance_guard.policy_engine import PolicyEngine
from provenance_guard.rules import (
    approved_operations,
    rule_from_settings,
    sales_order_from_quote_rule,
)
from provenance_guard.audit_logger import PolicyAuditLogger
from provenance_guard.host_adapter import (
    ProvenancePolicyPlugin,
    SimpleServiceProvider,
    raise_for_result,
)

__all__ = [
    "ExecutionContextSnapshot",
    "ExecutionMode",
    "ExecutionStage",
    "TriggeringContext",
    "ApprovedOperations",
    "PolicyOutcome",
    "PolicyResult",
    "PolicyResultKind",
    "PolicyRule",
    "AncestryDepthExceeded",
    "OperationStatus",
    "PolicyEnforcementError",
    "DiagnosticsSink",
    "LoggingDiagnosticsSink",
    "MemoryDiagnosticsSink",
    "PreconditionCheck",
    "PreconditionStatus",
    "PreconditionValidator",
    "DEFAULT_MAX_ANCESTRY_DEPTH",
    "AncestryMatch",
    "AncestryMatcher",
    "PolicyEngine",
    "approved_operations",
    "rule_from_settings",
    "sales_order_from_quote_rule",
    "PolicyAuditLogger",
    "ProvenancePolicyPlugin",
    "SimpleServiceProvider",
    "raise_for_result",
]
