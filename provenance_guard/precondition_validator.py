"""
Provenance Guard: Precondition Validator

Structural checks that must hold before an ancestry search means anything.

Checks run in a fixed order and stop at the first failure, so an administrator
sees exactly which assumption broke (wrong entity, wrong message, wrong mode)
instead of a downstream symptom. The stage check is advisory only: it is
sent to the diagnostics sink and counted but never changes the outcome.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from provenance_guard import metrics
from provenance_guard.context_models import ExecutionContextSnapshot, ExecutionMode
from provenance_guard.diagnostics import DiagnosticsSink
from provenance_guard.policy_models import (
    PolicyOutcome,
    PolicyResult,
    PolicyResultKind,
    PolicyRule,
)


class PreconditionStatus(Enum):
    CONTINUE = "continue"
    NOT_APPLICABLE = "not_applicable"
    DENIED = "denied"


@dataclass(frozen=True)
class PreconditionCheck:
    """Outcome of validate(); ``kind`` and ``message`` are empty on CONTINUE."""

    status: PreconditionStatus
    kind: Optional[PolicyResultKind] = None
    message: str = ""

    @property
    def passed(self) -> bool:
        return self.status is PreconditionStatus.CONTINUE

    def to_result(self, rule: PolicyRule, context: ExecutionContextSnapshot) -> PolicyResult:
        if self.passed:
            raise ValueError("A passing precondition check has no policy result")
        outcome = (
            PolicyOutcome.NOT_APPLICABLE
            if self.status is PreconditionStatus.NOT_APPLICABLE
            else PolicyOutcome.DENIED
        )
        return PolicyResult(
            outcome=outcome,
            kind=self.kind,
            message=self.message,
            rule_name=rule.name,
            entity_name=context.entity_name,
            operation_name=context.operation_name,
        )


def _mode_label(mode: ExecutionMode) -> str:
    return "synchronously" if mode == ExecutionMode.SYNCHRONOUS else "asynchronously"


def _stage_label(stage) -> str:
    # PRE_OPERATION -> PreOperation, the host's spelling
    return "".join(part.capitalize() for part in stage.name.split("_"))


class PreconditionValidator:
    """
    Mechanical applicability checks for a provenance rule.

    Each check returns an (ok, reason) tuple and looks only at the context's
    own attributes, never at its ancestry.
    """

    @staticmethod
    def check_entity(context: ExecutionContextSnapshot, rule: PolicyRule) -> Tuple[bool, str]:
        if (context.entity_name or "").lower() != rule.applies_to_entity.lower():
            return (
                False,
                f"The {rule.name} policy should only be attached to the "
                f"{rule.applies_to_entity} entity but is attached to the "
                f"{context.entity_name} entity",
            )
        return True, "Entity matches"

    @staticmethod
    def check_operation(context: ExecutionContextSnapshot, rule: PolicyRule) -> Tuple[bool, str]:
        if (context.operation_name or "").lower() != rule.applies_to_operation.lower():
            return (
                False,
                f"The {rule.name} policy should only be attached to the "
                f"{rule.applies_to_operation} message but is attached to the "
                f"{context.operation_name} message",
            )
        return True, "Operation matches"

    @staticmethod
    def check_mode(context: ExecutionContextSnapshot, rule: PolicyRule) -> Tuple[bool, str]:
        if context.execution_mode != rule.required_mode:
            return (
                False,
                f"The {rule.name} policy only works when executed "
                f"{_mode_label(rule.required_mode)} but it is being executed "
                f"{_mode_label(context.execution_mode)}",
            )
        return True, "Execution mode is supported"

    @staticmethod
    def check_stage(context: ExecutionContextSnapshot, rule: PolicyRule) -> Tuple[bool, str]:
        if context.execution_stage > rule.recommended_stage:
            return (
                False,
                f"The {rule.name} policy is registered after the database write, "
                f"it is best practice to register in the "
                f"{_stage_label(rule.recommended_stage)} stage",
            )
        return True, "Execution stage is at or before the recommended stage"

    @staticmethod
    def validate(
        context: ExecutionContextSnapshot,
        rule: PolicyRule,
        diagnostics: Optional[DiagnosticsSink] = None,
    ) -> PreconditionCheck:
        """
        Run all structural checks in order.

        Args:
            context: Snapshot of the operation being evaluated
            rule: Rule being applied
            diagnostics: Sink receiving the stage advisory (optional)

        Returns:
            PreconditionCheck with status CONTINUE, NOT_APPLICABLE or DENIED
        """
        ok, reason = PreconditionValidator.check_entity(context, rule)
        if not ok:
            return PreconditionCheck(
                PreconditionStatus.NOT_APPLICABLE, PolicyResultKind.MISCONFIGURED_TARGET, reason
            )

        ok, reason = PreconditionValidator.check_operation(context, rule)
        if not ok:
            return PreconditionCheck(
                PreconditionStatus.NOT_APPLICABLE, PolicyResultKind.MISCONFIGURED_TARGET, reason
            )

        ok, reason = PreconditionValidator.check_mode(context, rule)
        if not ok:
            return PreconditionCheck(
                PreconditionStatus.DENIED, PolicyResultKind.UNSUPPORTED_MODE, reason
            )

        ok, reason = PreconditionValidator.check_stage(context, rule)
        if not ok:
            metrics.record_advisory(rule.name, PolicyResultKind.ADVISORY_STAGE_MISMATCH.value)
            if diagnostics is not None:
                diagnostics.trace(reason)

        return PreconditionCheck(PreconditionStatus.CONTINUE)
