"""
Provenance Guard: Policy Engine

Single entry point the host calls: evaluate(context) -> PolicyResult.

Evaluation Model:
1. PreconditionValidator checks entity, operation and mode (stage is advisory)
2. NOT_APPLICABLE / DENIED preconditions are returned as-is, no ancestry search
3. AncestryMatcher looks for an approved ancestor
4. Found -> ALLOWED; not found -> DENIED with the rule's violation message;
   chain too deep -> DENIED as MALFORMED_ANCESTRY

Key Properties:
- Deterministic: same (context, rule) gives an equal PolicyResult
- Read-Only: never writes to the entity or any store
- Synchronous: bounded steps, nothing to wait on
"""

import logging
from typing import Iterable, List, Optional

from provenance_guard import metrics
from provenance_guard.ancestry_matcher import AncestryMatcher
from provenance_guard.context_models import ExecutionContextSnapshot
from provenance_guard.diagnostics import DiagnosticsSink, LoggingDiagnosticsSink
from provenance_guard.errors import AncestryDepthExceeded
from provenance_guard.policy_models import (
    PolicyOutcome,
    PolicyResult,
    PolicyResultKind,
    PolicyRule,
)
from provenance_guard.precondition_validator import PreconditionValidator

logger = logging.getLogger(__name__)


class PolicyEngine:
    """
    Compose precondition validation and ancestry search for provenance rules.

    Usage:
        engine = PolicyEngine(sales_order_from_quote_rule())
        result = engine.evaluate(context)
        if not result.allowed:
            raise PolicyEnforcementError(result.message, kind=result.kind)
    """

    def __init__(
        self,
        rule: Optional[PolicyRule] = None,
        matcher: Optional[AncestryMatcher] = None,
        validator: Optional[PreconditionValidator] = None,
        diagnostics: Optional[DiagnosticsSink] = None,
    ):
        """
        Args:
            rule: Default rule used when evaluate() is not given one
            matcher: Ancestry matcher (default bound: DEFAULT_MAX_ANCESTRY_DEPTH)
            validator: Precondition validator
            diagnostics: Default sink for advisories (logs when omitted)
        """
        self.rule = rule
        self.matcher = matcher or AncestryMatcher()
        self.validator = validator or PreconditionValidator()
        self.diagnostics = diagnostics or LoggingDiagnosticsSink()

    def evaluate(
        self,
        context: ExecutionContextSnapshot,
        rule: Optional[PolicyRule] = None,
        diagnostics: Optional[DiagnosticsSink] = None,
    ) -> PolicyResult:
        """
        Evaluate one rule against one context.

        Args:
            context: Snapshot supplied by the host
            rule: Rule to apply (defaults to the engine's rule)
            diagnostics: Sink for this call's advisories (defaults to the engine's)

        Returns:
            PolicyResult
        """
        rule = rule or self.rule
        if rule is None:
            raise ValueError("No policy rule given and the engine has no default rule")
        sink = diagnostics if diagnostics is not None else self.diagnostics

        check = self.validator.validate(context, rule, sink)
        if not check.passed:
            return self._finish(check.to_result(rule, context))

        try:
            match = self.matcher.locate_approved_origin(context, rule)
        except AncestryDepthExceeded as e:
            return self._finish(
                PolicyResult(
                    outcome=PolicyOutcome.DENIED,
                    kind=PolicyResultKind.MALFORMED_ANCESTRY,
                    message=(
                        f"The {rule.name} policy could not verify how this "
                        f"{context.entity_name} {context.operation_name} was triggered: "
                        f"the triggering context chain is deeper than {e.max_depth} levels"
                    ),
                    rule_name=rule.name,
                    entity_name=context.entity_name,
                    operation_name=context.operation_name,
                )
            )

        if match is None:
            return self._finish(
                PolicyResult(
                    outcome=PolicyOutcome.DENIED,
                    kind=PolicyResultKind.POLICY_VIOLATION,
                    message=rule.violation_message,
                    rule_name=rule.name,
                    entity_name=context.entity_name,
                    operation_name=context.operation_name,
                )
            )

        return self._finish(
            PolicyResult(
                outcome=PolicyOutcome.ALLOWED,
                kind=PolicyResultKind.APPROVED_ORIGIN_FOUND,
                message=(
                    f"{context.entity_name} {context.operation_name} was triggered by "
                    f"{match.operation_name} ({match.depth} level(s) up)"
                ),
                rule_name=rule.name,
                entity_name=context.entity_name,
                operation_name=context.operation_name,
                matched_operation=match.operation_name,
                matched_depth=match.depth,
            )
        )

    def evaluate_all(
        self,
        context: ExecutionContextSnapshot,
        rules: Optional[Iterable[PolicyRule]] = None,
        diagnostics: Optional[DiagnosticsSink] = None,
    ) -> List[PolicyResult]:
        """Evaluate each rule independently, in order."""
        if rules is None:
            if self.rule is None:
                raise ValueError("No policy rules given and the engine has no default rule")
            rules = [self.rule]
        return [self.evaluate(context, rule, diagnostics) for rule in rules]

    def _finish(self, result: PolicyResult) -> PolicyResult:
        extra = {
            "rule": result.rule_name,
            "decision": result.outcome.value,
            "kind": result.kind.value,
            "entity": result.entity_name,
            "operation": result.operation_name,
        }
        if result.kind is PolicyResultKind.MALFORMED_ANCESTRY:
            logger.error("policy_malformed_ancestry", extra=extra)
        elif result.kind is PolicyResultKind.POLICY_VIOLATION:
            logger.warning("policy_violation", extra=extra)
        elif result.not_applicable:
            logger.error("policy_misconfigured_target", extra=extra)
        elif result.denied:
            logger.warning("policy_denied", extra=extra)
        else:
            logger.debug("policy_allowed", extra=extra)
        metrics.record_decision(result.rule_name, result.outcome.value, result.kind.value)
        return result
