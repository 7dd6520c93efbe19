"""Ready-made provenance rules."""

from provenance_guard.config import DEFAULT_VIOLATION_MESSAGE, Settings, get_settings
from provenance_guard.context_models import (
    ExecutionMode,
    ExecutionStage,
    parse_mode,
    parse_stage,
)
from provenance_guard.policy_models import ApprovedOperations, PolicyRule


def approved_operations(*names: str) -> ApprovedOperations:
    """Predicate matching any of ``names``, ignoring case."""
    return ApprovedOperations(frozenset(names))


def sales_order_from_quote_rule() -> PolicyRule:
    """Sales orders may only be created while converting a quote."""
    return PolicyRule(
        name="ValidateOrderCreatedFromQuote",
        applies_to_entity="salesorder",
        applies_to_operation="create",
        approved_origin=approved_operations("convertquotetosalesorder"),
        violation_message=DEFAULT_VIOLATION_MESSAGE,
        required_mode=ExecutionMode.SYNCHRONOUS,
        recommended_stage=ExecutionStage.PRE_OPERATION,
    )


def rule_from_settings(settings: Settings = None) -> PolicyRule:
    cfg = settings or get_settings()
    return PolicyRule(
        name=cfg.PROVENANCE_RULE_NAME,
        applies_to_entity=cfg.PROVENANCE_ENTITY,
        applies_to_operation=cfg.PROVENANCE_OPERATION,
        approved_origin=approved_operations(*cfg.approved_origins),
        violation_message=cfg.PROVENANCE_VIOLATION_MESSAGE,
        required_mode=parse_mode(cfg.PROVENANCE_REQUIRED_MODE),
        recommended_stage=parse_stage(cfg.PROVENANCE_RECOMMENDED_STAGE),
    )
