"""Tests for rule and result models."""

import dataclasses

import pytest

from provenance_guard.context_models import ExecutionMode, ExecutionStage
from provenance_guard.policy_models import (
    ApprovedOperations,
    PolicyOutcome,
    PolicyResult,
    PolicyResultKind,
    PolicyRule,
)
from provenance_guard.rules import approved_operations


def _rule(**overrides):
    kwargs = dict(
        name="TestRule",
        applies_to_entity="invoice",
        applies_to_operation="create",
        approved_origin=approved_operations("convertordertoinvoice"),
        violation_message="Invoices come from orders",
    )
    kwargs.update(overrides)
    return PolicyRule(**kwargs)


class TestApprovedOperations:
    """Test the case-insensitive origin predicate."""

    def test_matches_ignoring_case(self):
        predicate = approved_operations("ConvertQuoteToSalesOrder")
        assert predicate("convertquotetosalesorder")
        assert predicate("CONVERTQUOTETOSALESORDER")

    def test_rejects_other_names(self):
        predicate = approved_operations("convertquotetosalesorder")
        assert not predicate("create")
        assert not predicate("")
        assert not predicate(None)

    def test_multiple_names(self):
        predicate = approved_operations("a", "b")
        assert predicate("B")
        assert predicate.describe() == "a, b"

    def test_requires_a_name(self):
        with pytest.raises(ValueError):
            ApprovedOperations(frozenset())
        with pytest.raises(ValueError):
            approved_operations("  ")


class TestPolicyRule:
    """Test PolicyRule construction."""

    def test_defaults(self):
        rule = _rule()
        assert rule.required_mode is ExecutionMode.SYNCHRONOUS
        assert rule.recommended_stage is ExecutionStage.PRE_OPERATION
        assert rule.approved_process == "convertordertoinvoice"

    def test_explicit_approved_process_is_kept(self):
        rule = _rule(approved_process="order conversion")
        assert rule.approved_process == "order conversion"

    def test_plain_callable_predicate(self):
        rule = _rule(approved_origin=lambda name: name.startswith("convert"))
        assert rule.approved_origin("convertanything")
        assert rule.approved_process == ""

    @pytest.mark.parametrize("field_name", ["name", "applies_to_entity", "applies_to_operation", "violation_message"])
    def test_required_text_fields(self, field_name):
        with pytest.raises(ValueError):
            _rule(**{field_name: ""})

    def test_predicate_must_be_callable(self):
        with pytest.raises(ValueError):
            _rule(approved_origin="convertordertoinvoice")

    def test_rule_is_frozen(self):
        rule = _rule()
        with pytest.raises(dataclasses.FrozenInstanceError):
            rule.applies_to_entity = "contact"

    def test_to_dict(self):
        d = _rule().to_dict()
        assert d["name"] == "TestRule"
        assert d["required_mode"] == "SYNCHRONOUS"
        assert d["recommended_stage"] == "PRE_OPERATION"
        assert d["approved_process"] == "convertordertoinvoice"


class TestPolicyResult:
    """Test PolicyResult helpers."""

    def test_flags(self):
        allowed = PolicyResult(PolicyOutcome.ALLOWED, PolicyResultKind.APPROVED_ORIGIN_FOUND, "ok", "r")
        denied = PolicyResult(PolicyOutcome.DENIED, PolicyResultKind.POLICY_VIOLATION, "no", "r")
        skipped = PolicyResult(PolicyOutcome.NOT_APPLICABLE, PolicyResultKind.MISCONFIGURED_TARGET, "n/a", "r")
        assert allowed.allowed and not allowed.denied and not allowed.not_applicable
        assert denied.denied and not denied.allowed
        assert skipped.not_applicable and not skipped.allowed

    def test_to_dict(self):
        result = PolicyResult(
            PolicyOutcome.ALLOWED,
            PolicyResultKind.APPROVED_ORIGIN_FOUND,
            "ok",
            "r",
            entity_name="salesorder",
            operation_name="create",
            matched_operation="convertquotetosalesorder",
            matched_depth=2,
        )
        d = result.to_dict()
        assert d["outcome"] == "allowed"
        assert d["kind"] == "approved_origin_found"
        assert d["matched_depth"] == 2
