"""Tests for settings and the rule presets built from them."""

import pytest
from pydantic import ValidationError

from provenance_guard.config import DEFAULT_VIOLATION_MESSAGE, Settings, get_settings
from provenance_guard.context_models import ExecutionMode, ExecutionStage
from provenance_guard.rules import rule_from_settings, sales_order_from_quote_rule


class TestSettings:

    def test_defaults(self):
        s = Settings()
        assert s.PROVENANCE_MAX_ANCESTRY_DEPTH == 64
        assert s.PROVENANCE_ENTITY == "salesorder"
        assert s.approved_origins == ["convertquotetosalesorder"]

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("PROVENANCE_MAX_ANCESTRY_DEPTH", "8")
        monkeypatch.setenv("PROVENANCE_APPROVED_ORIGINS", "convertquotetosalesorder, reviseorder")
        s = Settings()
        assert s.PROVENANCE_MAX_ANCESTRY_DEPTH == 8
        assert s.approved_origins == ["convertquotetosalesorder", "reviseorder"]

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()

    @pytest.mark.parametrize("key,value", [
        ("PROVENANCE_REQUIRED_MODE", "sometimes"),
        ("PROVENANCE_RECOMMENDED_STAGE", "later"),
        ("PROVENANCE_APPROVED_ORIGINS", " , "),
        ("PROVENANCE_MAX_ANCESTRY_DEPTH", "0"),
    ])
    def test_invalid_values(self, monkeypatch, key, value):
        monkeypatch.setenv(key, value)
        with pytest.raises(ValidationError):
            Settings()


class TestRules:

    def test_sales_order_preset(self):
        rule = sales_order_from_quote_rule()
        assert rule.applies_to_entity == "salesorder"
        assert rule.applies_to_operation == "create"
        assert rule.approved_origin("convertquotetosalesorder")
        assert rule.required_mode is ExecutionMode.SYNCHRONOUS
        assert rule.recommended_stage is ExecutionStage.PRE_OPERATION
        assert rule.violation_message == DEFAULT_VIOLATION_MESSAGE

    def test_default_settings_match_preset(self):
        assert rule_from_settings().to_dict() == sales_order_from_quote_rule().to_dict()

    def test_rule_from_env(self, monkeypatch):
        monkeypatch.setenv("PROVENANCE_RULE_NAME", "InvoiceFromOrder")
        monkeypatch.setenv("PROVENANCE_ENTITY", "invoice")
        monkeypatch.setenv("PROVENANCE_APPROVED_ORIGINS", "convertsalesordertoinvoice")
        monkeypatch.setenv("PROVENANCE_RECOMMENDED_STAGE", "PreValidation")
        rule = rule_from_settings(Settings())
        assert rule.name == "InvoiceFromOrder"
        assert rule.approved_origin("ConvertSalesOrderToInvoice")
        assert rule.recommended_stage is ExecutionStage.PRE_VALIDATION
