import os
import sys

import pytest

# Ensure repository root is on sys.path for package and script imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from provenance_guard.config import get_settings
from provenance_guard.context_models import ExecutionContextSnapshot, ExecutionMode, ExecutionStage
from provenance_guard.diagnostics import MemoryDiagnosticsSink
from provenance_guard.policy_engine import PolicyEngine
from provenance_guard.rules import sales_order_from_quote_rule


class CountingContext:
    """Host-style context double that counts how often its parent link is read."""

    def __init__(
        self,
        operation_name,
        parent=None,
        entity_name="",
        execution_mode=ExecutionMode.SYNCHRONOUS,
        execution_stage=ExecutionStage.PRE_OPERATION,
        initiating_principal=None,
    ):
        self.operation_name = operation_name
        self.entity_name = entity_name
        self.execution_mode = execution_mode
        self.execution_stage = execution_stage
        self.initiating_principal = initiating_principal
        self._parent = parent
        self.parent_reads = 0

    @property
    def parent(self):
        self.parent_reads += 1
        return self._parent


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch):
    """Isolate tests from PROVENANCE_* variables in the environment."""
    for key in list(os.environ):
        if key.startswith("PROVENANCE_"):
            monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def rule():
    return sales_order_from_quote_rule()


@pytest.fixture
def sink():
    return MemoryDiagnosticsSink()


@pytest.fixture
def engine(rule, sink):
    return PolicyEngine(rule, diagnostics=sink)


@pytest.fixture
def make_context():
    """Build a salesorder/create context with the given ancestry (nearest first)."""
    def _make(
        ancestry=None,
        entity="salesorder",
        operation="create",
        mode=ExecutionMode.SYNCHRONOUS,
        stage=ExecutionStage.PRE_OPERATION,
        principal="user-1",
    ):
        return ExecutionContextSnapshot.chain(
            entity,
            operation,
            ancestry=ancestry,
            execution_mode=mode,
            execution_stage=stage,
            initiating_principal=principal,
        )
    return _make
