"""
Provenance Guard: Host Adapter

Bridges the engine to a plugin-style host. The host hands over a service
provider; the adapter resolves the execution context and the tracing sink,
evaluates, and turns anything but ALLOWED into a PolicyEnforcementError whose
message is shown to the actor verbatim.
"""

import logging
from typing import Any, Dict, Optional, Protocol

from provenance_guard.audit_logger import PolicyAuditLogger
from provenance_guard.context_models import ExecutionContextSnapshot
from provenance_guard.diagnostics import DiagnosticsSink
from provenance_guard.errors import OperationStatus, PolicyEnforcementError
from provenance_guard.policy_engine import PolicyEngine
from provenance_guard.policy_models import PolicyResult

logger = logging.getLogger(__name__)


class ServiceProvider(Protocol):
    def get_service(self, service_type: Any) -> Any: ...


class SimpleServiceProvider:
    """Dict-backed service provider keyed by service type."""

    def __init__(self, services: Optional[Dict[Any, Any]] = None):
        self._services = dict(services or {})

    def register(self, service_type: Any, service: Any) -> None:
        self._services[service_type] = service

    def get_service(self, service_type: Any) -> Any:
        return self._services.get(service_type)


def raise_for_result(result: PolicyResult) -> PolicyResult:
    """Return ``result`` if allowed, otherwise raise PolicyEnforcementError."""
    if result.allowed:
        return result
    raise PolicyEnforcementError(
        result.message,
        status=OperationStatus.CANCELED,
        kind=result.kind,
        result=result,
    )


class _AuditingSink:
    """Forward advisories to the host tracer and the audit log."""

    def __init__(self, tracer: DiagnosticsSink, audit_logger: PolicyAuditLogger, rule_name: str, context):
        self._tracer = tracer
        self._audit = audit_logger
        self._rule_name = rule_name
        self._context = context

    def trace(self, message: str) -> None:
        self._tracer.trace(message)
        self._audit.log_advisory(self._rule_name, self._context, message)


class ProvenancePolicyPlugin:
    """
    Host-facing wrapper around a PolicyEngine with a configured rule.

    Usage:
        plugin = ProvenancePolicyPlugin(PolicyEngine(sales_order_from_quote_rule()))
        plugin.execute(service_provider)  # raises PolicyEnforcementError on refusal
    """

    def __init__(self, engine: PolicyEngine, audit_logger: Optional[PolicyAuditLogger] = None):
        if engine.rule is None:
            raise ValueError("ProvenancePolicyPlugin requires an engine with a configured rule")
        self.engine = engine
        self.audit_logger = audit_logger

    def execute(self, service_provider: ServiceProvider) -> PolicyResult:
        context = service_provider.get_service(ExecutionContextSnapshot)
        tracer = service_provider.get_service(DiagnosticsSink)

        if context is None:
            raise PolicyEnforcementError(
                "Could not retrieve an execution context", status=OperationStatus.FAILED
            )
        if tracer is None:
            raise PolicyEnforcementError(
                "Could not retrieve a diagnostics sink", status=OperationStatus.FAILED
            )

        sink = tracer
        if self.audit_logger is not None:
            sink = _AuditingSink(tracer, self.audit_logger, self.engine.rule.name, context)

        result = self.engine.evaluate(context, diagnostics=sink)

        # TODO: consult an actor allow-list here once a rule needs one
        if self.audit_logger is not None:
            self.audit_logger.log_decision(result, context)

        return raise_for_result(result)
