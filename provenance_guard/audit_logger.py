"""
Provenance Guard: Audit Logger

Append-only record of every policy decision and advisory:
- Records are NEVER modified or deleted
- Every record is timestamped (UTC) and carries the initiating principal
- Records are kept in memory and, when configured, appended to a JSONL file

A failed file write is logged and never changes the decision.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional
from uuid import uuid4

from provenance_guard.context_models import ExecutionContextSnapshot
from provenance_guard.policy_models import PolicyOutcome, PolicyResult, PolicyResultKind

logger = logging.getLogger(__name__)

_SEVERITY = {
    PolicyResultKind.APPROVED_ORIGIN_FOUND: "INFO",
    PolicyResultKind.POLICY_VIOLATION: "WARNING",
    PolicyResultKind.UNSUPPORTED_MODE: "WARNING",
    PolicyResultKind.ADVISORY_STAGE_MISMATCH: "WARNING",
    PolicyResultKind.MISCONFIGURED_TARGET: "ERROR",
    PolicyResultKind.MALFORMED_ANCESTRY: "CRITICAL",
}


@dataclass
class PolicyAuditRecord:
    event_type: str
    rule_name: str
    outcome: Optional[str]
    kind: str
    message: str
    entity_name: Optional[str] = None
    operation_name: Optional[str] = None
    context_id: Optional[str] = None
    initiating_principal: Optional[str] = None
    severity: str = "INFO"
    record_id: str = field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self):
        # Principals are opaque host identifiers (often UUIDs)
        if self.initiating_principal is not None:
            self.initiating_principal = str(self.initiating_principal)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "record_id": self.record_id,
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type,
            "rule_name": self.rule_name,
            "outcome": self.outcome,
            "kind": self.kind,
            "message": self.message,
            "entity_name": self.entity_name,
            "operation_name": self.operation_name,
            "context_id": self.context_id,
            "initiating_principal": self.initiating_principal,
            "severity": self.severity,
        }


class PolicyAuditLogger:
    """Append-only audit log of provenance policy decisions."""

    def __init__(self, log_file: Optional[str] = None):
        """
        Args:
            log_file: Path to append-only JSONL file.
                     If None, records are kept in memory only.
        """
        self.log_file = log_file
        self._memory_log: List[Dict[str, Any]] = []

        if self.log_file:
            try:
                Path(self.log_file).parent.mkdir(parents=True, exist_ok=True)
                Path(self.log_file).touch(exist_ok=True)
            except OSError as e:
                logger.warning("audit log file %s unavailable, keeping records in memory: %s", self.log_file, e)
                self.log_file = None

    def log_decision(self, result: PolicyResult, context: ExecutionContextSnapshot) -> str:
        """
        Record a policy decision.

        Returns:
            Record ID
        """
        record = PolicyAuditRecord(
            event_type="policy_decision",
            rule_name=result.rule_name,
            outcome=result.outcome.value,
            kind=result.kind.value,
            message=result.message,
            entity_name=result.entity_name,
            operation_name=result.operation_name,
            context_id=getattr(context, "context_id", None),
            initiating_principal=getattr(context, "initiating_principal", None),
            severity=_SEVERITY.get(result.kind, "INFO"),
        )
        return self._append_record(record)

    def log_advisory(self, rule_name: str, context: ExecutionContextSnapshot, message: str) -> str:
        """Record a non-fatal advisory (no outcome)."""
        record = PolicyAuditRecord(
            event_type="policy_advisory",
            rule_name=rule_name,
            outcome=None,
            kind=PolicyResultKind.ADVISORY_STAGE_MISMATCH.value,
            message=message,
            entity_name=getattr(context, "entity_name", None),
            operation_name=getattr(context, "operation_name", None),
            context_id=getattr(context, "context_id", None),
            initiating_principal=getattr(context, "initiating_principal", None),
            severity=_SEVERITY[PolicyResultKind.ADVISORY_STAGE_MISMATCH],
        )
        return self._append_record(record)

    def get_logs(
        self, rule_name: Optional[str] = None, outcome: Optional[PolicyOutcome] = None
    ) -> List[Dict[str, Any]]:
        """Get audit records, optionally filtered by rule and outcome."""
        logs = self._memory_log.copy()

        if rule_name:
            logs = [log for log in logs if log["rule_name"] == rule_name]

        if outcome is not None:
            logs = [log for log in logs if log["outcome"] == outcome.value]

        return logs

    def export_logs_json(self) -> str:
        return json.dumps(self._memory_log, indent=2, default=str)

    def _append_record(self, record: PolicyAuditRecord) -> str:
        record_dict = record.to_dict()
        self._memory_log.append(record_dict)

        if self.log_file:
            try:
                with open(self.log_file, "a") as f:
                    f.write(json.dumps(record_dict, default=str) + "\n")
            except (OSError, TypeError, ValueError) as e:
                logger.warning("failed to append audit record %s to %s: %s", record.record_id, self.log_file, e)

        return record.record_id
