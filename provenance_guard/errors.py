"""
Provenance Guard: Errors

Policy decisions are returned as PolicyResult values. Exceptions exist only
at the host seam (PolicyEnforcementError) and for a malformed ancestry chain
found during traversal (AncestryDepthExceeded, handled by the engine).
"""

from enum import Enum
from typing import Optional

from provenance_guard.policy_models import PolicyResult, PolicyResultKind


class OperationStatus(Enum):
    """
    Status attached to a host failure.

    FAILED: the host could not supply what the policy needs
    CANCELED: the policy refused the operation
    """
    FAILED = "failed"
    CANCELED = "canceled"


class PolicyEnforcementError(Exception):
    """
    Raised to abort the triggering operation.

    ``str(error)`` is the message shown to the actor, verbatim.
    """

    def __init__(
        self,
        message: str,
        status: OperationStatus = OperationStatus.CANCELED,
        kind: Optional[PolicyResultKind] = None,
        result: Optional[PolicyResult] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.kind = kind
        self.result = result


class AncestryDepthExceeded(Exception):
    """The ancestry chain is longer than the traversal bound allows."""

    def __init__(self, max_depth: int):
        super().__init__(f"Ancestry chain exceeded the maximum depth of {max_depth}")
        self.max_depth = max_depth
