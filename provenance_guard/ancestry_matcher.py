"""
Provenance Guard: Ancestry Matcher

Walks the triggering-context chain from the direct parent upward looking for
an operation the rule approves. The nearest match wins, but a match at any
depth satisfies the rule: the operation happened somewhere inside the
approved process, however deeply nested.

The chain is owned by the host and is only read. Traversal is bounded by a
plain counter; a chain longer than ``max_depth`` is reported as malformed.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from provenance_guard.context_models import TriggeringContext
from provenance_guard.errors import AncestryDepthExceeded
from provenance_guard.policy_models import PolicyRule

logger = logging.getLogger(__name__)

DEFAULT_MAX_ANCESTRY_DEPTH = 64


@dataclass(frozen=True)
class AncestryMatch:
    operation_name: str

    # 1 = direct parent
    depth: int


class AncestryMatcher:
    """Search a context's ancestors for an approved originating operation."""

    def __init__(self, max_depth: int = DEFAULT_MAX_ANCESTRY_DEPTH):
        if max_depth < 1:
            raise ValueError(f"max_depth must be at least 1, got {max_depth}")
        self.max_depth = max_depth

    def locate_approved_origin(
        self, context: TriggeringContext, rule: PolicyRule
    ) -> Optional[AncestryMatch]:
        """
        Return the nearest approved ancestor, or None if the chain has none.

        Raises:
            AncestryDepthExceeded: more than ``max_depth`` ancestors were visited
        """
        depth = 0
        current = context.parent
        while current is not None:
            depth += 1
            if depth > self.max_depth:
                raise AncestryDepthExceeded(self.max_depth)
            if rule.approved_origin(current.operation_name):
                logger.debug(
                    "approved_origin_found",
                    extra={"rule": rule.name, "operation": current.operation_name, "depth": depth},
                )
                return AncestryMatch(operation_name=current.operation_name, depth=depth)
            current = current.parent
        return None

    def find_approved_origin(self, context: TriggeringContext, rule: PolicyRule) -> bool:
        return self.locate_approved_origin(context, rule) is not None
