"""Prometheus metrics for policy decisions."""

from __future__ import annotations
import logging

from prometheus_client import Counter, start_http_server

from .config import get_settings

logger = logging.getLogger(__name__)


decisions_total = Counter(
    "provenance_policy_decisions_total",
    "Provenance policy decisions",
    ["rule", "outcome", "kind"],
)
advisories_total = Counter(
    "provenance_policy_advisories_total",
    "Non-fatal provenance policy advisories",
    ["rule", "kind"],
)


def record_decision(rule: str, outcome: str, kind: str) -> None:
    decisions_total.labels(rule=rule, outcome=outcome, kind=kind).inc()


def record_advisory(rule: str, kind: str) -> None:
    advisories_total.labels(rule=rule, kind=kind).inc()


def start_metrics_server_if_enabled() -> bool:
    cfg = get_settings()
    port = int(cfg.PROVENANCE_METRICS_PORT or 0)
    if port <= 0:
        return False
    start_http_server(port)
    logger.info("metrics server started on port %s", port)
    return True
