#!/usr/bin/env python3
"""
Evaluate a triggering context against the configured provenance rule.

Input: JSON file with one context; parents nest under "parent"
Output: PolicyResult JSON on stdout

Exit codes: 0 allowed, 1 denied, 2 not applicable, 3 unreadable input.
"""

import json
import sys
from argparse import ArgumentParser
from pathlib import Path

from provenance_guard.ancestry_matcher import AncestryMatcher
from provenance_guard.config import get_settings
from provenance_guard.context_models import ExecutionContextSnapshot
from provenance_guard.diagnostics import MemoryDiagnosticsSink
from provenance_guard.policy_engine import PolicyEngine
from provenance_guard.policy_models import PolicyOutcome
from provenance_guard.rules import rule_from_settings

EXIT_CODES = {
    PolicyOutcome.ALLOWED: 0,
    PolicyOutcome.DENIED: 1,
    PolicyOutcome.NOT_APPLICABLE: 2,
}
EXIT_BAD_INPUT = 3


def evaluate_file(input_path, max_depth=None):
    """Load a context file and evaluate it. Returns (result, advisories)."""
    input_path = Path(input_path)
    with open(input_path) as f:
        data = json.load(f)

    cfg = get_settings()
    engine = PolicyEngine(
        rule_from_settings(cfg),
        matcher=AncestryMatcher(
            max_depth=max_depth if max_depth is not None else cfg.PROVENANCE_MAX_ANCESTRY_DEPTH
        ),
    )
    sink = MemoryDiagnosticsSink()
    result = engine.evaluate(ExecutionContextSnapshot.from_dict(data), diagnostics=sink)
    return result, sink.messages


def main(argv=None):
    parser = ArgumentParser(description="Evaluate a context chain against the provenance rule")
    parser.add_argument("input", help="JSON file describing the context chain")
    parser.add_argument("--max-depth", type=int, default=None, help="Override the ancestry depth bound")
    args = parser.parse_args(argv)

    if args.max_depth is not None and args.max_depth < 1:
        print(f"✗ --max-depth must be at least 1, got {args.max_depth}", file=sys.stderr)
        return EXIT_BAD_INPUT

    if not Path(args.input).exists():
        print(f"✗ Input file not found: {args.input}", file=sys.stderr)
        return EXIT_BAD_INPUT

    try:
        result, advisories = evaluate_file(args.input, args.max_depth)
    except json.JSONDecodeError as e:
        print(f"✗ Malformed JSON in {args.input}: {e}", file=sys.stderr)
        return EXIT_BAD_INPUT
    except ValueError as e:
        print(f"✗ Invalid context in {args.input}: {e}", file=sys.stderr)
        return EXIT_BAD_INPUT

    for message in advisories:
        print(f"⚠ {message}", file=sys.stderr)
    print(json.dumps(result.to_dict(), indent=2))
    return EXIT_CODES[result.outcome]


if __name__ == "__main__":
    sys.exit(main())
