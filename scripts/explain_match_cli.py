#!/usr/bin/env python3
# scripts/explain_match_cli.py
"""
Explain why two users match (shared interests, social style, activity
level, availability) and print the combined match percentage.

Usage:
  python -m scripts.explain_match_cli --user-id <uuid> --other-id <uuid>
"""
from __future__ import annotations

import argparse
from typing import Optional

from meetmatch.errors import NotFoundError
from meetmatch.matching.scoring import compatibility_label
from meetmatch.matching.users import MatchExplanation


def format_explanation(explanation: MatchExplanation) -> list[str]:
    lines = [
        f"overall match: {explanation.overall_match}% "
        f"({compatibility_label(explanation.overall_match)})"
    ]
    if not explanation.reasons:
        lines.append("  (no specific reasons)")
    for reason in explanation.reasons:
        detail = f" [{', '.join(reason.details)}]" if reason.details else ""
        lines.append(f"  - {reason.type}: {reason.message}{detail}")
    return lines


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Explain a user-to-user match.")
    parser.add_argument("--user-id", required=True)
    parser.add_argument("--other-id", required=True)
    args = parser.parse_args(argv)

    from meetmatch.db.supabase_store import SupabaseStore
    from meetmatch.service import explain_user_match

    store = SupabaseStore.from_env()
    try:
        explanation = explain_user_match(args.user_id, args.other_id, store=store)
    except NotFoundError as e:
        print(f"[explain] ERROR: {e}")
        return 2

    for line in format_explanation(explanation):
        print(line)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
