#!/usr/bin/env python3
# scripts/recommend_cli.py
"""
Print ranked activity (or people) recommendations for one user.

Read-only: never writes to the database.

Usage:
  # Activities for a user (defaults: limit 20, min score 30)
  python -m scripts.recommend_cli --user-id <uuid>

  # Include activities the user already joined, lower the bar
  python -m scripts.recommend_cli --user-id <uuid> --include-joined --min-score 10

  # People matches instead of activities
  python -m scripts.recommend_cli --user-id <uuid> --people --limit 5

  # Machine-readable output
  python -m scripts.recommend_cli --user-id <uuid> --json
"""
from __future__ import annotations

import argparse
import json
import logging
from typing import Any, Optional

from meetmatch.errors import InvalidInputError, NotFoundError
from meetmatch.matching.recommend import RankedActivity
from meetmatch.matching.users import RankedUser


def format_activity_lines(ranked: list[RankedActivity]) -> list[str]:
    lines = []
    for i, r in enumerate(ranked, start=1):
        b = r.breakdown
        distance = "?" if b.distance_km is None else f"{b.distance_km}km"
        days = "?" if b.days_until is None else f"{b.days_until}d"
        lines.append(
            f"{i:>3}. [{b.total_score:>3}] {r.activity.title[:50]!r}"
            f" id={r.activity.id}"
            f" | interests={b.interest_score} distance={b.distance_score}"
            f" time={b.time_score} popularity={b.popularity_score}"
            f" recency={b.recency_score}"
            f" | {distance} in {days} | {r.compatibility_label}"
        )
    return lines


def format_user_lines(ranked: list[RankedUser]) -> list[str]:
    lines = []
    for i, r in enumerate(ranked, start=1):
        shared = ", ".join(r.overlap.matched_interests[:5]) or "-"
        lines.append(
            f"{i:>3}. [{r.combined_percentage:>3}%] {r.user.display_name}"
            f" id={r.user.id}"
            f" | interests={r.overlap.percentage}% preferences={r.preference_score}"
            f" | shared: {shared}"
        )
    return lines


def run(store: Any, args: argparse.Namespace) -> list[Any]:
    """Run the requested ranking. The store is injected so tests can pass a MemoryStore."""
    from meetmatch.service import recommend_activities, recommend_users

    if args.people:
        options: dict[str, Any] = {"min_overlap": args.min_overlap}
        if args.limit is not None:
            options["limit"] = args.limit
        return recommend_users(args.user_id, options, store=store)

    options = {
        "min_score": args.min_score,
        "exclude_joined": not args.include_joined,
        "exclude_past": not args.include_past,
    }
    if args.limit is not None:
        options["limit"] = args.limit
    return recommend_activities(args.user_id, options, store=store)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Show recommendations for a user.")
    parser.add_argument("--user-id", required=True, help="User to recommend for.")
    parser.add_argument("--people", action="store_true", help="Rank users instead of activities.")
    parser.add_argument("--limit", type=int, default=None, help="Max results (default 20 / 10 for --people).")
    parser.add_argument("--min-score", type=float, default=30, help="Minimum activity score (0-100).")
    parser.add_argument("--min-overlap", type=int, default=1, help="Minimum shared interests (--people).")
    parser.add_argument("--include-joined", action="store_true", help="Keep already-joined activities.")
    parser.add_argument("--include-past", action="store_true", help="Keep activities in the past.")
    parser.add_argument("--json", action="store_true", help="Print JSON instead of a table.")
    parser.add_argument("--verbose", action="store_true", help="Log pipeline summary lines.")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s %(message)s",
    )

    from meetmatch.db.supabase_store import SupabaseStore

    store = SupabaseStore.from_env()
    try:
        ranked = run(store, args)
    except NotFoundError as e:
        print(f"[recommend] ERROR: {e}")
        return 2
    except InvalidInputError as e:
        print(f"[recommend] INVALID: {e}")
        return 2

    if args.json:
        print(json.dumps([r.as_dict() for r in ranked], indent=2, default=str))
        return 0

    mode = "people" if args.people else "activities"
    print(f"\n=== {mode} for user {args.user_id} ({len(ranked)} results) ===")
    lines = format_user_lines(ranked) if args.people else format_activity_lines(ranked)
    for line in lines:
        print(line)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
