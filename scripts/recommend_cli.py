#!/usr/bin/env python
"""
LoanLens recommendation CLI

Usage:
    python scripts/recommend_cli.py run data/sample_request.json     # rank lenders for a request
    python scripts/recommend_cli.py run request.json data.json       # ... against another reference file
    python scripts/recommend_cli.py lenders                          # list active lenders
    python scripts/recommend_cli.py strategies                       # weights per urgency zone
"""

import json
import sys
from pathlib import Path

# add the project root to the path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from loanlens.config import configure_logging
from loanlens.data_sources import JsonReferenceStore
from loanlens.domain.strategy import STRATEGY_TABLE
from loanlens.errors import LoanLensError
from loanlens.llm import get_justification_generator
from loanlens.pipeline import RecommendationPipeline


def cmd_run(request_path: str, data_path: str = None):
    """Run one recommendation and print the ranked list"""
    with open(request_path, "r", encoding="utf-8") as f:
        request = json.load(f)

    pipeline = RecommendationPipeline(
        store=JsonReferenceStore(data_path),
        generator=get_justification_generator(),
    )

    try:
        response = pipeline.run(request)
    except LoanLensError as e:
        print(f"❌ {type(e).__name__}: {e}")
        sys.exit(1)

    ctx = response.context
    print("=" * 70)
    print(f"📋 LoanLens recommendation ({response.metadata.version})")
    print("=" * 70)
    print(f"  Tier: {ctx.tier.value} (QS {ctx.qs_rank or 'unranked'})")
    print(f"  Urgency: {ctx.urgency_zone.value} ({ctx.days_until_intake} days to intake)")
    print(f"  Strategy: {ctx.strategy}")
    print(f"  Eligible: {response.eligible_count} / {response.total_candidates}")
    if response.needs_human_review:
        print(f"  ⚠️  Top score {response.top_score} is below the review threshold")
    print("-" * 70)

    for result in response.results:
        status = "🔒" if result.locked else "✅"
        print(f"{result.rank:>2}. {status} {result.lender_name:<28} {result.composite_score:>6.1f}")
        for reason in result.reasons:
            print(f"      - {reason}")
        if result.unlock_hint:
            print(f"      💡 {result.unlock_hint}")
        print(f"      {result.justification}")

    print("=" * 70)


def cmd_lenders(data_path: str = None):
    """List active lenders"""
    store = JsonReferenceStore(data_path)

    try:
        lenders = store.list_active_lenders()
    except LoanLensError as e:
        print(f"❌ {e}")
        sys.exit(1)

    print(f"{'ID':<14} {'Name':<28} {'Max loan':>14} {'Days':>5} {'Pref':>5}")
    print("-" * 70)
    for lender in lenders:
        max_loan = f"{lender.loan_amount_max:,.0f}" if lender.loan_amount_max else "-"
        print(
            f"{lender.id:<14} {lender.name:<28} {max_loan:>14} "
            f"{lender.processing_time_days or '-':>5} {lender.preferred_rank or '-':>5}"
        )


def cmd_strategies():
    """Print the pillar weights per urgency zone"""
    for zone, weights in STRATEGY_TABLE.items():
        print(
            f"{zone.value:<7} {weights.name:<16} "
            f"future={weights.future:.2f} financial={weights.financial:.2f} past={weights.past:.2f}"
        )


def print_help():
    """Print usage"""
    print(__doc__)


def main():
    if len(sys.argv) < 2:
        print_help()
        return

    configure_logging()
    command = sys.argv[1].lower()

    if command == "run":
        if len(sys.argv) < 3:
            print("❌ run needs a request file")
            print_help()
            return
        data_path = sys.argv[3] if len(sys.argv) > 3 else None
        cmd_run(sys.argv[2], data_path)
    elif command == "lenders":
        data_path = sys.argv[2] if len(sys.argv) > 2 else None
        cmd_lenders(data_path)
    elif command == "strategies":
        cmd_strategies()
    elif command in ["help", "-h", "--help"]:
        print_help()
    else:
        print(f"❌ Unknown command: {command}")
        print_help()


if __name__ == "__main__":
    main()
