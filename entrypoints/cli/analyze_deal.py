# entrypoints/cli/analyze_deal.py
from __future__ import annotations

import argparse
import json
import os
import sys
from datetime import date
from pathlib import Path

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..", "src")))

from loguru import logger

from dealcore.adapters.logging_utils import set_level
from dealcore.analysis.projection_frame import year1_summary_frame
from dealcore.domain.assumptions import GlobalAssumptions
from dealcore.domain.condition import ConditionAssessment
from dealcore.domain.property import ComparableProperty, DealInputs
from dealcore.domain.rehab import LineItem
from dealcore.services.deal_analyzer import ALL_STRATEGIES, analyze_deal


def _load_bundle(path: Path) -> dict:
    """
    Bundle layout (camelCase or snake_case keys both accepted):

        {
          "deal": {...},              # required
          "assumptions": {...},
          "comps": [{...}, ...],
          "subject": {...},
          "assessment": {...},
          "lineItems": [{...}, ...]
        }
    """
    if not path.exists():
        raise SystemExit(f"Deal bundle not found: {path}")
    with path.open() as f:
        bundle = json.load(f)
    if "deal" not in bundle:
        raise SystemExit(f"{path} has no 'deal' section")
    return bundle


def main() -> None:
    ap = argparse.ArgumentParser(description="Project and value one deal from a JSON bundle.")
    ap.add_argument("bundle", type=Path)
    ap.add_argument(
        "--strategy",
        action="append",
        choices=[s.value for s in ALL_STRATEGIES],
        help="Repeat to run several; default is all strategies.",
    )
    ap.add_argument("--exclude-vacancy", action="store_true")
    ap.add_argument(
        "--rehab-level",
        choices=["light", "lite+", "medium", "heavy", "fullgut"],
        default=None,
        help="Quick $/sqft rehab estimate when the bundle has no assessment.",
    )
    ap.add_argument("--as-of", type=date.fromisoformat, default=None)
    ap.add_argument("--out", type=Path, default=None, help="Write JSON here instead of stdout.")
    ap.add_argument("--summary", action="store_true", help="Print the year-1 table to stderr.")
    ap.add_argument("--log-level", default=None, help="Override DEALCORE_LOG_LEVEL, e.g. DEBUG.")
    args = ap.parse_args()

    if args.log_level:
        set_level(args.log_level)

    bundle = _load_bundle(args.bundle)

    deal = DealInputs.model_validate(bundle["deal"])
    assumptions = (
        GlobalAssumptions.model_validate(bundle["assumptions"])
        if bundle.get("assumptions")
        else GlobalAssumptions.from_config()
    )
    comps = [ComparableProperty.model_validate(c) for c in bundle.get("comps") or []]
    subject = ComparableProperty.model_validate(bundle["subject"]) if bundle.get("subject") else None
    assessment = (
        ConditionAssessment.model_validate(bundle["assessment"]) if bundle.get("assessment") else None
    )
    existing = [LineItem.model_validate(i) for i in bundle.get("lineItems") or bundle.get("line_items") or []]

    logger.info("Analyzing deal", address=deal.address, comps=len(comps), assessment=assessment is not None)

    analysis = analyze_deal(
        deal,
        assumptions,
        strategies=args.strategy or ALL_STRATEGIES,
        comps=comps,
        subject=subject,
        assessment=assessment,
        existing_line_items=existing,
        rehab_level=args.rehab_level,
        exclude_vacancy=args.exclude_vacancy,
        as_of=args.as_of,
    )

    if args.summary and analysis.strategies:
        print(year1_summary_frame(analysis.strategies).round(2).to_string(), file=sys.stderr)

    payload = json.dumps(analysis.to_dict(), indent=2, default=str)
    if args.out:
        args.out.parent.mkdir(parents=True, exist_ok=True)
        args.out.write_text(payload)
        logger.info("Analysis written", path=str(args.out), flags=len(analysis.guardrails))
    else:
        print(payload)


if __name__ == "__main__":
    main()
