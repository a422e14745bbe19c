"""
Command-line runner.

Usage:
    personasense assess DATA.json [--offers OFFERS.json] [--as-of YYYY-MM-DD] [--indent N]
    personasense personas DATA.json [--as-of YYYY-MM-DD] [--signals]
"""

import argparse
import json
import logging
import sys
from datetime import date
from typing import List, Optional

from personasense.assessment import build_assessment
from personasense.exceptions import IngestValidationError
from personasense.features.signals import detect_all_signals
from personasense.ingest.json_loader import load_financial_data
from personasense.logging_setup import setup_logging
from personasense.personas.assignment import PersonaAssignmentResult, assign_personas
from personasense.personas.priority import PERSONA_DESCRIPTIONS, PERSONA_LABELS, PERSONA_PRIORITY
from personasense.recommend.offers import load_offers

logger = logging.getLogger(__name__)

EXIT_INGEST_ERROR = 2


def _iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a YYYY-MM-DD date: {value!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="personasense",
        description="Detect financial signals and assign personas from a record set"
    )
    parser.add_argument("--log-level", help="Log level (defaults to PERSONASENSE_LOG_LEVEL)")
    parser.add_argument("--log-text", action="store_true", help="Plain text logs instead of JSON")

    subparsers = parser.add_subparsers(dest="command", required=True)

    assess = subparsers.add_parser("assess", help="Print the full assessment as JSON")
    assess.add_argument("data", help="Record set JSON file")
    assess.add_argument("--offers", help="Partner offer catalog JSON file")
    assess.add_argument("--as-of", type=_iso_date, help="Reference date (defaults to today)")
    assess.add_argument("--indent", type=int, default=2, help="JSON indent (default 2)")

    personas = subparsers.add_parser("personas", help="Print the persona decision tree")
    personas.add_argument("data", help="Record set JSON file")
    personas.add_argument("--as-of", type=_iso_date, help="Reference date (defaults to today)")
    personas.add_argument("--signals", action="store_true", help="Print a signal summary first")

    return parser


def format_decision_tree(result: PersonaAssignmentResult) -> str:
    """Readable rendering of the persona decision tree."""
    tree = result.decision_tree
    lines = [
        f"Primary persona: {PERSONA_LABELS[tree.primary_persona]}",
        f"  {PERSONA_DESCRIPTIONS[tree.primary_persona]}",
        f"Reasoning: {tree.reasoning}",
        f"Signals detected: {', '.join(tree.signals_detected) or 'none'}",
        "",
        "Personas evaluated:",
    ]
    for node in tree.personas_evaluated:
        mark = "MATCH" if node.matched else "-----"
        lines.append(f"  {PERSONA_PRIORITY[node.persona]}. [{mark}] {PERSONA_LABELS[node.persona]}")
        for criterion in node.criteria:
            lines.append(f"       {criterion}")
    return "\n".join(lines)


def _assess(args: argparse.Namespace) -> int:
    data = load_financial_data(args.data)
    offers = load_offers(args.offers) if args.offers else []
    assessment = build_assessment(data, offers=offers, reference_date=args.as_of)
    print(json.dumps(assessment.to_dict(), indent=args.indent))
    return 0


def _personas(args: argparse.Namespace) -> int:
    data = load_financial_data(args.data)
    signals = detect_all_signals(data, reference_date=args.as_of)
    if args.signals:
        print(signals.summary())
        print()
    print(format_decision_tree(assign_personas(signals)))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(level=args.log_level, json_format=False if args.log_text else None)

    handlers = {"assess": _assess, "personas": _personas}
    try:
        return handlers[args.command](args)
    except IngestValidationError as e:
        logger.error("Ingest failed: %s", e)
        for error in e.errors:
            print(f"error: {error}", file=sys.stderr)
        return EXIT_INGEST_ERROR
    except OSError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_INGEST_ERROR


if __name__ == "__main__":
    sys.exit(main())
