"""
Build a deck from the command line.

    python -m realmforge.jobs.build_deck --element Fire --archetype Aggro --export-json

Loads the requested sets, runs the build pipeline and prints the report.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from realmforge.config import settings
from realmforge.models.deck import BuildOptions
from realmforge.models.failure import KnownError
from realmforge.services.card_database import load_card_pool
from realmforge.services.deck_exporter import write_deck_json
from realmforge.services.deck_report import format_rules_summary
from realmforge.services.pipeline import DeckBuildResult, build_complete_deck

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="realmforge-build",
        description="Build a Sorcery: Contested Realm deck",
    )
    parser.add_argument("--element", help="Preferred element (Water, Fire, Earth, Air, Void)")
    parser.add_argument("--archetype", help="Preferred archetype (Aggro, Control, Combo, ...)")
    parser.add_argument(
        "--set",
        dest="data_sets",
        action="append",
        help="Card set to load; repeat for several "
        f"(default: {', '.join(settings.default_data_sets)})",
    )
    parser.add_argument("--export-json", action="store_true", help="Write the deck to JSON")
    parser.add_argument("--show-rules", action="store_true", help="Print the construction rules")
    parser.add_argument("--data-dir", type=Path, default=None, help="Directory with set CSVs")
    parser.add_argument(
        "--weighting",
        default=settings.synergy_weighting,
        help="Elemental synergy weighting (standard, fire_weighted)",
    )
    return parser


def options_from_args(args: argparse.Namespace) -> BuildOptions:
    return BuildOptions(
        data_sets=args.data_sets or list(settings.default_data_sets),
        preferred_element=args.element,
        preferred_archetype=args.archetype,
        export_json=args.export_json,
        show_rules=args.show_rules,
        synergy_weighting=args.weighting,
    )


async def run_build(options: BuildOptions, data_dir: Path | None = None) -> DeckBuildResult:
    """Load the pool (the one awaited step) and run the synchronous pipeline."""
    pool = await load_card_pool(options.data_sets, data_dir)
    return build_complete_deck(pool, options)


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    options = options_from_args(args)

    if options.show_rules:
        print(format_rules_summary())
        print()

    try:
        result = asyncio.run(run_build(options, args.data_dir))
    except KnownError as e:
        logger.error("%s", e.message)
        return 1

    print(result.report)
    if options.export_json:
        path = write_deck_json(result.deck)
        print(f"\nDeck exported to {path}")
    print(f"\nDeck building completed in {result.elapsed_seconds:.2f} seconds.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
