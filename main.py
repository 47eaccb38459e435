"""CLI entry point for the job recommendation engine."""

import argparse
import asyncio
import logging
import sys

from recommender.core.config import Settings
from recommender.core.errors import InvalidProfileError
from recommender.core.schemas import RecommendationResult
from recommender.service import RecommendationService, export_results_json
from recommender.sources import get_posting_source, get_profile_source


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Job recommendation engine - rank open postings for a job seeker",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    recommend_parser = subparsers.add_parser("recommend", help="Rank postings for one profile")
    recommend_parser.add_argument(
        "--subject",
        required=True,
        help="Subject id of the profile to rank against",
    )
    recommend_parser.add_argument(
        "--profiles",
        default="config/profiles.yaml",
        help="Path to profiles YAML file (default: config/profiles.yaml)",
    )
    recommend_parser.add_argument(
        "--postings",
        default="data/postings.yaml",
        help="Path to postings YAML file (default: data/postings.yaml)",
    )
    recommend_parser.add_argument(
        "--config",
        default="config/settings.yaml",
        help="Path to settings YAML file (default: config/settings.yaml)",
    )
    recommend_parser.add_argument(
        "--limit",
        type=int,
        help="Maximum number of recommendations (default: from settings)",
    )
    recommend_parser.add_argument(
        "--threshold",
        type=float,
        help="Minimum score a posting must exceed (default: from settings)",
    )
    recommend_parser.add_argument(
        "--timeout",
        type=float,
        help="Seconds before ranking stops and returns partial results",
    )
    recommend_parser.add_argument(
        "--export",
        choices=["json"],
        help="Export results to format (json)",
    )
    recommend_parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )

    return parser.parse_args(argv)


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def print_summary(subject_id: str, result: RecommendationResult) -> None:
    print(f"\n{len(result.results)} recommendations for '{subject_id}' "
          f"({result.scored_count} scored, {result.skipped_count} skipped)")
    if result.partial:
        print("  Partial result: ranking stopped before every posting was scored.")

    for rank, match in enumerate(result.results, start=1):
        p = match.posting
        print(f"  {rank}. [{match.score:5.1f}] {p.title} ({p.posting_id}) - {match.label}")
        for reason in match.reasons:
            print(f"       - {reason}")


async def run(args: argparse.Namespace, settings: Settings) -> RecommendationResult:
    service = RecommendationService(
        get_posting_source(args.postings),
        get_profile_source(args.profiles),
        settings,
    )
    return await service.recommend(
        args.subject,
        min_score_threshold=args.threshold,
        limit=args.limit,
        timeout=args.timeout,
    )


def cmd_recommend(args: argparse.Namespace) -> None:
    """Handle recommend subcommand."""
    try:
        settings = Settings.from_yaml(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        result = asyncio.run(run(args, settings))
    except (FileNotFoundError, LookupError, InvalidProfileError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.export == "json":
        print(export_results_json(result))
    else:
        print_summary(args.subject, result)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(args.verbose)

    if args.command == "recommend":
        cmd_recommend(args)


if __name__ == "__main__":
    main()
