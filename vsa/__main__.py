"""
Virtual Service Architect - CLI Entry Point

Commands:
    analyze    - Complexity, industry, risk and completeness of a request
    questions  - Clarifying questions for a request
    match      - Rank catalog services against a request
    wbs        - Match, then build and export a work breakdown structure
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from vsa.catalog import CatalogProvider, ScopeStackClient, load_fallback_catalog
from vsa.config import AppConfig
from vsa.errors import VSAError
from vsa.integrations import LocalCache
from vsa.matching import MATCHERS, get_matcher
from vsa.models import enum_value
from vsa.questions import format_questions_for_chat, generate_clarifying_questions
from vsa.scope import analyze_project
from vsa.wbs import export_wbs, export_wbs_to_excel, generate_wbs, generate_wbs_summary

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False):
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )


def load_catalog(live: bool):
    """Live catalog (with cache and fallback) or the packaged one."""
    if not live:
        return load_fallback_catalog()

    config = AppConfig.from_env()
    client = ScopeStackClient(config.scopestack) if config.scopestack.configured else None
    if client is None:
        logger.warning("SCOPESTACK_API_KEY not set, using cached or packaged catalog")
    cache = LocalCache(config.cache.path) if config.cache.enabled else None
    snapshot = CatalogProvider(client=client, cache=cache).get_catalog()
    print(f"Catalog: {len(snapshot)} services ({snapshot.origin})")
    return snapshot.services


def cmd_analyze(args):
    """Analyze a project request."""
    analysis = analyze_project(args.text)
    print(json.dumps(analysis.to_dict(), indent=2))
    return 0


def cmd_questions(args):
    """Clarifying questions for a request."""
    result = generate_clarifying_questions(args.text)

    print(f"\nNeeds questioning: {'YES' if result.needs_questioning else 'NO'}")
    print(f"Confidence: {result.confidence}")
    if result.reasoning:
        print(f"\n{result.reasoning}")
    if result.questions:
        print()
        print(format_questions_for_chat(result.questions))
    return 0


def cmd_match(args):
    """Rank services for a request."""
    catalog = load_catalog(args.live)
    matches = get_matcher(args.strategy).match(args.text, catalog)

    if not matches:
        print("No matching services found")
        return 1

    print()
    print(f"{'#':<4} {'Service':<40} {'Conf':<6} {'Category':<24} Keywords")
    print("-" * 100)
    for index, match in enumerate(matches, start=1):
        service = match.service
        print(f"{index:<4} {service.name[:38]:<40} {match.confidence:<6} {service.category[:22]:<24} "
              f"{', '.join(match.matched_keywords[:4])}")
    return 0


def cmd_wbs(args):
    """Match services and build a WBS from the top N."""
    catalog = load_catalog(args.live)
    matches = get_matcher(args.strategy).match(args.text, catalog)[:args.top]
    if not matches:
        print("No matching services found; nothing to plan")
        return 1

    wbs = generate_wbs(matches, args.project)
    summary = generate_wbs_summary(wbs)

    if args.format == "xlsx":
        output = Path(args.output) if args.output else Path(f"{args.project.replace(' ', '_')}_wbs.xlsx")
        export_wbs_to_excel(wbs, output)
        print(f"Excel saved to: {output}")
    else:
        content = export_wbs(wbs, args.format)
        if args.output:
            output = Path(args.output)
            output.parent.mkdir(parents=True, exist_ok=True)
            output.write_text(content, encoding="utf-8")
            print(f"{args.format.upper()} saved to: {output}")
        else:
            print(content)

    print(f"\n{'='*60}", file=sys.stderr)
    print(f"WBS: {wbs.project_name}", file=sys.stderr)
    print(f"{'='*60}", file=sys.stderr)
    print(f"Services: {len(matches)}", file=sys.stderr)
    print(f"Phases: {summary.phases}", file=sys.stderr)
    print(f"Total hours: {wbs.total_hours}", file=sys.stderr)
    print(f"Total investment: ${summary.total_investment:,}", file=sys.stderr)
    print(f"Timeline: {summary.timeline}", file=sys.stderr)
    print(f"Team size: {summary.team_size}", file=sys.stderr)
    print(f"Risk: {enum_value(summary.risk_level)}", file=sys.stderr)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vsa",
        description="Virtual Service Architect - IT services scoping engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # How complete is this request?
  python -m vsa analyze "Upgrade network for 50 users across 3 offices"

  # Rank services from the live catalog
  python -m vsa match "We need a firewall setup" --live

  # Build a plan from the top 3 matches
  python -m vsa wbs "Migrate 200 mailboxes to Office 365" --project "Acme" --format csv
        """
    )

    parser.add_argument('-v', '--verbose', action='store_true',
                       help='Enable verbose logging')

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    analyze_parser = subparsers.add_parser('analyze', help='Analyze a project request')
    analyze_parser.add_argument('text', help='Project request text')
    analyze_parser.set_defaults(func=cmd_analyze)

    questions_parser = subparsers.add_parser('questions', help='Clarifying questions for a request')
    questions_parser.add_argument('text', help='Project request text')
    questions_parser.set_defaults(func=cmd_questions)

    for name, func, help_text in (
        ('match', cmd_match, 'Rank catalog services'),
        ('wbs', cmd_wbs, 'Build a work breakdown structure'),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument('text', help='Project request text')
        sub.add_argument('--strategy', choices=sorted(MATCHERS), default='text',
                         help='Matching strategy (default: text)')
        sub.add_argument('--live', action='store_true',
                         help='Use the live catalog (credentials from environment)')
        sub.set_defaults(func=func)
        if name == 'wbs':
            sub.add_argument('--project', '-p', required=True,
                             help='Project name')
            sub.add_argument('--top', type=int, default=3,
                             help='Number of top matches to include (default: 3)')
            sub.add_argument('--format', '-f', choices=['json', 'csv', 'xlsx'], default='json',
                             help='Export format (default: json)')
            sub.add_argument('--output', '-o',
                             help='Output file (stdout for json/csv when omitted)')

    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    if not args.command:
        parser.print_help()
        return 1

    try:
        return args.func(args)
    except VSAError as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
