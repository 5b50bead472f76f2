"""CLI entrypoint for browsing irlwork.ai tasks and humans."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from irlbrowse.client import IrlworkClient, build_client_from_env
from irlbrowse.export import export_results_to_xlsx
from irlbrowse.geo import IpLocator, StaticLocator
from irlbrowse.models import ANYWHERE, KINDS, FilterState, GeoPoint
from irlbrowse.pagination import ITEMS_PER_PAGE
from irlbrowse.query import SORT_OPTIONS
from irlbrowse.render import format_cards, format_page_bar, format_summary
from irlbrowse.session import DiscoverySession

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Browse the irlwork.ai marketplace")
    parser.add_argument("kind", choices=KINDS, help="what to list")
    parser.add_argument("--search", default="", help="free-text search")
    parser.add_argument("--category", default="", help="task category or worker skill")
    parser.add_argument("--city", default="", help="city name (ignored with --radius anywhere)")
    parser.add_argument("--country", default="", help="country name")
    parser.add_argument("--country-code", default="", help="ISO country code")
    parser.add_argument("--max-rate", default="", help="maximum hourly rate")
    parser.add_argument(
        "--sort",
        default="",
        choices=[""] + sorted({key for keys in SORT_OPTIONS.values() for key in keys}),
        help="sort order",
    )
    parser.add_argument("--radius",
                        default=ANYWHERE,
                        help="search radius in km, or 'anywhere'")
    parser.add_argument("--near-me",
                        action="store_true",
                        help="center the search on the current location")
    parser.add_argument("--lat", type=float, help="search center latitude")
    parser.add_argument("--lng", type=float, help="search center longitude")
    parser.add_argument("--no-remote", action="store_true", help="exclude remote tasks")
    parser.add_argument("--skills", default="", help="comma-separated skills to match")
    parser.add_argument("--page", type=int, default=1, help="page to show")
    parser.add_argument("--per-page", type=int, default=ITEMS_PER_PAGE, help="items per page")
    parser.add_argument(
        "--api-url",
        default=os.getenv("IRLWORK_API_URL", ""),
        help="API base URL (overrides IRLWORK_API_URL env var)",
    )
    parser.add_argument("--export", type=Path, help="write results to an xlsx file")
    parser.add_argument("--verbose", action="store_true", help="enable debug logging")
    return parser


def build_locator(args: argparse.Namespace):
    if args.lat is not None and args.lng is not None:
        return StaticLocator(GeoPoint(latitude=args.lat, longitude=args.lng))
    allowed = (os.getenv("IRLWORK_ALLOW_IP_LOCATION") or "").strip().lower() in ("1", "true", "yes")
    return IpLocator(allowed=allowed or args.near_me)


def build_session(args: argparse.Namespace, client: IrlworkClient) -> DiscoverySession:
    filters = FilterState(
        search_text=args.search,
        category=args.category,
        city=args.city,
        country=args.country,
        country_code=args.country_code,
        max_rate=args.max_rate,
        sort_key=args.sort,
        radius_km=args.radius,
        include_remote=not args.no_remote,
    )
    session = DiscoverySession(
        client=client,
        kind=args.kind,
        items_per_page=args.per_page,
        locator=build_locator(args),
        initial_filters=filters,
    )
    if args.skills:
        session.set_filter("skills", args.skills)
    if args.near_me or (args.lat is not None and args.lng is not None):
        if not session.enable_geo_search():
            logger.info("Location unavailable; searching without geo radius")
    return session


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.sort and args.sort not in SORT_OPTIONS[args.kind]:
        parser.error(f"--sort {args.sort} is not available for {args.kind}; "
                     f"choose from {', '.join(SORT_OPTIONS[args.kind])}")
    configure_logging(args.verbose)

    client = build_client_from_env()
    if args.api_url:
        client.base_url = args.api_url.rstrip("/") + "/"
    session = build_session(args, client)

    if not session.refresh():
        logger.error("Failed to load %s: %s", args.kind, session.error)
        return 1

    if args.page != 1:
        if not session.go_to_page(args.page):
            logger.error("Page %d is out of range (1-%d)", args.page,
                         session.paginator.total_pages)
            return 1
        if not session.refresh():
            logger.error("Failed to load %s: %s", args.kind, session.error)
            return 1

    rows = session.visible_items()
    if rows:
        for line in format_cards(rows, args.kind):
            logger.info("%s", line)
    else:
        logger.info("No %s match your filters.", args.kind)
    logger.info("%s", format_summary(session.paginator, args.kind, shown=len(rows)))
    if session.paginator.total_pages > 1:
        logger.info("Pages: %s", format_page_bar(session.paginator))

    if args.export:
        try:
            export_results_to_xlsx(rows, args.export, args.kind)
        except OSError:
            logger.exception("Failed to export %s to %s", args.kind, args.export)
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
