from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING, cast

from dotenv import load_dotenv

from contentyield.app import link_manually, load_links, reconcile_exports, unlink
from contentyield.config import configure_logging
from contentyield.domain.model import ChannelKind
from contentyield.domain.reconciliation import (
    filter_by_channels,
    filter_by_years,
    pivot_by_product,
    ranked,
    search,
    summarize,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from contentyield.app import ReconcileReport

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile cross-platform content revenue")
    subparsers = parser.add_subparsers(dest="command", required=True)

    reconcile = subparsers.add_parser("reconcile", help="Fold exports and propose matches")
    reconcile.add_argument("--videos", type=Path, help="JSON array of video ad-revenue rows")
    reconcile.add_argument("--products", type=Path, help="JSON array of storefront rows")
    reconcile.add_argument("--sponsored", type=Path, help="JSON array of sponsored payout rows")
    reconcile.add_argument("--assets", type=Path, help="JSON array of storefront video assets")
    reconcile.add_argument(
        "--commit-auto",
        action="store_true",
        help="Commit auto-approvable candidates and persist the resulting links",
    )
    reconcile.add_argument(
        "--channel",
        action="append",
        choices=[kind.value for kind in ChannelKind],
        default=[],
        help="Only report entities earning on this channel (repeatable)",
    )
    reconcile.add_argument(
        "--year", action="append", type=int, default=[], help="Publish year (repeatable)"
    )
    reconcile.add_argument("--search", type=str, help="Filter by title or identifier")
    reconcile.add_argument(
        "--pivot", action="store_true", help="Sum entities sharing a product id"
    )
    reconcile.add_argument("--top", type=int, default=20, help="Number of rows to report")

    links = subparsers.add_parser("links", help="Content link management commands")
    links_sub = links.add_subparsers(dest="links_command", required=True)
    links_sub.add_parser("list", help="List stored links")
    links_add = links_sub.add_parser("add", help="Link a video to product ids")
    links_add.add_argument("--video-id", type=str, required=True)
    links_add.add_argument(
        "--product-id", action="append", required=True, help="Product id (repeatable)"
    )
    links_add.add_argument("--display-name", type=str, help="Display name override")
    links_remove = links_sub.add_parser("remove", help="Remove the link for a video")
    links_remove.add_argument("--video-id", type=str, required=True)

    return parser.parse_args(list(argv))


def _load_rows(path: Path | None) -> list[dict[str, object]]:
    if path is None:
        return []
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"{path} is not valid JSON: {exc}") from exc
    if not isinstance(payload, list):
        raise ValueError(f"{path} must contain a JSON array of rows")
    rows = cast(list[object], payload)
    return [cast(dict[str, object], row) for row in rows if isinstance(row, dict)]


def _report(report: ReconcileReport, args: argparse.Namespace) -> None:
    entities = list(report.registry)
    entities = filter_by_channels(entities, [ChannelKind(kind) for kind in args.channel])
    entities = filter_by_years(entities, args.year)
    if args.search:
        entities = search(entities, args.search)

    if args.pivot:
        for row in pivot_by_product(entities)[: args.top]:
            log.info(
                "%s  %s  %s (%s entities)",
                row.total,
                row.product_id,
                row.title,
                len(row.entity_ids),
            )
    else:
        for entity in ranked(entities)[: args.top]:
            log.info(
                "%s  %s  video=%s products=%s",
                entity.total,
                entity.title,
                entity.video_id,
                ",".join(entity.product_ids),
            )

    summary = summarize(entities)
    log.info(
        "Summary: entities=%s, revenue=%s, views=%s, clicks=%s, ordered_items=%s",
        summary.entities,
        summary.revenue,
        summary.views,
        summary.clicks,
        summary.ordered_items,
    )
    for candidate in report.candidates[: args.top]:
        log.info(
            "Candidate %s: %s <-> %r score=%s basis=%s%s",
            candidate.candidate_id,
            candidate.entity_id,
            candidate.asset.title,
            candidate.score,
            candidate.basis,
            " (auto)" if candidate.auto_approvable else "",
        )
    if report.commit is not None:
        log.info(
            "Committed: applied=%s, discarded=%s, skipped=%s",
            report.commit.applied,
            report.commit.discarded,
            report.commit.skipped,
        )


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)

    try:
        if parsed_args.command == "reconcile":
            report = reconcile_exports(
                video_rows=_load_rows(parsed_args.videos),
                product_rows=_load_rows(parsed_args.products),
                sponsored_rows=_load_rows(parsed_args.sponsored),
                asset_rows=_load_rows(parsed_args.assets),
                commit_auto=parsed_args.commit_auto,
            )
            _report(report, parsed_args)
        elif parsed_args.command == "links" and parsed_args.links_command == "list":
            for link in load_links():
                log.info(
                    "%s -> %s%s%s",
                    link.video_id,
                    ", ".join(link.product_ids),
                    f" as {link.display_name!r}" if link.display_name else "",
                    " (manual)" if link.manually_linked else "",
                )
        elif parsed_args.command == "links" and parsed_args.links_command == "add":
            link = link_manually(
                video_id=parsed_args.video_id,
                product_ids=parsed_args.product_id,
                display_name=parsed_args.display_name,
            )
            log.info("Stored link %s", link.id)
        elif parsed_args.command == "links" and parsed_args.links_command == "remove":
            if not unlink(video_id=parsed_args.video_id):
                log.warning("No link stored for video %s", parsed_args.video_id)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except ValueError:
        log.exception("Invalid input")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error during reconciliation")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
