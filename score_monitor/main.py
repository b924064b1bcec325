from __future__ import annotations

import argparse
import logging
import sys
from typing import Callable, List, Optional, Sequence

from . import config, reconciler, scraper, store
from .config import RunConfig


def setup_logging() -> None:
    level = getattr(logging, config.LOG_LEVEL.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
    )


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="score-monitor",
        description="Scrape a listing page and append score changes to a JSON history.",
    )
    parser.add_argument(
        "page_url",
        nargs="?",
        default=None,
        help=f"Listing page to scrape (default: PAGE_URL or {config.DEFAULT_URL}).",
    )
    parser.add_argument(
        "output_path",
        nargs="?",
        default=None,
        help="History file (default: <OUT_DIR>/<year>-scores.json).",
    )
    return parser.parse_args(argv)


def log_events(events: List[reconciler.ReconcileEvent], logger: logging.Logger) -> None:
    for ev in events:
        if ev.kind is reconciler.EventKind.NEW:
            logger.info('✅ New entry: "%s" -> %d points', ev.name, ev.points)
        elif ev.kind is reconciler.EventKind.CHANGED:
            prev = "N/A" if ev.previous is None else ev.previous
            logger.info('⬆️ Updated "%s": %s -> %d', ev.name, prev, ev.points)
        else:
            logger.info('⏸ No change for "%s" (still %d)', ev.name, ev.points)


def run_once(
    run: RunConfig,
    *,
    fetch: Optional[Callable[[str], str]] = None,
) -> reconciler.ReconcileResult:
    """Perform one fetch-parse-merge-save cycle."""
    logger = logging.getLogger(__name__)
    fetch = fetch or scraper.fetch_html

    if run.uses_default_url:
        logger.warning("Using default URL. Set PAGE_URL or pass a URL as first argument.")

    logger.info("Fetching %s ...", run.page_url)
    html = fetch(run.page_url)

    observations = scraper.extract_observations(html, run.page_url)
    if not observations:
        logger.warning("No items extracted from %s; history will not change.", run.page_url)

    history = store.load_history(run.output_path)
    result = reconciler.reconcile(history, observations, run.started_at)
    log_events(result.events, logger)

    store.save_history(run.output_path, result.entries)
    logger.info(
        "💾 Saved %d entries to %s (new=%d, changed=%d, unchanged=%d)",
        len(result.entries),
        run.output_path,
        result.new_count,
        result.changed_count,
        result.unchanged_count,
    )
    return result


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point. Returns the process exit code."""
    args = parse_args(argv)
    setup_logging()
    logger = logging.getLogger(__name__)

    run = config.resolve_run_config(args.page_url, args.output_path)
    try:
        run_once(run)
    except Exception:
        logger.exception("❌ Run failed for %s", run.page_url)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
