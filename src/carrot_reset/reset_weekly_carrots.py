from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from dataclasses import replace

from carrot_reset.errors import ConfigurationError, StoreOperationFailure
from carrot_reset.firestore_client import FirestoreClient
from carrot_reset.logger import setup_logging
from carrot_reset.reporter import ProgressReporter
from carrot_reset.reset_loop import WeeklyCarrotReset
from carrot_reset.settings import Settings, load_settings, resolve_page_size

_LOG = logging.getLogger(__name__)


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Reset weekly carrots for every non-premium user")
    parser.add_argument("--dry-run", action="store_true", help="Count eligible users without writing")
    parser.add_argument("--live", action="store_true", help="Force live mode even if DRY_RUN=true")
    parser.add_argument("--page-size", type=int, default=None, help="Users fetched per page (1-500)")
    parser.add_argument("--dotenv-path", type=str, default=None)
    args = parser.parse_args(argv)

    try:
        settings = _apply_overrides(load_settings(dotenv_path=args.dotenv_path), args)
    except ConfigurationError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    setup_logging(settings.log_level)
    reporter = ProgressReporter()
    reporter.config(settings)

    try:
        store = FirestoreClient(
            service_account=settings.service_account,
            project_id=settings.firebase_project_id,
        )
    except ValueError as exc:
        # firebase_admin reports unusable certificates as ValueError
        _LOG.error("Weekly carrot reset aborted: unusable service account: %s", exc)
        return 1

    try:
        counters = WeeklyCarrotReset(
            store,
            reporter,
            page_size=settings.page_size,
            dry_run=settings.dry_run,
        ).run()
    except StoreOperationFailure as exc:
        _LOG.error("Weekly carrot reset aborted: %s", exc)
        return 1

    print(
        f"scanned={counters.scanned} eligible={counters.eligible} "
        f"updated={counters.updated} dry_run={settings.dry_run}"
    )
    return 0


def _apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    dry_run = False if args.live else args.dry_run or settings.dry_run
    page_size = resolve_page_size(args.page_size) if args.page_size is not None else settings.page_size
    return replace(settings, dry_run=dry_run, page_size=page_size)


if __name__ == "__main__":
    raise SystemExit(main())
