from __future__ import annotations

import logging

from carrot_reset.models import ScanCounters
from carrot_reset.settings import Settings

_LOG = logging.getLogger(__name__)


class ProgressReporter:
    """Log run progress. Credential material is never passed to the logger."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._log = logger or _LOG

    def config(self, settings: Settings) -> None:
        service_account = settings.service_account
        self._log.info(
            "Config: project_id=%s dry_run=%s page_size=%s credential_parsing=%s",
            settings.firebase_project_id,
            settings.dry_run,
            settings.page_size,
            settings.credential_parsing.value,
        )
        self._log.info(
            "ServiceAccount: type=%s project_id=%s has_private_key=%s",
            service_account.get("type") or "?",
            service_account.get("project_id") or "?",
            bool(service_account.get("private_key")),
        )

    def start(self, *, dry_run: bool, page_size: int) -> None:
        self._log.info("Weekly carrot reset starting. dry_run=%s page_size=%s", dry_run, page_size)

    def progress(self, counters: ScanCounters) -> None:
        self._log.info(
            "Progress: scanned=%s eligible=%s updated=%s",
            counters.scanned,
            counters.eligible,
            counters.updated,
        )

    def done(self, counters: ScanCounters, *, dry_run: bool) -> None:
        self._log.info(
            "Done. scanned=%s eligible=%s updated=%s dry_run=%s",
            counters.scanned,
            counters.eligible,
            counters.updated,
            dry_run,
        )
