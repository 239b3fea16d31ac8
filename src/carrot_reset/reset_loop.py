from __future__ import annotations

import logging
import math
from collections.abc import Iterator, Sequence
from dataclasses import replace
from typing import Any, Protocol

from carrot_reset.models import (
    DEFAULT_CARROT_MAX,
    MAX_BATCH_OPS,
    OPS_PER_RESET,
    PageResult,
    ResetMutation,
    ScanCounters,
    SubscriptionStatus,
    UserRecord,
)

_LOG = logging.getLogger(__name__)


class UserStoreProto(Protocol):
    def fetch_users_page(self, start_after: str | None, limit: int) -> list[UserRecord]: ...
    def commit_resets(self, resets: Sequence[ResetMutation]) -> None: ...


class ReporterProto(Protocol):
    def start(self, *, dry_run: bool, page_size: int) -> None: ...
    def progress(self, counters: ScanCounters) -> None: ...
    def done(self, counters: ScanCounters, *, dry_run: bool) -> None: ...


def is_premium(record: UserRecord) -> bool:
    return record.subscription_status == SubscriptionStatus.PREMIUM.value


def resolve_max(carrots: dict[str, Any]) -> int:
    value = carrots.get("max")
    if isinstance(value, bool) or not isinstance(value, int | float):
        return DEFAULT_CARROT_MAX
    if not math.isfinite(value):
        return DEFAULT_CARROT_MAX
    return math.trunc(value)


def scan_page(page: Sequence[UserRecord], counters: ScanCounters, *, dry_run: bool) -> PageResult:
    """Evaluate one page of users without touching the store.

    The cursor always advances to the last record of the page, whether or not
    that record was eligible, so a scan never revisits or stalls on a page.
    """
    eligible = counters.eligible
    resets: list[ResetMutation] = []
    for record in page:
        if is_premium(record):
            continue
        eligible += 1
        if dry_run:
            continue
        resets.append(ResetMutation(user_id=record.id, amount=resolve_max(record.carrots)))

    return PageResult(
        next_cursor=page[-1].id if page else None,
        resets=tuple(resets),
        counters=replace(
            counters,
            scanned=counters.scanned + len(page),
            eligible=eligible,
            updated=counters.updated + len(resets),
        ),
    )


def chunk_resets(
    resets: Sequence[ResetMutation],
    max_ops: int = MAX_BATCH_OPS,
) -> Iterator[tuple[ResetMutation, ...]]:
    per_batch = max(max_ops // OPS_PER_RESET, 1)
    for start in range(0, len(resets), per_batch):
        yield tuple(resets[start : start + per_batch])


class WeeklyCarrotReset:
    def __init__(
        self,
        store: UserStoreProto,
        reporter: ReporterProto,
        *,
        page_size: int,
        dry_run: bool,
        max_batch_ops: int = MAX_BATCH_OPS,
    ) -> None:
        self._store = store
        self._reporter = reporter
        self._page_size = page_size
        self._dry_run = dry_run
        self._max_batch_ops = max_batch_ops

    def run(self) -> ScanCounters:
        counters = ScanCounters()
        cursor: str | None = None
        self._reporter.start(dry_run=self._dry_run, page_size=self._page_size)

        while True:
            page = self._store.fetch_users_page(cursor, self._page_size)
            if not page:
                break

            result = scan_page(page, counters, dry_run=self._dry_run)
            if not self._dry_run:
                for batch in chunk_resets(result.resets, self._max_batch_ops):
                    self._store.commit_resets(batch)
                    _LOG.debug("committed batch of %s resets (after=%s)", len(batch), cursor)

            cursor = result.next_cursor
            counters = result.counters
            self._reporter.progress(counters)

        self._reporter.done(counters, dry_run=self._dry_run)
        return counters
