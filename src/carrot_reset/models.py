from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

USERS_COLLECTION = "users"
TRANSACTIONS_COLLECTION = "transactions"

DEFAULT_CARROT_MAX = 5
RESET_DESCRIPTION = "Weekly carrot refresh"

# Firestore rejects batches above 500 writes.
MAX_BATCH_OPS = 450
OPS_PER_RESET = 2

DEFAULT_PAGE_SIZE = 200
MIN_PAGE_SIZE = 1
MAX_PAGE_SIZE = 500


class SubscriptionStatus(StrEnum):
    FREE = "free"
    PREMIUM = "premium"


class TransactionType(StrEnum):
    RESET = "reset"


@dataclass(frozen=True, slots=True)
class UserRecord:
    id: str
    subscription_status: str = SubscriptionStatus.FREE.value
    carrots: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_document(cls, doc_id: str, data: dict[str, Any] | None) -> UserRecord:
        data = data or {}
        carrots = data.get("carrots")
        return cls(
            id=doc_id,
            subscription_status=str(data.get("subscriptionStatus") or SubscriptionStatus.FREE.value).lower(),
            carrots=dict(carrots) if isinstance(carrots, dict) else {},
        )


@dataclass(frozen=True, slots=True)
class ResetMutation:
    user_id: str
    amount: int

    @property
    def balance_after(self) -> int:
        return self.amount


@dataclass(frozen=True, slots=True)
class ScanCounters:
    scanned: int = 0
    eligible: int = 0
    updated: int = 0


@dataclass(frozen=True, slots=True)
class PageResult:
    next_cursor: str | None
    resets: tuple[ResetMutation, ...]
    counters: ScanCounters
