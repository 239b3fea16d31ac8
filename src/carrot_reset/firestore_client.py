from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import firebase_admin  # type: ignore[import-untyped]
from firebase_admin import credentials, firestore
from google.api_core.exceptions import GoogleAPIError
from google.auth.exceptions import GoogleAuthError
from google.cloud.firestore_v1.field_path import FieldPath

from carrot_reset.errors import StoreOperationFailure
from carrot_reset.models import (
    RESET_DESCRIPTION,
    TRANSACTIONS_COLLECTION,
    USERS_COLLECTION,
    ResetMutation,
    TransactionType,
    UserRecord,
)


class FirestoreClient:
    def __init__(self, service_account: dict[str, Any], project_id: str) -> None:
        if not firebase_admin._apps:
            cred = credentials.Certificate(service_account)
            firebase_admin.initialize_app(cred, {"projectId": project_id})
        self._db = firestore.client()

    def fetch_users_page(self, start_after: str | None, limit: int) -> list[UserRecord]:
        users = self._db.collection(USERS_COLLECTION)
        query = users.order_by(FieldPath.document_id()).limit(limit)
        if start_after is not None:
            query = query.start_after({FieldPath.document_id(): users.document(start_after)})
        try:
            docs = list(query.stream())
        except (GoogleAPIError, GoogleAuthError) as exc:
            raise StoreOperationFailure("page fetch", str(exc)) from exc
        return [UserRecord.from_document(doc.id, doc.to_dict()) for doc in docs]

    def commit_resets(self, resets: Sequence[ResetMutation]) -> None:
        if not resets:
            return
        batch = self._db.batch()
        for reset in resets:
            user_ref = self._db.collection(USERS_COLLECTION).document(reset.user_id)
            tx_ref = user_ref.collection(TRANSACTIONS_COLLECTION).document()
            batch.update(
                user_ref,
                {
                    "carrots.current": reset.amount,
                    "carrots.lastResetAt": firestore.SERVER_TIMESTAMP,
                    "updatedAt": firestore.SERVER_TIMESTAMP,
                },
            )
            batch.set(
                tx_ref,
                {
                    "type": TransactionType.RESET.value,
                    "amount": reset.amount,
                    "balanceAfter": reset.balance_after,
                    "description": RESET_DESCRIPTION,
                    "timestamp": firestore.SERVER_TIMESTAMP,
                },
            )
        try:
            batch.commit()
        except (GoogleAPIError, GoogleAuthError) as exc:
            raise StoreOperationFailure("batch commit", str(exc)) from exc
