from __future__ import annotations

import pytest

_ENV_VARS = (
    "FIREBASE_PROJECT_ID",
    "SERVICE_ACCOUNT_JSON",
    "SERVICE_ACCOUNT_PARSING",
    "DRY_RUN",
    "PAGE_SIZE",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
