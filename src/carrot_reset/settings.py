from __future__ import annotations

import base64
import binascii
import json
import logging
import os
import re
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from dotenv import load_dotenv

from carrot_reset.errors import InvalidConfiguration, MissingConfiguration
from carrot_reset.models import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, MIN_PAGE_SIZE

_BASE64_SHAPE = re.compile(r"^[A-Za-z0-9+/=\s]+$")
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


class CredentialParsing(StrEnum):
    STRICT = "strict"
    BASE64_FALLBACK = "base64_fallback"


@dataclass(frozen=True, slots=True)
class Settings:
    firebase_project_id: str
    service_account: dict[str, Any]
    credential_parsing: CredentialParsing
    dry_run: bool
    page_size: int
    log_level: str


def require_env(name: str) -> str:
    value = os.getenv(name, "").strip()
    if not value:
        raise MissingConfiguration(name)
    return value


def looks_like_base64(value: str) -> bool:
    return len(value) > 200 and bool(_BASE64_SHAPE.match(value)) and not value.strip().startswith("{")


def parse_config_payload(
    name: str,
    strategy: CredentialParsing = CredentialParsing.BASE64_FALLBACK,
) -> dict[str, Any]:
    """Parse a JSON object out of the environment variable ``name``.

    Service account JSON is awkward to paste into CI secrets, so under
    ``BASE64_FALLBACK`` a long value made only of base64 characters is decoded
    and parsed a second time before giving up.
    """
    raw = require_env(name)
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        if strategy is CredentialParsing.BASE64_FALLBACK and looks_like_base64(raw):
            try:
                payload = json.loads(base64.b64decode(raw).decode("utf-8"))
            except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError) as decode_exc:
                raise InvalidConfiguration(
                    name, f"not valid JSON (base64 decode attempted): {decode_exc}"
                ) from decode_exc
        else:
            raise InvalidConfiguration(name, f"not valid JSON: {exc}") from exc

    if not isinstance(payload, dict):
        raise InvalidConfiguration(name, "expected a JSON object")
    return payload


def normalize_credential(payload: dict[str, Any]) -> dict[str, Any]:
    private_key = payload.get("private_key")
    if isinstance(private_key, str) and "\\n" in private_key:
        return {**payload, "private_key": private_key.replace("\\n", "\n")}
    return payload


def resolve_dry_run(raw: str | None) -> bool:
    return (raw or "false").strip().lower() == "true"


def resolve_page_size(raw: str | int | None) -> int:
    if isinstance(raw, int):
        value = raw
    else:
        match = _LEADING_INT.match(raw or "")
        value = int(match.group(1)) if match else 0
    if not value:
        value = DEFAULT_PAGE_SIZE
    return min(max(value, MIN_PAGE_SIZE), MAX_PAGE_SIZE)


def resolve_credential_parsing(raw: str | None) -> CredentialParsing:
    value = (raw or CredentialParsing.BASE64_FALLBACK.value).strip().lower()
    try:
        return CredentialParsing(value)
    except ValueError as exc:
        choices = ", ".join(item.value for item in CredentialParsing)
        raise InvalidConfiguration("SERVICE_ACCOUNT_PARSING", f"expected one of {choices}, got {value!r}") from exc


def resolve_log_level(raw: str | None) -> str:
    level = (raw or "INFO").strip().upper() or "INFO"
    if level not in logging.getLevelNamesMapping():
        raise InvalidConfiguration("LOG_LEVEL", f"unknown log level {level!r}")
    return level


def load_settings(*, dotenv_path: str | None = None) -> Settings:
    if dotenv_path:
        load_dotenv(dotenv_path=dotenv_path)
    else:
        load_dotenv()

    firebase_project_id = require_env("FIREBASE_PROJECT_ID")
    credential_parsing = resolve_credential_parsing(os.getenv("SERVICE_ACCOUNT_PARSING"))
    service_account = parse_config_payload("SERVICE_ACCOUNT_JSON", credential_parsing)
    if credential_parsing is CredentialParsing.BASE64_FALLBACK:
        service_account = normalize_credential(service_account)

    return Settings(
        firebase_project_id=firebase_project_id,
        service_account=service_account,
        credential_parsing=credential_parsing,
        dry_run=resolve_dry_run(os.getenv("DRY_RUN")),
        page_size=resolve_page_size(os.getenv("PAGE_SIZE")),
        log_level=resolve_log_level(os.getenv("LOG_LEVEL")),
    )
