from __future__ import annotations

import logging
import re
from typing import Any

REDACTED = "***REDACTED***"

_SECRET_KEYS = ("private_key", "client_secret", "token", "password", "secret")
_PEM_BLOCK = re.compile(r"-----BEGIN [A-Z ]*PRIVATE KEY-----.*?(-----END [A-Z ]*PRIVATE KEY-----|$)", re.DOTALL)


class RedactingFormatter(logging.Formatter):
    """Mask credential material in log arguments.

    Mapping args are masked by key; positional args and the rendered message
    lose any PEM private key block they carry.
    """

    def format(self, record: logging.LogRecord) -> str:
        if isinstance(record.args, dict):
            record.args = {k: self._redact_item(k, v) for k, v in record.args.items()}
        elif isinstance(record.args, tuple):
            record.args = tuple(self._redact_value(v) for v in record.args)
        return _PEM_BLOCK.sub(REDACTED, super().format(record))

    def _redact_item(self, key: str, value: Any) -> Any:
        lowered = str(key).lower()
        if any(s in lowered for s in _SECRET_KEYS):
            return REDACTED
        return self._redact_value(value)

    def _redact_value(self, value: Any) -> Any:
        if isinstance(value, dict):
            return {k: self._redact_item(k, v) for k, v in value.items()}
        if isinstance(value, str):
            return _PEM_BLOCK.sub(REDACTED, value)
        return value


def setup_logging(level: str) -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(RedactingFormatter("%(asctime)s %(levelname)s %(name)s %(message)s"))

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = [handler]
    # grpc and urllib3 are chatty at DEBUG
    if root.level < logging.INFO:
        for noisy in ("google", "urllib3", "grpc"):
            logging.getLogger(noisy).setLevel(logging.INFO)
