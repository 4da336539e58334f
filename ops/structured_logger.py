from __future__ import annotations

import json
import logging
import os
import re
import sys
import time
from typing import Any, Dict, Optional

from config.settings import settings

# Gateway credentials: bearer header values and the access_token query parameter
_SECRET_PATTERNS = (
    (re.compile(r"(access_token=)[^&\s\"']+"), r"\1***"),
    (re.compile(r"(Bearer\s+)[A-Za-z0-9._~+/=-]+"), r"\1***"),
)


def scrub_secrets(text: str) -> str:
    for pattern, repl in _SECRET_PATTERNS:
        text = pattern.sub(repl, text)
    return text


class JsonFormatter(logging.Formatter):
    """One JSON object per record; gateway fields come in via extra={"extra": {...}}."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "severity": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "time_unix": time.time(),
            "service": "teleotp",
            "environment": settings.ENVIRONMENT,
            "gateway": settings.TELEGRAM_GATEWAY_BASE_URL,
            "pid": os.getpid(),
        }
        if hasattr(record, "extra") and isinstance(record.extra, dict):
            payload.update(record.extra)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return scrub_secrets(json.dumps(payload, ensure_ascii=False, default=str))


def setup_logging(level: Optional[str] = None) -> None:
    """
    Install JSON logging on the root logger.

    Hosts call this once at startup, before building a TelegramGatewayClient:

        setup_logging()
        client = TelegramGatewayClient()
    """
    root = logging.getLogger()
    root.setLevel(level or settings.LOG_LEVEL)
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())

    # Tokenless gateway calls carry access_token in the URL; httpx logs full URLs at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    root.handlers[:] = [handler]
