from __future__ import annotations

import json
import logging

SENSITIVE_KEYS = frozenset({"token", "access_token", "accessToken", "password", "authorization"})


def configure_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(level=level, format="%(message)s")


def redact(payload: dict) -> dict:
    return {key: ("***" if key in SENSITIVE_KEYS else value) for key, value in payload.items()}


def log_json(logger: logging.Logger, payload: dict, level: int = logging.INFO) -> None:
    logger.log(level, json.dumps(redact(payload), ensure_ascii=False, default=str))
