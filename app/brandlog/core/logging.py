from __future__ import annotations

import json
import logging


def configure_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(level=level, format="%(message)s")


def log_json(logger: logging.Logger, payload: dict, *, level: int = logging.INFO) -> None:
    logger.log(level, json.dumps(payload, ensure_ascii=False, default=str))


def log_event(logger: logging.Logger, event: str, *, level: int = logging.INFO, **fields) -> None:
    log_json(logger, {"event": event, **fields}, level=level)
