"""structlog ベースのロガー設定"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

DEFAULT_LOGGER_NAME = "featuregate"


def new_logger(
    level: str = "INFO",
    format: str = "json",
    name: str = DEFAULT_LOGGER_NAME,
    **context: Any,
) -> structlog.stdlib.BoundLogger:
    """設定済みの structlog ロガーを返す。

    フラグの書き込みイベントは埋め込み先サービスのログに混ざるため、
    出力には常にロガー名が付く。

    Args:
        level: ログレベル ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
        format: 出力形式 ("json" or "text")
        name: stdlib ロガー名
        **context: 全イベントにバインドする値（例: environment="prod"）

    Returns:
        context をバインド済みの structlog.stdlib.BoundLogger
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if format == "json":
        processors += [
            structlog.processors.StackInfoRenderer(),
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    return structlog.stdlib.get_logger(name).bind(**context)
