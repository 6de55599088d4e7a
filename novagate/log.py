"""
novagate/log.py - 로깅 설정

라이브러리 모듈들은 logging.getLogger(__name__)만 사용하고,
핸들러 부착은 애플리케이션이 configure_logging()으로 합니다.

- 일반 로거: "novagate" 이하 모듈 로거
- 와이어 로거: "novagate.wire" (요청/응답 라인, 헤더, 본문을 DEBUG로 기록)

Example:
    from novagate.log import configure_logging

    configure_logging(logging.DEBUG, wire=True)
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from rich.console import Console
from rich.logging import RichHandler

WIRE_LOGGER_NAME = "novagate.wire"

# 와이어 로그에서 값을 가리는 헤더 (소문자)
SENSITIVE_HEADERS = frozenset(
    {
        "x-auth-token",
        "x-storage-token",
        "x-auth-key",
        "authorization",
    }
)

_MASK = "********"

wire = logging.getLogger(WIRE_LOGGER_NAME)


def get_wire_logger() -> logging.Logger:
    """와이어 로거 반환"""
    return wire


def mask_headers(headers: Mapping[str, str] | None) -> dict[str, str]:
    """민감한 헤더 값을 가린 사본 반환"""
    if not headers:
        return {}
    return {key: (_MASK if key.lower() in SENSITIVE_HEADERS else value) for key, value in headers.items()}


def configure_logging(
    level: int = logging.INFO,
    wire: bool = False,
    console: Console | None = None,
) -> logging.Logger:
    """Rich 핸들러가 설정된 novagate 로거를 반환합니다.

    Args:
        level: novagate 로거 레벨 (기본값: INFO)
        wire: 와이어 로그 출력 여부 (True면 DEBUG, 아니면 WARNING)
        console: 출력할 Rich Console (기본값: stderr 콘솔)

    Returns:
        logging.Logger: 설정된 "novagate" 로거
    """
    logger = logging.getLogger("novagate")
    logger.setLevel(level)

    # 이미 핸들러가 설정되어 있으면 레벨만 갱신
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(console=console or Console(stderr=True), rich_tracebacks=True)
        handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
        logger.addHandler(handler)

    logging.getLogger(WIRE_LOGGER_NAME).setLevel(logging.DEBUG if wire else logging.WARNING)
    return logger
