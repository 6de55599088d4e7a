"""
novagate/dispatch/retry.py - 쓰로틀링 대기 설정

HTTP 413 또는 overLimit.retryAfter 힌트를 받았을 때
호출당 한 번만 대기 후 재시도합니다. 일반적인 백오프는 하지 않습니다.

주요 구성 요소:
- ThrottleConfig: 대기 시간 설정 (힌트 없을 때 기본값, 최대값)
- DEFAULT_THROTTLE_CONFIG: 기본 설정
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .errors import ExceptionItem

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ThrottleConfig:
    """쓰로틀링 대기 설정

    Attributes:
        default_delay: 힌트가 없을 때 대기 시간 (초)
        max_delay: 최대 대기 시간 (초)
        max_pauses: 호출당 최대 대기 횟수
    """

    default_delay: float = 5.0
    max_delay: float = 60.0
    max_pauses: int = 1

    def get_delay(self, item: ExceptionItem, retry_after_header: str | None = None) -> float:
        """대기 시간 계산

        본문의 retryAfter, Retry-After 헤더, 기본값 순으로 사용하고
        max_delay로 제한합니다.

        Args:
            item: 쓰로틀링 에러
            retry_after_header: Retry-After 응답 헤더 값

        Returns:
            대기 시간 (초)
        """
        delay: float = self.default_delay
        if item.retry_after is not None:
            delay = float(item.retry_after)
        elif retry_after_header:
            try:
                delay = float(retry_after_header.strip())
            except ValueError:
                logger.debug("Retry-After 헤더 무시: %r", retry_after_header)
        return max(0.0, min(delay, self.max_delay))


# 기본 쓰로틀링 설정
DEFAULT_THROTTLE_CONFIG = ThrottleConfig()
