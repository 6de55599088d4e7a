"""
novagate/dispatch/errors.py - 클라우드 에러 응답 파싱 및 분류

실패 응답(상태 코드 + 본문)을 ExceptionItem으로 정리하고
메시지 키워드로 ErrorKind를 분류합니다.

주요 구성 요소:
- ExceptionItem: 파싱된 에러 정보
- classify_error_message: 메시지 문자열을 ErrorKind로 분류 (없음이면 None)
- parse_exception: 상태 코드와 본문에서 ExceptionItem 생성

에러 본문 형태:
    {"message": "...", "details": "..."}                       # 평면형
    {"itemNotFound": {"message": "...", "code": 404}}          # 감싼 형태
    {"overLimit": {"message": "...", "retryAfter": "30"}}      # 쓰로틀링 힌트
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

from novagate.exceptions import ErrorKind

logger = logging.getLogger(__name__)

DEFAULT_MESSAGE = "unknown"
DEFAULT_DETAILS = "The cloud provided an error code without explanation"

# 리소스 없음으로 취급하는 badRequest 상세 문구
ABSENCE_DETAIL_PHRASES = ("id should be integer",)


@dataclass(frozen=True)
class ExceptionItem:
    """파싱된 클라우드 에러

    Attributes:
        code: HTTP 상태 코드
        kind: 에러 종류
        message: 짧은 메시지 (fault 키 또는 message 값)
        details: 상세 문자열
        retry_after: 쓰로틀링 대기 힌트 (초)
    """

    code: int
    kind: ErrorKind = ErrorKind.GENERAL
    message: str = DEFAULT_MESSAGE
    details: str = DEFAULT_DETAILS
    retry_after: int | None = None

    @property
    def is_rejection(self) -> bool:
        """자격 증명 거부 여부"""
        return self.code in (401, 403) or self.kind == ErrorKind.AUTHENTICATION

    @property
    def is_throttle(self) -> bool:
        return self.code == 413 or self.kind == ErrorKind.THROTTLING


# 키워드 -> 에러 종류 (소문자 비교)
_KIND_BY_MESSAGE: dict[str, ErrorKind] = {
    "unauthorized": ErrorKind.AUTHENTICATION,
    "serviceunavailable": ErrorKind.CAPACITY,
    "servercapacityunavailable": ErrorKind.CAPACITY,
    "overlimit": ErrorKind.QUOTA,
    "badrequest": ErrorKind.COMMUNICATION,
    "badmediatype": ErrorKind.COMMUNICATION,
    "badmethod": ErrorKind.COMMUNICATION,
    "notimplemented": ErrorKind.COMMUNICATION,
}

_ABSENCE_MESSAGES = frozenset({"itemnotfound"})


def classify_error_message(message: str | None) -> ErrorKind | None:
    """에러 메시지를 ErrorKind로 분류

    Args:
        message: fault 키 또는 message 값

    Returns:
        분류된 종류. "itemNotFound"는 None (리소스 없음),
        모르는 메시지는 ErrorKind.GENERAL
    """
    key = (message or "").strip().lower()
    if key in _ABSENCE_MESSAGES:
        return None
    return _KIND_BY_MESSAGE.get(key, ErrorKind.GENERAL)


def _to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value)


def _parse_retry_after(value: Any) -> int | None:
    if value is None:
        return None
    try:
        seconds = int(str(value).strip())
    except ValueError:
        logger.debug("retryAfter 값 무시: %r", value)
        return None
    return max(seconds, 0)


def parse_exception(code: int, body: str | bytes | None) -> ExceptionItem | None:
    """실패 응답을 ExceptionItem으로 파싱

    Args:
        code: HTTP 상태 코드
        body: 응답 본문

    Returns:
        ExceptionItem. 리소스 없음(itemNotFound, "id should be integer")이면 None
    """
    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")

    kind = ErrorKind.THROTTLING if code == 413 else ErrorKind.GENERAL
    if not body or not body.strip():
        return ExceptionItem(code=code, kind=kind)

    try:
        data = json.loads(body)
    except ValueError:
        logger.warning("에러 응답 본문이 JSON이 아닙니다 (HTTP %s)", code)
        return ExceptionItem(code=code, kind=kind, details=body)

    if not isinstance(data, dict) or not data:
        return ExceptionItem(code=code, kind=kind, details=body)

    fault_key: str | None = None
    fault: dict[str, Any] = data
    if "message" not in data and "details" not in data:
        # 감싼 형태: {"<fault>": {...}}
        for key, value in data.items():
            if isinstance(value, dict):
                fault_key, fault = key, value
                break

    message = _to_text(fault.get("message")) or fault_key or DEFAULT_MESSAGE
    details = _to_text(fault.get("details")) or DEFAULT_DETAILS
    retry_after = _parse_retry_after(fault.get("retryAfter"))

    classified = classify_error_message(fault_key or message)
    if classified is None:
        logger.debug("리소스 없음 응답: %s", message)
        return None

    if classified == ErrorKind.COMMUNICATION and any(
        phrase in f"{message} {details}".lower() for phrase in ABSENCE_DETAIL_PHRASES
    ):
        logger.debug("잘못된 ID 형식을 리소스 없음으로 처리: %s", message)
        return None

    if code == 413:
        kind = ErrorKind.THROTTLING
    elif classified == ErrorKind.QUOTA and retry_after is not None:
        # overLimit + retryAfter 힌트는 쓰로틀링
        kind = ErrorKind.THROTTLING
    else:
        kind = classified

    return ExceptionItem(code=code, kind=kind, message=message, details=details, retry_after=retry_after)
