"""
novagate/exceptions.py - 통합 예외 계층 구조

라이브러리 전체에서 사용되는 예외 클래스들을 정의합니다.
호출자는 성공, 리소스 없음(예외 아님), 또는 아래 예외 중 하나만 보게 됩니다.

예외 계층 구조:
    NovaGateError (베이스)
    ├── InternalError (버전 문자열 오류 등 내부 오류)
    ├── ConfigurationError (설정 누락/파싱 실패)
    └── CloudError (클라우드 응답 기반 오류, kind로 분류)
        ├── CommunicationError (네트워크/IO 실패, 잘못된 JSON)
        ├── ServiceNotAvailableError (홈 리전에 서비스 엔드포인트 없음)
        ├── ThrottledError (대기 후에도 다시 413)
        └── CredentialsRejectedError (재인증 후 재시도도 거부됨)
            └── AuthenticationFailedError (모든 인증 방식이 거부)

Usage:
    from novagate.exceptions import CloudError, ErrorKind

    try:
        result = connection.execute("compute", "GET", "/servers")
    except CloudError as e:
        if e.kind == ErrorKind.CAPACITY:
            ...
"""

from __future__ import annotations

from enum import Enum
from typing import Any

# =============================================================================
# 에러 종류
# =============================================================================


class ErrorKind(Enum):
    """클라우드 에러 종류

    에러 응답 본문의 message 값과 HTTP 상태 코드로 분류됩니다.
    """

    GENERAL = "general"
    COMMUNICATION = "communication"
    AUTHENTICATION = "authentication"
    CAPACITY = "capacity"
    QUOTA = "quota"
    THROTTLING = "throttling"

    def __str__(self) -> str:
        return self.value


# =============================================================================
# 베이스 예외
# =============================================================================


class NovaGateError(Exception):
    """novagate 기본 예외 클래스

    모든 커스텀 예외의 베이스 클래스입니다.

    Attributes:
        message: 에러 메시지
        cause: 원인 예외 (체이닝용)
        details: 추가 상세 정보
    """

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.details = details or {}

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """예외 정보를 딕셔너리로 반환"""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "cause": str(self.cause) if self.cause else None,
            "details": self.details,
        }


class InternalError(NovaGateError):
    """내부 처리 오류

    클라우드가 보낸 버전 문자열이 숫자가 아닌 경우처럼
    조용히 넘어가면 안 되는 상황에서 발생합니다.
    """


class ConfigurationError(NovaGateError):
    """설정 오류

    엔드포인트/계정/키 누락, 설정 파일 파싱 실패 시 발생합니다.

    Attributes:
        config_key: 문제가 된 설정 키 이름 (옵션)
    """

    def __init__(
        self,
        message: str,
        config_key: str | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message, cause)
        self.config_key = config_key
        if config_key:
            self.details["config_key"] = config_key


# =============================================================================
# 클라우드 응답 관련 예외
# =============================================================================


class CloudError(NovaGateError):
    """클라우드 호출 실패 예외

    모든 클라우드 오류는 HTTP 상태, 종류, 짧은 메시지, 상세 문자열을 가집니다.

    Attributes:
        code: HTTP 상태 코드 (네트워크 오류 등은 0)
        kind: 에러 종류 (ErrorKind)
        error_message: 클라우드가 보낸 짧은 메시지
        error_details: 클라우드가 보낸 상세 문자열
    """

    default_kind = ErrorKind.GENERAL

    def __init__(
        self,
        message: str,
        code: int = 0,
        kind: ErrorKind | None = None,
        details: str = "",
        cause: Exception | None = None,
    ):
        self.code = code
        self.kind = kind or self.default_kind
        self.error_message = message
        self.error_details = details
        full_message = f"[{code} : {message}] {details}" if details else f"[{code} : {message}]"
        super().__init__(full_message, cause)
        self.details.update(
            {
                "code": code,
                "kind": self.kind.value,
                "error_message": message,
                "error_details": details,
            }
        )

    @classmethod
    def from_item(cls, item: Any) -> CloudError:
        """ExceptionItem으로부터 생성

        Args:
            item: novagate.dispatch.errors.ExceptionItem

        Returns:
            해당 종류의 CloudError 인스턴스
        """
        return cls(
            message=item.message,
            code=item.code,
            kind=item.kind,
            details=item.details,
        )


class CommunicationError(CloudError):
    """통신 오류 (네트워크/IO 실패, 성공 응답의 잘못된 JSON)

    재시도하지 않고 즉시 호출자에게 전달됩니다.
    """

    default_kind = ErrorKind.COMMUNICATION


class ServiceNotAvailableError(CloudError):
    """홈 리전에 요청한 서비스 엔드포인트가 없을 때 발생

    Attributes:
        service_type: 요청한 서비스 타입
        region: 세션의 홈 리전
    """

    def __init__(self, service_type: str, region: str | None):
        super().__init__(
            message="noSuchService",
            code=0,
            kind=ErrorKind.GENERAL,
            details=f"No {service_type} endpoint has been established in {region}",
        )
        self.service_type = service_type
        self.region = region


class ThrottledError(CloudError):
    """재시도 대기 후에도 다시 쓰로틀링된 경우"""

    default_kind = ErrorKind.THROTTLING


class CredentialsRejectedError(CloudError):
    """재인증 후 재시도한 호출마저 자격 증명 거부된 경우"""

    default_kind = ErrorKind.AUTHENTICATION


class AuthenticationFailedError(CredentialsRejectedError):
    """모든 인증 방식이 자격 증명을 거부한 경우

    일반적인 호출 단위의 인증 거부와 구분되는 치명적 오류입니다.
    """

    def __init__(self, endpoint: str | None = None):
        super().__init__(
            message="unauthorized",
            code=401,
            details="The API keys failed to authenticate with the specified endpoint.",
        )
        self.endpoint = endpoint
        if endpoint:
            self.details["endpoint"] = endpoint


# =============================================================================
# 예외 유틸리티 함수
# =============================================================================


def format_error_for_user(error: Exception) -> str:
    """사용자에게 표시할 에러 메시지 포맷팅

    Args:
        error: 예외

    Returns:
        사용자 친화적인 에러 메시지
    """
    if isinstance(error, AuthenticationFailedError):
        return "API 키 인증에 실패했습니다. 엔드포인트와 자격 증명을 확인하세요."
    if isinstance(error, CloudError):
        friendly_messages = {
            ErrorKind.AUTHENTICATION: "인증이 거부되었습니다.",
            ErrorKind.CAPACITY: "클라우드 용량이 부족합니다. 잠시 후 다시 시도하세요.",
            ErrorKind.QUOTA: "쿼터 한도를 초과했습니다.",
            ErrorKind.THROTTLING: "요청이 너무 많습니다. 잠시 후 다시 시도하세요.",
        }
        friendly = friendly_messages.get(error.kind)
        if friendly:
            return f"{friendly} ({error.code}: {error.error_message})"
    return str(error)
