# novagate/auth/provider/base.py
"""
인증 방식(Dialect) 공통 베이스 클래스

모든 Dialect 구현체가 공유하는 기능:
- attempt(): authenticate()를 감싸 치명적 오류를 HardFailure로 변환
- 자격 증명 거부 판정
- 헤더 방식(legacy/swift) 응답에서 서비스 URL 수집
"""

from __future__ import annotations

import logging
from abc import abstractmethod
from typing import TYPE_CHECKING, NoReturn

from novagate.dispatch.errors import parse_exception
from novagate.exceptions import CloudError, CommunicationError, NovaGateError

from ..types import Authenticated, AuthOutcome, Dialect, HardFailure, Rejected, SessionContext

if TYPE_CHECKING:
    from novagate.http.transport import HttpResponse, Transport

logger = logging.getLogger(__name__)

# 헤더 방식 응답 헤더 -> 서비스 타입
SERVICE_URL_HEADERS = {
    "X-Server-Management-Url": "compute",
    "X-Storage-Url": "object-store",
    "X-Cdn-Management-Url": "cdn",
}

# 헤더 방식 성공 상태 코드
HEADER_SUCCESS_CODES = (200, 204)


class BaseDialect(Dialect):
    """Dialect 베이스 클래스

    하위 클래스는 name()과 authenticate()만 구현합니다.
    authenticate()는 성공 시 Authenticated, 거부 시 Rejected를 반환하고
    그 외 실패는 예외로 던집니다.
    """

    def __init__(self, transport: Transport):
        """BaseDialect 초기화

        Args:
            transport: HTTP 전송 계층
        """
        self._transport = transport

    @abstractmethod
    def authenticate(self, session: SessionContext, endpoint: str) -> Authenticated | Rejected:
        """실제 인증 수행 (하위 클래스 구현)"""
        pass

    def attempt(self, session: SessionContext, endpoint: str) -> AuthOutcome:
        try:
            outcome = self.authenticate(session, endpoint)
        except NovaGateError as e:
            logger.debug("%s 인증 실패 (치명적): %s", self.name(), e)
            return HardFailure(dialect=self.name(), error=e)
        if isinstance(outcome, Rejected):
            logger.debug("%s 인증 거부: %s", self.name(), outcome.reason)
        return outcome

    def _rejected(self, reason: str) -> Rejected:
        return Rejected(dialect=self.name(), reason=reason)

    def _first_endpoint(self, endpoint: str) -> str:
        for part in endpoint.split(","):
            if part.strip():
                return part.strip()
        return endpoint.strip()

    def _raise_for_status(self, response: HttpResponse, url: str) -> NoReturn:
        """거부가 아닌 실패 응답을 CloudError로 변환하여 발생"""
        item = parse_exception(response.status, response.body)
        if item is None:
            raise CommunicationError(message=f"No such object: {url}", code=404)
        raise CloudError.from_item(item)

    def _is_rejection(self, response: HttpResponse) -> bool:
        """401/403 또는 authentication 종류 에러인지 확인"""
        if response.status in (401, 403):
            return True
        if response.ok:
            return False
        item = parse_exception(response.status, response.body)
        return item is not None and item.is_rejection


def collect_service_urls(
    response: HttpResponse,
    region_id: str,
    endpoints: dict[str, dict[str | None, str]],
) -> None:
    """헤더 방식 응답의 서비스 URL을 엔드포인트 맵에 추가

    Args:
        response: 인증 응답
        region_id: 이 엔드포인트에서 추론한 리전
        endpoints: 채울 엔드포인트 맵 (제자리 수정)
    """
    for header, service_type in SERVICE_URL_HEADERS.items():
        url = response.header(header)
        if url:
            endpoints.setdefault(service_type, {})[region_id] = url
