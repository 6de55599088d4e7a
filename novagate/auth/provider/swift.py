# novagate/auth/provider/swift.py
"""
Swift 스토리지 헤더 방식 인증

통합 카탈로그 이전의 스토리지 전용 배포용입니다.
요청 한 번, 헤더 형태와 성공 판정은 legacy 방식과 같습니다.
"""

from __future__ import annotations

import logging

from novagate.endpoints import infer_region
from novagate.exceptions import CommunicationError

from ..types import Authenticated, Rejected, ServiceCatalog, SessionContext
from .base import HEADER_SUCCESS_CODES, BaseDialect, collect_service_urls

logger = logging.getLogger(__name__)

SWIFT = "swift"

# 공개 키 자리 표시값 (계정 ID만 사용)
PUBLIC_KEY_PLACEHOLDER = "-----"


def auth_user(session: SessionContext) -> str:
    """X-Auth-User 헤더 값 ("<account>:<public>" 또는 계정 ID)"""
    public = session.public_key
    if not public or public == PUBLIC_KEY_PLACEHOLDER:
        return session.account_id
    return f"{session.account_id}:{public}"


class SwiftHeaderDialect(BaseDialect):
    """Swift 스토리지 헤더 방식 인증"""

    def name(self) -> str:
        return SWIFT

    def authenticate(self, session: SessionContext, endpoint: str) -> Authenticated | Rejected:
        url = self._first_endpoint(endpoint)
        logger.debug("스토리지 헤더 방식 인증 요청: %s", url)

        response = self._transport.send(
            "GET",
            url,
            headers={
                "X-Auth-User": auth_user(session),
                "X-Auth-Key": session.private_key,
            },
        )
        if self._is_rejection(response):
            return self._rejected(f"HTTP {response.status} from {url}")
        if response.status not in HEADER_SUCCESS_CODES:
            self._raise_for_status(response, url)

        token = response.header("X-Auth-Token")
        if not token:
            raise CommunicationError(
                message="noToken",
                code=response.status,
                details="No authentication token in cloud response",
            )

        region_id = infer_region(url)
        endpoints: dict[str, dict[str | None, str]] = {}
        collect_service_urls(response, region_id, endpoints)

        logger.info("스토리지 헤더 방식 인증 성공: account=%s, region=%s", session.account_id, region_id)
        return Authenticated(
            ServiceCatalog(
                auth_token=token,
                tenant_id=session.account_id,
                home_region=region_id,
                endpoints=endpoints,
                storage_token=response.header("X-Storage-Token"),
            )
        )
