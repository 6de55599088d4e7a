# novagate/auth/provider/legacy.py
"""
구버전 Nova 헤더 방식 인증

쉼표로 구분된 엔드포인트마다 GET 요청을 X-Auth-* 헤더와 함께 보내고,
응답 헤더에서 토큰과 서비스 URL을 읽습니다.

- 리전은 엔드포인트 호스트명에서 추론
- 홈 리전과 추론 리전이 같은 엔드포인트에서만 토큰을 받고 거기서 멈춤
- 서비스 URL은 시도한 모든 엔드포인트에서 수집
"""

from __future__ import annotations

import logging

from novagate.endpoints import infer_region
from novagate.exceptions import CommunicationError

from ..types import Authenticated, Rejected, ServiceCatalog, SessionContext
from .base import HEADER_SUCCESS_CODES, BaseDialect, collect_service_urls

logger = logging.getLogger(__name__)

LEGACY = "legacy"

# 이 표시로 끝나는 엔드포인트는 compute URL에도 같은 버전 경로를 붙임
LEGACY_VERSION_SUFFIX = "v1.0"


class LegacyHeaderDialect(BaseDialect):
    """구버전 Nova 헤더 방식 인증"""

    def name(self) -> str:
        return LEGACY

    def authenticate(self, session: SessionContext, endpoint: str) -> Authenticated | Rejected:
        home_region = session.region_id
        endpoints: dict[str, dict[str | None, str]] = {}
        token: str | None = None
        storage_token: str | None = None

        for raw in endpoint.split(","):
            url = raw.strip()
            if not url:
                continue

            logger.debug("헤더 방식 인증 요청: %s", url)
            response = self._transport.send(
                "GET",
                url,
                headers={
                    "X-Auth-User": session.public_key,
                    "X-Auth-Key": session.private_key,
                    "X-Auth-Project-Id": session.account_id,
                },
            )
            if self._is_rejection(response):
                return self._rejected(f"HTTP {response.status} from {url}")
            if response.status not in HEADER_SUCCESS_CODES:
                self._raise_for_status(response, url)

            region_id = infer_region(url)
            if home_region is None:
                home_region = region_id

            collect_service_urls(response, region_id, endpoints)
            compute_url = endpoints.get("compute", {}).get(region_id)
            if compute_url and url.rstrip("/").endswith(LEGACY_VERSION_SUFFIX):
                if not compute_url.rstrip("/").endswith(LEGACY_VERSION_SUFFIX):
                    endpoints["compute"][region_id] = compute_url.rstrip("/") + "/" + LEGACY_VERSION_SUFFIX

            if region_id == home_region:
                token = response.header("X-Auth-Token")
                storage_token = response.header("X-Storage-Token")
                break

        if not token:
            raise CommunicationError(
                message="noToken",
                code=0,
                details="No authentication token in cloud response",
            )

        logger.info("헤더 방식 인증 성공: account=%s, region=%s", session.account_id, home_region)
        return Authenticated(
            ServiceCatalog(
                auth_token=token,
                tenant_id=session.account_id,
                home_region=home_region,
                endpoints=endpoints,
                storage_token=storage_token,
            )
        )
