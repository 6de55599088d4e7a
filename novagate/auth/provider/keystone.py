# novagate/auth/provider/keystone.py
"""
Keystone v2 ID 카탈로그 방식 인증

POST {endpoint}/tokens 에 자격 증명 JSON을 보내고,
응답의 토큰과 serviceCatalog로 ServiceCatalog를 만듭니다.

운영사별 요청 본문:
    HP        : {"auth": {"apiAccessKeyCredentials": {...}, "tenantId": ...}}
    Rackspace : {"auth": {"RAX-KSKEY:apiKeyCredentials": {...}}}
    그 외      : {"auth": {"passwordCredentials": {...}, "tenantId"|"tenantName": ...}}
"""

from __future__ import annotations

import json
import logging
from typing import Any

from novagate.endpoints import EndpointCandidate, RegionPolicy, resolve_endpoints, version_from_url
from novagate.exceptions import CommunicationError

from ..types import Authenticated, ProviderFamily, Rejected, ServiceCatalog, SessionContext
from .base import BaseDialect

logger = logging.getLogger(__name__)

KEYSTONE = "keystone"

# 테넌트 ID로 보는 계정 식별자 길이 (UUID hex)
TENANT_ID_LENGTH = 32

# keystone 방식에서만 거부로 보는 500 응답 본문 표시
FAULT_MARKER = "<faultstring>"


def build_auth_body(session: SessionContext) -> dict[str, Any]:
    """운영사 계열에 맞는 인증 요청 본문 생성"""
    family = session.family
    auth: dict[str, Any]

    if family is ProviderFamily.HP:
        auth = {
            "apiAccessKeyCredentials": {
                "accessKey": session.public_key,
                "secretKey": session.private_key,
            },
            "tenantId": session.account_id,
        }
    elif family is ProviderFamily.RACKSPACE:
        auth = {
            "RAX-KSKEY:apiKeyCredentials": {
                "username": session.public_key,
                "apiKey": session.private_key,
            },
        }
    else:
        auth = {
            "passwordCredentials": {
                "username": session.public_key,
                "password": session.private_key,
            },
        }
        if len(session.account_id) == TENANT_ID_LENGTH:
            auth["tenantId"] = session.account_id
        else:
            auth["tenantName"] = session.account_id

    return {"auth": auth}


def _require_shape(value: Any, expected: type, where: str) -> None:
    """응답 구조 확인 (다르면 invalidJson 통신 오류)"""
    if not isinstance(value, expected):
        raise CommunicationError(
            message="invalidJson",
            code=200,
            details=f"Unexpected {type(value).__name__} at {where} in identity response",
        )


class KeystoneDialect(BaseDialect):
    """Keystone v2 ID 카탈로그 인증"""

    def name(self) -> str:
        return KEYSTONE

    def authenticate(self, session: SessionContext, endpoint: str) -> Authenticated | Rejected:
        url = self._first_endpoint(endpoint).rstrip("/") + "/tokens"
        logger.debug("Keystone 인증 요청: %s (family=%s)", url, session.family)

        response = self._transport.send(
            "POST",
            url,
            headers={"Content-Type": "application/json", "Accept": "application/json"},
            body=json.dumps(build_auth_body(session)),
        )

        if response.status == 200:
            return Authenticated(self.parse_access(session, response.text))
        if response.status == 500 and FAULT_MARKER in response.text:
            return self._rejected("HTTP 500 fault")
        if self._is_rejection(response):
            return self._rejected(f"HTTP {response.status}")
        self._raise_for_status(response, "/tokens")

    def parse_access(self, session: SessionContext, text: str) -> ServiceCatalog:
        """인증 응답 본문으로 ServiceCatalog 생성

        Raises:
            CommunicationError: 잘못된 JSON, 예상과 다른 구조, 토큰 없음
            InternalError: 숫자가 아닌 버전 문자열
        """
        try:
            data = json.loads(text)
        except ValueError as e:
            raise CommunicationError(
                message="invalidJson",
                code=200,
                details="Identity service returned malformed JSON",
                cause=e,
            ) from e

        access = data.get("access") if isinstance(data, dict) else None
        if access is None:
            access = {}
        _require_shape(access, dict, "access")
        token = access.get("token") or {}
        _require_shape(token, dict, "access.token")
        token_id = token.get("id")
        if not token_id:
            raise CommunicationError(
                message="noToken",
                code=200,
                details="No authentication tokens were provided",
            )

        tenant = token.get("tenant") or {}
        _require_shape(tenant, dict, "access.token.tenant")
        tenant_id = token.get("tenantId") or tenant.get("id") or session.account_id

        services = access.get("serviceCatalog") or []
        _require_shape(services, list, "access.serviceCatalog")

        candidates: list[EndpointCandidate] = []
        for service in services:
            _require_shape(service, dict, "access.serviceCatalog[]")
            service_type = service.get("type")
            if not service_type:
                continue
            _require_shape(service_type, str, "access.serviceCatalog[].type")
            entries = service.get("endpoints") or []
            _require_shape(entries, list, f"{service_type}.endpoints")
            for entry in entries:
                _require_shape(entry, dict, f"{service_type}.endpoints[]")
                url = entry.get("publicURL") or entry.get("url")
                if not url:
                    continue
                _require_shape(url, str, f"{service_type}.endpoints[].publicURL")
                version = entry.get("versionId")
                candidates.append(
                    EndpointCandidate(
                        service_type=service_type,
                        region_id=entry.get("region") or None,
                        url=url,
                        version=str(version) if version else version_from_url(url),
                    )
                )

        policy = RegionPolicy(header_dialect_only=session.family.header_dialect_only)
        resolution = resolve_endpoints(candidates, policy)
        home_region = session.region_id or resolution.first_region

        logger.info("Keystone 인증 성공: tenant=%s, region=%s", tenant_id, home_region)
        return ServiceCatalog(
            auth_token=token_id,
            tenant_id=tenant_id,
            home_region=home_region,
            endpoints=resolution.endpoints,
        )
