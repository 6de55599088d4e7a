# novagate/auth/types/types.py
"""
novagate/auth/types/types.py - 인증 모듈의 핵심 타입 정의

이 모듈은 인증 시스템 전체에서 사용되는 기본 타입들을 정의합니다.

포함 항목:
    - ProviderFamily: 운영사 계열 열거형 (HP, RACKSPACE, OTHER 등)
    - SessionContext: 세션 하나의 접속 정보와 자격 증명 (읽기 전용)
    - ServiceCatalog: 인증된 세션 상태 (토큰, 테넌트, 홈 리전, 엔드포인트 맵)
    - Authenticated / Rejected / HardFailure: 인증 시도 결과 태그 타입
    - Dialect: 모든 인증 방식이 구현해야 하는 추상 기본 클래스 (ABC)
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Union

from novagate.exceptions import ConfigurationError, InternalError, NovaGateError

logger = logging.getLogger(__name__)


# =============================================================================
# Provider Family Enum
# =============================================================================


class ProviderFamily(Enum):
    """운영사 계열을 나타내는 열거형

    같은 프로토콜 계열이라도 운영사마다 인증 요청 본문 형태와
    카탈로그 해석 규칙이 조금씩 다릅니다.

    - HP: apiAccessKeyCredentials + tenantId
    - RACKSPACE: RAX-KSKEY:apiKeyCredentials, 테넌트 없음, 헤더 방식 전용 취급
    - 그 외: passwordCredentials
    """

    DELL = "dell"
    DREAMHOST = "dreamhost"
    HP = "hp"
    IBM = "ibm"
    METACLOUD = "metacloud"
    RACKSPACE = "rackspace"
    OTHER = "other"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_name(cls, name: str | None) -> ProviderFamily:
        """운영사 이름으로 계열 조회 (대소문자 무시, 모르면 OTHER)"""
        if not name:
            return cls.OTHER
        try:
            return cls(name.strip().lower())
        except ValueError:
            return cls.OTHER

    @property
    def header_dialect_only(self) -> bool:
        """리전 없는 카탈로그 항목을 구버전(헤더 방식)으로 취급하는 운영사인지"""
        return self is ProviderFamily.RACKSPACE


# =============================================================================
# Session Context (Credential Store)
# =============================================================================


def _decode(value: str | bytes | None) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value


@dataclass(frozen=True)
class SessionContext:
    """클라우드 접속 설정 하나에 대한 읽기 전용 정보

    접속 설정이 살아 있는 동안 바뀌지 않습니다.

    Attributes:
        endpoint: 인증 엔드포인트 URL ("ks:", "st:" 접두어 허용, 쉼표로 여러 개)
        account_id: 계정(테넌트) 식별자
        access_public: 액세스 키 쌍의 공개 부분 (사용자 이름 / 액세스 키)
        access_private: 액세스 키 쌍의 비밀 부분 (비밀번호 / API 키)
        region_id: 리전 지정 (없으면 카탈로그에서 결정)
        provider_name: 운영사 이름 (ProviderFamily 결정용)
        insecure: TLS 인증서 검증 생략 여부
        proxy_host: 프록시 호스트 (옵션)
        proxy_port: 프록시 포트 (옵션)
    """

    endpoint: str
    account_id: str
    access_public: str | bytes = field(default="", repr=False)
    access_private: str | bytes = field(default="", repr=False)
    region_id: str | None = None
    provider_name: str = "OpenStack"
    insecure: bool = False
    proxy_host: str | None = None
    proxy_port: int | None = None

    def __post_init__(self):
        if not self.endpoint or not self.endpoint.strip():
            raise ConfigurationError("인증 엔드포인트가 없습니다", config_key="endpoint")
        if self.account_id is None:
            raise ConfigurationError("계정 식별자가 없습니다", config_key="account")

    @property
    def public_key(self) -> str:
        """공개 키 (UTF-8 문자열)"""
        return _decode(self.access_public)

    @property
    def private_key(self) -> str:
        """비밀 키 (UTF-8 문자열)"""
        return _decode(self.access_private)

    @property
    def family(self) -> ProviderFamily:
        """운영사 계열"""
        return ProviderFamily.from_name(self.provider_name)

    @property
    def cache_key(self) -> tuple[str, str | None, str]:
        """캐시 키 (계정 + 리전 + 엔드포인트)"""
        return (self.account_id, self.region_id, self.endpoint)

    @property
    def proxy_url(self) -> str | None:
        """프록시 URL (http://host:port)"""
        if not self.proxy_host:
            return None
        if self.proxy_port:
            return f"http://{self.proxy_host}:{self.proxy_port}"
        return f"http://{self.proxy_host}"


# =============================================================================
# Service Catalog
# =============================================================================


@dataclass(frozen=True)
class ServiceCatalog:
    """인증된 세션의 해석된 상태

    인증 성공 시 한 번 만들어지고 제자리에서 바뀌지 않습니다.
    무효화되면 통째로 새 카탈로그로 교체됩니다.

    Attributes:
        auth_token: 베어러 토큰
        tenant_id: 테넌트 ID
        home_region: 세션이 고정된 리전
        endpoints: 서비스 타입 -> 리전 ID -> 기본 URL (읽기 전용)
        storage_token: 스토리지 토큰 (없으면 auth_token과 동일)
    """

    auth_token: str
    tenant_id: str
    home_region: str | None
    endpoints: Mapping[str, Mapping[str | None, str]] = field(default_factory=dict)
    storage_token: str | None = None

    def __post_init__(self):
        frozen: dict[str, Mapping[str | None, str]] = {}
        for service_type, regions in self.endpoints.items():
            for region_id, url in regions.items():
                if not url:
                    raise InternalError(f"빈 URL이 카탈로그에 있습니다: {service_type}/{region_id}")
            frozen[service_type] = MappingProxyType(dict(regions))
        object.__setattr__(self, "endpoints", MappingProxyType(frozen))
        if self.storage_token is None:
            object.__setattr__(self, "storage_token", self.auth_token)

    def service_url(self, service_type: str) -> str | None:
        """홈 리전 기준 서비스 URL 조회

        홈 리전과 정확히 일치하는 키가 우선이며, 없으면 홈 리전이
        해당 키로 끝나는 항목이나 리전 없는(None) 항목을 사용합니다.

        Returns:
            URL 또는 None (서비스 없음)
        """
        regions = self.endpoints.get(service_type)
        if not regions:
            return None
        if self.home_region is None:
            return next(iter(regions.values()))
        if self.home_region in regions:
            return regions[self.home_region]
        for region_id, url in regions.items():
            if region_id is None or self.home_region.endswith(region_id):
                return url
        return None

    @property
    def compute_url(self) -> str | None:
        """compute 서비스 URL"""
        return self.service_url("compute")

    @property
    def storage_url(self) -> str | None:
        """object-store 서비스 URL"""
        return self.service_url("object-store")

    def list_regions(self) -> list[str]:
        """카탈로그에 나타난 리전 목록 (compute 기준, 없으면 object-store)"""
        regions = self.endpoints.get("compute") or self.endpoints.get("object-store") or {}
        return [region_id for region_id in regions if region_id is not None]


# =============================================================================
# 인증 시도 결과 (태그 타입)
# =============================================================================


@dataclass(frozen=True)
class Authenticated:
    """인증 성공 - 카탈로그 생성됨"""

    catalog: ServiceCatalog


@dataclass(frozen=True)
class Rejected:
    """자격 증명 거부 - 다음 방식 시도"""

    dialect: str
    reason: str = ""


@dataclass(frozen=True)
class HardFailure:
    """통신 오류 등 치명적 실패 - 즉시 전파, 다음 방식 시도 안 함"""

    dialect: str
    error: NovaGateError


AuthOutcome = Union[Authenticated, Rejected, HardFailure]


# =============================================================================
# Dialect Interface (Abstract Base Class)
# =============================================================================


class Dialect(ABC):
    """모든 인증 방식이 구현해야 하는 추상 기본 클래스

    Example:
        class MyDialect(Dialect):
            def name(self) -> str:
                return "my-dialect"

            def attempt(self, session, endpoint) -> AuthOutcome:
                ...
    """

    @abstractmethod
    def name(self) -> str:
        """인증 방식 이름(식별자)을 반환합니다."""
        pass

    @abstractmethod
    def attempt(self, session: SessionContext, endpoint: str) -> AuthOutcome:
        """지정된 엔드포인트로 인증을 한 번 시도합니다.

        Args:
            session: 세션 정보
            endpoint: 접두어가 제거된 엔드포인트 URL

        Returns:
            Authenticated, Rejected, HardFailure 중 하나
        """
        pass
