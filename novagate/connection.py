"""
novagate/connection.py - 클라우드 연결 (세션 하나의 구성 요소 묶음)

CloudConnection은 세션 하나에 대해 Transport, CatalogCache,
Authenticator, Dispatcher를 만들고 소유합니다.
캐시를 여러 연결이 공유하려면 cache 인자로 주입합니다.

Example:
    session = SessionContext(
        endpoint="https://identity.example.com/v2.0",
        account_id="demo",
        access_public="user",
        access_private="secret",
    )
    with CloudConnection(session) as conn:
        tenant_id = conn.test_context()
        servers = conn.dispatcher.get_json("compute", "/servers")
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from novagate.auth.authenticator import Authenticator
from novagate.auth.cache import CatalogCache
from novagate.auth.types import ServiceCatalog, SessionContext
from novagate.dispatch.dispatcher import CallResult, Dispatcher
from novagate.endpoints import api_version
from novagate.exceptions import NovaGateError
from novagate.http.transport import Transport

logger = logging.getLogger(__name__)


class CloudConnection:
    """세션 하나에 대한 클라우드 연결"""

    def __init__(
        self,
        session: SessionContext,
        cache: CatalogCache | None = None,
        transport: Transport | None = None,
        authenticator: Authenticator | None = None,
        **dispatcher_options: Any,
    ):
        """CloudConnection 초기화

        Args:
            session: 세션 정보
            cache: 카탈로그 캐시 (기본: 이 연결 전용 캐시)
            transport: HTTP 전송 계층 (기본: 세션 설정으로 생성)
            authenticator: 인증기 (기본: keystone/legacy/swift)
            **dispatcher_options: Dispatcher 추가 옵션 (throttle, probe, rng 등)
        """
        self._session = session
        self._owns_transport = transport is None
        self._transport = transport or Transport.for_session(session)
        self._cache = cache if cache is not None else CatalogCache()
        self._authenticator = authenticator or Authenticator(self._transport)
        self._dispatcher = Dispatcher(
            session,
            self._authenticator,
            self._cache,
            self._transport,
            **dispatcher_options,
        )

    @classmethod
    def from_profile(cls, profile_name: str | None = None, **kwargs: Any) -> CloudConnection:
        """설정 파일 프로파일로 연결 생성

        Raises:
            ConfigurationError: 프로파일 없음, 필수 값 누락
        """
        from novagate.auth.config import Loader

        profile = Loader().load_profile(profile_name)
        return cls(profile.to_session(), **kwargs)

    @property
    def session(self) -> SessionContext:
        return self._session

    @property
    def cache(self) -> CatalogCache:
        return self._cache

    @property
    def authenticator(self) -> Authenticator:
        return self._authenticator

    @property
    def dispatcher(self) -> Dispatcher:
        return self._dispatcher

    def catalog(self) -> ServiceCatalog:
        """현재 세션의 카탈로그 (필요하면 인증)"""
        return self._dispatcher.catalog()

    def execute(
        self,
        service_type: str,
        method: str,
        path: str | None = None,
        resource_id: str | None = None,
        body: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> CallResult:
        """인증된 리소스 호출 (Dispatcher.execute 위임)"""
        return self._dispatcher.execute(
            service_type,
            method,
            path,
            resource_id=resource_id,
            body=body,
            headers=headers,
        )

    def test_context(self) -> str | None:
        """자격 증명 확인

        캐시를 거치지 않고 바로 인증하여 결과를 캐시에 저장합니다.

        Returns:
            테넌트 ID. 인증 실패 시 None
        """
        try:
            catalog = self._authenticator.authenticate(self._session)
        except NovaGateError as e:
            logger.warning("자격 증명 확인 실패 (%s): %s", self._session.endpoint, e)
            return None
        self._cache.store(self._session, catalog)
        return catalog.tenant_id

    def api_version(self) -> tuple[int, int]:
        """compute URL(없으면 storage URL)에서 (major, minor) API 버전 추출"""
        catalog = self.catalog()
        return api_version(catalog.compute_url or catalog.storage_url)

    def close(self) -> None:
        """직접 만든 Transport 종료"""
        if self._owns_transport:
            self._transport.close()

    def __enter__(self) -> CloudConnection:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
