"""
novagate/dispatch/dispatcher.py - 인증된 리소스 호출 디스패처

모든 리소스 호출을 카탈로그 조회, 엔드포인트 해석, 호출, 복구 정책으로 감쌉니다.

호출 흐름 (호출당):
    START -> RESOLVE_CATALOG -> RESOLVE_ENDPOINT -> CALL
          -> SUCCESS | RETRY_ONCE -> CALL -> SUCCESS | FATAL

복구 정책:
- 자격 증명 거부(401/403, authentication): 캐시 무효화, 재인증, 한 번만 재시도
- 쓰로틀링(413, overLimit.retryAfter): 힌트만큼 대기 후 재시도 (ThrottleConfig.max_pauses회, 기본 1회)
- 리소스 없음(404, itemNotFound): CallStatus.ABSENT 반환
- 통신 오류: 재시도 없이 즉시 전파

주요 구성 요소:
- CallStatus / CallResult: 호출 결과
- ProbeTarget: 캐시 재검증 호출 대상
- Dispatcher: execute() 및 편의 메서드 (get_json, put_bytes 등)

Example:
    dispatcher = Dispatcher(session, authenticator, cache, transport)
    servers = dispatcher.get_json("compute", "/servers/detail")
    if dispatcher.get_json("compute", "/servers", resource_id="42") is None:
        print("없음")
"""

from __future__ import annotations

import json
import logging
import random
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from requests.structures import CaseInsensitiveDict

from novagate.auth.cache import CatalogCache
from novagate.auth.types import ServiceCatalog, SessionContext
from novagate.exceptions import (
    CloudError,
    CommunicationError,
    CredentialsRejectedError,
    ServiceNotAvailableError,
    ThrottledError,
)

from .errors import parse_exception
from .retry import DEFAULT_THROTTLE_CONFIG, ThrottleConfig

if TYPE_CHECKING:
    from novagate.auth.authenticator import Authenticator
    from novagate.http.transport import HttpResponse, Transport

logger = logging.getLogger(__name__)

# 캐시 적중 시 재검증 확률
DEFAULT_REVALIDATE_PROBABILITY = 0.1

JSON_CONTENT_TYPE = "application/json"
BINARY_CONTENT_TYPE = "application/octet-stream"

STORAGE_SERVICE_TYPE = "object-store"


# =============================================================================
# 호출 결과
# =============================================================================


class CallStatus(Enum):
    """호출 결과 상태"""

    SUCCESS = "success"
    ABSENT = "absent"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class CallResult:
    """리소스 호출 결과

    Attributes:
        status: SUCCESS 또는 ABSENT
        code: HTTP 상태 코드
        headers: 응답 헤더 (대소문자 무시)
        payload: 응답 본문 바이트
    """

    status: CallStatus
    code: int
    headers: Mapping[str, str] = field(default_factory=CaseInsensitiveDict)
    payload: bytes = b""

    @property
    def found(self) -> bool:
        return self.status == CallStatus.SUCCESS

    @property
    def text(self) -> str:
        return self.payload.decode("utf-8", errors="replace")

    def json(self) -> Any:
        """본문을 JSON으로 파싱 (본문이 비어 있으면 None)

        Raises:
            CommunicationError: 잘못된 JSON
        """
        if not self.payload.strip():
            return None
        try:
            return json.loads(self.payload)
        except ValueError as e:
            raise CommunicationError(
                message="invalidJson",
                code=self.code,
                details="Cloud returned malformed JSON in a success response",
                cause=e,
            ) from e


@dataclass(frozen=True)
class ProbeTarget:
    """캐시 재검증 호출 대상

    지정한 서비스가 카탈로그에 없으면 카탈로그의 첫 서비스 URL을 사용합니다.

    Attributes:
        service_type: 재검증에 사용할 서비스 타입
        path: 서비스 기본 URL 뒤에 붙일 경로
        method: HTTP 메서드
    """

    service_type: str = "compute"
    path: str = ""
    method: str = "GET"


def build_url(base_url: str, path: str | None = None, resource_id: str | None = None) -> str:
    """기본 URL + 경로 + 리소스 ID 결합"""
    url = base_url.rstrip("/")
    if path:
        url = f"{url}/{path.lstrip('/')}"
    if resource_id is not None and str(resource_id) != "":
        url = f"{url.rstrip('/')}/{quote(str(resource_id), safe='/')}"
    return url


def _encode_body(body: Any) -> tuple[bytes | None, str]:
    if body is None:
        return None, JSON_CONTENT_TYPE
    if isinstance(body, (bytes, bytearray)):
        return bytes(body), BINARY_CONTENT_TYPE
    if isinstance(body, str):
        return body.encode("utf-8"), JSON_CONTENT_TYPE
    return json.dumps(body).encode("utf-8"), JSON_CONTENT_TYPE


# =============================================================================
# Dispatcher
# =============================================================================


class Dispatcher:
    """인증된 리소스 호출 디스패처

    Thread-safe 구현. 카탈로그 해석(인증)만 세션 잠금으로 직렬화되고
    리소스 호출은 병렬로 수행됩니다.
    """

    def __init__(
        self,
        session: SessionContext,
        authenticator: Authenticator,
        cache: CatalogCache,
        transport: Transport,
        throttle: ThrottleConfig = DEFAULT_THROTTLE_CONFIG,
        revalidate_probability: float = DEFAULT_REVALIDATE_PROBABILITY,
        probe: ProbeTarget | None = None,
        rng: random.Random | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Dispatcher 초기화

        Args:
            session: 세션 정보
            authenticator: 캐시 미스 시 사용할 인증기
            cache: 카탈로그 캐시
            transport: HTTP 전송 계층
            throttle: 쓰로틀링 대기 설정
            revalidate_probability: 캐시 적중 시 재검증 확률 (0이면 안 함)
            probe: 재검증 호출 대상
            rng: 재검증 판정용 난수 생성기 (테스트에서 고정)
            sleep: 대기 함수 (테스트에서 교체)
        """
        self._session = session
        self._authenticator = authenticator
        self._cache = cache
        self._transport = transport
        self._throttle = throttle
        self._revalidate_probability = revalidate_probability
        self._probe = probe or ProbeTarget()
        self._rng = rng or random.Random()
        self._sleep = sleep

    @property
    def session(self) -> SessionContext:
        return self._session

    # -------------------------------------------------------------------------
    # 카탈로그 해석
    # -------------------------------------------------------------------------

    def catalog(self) -> ServiceCatalog:
        """현재 세션의 카탈로그 (캐시 적중 시 확률적으로 재검증)"""
        return self._resolve_catalog(revalidate=True)

    def _resolve_catalog(self, revalidate: bool) -> ServiceCatalog:
        catalog = self._cache.lookup(self._session)
        if catalog is not None:
            if not revalidate or not self._should_revalidate():
                return catalog
            if self._probe_accepts(catalog):
                return catalog
            logger.info("캐시된 토큰이 거부됨, 캐시 무효화: %s", self._session.account_id)
            self._cache.invalidate(self._session, catalog)

        return self._authenticate_once()

    def _authenticate_once(self) -> ServiceCatalog:
        # 동시 미스는 세션 잠금 안에서 한 번만 인증
        with self._cache.session_lock(self._session):
            catalog = self._cache.lookup(self._session)
            if catalog is not None:
                return catalog
            catalog = self._authenticator.authenticate(self._session)
            self._cache.store(self._session, catalog)
            return catalog

    def _should_revalidate(self) -> bool:
        return self._revalidate_probability > 0 and self._rng.random() < self._revalidate_probability

    def _probe_accepts(self, catalog: ServiceCatalog) -> bool:
        """캐시된 토큰으로 재검증 호출 (거부된 경우만 False)"""
        service_type = self._probe.service_type
        base_url = catalog.service_url(service_type)
        if base_url is None:
            for candidate in catalog.endpoints:
                base_url = catalog.service_url(candidate)
                if base_url:
                    service_type = candidate
                    break
        if base_url is None:
            return True

        url = build_url(base_url, self._probe.path)
        try:
            response = self._transport.send(self._probe.method, url, headers=self._auth_headers(catalog, service_type))
        except CommunicationError as e:
            logger.debug("재검증 호출 실패 (무시): %s", e)
            return True

        if response.status in (401, 403):
            return False
        if not response.ok:
            item = parse_exception(response.status, response.body)
            if item is not None and item.is_rejection:
                return False
            logger.debug("재검증 호출 비정상 응답 (무시): HTTP %s", response.status)
        return True

    # -------------------------------------------------------------------------
    # 호출
    # -------------------------------------------------------------------------

    def _auth_headers(self, catalog: ServiceCatalog, service_type: str) -> dict[str, str]:
        token = catalog.storage_token if service_type == STORAGE_SERVICE_TYPE else catalog.auth_token
        return {"X-Auth-Token": token or catalog.auth_token}

    def execute(
        self,
        service_type: str,
        method: str,
        path: str | None = None,
        resource_id: str | None = None,
        body: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> CallResult:
        """인증된 리소스 호출 수행

        Args:
            service_type: 서비스 타입 (compute, object-store, volume 등)
            method: HTTP 메서드
            path: 서비스 기본 URL 뒤 경로
            resource_id: 경로 뒤에 붙일 리소스 ID
            body: 요청 본문 (dict/list는 JSON, bytes는 바이너리)
            headers: 추가 요청 헤더

        Returns:
            CallResult (SUCCESS 또는 ABSENT)

        Raises:
            ServiceNotAvailableError: 홈 리전에 서비스 엔드포인트 없음
            CredentialsRejectedError: 재인증 후 재시도도 거부됨
            ThrottledError: 대기 후 재시도도 쓰로틀링됨
            CommunicationError: 네트워크/IO 실패
            CloudError: 그 밖의 실패 (kind로 분류)
        """
        method = method.upper()
        payload, content_type = _encode_body(body)
        catalog = self._resolve_catalog(revalidate=True)
        reauthenticated = False
        pauses = 0

        while True:
            base_url = catalog.service_url(service_type)
            if not base_url:
                raise ServiceNotAvailableError(service_type, catalog.home_region)

            url = build_url(base_url, path, resource_id)
            request_headers = {"Content-Type": content_type}
            request_headers.update(headers or {})
            request_headers.update(self._auth_headers(catalog, service_type))

            response = self._transport.send(method, url, headers=request_headers, body=payload)

            if response.ok:
                return CallResult(CallStatus.SUCCESS, response.status, response.headers, response.body)
            if response.status == 404:
                logger.debug("리소스 없음: %s %s", method, url)
                return CallResult(CallStatus.ABSENT, response.status, response.headers, response.body)

            item = parse_exception(response.status, response.body)
            if item is None:
                logger.debug("리소스 없음: %s %s", method, url)
                return CallResult(CallStatus.ABSENT, response.status, response.headers, response.body)

            if item.is_rejection:
                if reauthenticated:
                    logger.error("재인증 후에도 자격 증명 거부: %s %s", method, url)
                    raise CredentialsRejectedError(
                        message=item.message,
                        code=item.code,
                        details=item.details,
                    )
                reauthenticated = True
                logger.info("자격 증명 거부 (HTTP %s), 재인증 후 재시도: %s %s", item.code, method, url)
                self._cache.invalidate(self._session, catalog)
                catalog = self._resolve_catalog(revalidate=False)
                continue

            if item.is_throttle:
                if pauses >= self._throttle.max_pauses:
                    raise ThrottledError(
                        message=item.message,
                        code=item.code,
                        details=item.details,
                    )
                pauses += 1
                delay = self._throttle.get_delay(item, self._retry_after_header(response))
                logger.warning("요청 제한 (HTTP %s), %.1f초 후 재시도: %s %s", item.code, delay, method, url)
                self._sleep(delay)
                continue

            raise CloudError.from_item(item)

    @staticmethod
    def _retry_after_header(response: HttpResponse) -> str | None:
        return response.header("Retry-After")

    # -------------------------------------------------------------------------
    # 편의 메서드
    # -------------------------------------------------------------------------

    def get_json(self, service_type: str, path: str, resource_id: str | None = None) -> Any:
        """GET 후 JSON 파싱 (없으면 None)

        Raises:
            CommunicationError: 성공 응답의 잘못된 JSON
        """
        result = self.execute(service_type, "GET", path, resource_id=resource_id)
        if not result.found:
            return None
        return result.json()

    def get_text(self, service_type: str, path: str, resource_id: str | None = None) -> str | None:
        """GET 후 본문 문자열 (없으면 None)"""
        result = self.execute(service_type, "GET", path, resource_id=resource_id)
        if not result.found:
            return None
        return result.text

    def head(self, service_type: str, path: str, resource_id: str | None = None) -> Mapping[str, str] | None:
        """HEAD 후 응답 헤더 (없으면 None)"""
        result = self.execute(service_type, "HEAD", path, resource_id=resource_id)
        if not result.found:
            return None
        return result.headers

    def post_json(self, service_type: str, path: str, body: Any, resource_id: str | None = None) -> Any:
        """JSON 본문 POST 후 응답 JSON (본문 없거나 리소스 없으면 None)"""
        result = self.execute(service_type, "POST", path, resource_id=resource_id, body=body)
        if not result.found:
            return None
        return result.json()

    def put_bytes(
        self,
        service_type: str,
        path: str,
        data: bytes,
        resource_id: str | None = None,
        md5: str | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> CallResult:
        """바이너리 PUT (md5 지정 시 응답 ETag와 비교)

        Raises:
            CloudError: ETag 불일치
        """
        result = self.execute(service_type, "PUT", path, resource_id=resource_id, body=data, headers=headers)
        if md5 and result.found:
            etag = (result.headers.get("ETag") or "").strip().strip('"')
            if etag and etag.lower() != md5.lower():
                raise CloudError(
                    message="checksumMismatch",
                    code=result.code,
                    details=f"Uploaded content MD5 {md5} does not match ETag {etag}",
                )
        return result

    def delete(self, service_type: str, path: str, resource_id: str | None = None) -> bool:
        """DELETE (삭제했으면 True, 원래 없었으면 False)"""
        return self.execute(service_type, "DELETE", path, resource_id=resource_id).found
