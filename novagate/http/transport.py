"""
novagate/http/transport.py - HTTP 요청/응답 한 번을 수행하는 전송 계층

requests.Session 하나를 감싸 프록시, TLS 검증 여부, 타임아웃을 적용합니다.
재시도는 하지 않습니다 (재시도 정책은 Dispatcher 담당).

주요 구성 요소:
- HttpResponse: 상태 코드, 헤더(대소문자 무시), 본문 바이트
- Transport: send(method, url, headers, body) -> HttpResponse

Example:
    transport = Transport.for_session(session)
    response = transport.send("GET", "https://compute.example.com/v2/servers",
                              headers={"X-Auth-Token": token})
    if response.status == 200:
        servers = response.json()
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from http.cookiejar import DefaultCookiePolicy
from typing import TYPE_CHECKING, Any

import requests
from requests.structures import CaseInsensitiveDict

from novagate.exceptions import CommunicationError
from novagate.log import get_wire_logger, mask_headers

if TYPE_CHECKING:
    from novagate.auth.types import SessionContext

logger = logging.getLogger(__name__)
wire = get_wire_logger()

# 기본 타임아웃 설정
DEFAULT_CONNECT_TIMEOUT = 10  # 초
DEFAULT_READ_TIMEOUT = 60  # 초

USER_AGENT = "novagate"


@dataclass
class HttpResponse:
    """HTTP 응답 하나

    Attributes:
        status: HTTP 상태 코드
        headers: 응답 헤더 (대소문자 무시)
        body: 응답 본문 바이트
    """

    status: int
    headers: Mapping[str, str] = field(default_factory=CaseInsensitiveDict)
    body: bytes = b""

    def __post_init__(self):
        if not isinstance(self.headers, CaseInsensitiveDict):
            self.headers = CaseInsensitiveDict(self.headers or {})

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def text(self) -> str:
        """본문 문자열 (UTF-8, 깨진 바이트는 대체)"""
        return self.body.decode("utf-8", errors="replace")

    def json(self) -> Any:
        """본문을 JSON으로 파싱

        Raises:
            ValueError: JSON이 아닌 본문
        """
        return json.loads(self.text)

    def header(self, name: str) -> str | None:
        """헤더 값 조회 (앞뒤 공백 제거, 없거나 비어 있으면 None)"""
        value = self.headers.get(name)
        if value is None:
            return None
        value = value.strip()
        return value or None


class Transport:
    """requests 기반 HTTP 전송 계층

    Thread-safe 사용을 위해 호출 간 상태를 남기지 않습니다 (쿠키 거부).
    """

    def __init__(
        self,
        proxy_url: str | None = None,
        verify: bool = True,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        read_timeout: float = DEFAULT_READ_TIMEOUT,
        http: requests.Session | None = None,
    ):
        """Transport 초기화

        Args:
            proxy_url: 프록시 URL (http://host:port)
            verify: TLS 인증서 검증 여부
            connect_timeout: 연결 타임아웃 (초)
            read_timeout: 읽기 타임아웃 (초)
            http: 사용할 requests.Session (기본: 새로 생성)
        """
        self._http = http or requests.Session()
        self._http.headers["User-Agent"] = USER_AGENT
        # 쿠키는 받지 않음 (호출 간 상태 없음)
        self._http.cookies.set_policy(DefaultCookiePolicy(allowed_domains=[]))
        if proxy_url:
            self._http.proxies = {"http": proxy_url, "https": proxy_url}
        self._verify = verify
        self._timeout = (connect_timeout, read_timeout)

    @classmethod
    def for_session(cls, session: SessionContext, **kwargs: Any) -> Transport:
        """세션 정보(프록시, insecure)로 Transport 생성"""
        return cls(proxy_url=session.proxy_url, verify=not session.insecure, **kwargs)

    @property
    def timeout(self) -> tuple[float, float]:
        return self._timeout

    def send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str] | None = None,
        body: bytes | str | None = None,
    ) -> HttpResponse:
        """요청 하나를 보내고 응답을 반환

        Args:
            method: HTTP 메서드
            url: 전체 URL
            headers: 요청 헤더
            body: 요청 본문 (str은 UTF-8로 인코딩)

        Returns:
            HttpResponse (상태 코드와 무관하게 반환)

        Raises:
            CommunicationError: 네트워크/IO 실패
        """
        if isinstance(body, str):
            body = body.encode("utf-8")

        wire.debug(">>> %s %s", method, url)
        wire.debug(">>> headers=%s", mask_headers(headers))
        if body and wire.isEnabledFor(logging.DEBUG):
            wire.debug(">>> %s", body[:4096].decode("utf-8", errors="replace"))

        try:
            response = self._http.request(
                method,
                url,
                headers=dict(headers or {}),
                data=body,
                timeout=self._timeout,
                verify=self._verify,
                allow_redirects=False,
            )
        except requests.RequestException as e:
            logger.debug("HTTP 요청 실패: %s %s (%s)", method, url, e)
            raise CommunicationError(
                message="communication",
                code=0,
                details=f"{method} {url} failed: {e}",
                cause=e,
            ) from e

        result = HttpResponse(
            status=response.status_code,
            headers=CaseInsensitiveDict(response.headers),
            body=response.content or b"",
        )
        wire.debug("<<< %s %s", result.status, response.reason)
        wire.debug("<<< headers=%s", mask_headers(result.headers))
        if result.body and wire.isEnabledFor(logging.DEBUG):
            wire.debug("<<< %s", result.body[:4096].decode("utf-8", errors="replace"))
        return result

    def close(self) -> None:
        """내부 requests.Session 종료"""
        self._http.close()
