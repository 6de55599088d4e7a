"""
tests/conftest.py - pytest 공통 픽스처

네트워크 없이 인증/호출 흐름을 검증하기 위한 가짜 Transport와
세션/카탈로그/응답 생성 헬퍼를 제공합니다.

Usage:
    def test_something(fake_transport, make_response, session):
        fake_transport.queue(make_response(200, {"servers": []}))
        ...
"""

import json
import sys
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import pytest

# 프로젝트 루트를 sys.path에 추가
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from novagate.auth.types import ServiceCatalog, SessionContext  # noqa: E402
from novagate.http.transport import HttpResponse  # noqa: E402

# =============================================================================
# 가짜 Transport
# =============================================================================


@dataclass
class RecordedRequest:
    """FakeTransport가 받은 요청 기록"""

    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None

    def json(self) -> Any:
        return json.loads(self.body) if self.body else None


class FakeTransport:
    """미리 지정한 응답을 순서대로 돌려주는 Transport 대역

    handler를 지정하면 요청마다 handler(request)의 반환값을 사용합니다.
    반환값이 예외 인스턴스면 발생시킵니다.
    """

    def __init__(self, handler: Optional[Callable[[RecordedRequest], Any]] = None):
        self.requests: List[RecordedRequest] = []
        self.closed = False
        self._responses: List[Any] = []
        self._handler = handler
        self._lock = threading.Lock()

    def queue(self, *responses: Any) -> "FakeTransport":
        with self._lock:
            self._responses.extend(responses)
        return self

    def set_handler(self, handler: Callable[[RecordedRequest], Any]) -> None:
        self._handler = handler

    def send(self, method, url, headers=None, body=None):
        if isinstance(body, str):
            body = body.encode("utf-8")
        request = RecordedRequest(method=method, url=url, headers=dict(headers or {}), body=body)
        with self._lock:
            self.requests.append(request)
            if self._handler is None:
                if not self._responses:
                    raise AssertionError(f"예상하지 못한 요청: {method} {url}")
                result = self._responses.pop(0)
        if self._handler is not None:
            result = self._handler(request)
        if isinstance(result, Exception):
            raise result
        return result

    def close(self):
        self.closed = True

    def urls(self) -> List[str]:
        return [r.url for r in self.requests]


def build_response(status: int, body: Any = None, headers: Optional[Dict[str, str]] = None) -> HttpResponse:
    """HttpResponse 생성 (dict/list 본문은 JSON 직렬화)"""
    if body is None:
        raw = b""
    elif isinstance(body, bytes):
        raw = body
    elif isinstance(body, str):
        raw = body.encode("utf-8")
    else:
        raw = json.dumps(body).encode("utf-8")
    return HttpResponse(status=status, headers=headers or {}, body=raw)


def build_keystone_access(
    token: str = "tok-1",
    tenant_id: Optional[str] = "tenant-1",
    services: Optional[List[Dict[str, Any]]] = None,
) -> Dict[str, Any]:
    """Keystone v2 /tokens 성공 응답 본문 생성"""
    token_body: Dict[str, Any] = {"id": token}
    if tenant_id:
        token_body["tenant"] = {"id": tenant_id}
    if services is None:
        services = [
            {
                "type": "compute",
                "endpoints": [
                    {"region": "RegionOne", "publicURL": "https://c1.example.com/v2/tenant-1", "versionId": "2.0"},
                ],
            },
            {
                "type": "object-store",
                "endpoints": [
                    {"region": "RegionOne", "publicURL": "https://s1.example.com/v1/AUTH_tenant-1", "versionId": "1.0"},
                ],
            },
        ]
    return {"access": {"token": token_body, "serviceCatalog": services}}


# =============================================================================
# 픽스처
# =============================================================================


@pytest.fixture
def fake_transport():
    """응답을 순서대로 돌려주는 가짜 Transport"""
    return FakeTransport()


@pytest.fixture
def make_response():
    """HttpResponse 생성 함수"""
    return build_response


@pytest.fixture
def keystone_access():
    """Keystone 성공 응답 본문 생성 함수"""
    return build_keystone_access


@pytest.fixture
def session():
    """테스트용 SessionContext (Keystone 엔드포인트)"""
    return SessionContext(
        endpoint="https://identity.example.com/v2.0",
        account_id="demo",
        access_public="user",
        access_private="secret",
    )


@pytest.fixture
def catalog():
    """테스트용 ServiceCatalog (RegionOne)"""
    return ServiceCatalog(
        auth_token="tok-1",
        tenant_id="tenant-1",
        home_region="RegionOne",
        endpoints={
            "compute": {"RegionOne": "https://c1.example.com/v2/tenant-1"},
            "object-store": {"RegionOne": "https://s1.example.com/v1/AUTH_tenant-1"},
        },
        storage_token="stok-1",
    )
