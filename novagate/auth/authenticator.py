# novagate/auth/authenticator.py
"""
인증 방식 선택 및 순차 시도

엔드포인트 모양으로 시도할 Dialect 순서를 정하고,
처음으로 거부하지 않은 Dialect의 카탈로그를 반환합니다.

시도 순서:
    "ks:" 접두어               -> keystone
    "st:" 접두어               -> legacy
    "1.0"/"1.1"로 끝남         -> legacy, swift, keystone
    그 외                      -> keystone, legacy, swift

Example:
    authenticator = Authenticator(transport)
    catalog = authenticator.authenticate(session)
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING

from novagate.exceptions import AuthenticationFailedError, InternalError

from .provider.keystone import KEYSTONE, KeystoneDialect
from .provider.legacy import LEGACY, LegacyHeaderDialect
from .provider.swift import SWIFT, SwiftHeaderDialect
from .types import Authenticated, Dialect, HardFailure, ServiceCatalog, SessionContext

if TYPE_CHECKING:
    from novagate.http.transport import Transport

logger = logging.getLogger(__name__)

KEYSTONE_PREFIX = "ks:"
LEGACY_PREFIX = "st:"

# 구버전 표시 (이 값으로 끝나면 헤더 방식부터 시도)
LEGACY_VERSION_MARKERS = ("1.0", "1.1")


@dataclass(frozen=True)
class DialectPlan:
    """엔드포인트에 대한 시도 계획

    Attributes:
        order: 시도할 Dialect 이름 순서
        endpoint: 접두어를 제거한 엔드포인트
    """

    order: tuple[str, ...]
    endpoint: str


def select_dialects(endpoint: str) -> DialectPlan:
    """엔드포인트 모양으로 Dialect 시도 순서 결정"""
    endpoint = endpoint.strip()
    if endpoint.startswith(KEYSTONE_PREFIX):
        return DialectPlan((KEYSTONE,), endpoint[len(KEYSTONE_PREFIX) :])
    if endpoint.startswith(LEGACY_PREFIX):
        return DialectPlan((LEGACY,), endpoint[len(LEGACY_PREFIX) :])
    if endpoint.rstrip("/").endswith(LEGACY_VERSION_MARKERS):
        return DialectPlan((LEGACY, SWIFT, KEYSTONE), endpoint)
    return DialectPlan((KEYSTONE, LEGACY, SWIFT), endpoint)


def default_dialects(transport: Transport) -> dict[str, Dialect]:
    """기본 Dialect 구현 세트"""
    return {
        KEYSTONE: KeystoneDialect(transport),
        LEGACY: LegacyHeaderDialect(transport),
        SWIFT: SwiftHeaderDialect(transport),
    }


class Authenticator:
    """Dialect를 순서대로 시도하여 ServiceCatalog 생성

    Thread-safe 구현 (시도 횟수 카운터만 공유 상태).

    Attributes:
        attempts: 지금까지 수행한 인증 시퀀스 수
    """

    def __init__(
        self,
        transport: Transport,
        dialects: Mapping[str, Dialect] | None = None,
        planner: Callable[[str], DialectPlan] = select_dialects,
    ):
        """Authenticator 초기화

        Args:
            transport: HTTP 전송 계층
            dialects: 이름 -> Dialect (기본: keystone/legacy/swift)
            planner: 엔드포인트 -> 시도 계획 함수
        """
        self._dialects = dict(dialects) if dialects is not None else default_dialects(transport)
        self._planner = planner
        self._attempts = 0
        self._lock = threading.Lock()

    @property
    def attempts(self) -> int:
        with self._lock:
            return self._attempts

    def authenticate(self, session: SessionContext) -> ServiceCatalog:
        """인증 시퀀스 한 번 수행

        Args:
            session: 세션 정보

        Returns:
            ServiceCatalog

        Raises:
            AuthenticationFailedError: 모든 Dialect가 거부
            NovaGateError: 통신 오류 등 치명적 실패 (다음 Dialect 시도 안 함)
        """
        with self._lock:
            self._attempts += 1

        plan = self._planner(session.endpoint)
        logger.debug("인증 시도 순서: %s (%s)", ", ".join(plan.order), plan.endpoint)

        for name in plan.order:
            dialect = self._dialects.get(name)
            if dialect is None:
                raise InternalError(f"등록되지 않은 인증 방식: {name}")

            outcome = dialect.attempt(session, plan.endpoint)
            if isinstance(outcome, Authenticated):
                return outcome.catalog
            if isinstance(outcome, HardFailure):
                raise outcome.error
            logger.info("%s 인증 거부됨, 다음 방식 시도", name)

        logger.error("모든 인증 방식이 거부됨: %s", plan.endpoint)
        raise AuthenticationFailedError(endpoint=plan.endpoint)
