# novagate/auth/cache/cache.py
"""
서비스 카탈로그 메모리 캐시

- CacheEntry: 캐시 항목 (값 + 생성 시각)
- CatalogCache: 세션 키별 ServiceCatalog 캐시

설계 원칙:
- 프로세스 전역 싱글톤 없음 (연결이 소유, 공유하려면 주입)
- 쓰기는 항목 통째 교체
- 24시간이 지난 항목은 없는 것으로 간주
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Generic, TypeVar

from ..types import ServiceCatalog, SessionContext

logger = logging.getLogger(__name__)

# 카탈로그 기본 유효 시간
DEFAULT_TTL = timedelta(hours=24)

# =============================================================================
# Generic Cache Entry
# =============================================================================

T = TypeVar("T")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class CacheEntry(Generic[T]):
    """캐시 항목을 나타내는 제네릭 데이터 클래스

    Attributes:
        value: 캐시된 값
        created_at: 생성 시간 (UTC)
    """

    value: T
    created_at: datetime = field(default_factory=_utcnow)

    def age(self, now: datetime | None = None) -> timedelta:
        """항목이 만들어진 뒤 지난 시간"""
        return (now or _utcnow()) - self.created_at

    def is_expired(self, ttl: timedelta, now: datetime | None = None) -> bool:
        """TTL보다 오래되었는지 확인

        Args:
            ttl: 유효 시간
            now: 기준 시각 (테스트용, 기본은 현재 UTC)

        Returns:
            True if 만료됨
        """
        return self.age(now) > ttl


# =============================================================================
# Catalog Cache
# =============================================================================


class CatalogCache:
    """세션별 ServiceCatalog 메모리 캐시

    (계정, 리전, 엔드포인트) 키마다 카탈로그 하나를 보관합니다.
    인증 단일화를 위한 세션별 잠금도 함께 제공합니다.

    Thread-safe 구현.

    Example:
        cache = CatalogCache()
        catalog = cache.lookup(session)
        if catalog is None:
            with cache.session_lock(session):
                ...
    """

    def __init__(
        self,
        ttl: timedelta = DEFAULT_TTL,
        clock: Callable[[], datetime] = _utcnow,
    ):
        """CatalogCache 초기화

        Args:
            ttl: 항목 유효 시간 (기본 24시간)
            clock: 현재 시각 함수 (테스트에서 교체)
        """
        self._cache: dict[tuple, CacheEntry[ServiceCatalog]] = {}
        self._locks: dict[tuple, threading.Lock] = {}
        self._lock = threading.RLock()
        self._ttl = ttl
        self._clock = clock

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def lookup(self, session: SessionContext) -> ServiceCatalog | None:
        """카탈로그 조회

        만료된 항목은 조회 시 제거됩니다.

        Args:
            session: 세션 정보

        Returns:
            ServiceCatalog 또는 None
        """
        key = session.cache_key
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                return None
            if entry.is_expired(self._ttl, self._clock()):
                logger.debug("카탈로그 캐시 만료: %s", session.account_id)
                del self._cache[key]
                return None
            return entry.value

    def store(self, session: SessionContext, catalog: ServiceCatalog) -> None:
        """카탈로그 저장 (기존 항목 교체)

        Args:
            session: 세션 정보
            catalog: 저장할 카탈로그
        """
        with self._lock:
            self._cache[session.cache_key] = CacheEntry(value=catalog, created_at=self._clock())
        logger.debug("카탈로그 캐시 저장: %s (region=%s)", session.account_id, catalog.home_region)

    def invalidate(self, session: SessionContext, expected: ServiceCatalog | None = None) -> bool:
        """특정 세션 캐시 무효화

        Args:
            session: 세션 정보
            expected: 지정하면 현재 항목이 이 카탈로그일 때만 삭제
                (다른 스레드가 이미 갱신한 항목은 유지)

        Returns:
            True if 삭제됨
        """
        with self._lock:
            entry = self._cache.get(session.cache_key)
            if entry is not None and (expected is None or entry.value is expected):
                del self._cache[session.cache_key]
                logger.debug("카탈로그 캐시 무효화: %s", session.account_id)
                return True
            return False

    def clear(self) -> None:
        """모든 캐시 클리어

        사용 중이 아닌 세션 잠금도 함께 정리합니다.
        """
        with self._lock:
            self._cache.clear()
            self._locks = {key: lock for key, lock in self._locks.items() if lock.locked()}

    def session_lock(self, session: SessionContext) -> threading.Lock:
        """세션 키별 인증 잠금 반환 (같은 키에는 항상 같은 잠금)"""
        key = session.cache_key
        with self._lock:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    def __len__(self) -> int:
        """유효한 캐시 항목 수"""
        with self._lock:
            now = self._clock()
            expired_keys = [key for key, entry in self._cache.items() if entry.is_expired(self._ttl, now)]
            # 만료된 항목 정리
            for key in expired_keys:
                del self._cache[key]
            return len(self._cache)
