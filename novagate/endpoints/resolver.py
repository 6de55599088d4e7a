"""
novagate/endpoints/resolver.py - 서비스 카탈로그 엔드포인트 해석

인증 응답에 담긴 제각각인 (서비스 타입, 리전, URL, 버전) 목록을
(서비스 타입, 리전)당 URL 하나로 정리하는 순수 함수 모음입니다.
I/O는 하지 않습니다.

주요 구성 요소:
- compare_versions / is_supported_version: "major.minor" 버전 비교 및 허용 범위
- infer_region: URL 호스트명에서 리전 ID 추론
- RegionPolicy: 리전이 빠진 항목의 리전 조작/스킵 정책
- resolve_endpoints: 최고 버전 우선 엔드포인트 맵 생성
- api_version: 엔드포인트 경로에서 API 버전 추출

Example:
    candidates = [
        EndpointCandidate("compute", "RegionOne", "https://c1/v1.0", "1.0"),
        EndpointCandidate("compute", "RegionOne", "https://c1/v2", "2.0"),
    ]
    resolution = resolve_endpoints(candidates)
    resolution.endpoints["compute"]["RegionOne"]  # "https://c1/v2"
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from urllib.parse import urlparse

from novagate.exceptions import InternalError

logger = logging.getLogger(__name__)

# 버전 정보가 없을 때 사용하는 기본 버전
DEFAULT_VERSION = "1.0"

# 리전이 없을 때 조작하지 않고 건너뛰는 서비스 타입
AMBIGUOUS_SERVICE_TYPES = frozenset({"compute", "object-store"})

_URL_VERSION_PATTERN = re.compile(r"/v(\d+(?:\.\d+)?)(?:/|$)")
_PATH_VERSION_PATTERN = re.compile(r"^v(\d+)(?:\.(\d+))?$|^(\d+)\.(\d+)$")


# =============================================================================
# 버전 처리
# =============================================================================


def parse_version(version: str | None) -> tuple[int, int]:
    """버전 문자열을 (major, minor)로 파싱

    Args:
        version: "2.0", "2", None 등 (None은 "1.0"으로 간주)

    Returns:
        (major, minor) 튜플

    Raises:
        InternalError: 숫자가 아닌 버전 문자열
    """
    if version is None:
        version = DEFAULT_VERSION
    text = version.strip()
    major_str, _, minor_str = text.partition(".")
    try:
        return int(major_str), int(minor_str or "0")
    except ValueError as e:
        raise InternalError(f"버전 문자열을 해석할 수 없습니다: {version!r}", cause=e) from e


def compare_versions(ver1: str | None, ver2: str | None) -> int:
    """두 버전 문자열 비교

    major를 먼저, 같으면 minor를 비교합니다.

    Returns:
        ver1이 크면 1, 같으면 0, 작으면 -1

    Raises:
        InternalError: 숫자가 아닌 버전 문자열
    """
    if ver1 is None and ver2 is None:
        return 0
    left = parse_version(ver1)
    right = parse_version(ver2)
    if left == right:
        return 0
    return 1 if left > right else -1


def is_supported_version(version: str | None) -> bool:
    """이 라이브러리가 다룰 수 있는 버전인지 확인

    major <= 2 이고 (major < 2 또는 minor < 10) 인 경우만 허용합니다.
    """
    major, minor = parse_version(version)
    return major <= 2 and (major < 2 or minor < 10)


def version_from_url(url: str) -> str:
    """URL 경로에서 버전 추측 (versionId가 없는 카탈로그 항목용)

    "/v2.0/", "/v1.1" 같은 경로 조각을 찾고, 없으면 "1.0"을 반환합니다.
    """
    path = urlparse(url).path if "://" in url else url
    match = _URL_VERSION_PATTERN.search(path)
    if not match:
        return DEFAULT_VERSION
    return match.group(1)


def api_version(url: str | None) -> tuple[int, int]:
    """엔드포인트 URL 경로에서 API 버전 추출

    경로 조각을 뒤에서부터 보면서 "v2", "v1.1", "1.0" 형태를 찾습니다.
    테넌트 ID처럼 점 없는 숫자 조각은 버전으로 보지 않습니다.

    Returns:
        (major, minor). 찾지 못하면 (1, 1)
    """
    if not url:
        return 1, 1
    path = urlparse(url).path if "://" in url else url
    for segment in reversed([s for s in path.split("/") if s]):
        match = _PATH_VERSION_PATTERN.match(segment)
        if not match:
            continue
        if match.group(1) is not None:
            return int(match.group(1)), int(match.group(2) or 0)
        return int(match.group(3)), int(match.group(4))
    return 1, 1


# =============================================================================
# 리전 추론
# =============================================================================


def infer_region(url: str) -> str:
    """URL 호스트명에서 리전 ID 추론

    호스트를 "." 로 나눈 라벨 수에 따라:
    - 2개 이하: 호스트 전체
    - 3개: 첫 라벨
    - 4개 이상: 앞 두 라벨을 "." 로 연결

    Example:
        infer_region("https://region-a.geo-1.example.com/v1.0")  # "region-a.geo-1"
    """
    host = urlparse(url).hostname if "://" in url else None
    if not host:
        host = url
    parts = host.split(".")
    if len(parts) < 3:
        region = host
    elif len(parts) == 3:
        region = parts[0]
    else:
        region = f"{parts[0]}.{parts[1]}"
    logger.debug("리전 추론: %s -> %s", url, region)
    return region


# =============================================================================
# 엔드포인트 후보 및 정책
# =============================================================================


@dataclass(frozen=True)
class EndpointCandidate:
    """해석 전의 엔드포인트 후보 하나

    Attributes:
        service_type: 서비스 타입 (compute, object-store 등)
        region_id: 리전 ID (카탈로그에 없으면 None)
        url: 공개 URL
        version: 버전 문자열
    """

    service_type: str
    region_id: str | None
    url: str
    version: str = DEFAULT_VERSION


@dataclass(frozen=True)
class RegionPolicy:
    """리전이 빠진 카탈로그 항목 처리 정책

    - 버전이 정확히 "1.0"이고 헤더 방식 전용 배포가 아니면 URL에서 리전을 만들어냄
    - 그 외 compute/object-store 항목은 모호하므로 건너뜀
    - 나머지는 리전 없이(None 키) 유지

    운영사마다 다를 수 있어 교체 가능한 객체로 분리합니다.

    Attributes:
        header_dialect_only: 헤더 인증만 쓰는 운영사 여부 (Rackspace 계열)
        ambiguous_types: 리전 없으면 건너뛸 서비스 타입
    """

    header_dialect_only: bool = False
    ambiguous_types: frozenset[str] = field(default=AMBIGUOUS_SERVICE_TYPES)

    def assign(self, candidate: EndpointCandidate) -> EndpointCandidate | None:
        """후보에 최종 리전 부여

        Returns:
            리전이 확정된 후보, 건너뛸 경우 None
        """
        if candidate.region_id is not None:
            return candidate
        if candidate.version == DEFAULT_VERSION and not self.header_dialect_only:
            logger.warning("리전 정보 없음, URL 기반으로 리전 생성: %s", candidate.url)
            return replace(candidate, region_id=infer_region(candidate.url))
        if candidate.service_type in self.ambiguous_types:
            logger.warning(
                "리전 정보 없는 %s 엔드포인트는 구버전으로 보고 건너뜀: %s",
                candidate.service_type,
                candidate.url,
            )
            return None
        return candidate


# =============================================================================
# 엔드포인트 맵 생성
# =============================================================================


@dataclass
class Resolution:
    """엔드포인트 해석 결과

    Attributes:
        endpoints: 서비스 타입 -> 리전 ID -> URL
        first_region: 처음 채택된 후보의 리전 (홈 리전 기본값)
    """

    endpoints: dict[str, dict[str | None, str]] = field(default_factory=dict)
    first_region: str | None = None


def resolve_endpoints(
    candidates: Iterable[EndpointCandidate],
    policy: RegionPolicy | None = None,
) -> Resolution:
    """후보 목록을 (서비스 타입, 리전)당 최고 버전 URL 하나로 정리

    지원하지 않는 버전은 제외하고, 같은 키에 후보가 여럿이면
    버전이 더 높은 것을 남깁니다. 버전이 같으면 먼저 나온 것을 유지합니다.

    Args:
        candidates: 엔드포인트 후보 목록
        policy: 리전 누락 처리 정책 (None이면 기본 정책)

    Returns:
        Resolution

    Raises:
        InternalError: 숫자가 아닌 버전 문자열
    """
    policy = policy or RegionPolicy()
    result = Resolution()
    best_versions: dict[tuple[str, str | None], str] = {}

    for raw in candidates:
        if not raw.url:
            continue
        if not is_supported_version(raw.version):
            logger.debug("지원하지 않는 버전 %s 건너뜀: %s", raw.version, raw.url)
            continue
        candidate = policy.assign(raw)
        if candidate is None:
            continue

        key = (candidate.service_type, candidate.region_id)
        current = best_versions.get(key)
        if current is None or compare_versions(candidate.version, current) > 0:
            best_versions[key] = candidate.version
            result.endpoints.setdefault(candidate.service_type, {})[candidate.region_id] = candidate.url
        else:
            logger.debug(
                "낮거나 같은 버전 건너뜀: %s %s (%s <= %s)",
                candidate.service_type,
                candidate.url,
                candidate.version,
                current,
            )

        if result.first_region is None and candidate.region_id is not None:
            result.first_region = candidate.region_id

    return result
