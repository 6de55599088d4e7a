# tests/novagate/endpoints/test_endpoints_resolver.py
"""
novagate/endpoints/resolver.py 단위 테스트

버전 비교, 리전 추론, 리전 정책, 최고 버전 선택 테스트.
"""

import pytest

from novagate.endpoints.resolver import (
    EndpointCandidate,
    RegionPolicy,
    api_version,
    compare_versions,
    infer_region,
    is_supported_version,
    parse_version,
    resolve_endpoints,
    version_from_url,
)
from novagate.exceptions import InternalError

# =============================================================================
# 버전 처리
# =============================================================================


class TestCompareVersions:
    """compare_versions 테스트"""

    def test_higher_major(self):
        """2.0 > 1.9"""
        assert compare_versions("2.0", "1.9") > 0

    def test_lower(self):
        """1.0 < 1.1"""
        assert compare_versions("1.0", "1.1") < 0

    def test_both_none(self):
        """둘 다 None이면 같음"""
        assert compare_versions(None, None) == 0

    def test_none_is_one_zero(self):
        """None은 1.0으로 간주"""
        assert compare_versions(None, "1.0") == 0
        assert compare_versions("2", None) == 1

    def test_missing_minor(self):
        """minor 없으면 0"""
        assert compare_versions("2", "2.0") == 0

    def test_non_numeric_raises(self):
        """숫자가 아니면 InternalError"""
        with pytest.raises(InternalError):
            compare_versions("v2", "1.0")
        with pytest.raises(InternalError):
            compare_versions("2.beta", "1.0")


class TestSupportedVersion:
    """is_supported_version 테스트"""

    @pytest.mark.parametrize("version", ["1.0", "1.1", "2.0", "2.9", None])
    def test_supported(self, version):
        assert is_supported_version(version) is True

    @pytest.mark.parametrize("version", ["2.10", "3.0"])
    def test_unsupported(self, version):
        assert is_supported_version(version) is False


class TestParseVersion:
    """parse_version 테스트"""

    def test_parse(self):
        assert parse_version("2.1") == (2, 1)
        assert parse_version(" 3 ") == (3, 0)


class TestVersionFromUrl:
    """version_from_url 테스트"""

    def test_middle_segment(self):
        assert version_from_url("https://c.example.com/v2.0/tenant") == "2.0"

    def test_trailing_segment(self):
        assert version_from_url("https://c.example.com/v1.1") == "1.1"

    def test_no_version(self):
        """없으면 1.0"""
        assert version_from_url("https://c.example.com/compute") == "1.0"

    def test_host_is_not_version(self):
        """호스트명이 버전처럼 보여도 경로만 검사"""
        assert version_from_url("https://v1/v3/t") == "3"
        assert version_from_url("https://v2/compute") == "1.0"


class TestApiVersion:
    """api_version 테스트"""

    def test_major_only(self):
        assert api_version("https://c1.example.com/v2/123456") == (2, 0)

    def test_major_minor(self):
        assert api_version("https://c1.example.com/v1.1/123456") == (1, 1)

    def test_bare_numeric_version(self):
        assert api_version("https://c1.example.com/1.0/acct") == (1, 0)

    def test_unknown(self):
        """찾지 못하면 (1, 1)"""
        assert api_version("https://c1.example.com/compute/123") == (1, 1)
        assert api_version(None) == (1, 1)


# =============================================================================
# 리전 추론
# =============================================================================


class TestInferRegion:
    """infer_region 테스트"""

    def test_four_or_more_labels(self):
        """앞 두 라벨"""
        assert infer_region("https://region-a.geo-1.example.com/v1.0") == "region-a.geo-1"

    def test_three_labels(self):
        """첫 라벨"""
        assert infer_region("https://dfw.servers.com/v1.0") == "dfw"

    def test_two_labels(self):
        """호스트 전체"""
        assert infer_region("https://example.com/v1.0") == "example.com"

    def test_unparseable(self):
        """URL이 아니면 원문 그대로 처리"""
        assert infer_region("localhost") == "localhost"


# =============================================================================
# 리전 정책
# =============================================================================


class TestRegionPolicy:
    """RegionPolicy 테스트"""

    def test_keeps_region(self):
        candidate = EndpointCandidate("compute", "RegionOne", "https://c1", "2.0")
        assert RegionPolicy().assign(candidate) is candidate

    def test_fabricates_for_version_one(self):
        """리전 없고 1.0이면 URL에서 리전 생성"""
        candidate = EndpointCandidate("compute", None, "https://region-a.geo-1.example.com/v1.0", "1.0")
        assigned = RegionPolicy().assign(candidate)
        assert assigned.region_id == "region-a.geo-1"

    def test_skips_ambiguous_types(self):
        """헤더 방식 전용이면 compute/object-store 건너뜀"""
        candidate = EndpointCandidate("compute", None, "https://c.example.com/v1.0", "1.0")
        assert RegionPolicy(header_dialect_only=True).assign(candidate) is None

    def test_skips_regionless_newer_compute(self):
        candidate = EndpointCandidate("object-store", None, "https://s.example.com/v2", "2.0")
        assert RegionPolicy().assign(candidate) is None

    def test_keeps_regionless_other_service(self):
        """다른 서비스는 None 리전으로 유지"""
        candidate = EndpointCandidate("identity", None, "https://id.example.com/v2.0", "2.0")
        assigned = RegionPolicy().assign(candidate)
        assert assigned is candidate
        assert assigned.region_id is None


# =============================================================================
# 엔드포인트 맵 생성
# =============================================================================


class TestResolveEndpoints:
    """resolve_endpoints 테스트"""

    def test_highest_version_wins(self):
        """같은 (서비스, 리전)이면 높은 버전만 남음"""
        resolution = resolve_endpoints(
            [
                EndpointCandidate("compute", "RegionOne", "https://c1/v1.0", "1.0"),
                EndpointCandidate("compute", "RegionOne", "https://c1/v2", "2.0"),
            ]
        )
        assert resolution.endpoints["compute"] == {"RegionOne": "https://c1/v2"}

    def test_order_independent_for_higher_version(self):
        resolution = resolve_endpoints(
            [
                EndpointCandidate("compute", "RegionOne", "https://c1/v2", "2.0"),
                EndpointCandidate("compute", "RegionOne", "https://c1/v1.0", "1.0"),
            ]
        )
        assert resolution.endpoints["compute"] == {"RegionOne": "https://c1/v2"}

    def test_tie_keeps_first(self):
        """같은 버전이면 먼저 나온 것 유지"""
        resolution = resolve_endpoints(
            [
                EndpointCandidate("volume", "RegionOne", "https://first", "1.0"),
                EndpointCandidate("volume", "RegionOne", "https://second", "1.0"),
            ]
        )
        assert resolution.endpoints["volume"]["RegionOne"] == "https://first"

    def test_unsupported_versions_dropped(self):
        resolution = resolve_endpoints(
            [
                EndpointCandidate("compute", "RegionOne", "https://c1/v3", "3.0"),
                EndpointCandidate("compute", "RegionOne", "https://c1/v2", "2.0"),
            ]
        )
        assert resolution.endpoints["compute"] == {"RegionOne": "https://c1/v2"}

    def test_regionless_fabricated(self):
        resolution = resolve_endpoints(
            [EndpointCandidate("compute", None, "https://region-a.geo-1.example.com/v1.0/", "1.0")]
        )
        assert resolution.endpoints["compute"] == {"region-a.geo-1": "https://region-a.geo-1.example.com/v1.0/"}
        assert resolution.first_region == "region-a.geo-1"

    def test_first_region(self):
        """처음 채택된 리전이 홈 리전 기본값"""
        resolution = resolve_endpoints(
            [
                EndpointCandidate("identity", None, "https://id/v2.0", "2.0"),
                EndpointCandidate("compute", "RegionTwo", "https://c2", "2.0"),
                EndpointCandidate("compute", "RegionOne", "https://c1", "2.0"),
            ]
        )
        assert resolution.first_region == "RegionTwo"
        assert set(resolution.endpoints["compute"]) == {"RegionOne", "RegionTwo"}

    def test_empty_url_skipped(self):
        resolution = resolve_endpoints([EndpointCandidate("compute", "RegionOne", "", "2.0")])
        assert resolution.endpoints == {}
        assert resolution.first_region is None

    def test_bad_version_raises(self):
        with pytest.raises(InternalError):
            resolve_endpoints([EndpointCandidate("compute", "RegionOne", "https://c1", "latest")])
