# tests/novagate/auth/test_session_catalog_types.py
"""
novagate/auth/types/types.py 단위 테스트

ProviderFamily, SessionContext, ServiceCatalog 테스트.
"""

from dataclasses import FrozenInstanceError

import pytest

from novagate.auth.types import (
    Authenticated,
    HardFailure,
    ProviderFamily,
    Rejected,
    ServiceCatalog,
    SessionContext,
)
from novagate.exceptions import CommunicationError, ConfigurationError, InternalError


class TestProviderFamily:
    """ProviderFamily 테스트"""

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("HP", ProviderFamily.HP),
            ("rackspace", ProviderFamily.RACKSPACE),
            (" Dell ", ProviderFamily.DELL),
            ("OpenStack", ProviderFamily.OTHER),
            (None, ProviderFamily.OTHER),
        ],
    )
    def test_from_name(self, name, expected):
        assert ProviderFamily.from_name(name) is expected

    def test_header_dialect_only(self):
        """Rackspace만 헤더 방식 전용"""
        assert ProviderFamily.RACKSPACE.header_dialect_only is True
        assert ProviderFamily.HP.header_dialect_only is False

    def test_str(self):
        assert str(ProviderFamily.HP) == "hp"


class TestSessionContext:
    """SessionContext 테스트"""

    def test_bytes_keys_decoded(self):
        """bytes 키는 UTF-8로 디코딩"""
        session = SessionContext(
            endpoint="https://id.example.com",
            account_id="demo",
            access_public=b"user",
            access_private="비밀".encode("utf-8"),
        )
        assert session.public_key == "user"
        assert session.private_key == "비밀"

    def test_cache_key(self, session):
        assert session.cache_key == ("demo", None, "https://identity.example.com/v2.0")

    def test_frozen(self, session):
        with pytest.raises(FrozenInstanceError):
            session.region_id = "RegionTwo"

    def test_missing_endpoint(self):
        with pytest.raises(ConfigurationError) as exc_info:
            SessionContext(endpoint=" ", account_id="demo")
        assert exc_info.value.config_key == "endpoint"

    def test_repr_hides_keys(self, session):
        """repr에 비밀 키가 나오지 않음"""
        assert "secret" not in repr(session)

    def test_proxy_url(self):
        session = SessionContext(endpoint="https://id", account_id="a", proxy_host="proxy", proxy_port=3128)
        assert session.proxy_url == "http://proxy:3128"
        assert SessionContext(endpoint="https://id", account_id="a").proxy_url is None

    def test_family(self):
        session = SessionContext(endpoint="https://id", account_id="a", provider_name="HP")
        assert session.family is ProviderFamily.HP


class TestServiceCatalog:
    """ServiceCatalog 테스트"""

    def test_storage_token_defaults_to_auth_token(self):
        catalog = ServiceCatalog(auth_token="tok", tenant_id="t", home_region="R")
        assert catalog.storage_token == "tok"

    def test_storage_token_kept(self, catalog):
        assert catalog.storage_token == "stok-1"

    def test_endpoints_read_only(self, catalog):
        with pytest.raises(TypeError):
            catalog.endpoints["compute"]["RegionTwo"] = "https://c2"

    def test_source_mapping_not_shared(self):
        """원본 dict를 바꿔도 카탈로그는 그대로"""
        source = {"compute": {"RegionOne": "https://c1"}}
        catalog = ServiceCatalog(auth_token="tok", tenant_id="t", home_region="RegionOne", endpoints=source)
        source["compute"]["RegionOne"] = "https://changed"
        assert catalog.compute_url == "https://c1"

    def test_empty_url_rejected(self):
        with pytest.raises(InternalError):
            ServiceCatalog(auth_token="tok", tenant_id="t", home_region="R", endpoints={"compute": {"R": ""}})

    def test_service_url_exact_region(self):
        catalog = ServiceCatalog(
            auth_token="tok",
            tenant_id="t",
            home_region="RegionTwo",
            endpoints={"compute": {"RegionOne": "https://c1", "RegionTwo": "https://c2"}},
        )
        assert catalog.compute_url == "https://c2"

    def test_service_url_suffix_and_none_fallback(self):
        """홈 리전이 키로 끝나거나 None 키면 사용"""
        catalog = ServiceCatalog(
            auth_token="tok",
            tenant_id="t",
            home_region="az-1.region-a.geo-1",
            endpoints={
                "compute": {"region-a.geo-1": "https://c1"},
                "cdn": {None: "https://cdn"},
            },
        )
        assert catalog.compute_url == "https://c1"
        assert catalog.service_url("cdn") == "https://cdn"

    def test_service_url_missing(self, catalog):
        assert catalog.service_url("volume") is None

    def test_service_url_other_region_only(self):
        catalog = ServiceCatalog(
            auth_token="tok", tenant_id="t", home_region="RegionOne", endpoints={"compute": {"RegionTwo": "https://c2"}}
        )
        assert catalog.compute_url is None

    def test_unknown_home_region_uses_first(self):
        catalog = ServiceCatalog(
            auth_token="tok", tenant_id="t", home_region=None, endpoints={"compute": {"RegionTwo": "https://c2"}}
        )
        assert catalog.compute_url == "https://c2"

    def test_list_regions_compute(self, catalog):
        assert catalog.list_regions() == ["RegionOne"]

    def test_list_regions_falls_back_to_storage(self):
        catalog = ServiceCatalog(
            auth_token="tok",
            tenant_id="t",
            home_region="dfw",
            endpoints={"object-store": {"dfw": "https://s1", None: "https://s0"}},
        )
        assert catalog.list_regions() == ["dfw"]


class TestOutcomes:
    """인증 결과 태그 타입 테스트"""

    def test_variants(self, catalog):
        error = CommunicationError("down")
        assert Authenticated(catalog).catalog is catalog
        assert Rejected("keystone", "HTTP 401").reason == "HTTP 401"
        assert HardFailure("legacy", error).error is error
