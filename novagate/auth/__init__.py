# novagate/auth/__init__.py
"""
클라우드 통합 인증 모듈 (novagate/auth)

지원하는 인증 방식:
- KeystoneDialect: Keystone v2 ID 카탈로그 (POST /tokens)
- LegacyHeaderDialect: 구버전 Nova X-Auth-* 헤더 방식
- SwiftHeaderDialect: Swift 스토리지 헤더 방식

사용 예시:
    from novagate.auth import Authenticator, CatalogCache, SessionContext

    session = SessionContext(
        endpoint="https://identity.example.com/v2.0",
        account_id="demo",
        access_public="user",
        access_private="secret",
    )
    catalog = Authenticator(transport).authenticate(session)
    catalog.compute_url

Note:
    이 모듈은 Lazy Import 패턴을 사용합니다.
"""

__all__ = [
    # Types
    "ProviderFamily",
    "SessionContext",
    "ServiceCatalog",
    "Dialect",
    "Authenticated",
    "Rejected",
    "HardFailure",
    # Authenticator
    "Authenticator",
    "DialectPlan",
    "select_dialects",
    # Cache
    "CatalogCache",
    # Config
    "Loader",
    "ConnectionProfile",
    "load_config",
    "list_profiles",
]

_IMPORT_MAPPING = {
    # Types
    "ProviderFamily": (".types", "ProviderFamily"),
    "SessionContext": (".types", "SessionContext"),
    "ServiceCatalog": (".types", "ServiceCatalog"),
    "Dialect": (".types", "Dialect"),
    "Authenticated": (".types", "Authenticated"),
    "Rejected": (".types", "Rejected"),
    "HardFailure": (".types", "HardFailure"),
    # Authenticator
    "Authenticator": (".authenticator", "Authenticator"),
    "DialectPlan": (".authenticator", "DialectPlan"),
    "select_dialects": (".authenticator", "select_dialects"),
    # Cache
    "CatalogCache": (".cache", "CatalogCache"),
    # Config
    "Loader": (".config", "Loader"),
    "ConnectionProfile": (".config", "ConnectionProfile"),
    "load_config": (".config", "load_config"),
    "list_profiles": (".config", "list_profiles"),
}


def __getattr__(name: str):
    """Lazy import - 실제 사용 시점에만 모듈 로드"""
    if name in _IMPORT_MAPPING:
        module_name, attr_name = _IMPORT_MAPPING[name]
        import importlib

        module = importlib.import_module(module_name, __name__)
        return getattr(module, attr_name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
