# novagate/auth/cache/__init__.py
"""
서비스 카탈로그 캐시 모듈

인증 결과(ServiceCatalog)를 세션 키별로 24시간 메모리에 보관하여
불필요한 인증 호출을 줄입니다.

Note:
    이 모듈은 Lazy Import 패턴을 사용합니다.
"""

__all__ = [
    "CacheEntry",
    "CatalogCache",
    "DEFAULT_TTL",
]

_IMPORT_MAPPING = {
    "CacheEntry": (".cache", "CacheEntry"),
    "CatalogCache": (".cache", "CatalogCache"),
    "DEFAULT_TTL": (".cache", "DEFAULT_TTL"),
}


def __getattr__(name: str):
    """Lazy import - 실제 사용 시점에만 모듈 로드"""
    if name in _IMPORT_MAPPING:
        module_name, attr_name = _IMPORT_MAPPING[name]
        import importlib

        module = importlib.import_module(module_name, __name__)
        return getattr(module, attr_name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
