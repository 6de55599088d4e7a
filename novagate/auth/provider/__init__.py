# novagate/auth/provider/__init__.py
"""
인증 방식(Dialect) 구현 모듈

Dialect 목록:
- KeystoneDialect: Keystone v2 ID 카탈로그 인증
- LegacyHeaderDialect: 구버전 Nova 헤더 방식 인증
- SwiftHeaderDialect: Swift 스토리지 헤더 방식 인증

Note:
    이 모듈은 Lazy Import 패턴을 사용합니다.
"""

__all__ = [
    # Base
    "BaseDialect",
    # Keystone
    "KeystoneDialect",
    "build_auth_body",
    # Legacy
    "LegacyHeaderDialect",
    # Swift
    "SwiftHeaderDialect",
]

_IMPORT_MAPPING = {
    "BaseDialect": (".base", "BaseDialect"),
    "KeystoneDialect": (".keystone", "KeystoneDialect"),
    "build_auth_body": (".keystone", "build_auth_body"),
    "LegacyHeaderDialect": (".legacy", "LegacyHeaderDialect"),
    "SwiftHeaderDialect": (".swift", "SwiftHeaderDialect"),
}


def __getattr__(name: str):
    """Lazy import - 실제 사용 시점에만 모듈 로드"""
    if name in _IMPORT_MAPPING:
        module_name, attr_name = _IMPORT_MAPPING[name]
        import importlib

        module = importlib.import_module(module_name, __name__)
        return getattr(module, attr_name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
