# novagate/endpoints/__init__.py
"""
서비스 카탈로그 엔드포인트 해석 모듈

인증 응답의 (서비스 타입, 리전, URL, 버전) 후보들을
(서비스 타입, 리전)당 URL 하나로 정리하는 순수 함수들을 제공합니다.

Note:
    이 모듈은 Lazy Import 패턴을 사용합니다.
"""

__all__ = [
    "EndpointCandidate",
    "RegionPolicy",
    "Resolution",
    "api_version",
    "compare_versions",
    "infer_region",
    "is_supported_version",
    "parse_version",
    "resolve_endpoints",
    "version_from_url",
]

_IMPORT_MAPPING = {name: (".resolver", name) for name in __all__}


def __getattr__(name: str):
    """Lazy import - 실제 사용 시점에만 모듈 로드"""
    if name in _IMPORT_MAPPING:
        module_name, attr_name = _IMPORT_MAPPING[name]
        import importlib

        module = importlib.import_module(module_name, __name__)
        return getattr(module, attr_name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
