# novagate/auth/config/__init__.py
"""
novagate 설정 파일 파싱 모듈

이 모듈은 ~/.novagate/config 및 ~/.novagate/credentials 파일을 파싱하고
NOVAGATE_* 환경 변수를 반영합니다.

Note:
    이 모듈은 Lazy Import 패턴을 사용합니다.
"""

__all__ = [
    # Data classes
    "ConnectionProfile",
    "ParsedConfig",
    # Classes
    "Loader",
    # Functions
    "load_config",
    "list_profiles",
]

_IMPORT_MAPPING = {
    "ConnectionProfile": (".loader", "ConnectionProfile"),
    "ParsedConfig": (".loader", "ParsedConfig"),
    "Loader": (".loader", "Loader"),
    "load_config": (".loader", "load_config"),
    "list_profiles": (".loader", "list_profiles"),
}


def __getattr__(name: str):
    """Lazy import - 실제 사용 시점에만 모듈 로드"""
    if name in _IMPORT_MAPPING:
        module_name, attr_name = _IMPORT_MAPPING[name]
        import importlib

        module = importlib.import_module(module_name, __name__)
        return getattr(module, attr_name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
