# novagate/dispatch/__init__.py
"""
인증된 리소스 호출 모듈

- Dispatcher: 카탈로그 조회 + 호출 + 재인증/쓰로틀링 복구
- ExceptionItem / parse_exception: 에러 응답 파싱 및 분류
- ThrottleConfig: HTTP 413 대기 설정

Note:
    이 모듈은 Lazy Import 패턴을 사용합니다.
"""

__all__ = [
    "CallResult",
    "CallStatus",
    "Dispatcher",
    "ProbeTarget",
    "ExceptionItem",
    "classify_error_message",
    "parse_exception",
    "ThrottleConfig",
]

_IMPORT_MAPPING = {
    "CallResult": (".dispatcher", "CallResult"),
    "CallStatus": (".dispatcher", "CallStatus"),
    "Dispatcher": (".dispatcher", "Dispatcher"),
    "ProbeTarget": (".dispatcher", "ProbeTarget"),
    "ExceptionItem": (".errors", "ExceptionItem"),
    "classify_error_message": (".errors", "classify_error_message"),
    "parse_exception": (".errors", "parse_exception"),
    "ThrottleConfig": (".retry", "ThrottleConfig"),
}


def __getattr__(name: str):
    """Lazy import - 실제 사용 시점에만 모듈 로드"""
    if name in _IMPORT_MAPPING:
        module_name, attr_name = _IMPORT_MAPPING[name]
        import importlib

        module = importlib.import_module(module_name, __name__)
        return getattr(module, attr_name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
