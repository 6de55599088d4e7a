"""
novagate - OpenStack 계열 클라우드 인증 및 서비스 디스커버리 계층

세 가지 인증 방식(Keystone ID 카탈로그, 구버전 Nova 헤더, Swift 스토리지 헤더)을
감지하고, 리전/서비스별 엔드포인트 맵을 만들어 캐시하며,
인증된 리소스 호출을 제한된 복구 정책으로 수행합니다.

아키텍처:
    novagate/
    ├── auth/           # 세션/카탈로그 타입, 인증 방식, 캐시, 설정
    ├── endpoints/      # 엔드포인트 해석 (버전 비교, 리전 추론)
    ├── dispatch/       # 인증된 호출, 에러 분류, 쓰로틀링
    ├── http/           # requests 기반 전송 계층
    ├── connection.py   # 세션 하나의 구성 요소 묶음
    ├── location.py     # 리전 / 데이터센터 조회
    ├── log.py          # Rich 로깅 설정
    └── exceptions.py   # 통합 예외 계층

Usage:
    from novagate import CloudConnection, SessionContext

    session = SessionContext(
        endpoint="ks:https://identity.example.com/v2.0",
        account_id="demo",
        access_public="user",
        access_private="secret",
    )
    with CloudConnection(session) as conn:
        result = conn.execute("compute", "GET", "/servers")

Note:
    이 모듈은 Lazy Import 패턴을 사용합니다.
"""

__version__ = "0.1.0"

__all__ = [
    "CloudConnection",
    "LocationServices",
    "SessionContext",
    "ServiceCatalog",
    "CatalogCache",
    "CallResult",
    "CallStatus",
    "ErrorKind",
    "NovaGateError",
    "CloudError",
    "configure_logging",
]

_IMPORT_MAPPING = {
    "CloudConnection": (".connection", "CloudConnection"),
    "LocationServices": (".location", "LocationServices"),
    "SessionContext": (".auth.types", "SessionContext"),
    "ServiceCatalog": (".auth.types", "ServiceCatalog"),
    "CatalogCache": (".auth.cache", "CatalogCache"),
    "CallResult": (".dispatch.dispatcher", "CallResult"),
    "CallStatus": (".dispatch.dispatcher", "CallStatus"),
    "ErrorKind": (".exceptions", "ErrorKind"),
    "NovaGateError": (".exceptions", "NovaGateError"),
    "CloudError": (".exceptions", "CloudError"),
    "configure_logging": (".log", "configure_logging"),
}


def __getattr__(name: str):
    """Lazy import - 실제 사용 시점에만 모듈 로드"""
    if name in _IMPORT_MAPPING:
        module_name, attr_name = _IMPORT_MAPPING[name]
        import importlib

        module = importlib.import_module(module_name, __name__)
        return getattr(module, attr_name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
