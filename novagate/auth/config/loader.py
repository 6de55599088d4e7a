# novagate/auth/config/loader.py
"""
novagate 설정 파일 로더

~/.novagate/config 및 ~/.novagate/credentials 파일을 파싱하고
NOVAGATE_* 환경 변수로 값을 덮어씁니다.

설정 파일 형식:
    [default]
    endpoint = https://identity.example.com/v2.0
    account = demo
    region = RegionOne
    provider = OpenStack

    [profile hp]
    endpoint = ks:https://region-a.geo-1.identity.example.com/v2.0
    account = 0123456789abcdef0123456789abcdef
    provider = HP
    insecure = true

credentials 파일 형식 (섹션 이름은 프로파일 이름):
    [default]
    access_key = user
    secret_key = secret
"""

from __future__ import annotations

import configparser
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from pathlib import Path

from novagate.exceptions import ConfigurationError

from ..types import SessionContext

logger = logging.getLogger(__name__)

DEFAULT_PROFILE = "default"
PROFILE_PREFIX = "profile "

# 환경 변수 -> 프로파일 필드
ENV_OVERRIDES = {
    "NOVAGATE_ENDPOINT": "endpoint",
    "NOVAGATE_ACCOUNT": "account",
    "NOVAGATE_REGION": "region",
    "NOVAGATE_ACCESS_KEY": "access_key",
    "NOVAGATE_SECRET_KEY": "secret_key",
    "NOVAGATE_PROVIDER": "provider",
    "NOVAGATE_INSECURE": "insecure",
    "NOVAGATE_PROXY_HOST": "proxy_host",
    "NOVAGATE_PROXY_PORT": "proxy_port",
}

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})


def _parse_bool(value: str | bool | None) -> bool:
    if isinstance(value, bool):
        return value
    return (value or "").strip().lower() in _TRUE_VALUES


def _parse_port(value: str | int | None) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except ValueError as e:
        raise ConfigurationError(f"proxy_port가 숫자가 아닙니다: {value!r}", config_key="proxy_port", cause=e) from e


# =============================================================================
# Data Classes
# =============================================================================


@dataclass
class ConnectionProfile:
    """접속 프로파일 하나

    Attributes:
        name: 프로파일 이름
        endpoint: 인증 엔드포인트
        account: 계정(테넌트) 식별자
        region: 리전
        access_key: 공개 키 (사용자 이름 / 액세스 키)
        secret_key: 비밀 키
        provider: 운영사 이름
        insecure: TLS 검증 생략 여부
        proxy_host: 프록시 호스트
        proxy_port: 프록시 포트
    """

    name: str
    endpoint: str | None = None
    account: str | None = None
    region: str | None = None
    access_key: str | None = None
    secret_key: str | None = None
    provider: str | None = None
    insecure: bool = False
    proxy_host: str | None = None
    proxy_port: int | None = None

    def update(self, values: Mapping[str, str]) -> None:
        """문자열 값으로 필드 갱신 (모르는 키는 무시)"""
        known = {f.name for f in fields(self)} - {"name"}
        for key, value in values.items():
            if key not in known:
                continue
            if key == "insecure":
                self.insecure = _parse_bool(value)
            elif key == "proxy_port":
                self.proxy_port = _parse_port(value)
            else:
                setattr(self, key, value.strip() or None)

    def to_session(self) -> SessionContext:
        """SessionContext로 변환

        Raises:
            ConfigurationError: endpoint/account/access_key/secret_key 누락
        """
        for key in ("endpoint", "account", "access_key", "secret_key"):
            if not getattr(self, key):
                raise ConfigurationError(f"프로파일 '{self.name}'에 {key} 값이 없습니다", config_key=key)

        return SessionContext(
            endpoint=self.endpoint,
            account_id=self.account,
            access_public=self.access_key,
            access_private=self.secret_key,
            region_id=self.region,
            provider_name=self.provider or "OpenStack",
            insecure=self.insecure,
            proxy_host=self.proxy_host,
            proxy_port=self.proxy_port,
        )


@dataclass
class ParsedConfig:
    """파싱된 설정 전체

    Attributes:
        profiles: 프로파일 이름 -> ConnectionProfile
        default_profile: [default] 섹션이 있으면 "default"
        config_path: 설정 파일 경로
        credentials_path: credentials 파일 경로
    """

    profiles: dict[str, ConnectionProfile] = field(default_factory=dict)
    default_profile: str | None = None
    config_path: str | None = None
    credentials_path: str | None = None


# =============================================================================
# Loader
# =============================================================================


class Loader:
    """novagate 설정 파일 로더"""

    def __init__(
        self,
        config_path: str | None = None,
        credentials_path: str | None = None,
        environ: Mapping[str, str] | None = None,
    ):
        """Loader 초기화

        Args:
            config_path: 설정 파일 경로 (기본: ~/.novagate/config)
            credentials_path: credentials 파일 경로 (기본: ~/.novagate/credentials)
            environ: 환경 변수 (기본: os.environ)
        """
        base_dir = Path.home() / ".novagate"
        self.config_path = Path(config_path) if config_path else base_dir / "config"
        self.credentials_path = Path(credentials_path) if credentials_path else base_dir / "credentials"
        self._environ = environ if environ is not None else os.environ

    def _read(self, path: Path) -> configparser.ConfigParser:
        parser = configparser.ConfigParser(interpolation=None)
        if not path.exists():
            return parser
        try:
            parser.read(path, encoding="utf-8")
        except configparser.Error as e:
            raise ConfigurationError(f"설정 파일 파싱 실패: {path}", cause=e) from e
        return parser

    def load(self) -> ParsedConfig:
        """설정 파일과 credentials 파일을 읽어 병합

        Returns:
            ParsedConfig

        Raises:
            ConfigurationError: 파일 파싱 실패
        """
        result = ParsedConfig(
            config_path=str(self.config_path),
            credentials_path=str(self.credentials_path),
        )

        config = self._read(self.config_path)
        for section in config.sections():
            if section == DEFAULT_PROFILE:
                name = DEFAULT_PROFILE
            elif section.startswith(PROFILE_PREFIX):
                name = section[len(PROFILE_PREFIX) :].strip()
            else:
                logger.debug("알 수 없는 설정 섹션 무시: [%s]", section)
                continue
            profile = result.profiles.setdefault(name, ConnectionProfile(name=name))
            profile.update(dict(config.items(section)))

        credentials = self._read(self.credentials_path)
        for name in credentials.sections():
            profile = result.profiles.setdefault(name, ConnectionProfile(name=name))
            profile.update(dict(credentials.items(name)))

        if DEFAULT_PROFILE in result.profiles:
            result.default_profile = DEFAULT_PROFILE
        return result

    def load_profile(self, name: str | None = None) -> ConnectionProfile:
        """프로파일 하나를 읽고 환경 변수로 덮어씀

        Args:
            name: 프로파일 이름 (None이면 NOVAGATE_PROFILE 또는 "default")

        Returns:
            ConnectionProfile

        Raises:
            ConfigurationError: 프로파일이 없고 환경 변수도 없는 경우
        """
        name = name or self._environ.get("NOVAGATE_PROFILE") or DEFAULT_PROFILE
        parsed = self.load()

        overrides = {key: self._environ[env] for env, key in ENV_OVERRIDES.items() if self._environ.get(env)}
        profile = parsed.profiles.get(name)
        if profile is None:
            if not overrides:
                raise ConfigurationError(f"프로파일을 찾을 수 없습니다: {name}", config_key="profile")
            profile = ConnectionProfile(name=name)

        profile.update(overrides)
        return profile

    def list_profiles(self) -> list[str]:
        """프로파일 이름 목록"""
        return list(self.load().profiles.keys())


# =============================================================================
# 모듈 레벨 편의 함수
# =============================================================================


def load_config(config_path: str | None = None, credentials_path: str | None = None) -> ParsedConfig:
    """설정 파일 로드"""
    return Loader(config_path, credentials_path).load()


def list_profiles(config_path: str | None = None, credentials_path: str | None = None) -> list[str]:
    """프로파일 이름 목록"""
    return Loader(config_path, credentials_path).list_profiles()
