# tests/novagate/auth/test_authenticator_plan.py
"""
novagate/auth/authenticator.py 단위 테스트

Dialect 시도 순서, 첫 성공 반환, 거부/치명적 실패 처리 테스트.
"""

from unittest.mock import MagicMock

import pytest

from novagate.auth.authenticator import Authenticator, DialectPlan, select_dialects
from novagate.auth.types import Authenticated, HardFailure, Rejected, SessionContext
from novagate.exceptions import AuthenticationFailedError, CommunicationError, ErrorKind, InternalError


def _session(endpoint):
    return SessionContext(endpoint=endpoint, account_id="demo", access_public="u", access_private="p")


class RecordingDialect:
    """시도 기록용 Dialect 대역"""

    def __init__(self, name, outcome, log):
        self._name = name
        self._outcome = outcome
        self._log = log

    def name(self):
        return self._name

    def attempt(self, session, endpoint):
        self._log.append((self._name, endpoint))
        return self._outcome


def _dialects(log, catalog, winners=(), hard=None):
    result = {}
    for name in ("keystone", "legacy", "swift"):
        if name == hard:
            outcome = HardFailure(name, CommunicationError("communication", details="down"))
        elif name in winners:
            outcome = Authenticated(catalog)
        else:
            outcome = Rejected(name, "HTTP 401")
        result[name] = RecordingDialect(name, outcome, log)
    return result


class TestSelectDialects:
    """select_dialects 테스트"""

    @pytest.mark.parametrize(
        "endpoint,order,stripped",
        [
            ("ks:https://example.com/v2.0", ("keystone",), "https://example.com/v2.0"),
            ("st:https://example.com/v1.0", ("legacy",), "https://example.com/v1.0"),
            ("https://auth.example.com/v1.0", ("legacy", "swift", "keystone"), "https://auth.example.com/v1.0"),
            ("https://auth.example.com/v1.0/", ("legacy", "swift", "keystone"), "https://auth.example.com/v1.0/"),
            ("https://auth.example.com/v1.1", ("legacy", "swift", "keystone"), "https://auth.example.com/v1.1"),
            ("https://auth.example.com/v1.1/", ("legacy", "swift", "keystone"), "https://auth.example.com/v1.1/"),
            ("https://identity.example.com/v2.0", ("keystone", "legacy", "swift"), "https://identity.example.com/v2.0"),
            ("https://identity.example.com", ("keystone", "legacy", "swift"), "https://identity.example.com"),
        ],
    )
    def test_order(self, endpoint, order, stripped):
        plan = select_dialects(endpoint)
        assert plan == DialectPlan(order, stripped)


class TestAuthenticator:
    """Authenticator 테스트"""

    def test_first_non_rejecting_wins(self, catalog):
        """keystone 거부 -> legacy 성공, swift는 시도하지 않음"""
        log = []
        authenticator = Authenticator(MagicMock(), dialects=_dialects(log, catalog, winners=("legacy", "swift")))

        result = authenticator.authenticate(_session("https://identity.example.com/v2.0"))

        assert result is catalog
        assert [name for name, _ in log] == ["keystone", "legacy"]

    def test_legacy_marker_falls_through_in_order(self, catalog):
        """1.0 엔드포인트: legacy 거부 -> swift 거부 -> keystone 성공"""
        log = []
        authenticator = Authenticator(MagicMock(), dialects=_dialects(log, catalog, winners=("keystone",)))

        result = authenticator.authenticate(_session("https://auth.example.com/v1.0"))

        assert result is catalog
        assert [name for name, _ in log] == ["legacy", "swift", "keystone"]

    def test_all_rejected(self, catalog):
        """모두 거부하면 인증 실패 오류"""
        log = []
        authenticator = Authenticator(MagicMock(), dialects=_dialects(log, catalog))

        with pytest.raises(AuthenticationFailedError) as exc_info:
            authenticator.authenticate(_session("https://auth.example.com/v1.0"))

        assert [name for name, _ in log] == ["legacy", "swift", "keystone"]
        assert exc_info.value.code == 401
        assert exc_info.value.kind == ErrorKind.AUTHENTICATION

    def test_hard_failure_stops(self, catalog):
        """치명적 실패는 즉시 전파, 다음 방식 시도 안 함"""
        log = []
        authenticator = Authenticator(
            MagicMock(), dialects=_dialects(log, catalog, winners=("legacy",), hard="keystone")
        )

        with pytest.raises(CommunicationError):
            authenticator.authenticate(_session("https://identity.example.com/v2.0"))

        assert [name for name, _ in log] == ["keystone"]

    def test_prefix_stripped(self, catalog):
        log = []
        authenticator = Authenticator(MagicMock(), dialects=_dialects(log, catalog, winners=("keystone",)))
        authenticator.authenticate(_session("ks:https://example.com/v2.0"))
        assert log == [("keystone", "https://example.com/v2.0")]

    def test_forced_dialect_rejected(self, catalog):
        """st: 접두어는 legacy만 시도"""
        log = []
        authenticator = Authenticator(MagicMock(), dialects=_dialects(log, catalog, winners=("keystone",)))
        with pytest.raises(AuthenticationFailedError):
            authenticator.authenticate(_session("st:https://example.com/v1.0"))
        assert [name for name, _ in log] == ["legacy"]

    def test_attempts_counter(self, catalog):
        authenticator = Authenticator(MagicMock(), dialects=_dialects([], catalog, winners=("keystone",)))
        assert authenticator.attempts == 0
        authenticator.authenticate(_session("https://identity.example.com/v2.0"))
        authenticator.authenticate(_session("https://identity.example.com/v2.0"))
        assert authenticator.attempts == 2

    def test_unknown_dialect(self, catalog):
        authenticator = Authenticator(
            MagicMock(),
            dialects={},
            planner=lambda endpoint: DialectPlan(("missing",), endpoint),
        )
        with pytest.raises(InternalError):
            authenticator.authenticate(_session("https://identity.example.com"))

    def test_default_dialects_end_to_end(self, fake_transport, make_response, keystone_access):
        """실제 Dialect: legacy 403 -> swift 401 -> keystone 성공"""
        fake_transport.queue(
            make_response(403),
            make_response(401),
            make_response(200, keystone_access()),
        )
        authenticator = Authenticator(fake_transport)

        catalog = authenticator.authenticate(_session("https://auth.example.com/v1.0"))

        assert catalog.auth_token == "tok-1"
        assert [r.method for r in fake_transport.requests] == ["GET", "GET", "POST"]
        assert fake_transport.requests[2].url == "https://auth.example.com/v1.0/tokens"
