"""
Tests for token issuance and verification.
"""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import jwt
import pytest

from core.errors import AuthenticationFailure, ConfigurationError
from core.roles import Role
from core.tokens import TokenService

SECRET = "unit-test-secret-abcdefghijklmnopqrstuvwxyz"


def _service(**overrides) -> TokenService:
    kwargs = dict(
        secret_key=SECRET,
        issuer="SmartVillageAPI",
        audience="SmartVillageClient",
        expire_minutes=60,
        clock_skew_seconds=300,
    )
    kwargs.update(overrides)
    return TokenService(**kwargs)


def _identity(**overrides):
    fields = dict(id=42, email="a@b.com", full_name="Asha Patil", role="Resident")
    fields.update(overrides)
    return SimpleNamespace(**fields)


def _raw_token(payload: dict, secret: str = SECRET) -> str:
    now = datetime.now(timezone.utc)
    claims = {
        "sub": "42",
        "email": "a@b.com",
        "name": "Asha Patil",
        "role": "Resident",
        "jti": "fixed-jti",
        "iss": "SmartVillageAPI",
        "aud": "SmartVillageClient",
        "iat": now,
        "exp": now + timedelta(minutes=5),
    }
    claims.update(payload)
    return jwt.encode(claims, secret, algorithm="HS256")


class TestRoundTrip:
    def test_verify_returns_issued_claims(self):
        service = _service()
        claims = service.verify(service.issue(_identity()))
        assert claims.subject == 42
        assert claims.email == "a@b.com"
        assert claims.name == "Asha Patil"
        assert claims.role is Role.RESIDENT
        assert not claims.is_admin

    def test_admin_role_round_trip(self):
        service = _service()
        claims = service.verify(service.issue(_identity(role="Admin")))
        assert claims.role is Role.ADMIN
        assert claims.is_admin

    def test_each_token_gets_a_fresh_id(self):
        service = _service()
        a = service.verify(service.issue(_identity()))
        b = service.verify(service.issue(_identity()))
        assert a.token_id != b.token_id

    def test_expiry_follows_configured_lifetime(self):
        service = _service(expire_minutes=15)
        issued_at = datetime.now(timezone.utc).replace(microsecond=0)
        claims = service.verify(service.issue(_identity(), now=issued_at))
        assert claims.expires_at == issued_at + timedelta(minutes=15)

    def test_standard_claims_are_present(self):
        token = _service().issue(_identity())
        payload = jwt.decode(token, options={"verify_signature": False})
        assert payload["sub"] == "42"
        assert payload["iss"] == "SmartVillageAPI"
        assert payload["aud"] == "SmartVillageClient"
        assert {"jti", "iat", "exp"} <= payload.keys()


class TestExpiry:
    def test_expired_token_is_rejected(self):
        service = _service()
        issued_at = datetime.now(timezone.utc) - timedelta(hours=2)
        token = service.issue(_identity(), now=issued_at)
        with pytest.raises(AuthenticationFailure):
            service.verify(token)

    def test_recently_expired_token_is_accepted_within_clock_skew(self):
        service = _service()
        issued_at = datetime.now(timezone.utc) - timedelta(minutes=61)
        token = service.verify(service.issue(_identity(), now=issued_at))
        assert token.subject == 42

    def test_zero_skew_rejects_recently_expired_token(self):
        service = _service(clock_skew_seconds=0)
        issued_at = datetime.now(timezone.utc) - timedelta(minutes=61)
        token = service.issue(_identity(), now=issued_at)
        with pytest.raises(AuthenticationFailure):
            service.verify(token)


class TestRejection:
    def test_token_signed_with_other_secret_is_rejected(self):
        token = _service(secret_key="another-secret-abcdefghijklmnopqrstuvwxyz").issue(_identity())
        with pytest.raises(AuthenticationFailure):
            _service().verify(token)

    def test_wrong_issuer_is_rejected(self):
        token = _service(issuer="SomeoneElse").issue(_identity())
        with pytest.raises(AuthenticationFailure):
            _service().verify(token)

    def test_wrong_audience_is_rejected(self):
        token = _service(audience="OtherClient").issue(_identity())
        with pytest.raises(AuthenticationFailure):
            _service().verify(token)

    @pytest.mark.parametrize("token", ["", "garbage", "a.b.c", "Bearer x.y.z"])
    def test_malformed_token_is_rejected(self, token):
        with pytest.raises(AuthenticationFailure):
            _service().verify(token)

    def test_tampered_payload_is_rejected(self):
        token = _service().issue(_identity())
        header, payload, signature = token.split(".")
        forged = _raw_token({"role": "Admin"}).split(".")[1]
        with pytest.raises(AuthenticationFailure):
            _service().verify(f"{header}.{forged}.{signature}")

    def test_non_numeric_subject_is_rejected(self):
        with pytest.raises(AuthenticationFailure):
            _service().verify(_raw_token({"sub": "not-a-number"}))

    def test_missing_email_is_rejected(self):
        with pytest.raises(AuthenticationFailure):
            _service().verify(_raw_token({"email": ""}))

    def test_missing_jti_is_rejected(self):
        token = _raw_token({})
        payload = jwt.decode(token, options={"verify_signature": False})
        del payload["jti"]
        with pytest.raises(AuthenticationFailure):
            _service().verify(jwt.encode(payload, SECRET, algorithm="HS256"))


class TestRoleClaim:
    def test_unknown_role_parses_as_unrecognized(self):
        claims = _service().verify(_raw_token({"role": "Superuser"}))
        assert claims.role is Role.UNRECOGNIZED
        assert not claims.is_admin

    def test_absent_role_parses_as_unrecognized(self):
        token = _raw_token({})
        payload = jwt.decode(token, options={"verify_signature": False})
        del payload["role"]
        claims = _service().verify(jwt.encode(payload, SECRET, algorithm="HS256"))
        assert claims.role is Role.UNRECOGNIZED

    def test_role_match_is_case_sensitive(self):
        claims = _service().verify(_raw_token({"role": "admin"}))
        assert claims.role is Role.UNRECOGNIZED


class TestConfiguration:
    @pytest.mark.parametrize("secret", ["", "   ", "too-short"])
    def test_weak_secret_is_a_configuration_error(self, secret):
        with pytest.raises(ConfigurationError):
            _service(secret_key=secret)

    def test_asymmetric_algorithm_is_a_configuration_error(self):
        with pytest.raises(ConfigurationError):
            _service(algorithm="RS256")

    def test_missing_issuer_is_a_configuration_error(self):
        with pytest.raises(ConfigurationError):
            _service(issuer="")

    def test_from_settings(self, test_settings):
        service = TokenService.from_settings(test_settings)
        assert service.issuer == test_settings.jwt_issuer
        assert service.lifetime == timedelta(minutes=test_settings.access_token_expire_minutes)
        assert service.leeway == timedelta(seconds=test_settings.clock_skew_seconds)
