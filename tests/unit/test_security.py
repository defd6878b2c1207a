"""
Tests for error sanitizing and trigger secret checks.
"""

import pytest

from capsule.api.shared.exceptions import ForbiddenError, UnauthorizedError
from capsule.api.shared.security import check_cron_secret, extract_bearer_token
from capsule.core.config import CapsuleSettings
from capsule.core.security import MAX_ERROR_LENGTH, sanitize_error_message, secrets_match


class TestSanitizeErrorMessage:

    def test_redacts_connection_string(self):
        error = RuntimeError("connect failed: postgresql://user:pw@db.internal:5432/capsule")
        assert "pw@" not in sanitize_error_message(error)
        assert "[database]" in sanitize_error_message(error)

    def test_redacts_bearer_and_api_key(self):
        error = RuntimeError("Authorization: Bearer abc.def and re_123456789abcdef")
        message = sanitize_error_message(error)
        assert "abc.def" not in message
        assert "re_123456789abcdef" not in message

    def test_redacts_file_paths(self):
        message = sanitize_error_message(RuntimeError('File "/srv/app/capsule/x.py", line 12'))
        assert "/srv/app" not in message
        assert "line [N]" in message

    def test_truncates(self):
        message = sanitize_error_message(RuntimeError("x" * 2000))
        assert len(message) == MAX_ERROR_LENGTH

    def test_empty_message_uses_type_name(self):
        assert sanitize_error_message(TimeoutError()) == "TimeoutError"


class TestSecrets:

    def test_secrets_match(self):
        assert secrets_match("s3cret", "s3cret")
        assert not secrets_match("s3cret", "other")
        assert not secrets_match(None, "s3cret")
        assert not secrets_match("", "")

    def test_extract_bearer_token(self):
        assert extract_bearer_token("Bearer abc") == "abc"
        assert extract_bearer_token("bearer abc") == "abc"
        assert extract_bearer_token("Basic abc") is None
        assert extract_bearer_token("Bearer ") is None
        assert extract_bearer_token(None) is None


class TestCheckCronSecret:

    def _settings(self, monkeypatch, environment="development", secret=None) -> CapsuleSettings:
        monkeypatch.setenv("ENVIRONMENT", environment)
        if secret is None:
            monkeypatch.delenv("CRON_SECRET", raising=False)
        else:
            monkeypatch.setenv("CRON_SECRET", secret)
        return CapsuleSettings()

    def test_configured_secret_required(self, monkeypatch):
        settings = self._settings(monkeypatch, secret="s3cret")
        check_cron_secret(settings, "Bearer s3cret")
        with pytest.raises(UnauthorizedError):
            check_cron_secret(settings, "Bearer wrong")
        with pytest.raises(UnauthorizedError):
            check_cron_secret(settings, None)

    def test_unconfigured_secret_allowed_outside_production(self, monkeypatch):
        settings = self._settings(monkeypatch)
        check_cron_secret(settings, None)

    def test_unconfigured_secret_refused_in_production(self, monkeypatch):
        settings = self._settings(monkeypatch, environment="production")
        with pytest.raises(ForbiddenError):
            check_cron_secret(settings, "Bearer anything")
