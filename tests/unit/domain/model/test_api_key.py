"""Unit tests for ApiKey and User credential rules."""

from datetime import datetime, timedelta, timezone

from idp.domain.model.api_key import ApiKey
from idp.domain.model.user import User
from idp.domain.value import ApiKeyId, UserId

NOW = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


def make_key(**kwargs) -> ApiKey:
    fields = {
        "id": ApiKeyId(1),
        "partner_key": "acme",
        "partner_name": "Acme",
        "key": "pk_acme_" + "a" * 32,
        "key_prefix": "pk_acme_",
    }
    fields.update(kwargs)
    return ApiKey(**fields)


class TestApiKey:
    """Tests for ApiKey checks."""

    def test_admin_grants_every_scope(self):
        api_key = make_key(scopes=["admin"])

        assert api_key.has_scope("users:write") is True
        assert api_key.has_scope("push:send") is True

    def test_no_scopes_grants_nothing(self):
        api_key = make_key(scopes=[])

        assert api_key.has_scope("auth:validate") is False

    def test_empty_or_wildcard_ip_list_admits_anyone(self):
        assert make_key(allowed_ips=[]).allows_ip("203.0.113.9") is True
        assert make_key(allowed_ips=["*"]).allows_ip(None) is True

    def test_ip_list_is_exact_match(self):
        api_key = make_key(allowed_ips=["203.0.113.9"])

        assert api_key.allows_ip("203.0.113.9") is True
        assert api_key.allows_ip("203.0.113.10") is False
        assert api_key.allows_ip(None) is False

    def test_cidr_entries_are_not_interpreted(self):
        api_key = make_key(allowed_ips=["203.0.113.0/24"])

        assert api_key.allows_ip("203.0.113.9") is False

    def test_validity(self):
        assert make_key().is_valid(NOW) is True
        assert make_key(is_active=False).is_valid(NOW) is False
        assert make_key(expires_at=NOW).is_valid(NOW) is False
        assert make_key(expires_at=NOW + timedelta(seconds=1)).is_valid(NOW) is True


class TestUserLoginMethods:
    """Tests for User.login_method_count."""

    def test_email_and_password_count_once(self):
        user = User(id=UserId(1), email="ada@example.com", password_hash="hash")

        assert user.login_method_count(0) == 1

    def test_email_without_password_does_not_count(self):
        user = User(id=UserId(1), email="ada@example.com")

        assert user.login_method_count(0) == 0

    def test_all_methods(self):
        user = User(
            id=UserId(1),
            email="ada@example.com",
            password_hash="hash",
            phone_number="+15551234567",
        )

        assert user.login_method_count(2) == 4
