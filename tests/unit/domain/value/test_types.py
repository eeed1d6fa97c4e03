"""Unit tests for identity value objects."""

import pytest
from pydantic import ValidationError

from idp.domain.value import (
    ApiScope,
    EmailAddress,
    Identifier,
    IdentifierKind,
    PartnerKey,
    PhoneNumber,
    ProviderName,
)


class TestIdentifier:
    """Tests for Identifier.parse."""

    def test_email_is_trimmed_and_lowercased(self):
        identifier = Identifier.parse("  Ada.Lovelace@Example.COM ")

        assert identifier.kind == IdentifierKind.EMAIL
        assert identifier.value == "ada.lovelace@example.com"
        assert identifier.is_email is True

    def test_phone_spellings_collapse(self):
        """Formatting differences in the same number normalize alike."""
        a = Identifier.parse("+1 (555) 123-4567")
        b = Identifier.parse("15551234567")

        assert a == b
        assert a.kind == IdentifierKind.PHONE
        assert str(a) == "+15551234567"

    @pytest.mark.parametrize("raw", ["", "hello", "@example.com", "+0123", "12"])
    def test_invalid_identifiers(self, raw):
        with pytest.raises((ValidationError, ValueError)):
            Identifier.parse(raw)


class TestValueObjects:
    """Tests for single-value wrappers."""

    def test_email_equality_after_normalization(self):
        assert EmailAddress("ADA@example.com") == EmailAddress("ada@example.com")

    def test_phone_requires_e164_length(self):
        with pytest.raises(ValidationError):
            PhoneNumber("+1234")

    def test_provider_lowercased(self):
        assert ProviderName(" Google ").root == "google"

    def test_provider_cannot_be_blank(self):
        with pytest.raises(ValidationError):
            ProviderName("   ")

    @pytest.mark.parametrize("raw", ["Acme", "acme corp", "acme_corp", "a" * 51])
    def test_invalid_partner_keys(self, raw):
        with pytest.raises(ValidationError):
            PartnerKey(raw)

    def test_scope_values(self):
        assert "admin" in ApiScope.values()
        assert "auth:validate" in ApiScope.values()
