"""Unit tests for IdentityService."""

import asyncio

import pytest

from idp.adapter.notification import MockOtpTransport
from idp.domain.error import (
    ConcurrentLoginError,
    DuplicateCredentialError,
    InvalidCredentialsError,
    LastCredentialError,
    NotFoundError,
    OtpVerificationError,
    ValidationError,
)
from idp.domain.model.external_login import ExternalLogin
from idp.domain.repository import ExternalLoginRepository, UserRepository
from idp.domain.service import IdentityService, OtpService
from idp.domain.value import ErrorKind, Identifier, UserId
from tests.harness import create_env_fixture

unit_env = create_env_fixture()

PASSWORD = "correct-horse"


class TestRegister:
    """Tests for register method."""

    @pytest.mark.asyncio
    async def test_register_creates_user_with_hashed_password(self, unit_env):
        # Arrange
        identity_service = await unit_env.get(IdentityService)

        # Act
        user = await identity_service.register("Ada@Example.com", PASSWORD)

        # Assert
        assert user.email == "ada@example.com"
        assert user.password_hash is not None
        assert user.password_hash != PASSWORD
        assert user.is_email_verified is False
        assert user.last_login_at is not None

    @pytest.mark.asyncio
    async def test_register_duplicate_email_case_insensitive(self, unit_env):
        """Two spellings of the same email should collide."""
        identity_service = await unit_env.get(IdentityService)
        await identity_service.register("ada@example.com", PASSWORD)

        with pytest.raises(DuplicateCredentialError):
            await identity_service.register("ADA@example.com", PASSWORD)

    @pytest.mark.asyncio
    async def test_register_rejects_short_password(self, unit_env):
        identity_service = await unit_env.get(IdentityService)

        with pytest.raises(ValidationError):
            await identity_service.register("ada@example.com", "short")

    @pytest.mark.asyncio
    async def test_register_rejects_malformed_email(self, unit_env):
        identity_service = await unit_env.get(IdentityService)

        with pytest.raises(ValidationError):
            await identity_service.register("ada-at-example", PASSWORD)


class TestAuthenticate:
    """Tests for authenticate method."""

    @pytest.mark.asyncio
    async def test_authenticate_with_correct_password(self, unit_env):
        identity_service = await unit_env.get(IdentityService)
        registered = await identity_service.register("ada@example.com", PASSWORD)

        user = await identity_service.authenticate(" ADA@example.com", PASSWORD)

        assert user.id == registered.id

    @pytest.mark.asyncio
    async def test_wrong_password_and_unknown_email_look_the_same(self, unit_env):
        """Failures should not reveal whether the account exists."""
        # Arrange
        identity_service = await unit_env.get(IdentityService)
        await identity_service.register("ada@example.com", PASSWORD)

        # Act
        with pytest.raises(InvalidCredentialsError) as wrong_password:
            await identity_service.authenticate("ada@example.com", "wrong-password")
        with pytest.raises(InvalidCredentialsError) as unknown_email:
            await identity_service.authenticate("nobody@example.com", PASSWORD)

        # Assert
        assert wrong_password.value.message == unknown_email.value.message

    @pytest.mark.asyncio
    async def test_user_without_password_cannot_authenticate(self, unit_env):
        """An OTP-created email account has no password to check."""
        identity_service = await unit_env.get(IdentityService)
        await identity_service.login_by_identifier(Identifier.parse("ada@example.com"))

        with pytest.raises(InvalidCredentialsError):
            await identity_service.authenticate("ada@example.com", PASSWORD)


class TestLoginByIdentifier:
    """Tests for login_by_identifier method."""

    @pytest.mark.asyncio
    async def test_creates_user_for_new_phone(self, unit_env):
        identity_service = await unit_env.get(IdentityService)

        user, created = await identity_service.login_by_identifier(
            Identifier.parse("+15551234567")
        )

        assert created is True
        assert user.phone_number == "+15551234567"
        assert user.is_phone_verified is True
        assert user.email is None

    @pytest.mark.asyncio
    async def test_existing_email_user_is_reused_and_verified(self, unit_env):
        # Arrange
        identity_service = await unit_env.get(IdentityService)
        registered = await identity_service.register("ada@example.com", PASSWORD)

        # Act
        user, created = await identity_service.login_by_identifier(
            Identifier.parse("ada@example.com")
        )

        # Assert
        assert created is False
        assert user.id == registered.id
        assert user.is_email_verified is True
        assert user.password_hash == registered.password_hash


class TestLinkPhone:
    """Tests for link_phone method."""

    @pytest.mark.asyncio
    async def test_link_phone_with_valid_code(self, unit_env):
        # Arrange
        identity_service = await unit_env.get(IdentityService)
        otp_service = await unit_env.get(OtpService)
        transport = await unit_env.get(MockOtpTransport)
        user = await identity_service.register("ada@example.com", PASSWORD)
        await otp_service.send("+15551234567")

        # Act
        updated = await identity_service.link_phone(
            user.id, "+1 555 123 4567", transport.last_code("+15551234567")
        )

        # Assert
        assert updated.phone_number == "+15551234567"
        assert updated.is_phone_verified is True
        assert updated.email == "ada@example.com"

    @pytest.mark.asyncio
    async def test_link_phone_owned_by_other_user(self, unit_env):
        """The ownership check should run before the code is consumed."""
        # Arrange
        identity_service = await unit_env.get(IdentityService)
        otp_service = await unit_env.get(OtpService)
        transport = await unit_env.get(MockOtpTransport)
        await identity_service.login_by_identifier(Identifier.parse("+15551234567"))
        user = await identity_service.register("ada@example.com", PASSWORD)
        await otp_service.send("+15551234567")
        code = transport.last_code("+15551234567")

        # Act & Assert
        with pytest.raises(DuplicateCredentialError):
            await identity_service.link_phone(user.id, "+15551234567", code)
        identifier = await otp_service.verify("+15551234567", code)
        assert identifier.value == "+15551234567"

    @pytest.mark.asyncio
    async def test_link_phone_with_wrong_code(self, unit_env):
        identity_service = await unit_env.get(IdentityService)
        otp_service = await unit_env.get(OtpService)
        user = await identity_service.register("ada@example.com", PASSWORD)
        await otp_service.send("+15551234567")

        with pytest.raises(OtpVerificationError):
            await identity_service.link_phone(user.id, "+15551234567", "000000")

    @pytest.mark.asyncio
    async def test_link_phone_unknown_user(self, unit_env):
        identity_service = await unit_env.get(IdentityService)

        with pytest.raises(NotFoundError):
            await identity_service.link_phone(UserId(999), "+15551234567", "123456")


class TestLinkEmail:
    """Tests for link_email method."""

    @pytest.mark.asyncio
    async def test_link_email_to_phone_user(self, unit_env):
        # Arrange
        identity_service = await unit_env.get(IdentityService)
        user, _ = await identity_service.login_by_identifier(
            Identifier.parse("+15551234567")
        )

        # Act
        updated = await identity_service.link_email(user.id, "ada@example.com", PASSWORD)

        # Assert
        assert updated.email == "ada@example.com"
        assert updated.is_email_verified is False
        authenticated = await identity_service.authenticate("ada@example.com", PASSWORD)
        assert authenticated.id == user.id

    @pytest.mark.asyncio
    async def test_link_email_taken_by_other_user(self, unit_env):
        identity_service = await unit_env.get(IdentityService)
        await identity_service.register("ada@example.com", PASSWORD)
        user, _ = await identity_service.login_by_identifier(
            Identifier.parse("+15551234567")
        )

        with pytest.raises(DuplicateCredentialError, match="another account"):
            await identity_service.link_email(user.id, "ada@example.com", PASSWORD)

    @pytest.mark.asyncio
    async def test_link_email_when_user_already_has_one(self, unit_env):
        identity_service = await unit_env.get(IdentityService)
        user = await identity_service.register("ada@example.com", PASSWORD)

        with pytest.raises(DuplicateCredentialError, match="already has an email"):
            await identity_service.link_email(user.id, "grace@example.com", PASSWORD)


class TestChangeEmail:
    """Tests for request_email_change and change_email."""

    @pytest.mark.asyncio
    async def test_change_email_with_code_sent_to_new_address(self, unit_env):
        # Arrange
        identity_service = await unit_env.get(IdentityService)
        transport = await unit_env.get(MockOtpTransport)
        user = await identity_service.register("ada@example.com", PASSWORD)

        # Act
        sent_to = await identity_service.request_email_change(
            user.id, "Grace@Example.com"
        )
        updated = await identity_service.change_email(
            user.id, "grace@example.com", transport.last_code("grace@example.com")
        )

        # Assert
        assert sent_to.value == "grace@example.com"
        assert transport.last_code("ada@example.com") is None
        assert updated.email == "grace@example.com"
        assert updated.is_email_verified is True
        authenticated = await identity_service.authenticate(
            "grace@example.com", PASSWORD
        )
        assert authenticated.id == user.id
        with pytest.raises(InvalidCredentialsError):
            await identity_service.authenticate("ada@example.com", PASSWORD)

    @pytest.mark.asyncio
    async def test_request_refuses_email_owned_by_other_user(self, unit_env):
        identity_service = await unit_env.get(IdentityService)
        transport = await unit_env.get(MockOtpTransport)
        await identity_service.register("grace@example.com", PASSWORD)
        user = await identity_service.register("ada@example.com", PASSWORD)

        with pytest.raises(DuplicateCredentialError, match="another account"):
            await identity_service.request_email_change(user.id, "grace@example.com")
        assert transport.deliveries == []

    @pytest.mark.asyncio
    async def test_change_refuses_email_taken_after_request(self, unit_env):
        """Ownership is checked again before the code is consumed."""
        # Arrange
        identity_service = await unit_env.get(IdentityService)
        otp_service = await unit_env.get(OtpService)
        transport = await unit_env.get(MockOtpTransport)
        user = await identity_service.register("ada@example.com", PASSWORD)
        await identity_service.request_email_change(user.id, "grace@example.com")
        code = transport.last_code("grace@example.com")
        await identity_service.register("grace@example.com", PASSWORD)

        # Act & Assert
        with pytest.raises(DuplicateCredentialError):
            await identity_service.change_email(user.id, "grace@example.com", code)
        identifier = await otp_service.verify("grace@example.com", code)
        assert identifier.value == "grace@example.com"

    @pytest.mark.asyncio
    async def test_same_email_refused(self, unit_env):
        identity_service = await unit_env.get(IdentityService)
        user = await identity_service.register("ada@example.com", PASSWORD)

        with pytest.raises(ValidationError, match="same as the current"):
            await identity_service.request_email_change(user.id, "ADA@example.com")

    @pytest.mark.asyncio
    async def test_wrong_code_keeps_old_email(self, unit_env):
        identity_service = await unit_env.get(IdentityService)
        user = await identity_service.register("ada@example.com", PASSWORD)
        await identity_service.request_email_change(user.id, "grace@example.com")

        with pytest.raises(OtpVerificationError):
            await identity_service.change_email(user.id, "grace@example.com", "000000")
        assert (await identity_service.get_user(user.id)).email == "ada@example.com"

    @pytest.mark.asyncio
    async def test_code_for_another_address_is_rejected(self, unit_env):
        identity_service = await unit_env.get(IdentityService)
        transport = await unit_env.get(MockOtpTransport)
        user = await identity_service.register("ada@example.com", PASSWORD)
        await identity_service.request_email_change(user.id, "grace@example.com")
        code = transport.last_code("grace@example.com")

        with pytest.raises(OtpVerificationError):
            await identity_service.change_email(user.id, "linus@example.com", code)


class TestLinkExternal:
    """Tests for link_external method."""

    @pytest.mark.asyncio
    async def test_link_external_lowercases_provider(self, unit_env):
        identity_service = await unit_env.get(IdentityService)
        user = await identity_service.register("ada@example.com", PASSWORD)

        login = await identity_service.link_external(
            user.id, "Google", "g-123", provider_email="ada@gmail.com"
        )

        assert login.provider == "google"
        assert login.user_id == user.id
        assert login.provider_email == "ada@gmail.com"

    @pytest.mark.asyncio
    async def test_identity_already_linked_to_same_user(self, unit_env):
        identity_service = await unit_env.get(IdentityService)
        user = await identity_service.register("ada@example.com", PASSWORD)
        await identity_service.link_external(user.id, "google", "g-123")

        with pytest.raises(DuplicateCredentialError, match="your account"):
            await identity_service.link_external(user.id, "google", "g-123")

    @pytest.mark.asyncio
    async def test_identity_linked_to_other_user(self, unit_env):
        identity_service = await unit_env.get(IdentityService)
        ada = await identity_service.register("ada@example.com", PASSWORD)
        grace = await identity_service.register("grace@example.com", PASSWORD)
        await identity_service.link_external(ada.id, "google", "g-123")

        with pytest.raises(DuplicateCredentialError, match="another account"):
            await identity_service.link_external(grace.id, "google", "g-123")

    @pytest.mark.asyncio
    async def test_second_login_for_same_provider(self, unit_env):
        """A user holds at most one login per provider."""
        identity_service = await unit_env.get(IdentityService)
        user = await identity_service.register("ada@example.com", PASSWORD)
        await identity_service.link_external(user.id, "google", "g-123")

        with pytest.raises(DuplicateCredentialError, match="already have"):
            await identity_service.link_external(user.id, "google", "g-456")


class TestUnlinkExternal:
    """Tests for unlink_external method."""

    @pytest.mark.asyncio
    async def test_unlink_when_password_remains(self, unit_env):
        # Arrange
        identity_service = await unit_env.get(IdentityService)
        user = await identity_service.register("ada@example.com", PASSWORD)
        await identity_service.link_external(user.id, "google", "g-123")

        # Act
        await identity_service.unlink_external(user.id, "GOOGLE")

        # Assert
        assert await identity_service.list_external_logins(user.id) == []

    @pytest.mark.asyncio
    async def test_unlink_last_login_method_refused(self, unit_env):
        """A user created by external login has nothing else to fall back on."""
        # Arrange
        identity_service = await unit_env.get(IdentityService)
        user, _ = await identity_service.external_login("google", "g-123")

        # Act & Assert
        with pytest.raises(LastCredentialError) as exc:
            await identity_service.unlink_external(user.id, "google")
        assert exc.value.kind == ErrorKind.LAST_CREDENTIAL
        assert len(await identity_service.list_external_logins(user.id)) == 1

    @pytest.mark.asyncio
    async def test_email_without_password_does_not_count(self, unit_env):
        """An email alone is not a login method."""
        # Arrange
        identity_service = await unit_env.get(IdentityService)
        user_repo = await unit_env.get(UserRepository)
        user, _ = await identity_service.external_login("google", "g-123")
        await user_repo.save(user.model_copy(update={"email": "ada@example.com"}))

        # Act & Assert
        with pytest.raises(LastCredentialError):
            await identity_service.unlink_external(user.id, "google")

    @pytest.mark.asyncio
    async def test_concurrent_unlinks_keep_one_login(self, unit_env):
        """Of two concurrent unlinks on a two-login user, exactly one succeeds."""
        # Arrange
        identity_service = await unit_env.get(IdentityService)
        user, _ = await identity_service.external_login("google", "g-123")
        await identity_service.link_external(user.id, "apple", "a-123")

        # Act
        results = await asyncio.gather(
            identity_service.unlink_external(user.id, "google"),
            identity_service.unlink_external(user.id, "apple"),
            return_exceptions=True,
        )

        # Assert
        failures = [r for r in results if isinstance(r, Exception)]
        assert len(failures) == 1
        assert isinstance(failures[0], LastCredentialError)
        assert len(await identity_service.list_external_logins(user.id)) == 1

    @pytest.mark.asyncio
    async def test_unlink_missing_provider(self, unit_env):
        identity_service = await unit_env.get(IdentityService)
        user = await identity_service.register("ada@example.com", PASSWORD)

        with pytest.raises(NotFoundError):
            await identity_service.unlink_external(user.id, "google")

    @pytest.mark.asyncio
    async def test_unlink_unknown_user(self, unit_env):
        identity_service = await unit_env.get(IdentityService)

        with pytest.raises(NotFoundError):
            await identity_service.unlink_external(UserId(999), "google")


class TestExternalLogin:
    """Tests for external_login method."""

    @pytest.mark.asyncio
    async def test_first_login_creates_bare_user(self, unit_env):
        identity_service = await unit_env.get(IdentityService)

        user, created = await identity_service.external_login(
            "google", "g-123", provider_email="ada@gmail.com"
        )

        assert created is True
        assert user.email is None
        assert user.phone_number is None
        logins = await identity_service.list_external_logins(user.id)
        assert [login.provider_email for login in logins] == ["ada@gmail.com"]

    @pytest.mark.asyncio
    async def test_repeat_login_returns_same_user_and_refreshes_metadata(
        self, unit_env
    ):
        # Arrange
        identity_service = await unit_env.get(IdentityService)
        first, _ = await identity_service.external_login(
            "google", "g-123", provider_display_name="Ada"
        )

        # Act
        second, created = await identity_service.external_login(
            "Google", "g-123", provider_display_name="Ada Lovelace"
        )

        # Assert
        assert created is False
        assert second.id == first.id
        logins = await identity_service.list_external_logins(first.id)
        assert logins[0].provider_display_name == "Ada Lovelace"

    @pytest.mark.asyncio
    async def test_missing_metadata_keeps_stored_values(self, unit_env):
        identity_service = await unit_env.get(IdentityService)
        user, _ = await identity_service.external_login(
            "google", "g-123", provider_email="ada@gmail.com"
        )

        await identity_service.external_login("google", "g-123")

        logins = await identity_service.list_external_logins(user.id)
        assert logins[0].provider_email == "ada@gmail.com"

    @pytest.mark.asyncio
    async def test_lost_race_signs_in_as_winner(self, unit_env):
        """When another request inserts the identity first, use its user."""
        # Arrange
        identity_service = await unit_env.get(IdentityService)
        user_repo = await unit_env.get(UserRepository)
        login_repo = await unit_env.get(ExternalLoginRepository)
        winner, _ = await identity_service.external_login("google", "g-123")

        original_find = login_repo.find_by_provider
        calls = 0

        async def stale_first_lookup(provider, provider_user_id):
            nonlocal calls
            calls += 1
            if calls == 1:
                return None
            return await original_find(provider, provider_user_id)

        login_repo.find_by_provider = stale_first_lookup

        # Act
        user, created = await identity_service.external_login("google", "g-123")

        # Assert
        assert created is False
        assert user.id == winner.id
        assert await user_repo.find_by_id(UserId(winner.id + 1)) is None

    @pytest.mark.asyncio
    async def test_lost_race_with_vanished_winner(self, unit_env):
        # Arrange
        identity_service = await unit_env.get(IdentityService)
        login_repo = await unit_env.get(ExternalLoginRepository)

        async def never_found(provider, provider_user_id):
            return None

        async def always_duplicate(login: ExternalLogin):
            raise DuplicateCredentialError("taken")

        login_repo.find_by_provider = never_found
        login_repo.add = always_duplicate

        # Act & Assert
        with pytest.raises(ConcurrentLoginError):
            await identity_service.external_login("google", "g-123")


class TestChangePassword:
    """Tests for change_password method."""

    @pytest.mark.asyncio
    async def test_change_password(self, unit_env):
        identity_service = await unit_env.get(IdentityService)
        user = await identity_service.register("ada@example.com", PASSWORD)

        await identity_service.change_password(user.id, PASSWORD, "new-password-1")

        with pytest.raises(InvalidCredentialsError):
            await identity_service.authenticate("ada@example.com", PASSWORD)
        assert await identity_service.authenticate("ada@example.com", "new-password-1")

    @pytest.mark.asyncio
    async def test_wrong_current_password(self, unit_env):
        identity_service = await unit_env.get(IdentityService)
        user = await identity_service.register("ada@example.com", PASSWORD)

        with pytest.raises(InvalidCredentialsError):
            await identity_service.change_password(user.id, "wrong-pass", "new-password-1")

    @pytest.mark.asyncio
    async def test_no_password_set(self, unit_env):
        identity_service = await unit_env.get(IdentityService)
        user, _ = await identity_service.external_login("google", "g-123")

        with pytest.raises(ValidationError):
            await identity_service.change_password(user.id, PASSWORD, "new-password-1")


class TestResetPassword:
    """Tests for reset_password method."""

    @pytest.mark.asyncio
    async def test_reset_with_email_code(self, unit_env):
        # Arrange
        identity_service = await unit_env.get(IdentityService)
        otp_service = await unit_env.get(OtpService)
        transport = await unit_env.get(MockOtpTransport)
        await identity_service.register("ada@example.com", PASSWORD)
        await otp_service.send("ada@example.com")

        # Act
        user = await identity_service.reset_password(
            "ada@example.com",
            transport.last_code("ada@example.com"),
            "new-password-1",
        )

        # Assert
        assert user.is_email_verified is True
        assert await identity_service.authenticate("ada@example.com", "new-password-1")

    @pytest.mark.asyncio
    async def test_reset_unknown_account(self, unit_env):
        identity_service = await unit_env.get(IdentityService)

        with pytest.raises(InvalidCredentialsError):
            await identity_service.reset_password(
                "nobody@example.com", "123456", "new-password-1"
            )

    @pytest.mark.asyncio
    async def test_reset_phone_account_without_email(self, unit_env):
        identity_service = await unit_env.get(IdentityService)
        await identity_service.login_by_identifier(Identifier.parse("+15551234567"))

        with pytest.raises(ValidationError, match="no email"):
            await identity_service.reset_password(
                "+15551234567", "123456", "new-password-1"
            )
