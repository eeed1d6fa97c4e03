"""Identity linking domain service.

Every operation that changes which credentials point at a user goes through
here. Two rules hold throughout:

- an email, phone number or provider identity belongs to at most one user
- a user always keeps at least one way to authenticate
"""

from typing import Optional

import logfire
from pydantic import ValidationError as PydanticValidationError

from idp.config import AuthSettings
from idp.domain.error import (
    ConcurrentLoginError,
    DuplicateCredentialError,
    InvalidCredentialsError,
    LastCredentialError,
    NotFoundError,
    ValidationError,
)
from idp.domain.model.external_login import ExternalLogin
from idp.domain.model.user import User
from idp.domain.repository import ExternalLoginRepository, UserRepository
from idp.domain.value import (
    EmailAddress,
    Identifier,
    PhoneNumber,
    ProviderName,
    UserId,
)
from idp.util.clock import Clock
from idp.util.password import MAX_PASSWORD_BYTES, hash_password, verify_password

from .base import Service
from .otp_service import OtpService, parse_identifier

MIN_PASSWORD_LENGTH = 8


def _email(raw: str) -> str:
    try:
        return EmailAddress(raw).root
    except PydanticValidationError:
        raise ValidationError("Enter a valid email address.")


def _phone(raw: str) -> str:
    try:
        return PhoneNumber(raw).root
    except PydanticValidationError:
        raise ValidationError("Enter a valid phone number.")


def _provider(raw: str) -> str:
    try:
        return ProviderName(raw).root
    except PydanticValidationError:
        raise ValidationError("Provider name is required.")


def _check_password(password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters."
        )
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes.")


class IdentityService(Service):
    """Domain service reconciling a user's credentials."""

    def __init__(
        self,
        user_repository: UserRepository,
        external_login_repository: ExternalLoginRepository,
        otp_service: OtpService,
        auth_settings: AuthSettings,
        clock: Clock,
    ) -> None:
        """Initialize identity service.

        Args:
            user_repository: User repository
            external_login_repository: External login repository
            otp_service: Verifies codes for phone linking and password reset
            auth_settings: Authentication settings (bcrypt cost)
            clock: Time source
        """
        self.user_repository = user_repository
        self.external_login_repository = external_login_repository
        self.otp_service = otp_service
        self.auth_settings = auth_settings
        self.clock = clock

    def _hash(self, password: str) -> str:
        return hash_password(password, rounds=self.auth_settings.bcrypt_rounds)

    async def get_user(self, user_id: UserId) -> User:
        """Get a user by ID.

        Raises:
            NotFoundError: If user doesn't exist
        """
        user = await self.user_repository.find_by_id(user_id)
        if not user:
            raise NotFoundError("User", str(user_id))
        return user

    async def find_by_identifier(self, identifier: Identifier) -> Optional[User]:
        """Find the user owning an email or phone identifier."""
        if identifier.is_email:
            return await self.user_repository.find_by_email(identifier.value)
        return await self.user_repository.find_by_phone(identifier.value)

    async def record_login(self, user: User) -> User:
        """Stamp the last-login time."""
        return await self.user_repository.save(
            user.model_copy(update={"last_login_at": self.clock.now()})
        )

    async def register(self, email: str, password: str) -> User:
        """Create an account with email and password.

        Raises:
            ValidationError: If email or password is malformed
            DuplicateCredentialError: If the email is taken
        """
        email = _email(email)
        _check_password(password)

        with logfire.span("identity_service.register"):
            if await self.user_repository.find_by_email(email):
                raise DuplicateCredentialError("Email is already registered.")

            now = self.clock.now()
            user = User(
                id=await self.user_repository.next_id(),
                email=email,
                password_hash=self._hash(password),
                created_at=now,
                last_login_at=now,
            )
            user = await self.user_repository.save(user)
            logfire.info("User registered", user_id=user.id)
            return user

    async def authenticate(self, email: str, password: str) -> User:
        """Check email and password.

        Raises:
            InvalidCredentialsError: On any failure, with one fixed message
        """
        with logfire.span("identity_service.authenticate"):
            try:
                email = _email(email)
            except ValidationError:
                raise InvalidCredentialsError()

            user = await self.user_repository.find_by_email(email)
            if (
                user is None
                or not user.password_hash
                or not verify_password(password, user.password_hash)
            ):
                logfire.info("Password login rejected")
                raise InvalidCredentialsError()

            return await self.record_login(user)

    async def login_by_identifier(self, identifier: Identifier) -> tuple[User, bool]:
        """Find or create the user for a verified identifier.

        Call only after the OTP for ``identifier`` has been verified.

        Returns:
            The user and whether it was created by this call
        """
        with logfire.span("identity_service.login_by_identifier"):
            now = self.clock.now()
            user = await self.find_by_identifier(identifier)
            created = user is None

            if user is None:
                user = User(id=await self.user_repository.next_id(), created_at=now)

            if identifier.is_email:
                update = {"email": identifier.value, "is_email_verified": True}
            else:
                update = {"phone_number": identifier.value, "is_phone_verified": True}
            update["last_login_at"] = now
            if not created:
                update["updated_at"] = now

            user = await self.user_repository.save(user.model_copy(update=update))
            logfire.info("OTP login", user_id=user.id, created=created)
            return user, created

    async def link_phone(self, user_id: UserId, phone: str, code: str) -> User:
        """Attach a phone number verified by OTP.

        An existing phone on the account is replaced.

        Raises:
            NotFoundError: If the user doesn't exist
            DuplicateCredentialError: If another user owns the phone
            OtpVerificationError: If the code is rejected
        """
        phone = _phone(phone)
        with logfire.span("identity_service.link_phone", user_id=user_id):
            user = await self.get_user(user_id)

            owner = await self.user_repository.find_by_phone(phone)
            if owner and owner.id != user.id:
                raise DuplicateCredentialError(
                    "This phone number is already linked to another account."
                )

            await self.otp_service.verify(phone, code)

            user = await self.user_repository.save(
                user.model_copy(
                    update={
                        "phone_number": phone,
                        "is_phone_verified": True,
                        "updated_at": self.clock.now(),
                    }
                )
            )
            logfire.info("Phone linked", user_id=user.id)
            return user

    async def link_email(self, user_id: UserId, email: str, password: str) -> User:
        """Attach an email and password to an account that has no email.

        Raises:
            NotFoundError: If the user doesn't exist
            DuplicateCredentialError: If the email is taken or the user has one
        """
        email = _email(email)
        _check_password(password)

        with logfire.span("identity_service.link_email", user_id=user_id):
            user = await self.get_user(user_id)

            owner = await self.user_repository.find_by_email(email)
            if owner and owner.id != user.id:
                raise DuplicateCredentialError(
                    "This email is already registered to another account."
                )
            if user.email:
                raise DuplicateCredentialError(
                    "This account already has an email address."
                )

            user = await self.user_repository.save(
                user.model_copy(
                    update={
                        "email": email,
                        "password_hash": self._hash(password),
                        "is_email_verified": False,
                        "updated_at": self.clock.now(),
                    }
                )
            )
            logfire.info("Email linked", user_id=user.id)
            return user

    async def _check_new_email(self, user: User, email: str) -> None:
        if user.email == email:
            raise ValidationError("New email is the same as the current email.")
        owner = await self.user_repository.find_by_email(email)
        if owner and owner.id != user.id:
            raise DuplicateCredentialError(
                "This email is already registered to another account."
            )

    async def request_email_change(self, user_id: UserId, new_email: str) -> Identifier:
        """Send a code to the address a user wants to move to.

        Raises:
            NotFoundError: If the user doesn't exist
            ValidationError: If the email is malformed or unchanged
            DuplicateCredentialError: If another user owns the email
            RateLimitedError: If the address is throttled
        """
        email = _email(new_email)
        with logfire.span("identity_service.request_email_change", user_id=user_id):
            user = await self.get_user(user_id)
            await self._check_new_email(user, email)
            return await self.otp_service.send(email)

    async def change_email(self, user_id: UserId, new_email: str, code: str) -> User:
        """Replace the email with one proven by an OTP sent to it.

        The password, if any, is kept and now pairs with the new address.

        Raises:
            NotFoundError: If the user doesn't exist
            ValidationError: If the email is malformed or unchanged
            DuplicateCredentialError: If another user owns the email
            OtpVerificationError: If the code is rejected
        """
        email = _email(new_email)
        with logfire.span("identity_service.change_email", user_id=user_id):
            user = await self.get_user(user_id)
            # Ownership first, so a code is not spent on a doomed change
            await self._check_new_email(user, email)

            await self.otp_service.verify(email, code)

            user = await self.user_repository.save(
                user.model_copy(
                    update={
                        "email": email,
                        "is_email_verified": True,
                        "updated_at": self.clock.now(),
                    }
                )
            )
            logfire.info("Email changed", user_id=user.id)
            return user

    async def link_external(
        self,
        user_id: UserId,
        provider: str,
        provider_user_id: str,
        provider_email: Optional[str] = None,
        provider_display_name: Optional[str] = None,
    ) -> ExternalLogin:
        """Bind a provider identity to an existing user.

        Raises:
            NotFoundError: If the user doesn't exist
            DuplicateCredentialError: If the identity is claimed by anyone, or
                the user already has a login for this provider
        """
        provider = _provider(provider)
        with logfire.span(
            "identity_service.link_external", user_id=user_id, provider=provider
        ):
            user = await self.get_user(user_id)

            existing = await self.external_login_repository.find_by_provider(
                provider, provider_user_id
            )
            if existing:
                if existing.user_id == user.id:
                    raise DuplicateCredentialError(
                        f"This {provider} account is already linked to your account."
                    )
                raise DuplicateCredentialError(
                    f"This {provider} account is already linked to another account."
                )

            if await self.external_login_repository.find_by_user_and_provider(
                user.id, provider
            ):
                raise DuplicateCredentialError(
                    f"You already have a {provider} account linked."
                )

            now = self.clock.now()
            login = await self.external_login_repository.add(
                ExternalLogin(
                    id=await self.external_login_repository.next_id(),
                    user_id=user.id,
                    provider=provider,
                    provider_user_id=provider_user_id,
                    provider_email=provider_email,
                    provider_display_name=provider_display_name,
                    created_at=now,
                    last_used_at=now,
                )
            )
            logfire.info("External login linked", user_id=user.id, provider=provider)
            return login

    async def unlink_external(self, user_id: UserId, provider: str) -> None:
        """Remove a provider identity, never the last login method.

        The count and the delete run under the per-user lock so two
        concurrent unlinks cannot both pass the check.

        Raises:
            NotFoundError: If the user or the provider login doesn't exist
            LastCredentialError: If this is the user's only login method
        """
        provider = _provider(provider)
        with logfire.span(
            "identity_service.unlink_external", user_id=user_id, provider=provider
        ):
            async with self.user_repository.locked(user_id) as user:
                if user is None:
                    raise NotFoundError("User", str(user_id))

                login = await self.external_login_repository.find_by_user_and_provider(
                    user.id, provider
                )
                if login is None:
                    raise NotFoundError("External login", provider)

                count = await self.external_login_repository.count_by_user_id(user.id)
                if user.login_method_count(count) <= 1:
                    logfire.info("Unlink refused: last login method", user_id=user.id)
                    raise LastCredentialError()

                await self.external_login_repository.delete(login.id)
                logfire.info(
                    "External login unlinked", user_id=user.id, provider=provider
                )

    async def external_login(
        self,
        provider: str,
        provider_user_id: str,
        provider_email: Optional[str] = None,
        provider_display_name: Optional[str] = None,
    ) -> tuple[User, bool]:
        """Sign in with a provider identity, creating a bare user if new.

        If a concurrent first login for the same identity wins the insert,
        the user created here is deleted again and the caller is signed in
        as the winner's user.

        Returns:
            The user and whether it was created by this call

        Raises:
            NotFoundError: If the identity points at a missing user
            ConcurrentLoginError: If the identity was claimed concurrently
                and then vanished before it could be read back
        """
        provider = _provider(provider)
        with logfire.span("identity_service.external_login", provider=provider):
            existing = await self.external_login_repository.find_by_provider(
                provider, provider_user_id
            )
            if existing:
                user = await self._use_external_login(
                    existing, provider_email, provider_display_name
                )
                return user, False

            now = self.clock.now()
            user = await self.user_repository.save(
                User(
                    id=await self.user_repository.next_id(),
                    created_at=now,
                    last_login_at=now,
                )
            )
            try:
                await self.external_login_repository.add(
                    ExternalLogin(
                        id=await self.external_login_repository.next_id(),
                        user_id=user.id,
                        provider=provider,
                        provider_user_id=provider_user_id,
                        provider_email=provider_email,
                        provider_display_name=provider_display_name,
                        created_at=now,
                        last_used_at=now,
                    )
                )
            except DuplicateCredentialError:
                logfire.warn("External login race lost", provider=provider)
                await self.user_repository.delete(user.id)
                existing = await self.external_login_repository.find_by_provider(
                    provider, provider_user_id
                )
                if existing is None:
                    raise ConcurrentLoginError(
                        "This account is being created by another request. "
                        "Please retry."
                    )
                user = await self._use_external_login(
                    existing, provider_email, provider_display_name
                )
                return user, False

            logfire.info("External user created", user_id=user.id, provider=provider)
            return user, True

    async def _use_external_login(
        self,
        login: ExternalLogin,
        provider_email: Optional[str],
        provider_display_name: Optional[str],
    ) -> User:
        user = await self.get_user(login.user_id)
        await self.external_login_repository.touch(
            login.id,
            self.clock.now(),
            provider_email or login.provider_email,
            provider_display_name or login.provider_display_name,
        )
        user = await self.record_login(user)
        logfire.info("External login", user_id=user.id, provider=login.provider)
        return user

    async def list_external_logins(self, user_id: UserId) -> list[ExternalLogin]:
        """List a user's provider identities.

        Raises:
            NotFoundError: If user doesn't exist
        """
        user = await self.get_user(user_id)
        return await self.external_login_repository.find_all_by_user_id(user.id)

    async def change_password(
        self, user_id: UserId, current_password: str, new_password: str
    ) -> User:
        """Replace the password after checking the current one.

        Raises:
            NotFoundError: If user doesn't exist
            ValidationError: If no password is set or the new one is malformed
            InvalidCredentialsError: If the current password is wrong
        """
        with logfire.span("identity_service.change_password", user_id=user_id):
            user = await self.get_user(user_id)
            if not user.password_hash:
                raise ValidationError("No password is set for this account.")
            if not verify_password(current_password, user.password_hash):
                raise InvalidCredentialsError("Current password is incorrect.")
            _check_password(new_password)

            user = await self.user_repository.save(
                user.model_copy(
                    update={
                        "password_hash": self._hash(new_password),
                        "updated_at": self.clock.now(),
                    }
                )
            )
            logfire.info("Password changed", user_id=user.id)
            return user

    async def reset_password(
        self, raw_identifier: str, code: str, new_password: str
    ) -> User:
        """Set a new password after verifying an OTP sent to the account.

        Raises:
            ValidationError: If the identifier or password is malformed, or
                the account has no email to pair the password with
            InvalidCredentialsError: If no account matches the identifier
            OtpVerificationError: If the code is rejected
        """
        identifier = parse_identifier(raw_identifier)
        with logfire.span("identity_service.reset_password"):
            user = await self.find_by_identifier(identifier)
            if user is None:
                raise InvalidCredentialsError("Invalid reset code or account not found.")
            if not user.email:
                raise ValidationError(
                    "This account has no email address. Link an email first."
                )
            _check_password(new_password)

            await self.otp_service.verify(identifier.value, code)

            now = self.clock.now()
            update = {"password_hash": self._hash(new_password), "updated_at": now}
            if identifier.is_email:
                update["is_email_verified"] = True
            user = await self.user_repository.save(user.model_copy(update=update))
            logfire.info("Password reset", user_id=user.id)
            return user
