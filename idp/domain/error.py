"""Domain layer errors.

Each error carries an ``ErrorKind``. Use cases catch ``DomainError`` and
report it as a failed result instead of letting it escape.
"""

from idp.domain.value.types import ErrorKind

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password."


class DomainError(Exception):
    """Base domain error."""

    kind: ErrorKind = ErrorKind.INVALID_INPUT

    def __init__(self, message: str, kind: ErrorKind | None = None):
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind


class ValidationError(DomainError):
    """Malformed input (identifier, scope, password length)."""

    kind = ErrorKind.INVALID_INPUT


class DuplicateCredentialError(DomainError):
    """Email, phone or external identity already claimed."""

    kind = ErrorKind.DUPLICATE_CREDENTIAL


class InvalidCredentialsError(DomainError):
    """Login failed.

    The message never says whether the account exists.
    """

    kind = ErrorKind.INVALID_CREDENTIALS

    def __init__(self, message: str = INVALID_CREDENTIALS_MESSAGE):
        super().__init__(message)


class RateLimitedError(DomainError):
    """Too many OTP sends for one identifier."""

    kind = ErrorKind.RATE_LIMITED

    def __init__(self, message: str = "Too many OTP requests. Please try again later."):
        super().__init__(message)


class OtpVerificationError(DomainError):
    """OTP rejected; ``kind`` is one of the CODE_* kinds or TOO_MANY_ATTEMPTS."""

    pass


class LastCredentialError(DomainError):
    """Removing the credential would leave the account with no way in."""

    kind = ErrorKind.LAST_CREDENTIAL

    def __init__(
        self,
        message: str = (
            "Cannot unlink the only login method. "
            "Please link another login method first."
        ),
    ):
        super().__init__(message)


class UnauthorizedError(DomainError):
    """Missing or wrong token, key or shared secret."""

    kind = ErrorKind.UNAUTHORIZED


class ForbiddenError(DomainError):
    """Caller is known but not allowed."""

    kind = ErrorKind.FORBIDDEN


class MisconfiguredError(DomainError):
    """Deployment mistake such as an unset or placeholder secret."""

    kind = ErrorKind.MISCONFIGURED


class DeliveryFailedError(DomainError):
    """OTP was stored but could not be handed to the transport."""

    kind = ErrorKind.DELIVERY_FAILED


class ConcurrentLoginError(Exception):
    """A concurrent request claimed the same new identity and it is not readable.

    Not a DomainError: use cases let it escape and the HTTP layer answers 409
    so the caller retries.
    """

    pass


class NotFoundError(DomainError):
    """Raised when a requested resource is not found."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found: {identifier}")
