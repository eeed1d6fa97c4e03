"""Shared-secret check for trusted server-to-server calls."""

import secrets

import logfire

from idp.config import PLACEHOLDER_SECRET, AuthSettings
from idp.domain.error import MisconfiguredError, UnauthorizedError


def check_shared_secret(auth_settings: AuthSettings, presented: str | None) -> None:
    """Compare a presented secret with the configured one in constant time.

    Raises:
        MisconfiguredError: If no real secret is configured
        UnauthorizedError: If the presented secret does not match
    """
    configured = auth_settings.api_secret_key
    if not configured or configured == PLACEHOLDER_SECRET:
        raise MisconfiguredError("Server-to-server authentication is not configured.")

    if not presented or not secrets.compare_digest(
        presented.encode("utf-8"), configured.encode("utf-8")
    ):
        logfire.warn("Shared secret rejected")
        raise UnauthorizedError("Invalid API secret key.")
