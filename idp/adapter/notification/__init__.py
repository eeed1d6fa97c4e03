"""OTP delivery adapter."""

from .transport import MockOtpTransport, WebhookOtpTransport

__all__ = ["MockOtpTransport", "WebhookOtpTransport"]
