"""Infrastructure layer errors."""


class AdapterError(Exception):
    """Base infrastructure error."""

    pass


class DeliveryError(AdapterError):
    """Notification relay rejected or never received a message."""

    pass
