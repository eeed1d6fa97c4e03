"""Base service class for domain services."""


class Service:
    """Base class for all domain services.

    Domain services hold the rules that span several aggregates, such as
    counting a user's remaining login methods before removing one.
    """

    pass
