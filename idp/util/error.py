"""Utility layer errors."""


class UtilError(Exception):
    """Base utility error."""

    pass


class JWTError(UtilError):
    """Token could not be issued or decoded."""

    pass
