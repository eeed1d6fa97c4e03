"""Strongly typed identifiers for identity entities.

Identifiers are store-assigned integers; NewType keeps a user id from being
passed where an API key id is expected.
"""

from typing import NewType

UserId = NewType("UserId", int)
ExternalLoginId = NewType("ExternalLoginId", int)
OtpRequestId = NewType("OtpRequestId", int)
ApiKeyId = NewType("ApiKeyId", int)
