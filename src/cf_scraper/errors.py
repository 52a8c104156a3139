"""Errors raised inside the portal client.

None of these leave the public client operations; they are turned into
``Failure`` results at that boundary.
"""


class PortalError(Exception):
    """Base class for portal client failures."""


class TransportError(PortalError):
    """The HTTP exchange itself failed (connection, DNS, timeout, bad status)."""


class TokenNotFound(PortalError):
    """The homepage loaded but carried no usable stoken."""

    def __init__(self, field_id: str):
        self.field_id = field_id
        super().__init__(f"Token not found (#{field_id} missing or empty).")


class UpstreamDataError(PortalError):
    """A response arrived but lacked the expected fields."""
