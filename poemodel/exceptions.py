# poemodel/exceptions.py


class ProcurementError(Exception):
    """Base error for the stash model layer."""


class TransportError(ProcurementError):
    """A remote call failed at the network or HTTP level."""


class AuthenticationError(TransportError):
    """The remote service rejected the login."""


class OfflineCacheMiss(TransportError):
    """An offline session asked for a document that was never cached."""


class NotAuthenticated(ProcurementError):
    """A fetch was attempted before authenticate() succeeded."""


class MalformedResponse(ProcurementError):
    """
    A remote document could not be turned into a model object.

    This is not recoverable locally: the raw bytes have already been written
    to the diagnostic log and the user is expected to report them.
    """

    def __init__(self, reason: str, raw: bytes, message: str | None = None):
        self.reason = reason
        self.raw = raw
        super().__init__(message or reason)
