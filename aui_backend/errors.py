"""Error kinds surfaced by the AUI backend.

Every error derives from AuiError, whose ``str()`` is the descriptive
message handed back to the GUI. Nothing here is retried automatically.
"""


class AuiError(Exception):
    """Base class for all errors the command boundary reports."""


class ExecutionError(AuiError):
    """An external program could not be launched at all."""


class RegistrationRejected(AuiError):
    """An external program ran but reported failure.

    The message embeds the program's own diagnostic text verbatim.
    """

    def __init__(self, message: str, diagnostic: str = ""):
        super().__init__(message)
        self.diagnostic = diagnostic


class EncodingError(AuiError):
    """Program output or a response body is not valid text."""


class InvalidArgument(AuiError):
    """A caller-supplied value was rejected before anything was spawned."""


class FetchError(AuiError):
    """An HTTP request failed at the transport level or timed out."""
