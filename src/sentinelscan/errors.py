"""Exception types shared across SentinelScan."""


class SentinelScanError(Exception):
    """Base class for SentinelScan errors."""


class TransportError(SentinelScanError):
    """DNS, connection, or timeout failure while talking to the target."""

    def __init__(self, message: str, url: str = "", elapsed_ms: float = 0.0):
        super().__init__(message)
        self.url = url
        self.elapsed_ms = elapsed_ms


class ParseError(SentinelScanError):
    """Malformed document or missing certificate."""


class CollaboratorFailure(SentinelScanError):
    """An external collaborator (LLM provider) failed or returned junk."""


class InvalidTargetError(SentinelScanError, ValueError):
    """The target is not an absolute http(s) URL."""


class UnknownCheckError(SentinelScanError, ValueError):
    """A requested check id is not in the catalog."""


class ReportError(SentinelScanError):
    """The report could not be written."""
