class QuadGraphError(Exception):
    """Base class for all quadgraph exceptions."""
    pass


class TransportError(QuadGraphError):
    """Raised when the server cannot be reached."""
    pass


class ServerError(QuadGraphError):
    """Raised when the server rejects a request."""

    def __init__(self, message, status_code=None, code=None):
        super().__init__(message)
        self.status_code = status_code
        self.code = code


class ResponseParseError(QuadGraphError):
    """Raised for responses that cannot be decoded."""
    pass


class GeoError(QuadGraphError):
    """Raised when a geometry cannot be encoded or decoded."""
    pass


class ValueConversionError(QuadGraphError, ValueError):
    """Raised when a Python value cannot be turned into a typed value."""
    pass


class FacetError(QuadGraphError, ValueError):
    """Raised for malformed facet keys or values."""
    pass


class RequestError(QuadGraphError):
    """Raised when a request is reused or is otherwise unusable."""
    pass
