"""Custom exceptions for RootShare application"""


class RootShareError(Exception):
    """Base exception for RootShare application"""

    pass


class ServerError(RootShareError):
    """Server-related errors"""

    pass


class ConfigurationError(RootShareError):
    """Configuration-related errors"""

    pass


class OperationCancelled(RootShareError):
    """Raised inside worker threads once the caller has gone away"""

    pass
