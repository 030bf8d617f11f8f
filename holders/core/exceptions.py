"""
Exception types for the holder history system.
"""


class HolderHistoryError(Exception):
    """Base exception for holder history errors"""
    pass


class SnapshotValidationError(HolderHistoryError):
    """Raised when a raw snapshot record cannot be normalized"""
    pass


class UnknownTokenError(HolderHistoryError):
    """Raised when a token identifier is not in the registry"""
    pass


class FilterError(HolderHistoryError):
    """Raised when account filter bounds are invalid"""
    pass


class ConfigurationError(HolderHistoryError):
    """Raised when required configuration (issuer, API key) is missing"""
    pass


class LedgerRequestError(HolderHistoryError):
    """Raised when the ledger node answers a request with an error"""

    def __init__(self, message: str, error_code: str = None):
        super().__init__(message)
        self.error_code = error_code


class LedgerNotFoundError(LedgerRequestError):
    """Raised when the requested ledger is not available on the node"""
    pass
