"""
Exception classes for NebulAuth Python SDK
"""

from typing import Optional, Dict, Any


class NebulAuthError(Exception):
    """Base exception for all NebulAuth SDK errors"""

    def __init__(self, message: str, error_code: str = "UNKNOWN_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class ConfigError(NebulAuthError):
    """
    Exception raised when a required credential, secret, PoP field or option
    is missing or invalid.

    Always raised before any signing work or network call begins.
    """

    def __init__(self, message: str, error_code: str = "INVALID_CONFIG", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)


class CryptoError(NebulAuthError):
    """Exception raised when the keyed digest primitive rejects the secret material"""

    def __init__(self, message: str, error_code: str = "CRYPTO_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)


class ValidationError(NebulAuthError):
    """Exception raised for validation failures"""
    pass


class ServerCommunicationError(NebulAuthError):
    """Exception raised for server communication errors"""

    def __init__(self, message: str, error_code: str = "SERVER_ERROR",
                 http_status: int = 0, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)
        self.http_status = http_status
