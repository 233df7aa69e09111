class CacheTtlException(Exception):
    """Base class for all cache_ttl exceptions."""
    pass

class TtlTypeError(CacheTtlException, TypeError):
    """Raised when the requested ttl is not an integer."""
    def __init__(self, message="`ttl` must be an integer."):
        super().__init__(message)

class TtlValueError(CacheTtlException, ValueError):
    """Raised when the requested ttl is zero or negative."""
    def __init__(self, message="`ttl` must be greater than 0."):
        super().__init__(message)
        
class KeyNotFoundError(CacheTtlException):
    """For SET_EXTRA on a missing key"""
    def __init__(self, key: str):
        super().__init__(f"Key '{key}' does not exist")
        
class ParserError(CacheTtlException):
    """Raised when there is an error in command parsing."""
    pass
