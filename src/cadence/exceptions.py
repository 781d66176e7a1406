class CadenceError(Exception):
    """Base exception for Cadence errors."""
    pass

class ConfigError(CadenceError):
    """Configuration loading specific errors."""
    pass

class DataSourceError(CadenceError):
    """Snapshot file reading specific errors."""
    pass

class InvalidInputError(CadenceError, ValueError):
    """Input violates a data-model invariant (bad date, negative window, oversized batch)."""
    pass
