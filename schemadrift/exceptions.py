"""Custom exceptions for SchemaDrift engine."""


class SchemaDriftError(Exception):
    """Base exception for SchemaDrift errors."""
    pass


class ValidationError(SchemaDriftError):
    """Raised when input validation fails."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class UnsupportedValueError(ValidationError, TypeError):
    """Raised when a value is not representable as JSON."""
    def __init__(self, value, path: str = ""):
        type_name = type(value).__name__
        location = path or "<root>"
        super().__init__(
            f"Value of type {type_name} at {location} is not a JSON value",
            {"type": type_name, "path": path}
        )
        self.value = value
        self.path = path


class DocumentLoadError(SchemaDriftError):
    """Raised when a JSON/YAML document cannot be read or parsed."""
    def __init__(self, path: str, reason: str):
        super().__init__(f"Failed to load document {path}: {reason}")
        self.path = path
        self.reason = reason


class MaxDepthExceededError(SchemaDriftError):
    """Raised when a document nests deeper than the configured limit."""
    def __init__(self, depth: int, path: str):
        super().__init__(f"Maximum depth ({depth}) exceeded at path: {path or '<root>'}")
        self.depth = depth
        self.path = path


class PayloadSizeError(SchemaDriftError):
    """Raised when payload size exceeds limit."""
    def __init__(self, size_mb: float, limit_mb: float):
        super().__init__(f"Payload size ({size_mb:.2f}MB) exceeds limit ({limit_mb}MB)")
        self.size_mb = size_mb
        self.limit_mb = limit_mb


class ConfigError(SchemaDriftError):
    """Raised when a configuration file or value is invalid."""
    def __init__(self, key: str, message: str):
        super().__init__(f"Invalid config '{key}': {message}")
        self.key = key
        self.message = message


class ReportFormatError(SchemaDriftError):
    """Raised when a serialized diff report cannot be loaded."""
    pass
