"""Exception hierarchy for the YANG to Swagger generator."""


class YangSwaggerError(Exception):
    """Base exception for generator related errors."""
    pass


class SchemaError(YangSwaggerError):
    """Raised when the schema tree handed to the generator is malformed."""
    pass


class LeafrefResolutionError(SchemaError):
    """Raised when a leafref chain cannot be resolved to a concrete type."""

    def __init__(self, message: str, path: str = "") -> None:
        super().__init__(message)
        self.path = path


class GeneratorError(YangSwaggerError):
    """Raised when generation preconditions are not met."""
    pass
