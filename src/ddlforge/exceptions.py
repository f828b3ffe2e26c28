"""
Exceptions raised while projecting schemas and generating migrations
"""


class DDLForgeError(Exception):
    """Base exception for all ddlforge errors"""


class MigrationError(DDLForgeError):
    """Raised when a migration run fails

    Wraps connection errors, statement ordering violations and driver
    failures. The original exception is kept on ``cause``.
    """

    def __init__(self, message: str, cause: BaseException | None = None):
        self.message = message
        self.cause = cause
        super().__init__(message)

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message} (caused by: {self.cause})"
        return self.message


class UnknownDriverError(MigrationError):
    """Raised when no provider is registered for a driver name"""

    def __init__(self, driver: str, available: list[str]):
        self.driver = driver
        self.available = available
        super().__init__(
            f"Unknown driver '{driver}' (available: {', '.join(sorted(available)) or 'none'})"
        )


class SchemaDefinitionError(DDLForgeError):
    """Raised for mistakes in the declarative schema (bad types, missing fields)"""


class CircularDependencyError(DDLForgeError):
    """Raised when schema changes depend on each other in a cycle"""

    def __init__(self, cycles: list[list[str]]):
        self.cycles = cycles
        message = "Circular dependencies detected:\n" + "\n".join(
            f"  • {' → '.join(cycle)}" for cycle in cycles
        )
        super().__init__(message)
