"""
Exception hierarchy for service bootstrap.

Every failure raised while building a resource bundle derives from
BootstrapError, so callers can decide in one place whether to abort,
retry or degrade.
"""


class BootstrapError(Exception):
    """
    Base exception for all bootstrap errors.

    Attributes:
        message: Human-readable error description
        cause: Original exception if wrapping
        context: Additional context dict for debugging
    """

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        context: dict | None = None,
    ):
        self.message = message
        self.cause = cause
        self.context = context or {}
        super().__init__(message)

    def __str__(self) -> str:
        parts = [self.message]
        if self.cause:
            parts.append(f"Caused by: {self.cause}")
        return " | ".join(parts)


class EnvironmentLoadError(BootstrapError):
    """
    Environment variables could not be loaded into the requested model.

    Raised for missing required variables, empty values on not_empty
    bindings, unreadable files, type conversion failures and a missing
    env file. All problems found in one load are collected in ``errors``.
    """

    def __init__(
        self,
        message: str,
        errors: list[str] | None = None,
        cause: Exception | None = None,
        context: dict | None = None,
    ):
        self.errors = list(errors or [])
        if self.errors:
            message = f"{message}: {'; '.join(self.errors)}"
        super().__init__(message, cause=cause, context=context)


class TimeLocationError(BootstrapError):
    """Time zone name is not a recognised zone identifier."""

    def __init__(
        self,
        name: str,
        cause: Exception | None = None,
    ):
        self.name = name
        super().__init__(
            f"Failed to load time location {name!r}",
            cause=cause,
            context={"time_location": name},
        )


__all__ = [
    "BootstrapError",
    "EnvironmentLoadError",
    "TimeLocationError",
]
