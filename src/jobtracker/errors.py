from __future__ import annotations


class JobTrackerError(Exception):
    """Base class for errors raised by the job tracker services."""


class AuthenticationError(JobTrackerError):
    pass


class AuthorizationError(JobTrackerError, PermissionError):
    pass


class ValidationError(JobTrackerError, ValueError):
    pass


class RecordNotFoundError(JobTrackerError, LookupError):
    pass


class AIRequestError(JobTrackerError, RuntimeError):
    def __init__(self, operation: str, cause: Exception | str):
        super().__init__(f"AI request failed ({operation}): {cause}")
        self.operation = operation
        self.cause = cause


class UnrecognizedResponseShape(JobTrackerError, ValueError):
    def __init__(self, kind: str, keys: list[str]):
        super().__init__(f"unrecognized {kind} response shape (keys: {', '.join(keys) or 'none'})")
        self.kind = kind
        self.keys = keys
