from __future__ import annotations


class FinflowError(Exception):
    """Base class for pipeline errors."""


class ConfigurationError(FinflowError):
    """A required credential or setting is missing. Fatal, never retried."""


class SourceUnavailable(FinflowError):
    def __init__(self, detail: str, status_code: int | None = None) -> None:
        self.detail = detail
        self.status_code = status_code
        prefix = f"HTTP {status_code}: " if status_code is not None else ""
        super().__init__(f"{prefix}{detail}")


class QuotaExceeded(FinflowError):
    """The inference provider rejected the call for rate limiting."""


class SendFailure(FinflowError):
    def __init__(self, address: str, detail: str) -> None:
        self.address = address
        self.detail = detail
        super().__init__(f"Failed to send email to {address}: {detail}")
