"""Error taxonomy shared by the engine and its adapters."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .outcomes import BatchResult


class RecordValidationError(ValueError):
    """Raised at the ingestion boundary for records the engine must never see."""


class CatalogError(RuntimeError):
    """Base class for failures talking to the remote catalog."""


class CatalogTransportError(CatalogError):
    """The request never produced an HTTP response (DNS, connect, timeout)."""


class CatalogHTTPError(CatalogError):
    """The catalog answered with a non-success status."""

    def __init__(self, message: str, *, status_code: int, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class CatalogThrottledError(CatalogHTTPError):
    """The catalog refused the request for now (HTTP 429 or 503).

    ``retry_after`` carries the server's requested delay in seconds, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        body: str = "",
        retry_after: float | None = None,
    ) -> None:
        super().__init__(message, status_code=status_code, body=body)
        self.retry_after = retry_after


class CatalogResponseError(CatalogError):
    """The catalog answered successfully but the payload is unusable."""


class MappingStoreError(RuntimeError):
    """Raised when the identity mapping store cannot be read or written."""


class BatchAbortedError(RuntimeError):
    """Raised when the mapping store fails systemically during a batch."""

    def __init__(self, message: str, *, result: BatchResult) -> None:
        super().__init__(message)
        self.result = result
