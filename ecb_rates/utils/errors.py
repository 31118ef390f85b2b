"""Custom exception hierarchy for ecb-rates.

All application exceptions inherit from :class:`EcbRatesError`, which
carries an optional ``provider_name`` so error handlers can identify which
remote service produced the failure.

    EcbRatesError  (base -- catch-all for any ecb-rates error)
    +-- RemoteError         (non-success HTTP status from the data service)
    +-- TransportError      (timeout, response too large, connection failure)
    +-- ParseError          (response body is not well-formed XML)
    +-- ConfigurationError  (invalid settings or cache bounds)

Malformed numbers or missing attributes inside an otherwise valid document
are *not* errors: they degrade to ``NaN`` or an omitted field.
"""

from __future__ import annotations


class EcbRatesError(Exception):
    """Base exception for all ecb-rates errors.

    The ``__str__`` method prefixes the provider name in brackets for
    structured log output, e.g. ``[ecb] Request timed out``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Remote service errors
# ---------------------------------------------------------------------------

class RemoteError(EcbRatesError):
    """Raised when the data service answers with a non-success status.

    The payload is the raw response body.  ``str(exc)`` returns the body
    unchanged so callers see exactly what the service sent back.
    """

    def __init__(self, body: str, status_code: int | None = None) -> None:
        self._body = body
        self._status_code = status_code
        super().__init__(message=body)

    @property
    def body(self) -> str:
        return self._body

    @property
    def status_code(self) -> int | None:
        return self._status_code

    def __str__(self) -> str:
        return self._body


class TransportError(EcbRatesError):
    """Raised on timeout, response-size overflow, or connection failure."""

    def __init__(
        self,
        message: str = "Transport failure while fetching exchange rates",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ParseError(EcbRatesError):
    """Raised when a non-empty response body cannot be parsed as XML."""

    def __init__(
        self,
        message: str = "Response body is not well-formed XML",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Configuration errors
# ---------------------------------------------------------------------------

class ConfigurationError(EcbRatesError):
    """Raised when configuration is invalid or missing."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
