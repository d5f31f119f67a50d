"""Extraction error taxonomy. Every message ends up verbatim in a batch's failed list."""


class ExtractionError(Exception):
    """Base class for per-file extraction failures."""


class InputError(ExtractionError):
    """Missing API key or resume text. Never retried."""


class ApiError(ExtractionError):
    """Provider answered with a non-success HTTP status."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class RateLimited(ApiError):
    """HTTP 429 from the provider."""

    def __init__(self, message: str = "Rate limited by provider"):
        super().__init__(message, status_code=429)


class ParseError(ExtractionError):
    """Model output held no parseable JSON object."""


class StructureError(ExtractionError):
    """Provider response lacked the expected envelope."""


class NetworkError(ExtractionError):
    """Timeout or dropped connection."""

    TIMEOUT = "timeout"
    CONNECTION = "connection"

    def __init__(self, message: str, kind: str = CONNECTION):
        super().__init__(message)
        self.kind = kind


class NoTextExtracted(ExtractionError):
    """The PDF yielded no text."""

    def __init__(self, message: str = "No text extracted from PDF"):
        super().__init__(message)
