"""
Resume extraction module - PDF text + LLM provider extraction with retry/backoff.
"""
from .errors import (
    ApiError,
    ExtractionError,
    InputError,
    NetworkError,
    NoTextExtracted,
    ParseError,
    RateLimited,
    StructureError,
)
from .extractor import ResumeExtractor, provider_kind_for_key
from .pdf_utils import extract_text_from_pdf
from .providers import GeminiProvider, OpenRouterProvider, ProviderKind, ResumeProvider
from .retry import RetryController, RetryPolicy

__all__ = [
    "ApiError",
    "ExtractionError",
    "GeminiProvider",
    "InputError",
    "NetworkError",
    "NoTextExtracted",
    "OpenRouterProvider",
    "ParseError",
    "ProviderKind",
    "RateLimited",
    "ResumeExtractor",
    "ResumeProvider",
    "RetryController",
    "RetryPolicy",
    "StructureError",
    "extract_text_from_pdf",
    "provider_kind_for_key",
]
