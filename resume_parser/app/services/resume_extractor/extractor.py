"""
Resume extraction orchestrator: validates inputs, picks a provider from the API key,
runs it through the retry controller and cleans the raw fields.
"""
from __future__ import annotations

import asyncio
import random
from typing import Mapping

from resume_parser.app.core.config import settings
from resume_parser.app.core.logging_config import get_logger
from resume_parser.app.schemas.candidate import CandidateRecord
from resume_parser.app.services.field_cleaning import clean_candidate_fields

from .errors import InputError
from .providers import GeminiProvider, OpenRouterProvider, ProviderKind, ResumeProvider
from .retry import RetryController, Sleep, Uniform

logger = get_logger("services.resume_extractor")


def provider_kind_for_key(api_key: str) -> ProviderKind:
    """OpenRouter keys carry a fixed prefix; every other key is treated as a Gemini key."""
    if api_key.startswith(settings.openrouter_key_prefix):
        return ProviderKind.CHAT_COMPLETION
    return ProviderKind.STRUCTURED_OUTPUT


def default_providers() -> dict[ProviderKind, ResumeProvider]:
    return {
        ProviderKind.CHAT_COMPLETION: OpenRouterProvider(),
        ProviderKind.STRUCTURED_OUTPUT: GeminiProvider(),
    }


class ResumeExtractor:
    def __init__(
        self,
        providers: Mapping[ProviderKind, ResumeProvider] | None = None,
        sleep: Sleep = asyncio.sleep,
        uniform: Uniform = random.uniform,
    ):
        self.providers = dict(providers) if providers is not None else default_providers()
        self._sleep = sleep
        self._uniform = uniform

    def select_provider(self, api_key: str) -> ResumeProvider:
        return self.providers[provider_kind_for_key(api_key)]

    async def extract_from_text(self, resume_text: str, api_key: str) -> CandidateRecord:
        """
        Extract a cleaned CandidateRecord from resume text.
        Raises InputError before any network call when text or key is missing;
        provider errors propagate unchanged.
        """
        if not resume_text or not resume_text.strip():
            raise InputError("No resume text provided for AI parsing")
        if not api_key or not api_key.strip():
            raise InputError("API key is missing")

        provider = self.select_provider(api_key)
        controller = RetryController(provider.retry_policy, sleep=self._sleep, uniform=self._uniform)
        logger.debug("Extracting with %s provider (%d chars)", provider.kind.value, len(resume_text))
        raw = await controller.run(
            lambda: provider.extract(resume_text, api_key),
            label=provider.kind.value,
        )
        return clean_candidate_fields(raw)
