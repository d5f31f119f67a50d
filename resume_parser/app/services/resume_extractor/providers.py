"""
LLM provider adapters. Each adapter performs ONE request per extract() call and returns the raw,
untrusted field mapping; retries belong to RetryController and cleaning to field_cleaning.

- OpenRouterProvider: OpenAI-compatible chat completion, JSON pulled out of free text.
- GeminiProvider: generateContent with a declared response schema, content parsed directly.
"""
from __future__ import annotations

import json
import re
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from enum import Enum
from typing import Any, AsyncIterator

import httpx
import openai
from openai import AsyncOpenAI

from resume_parser.app.core.config import settings

from .errors import ApiError, NetworkError, ParseError, RateLimited, StructureError
from .retry import RetryPolicy

# Matches a JSON object with at most one level of nested braces. Deeper nesting is not supported.
JSON_OBJECT_PATTERN = re.compile(r"\{[^{}]*(?:\{[^{}]*\}[^{}]*)*\}")


class ProviderKind(str, Enum):
    CHAT_COMPLETION = "chat_completion"
    STRUCTURED_OUTPUT = "structured_output"


class ResumeProvider(ABC):
    """Provider adapter: resume text -> raw extracted fields."""

    kind: ProviderKind
    max_chars: int

    def __init__(self, retry_policy: RetryPolicy, http_client: httpx.AsyncClient | None = None):
        self.retry_policy = retry_policy
        self._http_client = http_client

    def truncate(self, resume_text: str) -> str:
        return resume_text[: self.max_chars]

    @abstractmethod
    async def extract(self, resume_text: str, api_key: str) -> dict[str, Any]:
        ...


OPENROUTER_PROMPT = """Extract key information from this resume and return as JSON:

{{
    "name": "Full name",
    "email": "Email address",
    "phone": "Phone number",
    "skills": ["skill1", "skill2"],
    "experience_years": "Years of experience",
    "education": "Highest degree",
    "location": "Location",
    "summary": "Brief summary"
}}

Resume: {resume_text}

JSON only:"""


def extract_json_object(content: str) -> dict[str, Any]:
    """Parse the first brace-balanced JSON object found in free-form model text."""
    match = JSON_OBJECT_PATTERN.search(content or "")
    if not match:
        raise ParseError("No valid JSON found in response")
    try:
        return json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise ParseError(f"JSON decode error: {e}") from e


class OpenRouterProvider(ResumeProvider):
    kind = ProviderKind.CHAT_COMPLETION

    def __init__(self, retry_policy: RetryPolicy | None = None, http_client: httpx.AsyncClient | None = None):
        super().__init__(
            retry_policy or RetryPolicy.from_settings(settings.openrouter_max_attempts),
            http_client,
        )
        self.max_chars = settings.openrouter_max_chars

    def _client(self, api_key: str) -> AsyncOpenAI:
        return AsyncOpenAI(
            api_key=api_key,
            base_url=settings.openrouter_url,
            timeout=settings.openrouter_timeout,
            max_retries=0,
            default_headers={
                "HTTP-Referer": settings.openrouter_referer,
                "X-Title": settings.openrouter_title,
            },
            http_client=self._http_client,
        )

    async def extract(self, resume_text: str, api_key: str) -> dict[str, Any]:
        prompt = OPENROUTER_PROMPT.format(resume_text=self.truncate(resume_text))
        client = self._client(api_key)
        try:
            completion = await client.chat.completions.create(
                model=settings.openrouter_model,
                messages=[{"role": "user", "content": prompt}],
                temperature=settings.llm_temperature,
                max_tokens=settings.openrouter_max_tokens,
                stream=False,
            )
        except openai.RateLimitError as e:
            raise RateLimited() from e
        except openai.APITimeoutError as e:
            raise NetworkError("Request timed out", kind=NetworkError.TIMEOUT) from e
        except openai.APIConnectionError as e:
            raise NetworkError(f"Connection error: {e}", kind=NetworkError.CONNECTION) from e
        except openai.APIStatusError as e:
            raise ApiError(f"API request failed with status {e.status_code}", e.status_code) from e
        except (openai.APIResponseValidationError, ValueError) as e:
            raise StructureError("Unexpected API response structure") from e
        finally:
            if self._http_client is None:
                await client.close()

        choices = getattr(completion, "choices", None)
        if not choices:
            raise StructureError("Unexpected API response structure")
        message = getattr(choices[0], "message", None)
        content = getattr(message, "content", None) or ""
        return extract_json_object(content)


GEMINI_RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "name": {"type": "STRING", "description": "Full name of the candidate"},
        "email": {"type": "STRING", "description": "Primary email address"},
        "phone": {"type": "STRING", "description": "Primary phone number"},
        "skills": {
            "type": "ARRAY",
            "items": {"type": "STRING"},
            "description": "List of technical and professional skills",
        },
        "experience_years": {"type": "STRING", "description": "Total years of professional experience"},
        "education": {"type": "STRING", "description": "Highest degree or relevant education"},
        "location": {"type": "STRING", "description": "Current location or address"},
        "summary": {"type": "STRING", "description": "Professional summary or objective"},
    },
    "required": ["name", "email", "phone", "skills"],
}

GEMINI_PROMPT = """Extract resume information and return as JSON:

Resume Text:
{resume_text}

JSON Schema:
{schema}

Respond with ONLY the JSON object:"""


class GeminiProvider(ResumeProvider):
    kind = ProviderKind.STRUCTURED_OUTPUT

    def __init__(self, retry_policy: RetryPolicy | None = None, http_client: httpx.AsyncClient | None = None):
        super().__init__(
            retry_policy or RetryPolicy.from_settings(settings.gemini_max_attempts),
            http_client,
        )
        self.max_chars = settings.gemini_max_chars

    @property
    def endpoint(self) -> str:
        return f"{settings.gemini_url}/{settings.gemini_model}:generateContent"

    def build_payload(self, resume_text: str) -> dict[str, Any]:
        prompt = GEMINI_PROMPT.format(
            resume_text=self.truncate(resume_text),
            schema=json.dumps(GEMINI_RESPONSE_SCHEMA, indent=2),
        )
        return {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": GEMINI_RESPONSE_SCHEMA,
                "temperature": settings.llm_temperature,
                "maxOutputTokens": settings.gemini_max_tokens,
            },
        }

    @asynccontextmanager
    async def _client(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._http_client is not None:
            yield self._http_client
            return
        async with httpx.AsyncClient(timeout=settings.gemini_timeout) as client:
            yield client

    async def extract(self, resume_text: str, api_key: str) -> dict[str, Any]:
        payload = self.build_payload(resume_text)
        try:
            async with self._client() as client:
                response = await client.post(
                    self.endpoint,
                    params={"key": api_key},
                    json=payload,
                    headers={"Content-Type": "application/json"},
                    timeout=settings.gemini_timeout,
                )
        except httpx.TimeoutException as e:
            raise NetworkError("Gemini request timed out", kind=NetworkError.TIMEOUT) from e
        except httpx.TransportError as e:
            raise NetworkError(f"Gemini connection error: {e}", kind=NetworkError.CONNECTION) from e

        if response.status_code == 429:
            raise RateLimited("Gemini API rate limited the request")
        if response.status_code != 200:
            raise ApiError(
                f"Gemini API request failed with status {response.status_code}",
                response.status_code,
            )

        try:
            text = response.json()["candidates"][0]["content"]["parts"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise StructureError("Gemini API response missing expected content structure") from e
        if not isinstance(text, str):
            raise StructureError("Gemini API response missing expected content structure")

        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise ParseError(f"Gemini JSON decode error: {e}") from e
