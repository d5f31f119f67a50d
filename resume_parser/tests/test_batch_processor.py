"""Tests for batch processing: ledger dedup, per-file failures, session accumulation."""
import pytest

from resume_parser.app.services.batch_processor import BatchProcessor, UploadedFile
from resume_parser.app.services.resume_extractor import ProviderKind, RateLimited
from resume_parser.tests.conftest import (
    GEMINI_KEY,
    OPENROUTER_KEY,
    FakeProvider,
    candidate_from_text,
    decode_text,
)


@pytest.mark.asyncio
async def test_successful_batch_marks_ledger_and_session(processor, session, chat_provider):
    result = await processor.process_batch(
        [UploadedFile("jane.pdf", b"jane resume"), UploadedFile("bob.pdf", b"bob resume")],
        OPENROUTER_KEY,
    )
    assert [r.filename for r in result.successful] == ["jane.pdf", "bob.pdf"]
    assert result.successful[0].name == "Jane Doe"
    assert result.failed == []
    assert result.alreadyProcessed == []
    assert len(session.records) == 2
    assert len(session.ledger) == 2
    assert len(chat_provider.calls) == 2


@pytest.mark.asyncio
async def test_same_bytes_second_time_skips_provider(processor, chat_provider):
    files = [UploadedFile("jane.pdf", b"jane resume")]
    await processor.process_batch(files, OPENROUTER_KEY)
    second = await processor.process_batch(files, OPENROUTER_KEY)

    assert second.alreadyProcessed == ["jane.pdf"]
    assert second.successful == []
    assert len(chat_provider.calls) == 1


@pytest.mark.asyncio
async def test_same_filename_different_bytes_is_new(processor, session, chat_provider):
    await processor.process_batch([UploadedFile("jane.pdf", b"jane resume")], OPENROUTER_KEY)
    second = await processor.process_batch([UploadedFile("jane.pdf", b"jane updated resume")], OPENROUTER_KEY)

    assert second.alreadyProcessed == []
    assert len(second.successful) == 1
    assert len(chat_provider.calls) == 2
    assert len(session.ledger) == 1
    assert len(session.records) == 2


@pytest.mark.asyncio
async def test_partial_failure_batch(session, make_extractor, recording_sleep):
    def respond(text):
        if text.startswith("carol"):
            raise RateLimited()
        return candidate_from_text(text)

    chat = FakeProvider(ProviderKind.CHAT_COMPLETION, respond, max_attempts=5)
    processor = BatchProcessor(session, extractor=make_extractor(chat=chat), text_extractor=decode_text)

    result = await processor.process_batch(
        [
            UploadedFile("a.pdf", b"   "),
            UploadedFile("b.pdf", b"bob resume"),
            UploadedFile("c.pdf", b"carol resume"),
        ],
        OPENROUTER_KEY,
    )

    assert [r.filename for r in result.successful] == ["b.pdf"]
    assert [(f.filename, f.error) for f in result.failed] == [
        ("a.pdf", "No text extracted from PDF"),
        ("c.pdf", "Rate limited by provider"),
    ]
    assert result.alreadyProcessed == []
    # a.pdf never reached the provider, c.pdf used every attempt
    assert [t for t, _ in chat.calls].count("carol resume") == 5
    assert len(chat.calls) == 6
    assert session.ledger.recent_filenames(10) == ["b.pdf"]


@pytest.mark.asyncio
async def test_failed_file_is_retried_on_reupload(session, make_extractor):
    outcomes = [RateLimited(), {"name": "Jane"}]

    def respond(text):
        outcome = outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    chat = FakeProvider(ProviderKind.CHAT_COMPLETION, respond, max_attempts=1)
    processor = BatchProcessor(session, extractor=make_extractor(chat=chat), text_extractor=decode_text)
    files = [UploadedFile("jane.pdf", b"jane resume")]

    first = await processor.process_batch(files, OPENROUTER_KEY)
    second = await processor.process_batch(files, OPENROUTER_KEY)

    assert len(first.failed) == 1
    assert second.alreadyProcessed == []
    assert [r.name for r in second.successful] == ["Jane"]


@pytest.mark.asyncio
async def test_text_extraction_error_is_per_file(processor, chat_provider):
    result = await processor.process_batch(
        [UploadedFile("broken.pdf", b"corrupt bytes"), UploadedFile("jane.pdf", b"jane resume")],
        OPENROUTER_KEY,
    )
    assert [(f.filename, f.error) for f in result.failed] == [("broken.pdf", "Invalid PDF structure")]
    assert [r.filename for r in result.successful] == ["jane.pdf"]
    assert len(chat_provider.calls) == 1


@pytest.mark.asyncio
async def test_missing_api_key_fails_each_file(processor, session, chat_provider):
    result = await processor.process_batch([UploadedFile("jane.pdf", b"jane resume")], "")
    assert [f.error for f in result.failed] == ["API key is missing"]
    assert chat_provider.calls == []
    assert len(session.ledger) == 0


@pytest.mark.asyncio
async def test_gemini_key_uses_structured_provider(session, make_extractor):
    gemini = FakeProvider(ProviderKind.STRUCTURED_OUTPUT, candidate_from_text, max_attempts=1)
    processor = BatchProcessor(session, extractor=make_extractor(structured=gemini), text_extractor=decode_text)
    result = await processor.process_batch([UploadedFile("jane.pdf", b"jane resume")], GEMINI_KEY)
    assert len(result.successful) == 1
    assert len(gemini.calls) == 1


@pytest.mark.asyncio
async def test_duplicate_in_same_batch_processed_in_order(processor, chat_provider):
    files = [UploadedFile("jane.pdf", b"jane resume"), UploadedFile("jane.pdf", b"jane resume")]
    result = await processor.process_batch(files, OPENROUTER_KEY)
    # partition happens before extraction, so both copies are queued
    assert len(result.successful) == 2
    assert len(chat_provider.calls) == 2
