"""
Batch resume processing: ledger partition, then a per-file LangGraph flow
(extract_text -> ai_extract) run sequentially in upload order.
"""
from __future__ import annotations

from typing import Callable, Literal, NamedTuple, Sequence

from langgraph.graph import END, START, StateGraph
from typing_extensions import TypedDict

from resume_parser.app.core.logging_config import get_logger
from resume_parser.app.schemas.candidate import BatchResult, CandidateRecord, FailedFile
from resume_parser.app.services.resume_extractor import (
    NoTextExtracted,
    ResumeExtractor,
    extract_text_from_pdf,
)
from resume_parser.app.services.session_store import SessionState
from resume_parser.app.utils.fingerprint import compute_file_fingerprint

logger = get_logger("services.batch_processor")


class UploadedFile(NamedTuple):
    filename: str
    data: bytes


class _PendingFile(NamedTuple):
    filename: str
    data: bytes
    file_hash: str


class FileExtractionState(TypedDict):
    """State for the per-file extraction flow."""
    filename: str
    data: bytes
    api_key: str
    resume_text: str
    record: CandidateRecord | None
    error: str | None


def _error_message(exc: Exception) -> str:
    return str(exc) or exc.__class__.__name__


class BatchProcessor:
    def __init__(
        self,
        session: SessionState,
        extractor: ResumeExtractor | None = None,
        text_extractor: Callable[[bytes], str] = extract_text_from_pdf,
    ):
        self.session = session
        self.extractor = extractor or ResumeExtractor()
        self._extract_text = text_extractor
        self._graph = self._build_graph()

    def _extract_text_node(self, state: FileExtractionState) -> dict:
        """Node: extract raw text from PDF bytes."""
        try:
            text = self._extract_text(state["data"]) or ""
        except Exception as e:
            return {"resume_text": "", "error": _error_message(e)}
        if not text.strip():
            return {"resume_text": "", "error": str(NoTextExtracted())}
        return {"resume_text": text, "error": None}

    async def _ai_extract_node(self, state: FileExtractionState) -> dict:
        """Node: provider extraction + cleaning."""
        try:
            record = await self.extractor.extract_from_text(state["resume_text"], state["api_key"])
        except Exception as e:
            return {"record": None, "error": _error_message(e)}
        return {"record": record.model_copy(update={"filename": state["filename"]}), "error": None}

    @staticmethod
    def _route_after_text(state: FileExtractionState) -> Literal["ai_extract", "__end__"]:
        """Route: if we have text, go to the provider; else end."""
        if state.get("error") is None and state.get("resume_text", "").strip():
            return "ai_extract"
        return "__end__"

    def _build_graph(self):
        builder = StateGraph(FileExtractionState)

        builder.add_node("extract_text", self._extract_text_node)
        builder.add_node("ai_extract", self._ai_extract_node)

        builder.add_edge(START, "extract_text")
        builder.add_conditional_edges(
            "extract_text",
            self._route_after_text,
            path_map={"ai_extract": "ai_extract", "__end__": END},
        )
        builder.add_edge("ai_extract", END)

        return builder.compile()

    def partition(self, files: Sequence[UploadedFile]) -> tuple[list[_PendingFile], list[str]]:
        """Split uploads into (new files to extract, filenames already processed)."""
        new_files: list[_PendingFile] = []
        already_processed: list[str] = []
        for upload in files:
            file_hash = compute_file_fingerprint(upload.data)
            if self.session.ledger.is_processed(upload.filename, file_hash):
                already_processed.append(upload.filename)
            else:
                new_files.append(_PendingFile(upload.filename, upload.data, file_hash))
        return new_files, already_processed

    async def process_batch(self, files: Sequence[UploadedFile], api_key: str) -> BatchResult:
        """
        Extract every new file in upload order, one at a time.
        Failures are recorded per file and never abort the batch; the ledger is only
        marked for files that produced a record.
        """
        new_files, already_processed = self.partition(files)
        result = BatchResult(alreadyProcessed=already_processed)

        for pending in new_files:
            final_state = await self._graph.ainvoke({
                "filename": pending.filename,
                "data": pending.data,
                "api_key": api_key,
                "resume_text": "",
                "record": None,
                "error": None,
            })
            record = final_state.get("record")
            error = final_state.get("error")

            if record is not None and not error:
                result.successful.append(record)
                self.session.records.append(record)
                self.session.ledger.mark_processed(pending.filename, pending.file_hash)
            else:
                message = error or "AI parsing failed"
                logger.warning("Failed to process %s: %s", pending.filename, message)
                result.failed.append(FailedFile(filename=pending.filename, error=message))

        logger.info(
            "Batch done: %d successful, %d failed, %d already processed",
            len(result.successful), len(result.failed), len(result.alreadyProcessed),
        )
        return result
