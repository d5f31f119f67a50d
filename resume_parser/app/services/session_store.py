"""
In-memory session state: processed-file ledger and the accumulated candidate records.
Lives for the process lifetime (one SessionState per app) and is reset only by clear().
"""
from __future__ import annotations

import threading
from collections import OrderedDict

from resume_parser.app.core.logging_config import get_logger
from resume_parser.app.schemas.candidate import CandidateRecord, SessionStats

logger = get_logger("services.session_store")


class ProcessedFileLedger:
    """filename -> content hash of the last successfully extracted bytes."""

    def __init__(self) -> None:
        self._entries: OrderedDict[str, str] = OrderedDict()
        self._lock = threading.Lock()

    def is_processed(self, filename: str, file_hash: str) -> bool:
        with self._lock:
            return self._entries.get(filename) == file_hash

    def mark_processed(self, filename: str, file_hash: str) -> None:
        with self._lock:
            self._entries[filename] = file_hash
            self._entries.move_to_end(filename)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def recent_filenames(self, limit: int) -> list[str]:
        """Most recently marked filenames, oldest first."""
        if limit <= 0:
            return []
        with self._lock:
            return list(self._entries.keys())[-limit:]


class RecordStore:
    """Append-only list of every CandidateRecord extracted this session."""

    def __init__(self) -> None:
        self._records: list[CandidateRecord] = []
        self._lock = threading.Lock()

    def append(self, record: CandidateRecord) -> None:
        with self._lock:
            self._records.append(record)

    def all(self) -> list[CandidateRecord]:
        with self._lock:
            return list(self._records)

    def clear(self) -> None:
        with self._lock:
            self._records.clear()

    def __len__(self) -> int:
        return len(self._records)


class SessionState:
    def __init__(self) -> None:
        self.ledger = ProcessedFileLedger()
        self.records = RecordStore()

    def stats(self, recent: int) -> SessionStats:
        return SessionStats(
            totalProcessedFiles=len(self.ledger),
            totalResumes=len(self.records),
            processedFiles=self.ledger.recent_filenames(recent),
        )

    def clear(self) -> None:
        self.ledger.clear()
        self.records.clear()
        logger.info("Session data cleared")
