"""
Dependency injection utilities
"""
from functools import lru_cache

from fastapi import Depends

from resume_parser.app.services.batch_processor import BatchProcessor
from resume_parser.app.services.session_store import SessionState


@lru_cache
def get_session() -> SessionState:
    """Process-wide session state (ledger + record store)."""
    return SessionState()


def get_batch_processor(session: SessionState = Depends(get_session)) -> BatchProcessor:
    return BatchProcessor(session)
